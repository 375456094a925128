import logging

from solinspect.config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_handler = logging.StreamHandler()
_handler.setFormatter(logging.Formatter(LOG_FORMAT))


def configure_logging(settings: Settings) -> logging.Handler:
    """Attach the package's stream handler to the root logger at the configured level."""
    root = logging.getLogger()
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    root.setLevel(level)
    if _handler not in root.handlers:
        root.addHandler(_handler)
    return _handler
