from enum import Enum


class TxOutcome(str, Enum):
    """Execution outcome of a confirmed transaction."""

    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
