from solinspect.domain.enums.account import AccountKind
from solinspect.domain.enums.network import Network
from solinspect.domain.enums.status import TxOutcome

__all__ = [
    "AccountKind",
    "Network",
    "TxOutcome",
]
