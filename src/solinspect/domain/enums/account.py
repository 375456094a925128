from enum import Enum


class AccountKind(str, Enum):
    """Coarse classification of an on-chain account, derived from owner + data size."""

    WALLET = "WALLET"
    PROGRAM = "PROGRAM"
    TOKEN_ACCOUNT = "TOKEN_ACCOUNT"
    TOKEN_MINT = "TOKEN_MINT"
    PROGRAM_OWNED = "PROGRAM_OWNED"
    UNKNOWN = "UNKNOWN"
