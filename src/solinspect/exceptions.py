"""Exception hierarchy for transaction and account decoding."""


class SolInspectError(Exception):
    """Base class for all solinspect errors."""


class DecodeError(SolInspectError):
    """A record is structurally unusable; assembly aborts for that record."""


class MissingMetadataError(DecodeError):
    """Transaction record carries no execution metadata (`meta` is absent or null)."""


class InvalidProgramIndexError(DecodeError):
    """A compiled instruction's programIdIndex is not an integer or points outside the account key list."""

    def __init__(self, index: int | None, account_count: int) -> None:
        self.index = index
        self.account_count = account_count
        super().__init__(f"Invalid program_id_index {index!r} (transaction has {account_count} account keys)")


class InvalidAccountDataError(DecodeError):
    """Account lookup record has no `value` to decode."""
