"""Account role resolution for both message encodings.

Compiled (`json`) messages order their static keys as four contiguous ranges:

    [writable signed][readonly signed][writable unsigned][readonly unsigned]

and only publish the range sizes indirectly through the message header. The
signer/writable flags are recomputed from those counts, with every subtraction
clamped at zero so a header whose counts exceed the key list cannot produce
negative ranges. Parsed (`jsonParsed`) messages carry the flags per key.
"""

import logging
from dataclasses import dataclass

from solinspect.decoder.utils.encoding import is_valid_pubkey
from solinspect.domain.models.transaction import AccountMeta

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MessageHeader:
    num_required_signatures: int = 0
    num_readonly_signed: int = 0
    num_readonly_unsigned: int = 0

    @classmethod
    def from_rpc(cls, header: dict | None) -> "MessageHeader":
        header = header or {}
        return cls(
            num_required_signatures=int(header.get("numRequiredSignatures", 0) or 0),
            num_readonly_signed=int(header.get("numReadonlySignedAccounts", 0) or 0),
            num_readonly_unsigned=int(header.get("numReadonlyUnsignedAccounts", 0) or 0),
        )

    def writable_signed_count(self) -> int:
        return max(0, self.num_required_signatures - self.num_readonly_signed)

    def writable_unsigned_count(self, total_accounts: int) -> int:
        return max(0, max(0, total_accounts - self.num_required_signatures) - self.num_readonly_unsigned)

    def is_signer(self, index: int) -> bool:
        return index < self.num_required_signatures

    def is_writable(self, index: int, total_accounts: int) -> bool:
        if index < self.writable_signed_count():
            return True
        start = self.num_required_signatures
        return start <= index < start + self.writable_unsigned_count(total_accounts)


def partition_ranges(header: MessageHeader, total_accounts: int) -> tuple[range, range, range, range]:
    """Return (writable_signed, readonly_signed, writable_unsigned, readonly_unsigned) index ranges.

    Ranges are clipped to the key list, so for a malformed header they may be
    shorter than the counts claim.
    """
    signers_end = min(header.num_required_signatures, total_accounts)
    writable_signed_end = min(header.writable_signed_count(), signers_end)
    writable_unsigned_end = min(signers_end + header.writable_unsigned_count(total_accounts), total_accounts)
    return (
        range(0, writable_signed_end),
        range(writable_signed_end, signers_end),
        range(signers_end, writable_unsigned_end),
        range(writable_unsigned_end, total_accounts),
    )


def _balance_at(balances: list[int] | None, index: int) -> int | None:
    if balances is None or index >= len(balances):
        return None
    return balances[index]


def resolve_compiled_accounts(
    account_keys: list[str],
    header: MessageHeader,
    pre_balances: list[int] | None = None,
    post_balances: list[int] | None = None,
    loaded_writable: list[str] | None = None,
    loaded_readonly: list[str] | None = None,
) -> list[AccountMeta]:
    """Resolve static keys from the header, then any v0 lookup-table addresses.

    Lookup-table addresses follow the static keys (writable first) and are never
    signers. Keys that are not valid 32-byte base58 are skipped; balances are
    still bound by the key's original position.
    """
    total = len(account_keys)
    accounts: list[AccountMeta] = []

    for idx, key in enumerate(account_keys):
        if not is_valid_pubkey(key):
            logger.debug("Skipping malformed account key at index %d: %r", idx, key)
            continue
        accounts.append(AccountMeta(
            pubkey=key,
            is_signer=header.is_signer(idx),
            is_writable=header.is_writable(idx, total),
            pre_balance=_balance_at(pre_balances, idx),
            post_balance=_balance_at(post_balances, idx),
        ))

    offset = total
    loaded = [(key, True) for key in loaded_writable or []] + [(key, False) for key in loaded_readonly or []]
    for i, (key, writable) in enumerate(loaded):
        idx = offset + i
        if not is_valid_pubkey(key):
            continue
        accounts.append(AccountMeta(
            pubkey=key,
            is_signer=False,
            is_writable=writable,
            pre_balance=_balance_at(pre_balances, idx),
            post_balance=_balance_at(post_balances, idx),
        ))

    return accounts


def resolve_parsed_accounts(
    account_keys: list[dict],
    pre_balances: list[int] | None = None,
    post_balances: list[int] | None = None,
) -> list[AccountMeta]:
    """Read signer/writable flags straight from jsonParsed accountKeys entries."""
    accounts: list[AccountMeta] = []
    for idx, entry in enumerate(account_keys):
        pubkey = entry.get("pubkey", "") if isinstance(entry, dict) else str(entry)
        if not is_valid_pubkey(pubkey):
            logger.debug("Skipping malformed account key at index %d: %r", idx, pubkey)
            continue
        flags = entry if isinstance(entry, dict) else {}
        accounts.append(AccountMeta(
            pubkey=pubkey,
            is_signer=bool(flags.get("signer", False)),
            is_writable=bool(flags.get("writable", False)),
            pre_balance=_balance_at(pre_balances, idx),
            post_balance=_balance_at(post_balances, idx),
        ))
    return accounts
