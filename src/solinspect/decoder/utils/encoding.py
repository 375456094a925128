"""Base58 helpers shared by the decoders."""

from decimal import Decimal

import base58

PUBKEY_LENGTH = 32
LAMPORTS_PER_SOL = 1_000_000_000

# All-zero key; placeholder for malformed program ids in parsed messages
DEFAULT_PUBKEY = base58.b58encode(bytes(PUBKEY_LENGTH)).decode()


def b58decode_or_none(data: str) -> bytes | None:
    """Decode a base58 string, returning None instead of raising on bad input."""
    if not isinstance(data, str):
        return None
    try:
        return base58.b58decode(data)
    except ValueError:
        return None


def is_valid_pubkey(value: str) -> bool:
    decoded = b58decode_or_none(value) if value else None
    return decoded is not None and len(decoded) == PUBKEY_LENGTH


def pubkey_or_default(value: str | None) -> str:
    return value if value and is_valid_pubkey(value) else DEFAULT_PUBKEY


def annotate_data(data: str) -> str:
    """Append the decoded byte length, e.g. "3Bxs4h24hBtQy9rw (9 bytes)"."""
    decoded = b58decode_or_none(data)
    if decoded:
        return f"{data} ({len(decoded)} bytes)"
    return data


def first_token(raw_data: str) -> str:
    """Strip any "(N bytes)" annotation and return the bare base58 payload."""
    parts = raw_data.split()
    return parts[0] if parts else ""


def read_u64_le(data: bytes, offset: int) -> int:
    return int.from_bytes(data[offset:offset + 8], "little")


def lamports_to_sol(lamports: int) -> Decimal:
    return Decimal(lamports) / Decimal(LAMPORTS_PER_SOL)
