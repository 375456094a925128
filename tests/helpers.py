"""Builders for RPC-shaped test data."""

import base58


def make_key(n: int) -> str:
    """Deterministic, valid 32-byte base58 pubkey."""
    return base58.b58encode(bytes([n]) * 32).decode()


def encode(payload: bytes) -> str:
    return base58.b58encode(payload).decode()


def system_transfer_data(lamports: int) -> str:
    return encode((2).to_bytes(4, "little") + lamports.to_bytes(8, "little"))


def unit_price_data(micro_lamports: int) -> str:
    return encode(bytes([3]) + micro_lamports.to_bytes(8, "little"))


def unit_limit_data(units: int) -> str:
    return encode(bytes([2]) + units.to_bytes(4, "little"))
