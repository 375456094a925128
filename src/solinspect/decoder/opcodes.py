"""OpcodeClassifier — label an instruction from its program and first payload byte.

Each program owns a fixed {discriminant: label} table. Only the first decoded
byte is inspected; payload length and layout are never introspected here.
"""

from solinspect.decoder.registry import (
    COMPUTE_BUDGET_PROGRAM,
    SYSTEM_PROGRAM,
    TOKEN_2022_PROGRAM,
    TOKEN_PROGRAM,
)
from solinspect.decoder.utils.encoding import b58decode_or_none

UNKNOWN = "Unknown"

SYSTEM_INSTRUCTIONS: dict[int, str] = {
    0: "CreateAccount",
    1: "Assign",
    2: "Transfer",
    3: "CreateAccountWithSeed",
    4: "AdvanceNonceAccount",
    5: "WithdrawNonceAccount",
    6: "InitializeNonceAccount",
    7: "AuthorizeNonceAccount",
    8: "Allocate",
    9: "AllocateWithSeed",
    10: "AssignWithSeed",
    11: "TransferWithSeed",
    12: "UpgradeNonceAccount",
}

TOKEN_INSTRUCTIONS: dict[int, str] = {
    0: "InitializeMint",
    1: "InitializeAccount",
    2: "InitializeMultisig",
    3: "Transfer",
    4: "Approve",
    5: "Revoke",
    6: "SetAuthority",
    7: "MintTo",
    8: "Burn",
    9: "CloseAccount",
    10: "FreezeAccount",
    11: "ThawAccount",
    12: "TransferChecked",
    13: "ApproveChecked",
    14: "MintToChecked",
    15: "BurnChecked",
    16: "InitializeAccount2",
    17: "SyncNative",
    18: "InitializeAccount3",
    19: "InitializeMultisig2",
    20: "InitializeMint2",
}

COMPUTE_BUDGET_INSTRUCTIONS: dict[int, str] = {
    0: "RequestUnits",
    1: "RequestHeapFrame",
    2: "SetComputeUnitLimit",
    3: "SetComputeUnitPrice",
    4: "SetLoadedAccountsDataSizeLimit",
}

DEFAULT_TABLES: dict[str, dict[int, str]] = {
    SYSTEM_PROGRAM: SYSTEM_INSTRUCTIONS,
    TOKEN_PROGRAM: TOKEN_INSTRUCTIONS,
    TOKEN_2022_PROGRAM: TOKEN_INSTRUCTIONS,
    COMPUTE_BUDGET_PROGRAM: COMPUTE_BUDGET_INSTRUCTIONS,
}


class OpcodeClassifier:
    """Maps (program_id, base58 payload) → instruction type label."""

    def __init__(self, tables: dict[str, dict[int, str]] | None = None) -> None:
        source = DEFAULT_TABLES if tables is None else tables
        self._tables: dict[str, dict[int, str]] = {pid: dict(table) for pid, table in source.items()}

    def register_table(self, program_id: str, table: dict[int, str]) -> None:
        """Add (or extend) the discriminant table for a program."""
        self._tables.setdefault(program_id, {}).update(table)

    def has_table(self, program_id: str) -> bool:
        return program_id in self._tables

    def label(self, program_id: str, discriminant: int) -> str:
        return self._tables.get(program_id, {}).get(discriminant, UNKNOWN)

    def classify(self, program_id: str, data: str) -> str:
        if not self.has_table(program_id):
            return UNKNOWN
        decoded = b58decode_or_none(data)
        if not decoded:
            return UNKNOWN
        return self.label(program_id, decoded[0])
