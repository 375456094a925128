"""View models produced by the transaction decoder. Immutable once assembled."""

import json
from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict

from solinspect.decoder.utils.encoding import lamports_to_sol
from solinspect.domain.enums import TxOutcome


class AccountMeta(BaseModel):
    """One account's participation in a transaction or instruction."""

    model_config = ConfigDict(frozen=True)

    pubkey: str
    is_signer: bool = False
    is_writable: bool = False
    pre_balance: int | None = None
    post_balance: int | None = None
    role_label: str | None = None  # only set from named fields of parsed instructions

    @property
    def balance_change(self) -> int | None:
        if self.pre_balance is None or self.post_balance is None:
            return None
        return self.post_balance - self.pre_balance


class InstructionInfo(BaseModel):
    """A normalized top-level or inner instruction."""

    model_config = ConfigDict(frozen=True)

    program_id: str
    program_name: str | None = None
    instruction_type: str = "Unknown"
    raw_data: str = ""
    accounts: list[AccountMeta] = []
    compute_units_consumed: int | None = None
    stack_height: int | None = None
    inner: bool = False
    parent_index: int | None = None  # top-level index this inner instruction was emitted by


class SolTransfer(BaseModel):
    model_config = ConfigDict(frozen=True)

    from_address: str
    to_address: str
    amount: int  # lamports

    @property
    def amount_sol(self) -> Decimal:
        return lamports_to_sol(self.amount)


class TokenTransfer(BaseModel):
    model_config = ConfigDict(frozen=True)

    from_address: str
    to_address: str
    mint: str
    amount: int  # smallest unit
    decimals: int
    token_name: str | None = None
    program: str


class TransactionStatus(BaseModel):
    """Success | Failed(reason)."""

    model_config = ConfigDict(frozen=True)

    outcome: TxOutcome
    reason: str | None = None

    @classmethod
    def success(cls) -> "TransactionStatus":
        return cls(outcome=TxOutcome.SUCCESS)

    @classmethod
    def failed(cls, reason: str) -> "TransactionStatus":
        return cls(outcome=TxOutcome.FAILED, reason=reason)

    @classmethod
    def from_rpc_error(cls, err: Any) -> "TransactionStatus":
        """Map the RPC `err` field: null means success, anything else is the failure reason."""
        if err is None:
            return cls.success()
        if isinstance(err, str):
            return cls.failed(err)
        return cls.failed(json.dumps(err, separators=(",", ":")))

    @property
    def is_success(self) -> bool:
        return self.outcome == TxOutcome.SUCCESS


class TransactionData(BaseModel):
    """Aggregate root: everything decoded from one getTransaction record."""

    model_config = ConfigDict(frozen=True)

    signature: str
    slot: int
    block_time: datetime | None = None
    fee: int  # lamports
    status: TransactionStatus
    instructions: list[InstructionInfo] = []
    inner_instructions: list[InstructionInfo] = []  # flattened across all groups
    accounts: list[AccountMeta] = []
    logs: list[str] = []
    compute_units_consumed: int | None = None
    version: str | None = None
    token_transfers: list[TokenTransfer] = []
    sol_transfers: list[SolTransfer] = []
    priority_fee: int | None = None  # micro-lamports per compute unit
    max_compute_units: int | None = None

    @property
    def fee_sol(self) -> Decimal:
        return lamports_to_sol(self.fee)

    def all_instructions(self) -> list[InstructionInfo]:
        return list(self.instructions) + list(self.inner_instructions)
