"""View models for account-lookup mode."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from solinspect.decoder.utils.encoding import lamports_to_sol
from solinspect.domain.enums import AccountKind
from solinspect.domain.models.transaction import TransactionStatus


class TokenAccountInfo(BaseModel):
    """One SPL token holding of the looked-up owner."""

    model_config = ConfigDict(frozen=True)

    mint: str
    amount: int  # smallest unit
    decimals: int = 0
    token_name: str | None = None
    ui_amount: float = 0.0


class TransactionSummary(BaseModel):
    """Recent-activity row built from getSignaturesForAddress."""

    model_config = ConfigDict(frozen=True)

    signature: str
    slot: int
    timestamp: datetime | None = None
    status: TransactionStatus
    fee: int = 0  # not reported by getSignaturesForAddress
    description: str = ""


class AccountData(BaseModel):
    model_config = ConfigDict(frozen=True)

    pubkey: str
    lamports: int
    owner: str
    owner_name: str | None = None
    executable: bool = False
    rent_epoch: int = 0
    data_size: int = 0
    token_accounts: list[TokenAccountInfo] = []
    recent_transactions: list[TransactionSummary] = []
    account_kind: AccountKind = AccountKind.UNKNOWN
    is_rent_exempt: bool = False
    min_balance_for_rent_exemption: int | None = None

    @property
    def balance_sol(self) -> Decimal:
        return lamports_to_sol(self.lamports)
