"""AccountAssembler — account-lookup mode.

Builds AccountData from three RPC results: getAccountInfo, getTokenAccountsByOwner
(jsonParsed) and getSignaturesForAddress.
"""

import base64
import binascii
import logging
from datetime import UTC, datetime

from solinspect.decoder.registry import (
    SYSTEM_PROGRAM,
    TOKEN_2022_PROGRAM,
    TOKEN_PROGRAM,
    ProgramRegistry,
    build_default_registry,
    get_token_name,
)
from solinspect.domain.enums import AccountKind
from solinspect.domain.models.account import AccountData, TokenAccountInfo, TransactionSummary
from solinspect.domain.models.transaction import TransactionStatus
from solinspect.exceptions import InvalidAccountDataError

logger = logging.getLogger(__name__)

# Rent: 3480 lamports per byte-year, exempt at two years, plus 128 bytes of account overhead
ACCOUNT_STORAGE_OVERHEAD = 128
LAMPORTS_PER_BYTE_YEAR = 3480
EXEMPTION_THRESHOLD_YEARS = 2

TOKEN_ACCOUNT_SIZE = 165
MINT_SIZE = 82


def min_balance_for_rent_exemption(data_size: int) -> int:
    return (ACCOUNT_STORAGE_OVERHEAD + data_size) * LAMPORTS_PER_BYTE_YEAR * EXEMPTION_THRESHOLD_YEARS


def _data_size(value: dict) -> int:
    """Prefer the node-reported `space`; otherwise measure the encoded data."""
    space = value.get("space")
    if isinstance(space, int):
        return space
    data = value.get("data")
    if isinstance(data, list) and data and isinstance(data[0], str):
        encoding = data[1] if len(data) > 1 else "base64"
        if encoding == "base64":
            try:
                return len(base64.b64decode(data[0]))
            except (binascii.Error, ValueError):
                logger.debug("Undecodable base64 account data")
                return 0
    if isinstance(data, dict):
        return int(data.get("space", 0) or 0)
    return 0


def _parsed_type(value: dict) -> str | None:
    data = value.get("data")
    if isinstance(data, dict):
        parsed = data.get("parsed")
        if isinstance(parsed, dict):
            return parsed.get("type")
    return None


def classify_account(owner: str, executable: bool, data_size: int, parsed_type: str | None = None) -> AccountKind:
    if executable:
        return AccountKind.PROGRAM
    if owner == SYSTEM_PROGRAM:
        return AccountKind.WALLET
    if owner in (TOKEN_PROGRAM, TOKEN_2022_PROGRAM):
        if parsed_type == "account" or (parsed_type is None and data_size == TOKEN_ACCOUNT_SIZE):
            return AccountKind.TOKEN_ACCOUNT
        if parsed_type == "mint" or (parsed_type is None and data_size == MINT_SIZE):
            return AccountKind.TOKEN_MINT
        return AccountKind.UNKNOWN
    return AccountKind.PROGRAM_OWNED


def parse_token_accounts(token_accounts: list[dict]) -> list[TokenAccountInfo]:
    """Holdings from getTokenAccountsByOwner entries; entries without mint/amount are skipped."""
    result: list[TokenAccountInfo] = []
    for entry in token_accounts:
        data = (entry.get("account") or {}).get("data")
        if not isinstance(data, dict):
            continue
        info = (data.get("parsed") or {}).get("info") or {}
        token_amount = info.get("tokenAmount") or {}
        mint = info.get("mint")
        amount = token_amount.get("amount")
        if not isinstance(mint, str) or not isinstance(amount, str):
            continue
        try:
            raw_amount = int(amount)
        except ValueError:
            raw_amount = 0
        result.append(TokenAccountInfo(
            mint=mint,
            amount=raw_amount,
            decimals=int(token_amount.get("decimals") or 0),
            token_name=get_token_name(mint),
            ui_amount=float(token_amount.get("uiAmount") or 0.0),
        ))
    return result


def parse_signature_summaries(signatures: list[dict], limit: int = 10) -> list[TransactionSummary]:
    summaries: list[TransactionSummary] = []
    for sig in signatures[:limit]:
        block_time = sig.get("blockTime")
        summaries.append(TransactionSummary(
            signature=sig.get("signature", ""),
            slot=int(sig.get("slot", 0) or 0),
            timestamp=datetime.fromtimestamp(int(block_time), UTC) if block_time is not None else None,
            status=TransactionStatus.from_rpc_error(sig.get("err")),
            description=sig.get("memo") or "",
        ))
    return summaries


class AccountAssembler:
    """Builds AccountData; shares the program registry with the transaction decoder."""

    def __init__(self, registry: ProgramRegistry | None = None, recent_limit: int = 10) -> None:
        self._registry = registry or build_default_registry()
        self._recent_limit = recent_limit

    def assemble(
        self,
        pubkey: str,
        account_info: dict | None,
        token_accounts: list[dict] | None = None,
        signatures: list[dict] | None = None,
    ) -> AccountData:
        """`account_info` may be the full getAccountInfo result or just its `value`."""
        value = account_info.get("value", account_info) if isinstance(account_info, dict) else None
        if not isinstance(value, dict):
            raise InvalidAccountDataError(f"Account {pubkey} not found")

        owner = value.get("owner", "")
        executable = bool(value.get("executable", False))
        lamports = int(value.get("lamports", 0) or 0)
        data_size = _data_size(value)
        min_balance = min_balance_for_rent_exemption(data_size)

        return AccountData(
            pubkey=pubkey,
            lamports=lamports,
            owner=owner,
            owner_name=self._registry.name(owner),
            executable=executable,
            rent_epoch=int(value.get("rentEpoch", 0) or 0),
            data_size=data_size,
            token_accounts=parse_token_accounts(token_accounts or []),
            recent_transactions=parse_signature_summaries(signatures or [], self._recent_limit),
            account_kind=classify_account(owner, executable, data_size, _parsed_type(value)),
            is_rent_exempt=lamports >= min_balance,
            min_balance_for_rent_exemption=min_balance,
        )
