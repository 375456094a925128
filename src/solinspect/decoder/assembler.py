"""TransactionAssembler — one getTransaction record → one TransactionData.

Order: resolve accounts → normalize top-level instructions → normalize inner
instructions (flattened) → run extractors over top-level then inner instructions,
so CPI transfers and fees count too → build the aggregate. Only a record
without `meta`, or a top-level compiled instruction whose program cannot be
resolved, aborts assembly; every other gap degrades to None / [] / "Unknown".
"""

import logging
from datetime import UTC, datetime
from typing import Any

from solinspect.decoder.accounts import MessageHeader, resolve_compiled_accounts, resolve_parsed_accounts
from solinspect.decoder.extractors.compute_budget import extract_max_compute_units, extract_priority_fee
from solinspect.decoder.extractors.log_transfers import LogTransferParser, NullLogTransferParser
from solinspect.decoder.extractors.sol_transfers import extract_sol_transfers
from solinspect.decoder.instructions import (
    CompiledInstruction,
    InstructionNormalizer,
    MessageContext,
    read_instruction,
)
from solinspect.decoder.opcodes import OpcodeClassifier
from solinspect.decoder.registry import ProgramRegistry, build_default_registry
from solinspect.decoder.utils.logs import top_level_frames
from solinspect.domain.models.transaction import InstructionInfo, TransactionData, TransactionStatus
from solinspect.exceptions import DecodeError, MissingMetadataError

logger = logging.getLogger(__name__)


def _is_parsed_message(account_keys: list) -> bool:
    return any(isinstance(k, dict) for k in account_keys)


def _format_version(version: Any) -> str | None:
    if version is None:
        return None
    return str(version)


def _block_time(value: Any) -> datetime | None:
    if value is None:
        return None
    return datetime.fromtimestamp(int(value), UTC)


class TransactionAssembler:
    """Builds TransactionData from getTransaction results (`json` or `jsonParsed`)."""

    def __init__(
        self,
        registry: ProgramRegistry | None = None,
        classifier: OpcodeClassifier | None = None,
        log_transfer_parser: LogTransferParser | None = None,
    ) -> None:
        self._registry = registry or build_default_registry()
        self._normalizer = InstructionNormalizer(self._registry, classifier or OpcodeClassifier())
        self._log_parser = log_transfer_parser or NullLogTransferParser()

    def assemble(self, record: dict, signature: str | None = None) -> TransactionData:
        meta = record.get("meta")
        if not isinstance(meta, dict):
            raise MissingMetadataError("No transaction metadata")

        transaction = record.get("transaction")
        if isinstance(transaction, dict):
            message = transaction.get("message") or {}
        else:
            logger.debug("Transaction is not JSON-encoded; skipping message decoding")
            message = {}
        raw_keys = message.get("accountKeys", []) or []
        pre_balances = meta.get("preBalances") or []
        post_balances = meta.get("postBalances") or []

        # 1. Accounts
        if _is_parsed_message(raw_keys):
            accounts = resolve_parsed_accounts(raw_keys, pre_balances, post_balances)
            key_list = [k.get("pubkey", "") if isinstance(k, dict) else str(k) for k in raw_keys]
            parsed_message = True
        else:
            loaded = meta.get("loadedAddresses") or {}
            loaded_writable = loaded.get("writable") or []
            loaded_readonly = loaded.get("readonly") or []
            accounts = resolve_compiled_accounts(
                raw_keys,
                MessageHeader.from_rpc(message.get("header")),
                pre_balances,
                post_balances,
                loaded_writable=loaded_writable,
                loaded_readonly=loaded_readonly,
            )
            key_list = list(raw_keys) + list(loaded_writable) + list(loaded_readonly)
            parsed_message = False
        context = MessageContext.build(key_list, accounts)

        # 2. Top-level instructions
        logs = list(meta.get("logMessages") or [])
        instructions = self._normalize_top_level(message.get("instructions") or [], context, parsed_message)
        instructions = self._attach_compute_units(instructions, logs)

        # 3. Inner instructions, flattened in group order
        inner_instructions = self._normalize_inner(meta.get("innerInstructions") or [], context)

        # 4. Derived events
        all_instructions = instructions + inner_instructions
        sol_transfers = extract_sol_transfers(all_instructions)
        priority_fee = extract_priority_fee(all_instructions)
        max_compute_units = extract_max_compute_units(all_instructions)
        token_transfers = self._log_parser.parse(logs, key_list)

        if signature is None:
            signatures = transaction.get("signatures") if isinstance(transaction, dict) else None
            signature = signatures[0] if signatures else ""

        tx = TransactionData(
            signature=signature,
            slot=int(record.get("slot", 0) or 0),
            block_time=_block_time(record.get("blockTime")),
            fee=int(meta.get("fee", 0) or 0),
            status=TransactionStatus.from_rpc_error(meta.get("err")),
            instructions=instructions,
            inner_instructions=inner_instructions,
            accounts=accounts,
            logs=logs,
            compute_units_consumed=meta.get("computeUnitsConsumed"),
            version=_format_version(record.get("version")),
            token_transfers=token_transfers,
            sol_transfers=sol_transfers,
            priority_fee=priority_fee,
            max_compute_units=max_compute_units,
        )
        logger.debug(
            "Assembled %s: %d instructions, %d inner, %d SOL transfers",
            signature, len(instructions), len(inner_instructions), len(sol_transfers),
        )
        return tx

    def _normalize_top_level(
        self, raw_instructions: list[dict], context: MessageContext, parsed_message: bool
    ) -> list[InstructionInfo]:
        result: list[InstructionInfo] = []
        for raw in raw_instructions:
            ix = read_instruction(raw)
            if parsed_message and isinstance(ix, CompiledInstruction):
                result.append(self._normalizer.normalize_or_placeholder(ix, context))
            else:
                # InvalidProgramIndexError propagates: the program identity is required
                result.append(self._normalizer.normalize(ix, context))
        return result

    def _normalize_inner(self, groups: list[dict], context: MessageContext) -> list[InstructionInfo]:
        result: list[InstructionInfo] = []
        for group in groups:
            if not isinstance(group, dict):
                logger.debug("Skipping malformed inner instruction group: %r", group)
                continue
            parent_index = group.get("index")
            if not isinstance(parent_index, int):
                parent_index = None
            for raw in group.get("instructions") or []:
                try:
                    ix = read_instruction(raw)
                    result.append(self._normalizer.normalize(ix, context, inner=True, parent_index=parent_index))
                except DecodeError as exc:
                    logger.debug("Skipping inner instruction of #%s: %s", parent_index, exc)
        return result

    @staticmethod
    def _attach_compute_units(instructions: list[InstructionInfo], logs: list[str]) -> list[InstructionInfo]:
        """Pair top-level instructions with depth-1 log frames by program id, in order.

        Programs that never log an invocation (precompiles) are left without a figure.
        """
        frames = top_level_frames(logs)
        result: list[InstructionInfo] = []
        j = 0
        for ix in instructions:
            if j < len(frames) and frames[j].program_id == ix.program_id:
                units = frames[j].compute_units_consumed
                j += 1
                if units is not None:
                    ix = ix.model_copy(update={"compute_units_consumed": units})
            result.append(ix)
        return result


_default_assembler = TransactionAssembler()


def assemble_transaction(record: dict, signature: str | None = None) -> TransactionData:
    """Assemble with the default registry, classifier and (empty) log parser."""
    return _default_assembler.assemble(record, signature)

