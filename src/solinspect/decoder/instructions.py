"""Instruction normalization — three RPC encodings, one InstructionInfo shape.

`json` messages carry compiled instructions (indices into the key list).
`jsonParsed` messages carry either a node-parsed instruction (`parsed` object)
or a partially decoded one (program id + raw accounts + base58 data).
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Union

from solinspect.decoder.opcodes import UNKNOWN, OpcodeClassifier
from solinspect.decoder.registry import ProgramRegistry
from solinspect.decoder.utils.encoding import (
    DEFAULT_PUBKEY,
    annotate_data,
    is_valid_pubkey,
    pubkey_or_default,
)
from solinspect.domain.models.transaction import AccountMeta, InstructionInfo
from solinspect.exceptions import DecodeError, InvalidProgramIndexError

logger = logging.getLogger(__name__)

UNKNOWN_COMPILED = "Unknown (Compiled)"

# Substrings of parsed `info` keys that hint at the account's role. Best effort only.
SIGNER_HINTS = ("authority", "owner")
WRITABLE_HINTS = ("source", "destination")


@dataclass(frozen=True)
class CompiledInstruction:
    program_id_index: int | None  # None when the RPC value is not an integer
    accounts: tuple[int, ...] = ()
    data: str = ""
    stack_height: int | None = None


@dataclass(frozen=True)
class ParsedInstruction:
    program_id: str
    parsed: Any = None
    program: str | None = None
    stack_height: int | None = None


@dataclass(frozen=True)
class PartiallyDecodedInstruction:
    program_id: str
    accounts: tuple[str, ...] = ()
    data: str = ""
    stack_height: int | None = None


RawInstruction = Union[CompiledInstruction, ParsedInstruction, PartiallyDecodedInstruction]


def _as_index(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _as_str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def read_instruction(raw: dict) -> RawInstruction:
    """Map one RPC instruction dict to its encoding variant.

    A compiled programIdIndex that is not an integer is kept as None, so it fails
    resolution like an out-of-range index. Non-integer account indices are dropped.
    """
    if not isinstance(raw, dict):
        raise DecodeError(f"Instruction is not a JSON object: {raw!r}")
    stack_height = _as_index(raw.get("stackHeight"))
    if "programIdIndex" in raw:
        accounts = []
        for value in _as_list(raw.get("accounts")):
            index = _as_index(value)
            if index is None:
                logger.debug("Dropping non-integer account index %r", value)
                continue
            accounts.append(index)
        return CompiledInstruction(
            program_id_index=_as_index(raw["programIdIndex"]),
            accounts=tuple(accounts),
            data=_as_str(raw.get("data")),
            stack_height=stack_height,
        )
    if "parsed" in raw:
        return ParsedInstruction(
            program_id=_as_str(raw.get("programId")),
            parsed=raw["parsed"],
            program=raw.get("program"),
            stack_height=stack_height,
        )
    return PartiallyDecodedInstruction(
        program_id=_as_str(raw.get("programId")),
        accounts=tuple(a for a in _as_list(raw.get("accounts")) if isinstance(a, str)),
        data=_as_str(raw.get("data")),
        stack_height=stack_height,
    )


@dataclass
class MessageContext:
    """Key list of one message plus the resolved account for each valid key."""

    account_keys: list[str]
    accounts_by_key: dict[str, AccountMeta] = field(default_factory=dict)

    @classmethod
    def build(cls, account_keys: list[str], accounts: list[AccountMeta]) -> "MessageContext":
        return cls(account_keys=list(account_keys), accounts_by_key={a.pubkey: a for a in accounts})

    def key_at(self, index: int | None) -> str | None:
        if index is not None and 0 <= index < len(self.account_keys):
            return self.account_keys[index]
        return None


def _compact_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"))


class InstructionNormalizer:
    """Converts any instruction variant into an InstructionInfo."""

    def __init__(self, registry: ProgramRegistry, classifier: OpcodeClassifier) -> None:
        self._registry = registry
        self._classifier = classifier

    def normalize(
        self,
        instruction: RawInstruction,
        context: MessageContext,
        *,
        inner: bool = False,
        parent_index: int | None = None,
    ) -> InstructionInfo:
        """Normalize one instruction. Raises InvalidProgramIndexError for unresolvable compiled programs."""
        extra = {"stack_height": instruction.stack_height, "inner": inner, "parent_index": parent_index}
        if isinstance(instruction, CompiledInstruction):
            return self._from_compiled(instruction, context, **extra)
        if isinstance(instruction, ParsedInstruction):
            return self._from_parsed(instruction, **extra)
        return self._from_partially_decoded(instruction, **extra)

    def normalize_or_placeholder(
        self,
        instruction: RawInstruction,
        context: MessageContext,
        *,
        inner: bool = False,
        parent_index: int | None = None,
    ) -> InstructionInfo:
        """Like normalize(), but a compiled instruction that cannot be resolved becomes a placeholder.

        Used for compiled instructions embedded in jsonParsed messages, where the
        node normally hands back parsed forms.
        """
        try:
            return self.normalize(instruction, context, inner=inner, parent_index=parent_index)
        except InvalidProgramIndexError:
            logger.debug("Unresolvable compiled instruction in parsed message: %r", instruction)
            data = instruction.data if isinstance(instruction, CompiledInstruction) else ""
            return InstructionInfo(
                program_id=DEFAULT_PUBKEY,
                instruction_type=UNKNOWN_COMPILED,
                raw_data=data,
                stack_height=instruction.stack_height,
                inner=inner,
                parent_index=parent_index,
            )

    # --- variants ---

    def _from_compiled(self, ix: CompiledInstruction, context: MessageContext, **extra: Any) -> InstructionInfo:
        program_id = context.key_at(ix.program_id_index)
        if program_id is None or program_id not in context.accounts_by_key:
            raise InvalidProgramIndexError(ix.program_id_index, len(context.account_keys))

        accounts: list[AccountMeta] = []
        for acc_idx in ix.accounts:
            key = context.key_at(acc_idx)
            meta = context.accounts_by_key.get(key) if key is not None else None
            if meta is None:
                logger.debug("Dropping out-of-range account index %d (program %s)", acc_idx, program_id)
                continue
            accounts.append(meta)

        return InstructionInfo(
            program_id=program_id,
            program_name=self._registry.name(program_id),
            instruction_type=self._classifier.classify(program_id, ix.data),
            raw_data=annotate_data(ix.data),
            accounts=accounts,
            **extra,
        )

    def _from_parsed(self, ix: ParsedInstruction, **extra: Any) -> InstructionInfo:
        program_id = pubkey_or_default(ix.program_id)
        parsed = ix.parsed

        instruction_type = parsed.get("type") if isinstance(parsed, dict) else None
        if isinstance(instruction_type, str):
            info = parsed.get("info")
            raw_data = _compact_json(info) if info is not None else ""
        else:
            instruction_type = UNKNOWN
            raw_data = _compact_json(parsed)

        return InstructionInfo(
            program_id=program_id,
            program_name=self._registry.name(program_id),
            instruction_type=instruction_type,
            raw_data=raw_data,
            accounts=self._accounts_from_info(parsed),
            **extra,
        )

    def _from_partially_decoded(self, ix: PartiallyDecodedInstruction, **extra: Any) -> InstructionInfo:
        program_id = pubkey_or_default(ix.program_id)
        accounts = [AccountMeta(pubkey=key) for key in ix.accounts if is_valid_pubkey(key)]
        return InstructionInfo(
            program_id=program_id,
            program_name=self._registry.name(program_id),
            instruction_type=self._classifier.classify(program_id, ix.data),
            raw_data=annotate_data(ix.data),
            accounts=accounts,
            **extra,
        )

    @staticmethod
    def _accounts_from_info(parsed: Any) -> list[AccountMeta]:
        """Every pubkey-valued `info` field becomes an account labelled with its key name."""
        if not isinstance(parsed, dict):
            return []
        info = parsed.get("info")
        if not isinstance(info, dict):
            return []

        accounts: list[AccountMeta] = []
        for key, value in info.items():
            if not isinstance(value, str) or not is_valid_pubkey(value):
                continue
            accounts.append(AccountMeta(
                pubkey=value,
                is_signer=any(hint in key for hint in SIGNER_HINTS),
                is_writable=any(hint in key for hint in WRITABLE_HINTS),
                role_label=key,
            ))
        return accounts
