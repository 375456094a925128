"""Priority fee and compute-unit limit from Compute Budget instructions.

The two figures are read differently: the unit price from the binary payload,
the unit limit from `raw_data` as a plain decimal string.
"""

from solinspect.decoder.registry import COMPUTE_BUDGET_PROGRAM
from solinspect.decoder.utils.encoding import b58decode_or_none, first_token, read_u64_le
from solinspect.domain.models.transaction import InstructionInfo

# SetComputeUnitPrice payload: u8 discriminant (3) followed by u64 LE micro-lamports
PRICE_DATA_LEN = 9
PRICE_OFFSET = 1


def extract_priority_fee(instructions: list[InstructionInfo]) -> int | None:
    """Micro-lamports per compute unit; the last SetComputeUnitPrice wins."""
    priority_fee = None
    for ix in instructions:
        if ix.program_id != COMPUTE_BUDGET_PROGRAM or ix.instruction_type != "SetComputeUnitPrice":
            continue
        decoded = b58decode_or_none(first_token(ix.raw_data))
        if decoded is not None and len(decoded) >= PRICE_DATA_LEN:
            priority_fee = read_u64_le(decoded, PRICE_OFFSET)
    return priority_fee


def extract_max_compute_units(instructions: list[InstructionInfo]) -> int | None:
    """First SetComputeUnitLimit whose raw_data is a decimal integer."""
    for ix in instructions:
        if ix.program_id != COMPUTE_BUDGET_PROGRAM or "SetComputeUnitLimit" not in ix.instruction_type:
            continue
        value = ix.raw_data.strip()
        if value.isascii() and value.isdigit():
            return int(value)
    return None
