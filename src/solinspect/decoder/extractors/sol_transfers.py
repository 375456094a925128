"""Reconstruct native SOL transfers from System Program instructions."""

import logging

from solinspect.decoder.registry import SYSTEM_PROGRAM
from solinspect.decoder.utils.encoding import b58decode_or_none, first_token, read_u64_le
from solinspect.domain.models.transaction import InstructionInfo, SolTransfer

logger = logging.getLogger(__name__)

# System transfer payload: u32 LE discriminant (2) followed by u64 LE lamports
TRANSFER_DATA_LEN = 12
LAMPORTS_OFFSET = 4


def extract_sol_transfers(instructions: list[InstructionInfo]) -> list[SolTransfer]:
    """One SolTransfer per System Program "Transfer" instruction, in instruction order.

    Only the binary payload is read, so jsonParsed "transfer" instructions (whose
    raw_data is the node's JSON rendering) yield nothing. Anything that cannot be
    read is skipped, never emitted with a zero amount.
    """
    transfers: list[SolTransfer] = []
    for ix in instructions:
        if ix.program_id != SYSTEM_PROGRAM or ix.instruction_type != "Transfer":
            continue
        if len(ix.accounts) < 2:
            continue
        decoded = b58decode_or_none(first_token(ix.raw_data))
        if decoded is None or len(decoded) < TRANSFER_DATA_LEN:
            logger.debug("Skipping System transfer with unreadable payload: %s", ix.raw_data)
            continue
        transfers.append(SolTransfer(
            from_address=ix.accounts[0].pubkey,
            to_address=ix.accounts[1].pubkey,
            amount=read_u64_le(decoded, LAMPORTS_OFFSET),
        ))
    return transfers
