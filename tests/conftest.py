import pytest

from helpers import make_key, system_transfer_data, unit_limit_data, unit_price_data
from solinspect.decoder.registry import COMPUTE_BUDGET_PROGRAM, SYSTEM_PROGRAM


@pytest.fixture()
def payer() -> str:
    return make_key(1)


@pytest.fixture()
def recipient() -> str:
    return make_key(2)


@pytest.fixture()
def compiled_record(payer, recipient):
    """A `json`-encoded legacy transfer with a priority fee."""
    return {
        "slot": 250_000_000,
        "blockTime": 1700000000,
        "version": "legacy",
        "transaction": {
            "signatures": ["5sig" + "1" * 80],
            "message": {
                "header": {
                    "numRequiredSignatures": 1,
                    "numReadonlySignedAccounts": 0,
                    "numReadonlyUnsignedAccounts": 2,
                },
                "accountKeys": [payer, recipient, SYSTEM_PROGRAM, COMPUTE_BUDGET_PROGRAM],
                "instructions": [
                    {"programIdIndex": 3, "accounts": [], "data": unit_price_data(50_000), "stackHeight": None},
                    {"programIdIndex": 3, "accounts": [], "data": unit_limit_data(200_000), "stackHeight": None},
                    {"programIdIndex": 2, "accounts": [0, 1], "data": system_transfer_data(1_000_000_000), "stackHeight": None},
                ],
                "recentBlockhash": make_key(9),
            },
        },
        "meta": {
            "err": None,
            "fee": 5000,
            "preBalances": [3_000_000_000, 500_000_000, 1, 1],
            "postBalances": [1_999_995_000, 1_500_000_000, 1, 1],
            "innerInstructions": [],
            "logMessages": [
                f"Program {COMPUTE_BUDGET_PROGRAM} invoke [1]",
                f"Program {COMPUTE_BUDGET_PROGRAM} success",
                f"Program {COMPUTE_BUDGET_PROGRAM} invoke [1]",
                f"Program {COMPUTE_BUDGET_PROGRAM} success",
                f"Program {SYSTEM_PROGRAM} invoke [1]",
                f"Program {SYSTEM_PROGRAM} consumed 150 of 200000 compute units",
                f"Program {SYSTEM_PROGRAM} success",
            ],
            "computeUnitsConsumed": 450,
        },
    }
