"""End-to-end tests for TransactionAssembler over `json` and `jsonParsed` records."""

import copy
from datetime import UTC, datetime

import pytest

from helpers import make_key, system_transfer_data, unit_price_data
from solinspect.decoder.assembler import TransactionAssembler, assemble_transaction
from solinspect.decoder.extractors.log_transfers import TokenLogScanner
from solinspect.decoder.registry import COMPUTE_BUDGET_PROGRAM, SYSTEM_PROGRAM, TOKEN_PROGRAM
from solinspect.decoder.utils.encoding import DEFAULT_PUBKEY
from solinspect.domain.enums import TxOutcome
from solinspect.domain.models.transaction import TokenTransfer
from solinspect.exceptions import DecodeError, InvalidProgramIndexError, MissingMetadataError

USDC = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"


def _make_parsed_record():
    payer, recipient = make_key(1), make_key(2)
    return {
        "slot": 300,
        "blockTime": None,
        "version": 0,
        "transaction": {
            "signatures": ["parsedSig"],
            "message": {
                "accountKeys": [
                    {"pubkey": payer, "signer": True, "writable": True, "source": "transaction"},
                    {"pubkey": recipient, "signer": False, "writable": True, "source": "transaction"},
                    {"pubkey": SYSTEM_PROGRAM, "signer": False, "writable": False, "source": "transaction"},
                    {"pubkey": COMPUTE_BUDGET_PROGRAM, "signer": False, "writable": False, "source": "transaction"},
                    {"pubkey": make_key(3), "signer": False, "writable": True, "source": "lookupTable"},
                ],
                "instructions": [
                    {"programId": COMPUTE_BUDGET_PROGRAM, "accounts": [], "data": unit_price_data(25_000), "stackHeight": None},
                    {
                        "program": "system",
                        "programId": SYSTEM_PROGRAM,
                        "parsed": {
                            "type": "transfer",
                            "info": {"source": payer, "destination": recipient, "lamports": 1_000},
                        },
                        "stackHeight": None,
                    },
                ],
            },
        },
        "meta": {
            "err": None,
            "fee": 10_000,
            "preBalances": [5_000_000, 0, 1, 1, 2_039_280],
            "postBalances": [4_989_000, 1_000, 1, 1, 2_039_280],
            "innerInstructions": [
                {
                    "index": 1,
                    "instructions": [
                        {
                            "program": "spl-token",
                            "programId": TOKEN_PROGRAM,
                            "parsed": {
                                "type": "transferChecked",
                                "info": {
                                    "authority": payer,
                                    "source": make_key(3),
                                    "destination": make_key(4),
                                    "mint": USDC,
                                    "tokenAmount": {"amount": "1000000", "decimals": 6},
                                },
                            },
                            "stackHeight": 2,
                        },
                    ],
                },
            ],
            "logMessages": [],
        },
    }


class TestCompiledRecord:
    def test_top_level_metadata(self, compiled_record):
        tx = assemble_transaction(compiled_record)

        assert tx.signature == compiled_record["transaction"]["signatures"][0]
        assert tx.slot == 250_000_000
        assert tx.block_time == datetime(2023, 11, 14, 22, 13, 20, tzinfo=UTC)
        assert tx.fee == 5000
        assert tx.status.is_success
        assert tx.compute_units_consumed == 450
        assert tx.version == "legacy"
        assert len(tx.logs) == 7

    def test_explicit_signature_wins(self, compiled_record):
        assert assemble_transaction(compiled_record, signature="given").signature == "given"

    def test_account_roles(self, compiled_record, payer, recipient):
        tx = assemble_transaction(compiled_record)
        flags = [(a.pubkey, a.is_signer, a.is_writable) for a in tx.accounts]
        assert flags == [
            (payer, True, True),
            (recipient, False, True),
            (SYSTEM_PROGRAM, False, False),
            (COMPUTE_BUDGET_PROGRAM, False, False),
        ]
        assert tx.accounts[1].balance_change == 1_000_000_000

    def test_instructions_classified(self, compiled_record):
        tx = assemble_transaction(compiled_record)
        assert [ix.instruction_type for ix in tx.instructions] == [
            "SetComputeUnitPrice",
            "SetComputeUnitLimit",
            "Transfer",
        ]
        assert [ix.program_name for ix in tx.instructions] == ["Compute Budget", "Compute Budget", "System Program"]

    def test_derived_events(self, compiled_record, payer, recipient):
        tx = assemble_transaction(compiled_record)
        assert len(tx.sol_transfers) == 1
        assert tx.sol_transfers[0].from_address == payer
        assert tx.sol_transfers[0].to_address == recipient
        assert tx.sol_transfers[0].amount == 1_000_000_000
        assert tx.priority_fee == 50_000
        # binary SetComputeUnitLimit payloads are not read as a decimal limit
        assert tx.max_compute_units is None
        assert tx.token_transfers == []

    def test_compute_units_from_logs(self, compiled_record):
        tx = assemble_transaction(compiled_record)
        assert [ix.compute_units_consumed for ix in tx.instructions] == [None, None, 150]

    def test_failed_status(self, compiled_record):
        compiled_record["meta"]["err"] = {"InstructionError": [0, {"Custom": 1}]}
        tx = assemble_transaction(compiled_record)
        assert tx.status.outcome == TxOutcome.FAILED
        assert tx.status.reason == '{"InstructionError":[0,{"Custom":1}]}'

    def test_inner_instructions_flattened(self, compiled_record, payer, recipient):
        compiled_record["meta"]["innerInstructions"] = [
            {"index": 2, "instructions": [
                {"programIdIndex": 2, "accounts": [1, 0], "data": system_transfer_data(7), "stackHeight": 2},
                {"programIdIndex": 99, "accounts": [], "data": "3", "stackHeight": 2},
            ]},
        ]
        tx = assemble_transaction(compiled_record)
        assert len(tx.inner_instructions) == 1
        inner = tx.inner_instructions[0]
        assert inner.inner and inner.parent_index == 2 and inner.stack_height == 2
        assert [t.amount for t in tx.sol_transfers] == [1_000_000_000, 7]
        assert tx.sol_transfers[1].from_address == recipient
        assert len(tx.all_instructions()) == 4

    def test_extractors_scan_inner_after_top_level(self, compiled_record, payer, recipient):
        compiled_record["meta"]["innerInstructions"] = [
            {"index": 2, "instructions": [
                {"programIdIndex": 3, "accounts": [], "data": unit_price_data(75_000), "stackHeight": 2},
                {"programIdIndex": 2, "accounts": [0, 1], "data": system_transfer_data(7), "stackHeight": 2},
            ]},
        ]
        tx = assemble_transaction(compiled_record)
        # the CPI price instruction comes last, so it wins
        assert tx.priority_fee == 75_000
        assert [(t.from_address, t.amount) for t in tx.sol_transfers] == [(payer, 1_000_000_000), (payer, 7)]

    def test_bad_top_level_program_index_raises(self, compiled_record):
        compiled_record["transaction"]["message"]["instructions"].append(
            {"programIdIndex": 12, "accounts": [], "data": ""}
        )
        with pytest.raises(InvalidProgramIndexError):
            assemble_transaction(compiled_record)

    @pytest.mark.parametrize("program_id_index", [None, "abc"])
    def test_unreadable_top_level_program_index_raises_decode_error(self, compiled_record, program_id_index):
        compiled_record["transaction"]["message"]["instructions"].append(
            {"programIdIndex": program_id_index, "accounts": [], "data": ""}
        )
        with pytest.raises(DecodeError):
            assemble_transaction(compiled_record)

    def test_non_integer_account_index_dropped(self, compiled_record, payer, recipient):
        compiled_record["transaction"]["message"]["instructions"][2]["accounts"] = [0, "x", 1]
        tx = assemble_transaction(compiled_record)
        assert [a.pubkey for a in tx.instructions[2].accounts] == [payer, recipient]
        assert [t.amount for t in tx.sol_transfers] == [1_000_000_000]

    def test_malformed_inner_instructions_skipped(self, compiled_record):
        compiled_record["meta"]["innerInstructions"] = [
            {"index": 2, "instructions": [
                {"programIdIndex": None, "accounts": [0], "data": ""},
                {"programIdIndex": "x", "accounts": [0], "data": ""},
                "not-an-instruction",
                {"programIdIndex": 2, "accounts": [1, "bad", 0], "data": system_transfer_data(7)},
            ]},
            "not-a-group",
        ]
        tx = assemble_transaction(compiled_record)
        assert len(tx.inner_instructions) == 1
        assert tx.inner_instructions[0].instruction_type == "Transfer"
        assert len(tx.inner_instructions[0].accounts) == 2

    def test_loaded_addresses(self, compiled_record):
        compiled_record["version"] = 0
        compiled_record["meta"]["loadedAddresses"] = {"writable": [make_key(40)], "readonly": []}
        compiled_record["meta"]["preBalances"].append(11)
        compiled_record["meta"]["postBalances"].append(12)
        compiled_record["meta"]["innerInstructions"] = [
            {"index": 2, "instructions": [
                {"programIdIndex": 2, "accounts": [0, 4], "data": system_transfer_data(3), "stackHeight": 2},
            ]},
        ]
        tx = assemble_transaction(compiled_record)
        assert tx.version == "0"
        assert tx.accounts[-1].pubkey == make_key(40)
        assert tx.accounts[-1].is_writable and not tx.accounts[-1].is_signer
        assert tx.sol_transfers[-1].to_address == make_key(40)


class TestParsedRecord:
    def test_accounts_use_entry_flags(self):
        tx = assemble_transaction(_make_parsed_record())
        assert [(a.is_signer, a.is_writable) for a in tx.accounts] == [
            (True, True), (False, True), (False, False), (False, False), (False, True),
        ]
        assert tx.version == "0"
        assert tx.block_time is None
        assert tx.signature == "parsedSig"

    def test_instructions(self):
        tx = assemble_transaction(_make_parsed_record())
        assert [ix.instruction_type for ix in tx.instructions] == ["SetComputeUnitPrice", "transfer"]
        assert tx.priority_fee == 25_000

    def test_parsed_system_transfer_not_extracted(self):
        tx = assemble_transaction(_make_parsed_record())
        assert tx.instructions[1].program_id == SYSTEM_PROGRAM
        assert tx.instructions[1].instruction_type == "transfer"
        assert tx.sol_transfers == []

    def test_inner_parsed_roles(self):
        tx = assemble_transaction(_make_parsed_record())
        inner = tx.inner_instructions[0]
        assert inner.instruction_type == "transferChecked"
        assert inner.parent_index == 1
        roles = {a.role_label: (a.is_signer, a.is_writable) for a in inner.accounts}
        assert roles["authority"] == (True, False)
        assert roles["source"] == (False, True)
        assert roles["mint"] == (False, False)

    def test_compiled_inside_parsed_message_falls_back(self):
        record = _make_parsed_record()
        record["transaction"]["message"]["instructions"].append({"programIdIndex": 30, "accounts": [0], "data": "3"})
        tx = assemble_transaction(record)
        assert tx.instructions[-1].instruction_type == "Unknown (Compiled)"
        assert tx.instructions[-1].program_id == DEFAULT_PUBKEY


class TestDegradation:
    def test_missing_meta_raises(self, compiled_record):
        del compiled_record["meta"]
        with pytest.raises(MissingMetadataError):
            assemble_transaction(compiled_record)

    def test_null_meta_raises(self, compiled_record):
        compiled_record["meta"] = None
        with pytest.raises(MissingMetadataError):
            assemble_transaction(compiled_record)

    def test_minimal_meta(self):
        tx = assemble_transaction({"slot": 1, "meta": {}, "transaction": {"message": {}}})
        assert tx.fee == 0
        assert tx.instructions == []
        assert tx.accounts == []
        assert tx.logs == []
        assert tx.compute_units_consumed is None
        assert tx.version is None
        assert tx.priority_fee is None
        assert tx.signature == ""

    def test_binary_encoded_transaction(self):
        record = {"slot": 5, "meta": {"fee": 5000, "err": None}, "transaction": ["AQID", "base64"]}
        tx = assemble_transaction(record, signature="sig")
        assert tx.accounts == []
        assert tx.instructions == []
        assert tx.fee == 5000

    def test_missing_balances_are_none(self, compiled_record):
        compiled_record["meta"]["preBalances"] = []
        del compiled_record["meta"]["postBalances"]
        tx = assemble_transaction(compiled_record)
        assert all(a.pre_balance is None and a.post_balance is None for a in tx.accounts)


class TestIdempotence:
    def test_same_input_same_output(self, compiled_record):
        first = assemble_transaction(copy.deepcopy(compiled_record))
        second = assemble_transaction(copy.deepcopy(compiled_record))
        assert first == second
        assert first.model_dump() == second.model_dump()

    def test_input_not_mutated(self, compiled_record):
        snapshot = copy.deepcopy(compiled_record)
        assemble_transaction(compiled_record)
        assert compiled_record == snapshot


class TestPluggableLogParser:
    def test_custom_parser_used(self, compiled_record, payer, recipient):
        class _Scanner(TokenLogScanner):
            def parse_transfer_line(self, line, frame, account_keys):
                return TokenTransfer(
                    from_address=account_keys[0],
                    to_address=account_keys[1],
                    mint=USDC,
                    amount=int(line.rsplit("amount:", 1)[1]),
                    decimals=6,
                    program=frame.program_id,
                )

        compiled_record["meta"]["logMessages"] += [
            f"Program {TOKEN_PROGRAM} invoke [1]",
            "Program log: Transfer amount: 99",
            f"Program {TOKEN_PROGRAM} success",
        ]
        tx = TransactionAssembler(log_transfer_parser=_Scanner()).assemble(compiled_record)
        assert len(tx.token_transfers) == 1
        assert tx.token_transfers[0].amount == 99
        assert tx.token_transfers[0].from_address == payer
        assert tx.token_transfers[0].to_address == recipient
