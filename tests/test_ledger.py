from __future__ import annotations

import pytest

from procureledger.core.ledger import (
    DEFAULT_BURN_ADDRESS,
    DEFAULT_CALLER,
    AuthoritySlot,
    FeeTransfer,
    LedgerEnvironment,
    TransferLog,
)
from procureledger.core.result import RegistryError, Result
from procureledger.core.errors import AuditError


def test_environment_defaults():
    env = LedgerEnvironment()
    assert env.caller == DEFAULT_CALLER
    assert env.block_height == 0
    assert len(env.transfers) == 0


def test_as_caller_restores_previous_caller():
    env = LedgerEnvironment(caller="ST1A")
    with env.as_caller("ST1B") as inner:
        assert inner is env
        assert env.caller == "ST1B"
    assert env.caller == "ST1A"


def test_as_caller_restores_on_error():
    env = LedgerEnvironment(caller="ST1A")
    with pytest.raises(RuntimeError):
        with env.as_caller("ST1B"):
            raise RuntimeError("boom")
    assert env.caller == "ST1A"


def test_advance_moves_clock_forward():
    env = LedgerEnvironment(block_height=10)
    assert env.advance() == 11
    assert env.advance(4) == 15
    assert env.advance(0) == 15
    with pytest.raises(ValueError):
        env.advance(-1)
    assert env.block_height == 15


def test_charge_records_transfer_from_caller():
    env = LedgerEnvironment(caller="ST1A", block_height=3)
    transfer = env.charge(500, "ST2AUTH", memo="tender-registration")
    assert transfer == FeeTransfer(
        amount=500,
        sender="ST1A",
        recipient="ST2AUTH",
        block_height=3,
        memo="tender-registration",
    )
    assert env.transfers[0] == transfer


def test_transfer_log_totals():
    log = TransferLog()
    log.record(FeeTransfer(500, "ST1A", "ST2AUTH"))
    log.record(FeeTransfer(200, "ST1B", "ST2AUTH"))
    log.record(FeeTransfer(50, "ST1B", "ST9ELSE"))
    assert len(log) == 3
    assert log.total_to("ST2AUTH") == 700
    assert log.total_to("ST0NONE") == 0
    assert [t.amount for t in log] == [500, 200, 50]


def test_authority_slot():
    slot = AuthoritySlot()
    assert slot.burn_address == DEFAULT_BURN_ADDRESS
    assert slot.can_install(DEFAULT_BURN_ADDRESS) is False
    assert slot.install(DEFAULT_BURN_ADDRESS) is False
    assert slot.present is False

    assert slot.install("ST2AUTH") is True
    assert slot.is_authority("ST2AUTH") is True
    assert slot.is_authority("ST1A") is False
    assert slot.install("ST3NEW") is False
    assert slot.principal == "ST2AUTH"


def test_result_helpers():
    ok = Result.success(3)
    assert ok.ok is True
    assert ok.error is None
    assert ok.unwrap() == 3

    failed = Result.failure(AuditError.NO_BID_DATA)
    assert failed.ok is False
    assert failed.error == 105
    with pytest.raises(RegistryError, match="request_bid_verification failed: NO_BID_DATA \\(105\\)"):
        failed.unwrap("request_bid_verification")


def test_registry_error_accepts_plain_codes():
    error = RegistryError(999)
    assert error.code == 999
    assert str(error) == "999 (999)"
