from __future__ import annotations

import pytest

from procureledger.core.errors import AuditError
from procureledger.registry import (
    AuditVerifier,
    BidAudit,
    TenderAudit,
    TenderStatus,
)

from .conftest import AUTHORITY, BURN, CALLER, OTHER


def _tender_audit(tender_id: int = 1, **overrides) -> TenderAudit:
    fields = {
        "tender_id": tender_id,
        "title": "Road Project",
        "description": "Build new road",
        "creator": CALLER,
        "timestamp": 10,
        "status": TenderStatus.OPEN,
        "metadata_hash": b"m" * 32,
    }
    fields.update(overrides)
    return TenderAudit(**fields)


def _bid_audit(**overrides) -> BidAudit:
    fields = {
        "bidder": OTHER,
        "bid_hash": b"b" * 32,
        "submission_time": 20,
        "reveal_time": 30,
        "score": 87,
        "metadata": "sealed bid",
    }
    fields.update(overrides)
    return BidAudit(**fields)


# -----------------------------------------------------------------------------
# Authority
# -----------------------------------------------------------------------------


def test_burn_address_is_an_invalid_principal(audit):
    result = audit.set_authority_principal(BURN)
    assert result.ok is False
    assert result.value == AuditError.INVALID_PRINCIPAL


def test_authority_is_write_once(audit):
    assert audit.set_authority_principal(AUTHORITY).ok is True
    assert audit.set_authority_principal(OTHER).value == AuditError.NOT_AUTHORIZED
    assert audit.get_authority_principal() == AUTHORITY


def test_max_queries_setting(audit):
    assert audit.get_max_queries() == 1000
    assert audit.set_max_queries(2).value == AuditError.NOT_AUTHORIZED
    audit.set_authority_principal(AUTHORITY)
    assert audit.set_max_queries(0).value == AuditError.INVALID_THRESHOLD
    assert audit.set_max_queries(2).ok is True
    assert audit.get_max_queries() == 2


# -----------------------------------------------------------------------------
# Snapshot ingestion
# -----------------------------------------------------------------------------


def test_records_tender_audit(audit):
    assert audit.record_tender_audit(_tender_audit(status="closed")).ok is True
    snapshot = audit.get_tender_audit(1)
    assert snapshot.title == "Road Project"
    assert snapshot.status == TenderStatus.CLOSED


def test_tender_audit_is_overwritten(audit):
    audit.record_tender_audit(_tender_audit())
    audit.record_tender_audit(_tender_audit(title="Renamed"))
    assert audit.get_tender_audit(1).title == "Renamed"


@pytest.mark.parametrize(
    "overrides, code",
    [
        ({"tender_id": 0}, AuditError.INVALID_TENDER_ID),
        ({"metadata_hash": b""}, AuditError.INVALID_HASH),
        ({"status": "archived"}, AuditError.INVALID_STATUS),
    ],
)
def test_rejects_invalid_tender_audit(audit, overrides, code):
    assert audit.record_tender_audit(_tender_audit(**overrides)).value == code


def test_records_bid_audit(audit):
    assert audit.record_bid_audit(1, 2, _bid_audit()).ok is True
    snapshot = audit.get_bid_audit(1, 2)
    assert snapshot.score == 87
    assert snapshot.metadata == "sealed bid"
    assert audit.get_bid_audit(2, 1) is None


@pytest.mark.parametrize(
    "tender_id, bid_id, overrides, code",
    [
        (0, 1, {}, AuditError.INVALID_TENDER_ID),
        (1, 0, {}, AuditError.INVALID_BID_ID),
        (1, 1, {"bid_hash": b""}, AuditError.INVALID_HASH),
    ],
)
def test_rejects_invalid_bid_audit(audit, tender_id, bid_id, overrides, code):
    assert audit.record_bid_audit(tender_id, bid_id, _bid_audit(**overrides)).value == code


# -----------------------------------------------------------------------------
# Verification requests
# -----------------------------------------------------------------------------


def test_requests_tender_verification(audit, env):
    audit.record_tender_audit(_tender_audit())
    env.advance(7)

    result = audit.request_tender_verification(1)
    assert result.ok is True
    assert result.value == 0

    request = audit.get_verification_request(0)
    assert request.requester == CALLER
    assert request.tender_id == 1
    assert request.bid_id is None
    assert request.is_bid_request is False
    assert request.request_time == 7
    assert request.verified is False
    assert audit.get_request_count().value == 1


def test_tender_verification_preconditions(audit):
    assert audit.request_tender_verification(0).value == AuditError.INVALID_TENDER_ID
    assert audit.request_tender_verification(1).value == AuditError.NO_TENDER_DATA
    assert audit.get_request_count().value == 0


def test_requests_bid_verification(audit):
    audit.record_bid_audit(1, 2, _bid_audit())
    result = audit.request_bid_verification(1, 2)
    assert result.value == 0

    request = audit.get_verification_request(0)
    assert request.bid_id == 2
    assert request.is_bid_request is True


def test_bid_verification_preconditions(audit):
    assert audit.request_bid_verification(0, 1).value == AuditError.INVALID_TENDER_ID
    assert audit.request_bid_verification(1, 0).value == AuditError.INVALID_BID_ID
    assert audit.request_bid_verification(1, 1).value == AuditError.NO_BID_DATA


def test_request_ids_are_shared_between_kinds(audit):
    audit.record_tender_audit(_tender_audit())
    audit.record_bid_audit(1, 1, _bid_audit())
    assert audit.request_tender_verification(1).value == 0
    assert audit.request_bid_verification(1, 1).value == 1
    assert audit.request_tender_verification(1).value == 2


def test_request_capacity(audit):
    audit.set_authority_principal(AUTHORITY)
    audit.set_max_queries(1)
    audit.record_tender_audit(_tender_audit())

    assert audit.request_tender_verification(1).ok is True
    result = audit.request_tender_verification(1)
    assert result.ok is False
    assert result.value == AuditError.DUPLICATE_QUERY


def test_verifies_request(audit):
    audit.set_authority_principal(AUTHORITY)
    audit.record_tender_audit(_tender_audit())
    audit.request_tender_verification(1)

    result = audit.verify_request(0)
    assert result.ok is True
    assert audit.get_verification_request(0).verified is True


def test_verification_preconditions(audit):
    assert audit.verify_request(0).value == AuditError.INVALID_REQUEST_ID

    audit.record_tender_audit(_tender_audit())
    audit.request_tender_verification(1)
    assert audit.verify_request(0).value == AuditError.NOT_AUTHORIZED

    audit.set_authority_principal(AUTHORITY)
    assert audit.verify_request(0).ok is True
    assert audit.verify_request(0).value == AuditError.INVALID_VERIFICATION


def test_strict_verification_requires_authority_caller(env):
    audit = AuditVerifier(env=env, strict_authority=True)
    audit.set_authority_principal(AUTHORITY)
    audit.record_tender_audit(_tender_audit())
    audit.request_tender_verification(1)

    assert audit.verify_request(0).value == AuditError.NOT_AUTHORIZED
    with env.as_caller(AUTHORITY):
        assert audit.verify_request(0).ok is True


def test_missing_reads_return_none(audit):
    assert audit.get_tender_audit(1) is None
    assert audit.get_bid_audit(1, 1) is None
    assert audit.get_verification_request(0) is None
