from __future__ import annotations

from procureledger.core.errors import AuditError, BidderError, TenderError
from procureledger.registry import (
    BidAudit,
    BidderStatus,
    TenderAudit,
    TenderStatus,
)

from .conftest import AUTHORITY, CALLER, OTHER


def test_road_project_registration(registry):
    """Authority installed, a caller registers a tender and pays the fee."""
    tenders = registry.tenders

    assert tenders.set_authority_principal(AUTHORITY).ok is True
    result = tenders.create_tender(
        "Road Project",
        "Build new road",
        200,
        "Licensed contractors",
        1000000,
        "infrastructure",
        b"a" * 32,
    )
    assert result.ok is True
    assert result.value == 0

    transfer = registry.env.transfers[0]
    assert (transfer.amount, transfer.sender, transfer.recipient) == (500, CALLER, AUTHORITY)
    assert tenders.get_tender(0).status == TenderStatus.OPEN


def test_procurement_lifecycle(registry):
    """Tender, bidder and audit components cooperate only through shared ids."""
    env = registry.env
    for component in (registry.tenders, registry.bidders, registry.audit):
        assert component.set_authority_principal(AUTHORITY).ok is True

    tender_id = registry.tenders.create_tender(
        "Water Works", "Pipe upgrade", 100, "Certified", 250_000, "infrastructure", b"w" * 32
    ).unwrap()

    registry.bidders.set_qualification_criteria(tender_id, 10_000, "plumbing", 2, b"c" * 32)

    with env.as_caller(OTHER):
        bidder_id = registry.bidders.register_bidder(b"q", b"p", 50_000, b"c" * 32, 6).unwrap()
        assert registry.bidders.qualify_bidder_for_tender(bidder_id, tender_id).unwrap() is True
    assert registry.bidders.get_bidder(bidder_id).status == BidderStatus.QUALIFIED

    # A second principal misses the experience bar
    with env.as_caller("ST4LATE"):
        late_id = registry.bidders.register_bidder(b"q", b"p", 50_000, b"c" * 32, 1).unwrap()
        assert registry.bidders.qualify_bidder_for_tender(late_id, tender_id).unwrap() is False

    env.advance(150)
    assert registry.tenders.close_tender(tender_id).ok is True

    # Audit ids are 1-based; the snapshot is ingested from outside
    registry.audit.record_tender_audit(
        TenderAudit(tender_id + 1, "Water Works", "Pipe upgrade", CALLER, 150, "closed", b"w" * 32)
    )
    registry.audit.record_bid_audit(tender_id + 1, 1, BidAudit(OTHER, b"s" * 32, 50, 120, 92, "lowest"))

    with env.as_caller(OTHER):
        request_id = registry.audit.request_bid_verification(tender_id + 1, 1).unwrap()
    assert registry.audit.verify_request(request_id).ok is True
    assert registry.audit.verify_request(request_id).value == AuditError.INVALID_VERIFICATION

    assert env.transfers.total_to(AUTHORITY) == 500 + 200 + 200
    assert [t.sender for t in env.transfers] == [CALLER, OTHER, "ST4LATE"]


def test_components_do_not_share_authority(registry):
    registry.tenders.set_authority_principal(AUTHORITY)

    assert registry.tenders.set_max_tenders(10).ok is True
    assert registry.bidders.set_max_bidders(10).value == BidderError.NOT_AUTHORIZED
    assert registry.audit.set_max_queries(10).value == AuditError.NOT_AUTHORIZED
    assert registry.tenders.set_max_tenders(0).value == TenderError.INVALID_THRESHOLD
