"""
Record types held by the registry stores.

Records are immutable; a transition stores a replaced copy so that a
rejected call can never leave a half-edited record behind.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


# =============================================================================
# Enums
# =============================================================================


class TenderStatus(str, Enum):
    """Tender lifecycle status."""

    OPEN = "open"
    CLOSED = "closed"


class TenderCategory(str, Enum):
    """Procurement categories a tender can be filed under."""

    INFRASTRUCTURE = "infrastructure"
    SERVICES = "services"
    GOODS = "goods"


class BidderStatus(str, Enum):
    """Bidder qualification status."""

    PENDING = "pending"
    QUALIFIED = "qualified"
    REJECTED = "rejected"


class QualificationTag(str, Enum):
    """Descriptive tag stored with a qualification outcome."""

    ALL_CRITERIA_MET = "all-criteria-met"
    PARTIAL_MATCH = "partial-match"


# =============================================================================
# Tender Registry Records
# =============================================================================


@dataclass(frozen=True)
class Tender:
    """A published tender."""

    id: int
    title: str
    description: str
    creator: str
    deadline: int
    eligibility: str
    budget: int
    category: TenderCategory
    status: TenderStatus
    created_at: int
    metadata_hash: bytes

    @property
    def is_open(self) -> bool:
        return self.status == TenderStatus.OPEN


@dataclass(frozen=True)
class TenderUpdate:
    """Last edit applied to a tender (one slot per tender, overwritten)."""

    updated_title: str
    updated_description: str
    updated_deadline: int
    updated_by: str
    updated_at: int


# =============================================================================
# Bidder Qualifier Records
# =============================================================================


@dataclass(frozen=True)
class Bidder:
    """A registered bidder, one per submitting principal."""

    id: int
    principal: str
    qualification_hash: bytes
    proof_hash: bytes
    financial_proof: int
    license_hash: bytes
    experience_years: int
    status: BidderStatus
    registered_at: int


@dataclass(frozen=True)
class QualificationCriteria:
    """Active qualification criteria for one tender."""

    tender_id: int
    min_financial: int
    required_license: str
    min_experience: int
    doc_hash: bytes
    set_by: str
    set_at: int


@dataclass(frozen=True)
class BidderQualification:
    """Outcome of evaluating a bidder against a tender's criteria."""

    qualified: bool
    criteria_met: QualificationTag
    qualified_at: int


# =============================================================================
# Audit Verifier Records
# =============================================================================


@dataclass(frozen=True)
class TenderAudit:
    """Externally ingested snapshot of a tender."""

    tender_id: int
    title: str
    description: str
    creator: str
    timestamp: int
    status: TenderStatus
    metadata_hash: bytes


@dataclass(frozen=True)
class BidAudit:
    """Externally ingested snapshot of a bid on a tender."""

    bidder: str
    bid_hash: bytes
    submission_time: int
    reveal_time: int
    score: int
    metadata: str


@dataclass(frozen=True)
class VerificationRequest:
    """A request for an independent check of a tender or one of its bids."""

    requester: str
    tender_id: int
    bid_id: int | None
    request_time: int
    verified: bool = False

    @property
    def is_bid_request(self) -> bool:
        return self.bid_id is not None
