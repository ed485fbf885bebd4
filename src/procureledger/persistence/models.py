"""
SQLAlchemy ORM models for ProcureLedger.

Mirrors the in-memory registry stores so they can be saved and reloaded:
- RegistrySettings: per-component counters, ceilings, fees, authority
- Tenders and their last-update slot
- Bidders, qualification criteria and outcomes
- Tender/bid audit snapshots and verification requests
- Fee transfers recorded by the ledger environment
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    LargeBinary,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


# =============================================================================
# Base Class
# =============================================================================


class Base(DeclarativeBase):
    """Base class for all ORM models."""


# =============================================================================
# Mixins
# =============================================================================


class TimestampMixin:
    """Mixin providing created_at and updated_at columns."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        nullable=False,
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime,
        default=None,
        onupdate=datetime.utcnow,
        nullable=True,
    )


# =============================================================================
# Registry Settings
# =============================================================================


class RegistrySettings(Base, TimestampMixin):
    """Counter, ceiling, fee and authority of one registry component."""

    __tablename__ = "registry_settings"

    component: Mapped[str] = mapped_column(String(20), primary_key=True)
    next_id: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    fee: Mapped[int | None] = mapped_column(BigInteger, nullable=True)

    # Authority slot
    burn_address: Mapped[str] = mapped_column(String(128), nullable=False)
    authority_present: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    authority_principal: Mapped[str | None] = mapped_column(String(128), nullable=True)

    def __repr__(self) -> str:
        return f"<RegistrySettings(component='{self.component}', next_id={self.next_id})>"


# =============================================================================
# Tender Registry
# =============================================================================


class TenderRecord(Base):
    """Persisted tender."""

    __tablename__ = "tenders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    title: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    creator: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    deadline: Mapped[int] = mapped_column(BigInteger, nullable=False)
    eligibility: Mapped[str] = mapped_column(String(200), nullable=False)
    budget: Mapped[int] = mapped_column(BigInteger, nullable=False)
    category: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    metadata_hash: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)

    def __repr__(self) -> str:
        return f"<TenderRecord(id={self.id}, title='{self.title[:30]}...')>"


class TenderUpdateRecord(Base):
    """Last edit of a tender."""

    __tablename__ = "tender_updates"

    tender_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("tenders.id", ondelete="CASCADE"),
        primary_key=True,
    )
    updated_title: Mapped[str] = mapped_column(String(100), nullable=False)
    updated_description: Mapped[str] = mapped_column(String(500), nullable=False)
    updated_deadline: Mapped[int] = mapped_column(BigInteger, nullable=False)
    updated_by: Mapped[str] = mapped_column(String(128), nullable=False)
    updated_at: Mapped[int] = mapped_column(BigInteger, nullable=False)


# =============================================================================
# Bidder Qualifier
# =============================================================================


class BidderRecord(Base):
    """Persisted bidder."""

    __tablename__ = "bidders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    principal: Mapped[str] = mapped_column(String(128), unique=True, nullable=False, index=True)
    qualification_hash: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
    proof_hash: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
    financial_proof: Mapped[int] = mapped_column(BigInteger, nullable=False)
    license_hash: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
    experience_years: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    registered_at: Mapped[int] = mapped_column(BigInteger, nullable=False)

    def __repr__(self) -> str:
        return f"<BidderRecord(id={self.id}, status='{self.status}')>"


class QualificationCriteriaRecord(Base):
    """Active criteria for one tender."""

    __tablename__ = "qualification_criteria"

    tender_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    min_financial: Mapped[int] = mapped_column(BigInteger, nullable=False)
    required_license: Mapped[str] = mapped_column(Text, nullable=False)
    min_experience: Mapped[int] = mapped_column(Integer, nullable=False)
    doc_hash: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
    set_by: Mapped[str] = mapped_column(String(128), nullable=False)
    set_at: Mapped[int] = mapped_column(BigInteger, nullable=False)


class BidderQualificationRecord(Base):
    """Qualification outcome keyed by (bidder, tender)."""

    __tablename__ = "bidder_qualifications"

    bidder_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("bidders.id", ondelete="CASCADE"),
        primary_key=True,
    )
    tender_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    qualified: Mapped[bool] = mapped_column(Boolean, nullable=False)
    criteria_met: Mapped[str] = mapped_column(String(20), nullable=False)
    qualified_at: Mapped[int] = mapped_column(BigInteger, nullable=False)


# =============================================================================
# Audit Verifier
# =============================================================================


class TenderAuditRecord(Base):
    """Ingested tender snapshot."""

    __tablename__ = "tender_audits"

    tender_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    creator: Mapped[str] = mapped_column(String(128), nullable=False)
    timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False)
    status: Mapped[str] = mapped_column(String(10), nullable=False)
    metadata_hash: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)


class BidAuditRecord(Base):
    """Ingested bid snapshot keyed by (tender, bid)."""

    __tablename__ = "bid_audits"

    tender_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    bid_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    bidder: Mapped[str] = mapped_column(String(128), nullable=False)
    bid_hash: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
    submission_time: Mapped[int] = mapped_column(BigInteger, nullable=False)
    reveal_time: Mapped[int] = mapped_column(BigInteger, nullable=False)
    score: Mapped[int] = mapped_column(BigInteger, nullable=False)
    # "metadata" is reserved on declarative classes
    bid_metadata: Mapped[str] = mapped_column("metadata", Text, nullable=False, default="")


class VerificationRequestRecord(Base):
    """Verification request over a tender or bid snapshot."""

    __tablename__ = "verification_requests"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    requester: Mapped[str] = mapped_column(String(128), nullable=False)
    tender_id: Mapped[int] = mapped_column(Integer, nullable=False)
    bid_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    request_time: Mapped[int] = mapped_column(BigInteger, nullable=False)
    verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        Index("ix_verification_target", "tender_id", "bid_id"),
    )


# =============================================================================
# Fee Transfers
# =============================================================================


class FeeTransferRecord(Base):
    """Fee transfer in commit order (``seq``)."""

    __tablename__ = "fee_transfers"

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    sender: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    recipient: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    block_height: Mapped[int] = mapped_column(BigInteger, nullable=False)
    memo: Mapped[str | None] = mapped_column(String(100), nullable=True)


# =============================================================================
# Ledger State
# =============================================================================


class LedgerStateRecord(Base, TimestampMixin):
    """Block clock of the ledger environment at the last save."""

    __tablename__ = "ledger_state"

    key: Mapped[str] = mapped_column(String(20), primary_key=True, default="ledger")
    block_height: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<LedgerStateRecord(block_height={self.block_height})>"
