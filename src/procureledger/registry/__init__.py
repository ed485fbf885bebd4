"""Tender, bidder and audit registry components."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from procureledger.core.ledger import LedgerEnvironment

from .audit import AuditStore, AuditVerifier
from .bidders import BidderQualifier, BidderStore, evaluate_criteria
from .models import (
    BidAudit,
    Bidder,
    BidderQualification,
    BidderStatus,
    QualificationCriteria,
    QualificationTag,
    Tender,
    TenderAudit,
    TenderCategory,
    TenderStatus,
    TenderUpdate,
    VerificationRequest,
)
from .tenders import TenderRegistry, TenderStore

if TYPE_CHECKING:
    from procureledger.core.config.models import AppConfig


@dataclass
class ProcurementRegistry:
    """The three components wired to one ledger environment.

    They never call into each other; coupling is by shared id values only.
    """

    env: LedgerEnvironment
    tenders: TenderRegistry
    bidders: BidderQualifier
    audit: AuditVerifier


def build_registries(
    config: AppConfig | None = None,
    env: LedgerEnvironment | None = None,
    strict_authority: bool | None = None,
) -> ProcurementRegistry:
    """Create fresh stores from configuration and wire the components.

    Args:
        config: Application configuration (defaults if omitted)
        env: Shared ledger environment (created from config if omitted)
        strict_authority: Require caller == authority for gated operations
            (falls back to ``config.ledger.strict_authority``)

    Returns:
        ProcurementRegistry bundle
    """
    from procureledger.core.config.models import AppConfig

    config = config or AppConfig()
    if env is None:
        env = LedgerEnvironment(block_height=config.ledger.initial_block_height)
    burn = config.ledger.burn_address
    if strict_authority is None:
        strict_authority = config.ledger.strict_authority

    return ProcurementRegistry(
        env=env,
        tenders=TenderRegistry(TenderStore.from_config(config.tenders, burn), env, strict_authority),
        bidders=BidderQualifier(BidderStore.from_config(config.bidders, burn), env, strict_authority),
        audit=AuditVerifier(AuditStore.from_config(config.audit, burn), env, strict_authority),
    )


__all__ = [
    # Components
    "TenderRegistry",
    "BidderQualifier",
    "AuditVerifier",
    "ProcurementRegistry",
    "build_registries",
    # Stores
    "TenderStore",
    "BidderStore",
    "AuditStore",
    # Records
    "Tender",
    "TenderUpdate",
    "Bidder",
    "QualificationCriteria",
    "BidderQualification",
    "TenderAudit",
    "BidAudit",
    "VerificationRequest",
    # Enums
    "TenderStatus",
    "TenderCategory",
    "BidderStatus",
    "QualificationTag",
    # Helpers
    "evaluate_criteria",
]
