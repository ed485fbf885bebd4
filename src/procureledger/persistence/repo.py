"""
Repository pattern for registry snapshots.

Each repository replaces the persisted snapshot of one registry store on
``save`` and rebuilds an equivalent store (records, secondary indices,
counters, authority slot) on ``load``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from procureledger.core.ledger import AuthoritySlot, FeeTransfer, TransferLog
from procureledger.core.logging import get_logger
from procureledger.registry.audit import AuditStore
from procureledger.registry.bidders import BidderStore
from procureledger.registry.models import (
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
from procureledger.registry.tenders import TenderStore

from .models import (
    BidAuditRecord,
    BidderQualificationRecord,
    BidderRecord,
    FeeTransferRecord,
    LedgerStateRecord,
    QualificationCriteriaRecord,
    RegistrySettings,
    TenderAuditRecord,
    TenderRecord,
    TenderUpdateRecord,
    VerificationRequestRecord,
)

if TYPE_CHECKING:
    from procureledger.core.ledger import LedgerEnvironment
    from procureledger.registry import ProcurementRegistry

logger = get_logger("persistence.repo")


# =============================================================================
# Settings helpers
# =============================================================================


class _SettingsMixin:
    """Shared access to the ``registry_settings`` row of a component."""

    component: str
    session: Session

    def _get_settings(self) -> RegistrySettings | None:
        return self.session.get(RegistrySettings, self.component)

    def _save_settings(
        self,
        next_id: int,
        capacity: int,
        fee: int | None,
        authority: AuthoritySlot,
    ) -> RegistrySettings:
        settings = self._get_settings()
        if settings is None:
            settings = RegistrySettings(component=self.component)
            self.session.add(settings)

        settings.next_id = next_id
        settings.capacity = capacity
        settings.fee = fee
        settings.burn_address = authority.burn_address
        settings.authority_present = authority.present
        settings.authority_principal = authority.principal
        return settings

    @staticmethod
    def _authority_from(settings: RegistrySettings) -> AuthoritySlot:
        return AuthoritySlot(
            burn_address=settings.burn_address,
            present=settings.authority_present,
            principal=settings.authority_principal,
        )

    def exists(self) -> bool:
        """Check if a snapshot of this component has been saved."""
        return self._get_settings() is not None


# =============================================================================
# Tender Store Repository
# =============================================================================


class TenderStoreRepository(_SettingsMixin):
    """Snapshot persistence for ``TenderStore``."""

    component = "tenders"

    def __init__(self, session: Session):
        self.session = session

    def save(self, store: TenderStore) -> None:
        """Replace the persisted tender snapshot with ``store``."""
        self.session.execute(delete(TenderUpdateRecord))
        self.session.execute(delete(TenderRecord))

        self.session.add_all(
            TenderRecord(
                id=t.id,
                title=t.title,
                description=t.description,
                creator=t.creator,
                deadline=t.deadline,
                eligibility=t.eligibility,
                budget=t.budget,
                category=t.category.value,
                status=t.status.value,
                created_at=t.created_at,
                metadata_hash=t.metadata_hash,
            )
            for t in store.tenders.values()
        )
        # Parent rows must exist before update slots reference them
        self.session.flush()
        self.session.add_all(
            TenderUpdateRecord(
                tender_id=tender_id,
                updated_title=u.updated_title,
                updated_description=u.updated_description,
                updated_deadline=u.updated_deadline,
                updated_by=u.updated_by,
                updated_at=u.updated_at,
            )
            for tender_id, u in store.tender_updates.items()
        )
        self._save_settings(
            next_id=store.next_tender_id,
            capacity=store.max_tenders,
            fee=store.registration_fee,
            authority=store.authority,
        )
        self.session.flush()
        logger.debug("Saved %d tenders", len(store.tenders))

    def load(self) -> TenderStore | None:
        """Rebuild the tender store, or None if nothing was saved."""
        settings = self._get_settings()
        if settings is None:
            return None

        store = TenderStore(
            next_tender_id=settings.next_id,
            max_tenders=settings.capacity,
            registration_fee=settings.fee or 0,
            authority=self._authority_from(settings),
        )

        for row in self.session.execute(select(TenderRecord).order_by(TenderRecord.id)).scalars():
            store.tenders[row.id] = Tender(
                id=row.id,
                title=row.title,
                description=row.description,
                creator=row.creator,
                deadline=row.deadline,
                eligibility=row.eligibility,
                budget=row.budget,
                category=TenderCategory(row.category),
                status=TenderStatus(row.status),
                created_at=row.created_at,
                metadata_hash=bytes(row.metadata_hash),
            )
            store.tenders_by_title[row.title] = row.id

        for row in self.session.execute(select(TenderUpdateRecord)).scalars():
            store.tender_updates[row.tender_id] = TenderUpdate(
                updated_title=row.updated_title,
                updated_description=row.updated_description,
                updated_deadline=row.updated_deadline,
                updated_by=row.updated_by,
                updated_at=row.updated_at,
            )

        return store


# =============================================================================
# Bidder Store Repository
# =============================================================================


class BidderStoreRepository(_SettingsMixin):
    """Snapshot persistence for ``BidderStore``."""

    component = "bidders"

    def __init__(self, session: Session):
        self.session = session

    def save(self, store: BidderStore) -> None:
        """Replace the persisted bidder snapshot with ``store``."""
        self.session.execute(delete(BidderQualificationRecord))
        self.session.execute(delete(QualificationCriteriaRecord))
        self.session.execute(delete(BidderRecord))

        self.session.add_all(
            BidderRecord(
                id=b.id,
                principal=b.principal,
                qualification_hash=b.qualification_hash,
                proof_hash=b.proof_hash,
                financial_proof=b.financial_proof,
                license_hash=b.license_hash,
                experience_years=b.experience_years,
                status=b.status.value,
                registered_at=b.registered_at,
            )
            for b in store.bidders.values()
        )
        self.session.add_all(
            QualificationCriteriaRecord(
                tender_id=c.tender_id,
                min_financial=c.min_financial,
                required_license=c.required_license,
                min_experience=c.min_experience,
                doc_hash=c.doc_hash,
                set_by=c.set_by,
                set_at=c.set_at,
            )
            for c in store.qualification_criteria.values()
        )
        self.session.flush()
        self.session.add_all(
            BidderQualificationRecord(
                bidder_id=bidder_id,
                tender_id=tender_id,
                qualified=q.qualified,
                criteria_met=q.criteria_met.value,
                qualified_at=q.qualified_at,
            )
            for (bidder_id, tender_id), q in store.bidder_qualifications.items()
        )
        self._save_settings(
            next_id=store.next_bidder_id,
            capacity=store.max_bidders,
            fee=store.qualification_fee,
            authority=store.authority,
        )
        self.session.flush()
        logger.debug("Saved %d bidders", len(store.bidders))

    def load(self) -> BidderStore | None:
        """Rebuild the bidder store, or None if nothing was saved."""
        settings = self._get_settings()
        if settings is None:
            return None

        store = BidderStore(
            next_bidder_id=settings.next_id,
            max_bidders=settings.capacity,
            qualification_fee=settings.fee or 0,
            authority=self._authority_from(settings),
        )

        for row in self.session.execute(select(BidderRecord).order_by(BidderRecord.id)).scalars():
            store.bidders[row.id] = Bidder(
                id=row.id,
                principal=row.principal,
                qualification_hash=bytes(row.qualification_hash),
                proof_hash=bytes(row.proof_hash),
                financial_proof=row.financial_proof,
                license_hash=bytes(row.license_hash),
                experience_years=row.experience_years,
                status=BidderStatus(row.status),
                registered_at=row.registered_at,
            )
            store.bidders_by_principal[row.principal] = row.id

        for row in self.session.execute(select(QualificationCriteriaRecord)).scalars():
            store.qualification_criteria[row.tender_id] = QualificationCriteria(
                tender_id=row.tender_id,
                min_financial=row.min_financial,
                required_license=row.required_license,
                min_experience=row.min_experience,
                doc_hash=bytes(row.doc_hash),
                set_by=row.set_by,
                set_at=row.set_at,
            )

        for row in self.session.execute(select(BidderQualificationRecord)).scalars():
            store.bidder_qualifications[(row.bidder_id, row.tender_id)] = BidderQualification(
                qualified=row.qualified,
                criteria_met=QualificationTag(row.criteria_met),
                qualified_at=row.qualified_at,
            )

        return store


# =============================================================================
# Audit Store Repository
# =============================================================================


class AuditStoreRepository(_SettingsMixin):
    """Snapshot persistence for ``AuditStore``."""

    component = "audit"

    def __init__(self, session: Session):
        self.session = session

    def save(self, store: AuditStore) -> None:
        """Replace the persisted audit snapshot with ``store``."""
        self.session.execute(delete(VerificationRequestRecord))
        self.session.execute(delete(BidAuditRecord))
        self.session.execute(delete(TenderAuditRecord))

        self.session.add_all(
            TenderAuditRecord(
                tender_id=a.tender_id,
                title=a.title,
                description=a.description,
                creator=a.creator,
                timestamp=a.timestamp,
                status=TenderStatus(a.status).value,
                metadata_hash=a.metadata_hash,
            )
            for a in store.tender_audits.values()
        )
        self.session.add_all(
            BidAuditRecord(
                tender_id=tender_id,
                bid_id=bid_id,
                bidder=a.bidder,
                bid_hash=a.bid_hash,
                submission_time=a.submission_time,
                reveal_time=a.reveal_time,
                score=a.score,
                bid_metadata=a.metadata,
            )
            for (tender_id, bid_id), a in store.bid_audits.items()
        )
        self.session.add_all(
            VerificationRequestRecord(
                id=request_id,
                requester=r.requester,
                tender_id=r.tender_id,
                bid_id=r.bid_id,
                request_time=r.request_time,
                verified=r.verified,
            )
            for request_id, r in store.verification_requests.items()
        )
        self._save_settings(
            next_id=store.request_counter,
            capacity=store.max_queries,
            fee=None,
            authority=store.authority,
        )
        self.session.flush()
        logger.debug("Saved %d verification requests", len(store.verification_requests))

    def load(self) -> AuditStore | None:
        """Rebuild the audit store, or None if nothing was saved."""
        settings = self._get_settings()
        if settings is None:
            return None

        store = AuditStore(
            request_counter=settings.next_id,
            max_queries=settings.capacity,
            authority=self._authority_from(settings),
        )

        for row in self.session.execute(select(TenderAuditRecord)).scalars():
            store.tender_audits[row.tender_id] = TenderAudit(
                tender_id=row.tender_id,
                title=row.title,
                description=row.description,
                creator=row.creator,
                timestamp=row.timestamp,
                status=TenderStatus(row.status),
                metadata_hash=bytes(row.metadata_hash),
            )

        for row in self.session.execute(select(BidAuditRecord)).scalars():
            store.bid_audits[(row.tender_id, row.bid_id)] = BidAudit(
                bidder=row.bidder,
                bid_hash=bytes(row.bid_hash),
                submission_time=row.submission_time,
                reveal_time=row.reveal_time,
                score=row.score,
                metadata=row.bid_metadata,
            )

        stmt = select(VerificationRequestRecord).order_by(VerificationRequestRecord.id)
        for row in self.session.execute(stmt).scalars():
            store.verification_requests[row.id] = VerificationRequest(
                requester=row.requester,
                tender_id=row.tender_id,
                bid_id=row.bid_id,
                request_time=row.request_time,
                verified=row.verified,
            )

        return store


# =============================================================================
# Transfer Repository
# =============================================================================


class TransferRepository:
    """Persistence for the fee-transfer log."""

    def __init__(self, session: Session):
        self.session = session

    def save(self, transfers: TransferLog) -> None:
        """Replace the persisted transfer log."""
        self.session.execute(delete(FeeTransferRecord))
        self.session.add_all(
            FeeTransferRecord(
                seq=seq,
                amount=t.amount,
                sender=t.sender,
                recipient=t.recipient,
                block_height=t.block_height,
                memo=t.memo,
            )
            for seq, t in enumerate(transfers)
        )
        self.session.flush()

    def load(self) -> TransferLog:
        stmt = select(FeeTransferRecord).order_by(FeeTransferRecord.seq)
        return TransferLog(
            [
                FeeTransfer(
                    amount=row.amount,
                    sender=row.sender,
                    recipient=row.recipient,
                    block_height=row.block_height,
                    memo=row.memo,
                )
                for row in self.session.execute(stmt).scalars()
            ]
        )

    def total_by_recipient(self) -> dict[str, int]:
        """Sum of persisted transfers grouped by recipient."""
        stmt = select(
            FeeTransferRecord.recipient,
            func.sum(FeeTransferRecord.amount),
        ).group_by(FeeTransferRecord.recipient)
        return {recipient: int(total) for recipient, total in self.session.execute(stmt).all()}


# =============================================================================
# Ledger State Repository
# =============================================================================


class LedgerStateRepository:
    """Persistence for the block clock of the ledger environment."""

    key = "ledger"

    def __init__(self, session: Session):
        self.session = session

    def save(self, env: LedgerEnvironment) -> None:
        state = self.session.get(LedgerStateRecord, self.key)
        if state is None:
            state = LedgerStateRecord(key=self.key)
            self.session.add(state)
        state.block_height = env.block_height
        self.session.flush()

    def load_block_height(self) -> int | None:
        """Saved block height, or None if the clock was never saved."""
        state = self.session.get(LedgerStateRecord, self.key)
        return None if state is None else state.block_height


# =============================================================================
# Whole-registry helpers
# =============================================================================


def save_registry(session: Session, registry: ProcurementRegistry) -> None:
    """Save all three stores, the transfer log and the block clock in one session."""
    TenderStoreRepository(session).save(registry.tenders.store)
    BidderStoreRepository(session).save(registry.bidders.store)
    AuditStoreRepository(session).save(registry.audit.store)
    TransferRepository(session).save(registry.env.transfers)
    LedgerStateRepository(session).save(registry.env)
    logger.info("Registry snapshot saved at block %d", registry.env.block_height)


def load_registry(
    session: Session,
    env: LedgerEnvironment | None = None,
    strict_authority: bool = False,
) -> ProcurementRegistry | None:
    """Rebuild all three components from a saved snapshot.

    The block clock of ``env`` is moved forward to the saved height if it
    is behind; it is never moved backwards.

    Returns:
        ProcurementRegistry, or None if no complete snapshot exists
    """
    from procureledger.core.ledger import LedgerEnvironment
    from procureledger.registry import (
        AuditVerifier,
        BidderQualifier,
        ProcurementRegistry,
        TenderRegistry,
    )

    tender_store = TenderStoreRepository(session).load()
    bidder_store = BidderStoreRepository(session).load()
    audit_store = AuditStoreRepository(session).load()
    if tender_store is None or bidder_store is None or audit_store is None:
        return None

    if env is None:
        env = LedgerEnvironment()
    env.transfers = TransferRepository(session).load()
    saved_height = LedgerStateRepository(session).load_block_height()
    if saved_height is not None and saved_height > env.block_height:
        env.block_height = saved_height

    return ProcurementRegistry(
        env=env,
        tenders=TenderRegistry(tender_store, env, strict_authority),
        bidders=BidderQualifier(bidder_store, env, strict_authority),
        audit=AuditVerifier(audit_store, env, strict_authority),
    )
