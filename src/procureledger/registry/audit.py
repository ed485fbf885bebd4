"""
Audit verifier.

Keeps read-only audit snapshots of tenders and bids, ingested from
outside, and verification requests that an authority later confirms.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from procureledger.core.errors import AuditError
from procureledger.core.ledger import DEFAULT_BURN_ADDRESS, AuthoritySlot, LedgerEnvironment
from procureledger.core.result import Result

from .base import RegistryComponent
from .models import BidAudit, TenderAudit, TenderStatus, VerificationRequest

if TYPE_CHECKING:
    from procureledger.core.config.models import AuditVerifierConfig

# (tender_id, bid_id)
BidKey = tuple[int, int]


# =============================================================================
# Store
# =============================================================================


@dataclass
class AuditStore:
    """State owned by the audit verifier."""

    request_counter: int = 0
    max_queries: int = 1000
    authority: AuthoritySlot = field(default_factory=AuthoritySlot)
    tender_audits: dict[int, TenderAudit] = field(default_factory=dict)
    bid_audits: dict[BidKey, BidAudit] = field(default_factory=dict)
    verification_requests: dict[int, VerificationRequest] = field(default_factory=dict)

    @classmethod
    def from_config(
        cls,
        config: AuditVerifierConfig,
        burn_address: str = DEFAULT_BURN_ADDRESS,
    ) -> "AuditStore":
        return cls(
            max_queries=config.max_queries,
            authority=AuthoritySlot(burn_address=burn_address),
        )


# =============================================================================
# Verifier
# =============================================================================


class AuditVerifier(RegistryComponent):
    """Verification requests over ingested tender and bid snapshots.

    ``verify_request`` only requires that an authority is installed; pass
    ``strict_authority=True`` to also require the caller to be it.
    """

    component = "audit"
    errors = AuditError
    burn_principal_code = AuditError.INVALID_PRINCIPAL

    store: AuditStore

    def __init__(
        self,
        store: AuditStore | None = None,
        env: LedgerEnvironment | None = None,
        strict_authority: bool = False,
    ) -> None:
        super().__init__(store if store is not None else AuditStore(), env, strict_authority)

    def set_max_queries(self, new_max: int) -> Result[bool]:
        return self._set_threshold("set_max_queries", "max_queries", new_max, minimum=1)

    # -------------------------------------------------------------------------
    # Snapshot ingestion
    # -------------------------------------------------------------------------

    def record_tender_audit(self, audit: TenderAudit) -> Result[bool]:
        """Install or refresh the audit snapshot of a tender."""
        op = "record_tender_audit"

        if audit.tender_id <= 0:
            return self._reject(op, AuditError.INVALID_TENDER_ID)
        if len(audit.metadata_hash) == 0:
            return self._reject(op, AuditError.INVALID_HASH)
        try:
            status = TenderStatus(audit.status)
        except ValueError:
            return self._reject(op, AuditError.INVALID_STATUS)

        self.store.tender_audits[audit.tender_id] = replace(
            audit,
            status=status,
            metadata_hash=bytes(audit.metadata_hash),
        )
        self.log.debug("Tender audit %d recorded", audit.tender_id)
        return Result.success(True)

    def record_bid_audit(self, tender_id: int, bid_id: int, audit: BidAudit) -> Result[bool]:
        """Install or refresh the audit snapshot of a bid."""
        op = "record_bid_audit"

        if tender_id <= 0:
            return self._reject(op, AuditError.INVALID_TENDER_ID)
        if bid_id <= 0:
            return self._reject(op, AuditError.INVALID_BID_ID)
        if len(audit.bid_hash) == 0:
            return self._reject(op, AuditError.INVALID_HASH)

        self.store.bid_audits[(tender_id, bid_id)] = replace(audit, bid_hash=bytes(audit.bid_hash))
        self.log.debug("Bid audit %d/%d recorded", tender_id, bid_id)
        return Result.success(True)

    # -------------------------------------------------------------------------
    # Verification requests
    # -------------------------------------------------------------------------

    def request_tender_verification(self, tender_id: int) -> Result[int]:
        """Open a verification request for a tender snapshot.

        Returns:
            Result carrying the new request id
        """
        op = "request_tender_verification"

        if tender_id <= 0:
            return self._reject(op, AuditError.INVALID_TENDER_ID)
        if self.store.request_counter >= self.store.max_queries:
            return self._reject(op, AuditError.DUPLICATE_QUERY)
        if tender_id not in self.store.tender_audits:
            return self._reject(op, AuditError.NO_TENDER_DATA)

        return Result.success(self._open_request(tender_id, None))

    def request_bid_verification(self, tender_id: int, bid_id: int) -> Result[int]:
        """Open a verification request for a bid snapshot.

        Returns:
            Result carrying the new request id
        """
        op = "request_bid_verification"

        if tender_id <= 0:
            return self._reject(op, AuditError.INVALID_TENDER_ID)
        if bid_id <= 0:
            return self._reject(op, AuditError.INVALID_BID_ID)
        if self.store.request_counter >= self.store.max_queries:
            return self._reject(op, AuditError.DUPLICATE_QUERY)
        if (tender_id, bid_id) not in self.store.bid_audits:
            return self._reject(op, AuditError.NO_BID_DATA)

        return Result.success(self._open_request(tender_id, bid_id))

    def _open_request(self, tender_id: int, bid_id: int | None) -> int:
        request_id = self.store.request_counter
        self.store.verification_requests[request_id] = VerificationRequest(
            requester=self.env.caller,
            tender_id=tender_id,
            bid_id=bid_id,
            request_time=self.env.block_height,
            verified=False,
        )
        self.store.request_counter += 1

        target = f"tender {tender_id}" if bid_id is None else f"bid {tender_id}/{bid_id}"
        self.log.info("Verification request %d opened for %s", request_id, target)
        return request_id

    def verify_request(self, request_id: int) -> Result[bool]:
        """Confirm a pending verification request. Verifying twice is an error."""
        op = "verify_request"

        request = self.store.verification_requests.get(request_id)
        if request is None:
            return self._reject(op, AuditError.INVALID_REQUEST_ID)
        if not self._authorized():
            return self._reject(op, AuditError.NOT_AUTHORIZED)
        if request.verified:
            return self._reject(op, AuditError.INVALID_VERIFICATION)

        self.store.verification_requests[request_id] = replace(request, verified=True)

        self.log.info("Verification request %d confirmed", request_id)
        return Result.success(True)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get_tender_audit(self, tender_id: int) -> TenderAudit | None:
        return self.store.tender_audits.get(tender_id)

    def get_bid_audit(self, tender_id: int, bid_id: int) -> BidAudit | None:
        return self.store.bid_audits.get((tender_id, bid_id))

    def get_verification_request(self, request_id: int) -> VerificationRequest | None:
        return self.store.verification_requests.get(request_id)

    def get_request_count(self) -> Result[int]:
        return Result.success(self.store.request_counter)

    def get_max_queries(self) -> int:
        return self.store.max_queries
