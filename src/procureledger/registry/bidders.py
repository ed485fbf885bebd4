"""
Bidder qualifier.

Holds bidder registrations and per-tender qualification criteria, and
evaluates bidders against those criteria. Tender ids are opaque here:
nothing is read from the tender registry.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from procureledger.core.errors import BidderError
from procureledger.core.ledger import DEFAULT_BURN_ADDRESS, AuthoritySlot, LedgerEnvironment
from procureledger.core.result import Result

from .base import RegistryComponent
from .models import (
    Bidder,
    BidderQualification,
    BidderStatus,
    QualificationCriteria,
    QualificationTag,
)

if TYPE_CHECKING:
    from procureledger.core.config.models import BidderQualifierConfig

# (bidder_id, tender_id)
QualificationKey = tuple[int, int]


def _parse_status(status: str | BidderStatus) -> BidderStatus | None:
    try:
        return BidderStatus(status)
    except ValueError:
        return None


def evaluate_criteria(bidder: Bidder, criteria: QualificationCriteria) -> dict[str, bool]:
    """Evaluate the three qualification predicates independently.

    The license check is a byte-exact comparison of the bidder's license
    hash against the criteria's reference document hash.
    """
    return {
        "financial": bidder.financial_proof >= criteria.min_financial,
        "experience": bidder.experience_years >= criteria.min_experience,
        "license": bytes(bidder.license_hash) == bytes(criteria.doc_hash),
    }


# =============================================================================
# Store
# =============================================================================


@dataclass
class BidderStore:
    """State owned by the bidder qualifier."""

    next_bidder_id: int = 0
    max_bidders: int = 1000
    qualification_fee: int = 200
    authority: AuthoritySlot = field(default_factory=AuthoritySlot)
    bidders: dict[int, Bidder] = field(default_factory=dict)
    bidders_by_principal: dict[str, int] = field(default_factory=dict)
    qualification_criteria: dict[int, QualificationCriteria] = field(default_factory=dict)
    bidder_qualifications: dict[QualificationKey, BidderQualification] = field(default_factory=dict)

    @classmethod
    def from_config(
        cls,
        config: BidderQualifierConfig,
        burn_address: str = DEFAULT_BURN_ADDRESS,
    ) -> "BidderStore":
        return cls(
            max_bidders=config.max_bidders,
            qualification_fee=config.qualification_fee,
            authority=AuthoritySlot(burn_address=burn_address),
        )


# =============================================================================
# Qualifier
# =============================================================================


class BidderQualifier(RegistryComponent):
    """Bidder registration and per-tender qualification."""

    component = "bidders"
    errors = BidderError

    store: BidderStore

    def __init__(
        self,
        store: BidderStore | None = None,
        env: LedgerEnvironment | None = None,
        strict_authority: bool = False,
    ) -> None:
        super().__init__(store if store is not None else BidderStore(), env, strict_authority)

    # -------------------------------------------------------------------------
    # Authority settings
    # -------------------------------------------------------------------------

    def set_max_bidders(self, new_max: int) -> Result[bool]:
        return self._set_threshold("set_max_bidders", "max_bidders", new_max, minimum=1)

    def set_qualification_fee(self, new_fee: int) -> Result[bool]:
        return self._set_threshold("set_qualification_fee", "qualification_fee", new_fee, minimum=0)

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    def register_bidder(
        self,
        qualification_hash: bytes,
        proof_hash: bytes,
        financial_proof: int,
        license_hash: bytes,
        experience_years: int,
    ) -> Result[int]:
        """Register the caller as a bidder.

        Each principal may register once. When an authority is installed
        the qualification fee is charged to the caller.

        Returns:
            Result carrying the new bidder id
        """
        store = self.store
        op = "register_bidder"

        if store.next_bidder_id >= store.max_bidders:
            return self._reject(op, BidderError.MAX_BIDDERS_EXCEEDED)
        if len(qualification_hash) == 0:
            return self._reject(op, BidderError.INVALID_QUALIFICATION_HASH)
        if len(proof_hash) == 0:
            return self._reject(op, BidderError.INVALID_PROOF_HASH)
        if financial_proof <= 0:
            return self._reject(op, BidderError.INVALID_FINANCIAL_PROOF)
        if len(license_hash) == 0:
            return self._reject(op, BidderError.INVALID_LICENSE)
        if experience_years < 0:
            return self._reject(op, BidderError.INVALID_EXPERIENCE)
        if self.env.caller in store.bidders_by_principal:
            return self._reject(op, BidderError.BIDDER_ALREADY_REGISTERED)

        self._charge_fee(store.qualification_fee, memo="bidder-qualification")

        bidder_id = store.next_bidder_id
        store.bidders[bidder_id] = Bidder(
            id=bidder_id,
            principal=self.env.caller,
            qualification_hash=bytes(qualification_hash),
            proof_hash=bytes(proof_hash),
            financial_proof=financial_proof,
            license_hash=bytes(license_hash),
            experience_years=experience_years,
            status=BidderStatus.PENDING,
            registered_at=self.env.block_height,
        )
        store.bidders_by_principal[self.env.caller] = bidder_id
        store.next_bidder_id += 1

        self.log.info("Bidder %d registered", bidder_id)
        return Result.success(bidder_id)

    # -------------------------------------------------------------------------
    # Criteria and qualification
    # -------------------------------------------------------------------------

    def set_qualification_criteria(
        self,
        tender_id: int,
        min_financial: int,
        required_license: str,
        min_experience: int,
        doc_hash: bytes,
    ) -> Result[bool]:
        """Install (or replace) the criteria for a tender. Authority only."""
        op = "set_qualification_criteria"

        if not self._authorized():
            return self._reject(op, BidderError.NOT_AUTHORIZED)
        if min_financial <= 0:
            return self._reject(op, BidderError.INVALID_FINANCIAL_PROOF)
        if min_experience < 0:
            return self._reject(op, BidderError.INVALID_EXPERIENCE)
        if len(doc_hash) == 0:
            return self._reject(op, BidderError.INVALID_DOC_HASH)

        self.store.qualification_criteria[tender_id] = QualificationCriteria(
            tender_id=tender_id,
            min_financial=min_financial,
            required_license=required_license,
            min_experience=min_experience,
            doc_hash=bytes(doc_hash),
            set_by=self.env.caller,
            set_at=self.env.block_height,
        )

        self.log.info("Qualification criteria set for tender %d", tender_id)
        return Result.success(True)

    def qualify_bidder_for_tender(self, bidder_id: int, tender_id: int) -> Result[bool]:
        """Evaluate a pending bidder against a tender's criteria.

        Only the bidder's own principal may request evaluation. The bidder
        ends in ``qualified`` or ``rejected``; both are terminal for this
        operation.

        Returns:
            Result carrying whether the bidder qualified
        """
        store = self.store
        op = "qualify_bidder_for_tender"

        bidder = store.bidders.get(bidder_id)
        if bidder is None:
            return self._reject(op, BidderError.BIDDER_NOT_FOUND)
        criteria = store.qualification_criteria.get(tender_id)
        if criteria is None:
            return self._reject(op, BidderError.INVALID_CRITERIA)
        if bidder.principal != self.env.caller:
            return self._reject(op, BidderError.NOT_AUTHORIZED)
        if bidder.status != BidderStatus.PENDING:
            return self._reject(op, BidderError.INVALID_STATUS)

        checks = evaluate_criteria(bidder, criteria)
        qualified = all(checks.values())

        store.bidders[bidder_id] = replace(
            bidder,
            status=BidderStatus.QUALIFIED if qualified else BidderStatus.REJECTED,
        )
        store.bidder_qualifications[(bidder_id, tender_id)] = BidderQualification(
            qualified=qualified,
            criteria_met=QualificationTag.ALL_CRITERIA_MET if qualified else QualificationTag.PARTIAL_MATCH,
            qualified_at=self.env.block_height,
        )

        failed = [name for name, passed in checks.items() if not passed]
        if qualified:
            self.log.info("Bidder %d qualified for tender %d", bidder_id, tender_id)
        else:
            self.log.info(
                "Bidder %d rejected for tender %d (failed: %s)",
                bidder_id,
                tender_id,
                ", ".join(failed),
            )
        return Result.success(qualified)

    def update_bidder_status(self, bidder_id: int, new_status: str | BidderStatus) -> Result[bool]:
        """Administrative status override. Authority only.

        Unlike ``qualify_bidder_for_tender`` this may move a bidder out of a
        terminal status, including back to ``pending``.
        """
        op = "update_bidder_status"

        bidder = self.store.bidders.get(bidder_id)
        if bidder is None:
            return self._reject(op, BidderError.BIDDER_NOT_FOUND)
        if not self._authorized():
            return self._reject(op, BidderError.NOT_AUTHORIZED)
        status = _parse_status(new_status)
        if status is None:
            return self._reject(op, BidderError.INVALID_STATUS)

        self.store.bidders[bidder_id] = replace(bidder, status=status)

        self.log.info("Bidder %d status overridden: %s -> %s", bidder_id, bidder.status.value, status.value)
        return Result.success(True)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get_bidder(self, bidder_id: int) -> Bidder | None:
        return self.store.bidders.get(bidder_id)

    def get_bidder_count(self) -> Result[int]:
        return Result.success(self.store.next_bidder_id)

    def get_bidder_by_principal(self, principal: str) -> Bidder | None:
        bidder_id = self.store.bidders_by_principal.get(principal)
        return None if bidder_id is None else self.store.bidders.get(bidder_id)

    def get_qualification_criteria(self, tender_id: int) -> QualificationCriteria | None:
        return self.store.qualification_criteria.get(tender_id)

    def get_bidder_qualification(self, bidder_id: int, tender_id: int) -> BidderQualification | None:
        """Stored outcome for the (bidder, tender) pair, if evaluated."""
        return self.store.bidder_qualifications.get((bidder_id, tender_id))

    def get_qualification_fee(self) -> int:
        return self.store.qualification_fee

    def get_max_bidders(self) -> int:
        return self.store.max_bidders
