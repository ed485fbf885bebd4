"""
Tender registry.

Source of truth for tender records. Other components reference tenders
only by id.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from procureledger.core.errors import TenderError
from procureledger.core.ledger import DEFAULT_BURN_ADDRESS, AuthoritySlot, LedgerEnvironment
from procureledger.core.result import Result

from .base import RegistryComponent
from .models import Tender, TenderCategory, TenderStatus, TenderUpdate

if TYPE_CHECKING:
    from procureledger.core.config.models import TenderRegistryConfig

TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500
ELIGIBILITY_MAX_LENGTH = 200


def _within(text: str, max_length: int) -> bool:
    return 0 < len(text) <= max_length


def _parse_category(category: str | TenderCategory) -> TenderCategory | None:
    try:
        return TenderCategory(category)
    except ValueError:
        return None


# =============================================================================
# Store
# =============================================================================


@dataclass
class TenderStore:
    """State owned by the tender registry."""

    next_tender_id: int = 0
    max_tenders: int = 500
    registration_fee: int = 500
    authority: AuthoritySlot = field(default_factory=AuthoritySlot)
    tenders: dict[int, Tender] = field(default_factory=dict)
    tenders_by_title: dict[str, int] = field(default_factory=dict)
    tender_updates: dict[int, TenderUpdate] = field(default_factory=dict)

    @classmethod
    def from_config(
        cls,
        config: TenderRegistryConfig,
        burn_address: str = DEFAULT_BURN_ADDRESS,
    ) -> "TenderStore":
        return cls(
            max_tenders=config.max_tenders,
            registration_fee=config.registration_fee,
            authority=AuthoritySlot(burn_address=burn_address),
        )


# =============================================================================
# Registry
# =============================================================================


class TenderRegistry(RegistryComponent):
    """Tender lifecycle: create, edit, close."""

    component = "tenders"
    errors = TenderError

    store: TenderStore

    def __init__(
        self,
        store: TenderStore | None = None,
        env: LedgerEnvironment | None = None,
        strict_authority: bool = False,
    ) -> None:
        super().__init__(store if store is not None else TenderStore(), env, strict_authority)

    # -------------------------------------------------------------------------
    # Authority settings
    # -------------------------------------------------------------------------

    def set_max_tenders(self, new_max: int) -> Result[bool]:
        return self._set_threshold("set_max_tenders", "max_tenders", new_max, minimum=1)

    def set_registration_fee(self, new_fee: int) -> Result[bool]:
        return self._set_threshold("set_registration_fee", "registration_fee", new_fee, minimum=0)

    # -------------------------------------------------------------------------
    # Tender lifecycle
    # -------------------------------------------------------------------------

    def create_tender(
        self,
        title: str,
        description: str,
        deadline: int,
        eligibility: str,
        budget: int,
        category: str | TenderCategory,
        metadata_hash: bytes,
    ) -> Result[int]:
        """Create a tender owned by the caller.

        Args:
            title: Unique title, 1-100 characters
            description: 1-500 characters
            deadline: Block height strictly after the current one
            eligibility: 1-200 characters
            budget: Positive amount
            category: One of infrastructure, services, goods
            metadata_hash: Non-empty hash of off-ledger documents

        Returns:
            Result carrying the new tender id
        """
        store = self.store
        op = "create_tender"

        if store.next_tender_id >= store.max_tenders:
            return self._reject(op, TenderError.MAX_TENDERS_EXCEEDED)
        if not _within(title, TITLE_MAX_LENGTH):
            return self._reject(op, TenderError.INVALID_TITLE)
        if not _within(description, DESCRIPTION_MAX_LENGTH):
            return self._reject(op, TenderError.INVALID_DESCRIPTION)
        if deadline <= self.env.block_height:
            return self._reject(op, TenderError.INVALID_DEADLINE)
        if not _within(eligibility, ELIGIBILITY_MAX_LENGTH):
            return self._reject(op, TenderError.INVALID_ELIGIBILITY)
        if budget <= 0:
            return self._reject(op, TenderError.INVALID_BUDGET)
        parsed_category = _parse_category(category)
        if parsed_category is None:
            return self._reject(op, TenderError.INVALID_CATEGORY)
        if len(metadata_hash) == 0:
            return self._reject(op, TenderError.INVALID_METADATA_HASH)
        if title in store.tenders_by_title:
            return self._reject(op, TenderError.TENDER_ALREADY_EXISTS)

        self._charge_fee(store.registration_fee, memo="tender-registration")

        tender_id = store.next_tender_id
        store.tenders[tender_id] = Tender(
            id=tender_id,
            title=title,
            description=description,
            creator=self.env.caller,
            deadline=deadline,
            eligibility=eligibility,
            budget=budget,
            category=parsed_category,
            status=TenderStatus.OPEN,
            created_at=self.env.block_height,
            metadata_hash=bytes(metadata_hash),
        )
        store.tenders_by_title[title] = tender_id
        store.next_tender_id += 1

        self.log.info("Tender %d created: %s", tender_id, title)
        return Result.success(tender_id)

    def update_tender(
        self,
        tender_id: int,
        new_title: str,
        new_description: str,
        new_deadline: int,
    ) -> Result[bool]:
        """Edit title, description and deadline. Creator only."""
        store = self.store
        op = "update_tender"

        tender = store.tenders.get(tender_id)
        if tender is None:
            return self._reject(op, TenderError.TENDER_NOT_FOUND)
        if tender.creator != self.env.caller:
            return self._reject(op, TenderError.NOT_AUTHORIZED)
        if not _within(new_title, TITLE_MAX_LENGTH):
            return self._reject(op, TenderError.INVALID_TITLE)
        if not _within(new_description, DESCRIPTION_MAX_LENGTH):
            return self._reject(op, TenderError.INVALID_DESCRIPTION)
        if new_deadline <= self.env.block_height:
            return self._reject(op, TenderError.INVALID_DEADLINE)
        holder = store.tenders_by_title.get(new_title)
        if holder is not None and holder != tender_id:
            return self._reject(op, TenderError.TENDER_ALREADY_EXISTS)

        if new_title != tender.title:
            del store.tenders_by_title[tender.title]
            store.tenders_by_title[new_title] = tender_id

        store.tenders[tender_id] = replace(
            tender,
            title=new_title,
            description=new_description,
            deadline=new_deadline,
        )
        store.tender_updates[tender_id] = TenderUpdate(
            updated_title=new_title,
            updated_description=new_description,
            updated_deadline=new_deadline,
            updated_by=self.env.caller,
            updated_at=self.env.block_height,
        )

        self.log.info("Tender %d updated", tender_id)
        return Result.success(True)

    def close_tender(self, tender_id: int) -> Result[bool]:
        """Close an open tender. Creator only; closing is terminal."""
        op = "close_tender"

        tender = self.store.tenders.get(tender_id)
        if tender is None:
            return self._reject(op, TenderError.TENDER_NOT_FOUND)
        if tender.creator != self.env.caller:
            return self._reject(op, TenderError.NOT_AUTHORIZED)
        if not tender.is_open:
            return self._reject(op, TenderError.INVALID_STATUS)

        self.store.tenders[tender_id] = replace(tender, status=TenderStatus.CLOSED)

        self.log.info("Tender %d closed", tender_id)
        return Result.success(True)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get_tender(self, tender_id: int) -> Tender | None:
        return self.store.tenders.get(tender_id)

    def get_tender_count(self) -> Result[int]:
        return Result.success(self.store.next_tender_id)

    def get_tender_update(self, tender_id: int) -> TenderUpdate | None:
        """Last edit recorded for a tender, if it was ever updated."""
        return self.store.tender_updates.get(tender_id)

    def get_tender_id_by_title(self, title: str) -> int | None:
        return self.store.tenders_by_title.get(title)

    def get_registration_fee(self) -> int:
        return self.store.registration_fee

    def get_max_tenders(self) -> int:
        return self.store.max_tenders
