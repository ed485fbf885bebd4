"""Database persistence layer."""

from .db import dispose_engines, drop_db, get_engine, get_session, init_db
from .models import (
    Base,
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
from .repo import (
    AuditStoreRepository,
    BidderStoreRepository,
    LedgerStateRepository,
    TenderStoreRepository,
    TransferRepository,
    load_registry,
    save_registry,
)

__all__ = [
    "get_engine",
    "get_session",
    "init_db",
    "drop_db",
    "dispose_engines",
    "Base",
    "RegistrySettings",
    "TenderRecord",
    "TenderUpdateRecord",
    "BidderRecord",
    "QualificationCriteriaRecord",
    "BidderQualificationRecord",
    "TenderAuditRecord",
    "BidAuditRecord",
    "VerificationRequestRecord",
    "FeeTransferRecord",
    "LedgerStateRecord",
    "TenderStoreRepository",
    "BidderStoreRepository",
    "AuditStoreRepository",
    "TransferRepository",
    "LedgerStateRepository",
    "save_registry",
    "load_registry",
]
