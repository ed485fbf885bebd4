"""
Registry service bootstrap.

Wires configuration, logging and the database around the in-memory
registries: load config → set up logging → open the database → restore
the last snapshot (or start fresh) → checkpoint on demand.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from procureledger.core.config.loader import load_app_config
from procureledger.core.config.models import AppConfig
from procureledger.core.ledger import LedgerEnvironment
from procureledger.core.logging import setup_logging
from procureledger.persistence.db import dispose_engines, get_session, init_db
from procureledger.persistence.repo import load_registry, save_registry
from procureledger.registry import ProcurementRegistry, build_registries

logger = logging.getLogger(__name__)


@dataclass
class CheckpointStats:
    """Counts captured at the last checkpoint."""

    tenders: int = 0
    bidders: int = 0
    verification_requests: int = 0
    transfers: int = 0
    saved_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        return {
            "tenders": self.tenders,
            "bidders": self.bidders,
            "verification_requests": self.verification_requests,
            "transfers": self.transfers,
            "saved_at": self.saved_at.isoformat(),
        }


class RegistryService:
    """Owns one ``ProcurementRegistry`` and its database snapshot.

    Usage:
        service = RegistryService.from_config_file("configs/app.yaml")
        registry = service.open()
        registry.tenders.create_tender(...)
        service.checkpoint()
        service.close()
    """

    def __init__(self, config: AppConfig | None = None, *, configure_logging: bool = True) -> None:
        """Initialize the service.

        Args:
            config: Application configuration (defaults if omitted)
            configure_logging: Install the configured handlers on the
                ``procureledger`` logger
        """
        self.config = config or AppConfig()
        self.configure_logging = configure_logging
        self.registry: ProcurementRegistry | None = None
        self.last_checkpoint: CheckpointStats | None = None

    @classmethod
    def from_config_file(cls, path: Path | str | None = None, **kwargs: Any) -> "RegistryService":
        return cls(load_app_config(path), **kwargs)

    def open(self) -> ProcurementRegistry:
        """Prepare logging and the database, then restore or build the registry."""
        if self.registry is not None:
            return self.registry

        config = self.config
        config.ensure_directories()

        if self.configure_logging:
            setup_logging(
                level=config.logging.level,
                log_file=config.logging.file,
                json_format=config.logging.json_format,
                rich_console=config.logging.rich_console,
            )

        init_db(
            config.database.url,
            echo=config.database.echo,
            pool_size=config.database.pool_size,
        )

        env = LedgerEnvironment(block_height=config.ledger.initial_block_height)
        with get_session() as session:
            registry = load_registry(session, env=env, strict_authority=config.ledger.strict_authority)

        if registry is None:
            logger.info("No saved snapshot, starting with empty registries")
            registry = build_registries(config, env=env)
        else:
            logger.info(
                "Restored snapshot: %d tenders, %d bidders, %d verification requests",
                registry.tenders.store.next_tender_id,
                registry.bidders.store.next_bidder_id,
                registry.audit.store.request_counter,
            )

        self.registry = registry
        return registry

    def checkpoint(self) -> CheckpointStats:
        """Persist the current state of all three registries."""
        if self.registry is None:
            raise RuntimeError("RegistryService.open() must be called before checkpoint()")

        registry = self.registry
        with get_session() as session:
            save_registry(session, registry)

        stats = CheckpointStats(
            tenders=registry.tenders.store.next_tender_id,
            bidders=registry.bidders.store.next_bidder_id,
            verification_requests=registry.audit.store.request_counter,
            transfers=len(registry.env.transfers),
        )
        self.last_checkpoint = stats
        logger.info("Checkpoint saved: %s", stats.to_dict())
        return stats

    def close(self) -> None:
        """Release database connections. The in-memory registry is kept."""
        dispose_engines()
