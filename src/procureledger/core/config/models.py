"""
Pydantic configuration models for ProcureLedger.

These models provide type-safe configuration with validation for:
- Registry capacity ceilings and fees
- Ledger environment defaults
- Database and logging settings
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from procureledger.core.ledger import DEFAULT_BURN_ADDRESS


# =============================================================================
# Registry Configuration
# =============================================================================


class TenderRegistryConfig(BaseModel):
    """Initial settings for the tender registry."""

    max_tenders: int = Field(
        default=500,
        gt=0,
        description="Capacity ceiling for tender allocation",
    )
    registration_fee: int = Field(
        default=500,
        ge=0,
        description="Fee charged to the creator when an authority is installed",
    )


class BidderQualifierConfig(BaseModel):
    """Initial settings for the bidder qualifier."""

    max_bidders: int = Field(
        default=1000,
        gt=0,
        description="Capacity ceiling for bidder allocation",
    )
    qualification_fee: int = Field(
        default=200,
        ge=0,
        description="Fee charged on bidder registration when an authority is installed",
    )


class AuditVerifierConfig(BaseModel):
    """Initial settings for the audit verifier."""

    max_queries: int = Field(
        default=1000,
        gt=0,
        description="Capacity ceiling for verification requests",
    )


# =============================================================================
# Ledger Configuration
# =============================================================================


class LedgerConfig(BaseModel):
    """Ledger environment defaults."""

    burn_address: str = Field(
        default=DEFAULT_BURN_ADDRESS,
        description="Reserved principal that can never become an authority",
    )
    initial_block_height: int = Field(
        default=0,
        ge=0,
        description="Block height the environment starts at",
    )
    strict_authority: bool = Field(
        default=False,
        description="Require the caller to be the installed authority for gated operations",
    )

    @field_validator("burn_address")
    @classmethod
    def validate_burn_address(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("burn_address must not be empty")
        return v


# =============================================================================
# Database Configuration
# =============================================================================


class DatabaseConfig(BaseModel):
    """Database connection settings."""

    url: str = Field(
        default="sqlite:///data/procureledger.db",
        description="SQLAlchemy database URL",
    )
    echo: bool = Field(
        default=False,
        description="Echo SQL statements (debugging)",
    )
    pool_size: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Connection pool size",
    )


# =============================================================================
# Logging Configuration
# =============================================================================


class LoggingConfig(BaseModel):
    """Logging settings."""

    level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
    )
    file: Path | None = Field(
        default=Path("logs/procureledger.log"),
        description="Log file path",
    )
    json_format: bool = Field(
        default=True,
        description="Use JSON format for file logs",
    )
    rich_console: bool = Field(
        default=True,
        description="Use Rich for console output",
    )

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


# =============================================================================
# Application Configuration
# =============================================================================


class AppConfig(BaseModel):
    """Root application configuration.

    This is the main configuration object loaded from app.yaml.
    """

    tenders: TenderRegistryConfig = Field(default_factory=TenderRegistryConfig)
    bidders: BidderQualifierConfig = Field(default_factory=BidderQualifierConfig)
    audit: AuditVerifierConfig = Field(default_factory=AuditVerifierConfig)
    ledger: LedgerConfig = Field(default_factory=LedgerConfig)

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def ensure_directories(self) -> None:
        """Create directories for the log file and a file-backed SQLite database."""
        if self.logging.file:
            self.logging.file.parent.mkdir(parents=True, exist_ok=True)
        if self.database.url.startswith("sqlite:///"):
            db_path = Path(self.database.url.replace("sqlite:///", ""))
            if str(db_path) != ":memory:":
                db_path.parent.mkdir(parents=True, exist_ok=True)
