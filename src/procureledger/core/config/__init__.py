"""Configuration loading and validation."""

from .models import (
    AppConfig,
    AuditVerifierConfig,
    BidderQualifierConfig,
    DatabaseConfig,
    LedgerConfig,
    LoggingConfig,
    TenderRegistryConfig,
)
from .loader import ConfigError, load_app_config, validate_app_config_file

__all__ = [
    # Config models
    "AppConfig",
    "AuditVerifierConfig",
    "BidderQualifierConfig",
    "DatabaseConfig",
    "LedgerConfig",
    "LoggingConfig",
    "TenderRegistryConfig",
    # Loaders
    "ConfigError",
    "load_app_config",
    "validate_app_config_file",
]
