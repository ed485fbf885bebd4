from __future__ import annotations

from pathlib import Path

import pytest

from procureledger.core.config import (
    AppConfig,
    ConfigError,
    load_app_config,
    validate_app_config_file,
)
from procureledger.registry import build_registries

SAMPLE_CONFIG = Path(__file__).resolve().parents[1] / "configs" / "app.yaml"


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "app.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_missing_file_returns_defaults(tmp_path):
    config = load_app_config(tmp_path / "absent.yaml")
    assert config == AppConfig()
    assert config.tenders.max_tenders == 500
    assert config.tenders.registration_fee == 500
    assert config.bidders.max_bidders == 1000
    assert config.bidders.qualification_fee == 200
    assert config.audit.max_queries == 1000
    assert config.ledger.strict_authority is False


def test_sample_config_is_valid():
    assert validate_app_config_file(SAMPLE_CONFIG) == []
    config = load_app_config(SAMPLE_CONFIG)
    assert config.ledger.burn_address == "SP000000000000000000002Q6VF78"


def test_empty_file_uses_defaults(tmp_path):
    assert load_app_config(_write(tmp_path, "")) == AppConfig()


def test_partial_sections(tmp_path):
    path = _write(tmp_path, "tenders:\n  registration_fee: 0\nlogging:\n  level: debug\n")
    config = load_app_config(path)
    assert config.tenders.registration_fee == 0
    assert config.tenders.max_tenders == 500
    assert config.logging.level == "DEBUG"


def test_expands_environment_variables(tmp_path, monkeypatch):
    path = _write(
        tmp_path,
        "database:\n  url: ${TEST_DB_URL:-sqlite:///fallback.db}\n"
        "ledger:\n  burn_address: ${TEST_BURN}\n",
    )
    monkeypatch.delenv("TEST_DB_URL", raising=False)
    monkeypatch.setenv("TEST_BURN", "ST0BURN")

    config = load_app_config(path)
    assert config.database.url == "sqlite:///fallback.db"
    assert config.ledger.burn_address == "ST0BURN"

    monkeypatch.setenv("TEST_DB_URL", "sqlite:///override.db")
    assert load_app_config(path).database.url == "sqlite:///override.db"


def test_expansion_can_be_disabled(tmp_path):
    path = _write(tmp_path, "database:\n  url: ${TEST_DB_URL:-sqlite:///fallback.db}\n")
    config = load_app_config(path, expand_env=False)
    assert config.database.url == "${TEST_DB_URL:-sqlite:///fallback.db}"


def test_invalid_yaml_raises(tmp_path):
    path = _write(tmp_path, "tenders: [unclosed\n")
    with pytest.raises(ConfigError) as exc_info:
        load_app_config(path)
    assert exc_info.value.path == path
    assert exc_info.value.details


def test_non_mapping_raises(tmp_path):
    with pytest.raises(ConfigError, match="mapping"):
        load_app_config(_write(tmp_path, "- a\n- b\n"))


@pytest.mark.parametrize(
    "text",
    [
        "tenders:\n  max_tenders: 0\n",
        "tenders:\n  registration_fee: -1\n",
        "audit:\n  max_queries: 0\n",
        "ledger:\n  burn_address: '   '\n",
        "logging:\n  level: LOUD\n",
    ],
)
def test_schema_violations_raise(tmp_path, text):
    with pytest.raises(ConfigError):
        load_app_config(_write(tmp_path, text))


def test_validate_reports_locations(tmp_path):
    path = _write(tmp_path, "bidders:\n  max_bidders: 0\n")
    errors = validate_app_config_file(path)
    assert len(errors) == 1
    assert errors[0].startswith("bidders.max_bidders:")


def test_validate_reports_missing_file(tmp_path):
    errors = validate_app_config_file(tmp_path / "absent.yaml")
    assert len(errors) == 1
    assert "not found" in errors[0]


def test_build_registries_applies_config(tmp_path):
    path = _write(
        tmp_path,
        "tenders:\n  max_tenders: 2\n  registration_fee: 50\n"
        "bidders:\n  qualification_fee: 5\n"
        "audit:\n  max_queries: 3\n"
        "ledger:\n  burn_address: ST0BURN\n  initial_block_height: 40\n  strict_authority: true\n",
    )
    registry = build_registries(load_app_config(path))

    assert registry.env.block_height == 40
    assert registry.tenders.get_max_tenders() == 2
    assert registry.tenders.get_registration_fee() == 50
    assert registry.bidders.get_qualification_fee() == 5
    assert registry.audit.get_max_queries() == 3
    assert registry.tenders.strict_authority is True
    assert registry.audit.set_authority_principal("ST0BURN").ok is False
    # The default burn address is an ordinary principal under this config
    assert registry.tenders.set_authority_principal("SP000000000000000000002Q6VF78").ok is True


def test_explicit_strict_flag_overrides_config():
    registry = build_registries(AppConfig(), strict_authority=True)
    assert registry.bidders.strict_authority is True
    assert build_registries(AppConfig()).bidders.strict_authority is False
