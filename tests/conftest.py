from __future__ import annotations

import pytest

from procureledger.core.ledger import LedgerEnvironment
from procureledger.persistence import db as db_module
from procureledger.registry import (
    AuditVerifier,
    BidderQualifier,
    TenderRegistry,
    build_registries,
)

AUTHORITY = "ST2TEST"
CALLER = "ST1TEST"
OTHER = "ST3FAKE"
BURN = "SP000000000000000000002Q6VF78"


@pytest.fixture
def env() -> LedgerEnvironment:
    return LedgerEnvironment(caller=CALLER, block_height=0)


@pytest.fixture
def tenders(env: LedgerEnvironment) -> TenderRegistry:
    return TenderRegistry(env=env)


@pytest.fixture
def bidders(env: LedgerEnvironment) -> BidderQualifier:
    return BidderQualifier(env=env)


@pytest.fixture
def audit(env: LedgerEnvironment) -> AuditVerifier:
    return AuditVerifier(env=env)


@pytest.fixture
def registry(env: LedgerEnvironment):
    return build_registries(env=env)


@pytest.fixture
def db_url(tmp_path) -> str:
    url = f"sqlite:///{tmp_path / 'procureledger.db'}"
    db_module.init_db(url)
    yield url
    db_module.dispose_engines()


@pytest.fixture
def session(db_url):
    with db_module.get_session() as s:
        yield s
