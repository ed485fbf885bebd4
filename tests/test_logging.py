from __future__ import annotations

import logging

import orjson

from procureledger.core.errors import TenderError
from procureledger.core.logging import (
    JSONFormatter,
    get_contextual_logger,
    get_logger,
    setup_logging,
)

from .conftest import CALLER


def test_rejections_are_logged_with_context(tenders, env, caplog):
    caplog.set_level(logging.DEBUG, logger="procureledger")
    env.advance(9)

    tenders.close_tender(3)

    records = [r for r in caplog.records if getattr(r, "operation", None) == "close_tender"]
    assert len(records) == 1
    record = records[0]
    assert record.levelno == logging.DEBUG
    assert record.name == "procureledger.registry.tenders"
    assert record.component == "tenders"
    assert record.caller == CALLER
    assert record.block_height == 9
    assert record.code == TenderError.TENDER_NOT_FOUND
    assert "TENDER_NOT_FOUND" in record.getMessage()


def test_json_formatter_includes_context_fields():
    record = logging.LogRecord("procureledger.test", logging.INFO, __file__, 1, "hello %s", ("world",), None)
    record.component = "audit"
    record.code = 114

    data = orjson.loads(JSONFormatter().format(record))
    assert data["message"] == "hello world"
    assert data["level"] == "INFO"
    assert data["component"] == "audit"
    assert data["code"] == 114
    assert "caller" not in data


def test_contextual_logger_merges_context():
    log = get_contextual_logger("test", component="bidders").with_context(caller="ST9", block_height=0)
    _, kwargs = log.process("msg", {"extra": {"operation": "register_bidder"}})
    assert kwargs["extra"] == {
        "operation": "register_bidder",
        "component": "bidders",
        "caller": "ST9",
        "block_height": 0,
    }


def test_setup_logging_writes_json_file(tmp_path):
    log_file = tmp_path / "logs" / "procureledger.log"
    root = setup_logging(level="DEBUG", log_file=log_file, json_format=True, rich_console=False)
    try:
        get_logger("test").info("written")
        for handler in root.handlers:
            handler.flush()

        lines = log_file.read_text(encoding="utf-8").splitlines()
        assert orjson.loads(lines[-1])["message"] == "written"
    finally:
        for handler in list(root.handlers):
            handler.close()
            root.removeHandler(handler)
