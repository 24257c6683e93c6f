"""Tests for logging configuration."""

from __future__ import annotations

import json
import logging

import pytest

from ems_tracker.config import LoggingConfig
from ems_tracker.store.reconciliation import OrderReconciler
from ems_tracker.utils.logging import (
    LOG_DATE_FORMAT,
    LOG_FORMAT,
    _JsonFormatter,
    _TextFormatter,
    configure_logging,
    record_context,
)


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_file_handler_written(tmp_path):
    log_file = tmp_path / "logs" / "ems.log"
    configure_logging(LoggingConfig(level="INFO", log_file=str(log_file)))
    logging.getLogger("ems_tracker.test").info("pool adjusted")
    for handler in logging.getLogger().handlers:
        handler.flush()
    assert "pool adjusted" in log_file.read_text(encoding="utf-8")


def test_level_applied():
    configure_logging(LoggingConfig(level="warning", log_file=""))
    assert logging.getLogger().level == logging.WARNING


def test_json_formatter_includes_extra():
    record = logging.LogRecord("ems", logging.INFO, "", 0, "approved %d", (7,), None)
    record.order_id = 7
    payload = json.loads(_JsonFormatter().format(record))
    assert payload["msg"] == "approved 7"
    assert payload["level"] == "INFO"
    assert payload["context"] == {"order_id": 7}
    assert "order_id" not in payload


def test_json_formatter_omits_empty_context():
    record = logging.LogRecord("ems", logging.INFO, "", 0, "loaded", None, None)
    assert "context" not in json.loads(_JsonFormatter().format(record))


def test_text_formatter_appends_context():
    record = logging.LogRecord("ems", logging.WARNING, "", 0, "short", None, None)
    record.order_id = 3
    record.shortfall = {"tshirts": 2}
    line = _TextFormatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT).format(record)
    assert line.endswith("[WARNING] ems: short {order_id=3, shortfall={'tshirts': 2}}")


def test_record_context_ignores_standard_fields():
    record = logging.LogRecord("ems", logging.INFO, "", 0, "x", None, None)
    assert record_context(record) == {}
    record.rider_code = "R1"
    assert record_context(record) == {"rider_code": "R1"}


def _json_lines(log_file) -> list[dict]:
    for handler in logging.getLogger().handlers:
        handler.flush()
    text = log_file.read_text(encoding="utf-8")
    return [json.loads(line) for line in text.splitlines() if line.strip()]


def test_order_events_carry_context_in_json_log(tmp_path, store, fixed_clock):
    log_file = tmp_path / "ems.jsonl"
    configure_logging(LoggingConfig(level="INFO", log_file=str(log_file), json_format=True))
    reconciler = OrderReconciler(store, clock=fixed_clock)

    order_id = reconciler.request_order("S1", {"tshirts": 2}).detail["order_id"]
    big_id = reconciler.request_order("S1", {"tshirts": 9}).detail["order_id"]
    assert reconciler.approve_order(order_id).ok
    assert not reconciler.approve_order(big_id).ok

    lines = _json_lines(log_file)
    approved = [p for p in lines if p["msg"] == f"Order {order_id} approved."]
    assert approved[0]["context"]["order_id"] == order_id
    assert approved[0]["context"]["inventory"]["tshirts"] == 3
    short = [p for p in lines if p["level"] == "WARNING"]
    assert short[0]["context"] == {"order_id": big_id, "shortfall": {"tshirts": 6}}
    requested = [p for p in lines if p.get("context", {}).get("supervisor_code") == "S1"]
    assert {p["context"]["order_id"] for p in requested} == {order_id, big_id}
