"""Tests for key=value structured logging."""

import logging

from app.core.logging import StructuredFormatter, get_logger, log_with_context


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="app.services.ufa_agent",
        level=logging.INFO,
        pathname="/srv/app/services/ufa_agent.py",
        lineno=10,
        msg="Analysis done for %s",
        args=("tenant-1",),
        exc_info=None,
        func="run_expert_funding_analysis",
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredFormatter:
    def test_base_fields(self):
        line = StructuredFormatter().format(_record())

        assert "level=INFO" in line
        assert "module=ufa_agent" in line
        assert "function=run_expert_funding_analysis" in line
        assert "message=Analysis done for tenant-1" in line

    def test_context_fields(self):
        line = StructuredFormatter().format(_record(tenant_id="tenant-1", context={"strategies": 3}))

        assert "tenant_id=tenant-1" in line
        assert line.endswith("strategies=3")


def test_log_with_context_attaches_fields():
    logger = get_logger("tests.logging")
    records: list[logging.LogRecord] = []

    class Capture(logging.Handler):
        def emit(self, record):
            records.append(record)

    handler = Capture()
    logger.addHandler(handler)
    try:
        log_with_context(logger, logging.WARNING, "Queued", tenant_id="tenant-1", kind="strategic_update")
    finally:
        logger.removeHandler(handler)

    assert records[0].tenant_id == "tenant-1"
    assert records[0].context == {"kind": "strategic_update"}
