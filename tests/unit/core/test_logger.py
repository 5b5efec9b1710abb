"""Unit tests for core.logger module."""

import json
import logging

import pytest

from flowgazer.core.logger import Logger, StructuredFormatter, configure_logging, format_kv_pairs


# =============================================================================
# format_kv_pairs
# =============================================================================


class TestFormatKvPairs:
    def test_empty(self):
        assert format_kv_pairs({}) == ""

    def test_simple_values(self):
        assert format_kv_pairs({"tab": "global", "count": 3}) == " tab=global count=3"

    def test_quotes_values_with_spaces(self):
        assert format_kv_pairs({"reason": "no following"}) == ' reason="no following"'

    def test_escapes_quotes(self):
        assert format_kv_pairs({"v": 'say "hi"'}) == ' v="say \\"hi\\""'

    def test_empty_value_quoted(self):
        assert format_kv_pairs({"v": ""}) == ' v=""'

    def test_truncation(self):
        result = format_kv_pairs({"v": "x" * 20}, max_value_length=5)
        assert "xxxxx...<truncated 15 chars>" in result

    def test_custom_prefix(self):
        assert format_kv_pairs({"a": 1}, prefix="") == "a=1"


# =============================================================================
# StructuredFormatter
# =============================================================================


class TestStructuredFormatter:
    def _record(self, **extra):
        record = logging.LogRecord("flowgazer.store", logging.WARNING, "", 0, "event_rejected", (), None)
        for k, v in extra.items():
            setattr(record, k, v)
        return record

    def test_plain_record(self):
        assert StructuredFormatter().format(self._record()) == "warning flowgazer.store event_rejected"

    def test_structured_extra(self):
        record = self._record(structured_kv={"kind": 1})
        assert StructuredFormatter().format(record).endswith("event_rejected kind=1")


# =============================================================================
# Logger
# =============================================================================


class TestLogger:
    def test_name(self):
        assert Logger("flowgazer.router").name == "flowgazer.router"

    def test_kv_extra_attached(self, caplog: pytest.LogCaptureFixture):
        logger = Logger("flowgazer.test")
        with caplog.at_level(logging.INFO, logger="flowgazer.test"):
            logger.info("tab_switched", tab="likes")
        record = caplog.records[-1]
        assert record.getMessage() == "tab_switched"
        assert record.structured_kv == {"tab": "likes"}

    def test_long_values_truncated(self, caplog: pytest.LogCaptureFixture):
        logger = Logger("flowgazer.test", max_value_length=4)
        with caplog.at_level(logging.INFO, logger="flowgazer.test"):
            logger.info("x", value="abcdefgh")
        assert caplog.records[-1].structured_kv["value"].startswith("abcd...")

    def test_json_output(self, caplog: pytest.LogCaptureFixture):
        logger = Logger("flowgazer.test", json_output=True)
        with caplog.at_level(logging.WARNING, logger="flowgazer.test"):
            logger.warning("event_rejected_signature", event_id="abc")
        payload = json.loads(caplog.records[-1].getMessage())
        assert payload["message"] == "event_rejected_signature"
        assert payload["level"] == "warning"
        assert payload["event_id"] == "abc"

    def test_disabled_level_skipped(self, caplog: pytest.LogCaptureFixture):
        logger = Logger("flowgazer.quiet")
        with caplog.at_level(logging.ERROR, logger="flowgazer.quiet"):
            logger.debug("noise")
        assert not [r for r in caplog.records if r.name == "flowgazer.quiet"]

    def test_exception_carries_traceback(self, caplog: pytest.LogCaptureFixture):
        logger = Logger("flowgazer.test")
        with caplog.at_level(logging.ERROR, logger="flowgazer.test"):
            try:
                raise RuntimeError("boom")
            except RuntimeError:
                logger.exception("failed", step="x")
        assert caplog.records[-1].exc_info is not None


class TestConfigureLogging:
    @pytest.fixture(autouse=True)
    def restore_root(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_installs_single_structured_handler(self):
        configure_logging("debug")
        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, StructuredFormatter)
        assert root.level == logging.DEBUG

    def test_json_mode_uses_plain_formatter(self):
        configure_logging("INFO", json_output=True)
        formatter = logging.getLogger().handlers[0].formatter
        assert not isinstance(formatter, StructuredFormatter)
