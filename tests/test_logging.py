"""
Tests for campaign_service.core.logging.
"""
import json
import logging

import pytest

from campaign_service.core.logging import AuditLogFilter, JSONFormatter, setup_logging


def _record(message, level=logging.INFO):
    return logging.LogRecord("campaign_service.test", level, __file__, 1, message, None, None)


class TestFormatters:

    def test_json_formatter(self):
        data = json.loads(JSONFormatter().format(_record("Campaign created: CAMP001")))
        assert data["level"] == "INFO"
        assert data["logger"] == "campaign_service.test"
        assert data["message"] == "Campaign created: CAMP001"
        assert data["timestamp"].endswith("Z")

    @pytest.mark.parametrize("message, audited", [
        ("Campaign created: CAMP001 targeting 2 customers", True),
        ("Rejected identity token: expired", True),
        ("Logging system initialized", False),
    ])
    def test_audit_filter(self, message, audited):
        assert AuditLogFilter().filter(_record(message)) is audited


class TestSetupLogging:

    @pytest.fixture(autouse=True)
    def restore_root(self):
        root = logging.getLogger()
        before, level = set(root.handlers), root.level
        yield
        for handler in [h for h in root.handlers if h not in before]:
            root.removeHandler(handler)
            handler.close()
        root.setLevel(level)

    def test_file_handlers(self, tmp_path):
        setup_logging(level="debug", log_to_file=True, log_to_console=False, log_dir=str(tmp_path))
        logging.getLogger("campaign_service.test").info("Campaign deleted: CAMP001")
        logging.getLogger("campaign_service.test").error("Sequence store unavailable")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert logging.getLogger().level == logging.DEBUG
        assert "Campaign deleted" in (tmp_path / "campaigns.log").read_text()
        assert "Campaign deleted" in (tmp_path / "audit.log").read_text()
        error_log = (tmp_path / "error.log").read_text()
        assert "Sequence store unavailable" in error_log
        assert "Campaign deleted" not in error_log

    def test_console_only(self, tmp_path):
        setup_logging(log_to_file=False, log_dir=str(tmp_path / "unused"))
        assert not (tmp_path / "unused").exists()
        assert len(logging.getLogger().handlers) == 1
