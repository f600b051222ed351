"""Tests for the activity log and logging setup."""
import logging

import pytest

from regswap.utils.audit_log import (
    AUDIT_FILE_NAME,
    OperationRecord,
    audit_logger,
    get_recent_operations,
    log_operation,
    setup_audit_logging,
)
from regswap.utils.logging_config import main_logger, perf_logger, setup_logging, timed


@pytest.fixture
def audit_file(tmp_path):
    path = setup_audit_logging(tmp_path)
    yield path
    for handler in list(audit_logger.handlers):
        handler.close()
        audit_logger.removeHandler(handler)


class TestAuditLog:
    """Tests for OperationRecord persistence."""

    def test_roundtrip(self):
        record = OperationRecord(
            timestamp="2026-01-01T00:00:00+00:00",
            operation="save_profile",
            profile="Main",
            status="full_success",
            succeeded=["a.reg"],
        )

        assert OperationRecord.from_json(record.to_json()) == record

    def test_log_and_read_back(self, audit_file):
        log_operation("save_profile", "full_success", profile="Main", succeeded=["a.reg"])
        log_operation("load_profile", "partial_success", profile="Main", failed=["b.reg"])

        records = get_recent_operations(audit_file)

        assert [r.operation for r in records] == ["load_profile", "save_profile"]
        assert records[0].failed == ["b.reg"]

    def test_filter_and_limit(self, audit_file):
        for index in range(5):
            log_operation("save_profile", "full_success", profile=f"P{index}")
        log_operation("delete_profile", "full_success", profile="P0")

        saves = get_recent_operations(audit_file, operation="save_profile", limit=2)

        assert [r.profile for r in saves] == ["P4", "P3"]

    def test_malformed_lines_skipped(self, audit_file):
        log_operation("save_profile", "full_success")
        with open(audit_file, "a", encoding="utf-8") as f:
            f.write("not json\n{\"unexpected\": 1}\n")

        assert len(get_recent_operations(audit_file)) == 1

    def test_missing_file(self, tmp_path):
        assert get_recent_operations(tmp_path / AUDIT_FILE_NAME) == []


class TestLoggingSetup:
    """Tests for setup_logging and the timing decorator."""

    @pytest.fixture(autouse=True)
    def restore_handlers(self):
        yield
        for logger in (main_logger, perf_logger):
            for handler in list(logger.handlers):
                handler.close()
                logger.removeHandler(handler)
        perf_logger.propagate = True

    def test_creates_log_files(self, tmp_path, monkeypatch):
        monkeypatch.delenv("REGSWAP_LOG_FILE", raising=False)

        log_file = setup_logging(tmp_path / "logs")

        assert log_file == tmp_path / "logs" / "regswap.log"
        assert log_file.exists()

    def test_repeated_setup_does_not_duplicate(self, tmp_path):
        setup_logging(tmp_path)
        setup_logging(tmp_path)

        assert len(main_logger.handlers) == 2

    def test_timed_logs_to_perf_file(self, tmp_path):
        setup_logging(tmp_path)

        class Probe:
            @timed("reg_query")
            def exists(self, path):
                return True

        assert Probe().exists("HKCU\\Software\\X") is True
        for handler in perf_logger.handlers:
            handler.flush()

        content = (tmp_path / "regswap-perf.log").read_text()
        assert "reg_query" in content
        assert "OK" in content

    def test_verbose_console(self, tmp_path):
        setup_logging(tmp_path, verbose=True)

        console = [h for h in main_logger.handlers if type(h) is logging.StreamHandler]
        assert console[0].level == logging.DEBUG
