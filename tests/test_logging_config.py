"""
Tests for structured logging
"""

import json
import logging

from trdb.logging_config import JSONFormatter, get_logger, log_action, setup_logging


class TestJSONFormatter:
    """Test JSON log records"""

    def test_structured_fields(self):
        """Test custom fields appear and empty ones are dropped"""
        logger = logging.getLogger("trdb.test.formatter")
        record = logger.makeRecord(logger.name, logging.INFO, __name__, 0, "stored", (), None)
        record.action = "store"
        record.extra = {"id": 3}

        entry = json.loads(JSONFormatter().format(record))

        assert entry["level"] == "INFO"
        assert entry["message"] == "stored"
        assert entry["action"] == "store"
        assert entry["extra"] == {"id": 3}
        assert "resource" not in entry
        assert "timestamp" in entry


class TestSetupLogging:
    """Test logger configuration"""

    def test_json_to_file(self, tmp_path):
        """Test log_action writes one JSON line"""
        log_file = tmp_path / "trdb.log"
        logger = setup_logging("INFO", logger_name="trdb.test.file", log_file=str(log_file))

        log_action(logger, "info", "Ledger created: Home", action="init", resource="/tmp/ledger")
        for handler in logger.handlers:
            handler.flush()

        lines = log_file.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 1
        entry = json.loads(lines[0])
        assert entry["action"] == "init"
        assert entry["resource"] == "/tmp/ledger"

    def test_text_format(self, capsys):
        """Test plain text output to stderr"""
        logger = setup_logging("WARNING", logger_name="trdb.test.text", log_format="text")
        log_action(logger, "warning", "Not found")
        captured = capsys.readouterr()
        assert "WARNING trdb.test.text: Not found" in captured.err
        assert captured.out == ""

    def test_level_filters_records(self, capsys):
        """Test records below the level are dropped"""
        logger = setup_logging("ERROR", logger_name="trdb.test.level")
        log_action(logger, "info", "quiet")
        assert capsys.readouterr().err == ""

    def test_setup_replaces_handlers(self):
        """Test repeated setup does not duplicate handlers"""
        setup_logging(logger_name="trdb.test.handlers")
        logger = setup_logging(logger_name="trdb.test.handlers")
        assert len(logger.handlers) == 1
        assert logger.propagate is False

    def test_get_logger(self):
        """Test child loggers share the trdb hierarchy"""
        parent = get_logger("trdb")
        assert get_logger("trdb.cli").parent is parent

    def test_exception_info(self, capsys):
        """Test exceptions are attached to the record"""
        logger = setup_logging("ERROR", logger_name="trdb.test.exc")
        try:
            raise ValueError("bad amount")
        except ValueError as exc:
            log_action(logger, "error", "failed", exc_info=exc)
        entry = json.loads(capsys.readouterr().err.strip())
        assert "ValueError: bad amount" in entry["exception"]
