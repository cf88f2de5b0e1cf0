"""Tests for logging configuration."""

import logging

import pytest

from planlog.core.logging_config import LogContext, PlanlogFormatter, setup_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    factory = logging.getLogRecordFactory()
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.setLogRecordFactory(factory)


def make_record(name="planlog.plans.store", msg="Created plan", level=logging.INFO):
    return logging.LogRecord(name, level, __file__, 1, msg, None, None)


class TestPlanlogFormatter:
    """Test the structured formatter."""

    def test_plain_format(self):
        line = PlanlogFormatter(use_color=False).format(make_record())
        assert "INFO" in line
        assert "[store]" in line
        assert line.endswith("Created plan")

    def test_operation_suffix(self):
        record = make_record()
        record.operation = "deploy"
        line = PlanlogFormatter(use_color=False).format(record)
        assert line.endswith("Created plan (deploy)")

    def test_color(self):
        line = PlanlogFormatter(use_color=True).format(make_record())
        assert "\033[32m" in line


class TestSetupLogging:
    """Test handler setup."""

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "logs" / "planlog.log"
        setup_logging(level="DEBUG", log_file=str(log_file), console=False)
        logging.getLogger("planlog.test").info("hello file")
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "hello file" in log_file.read_text()
        assert logging.getLogger().level == logging.DEBUG

    def test_quiets_http_loggers(self):
        setup_logging(level="DEBUG", console=False)
        assert logging.getLogger("urllib3").level == logging.WARNING


class TestLogContext:
    """Test the operation context manager."""

    def test_records_carry_operation(self):
        records = []

        class Collect(logging.Handler):
            def emit(self, record):
                records.append(record)

        logger = logging.getLogger("planlog.context-test")
        logger.addHandler(Collect())
        logger.setLevel(logging.INFO)
        with LogContext("deploy", logger):
            logger.info("inside")
        logger.info("outside")

        inside = [r for r in records if r.getMessage() == "inside"][0]
        outside = [r for r in records if r.getMessage() == "outside"][0]
        assert inside.operation == "deploy"
        assert not hasattr(outside, "operation")
