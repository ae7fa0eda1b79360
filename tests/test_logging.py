"""
Tests for unified logging setup.

Author: Vasiliy Zdanovskiy
email: vasilyvz@gmail.com
"""

import logging

from pjbridge.logging import (
    NO_ENDPOINT,
    EndpointFilter,
    create_unified_formatter,
    setup_logging,
)


def make_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "pjbridge.test", logging.INFO, __file__, 1, "hello %s", ("world",), None
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestUnifiedFormatter:
    """Test line format."""

    def test_placeholder_endpoint(self):
        line = create_unified_formatter().format(make_record())
        assert f"| {NO_ENDPOINT} | hello world" in line
        assert "| INFO     |" in line

    def test_endpoint_from_extra(self):
        line = create_unified_formatter().format(make_record(endpoint="db:4444"))
        assert "| db:4444 | hello world" in line

    def test_endpoint_filter(self):
        record = make_record()
        assert EndpointFilter("h:1").filter(record)
        assert record.endpoint == "h:1"


class TestSetupLogging:
    """Test handler installation."""

    def test_console_only(self):
        logger = setup_logging(level=logging.INFO)
        assert len(logger.handlers) == 1
        assert logger.handlers[0].level == logging.INFO
        assert logger.propagate is False

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "logs" / "bridge.log"
        logger = setup_logging(log_path=log_file, endpoint="db:4444")
        logging.getLogger("pjbridge.core.bridge_client.session").debug("traced")
        for handler in logger.handlers:
            handler.flush()
        content = log_file.read_text(encoding="utf-8")
        assert "| db:4444 | traced" in content

    def test_repeated_setup_does_not_duplicate(self):
        setup_logging()
        logger = setup_logging()
        assert len(logger.handlers) == 1
