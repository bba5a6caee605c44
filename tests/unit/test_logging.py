"""Unit tests for the logging module."""

import logging
import os

import pytest

import content_migrator.utils.logging as log_module
from content_migrator.utils.logging import (
    EnhancedFormatter,
    _redact,
    get_logger,
    is_debug_api_enabled,
    log_api_request,
    log_api_response,
    log_with_context,
    setup_logger,
    setup_main_log_file,
)


@pytest.fixture(autouse=True)
def _clean_logger():
    """Remove all handlers from the content_migrator logger before and after each test."""
    logger = logging.getLogger("content_migrator")
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    yield
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()
    # Reset the module-level debug flag
    log_module._DEBUG_API_ENABLED = False


def _record(msg="hello", **extra):
    record = logging.LogRecord(
        name="content_migrator",
        level=logging.INFO,
        pathname="test.py",
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


# --- EnhancedFormatter tests ---


class TestEnhancedFormatter:
    """Tests for EnhancedFormatter."""

    def test_default_format(self):
        result = EnhancedFormatter().format(_record())
        assert result.endswith(" - INFO - hello")

    def test_verbose_format_includes_location(self):
        result = EnhancedFormatter(verbose=True).format(_record())
        assert "[test:1]" in result

    def test_api_details_are_appended(self):
        formatter = EnhancedFormatter(include_api_details=True)
        result = formatter.format(_record(api_data='{"a": 1}', response="ok"))
        assert "API Data: {\"a\": 1}" in result
        assert "Response: ok" in result

    def test_api_details_hidden_without_flag(self):
        result = EnhancedFormatter().format(_record(api_data="secret"))
        assert "API Data" not in result


# --- setup_logger tests ---


class TestSetupLogger:
    """Tests for setup_logger()."""

    def test_console_level_defaults_to_info(self):
        logger = setup_logger()
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert logger.handlers[0].level == logging.INFO

    def test_verbose_console_level(self):
        logger = setup_logger(verbose=True)
        assert logger.handlers[0].level == logging.DEBUG

    def test_repeated_setup_does_not_duplicate_handlers(self):
        setup_logger()
        logger = setup_logger()
        assert len(logger.handlers) == 1

    def test_output_dir_adds_file_handler(self, tmp_path):
        logger = setup_logger(output_dir=str(tmp_path / "out"))

        file_handlers = [h for h in logger.handlers if isinstance(h, logging.FileHandler)]
        assert len(file_handlers) == 1
        assert os.path.exists(tmp_path / "out" / "migration.log")

    def test_debug_api_flag(self):
        setup_logger(debug_api=True)
        assert is_debug_api_enabled() is True
        setup_logger()
        assert is_debug_api_enabled() is False


def test_setup_main_log_file_writes_messages(tmp_path):
    logging.getLogger("content_migrator").setLevel(logging.DEBUG)
    handler = setup_main_log_file(str(tmp_path))
    log_with_context(logging.DEBUG, "debug line")
    handler.flush()

    content = (tmp_path / "migration.log").read_text()
    assert "Main log file created" in content
    assert "debug line" in content


# --- log_with_context tests ---


class TestLogWithContext:
    """Tests for log_with_context()."""

    def test_extras_are_attached(self, caplog):
        with caplog.at_level(logging.INFO, logger="content_migrator"):
            log_with_context(logging.INFO, "msg", item_id="a", skipped=None)

        record = caplog.records[-1]
        assert record.item_id == "a"
        assert not hasattr(record, "skipped")

    def test_api_data_implies_response_attribute(self, caplog):
        with caplog.at_level(logging.INFO, logger="content_migrator"):
            log_with_context(logging.INFO, "msg", api_data="x")

        assert caplog.records[-1].response == ""

    def test_exc_info_is_passed_through(self, caplog):
        with caplog.at_level(logging.ERROR, logger="content_migrator"):
            try:
                raise RuntimeError("boom")
            except RuntimeError:
                log_with_context(logging.ERROR, "failed", exc_info=True)

        assert caplog.records[-1].exc_info is not None


# --- API request/response logging ---


class TestApiLogging:
    """Tests for log_api_request() and log_api_response()."""

    def test_nothing_logged_when_disabled(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="content_migrator"):
            log_api_request("GET", "https://api/x")
            log_api_response(200, "https://api/x", "{}")

        assert caplog.records == []

    def test_request_logged_when_enabled(self, caplog):
        log_module._DEBUG_API_ENABLED = True
        with caplog.at_level(logging.DEBUG, logger="content_migrator"):
            log_api_request("POST", "https://api/x", {"client_secret": "s", "name": "a"})

        record = caplog.records[-1]
        assert record.getMessage() == "API Request: POST https://api/x"
        assert "[REDACTED]" in record.api_data
        assert '"name": "a"' in record.api_data

    def test_long_response_is_truncated(self, caplog):
        log_module._DEBUG_API_ENABLED = True
        with caplog.at_level(logging.DEBUG, logger="content_migrator"):
            log_api_response(200, "https://api/x", "x" * 5000)

        assert caplog.records[-1].response.endswith("... [truncated]")


def test_redact_hides_sensitive_keys():
    data = {"access_token": "t", "Authorization": "Bearer t", "label": "Home"}

    assert _redact(data) == {
        "access_token": "[REDACTED]",
        "Authorization": "[REDACTED]",
        "label": "Home",
    }
    assert data["access_token"] == "t"


def test_get_logger_adds_default_handler():
    logger = get_logger()
    assert logger.name == "content_migrator"
    assert len(logger.handlers) == 1
