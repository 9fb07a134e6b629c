import logging

import pytest

from app.core.logging import setup_logging
from app.utils.logging_redaction import RedactingFilter, redact_message


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_redacts_query_credentials():
    message = "GET https://query2.finance.yahoo.com/v7/finance/quote?symbols=TCS.NS&crumb=abc123&apikey=xyz failed"

    redacted = redact_message(message)

    assert "abc123" not in redacted
    assert "xyz" not in redacted
    assert "crumb=[REDACTED]" in redacted
    assert "symbols=TCS.NS" in redacted


def test_redacts_bearer_and_cookie():
    assert redact_message("Authorization: Bearer eyJhbGciOi.abc") == "Authorization: Bearer [REDACTED]"
    assert "nsit=" not in redact_message("headers={'cookie': 'nsit=secret; nseappid=other'}")


def test_filter_leaves_clean_records_untouched():
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "price %s", ("42",), None)

    assert RedactingFilter().filter(record) is True
    assert record.msg == "price %s"
    assert record.args == ("42",)


def test_filter_rewrites_sensitive_records():
    record = logging.LogRecord("x", logging.WARNING, __file__, 1, "retry %s", ("url?token=s3cret",), None)

    RedactingFilter().filter(record)

    assert record.getMessage() == "retry url?token=[REDACTED]"


def test_setup_logging_writes_redacted_file(tmp_path, restore_root_logger):
    log_file = tmp_path / "logs" / "app.log"
    setup_logging("DEBUG", log_file=str(log_file), max_bytes=1024, backup_count=1)

    logging.getLogger("app.test").info("fetched quote?crumb=topsecret")
    for handler in logging.getLogger().handlers:
        handler.flush()

    content = log_file.read_text()
    assert "crumb=[REDACTED]" in content
    assert "topsecret" not in content
    assert logging.getLogger("httpx").level == logging.WARNING
