"""
Logging redaction helpers.
Redacts credentials that upstream URLs and headers can carry into log messages.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable


_PATTERNS: Iterable[tuple[re.Pattern, str]] = (
    # Yahoo crumb / generic api keys and tokens in query strings
    (re.compile(r"(?i)\b(crumb|api[_-]?key|apikey|access_token|token)=([^&\s'\"]+)"), r"\1=[REDACTED]"),
    # Authorization: Bearer <token>
    (re.compile(r"(Bearer\s+)([A-Za-z0-9\-\._]+)"), r"\1[REDACTED]"),
    # Cookie headers echoed in error messages
    (re.compile(r"(?i)(cookie['\"]?\s*[:=]\s*['\"]?)([^'\"\n]+)"), r"\1[REDACTED]"),
)


def redact_message(message: str) -> str:
    redacted = message
    for pattern, replacement in _PATTERNS:
        redacted = pattern.sub(replacement, redacted)
    return redacted


class RedactingFilter(logging.Filter):
    """Filter that redacts sensitive data from log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = redact_message(message)
        if redacted != message:
            record.msg = redacted
            record.args = ()
        return True


def install_redaction_filter() -> None:
    # Root logger filters do not apply to records propagated from child
    # loggers, so the filter goes on every root handler
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, RedactingFilter) for f in handler.filters):
            handler.addFilter(RedactingFilter())
