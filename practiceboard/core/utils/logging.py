"""
Logging Utility Module.

This module provides logging utilities for the application, with special care
for client contact details that appear in profile rows.
"""

import logging
import re

_EMAIL_PATTERN = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
_PHONE_PATTERN = re.compile(r"(?<!\d)(?:\+?\d{1,2}[\s.-]?)?\(?\d{3}\)?[\s.-]?\d{3}[\s.-]?\d{4}(?!\d)")


def sanitize_text(text: str) -> str:
    """Redact e-mail addresses and phone numbers from free text."""
    text = _EMAIL_PATTERN.sub("[REDACTED EMAIL]", text)
    return _PHONE_PATTERN.sub("[REDACTED PHONE]", text)


class PHISanitizingFilter(logging.Filter):
    """Custom logging filter to sanitize PHI from log records."""

    def __init__(self, name: str = "PHISanitizer"):
        super().__init__(name)

    def filter(self, record: logging.LogRecord) -> bool:
        """Sanitize the log record message in place."""
        original_message = record.getMessage()
        sanitized_message = sanitize_text(original_message)

        # Args are baked into the message so formatters don't re-interpolate
        record.msg = sanitized_message
        record.args = ()

        return True
