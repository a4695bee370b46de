"""Handler filters: PII masking, correlation ids and ride context fields."""

import logging
import re

from core.correlation import get_current_correlation_id

from .context import LogContext


class PIIFilter(logging.Filter):
    """Masks emails, phone numbers and bearer tokens in the rendered message.

    Arguments are merged into the message first, so values passed as
    ``%s`` parameters are masked too.
    """

    PATTERNS = (
        (re.compile(r"[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+"), "[EMAIL]"),
        (re.compile(r"(?<!\d)(?:\+1[\s.-]?)?\(?\d{3}\)?[\s.-]?\d{3}[\s.-]?\d{4}(?!\d)"), "[PHONE]"),
        (re.compile(r"(?i)bearer\s+\S+"), "Bearer [TOKEN]"),
    )

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        masked = message
        for pattern, replacement in self.PATTERNS:
            masked = pattern.sub(replacement, masked)
        if masked != message:
            record.msg = masked
            record.args = None
        return True


class DefaultCorrelationFilter(logging.Filter):
    """Sets ``correlation_id`` to the current request id, or '-' outside one."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = get_current_correlation_id() or "-"
        return True


class ContextFilter(logging.Filter):
    """Copies LogContext fields onto the record without overriding ``extra``."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in LogContext.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True
