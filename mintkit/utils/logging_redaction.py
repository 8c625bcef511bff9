"""
Logging redaction helpers.
Redacts private keys, tokens and RPC keys from log messages.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable


_PATTERNS: Iterable[tuple[re.Pattern, str]] = (
    # Raw secp256k1 private key (32 bytes hex). Tx hashes have the same shape,
    # so only redact when labelled as a key.
    (re.compile(r"(?i)(private[_-]?key|secret|pk)(\s*[:=]\s*)(0x)?[0-9a-f]{64}"), r"\1\2[REDACTED]"),
    # Authorization: Bearer <token>
    (re.compile(r"(Bearer\s+)([A-Za-z0-9\-\._]+)"), r"\1[REDACTED]"),
    # RPC provider keys embedded in URL paths (alchemy /v2/<key>, infura /v3/<key>)
    (re.compile(r"(https?://[^\s/]+/v[23]/)([A-Za-z0-9\-_]{16,})"), r"\1[REDACTED]"),
    # Query-string api keys
    (re.compile(r"(?i)([?&](?:api[_-]?key|apikey|key|token)=)([^&\s]+)"), r"\1[REDACTED]"),
    # Generic key/value output
    (re.compile(r"(?i)(api[_-]?key|api[_-]?secret|access_token)\s*[:=]\s*([A-Za-z0-9\-\._]+)"), r"\1=[REDACTED]"),
)


def redact_message(message: str) -> str:
    redacted = message
    for pattern, replacement in _PATTERNS:
        redacted = pattern.sub(replacement, redacted)
    return redacted


class RedactingFilter(logging.Filter):
    """Filter that redacts sensitive data from log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            message = record.getMessage()
            redacted = redact_message(message)
            record.msg = redacted
            record.args = ()
        except Exception:
            # If redaction fails, allow log through unmodified
            pass
        return True


def _has_filter(filterer: logging.Filterer) -> bool:
    return any(isinstance(existing, RedactingFilter) for existing in filterer.filters)


def install_redaction_filter(logger_name: str = "") -> None:
    """
    Attach the filter to the logger and its handlers.

    Logger-level filters do not see records propagated from child loggers,
    so handlers get their own copy.
    """
    target = logging.getLogger(logger_name)
    if not _has_filter(target):
        target.addFilter(RedactingFilter())
    for handler in target.handlers:
        if not _has_filter(handler):
            handler.addFilter(RedactingFilter())
