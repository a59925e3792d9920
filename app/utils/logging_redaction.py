"""
Logging redaction helpers.
Keeps passwords and bearer tokens out of log output.
"""

from __future__ import annotations

import logging
import re

SENSITIVE_KEYS = ("password_hash", "password", "access_token", "token")

_BEARER = re.compile(r"(Bearer\s+)[A-Za-z0-9\-._~+/]+=*")
_KEY_VALUE = re.compile(
    r"(?i)(['\"]?)\b(" + "|".join(SENSITIVE_KEYS) + r")\1(\s*[:=]\s*)(['\"]?)[^\s,'\"}]+\4"
)


def redact_message(message: str) -> str:
    message = _BEARER.sub(r"\1[REDACTED]", message)
    return _KEY_VALUE.sub(lambda m: f"{m.group(1)}{m.group(2)}{m.group(1)}{m.group(3)}[REDACTED]", message)


class RedactingFilter(logging.Filter):
    """Rewrites log records so sensitive values never reach a handler."""

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            # Malformed args; the handler reports it when formatting
            return True

        redacted = redact_message(message)
        if redacted != message:
            record.msg = redacted
            record.args = ()
        return True


def install_redaction_filter() -> None:
    """Attach one RedactingFilter to the root logger and each of its handlers."""
    root = logging.getLogger()
    targets = [root, *root.handlers]
    for target in targets:
        if not any(isinstance(f, RedactingFilter) for f in target.filters):
            target.addFilter(RedactingFilter())
