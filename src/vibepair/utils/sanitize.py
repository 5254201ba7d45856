"""Redaction of credentials and home paths in provider error messages."""

from __future__ import annotations

import os
import re

_REDACTIONS: list[tuple[str, str]] = [
    (r"sk-ant-[a-zA-Z0-9_-]+", "[REDACTED_KEY]"),
    (r"sk-[a-zA-Z0-9_-]{20,}", "[REDACTED_KEY]"),
    (r"Bearer\s+\S+", "Bearer [REDACTED]"),
    (r"(?i)(x-api-key|api-key|authorization):\s*\S+", r"\1: [REDACTED]"),
]


def sanitize_error(message: str) -> str:
    """Strip API keys, bearer tokens and the user's home path from an error."""
    if not message:
        return message

    for pattern, replacement in _REDACTIONS:
        message = re.sub(pattern, replacement, message)

    home = os.environ.get("HOME") or os.environ.get("USERPROFILE") or ""
    if home and len(home) > 1:
        message = message.replace(home, "[USER_HOME]")
    return message
