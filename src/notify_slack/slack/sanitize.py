"""Redaction of credentials before request headers reach the debug log."""

from __future__ import annotations

from collections.abc import Mapping

REDACTED = "[redacted]"

_SENSITIVE_HEADERS = frozenset({"authorization"})


def is_sensitive_header(name: str) -> bool:
    return name.lower() in _SENSITIVE_HEADERS


def mask_sensitive_value(value: str) -> str:
    """Hide a credential, keeping the ``Bearer`` scheme visible."""
    if not value:
        return ""
    if value[:7].lower() == "bearer ":
        return f"Bearer {REDACTED}"
    return REDACTED


def sanitize_headers(
    headers: Mapping[str, str | list[str]] | None,
) -> dict[str, str | list[str]] | None:
    """Return a copy of *headers* with sensitive values masked.

    Key spelling is preserved and the input mapping is left untouched.
    """
    if headers is None:
        return None

    sanitized: dict[str, str | list[str]] = {}
    for key, value in headers.items():
        if not is_sensitive_header(key):
            sanitized[key] = list(value) if isinstance(value, list) else value
        elif isinstance(value, list):
            sanitized[key] = [mask_sensitive_value(v) for v in value]
        else:
            sanitized[key] = mask_sensitive_value(value)
    return sanitized
