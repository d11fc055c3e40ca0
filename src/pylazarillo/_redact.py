"""Redaction of secrets and phone numbers in debug logs.

Every Google Maps request carries the API key as a query parameter, Twilio
requests carry account credentials, and the emergency channel handles the
phone numbers of third parties.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

_REDACTED = "<redacted>"
_MAX_DEPTH = 20

_SECRET_KEYS: frozenset[str] = frozenset(
    {
        "key",
        "api_key",
        "apikey",
        "auth_token",
        "authorization",
        "token",
        "password",
        "cookie",
    }
)

# Twilio form fields and the emergency request/response bodies.
_PHONE_KEYS: frozenset[str] = frozenset({"to", "from", "telefono", "phone_number", "numero"})


def mask_phone(value: str, *, visible: int = 3) -> str:
    """Keep only the last *visible* digits of a phone number."""
    digits = [ch for ch in value if ch.isdigit()]
    if len(digits) <= visible:
        return "*" * len(digits)
    return "*" * (len(digits) - visible) + "".join(digits[-visible:])


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return f"{text[:limit]}…<truncated>"


def _redact_entry(key: str, value: Any, max_string: int, depth: int) -> Any:
    lowered = key.lower()
    if lowered in _SECRET_KEYS:
        return _REDACTED
    if lowered in _PHONE_KEYS and isinstance(value, str):
        return mask_phone(value)
    return redact_for_log(value, max_string=max_string, _depth=depth + 1)


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Return a copy of *value* that is safe to put in a DEBUG log line.

    Mappings, lists and tuples are walked recursively. Scalars pass through
    and any other object is logged by its (truncated) ``repr``.
    """
    if _depth > _MAX_DEPTH:
        return "<max-depth>"
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, str):
        return _truncate(value, max_string)
    if isinstance(value, Mapping):
        return {str(k): _redact_entry(str(k), v, max_string, _depth) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [redact_for_log(item, max_string=max_string, _depth=_depth + 1) for item in value]
    return _truncate(repr(value), max_string)
