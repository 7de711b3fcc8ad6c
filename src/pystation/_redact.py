"""Helpers for safe debug logging.

Station traffic carries secrets (DSK keys, auth tokens, RSA keys).  This
module redacts those fields before they reach DEBUG logs, both in cloud API
request dicts and in the JSON payloads sent over the P2P session.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

_REDACTED = "<redacted>"
_MAX_DEPTH = 16

_SENSITIVE_KEYS: frozenset[str] = frozenset(
    {
        "key",
        "encryptkey",
        "token",
        "auth_token",
        "x-auth-token",
        "authorization",
        "cookie",
    }
)


def _is_sensitive(name: str) -> bool:
    lowered = name.lower()
    # dsk_key, private_key, ...
    return lowered in _SENSITIVE_KEYS or lowered.endswith("_key")


def redact_for_log(value: Any, *, max_string: int = 512) -> Any:
    """Return a copy of *value* with secret fields replaced.

    Mappings, lists, tuples and pydantic models are walked; secrets are
    recognised by field name.  Long strings are shortened to *max_string*
    characters and bytes are reduced to their length.
    """
    return _redact(value, max_string, 0)


def _redact(value: Any, max_string: int, depth: int) -> Any:
    if depth > _MAX_DEPTH:
        return "<max-depth>"
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, str):
        return value if len(value) <= max_string else f"{value[:max_string]}...<truncated>"
    if isinstance(value, (bytes, bytearray)):
        return f"<{len(value)} bytes>"
    if isinstance(value, BaseModel):
        value = value.model_dump(exclude={"raw"}) if "raw" in type(value).model_fields else value.model_dump()
    if isinstance(value, Mapping):
        return {
            str(name): _REDACTED if _is_sensitive(str(name)) else _redact(item, max_string, depth + 1)
            for name, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [_redact(item, max_string, depth + 1) for item in value]
    return repr(value)


def redact_payload(payload: str | None) -> Any:
    """Redact a JSON command payload; non-JSON text is returned unchanged."""
    if not payload:
        return payload
    try:
        decoded = json.loads(payload)
    except ValueError:
        return payload
    return redact_for_log(decoded)


def mask_secret(value: str | None, *, visible: int = 4) -> str:
    """Show only the last *visible* characters of a secret."""
    if not value:
        return "<empty>"
    if len(value) <= visible:
        return "*" * len(value)
    return f"{'*' * (len(value) - visible)}{value[-visible:]}"
