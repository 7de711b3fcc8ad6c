"""Raw parameter value decoding."""

from __future__ import annotations

import base64
import binascii
import json
from typing import Any

from pystation.models.commands import ParamType

_BASE64_JSON_TYPES: frozenset[int] = frozenset(
    {
        ParamType.SNOOZE_MODE,
        ParamType.CAMERA_MOTION_ZONES,
        ParamType.DOORBELL_NOTIFICATION_MODE,
    }
)


def read_value(param_type: int, raw: Any) -> Any:
    """Decode a raw parameter value as reported by the cloud or the station.

    Strings are JSON-decoded when possible, so ``"1"`` becomes ``1`` and
    ``'{"a": 1}'`` a dict.  A handful of types carry base64-wrapped JSON.
    Empty values decode to ``""``.
    """
    if raw is None or raw == "":
        return ""
    if not isinstance(raw, str):
        return raw

    if param_type in _BASE64_JSON_TYPES:
        try:
            return json.loads(base64.b64decode(raw).decode("ascii"))
        except (binascii.Error, UnicodeDecodeError, ValueError):
            return ""

    try:
        return json.loads(raw)
    except ValueError:
        return raw
