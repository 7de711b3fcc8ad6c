"""Firmware version comparison helpers."""

from __future__ import annotations

import re

_COMPONENT_RE = re.compile(r"\d+")


def parse_version(value: str | None) -> tuple[int, ...]:
    """Split a firmware string like ``"2.0.7.9"`` into numeric components.

    Non-numeric decoration (``"v2.0.7.9-beta"``) is ignored.  Returns an
    empty tuple when no digits are present.
    """
    if not value:
        return ()
    return tuple(int(part) for part in _COMPONENT_RE.findall(value))


def is_newer_version(current: str | None, threshold: str) -> bool:
    """Return ``True`` when *current* is strictly newer than *threshold*.

    Unknown (empty or digit-less) versions are never considered newer.
    """
    current_parts = parse_version(current)
    threshold_parts = parse_version(threshold)
    if not current_parts or not threshold_parts:
        return False
    width = max(len(current_parts), len(threshold_parts))
    current_parts += (0,) * (width - len(current_parts))
    threshold_parts += (0,) * (width - len(threshold_parts))
    return current_parts > threshold_parts
