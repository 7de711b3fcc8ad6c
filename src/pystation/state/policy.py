"""Deterministic parameter merge policy.

This module intentionally contains *no* payload decoding.  Callers hand in
already-decoded values and millisecond timestamps.
"""

from __future__ import annotations

from typing import Any

from pystation._constants import IGNORED_PARAM_TYPE


def is_ignored(param_type: int) -> bool:
    """Parameter types that never change once observed (or never at all)."""
    return param_type == IGNORED_PARAM_TYPE


def should_accept_update(
    *,
    param_type: int,
    cached_value: Any,
    cached_modified: int | None,
    incoming_value: Any,
    incoming_modified: int,
) -> bool:
    """Decide whether an incoming parameter value replaces the cached one.

    Policy:
    - The ignored type code is never accepted.
    - First observation (nothing cached) is accepted.
    - Otherwise accept only if the value differs AND the incoming
      timestamp is strictly newer.
    """
    if is_ignored(param_type):
        return False
    if cached_modified is None:
        return True
    return cached_value != incoming_value and cached_modified < incoming_modified
