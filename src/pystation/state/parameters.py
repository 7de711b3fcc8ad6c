"""In-memory parameter store with last-write-wins merging.

This is the only component allowed to mutate a station's parameter set.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict

from pystation.state.decode import read_value
from pystation.state.policy import should_accept_update


class ParameterValue(BaseModel):
    """A decoded parameter value and its modification time (epoch ms)."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    value: Any
    modified: int


ParameterSet = dict[int, ParameterValue]


class ParameterStore:
    """Parameters of one station keyed by parameter type code.

    Given the same sequence of :meth:`merge` calls the store always ends in
    the same state, and re-applying a merge never signals a second change.
    """

    def __init__(self, *, decode: Callable[[int, Any], Any] = read_value) -> None:
        self._decode = decode
        self._params: ParameterSet = {}

    def merge(self, param_type: int, raw_value: Any, modified: int) -> ParameterValue | None:
        """Merge one raw parameter observation.

        Returns the new entry when the stored one was replaced, else ``None``.
        """
        value = self._decode(param_type, raw_value)
        cached = self._params.get(param_type)
        if not should_accept_update(
            param_type=param_type,
            cached_value=cached.value if cached is not None else None,
            cached_modified=cached.modified if cached is not None else None,
            incoming_value=value,
            incoming_modified=modified,
        ):
            return None
        entry = ParameterValue(value=value, modified=modified)
        self._params[param_type] = entry
        return entry

    def lookup(self, param_type: int) -> ParameterValue | None:
        """Current entry for *param_type*, or ``None`` if never observed."""
        return self._params.get(param_type)

    def snapshot(self) -> Mapping[int, ParameterValue]:
        """Read-only copy of the full mapping."""
        return MappingProxyType(dict(self._params))

    def __contains__(self, param_type: object) -> bool:
        return param_type in self._params

    def __iter__(self) -> Iterator[int]:
        return iter(dict(self._params))

    def __len__(self) -> int:
        return len(self._params)
