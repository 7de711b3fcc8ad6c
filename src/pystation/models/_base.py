"""Base model and enum for station API payloads.

Every cloud/P2P payload model inherits from :class:`StationBaseModel`
which provides:

* ``None`` values dropped before validation so field defaults apply.
* A ``raw`` dict that captures the original payload.

State enums inherit from :class:`StationEnum` which adds a ``_missing_``
hook returning ``UNKNOWN`` for any value without a mapped member.
"""

from __future__ import annotations

import enum
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator

# Threshold to distinguish seconds from milliseconds.
_MS_THRESHOLD = 1_000_000_000_000


def to_timestamp_ms(value: Any) -> int:
    """Normalise an epoch timestamp (seconds **or** milliseconds) to milliseconds.

    ``None`` and empty strings map to ``0``.
    """
    if value is None or value == "":
        return 0
    ts = int(float(value))
    if 0 < ts < _MS_THRESHOLD:
        ts *= 1000
    return ts


TimestampMs = Annotated[int, BeforeValidator(to_timestamp_ms)]
"""Annotated type that coerces epoch ints (seconds or ms) to milliseconds."""


class StationEnum(enum.IntEnum):
    """Base for station state enums.

    Every subclass **must** define ``UNKNOWN``.  Values without a mapped
    member resolve to ``UNKNOWN`` instead of raising ``ValueError``.
    """

    @classmethod
    def _missing_(cls, value: object) -> StationEnum:
        unknown: StationEnum = cls.UNKNOWN  # type: ignore[attr-defined]
        return unknown


class StationBaseModel(BaseModel):
    """Base for station payload models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    raw: dict[str, Any] = Field(default_factory=dict)
    """Original payload dict."""

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, values: Any) -> Any:
        """Drop ``None`` values and stash the raw payload."""
        if not isinstance(values, dict):
            return values
        cleaned = {key: value for key, value in values.items() if value is not None}
        if "raw" not in values:
            cleaned["raw"] = dict(values)
        return cleaned
