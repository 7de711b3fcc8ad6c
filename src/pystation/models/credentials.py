"""Credential and cipher models."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field

from pystation.models._base import StationBaseModel


class DskKey(StationBaseModel):
    """A station DSK key as returned by ``get_dsk_keys``.

    ``expiration`` is epoch seconds.
    """

    station_sn: str
    dsk_key: str
    expiration: int = 0

    @property
    def expires_at(self) -> datetime:
        return datetime.fromtimestamp(self.expiration, tz=UTC)


class DskKeyResponse(StationBaseModel):
    dsk_keys: list[DskKey] = Field(default_factory=list)

    def for_station(self, station_sn: str) -> DskKey | None:
        """Return the key entry for *station_sn*, if present."""
        for key in self.dsk_keys:
            if key.station_sn == station_sn:
                return key
        return None


class Cipher(StationBaseModel):
    """Download cipher: an RSA private key in PEM form."""

    cipher_id: int
    user_id: str = ""
    private_key: str


class Credential(BaseModel):
    """Session key for one station and its expiry.

    Replaced wholesale on refresh, never partially updated.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    key: str = ""
    expires_at: datetime | None = None

    def is_expired(self, now: datetime) -> bool:
        """Whether the key is missing or its expiry has passed."""
        if not self.key:
            return True
        if self.expires_at is None:
            return False
        return now >= self.expires_at
