"""Lazy DSK key cache for a single station."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from pystation._redact import mask_secret
from pystation.api import StationApi
from pystation.exceptions import StationError
from pystation.models.credentials import Credential

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class CredentialCache:
    """Holds the DSK key used to open P2P sessions to one station.

    The key is refreshed on demand only: :meth:`ensure_fresh` is awaited at
    every connect attempt and talks to the cloud API when the key is
    missing or expired.
    """

    def __init__(
        self,
        api: StationApi,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._api = api
        self._clock = clock
        self._credential = Credential()

    @property
    def credential(self) -> Credential:
        return self._credential

    @property
    def key(self) -> str:
        return self._credential.key

    @property
    def expires_at(self) -> datetime | None:
        return self._credential.expires_at

    @property
    def is_expired(self) -> bool:
        """Whether the key is missing or past its expiry."""
        return self._credential.is_expired(self._clock())

    def invalidate(self) -> None:
        """Forget the cached key (next :meth:`ensure_fresh` refetches it)."""
        self._credential = Credential()

    async def ensure_fresh(self, station_sn: str) -> Credential:
        """Refresh the key when missing or expired.

        Never raises: failures are logged and the previous (possibly empty)
        credential is kept so the caller can still attempt a connection.
        """
        if not self.is_expired:
            return self._credential

        _logger.debug(
            "DSK key for station %s missing or expired (expires_at=%s), requesting a new one",
            station_sn,
            self._credential.expires_at,
        )
        try:
            response = await self._api.fetch_dsk_keys(station_sn)
        except StationError as exc:
            _logger.error("Fetching DSK key for station %s failed: %s", station_sn, exc)
            return self._credential
        except Exception:
            _logger.exception("Unexpected error fetching DSK key for station %s", station_sn)
            return self._credential

        entry = response.for_station(station_sn)
        if entry is None:
            _logger.error("DSK key response does not contain station %s", station_sn)
            return self._credential

        self._credential = Credential(key=entry.dsk_key, expires_at=entry.expires_at)
        _logger.debug(
            "DSK key for station %s refreshed key=%s expires_at=%s",
            station_sn,
            mask_secret(entry.dsk_key),
            entry.expires_at,
        )
        return self._credential
