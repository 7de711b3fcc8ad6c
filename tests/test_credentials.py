from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta

import pytest

from pystation.credentials import CredentialCache
from pystation.exceptions import StationApiError
from pystation.models.credentials import Cipher, DskKey, DskKeyResponse

_SN = "T8010P1234567890"
_NOW = datetime(2026, 1, 1, tzinfo=UTC)


class _Clock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class _FakeApi:
    def __init__(self) -> None:
        self.calls = 0
        self.keys: list[DskKey] = []
        self.error: Exception | None = None

    async def fetch_dsk_keys(self, station_sn: str) -> DskKeyResponse:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return DskKeyResponse(dsk_keys=self.keys)

    async def get_cipher(self, cipher_id: int, user_id: str) -> Cipher | None:  # pragma: no cover
        return None


def _key(value: str, expires: datetime) -> DskKey:
    return DskKey(station_sn=_SN, dsk_key=value, expiration=int(expires.timestamp()))


@pytest.mark.asyncio
async def test_missing_key_is_fetched_then_reused_while_fresh() -> None:
    api = _FakeApi()
    api.keys = [_key("dsk-1", _NOW + timedelta(hours=1))]
    cache = CredentialCache(api, clock=_Clock(_NOW))

    assert cache.is_expired is True
    credential = await cache.ensure_fresh(_SN)
    assert credential.key == "dsk-1"
    assert cache.expires_at == _NOW + timedelta(hours=1)

    await cache.ensure_fresh(_SN)
    assert api.calls == 1


@pytest.mark.asyncio
async def test_expired_key_is_refreshed() -> None:
    api = _FakeApi()
    api.keys = [_key("dsk-1", _NOW + timedelta(minutes=5))]
    clock = _Clock(_NOW)
    cache = CredentialCache(api, clock=clock)
    await cache.ensure_fresh(_SN)

    clock.now = _NOW + timedelta(minutes=5)
    api.keys = [_key("dsk-2", _NOW + timedelta(hours=2))]
    await cache.ensure_fresh(_SN)

    assert api.calls == 2
    assert cache.key == "dsk-2"


@pytest.mark.asyncio
async def test_failed_refresh_keeps_previous_key(caplog: pytest.LogCaptureFixture) -> None:
    api = _FakeApi()
    api.keys = [_key("dsk-1", _NOW + timedelta(minutes=5))]
    clock = _Clock(_NOW)
    cache = CredentialCache(api, clock=clock)
    await cache.ensure_fresh(_SN)

    clock.now = _NOW + timedelta(hours=1)
    api.error = StationApiError("boom", code=500)
    with caplog.at_level(logging.ERROR, logger="pystation.credentials"):
        credential = await cache.ensure_fresh(_SN)

    assert credential.key == "dsk-1"
    assert cache.is_expired is True
    assert "boom" in caplog.text


@pytest.mark.asyncio
async def test_unexpected_error_is_logged_not_raised(caplog: pytest.LogCaptureFixture) -> None:
    api = _FakeApi()
    api.error = RuntimeError("network down")
    cache = CredentialCache(api, clock=_Clock(_NOW))

    with caplog.at_level(logging.ERROR, logger="pystation.credentials"):
        credential = await cache.ensure_fresh(_SN)

    assert credential.key == ""
    assert "Unexpected error" in caplog.text


@pytest.mark.asyncio
async def test_response_without_station_keeps_empty_key() -> None:
    api = _FakeApi()
    api.keys = [DskKey(station_sn="OTHER", dsk_key="nope", expiration=0)]
    cache = CredentialCache(api, clock=_Clock(_NOW))

    credential = await cache.ensure_fresh(_SN)

    assert credential.key == ""
    assert cache.is_expired is True


@pytest.mark.asyncio
async def test_invalidate_forces_refetch() -> None:
    api = _FakeApi()
    api.keys = [_key("dsk-1", _NOW + timedelta(hours=1))]
    cache = CredentialCache(api, clock=_Clock(_NOW))
    await cache.ensure_fresh(_SN)

    cache.invalidate()
    await cache.ensure_fresh(_SN)

    assert api.calls == 2
