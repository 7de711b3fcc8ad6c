"""Cloud API access for DSK keys and download ciphers."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp
from pydantic import ValidationError

from pystation._redact import redact_for_log
from pystation.config import StationConfig
from pystation.exceptions import StationApiError, StationError, StationTransportError
from pystation.models.credentials import Cipher, DskKeyResponse

_logger = logging.getLogger(__name__)

_DSK_KEYS_ENDPOINT = "app/equipment/get_dsk_keys"
_CIPHERS_ENDPOINT = "app/cipher/get_ciphers"


class StationApi(Protocol):
    """Structural cloud API interface used by the station coordinator.

    Implementations raise :class:`pystation.exceptions.StationError`
    subclasses on failure.
    """

    async def fetch_dsk_keys(self, station_sn: str) -> DskKeyResponse: ...

    async def get_cipher(self, cipher_id: int, user_id: str) -> Cipher | None: ...


class HttpStationApi:
    """aiohttp implementation of :class:`StationApi`.

    Usage::

        async with HttpStationApi(config) as api:
            keys = await api.fetch_dsk_keys("T8010P1234567890")
    """

    def __init__(
        self,
        config: StationConfig,
        *,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http = session

    async def __aenter__(self) -> HttpStationApi:
        if self._http is None:
            self._http = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._config.request_timeout),
            )
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http is not None:
            await self._http.close()
            self._http = None

    def _require_http(self) -> aiohttp.ClientSession:
        if self._http is None:
            raise StationError("API not initialized. Use 'async with HttpStationApi(...) as api:'")
        return self._http

    async def post(self, endpoint: str, payload: Mapping[str, Any]) -> dict[str, Any]:
        """POST *payload* as JSON and return the decoded response body.

        Raises :class:`StationTransportError` on network failure, non-200
        status, or a body that is not a JSON object, and
        :class:`StationApiError` when the body carries a non-zero ``code``.
        """
        http = self._require_http()
        headers: dict[str, str] = {
            "content-type": "application/json; charset=UTF-8",
            "user-agent": self._config.user_agent,
        }
        if self._config.auth_token:
            headers["X-Auth-Token"] = self._config.auth_token

        url = f"{self._config.api_base_url}{endpoint}"
        _logger.debug("POST %s payload=%s", url, redact_for_log(dict(payload)))

        try:
            async with http.post(url, data=json.dumps(payload), headers=headers) as resp:
                text = await resp.text()
                if resp.status != 200:
                    raise StationTransportError(
                        f"HTTP {resp.status} from {endpoint}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
        except StationTransportError:
            raise
        except aiohttp.ClientError as exc:
            raise StationTransportError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc
        except asyncio.TimeoutError as exc:
            raise StationTransportError(
                f"Request to {endpoint} timed out after {self._config.request_timeout}s",
                endpoint=endpoint,
            ) from exc

        try:
            body = json.loads(text)
        except json.JSONDecodeError as exc:
            raise StationTransportError(
                f"Invalid JSON from {endpoint}: {text[:200]}",
                endpoint=endpoint,
            ) from exc

        if not isinstance(body, dict):
            raise StationTransportError(f"Response from {endpoint} is not an object", endpoint=endpoint)

        code = body.get("code", 0)
        if code != 0:
            raise StationApiError(
                f"{endpoint} failed: code={code} msg={body.get('msg', '')}",
                code=code if isinstance(code, int) else None,
                endpoint=endpoint,
            )
        return body

    async def fetch_dsk_keys(self, station_sn: str) -> DskKeyResponse:
        body = await self.post(_DSK_KEYS_ENDPOINT, {"station_sns": [station_sn]})
        data = body.get("data")
        if not isinstance(data, dict):
            raise StationApiError(f"{_DSK_KEYS_ENDPOINT} response missing data", endpoint=_DSK_KEYS_ENDPOINT)
        try:
            return DskKeyResponse.model_validate(data)
        except ValidationError as exc:
            raise StationApiError(f"{_DSK_KEYS_ENDPOINT} returned malformed keys", endpoint=_DSK_KEYS_ENDPOINT) from exc

    async def get_cipher(self, cipher_id: int, user_id: str) -> Cipher | None:
        body = await self.post(_CIPHERS_ENDPOINT, {"cipher_ids": [cipher_id], "user_id": user_id})
        data = body.get("data")
        if not isinstance(data, list):
            return None
        for entry in data:
            if isinstance(entry, dict) and entry.get("cipher_id") == cipher_id:
                try:
                    return Cipher.model_validate(entry)
                except ValidationError as exc:
                    raise StationApiError(
                        f"{_CIPHERS_ENDPOINT} returned a malformed cipher {cipher_id}",
                        endpoint=_CIPHERS_ENDPOINT,
                    ) from exc
        return None
