"""Client configuration for pystation."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pystation._constants import API_BASE_URL, USER_AGENT
from pystation.exceptions import StationConfigError
from pystation.models.commands import VideoCodec


@dataclasses.dataclass(frozen=True)
class StationConfig:
    """Station coordinator configuration.

    Parameters
    ----------
    api_base_url : str
        Cloud API base URL used for DSK key and cipher lookups.
    auth_token : str or None
        Session token sent as ``X-Auth-Token``.  Obtaining it (login) is
        outside this library.
    request_timeout : float
        Total timeout in seconds for a single cloud API request.
    client_os : str
        ``ClientOS`` value announced in livestream payloads.
    video_codec : VideoCodec
        Codec requested when starting a livestream.
    user_agent : str
        User agent sent to the cloud API.
    """

    api_base_url: str = API_BASE_URL
    auth_token: str | None = None
    request_timeout: float = 30.0
    client_os: str = "Android"
    video_codec: VideoCodec = VideoCodec.H264
    user_agent: str = USER_AGENT

    @classmethod
    def from_env(cls, **overrides: Any) -> StationConfig:
        """Create configuration from environment variables.

        Reads optional ``STATION_*`` variables.  Explicit keyword
        arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        StationConfig
            Populated configuration.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "STATION_API_BASE_URL": "api_base_url",
            "STATION_AUTH_TOKEN": "auth_token",
            "STATION_CLIENT_OS": "client_os",
            "STATION_USER_AGENT": "user_agent",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        timeout_env = env.get("STATION_REQUEST_TIMEOUT")
        if timeout_env is not None and "request_timeout" not in overrides:
            try:
                config_kwargs["request_timeout"] = float(timeout_env)
            except ValueError as exc:
                raise StationConfigError(f"STATION_REQUEST_TIMEOUT is not a number: {timeout_env!r}") from exc

        codec_env = env.get("STATION_VIDEO_CODEC")
        if codec_env is not None and "video_codec" not in overrides:
            try:
                config_kwargs["video_codec"] = VideoCodec[codec_env.strip().upper()]
            except KeyError as exc:
                raise StationConfigError(f"Unknown STATION_VIDEO_CODEC: {codec_env!r}") from exc

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
