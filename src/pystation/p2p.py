"""Structural interface of the P2P transport session.

The actual session (discovery, framing, encryption, media demuxing) lives
outside this library.  A :class:`pystation.station.Station` only needs the
surface below, which keeps test doubles trivial.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from pystation.events import Listener
from pystation.models.commands import CommandType


class P2PSession(Protocol):
    """One P2P connection to a station.

    Events (see :class:`pystation.events.SessionEvent`):

    * ``connected(address: Address)``
    * ``disconnected()``
    * ``command(result: CommandResult)``
    * ``alarm_mode(mode: int)``
    * ``camera_info(snapshot: CameraInfoResponse)``
    * ``start_download(channel, metadata, video_stream, audio_stream)``
    * ``finish_download(channel)``
    * ``start_livestream(channel, metadata, video_stream, audio_stream)``
    * ``stop_livestream(channel)``
    * ``wifi_rssi(channel, rssi)``
    """

    def on(self, event: str, listener: Listener) -> Listener: ...

    def remove_all_listeners(self, event: str | None = None) -> None: ...

    async def connect(self) -> None:
        """Run the handshake; returns once it succeeded or failed."""
        ...

    def close(self) -> None: ...

    def is_connected(self) -> bool: ...

    def is_live_streaming(self, channel: int) -> bool: ...

    def get_rsa_private_key(self) -> RSAPrivateKey | None:
        """Key whose public modulus is announced when starting a livestream."""
        ...

    def set_download_key(self, private_key_pem: str) -> None:
        """Install the RSA key used to decrypt the next download."""
        ...

    async def send_command_with_int(
        self,
        command: CommandType,
        value: int,
        str_value: str = "",
        channel: int = 255,
    ) -> None: ...

    async def send_command_with_int_string(
        self,
        command: CommandType,
        value: int,
        value_sub: int = 0,
        str_value: str = "",
        str_value_sub: str = "",
        channel: int = 255,
    ) -> None: ...

    async def send_command_with_string(
        self,
        command: CommandType,
        str_value: str,
        str_value_sub: str = "",
        channel: int = 255,
    ) -> None: ...

    async def send_command_with_string_payload(
        self,
        command: CommandType,
        payload: str,
        channel: int = 255,
    ) -> None: ...


SessionFactory = Callable[[str, str], P2PSession]
"""Build a session from ``(p2p_did, dsk_key)``."""


def public_key_hex(key: RSAPrivateKey | None) -> str:
    """Hex of the RSA public modulus, big-endian, without a sign byte."""
    if key is None:
        return ""
    modulus = key.public_key().public_numbers().n
    return modulus.to_bytes((modulus.bit_length() + 7) // 8, "big").hex()
