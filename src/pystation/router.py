"""Intent to wire-command routing.

Every public station intent is translated here into one or more
:class:`pystation.models.commands.WireCommand` values.  Routing is pure: it
reads the hub record, the target device's capabilities and firmware
versions, and never touches the P2P session.  Rejections are raised as
:class:`pystation.exceptions.StationCommandError` subclasses.
"""

from __future__ import annotations

import enum
import json
import logging
from typing import Any

from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from pystation._constants import (
    DOORBELL_LIVESTREAM_SUBCOMMAND,
    GUARD_MODE_PAYLOAD_MAX_VERSION,
    LIVESTREAM_PAYLOAD_MIN_VERSION,
    LIVESTREAM_T8420_MIN_VERSION,
    LIVESTREAM_T8420_PREFIX,
    STATION_CHANNEL,
)
from pystation._versions import is_newer_version
from pystation.capabilities import Capability, CapabilityOracle, has_any
from pystation.config import StationConfig
from pystation.exceptions import DeviceNotManagedError, InvalidGuardModeError, UnsupportedCapabilityError
from pystation.models.commands import CommandEncoding, CommandType, WatermarkSetting, WireCommand
from pystation.models.hub import DeviceInfo, GuardMode, HubInfo
from pystation.p2p import public_key_hex

_logger = logging.getLogger(__name__)


class Intent(enum.StrEnum):
    SET_GUARD_MODE = "set_guard_mode"
    GET_CAMERA_INFO = "get_camera_info"
    GET_STORAGE_INFO = "get_storage_info"
    REBOOT = "reboot"
    SET_STATUS_LED = "set_status_led"
    SET_AUTO_NIGHT_VISION = "set_auto_night_vision"
    SET_ANTI_THEFT_DETECTION = "set_anti_theft_detection"
    SET_WATERMARK = "set_watermark"
    ENABLE_DEVICE = "enable_device"
    START_DOWNLOAD = "start_download"
    CANCEL_DOWNLOAD = "cancel_download"
    START_LIVESTREAM = "start_livestream"
    STOP_LIVESTREAM = "stop_livestream"


#: Capabilities a device needs (any of) before the intent is routed.
CAPABILITY_GATES: dict[Intent, frozenset[Capability]] = {
    Intent.SET_STATUS_LED: frozenset({Capability.CAMERA_2, Capability.INDOOR_CAMERA, Capability.SOLO_CAMERA}),
    Intent.SET_AUTO_NIGHT_VISION: frozenset(
        {
            Capability.CAMERA_2,
            Capability.INDOOR_CAMERA,
            Capability.SOLO_CAMERA,
            Capability.FLOODLIGHT,
            Capability.BATTERY_DOORBELL,
            Capability.BATTERY_DOORBELL_2,
        }
    ),
    Intent.SET_ANTI_THEFT_DETECTION: frozenset({Capability.CAMERA_2}),
    Intent.SET_WATERMARK: frozenset({Capability.CAMERA_2, Capability.INDOOR_CAMERA}),
    Intent.ENABLE_DEVICE: frozenset({Capability.CAMERA}),
}

_DOORBELL_STYLE_LIVESTREAM: frozenset[Capability] = frozenset(
    {Capability.DOORBELL, Capability.FLOODLIGHT, Capability.SOLO_CAMERA, Capability.INDOOR_CAMERA}
)


def _payload(data: dict[str, Any]) -> str:
    return json.dumps(data, separators=(",", ":"))


def station_device(hub: HubInfo) -> DeviceInfo:
    """The station itself, viewed as a device on the station channel."""
    return DeviceInfo(
        serial=hub.station_sn,
        station_serial=hub.station_sn,
        channel=STATION_CHANNEL,
        device_type=hub.device_type,
        model=hub.station_model,
    )


class CommandRouter:
    """Routes station intents to wire commands.

    Parameters
    ----------
    oracle : CapabilityOracle
        Capability classification for the station and its devices.
    config : StationConfig
        Supplies livestream ``ClientOS`` and codec.
    """

    def __init__(self, oracle: CapabilityOracle, config: StationConfig) -> None:
        self._oracle = oracle
        self._config = config

    # ------------------------------------------------------------------
    # Gates
    # ------------------------------------------------------------------

    def supports(self, intent: Intent, device: DeviceInfo) -> bool:
        """Whether *device* passes the capability gate of *intent*."""
        required = CAPABILITY_GATES.get(intent)
        if required is None:
            return True
        return has_any(self._oracle, device, required)

    def _require_managed(self, hub: HubInfo, intent: Intent, device: DeviceInfo) -> None:
        if device.station_serial != hub.station_sn:
            raise DeviceNotManagedError(
                f"{intent}: device {device.serial} belongs to station {device.station_serial}, not {hub.station_sn}"
            )

    def _require_capability(self, hub: HubInfo, intent: Intent, device: DeviceInfo) -> None:
        self._require_managed(hub, intent, device)
        if not self.supports(intent, device):
            raise UnsupportedCapabilityError(
                f"{intent} is not supported by device {device.serial} (type {device.device_type.name})",
                intent=str(intent),
                serial=device.serial,
            )

    # ------------------------------------------------------------------
    # Station intents
    # ------------------------------------------------------------------

    def guard_mode(self, hub: HubInfo, mode: GuardMode | int) -> tuple[WireCommand, ...]:
        """Route a guard mode change.

        Stations on firmware up to 2.0.7.9 that are not integrated devices,
        and all solo cameras, take the JSON ``CMD_SET_PAYLOAD`` form.
        """
        if isinstance(mode, bool) or not isinstance(mode, int) or mode not in {m.value for m in GuardMode}:
            raise InvalidGuardModeError(f"Unsupported guard mode {mode!r} for station {hub.station_sn}")
        mode_value = int(mode)
        station = station_device(hub)
        account = hub.member.admin_user_id

        legacy_firmware = not is_newer_version(hub.main_sw_version, GUARD_MODE_PAYLOAD_MAX_VERSION)
        integrated = self._oracle.has_capability(station, Capability.INTEGRATED_DEVICE)
        solo = self._oracle.has_capability(station, Capability.SOLO_CAMERA)

        if (legacy_firmware and not integrated) or solo:
            _logger.debug(
                "Guard mode via CMD_SET_PAYLOAD for station %s (main_sw_version=%s)",
                hub.station_sn,
                hub.main_sw_version,
            )
            payload = _payload(
                {
                    "account_id": account,
                    "cmd": int(CommandType.CMD_SET_ARMING),
                    "mValue3": 0,
                    "payload": {
                        "mode_type": mode_value,
                        "user_name": hub.member.nick_name,
                    },
                }
            )
            return (
                WireCommand(
                    command=CommandType.CMD_SET_PAYLOAD,
                    encoding=CommandEncoding.STRING_PAYLOAD,
                    payload=payload,
                    channel=STATION_CHANNEL,
                    account_id=account,
                ),
            )

        _logger.debug("Guard mode via CMD_SET_ARMING for station %s", hub.station_sn)
        return (
            WireCommand(
                command=CommandType.CMD_SET_ARMING,
                encoding=CommandEncoding.INT,
                value=mode_value,
                str_value=account,
                channel=STATION_CHANNEL,
                account_id=account,
            ),
        )

    def camera_info(self, hub: HubInfo) -> tuple[WireCommand, ...]:
        return (
            WireCommand(
                command=CommandType.CMD_CAMERA_INFO,
                encoding=CommandEncoding.INT,
                value=STATION_CHANNEL,
                channel=STATION_CHANNEL,
            ),
        )

    def storage_info(self, hub: HubInfo) -> tuple[WireCommand, ...]:
        account = hub.member.admin_user_id
        return (
            WireCommand(
                command=CommandType.CMD_SDINFO_EX,
                encoding=CommandEncoding.INT_STRING,
                value=0,
                value_sub=0,
                str_value=account,
                channel=STATION_CHANNEL,
                account_id=account,
            ),
        )

    def reboot(self, hub: HubInfo) -> tuple[WireCommand, ...]:
        account = hub.member.admin_user_id
        return (
            WireCommand(
                command=CommandType.CMD_HUB_REBOOT,
                encoding=CommandEncoding.INT,
                value=0,
                str_value=account,
                channel=STATION_CHANNEL,
                account_id=account,
            ),
        )

    def start_download(self, hub: HubInfo, path: str) -> tuple[WireCommand, ...]:
        account = hub.member.admin_user_id
        return (
            WireCommand(
                command=CommandType.CMD_DOWNLOAD_VIDEO,
                encoding=CommandEncoding.STRING,
                str_value=path,
                str_value_sub=account,
                channel=STATION_CHANNEL,
                account_id=account,
            ),
        )

    # ------------------------------------------------------------------
    # Device intents
    # ------------------------------------------------------------------

    def _switch(
        self,
        hub: HubInfo,
        command: CommandType,
        device: DeviceInfo,
        value: int,
        value_sub: int,
        *,
        with_account: bool = True,
    ) -> WireCommand:
        account = hub.member.admin_user_id if with_account else ""
        return WireCommand(
            command=command,
            encoding=CommandEncoding.INT_STRING,
            value=value,
            value_sub=value_sub,
            str_value=account,
            channel=device.channel,
            account_id=account,
        )

    def status_led(self, hub: HubInfo, device: DeviceInfo, enabled: bool) -> tuple[WireCommand, ...]:
        self._require_capability(hub, Intent.SET_STATUS_LED, device)
        value = 1 if enabled else 0
        return (
            self._switch(hub, CommandType.CMD_DEV_LED_SWITCH, device, value, 1),
            self._switch(hub, CommandType.CMD_LIVEVIEW_LED_SWITCH, device, value, 1),
        )

    def auto_night_vision(self, hub: HubInfo, device: DeviceInfo, enabled: bool) -> tuple[WireCommand, ...]:
        self._require_capability(hub, Intent.SET_AUTO_NIGHT_VISION, device)
        return (self._switch(hub, CommandType.CMD_IRCUT_SWITCH, device, 1 if enabled else 0, 1, with_account=False),)

    def anti_theft_detection(self, hub: HubInfo, device: DeviceInfo, enabled: bool) -> tuple[WireCommand, ...]:
        self._require_capability(hub, Intent.SET_ANTI_THEFT_DETECTION, device)
        return (self._switch(hub, CommandType.CMD_EAS_SWITCH, device, 1 if enabled else 0, 0),)

    def watermark(self, hub: HubInfo, device: DeviceInfo, setting: WatermarkSetting | int) -> tuple[WireCommand, ...]:
        self._require_capability(hub, Intent.SET_WATERMARK, device)
        return (self._switch(hub, CommandType.CMD_SET_DEVS_OSD, device, int(setting), 0),)

    def enable_device(self, hub: HubInfo, device: DeviceInfo, enabled: bool) -> tuple[WireCommand, ...]:
        self._require_capability(hub, Intent.ENABLE_DEVICE, device)
        # The station expects "switch off" semantics: 0 enables, 1 disables.
        return (self._switch(hub, CommandType.CMD_DEVS_SWITCH, device, 0 if enabled else 1, 1),)

    def cancel_download(self, hub: HubInfo, device: DeviceInfo) -> tuple[WireCommand, ...]:
        account = hub.member.admin_user_id
        return (
            WireCommand(
                command=CommandType.CMD_DOWNLOAD_CANCEL,
                encoding=CommandEncoding.INT,
                value=device.channel,
                str_value=account,
                channel=device.channel,
                account_id=account,
            ),
        )

    def start_livestream(
        self,
        hub: HubInfo,
        device: DeviceInfo,
        rsa_key: RSAPrivateKey | None,
    ) -> tuple[WireCommand, ...]:
        """Route a livestream start.

        Doorbells, floodlights, solo and indoor cameras always take the
        doorbell JSON payload.  Other devices use the plain
        ``CMD_START_REALTIME_MEDIA`` on integrated stations or older
        firmware (except T8420 on newer firmware), else the
        ``CMD_SET_PAYLOAD`` form.
        """
        account = hub.member.admin_user_id
        key = public_key_hex(rsa_key)
        codec = int(self._config.video_codec)

        if has_any(self._oracle, device, _DOORBELL_STYLE_LIVESTREAM):
            _logger.debug(
                "Livestream via CMD_DOORBELL_SET_PAYLOAD for station %s (main_sw_version=%s)",
                hub.station_sn,
                hub.main_sw_version,
            )
            payload = _payload(
                {
                    "commandType": DOORBELL_LIVESTREAM_SUBCOMMAND,
                    "data": {
                        "account_id": account,
                        "encryptkey": key,
                        "streamtype": codec,
                    },
                }
            )
            return (
                WireCommand(
                    command=CommandType.CMD_DOORBELL_SET_PAYLOAD,
                    encoding=CommandEncoding.STRING_PAYLOAD,
                    payload=payload,
                    channel=STATION_CHANNEL,
                    account_id=account,
                ),
            )

        station = station_device(hub)
        integrated = self._oracle.has_capability(station, Capability.INTEGRATED_DEVICE)
        legacy_firmware = not is_newer_version(hub.main_sw_version, LIVESTREAM_PAYLOAD_MIN_VERSION)
        t8420_payload = hub.station_sn.startswith(LIVESTREAM_T8420_PREFIX) and is_newer_version(
            hub.main_sw_version, LIVESTREAM_T8420_MIN_VERSION
        )

        if (integrated or legacy_firmware) and not t8420_payload:
            _logger.debug(
                "Livestream via CMD_START_REALTIME_MEDIA for station %s (main_sw_version=%s)",
                hub.station_sn,
                hub.main_sw_version,
            )
            return (
                WireCommand(
                    command=CommandType.CMD_START_REALTIME_MEDIA,
                    encoding=CommandEncoding.INT,
                    value=0,
                    str_value=key,
                    channel=device.channel,
                    account_id=account,
                ),
            )

        _logger.debug(
            "Livestream via CMD_SET_PAYLOAD for station %s (main_sw_version=%s)",
            hub.station_sn,
            hub.main_sw_version,
        )
        payload = _payload(
            {
                "account_id": account,
                "cmd": int(CommandType.CMD_START_REALTIME_MEDIA),
                "mValue3": int(CommandType.CMD_START_REALTIME_MEDIA),
                "payload": {
                    "ClientOS": self._config.client_os,
                    "key": key,
                    "streamtype": codec,
                },
            }
        )
        return (
            WireCommand(
                command=CommandType.CMD_SET_PAYLOAD,
                encoding=CommandEncoding.STRING_PAYLOAD,
                payload=payload,
                channel=device.channel,
                account_id=account,
            ),
        )

    def stop_livestream(self, hub: HubInfo, device: DeviceInfo) -> tuple[WireCommand, ...]:
        return (
            WireCommand(
                command=CommandType.CMD_STOP_REALTIME_MEDIA,
                encoding=CommandEncoding.INT,
                value=device.channel,
                channel=device.channel,
            ),
        )
