"""P2P command codes, routed wire commands, and session payloads."""

from __future__ import annotations

import enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from pystation.models._base import StationBaseModel

# ------------------------------------------------------------------
# Enums
# ------------------------------------------------------------------


class CommandType(enum.IntEnum):
    """P2P command codes used by the station coordinator."""

    CMD_START_REALTIME_MEDIA = 1003
    CMD_STOP_REALTIME_MEDIA = 1004
    CMD_IRCUT_SWITCH = 1013
    CMD_DOWNLOAD_VIDEO = 1024
    CMD_HUB_REBOOT = 1034
    CMD_DEVS_SWITCH = 1035
    CMD_EAS_SWITCH = 1040
    CMD_DEV_LED_SWITCH = 1046
    CMD_DOWNLOAD_CANCEL = 1051
    CMD_LIVEVIEW_LED_SWITCH = 1056
    CMD_CAMERA_INFO = 1103
    CMD_SDINFO_EX = 1144
    CMD_WIFI_CONFIG = 1151
    CMD_SET_DEVS_OSD = 1214
    CMD_SET_ARMING = 1224
    CMD_SET_PAYLOAD = 1350
    CMD_DOORBELL_SET_PAYLOAD = 1700


class ParamType(enum.IntEnum):
    """Parameter type codes with special handling."""

    CAMERA_MOTION_ZONES = 1204
    SCHEDULE_MODE = 1257
    SNOOZE_MODE = 1271
    DOORBELL_NOTIFICATION_MODE = 2037


class VideoCodec(enum.IntEnum):
    H264 = 0
    H265 = 1


class WatermarkSetting(enum.IntEnum):
    """On-screen display setting for camera recordings."""

    OFF = 0
    TIMESTAMP = 1
    TIMESTAMP_AND_LOGO = 2


class CommandEncoding(enum.StrEnum):
    """Which transport ``send_*`` call carries a :class:`WireCommand`."""

    INT = "int"
    INT_STRING = "int_string"
    STRING = "string"
    STRING_PAYLOAD = "string_payload"


# ------------------------------------------------------------------
# Routed command
# ------------------------------------------------------------------


class WireCommand(BaseModel):
    """A concrete command ready to hand to the P2P session.

    Only the fields relevant to ``encoding`` are read by the dispatcher:

    * ``INT``: ``value``, ``str_value``
    * ``INT_STRING``: ``value``, ``value_sub``, ``str_value``, ``str_value_sub``
    * ``STRING``: ``str_value``, ``str_value_sub``
    * ``STRING_PAYLOAD``: ``payload``
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    command: CommandType
    encoding: CommandEncoding
    channel: int
    account_id: str = ""
    value: int = 0
    value_sub: int = 0
    str_value: str = ""
    str_value_sub: str = ""
    payload: str | None = None


# ------------------------------------------------------------------
# Session payloads
# ------------------------------------------------------------------


class Address(StationBaseModel):
    """Remote endpoint a P2P session connected to."""

    host: str
    port: int


class CommandResult(StationBaseModel):
    """Result of a command reported asynchronously by the P2P session."""

    command_type: int
    channel: int
    return_code: int

    @property
    def success(self) -> bool:
        return self.return_code == 0


class CameraInfoParam(StationBaseModel):
    """One parameter of a camera-info snapshot.

    ``dev_type`` carries the channel the parameter originates from.
    """

    dev_type: int
    param_type: int
    param_value: Any = ""


class CameraInfoResponse(StationBaseModel):
    """Camera-info snapshot covering the station and its devices."""

    params: list[CameraInfoParam] = Field(default_factory=list)
