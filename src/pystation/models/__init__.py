"""Data models for station API and P2P payloads."""

from pystation.models._base import StationBaseModel, StationEnum, TimestampMs, to_timestamp_ms
from pystation.models.commands import (
    Address,
    CameraInfoParam,
    CameraInfoResponse,
    CommandEncoding,
    CommandResult,
    CommandType,
    ParamType,
    VideoCodec,
    WatermarkSetting,
    WireCommand,
)
from pystation.models.credentials import Cipher, Credential, DskKey, DskKeyResponse
from pystation.models.hub import (
    AlarmMode,
    DeviceInfo,
    DeviceType,
    GuardMode,
    HubDevice,
    HubInfo,
    HubMember,
    HubParam,
)

__all__ = [
    "Address",
    "AlarmMode",
    "CameraInfoParam",
    "CameraInfoResponse",
    "Cipher",
    "CommandEncoding",
    "CommandResult",
    "CommandType",
    "Credential",
    "DeviceInfo",
    "DeviceType",
    "DskKey",
    "DskKeyResponse",
    "GuardMode",
    "HubDevice",
    "HubInfo",
    "HubMember",
    "HubParam",
    "ParamType",
    "StationBaseModel",
    "StationEnum",
    "TimestampMs",
    "VideoCodec",
    "WatermarkSetting",
    "WireCommand",
    "to_timestamp_ms",
]
