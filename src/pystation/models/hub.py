"""Hub (station) and device records returned by the cloud API."""

from __future__ import annotations

import enum

from pydantic import Field

from pystation.models._base import StationBaseModel, StationEnum, TimestampMs


class GuardMode(enum.IntEnum):
    """Guard modes a station can be switched to."""

    AWAY = 0
    HOME = 1
    SCHEDULE = 2
    CUSTOM1 = 3
    CUSTOM2 = 4
    CUSTOM3 = 5
    GEO = 47
    DISARMED = 63


class AlarmMode(StationEnum):
    """Alarm mode reported by the station over P2P."""

    UNKNOWN = -1
    AWAY = 0
    HOME = 1
    DISARMED = 63


class DeviceType(StationEnum):
    """Cloud ``device_type`` codes."""

    UNKNOWN = -1
    STATION = 0
    CAMERA = 1
    SENSOR = 2
    FLOODLIGHT = 3
    CAMERA_E = 4
    DOORBELL = 5
    BATTERY_DOORBELL = 7
    CAMERA2C = 8
    CAMERA2 = 9
    MOTION_SENSOR = 10
    KEYPAD = 11
    CAMERA2_PRO = 14
    CAMERA2C_PRO = 15
    BATTERY_DOORBELL_2 = 16
    INDOOR_CAMERA = 30
    INDOOR_PT_CAMERA = 31
    SOLO_CAMERA = 32
    SOLO_CAMERA_PRO = 33
    INDOOR_CAMERA_1080 = 34
    INDOOR_PT_CAMERA_1080 = 35


class HubMember(StationBaseModel):
    """Account membership of the hub."""

    admin_user_id: str = ""
    nick_name: str = ""


class HubParam(StationBaseModel):
    """One parameter entry of the hub snapshot."""

    param_type: int
    param_value: str = ""
    update_time: TimestampMs = 0


class HubDevice(StationBaseModel):
    """A device managed by the hub, addressed by its P2P channel."""

    device_sn: str
    device_channel: int
    device_name: str = ""
    device_model: str = ""
    device_type: DeviceType = DeviceType.UNKNOWN
    station_sn: str = ""


class HubInfo(StationBaseModel):
    """Cloud record describing one station."""

    station_sn: str
    station_name: str = ""
    station_model: str = ""
    device_type: DeviceType = DeviceType.STATION
    main_sw_version: str = ""
    main_hw_version: str = ""
    wifi_mac: str = ""
    ip_addr: str = ""
    p2p_did: str = ""
    member: HubMember = Field(default_factory=HubMember)
    params: list[HubParam] = Field(default_factory=list)
    devices: list[HubDevice] = Field(default_factory=list)

    def device_serial_for_channel(self, channel: int) -> str | None:
        """Return the serial of the managed device on *channel*, if any."""
        for device in self.devices:
            if device.device_channel == channel:
                return device.device_sn
        return None


class DeviceInfo(StationBaseModel):
    """Identity of a device targeted by a station intent."""

    serial: str
    station_serial: str
    channel: int
    device_type: DeviceType = DeviceType.UNKNOWN
    model: str = ""

    @classmethod
    def from_hub_device(cls, device: HubDevice, station_sn: str) -> DeviceInfo:
        """Build a :class:`DeviceInfo` for a device listed in a hub record."""
        return cls(
            serial=device.device_sn,
            station_serial=device.station_sn or station_sn,
            channel=device.device_channel,
            device_type=device.device_type,
            model=device.device_model,
        )
