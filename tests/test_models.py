"""Tests for Pydantic model parsing with StationBaseModel + StationEnum."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from pydantic import ValidationError

from pystation.models import (
    AlarmMode,
    CommandEncoding,
    CommandType,
    DeviceInfo,
    DeviceType,
    HubInfo,
    WireCommand,
    to_timestamp_ms,
)
from pystation.models.commands import CommandResult
from pystation.models.credentials import Credential, DskKey

# ------------------------------------------------------------------
# StationEnum
# ------------------------------------------------------------------


class TestStationEnum:
    def test_unknown_value_falls_back(self) -> None:
        assert DeviceType(99) == DeviceType.UNKNOWN
        assert AlarmMode(2) == AlarmMode.UNKNOWN

    def test_known_value(self) -> None:
        assert DeviceType(9) == DeviceType.CAMERA2


# ------------------------------------------------------------------
# Timestamps
# ------------------------------------------------------------------


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, 0),
        ("", 0),
        (0, 0),
        (1_700_000_000, 1_700_000_000_000),
        ("1700000000", 1_700_000_000_000),
        (1_700_000_000_123, 1_700_000_000_123),
    ],
)
def test_to_timestamp_ms(value: object, expected: int) -> None:
    assert to_timestamp_ms(value) == expected


# ------------------------------------------------------------------
# Hub record
# ------------------------------------------------------------------


class TestHubInfo:
    def test_parses_cloud_record(self) -> None:
        hub = HubInfo.model_validate(
            {
                "station_sn": "T8010P1234567890",
                "station_name": None,
                "device_type": 0,
                "main_sw_version": "2.1.7.6",
                "member": {"admin_user_id": "user-1", "nick_name": "Alice", "member_type": 2},
                "params": [{"param_type": 1176, "param_value": "1", "update_time": 1_700_000_000}],
                "devices": [{"device_sn": "T8114P0000000001", "device_channel": 0, "device_type": 9}],
                "time_zone": "Europe/Berlin",
            }
        )

        assert hub.station_name == ""
        assert hub.params[0].update_time == 1_700_000_000_000
        assert hub.raw["time_zone"] == "Europe/Berlin"
        assert hub.device_serial_for_channel(0) == "T8114P0000000001"
        assert hub.device_serial_for_channel(5) is None

    def test_device_info_falls_back_to_station_serial(self) -> None:
        hub = HubInfo.model_validate(
            {
                "station_sn": "T8010P1234567890",
                "devices": [{"device_sn": "T8114P0000000001", "device_channel": 2, "device_type": 14}],
            }
        )

        device = DeviceInfo.from_hub_device(hub.devices[0], hub.station_sn)

        assert device.station_serial == "T8010P1234567890"
        assert device.channel == 2
        assert device.device_type is DeviceType.CAMERA2_PRO

    def test_models_are_frozen(self) -> None:
        hub = HubInfo(station_sn="T8010P1234567890")

        with pytest.raises(ValidationError):
            hub.station_sn = "other"  # type: ignore[misc]


# ------------------------------------------------------------------
# Commands and credentials
# ------------------------------------------------------------------


def test_wire_command_rejects_unknown_fields() -> None:
    with pytest.raises(ValidationError):
        WireCommand(
            command=CommandType.CMD_HUB_REBOOT,
            encoding=CommandEncoding.INT,
            channel=255,
            bogus=1,  # type: ignore[call-arg]
        )


def test_command_result_success() -> None:
    assert CommandResult(command_type=1224, channel=255, return_code=0).success is True
    assert CommandResult(command_type=1224, channel=255, return_code=-104).success is False


def test_dsk_key_expiry_is_utc() -> None:
    key = DskKey(station_sn="T8010P1234567890", dsk_key="abc", expiration=1_900_000_000)

    assert key.expires_at == datetime.fromtimestamp(1_900_000_000, tz=UTC)


def test_credential_expiry() -> None:
    now = datetime(2026, 1, 1, tzinfo=UTC)

    assert Credential().is_expired(now) is True
    assert Credential(key="k", expires_at=now + timedelta(seconds=1)).is_expired(now) is False
    assert Credential(key="k", expires_at=now).is_expired(now) is True
    assert Credential(key="k").is_expired(now) is False
