"""Device capability classification.

Command routing only ever asks "does this device have capability X?".  The
answer comes from a :class:`CapabilityOracle`; :class:`DeviceClassifier` is
the default, table driven implementation keyed by cloud device type and
serial prefix.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable, Mapping
from typing import Protocol

from pystation.models.hub import DeviceInfo, DeviceType


class Capability(enum.StrEnum):
    CAMERA = "camera"
    CAMERA_2 = "camera_2"
    INDOOR_CAMERA = "indoor_camera"
    SOLO_CAMERA = "solo_camera"
    FLOODLIGHT = "floodlight"
    DOORBELL = "doorbell"
    BATTERY_DOORBELL = "battery_doorbell"
    BATTERY_DOORBELL_2 = "battery_doorbell_2"
    INTEGRATED_DEVICE = "integrated_device"


class CapabilityOracle(Protocol):
    """Answers capability questions about a device or station."""

    def has_capability(self, device: DeviceInfo, capability: Capability) -> bool: ...


def has_any(oracle: CapabilityOracle, device: DeviceInfo, capabilities: Iterable[Capability]) -> bool:
    return any(oracle.has_capability(device, capability) for capability in capabilities)


_CAMERA_2_TYPES = frozenset({DeviceType.CAMERA2, DeviceType.CAMERA2C, DeviceType.CAMERA2_PRO, DeviceType.CAMERA2C_PRO})
_INDOOR_TYPES = frozenset(
    {
        DeviceType.INDOOR_CAMERA,
        DeviceType.INDOOR_CAMERA_1080,
        DeviceType.INDOOR_PT_CAMERA,
        DeviceType.INDOOR_PT_CAMERA_1080,
    }
)
_SOLO_TYPES = frozenset({DeviceType.SOLO_CAMERA, DeviceType.SOLO_CAMERA_PRO})
_DOORBELL_TYPES = frozenset({DeviceType.DOORBELL, DeviceType.BATTERY_DOORBELL, DeviceType.BATTERY_DOORBELL_2})

_TYPE_CAPABILITIES: dict[Capability, frozenset[DeviceType]] = {
    Capability.CAMERA: frozenset(
        {DeviceType.CAMERA, DeviceType.CAMERA_E, DeviceType.FLOODLIGHT}
        | _CAMERA_2_TYPES
        | _INDOOR_TYPES
        | _SOLO_TYPES
        | _DOORBELL_TYPES
    ),
    Capability.CAMERA_2: _CAMERA_2_TYPES,
    Capability.INDOOR_CAMERA: _INDOOR_TYPES,
    Capability.SOLO_CAMERA: _SOLO_TYPES,
    Capability.FLOODLIGHT: frozenset({DeviceType.FLOODLIGHT}),
    Capability.DOORBELL: _DOORBELL_TYPES,
    Capability.BATTERY_DOORBELL: frozenset({DeviceType.BATTERY_DOORBELL}),
    Capability.BATTERY_DOORBELL_2: frozenset({DeviceType.BATTERY_DOORBELL_2}),
}

# Serial prefixes of devices that act as their own station.
_SERIAL_PREFIXES: dict[Capability, tuple[str, ...]] = {
    Capability.INTEGRATED_DEVICE: ("T8420", "T820", "T8410", "T8400", "T8401", "T8411", "T8130", "T8131"),
    Capability.SOLO_CAMERA: ("T8130", "T8131"),
}


class DeviceClassifier:
    """Default :class:`CapabilityOracle`.

    Parameters
    ----------
    overrides : Mapping[str, Iterable[Capability]], optional
        Explicit capability sets per serial; they replace the built-in
        tables for that serial.
    """

    def __init__(self, overrides: Mapping[str, Iterable[Capability]] | None = None) -> None:
        self._overrides: dict[str, frozenset[Capability]] = {
            serial: frozenset(caps) for serial, caps in (overrides or {}).items()
        }

    def capabilities(self, device: DeviceInfo) -> frozenset[Capability]:
        override = self._overrides.get(device.serial)
        if override is not None:
            return override
        found = {cap for cap, types in _TYPE_CAPABILITIES.items() if device.device_type in types}
        found.update(
            cap for cap, prefixes in _SERIAL_PREFIXES.items() if device.serial.startswith(prefixes)
        )
        return frozenset(found)

    def has_capability(self, device: DeviceInfo, capability: Capability) -> bool:
        return capability in self.capabilities(device)
