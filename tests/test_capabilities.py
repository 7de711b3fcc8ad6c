from __future__ import annotations

from pystation.capabilities import Capability, DeviceClassifier, has_any
from pystation.models.hub import DeviceInfo, DeviceType


def _device(serial: str, device_type: DeviceType) -> DeviceInfo:
    return DeviceInfo(serial=serial, station_serial="T8010P1234567890", channel=0, device_type=device_type)


def test_device_type_tables() -> None:
    classifier = DeviceClassifier()

    camera2 = classifier.capabilities(_device("T8114P0000000001", DeviceType.CAMERA2C))
    doorbell = classifier.capabilities(_device("T8222P0000000001", DeviceType.BATTERY_DOORBELL_2))

    assert camera2 == frozenset({Capability.CAMERA, Capability.CAMERA_2})
    assert doorbell == frozenset({Capability.CAMERA, Capability.DOORBELL, Capability.BATTERY_DOORBELL_2})


def test_serial_prefixes_mark_integrated_and_solo_devices() -> None:
    classifier = DeviceClassifier()

    solo = _device("T8131P0000000001", DeviceType.UNKNOWN)
    indoor = _device("T8400P0000000001", DeviceType.INDOOR_CAMERA)

    assert classifier.has_capability(solo, Capability.SOLO_CAMERA) is True
    assert classifier.has_capability(solo, Capability.INTEGRATED_DEVICE) is True
    assert classifier.has_capability(indoor, Capability.INTEGRATED_DEVICE) is True
    assert classifier.has_capability(indoor, Capability.SOLO_CAMERA) is False


def test_sensors_have_no_camera_capabilities() -> None:
    classifier = DeviceClassifier()

    assert classifier.capabilities(_device("T8900P0000000001", DeviceType.MOTION_SENSOR)) == frozenset()


def test_overrides_replace_tables() -> None:
    classifier = DeviceClassifier({"T8114P0000000001": [Capability.FLOODLIGHT]})

    device = _device("T8114P0000000001", DeviceType.CAMERA2)

    assert classifier.capabilities(device) == frozenset({Capability.FLOODLIGHT})
    assert has_any(classifier, device, [Capability.CAMERA_2, Capability.FLOODLIGHT]) is True
    assert has_any(classifier, device, [Capability.CAMERA_2]) is False
