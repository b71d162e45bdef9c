from __future__ import annotations

import pytest
from pydantic import ValidationError

from espbridge.models import (
    LOGICAL_COMPONENTS,
    ComponentRole,
    ComponentUpdate,
    DeviceClass,
    DeviceListing,
    DiscoveredDevice,
    component_for,
    raw_state_to_bool,
    state_component_for,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("0", False), ("1", True), ("8", True), (0, False), (1, True)],
)
def test_raw_state_to_bool(raw, expected):
    assert raw_state_to_bool(raw) is expected


def test_every_class_has_a_state_component():
    assert state_component_for(DeviceClass.SWITCH) == "wemoLSwitch"
    assert state_component_for(DeviceClass.METERED_SWITCH) == "wemoISwitch"
    assert state_component_for(DeviceClass.MOTION_SENSOR) == "wemoMotion"


def test_power_component_only_on_metered_switch():
    assert (
        component_for(DeviceClass.METERED_SWITCH, ComponentRole.POWER_SENSOR)
        == "wemoIPower"
    )
    assert component_for(DeviceClass.SWITCH, ComponentRole.POWER_SENSOR) is None
    assert component_for(DeviceClass.MOTION_SENSOR, ComponentRole.POWER_SENSOR) is None


def test_component_names_are_unique_across_classes():
    names = [name for table in LOGICAL_COMPONENTS.values() for name in table]
    assert len(names) == len(set(names))


def test_component_update_payload_uses_hub_keys():
    update = ComponentUpdate(device_id="AA:BB", component="wemoIPower", value=125)

    assert update.to_payload() == {
        "uniqueDeviceId": "AA:BB",
        "component": "wemoIPower",
        "value": 125,
    }


def test_discovered_device_is_immutable():
    device = DiscoveredDevice(
        address="AA:BB", display_name="Kitchen", device_class=DeviceClass.SWITCH
    )

    with pytest.raises(ValidationError):
        device.display_name = "Hall"  # type: ignore[misc]


def test_listing_defaults_to_reachable():
    assert DeviceListing(id="AA:BB", name="Kitchen").reachable is True
