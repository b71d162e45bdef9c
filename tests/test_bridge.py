"""End-to-end tests through the hub descriptors."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest
from conftest import KITCHEN, FakeTransport, make_device

from espbridge import Bridge
from espbridge.core import POWER_OFF, POWER_ON
from espbridge.models import DeviceClass, PowerReadingEvent


def _descriptor(bridge: Bridge, device_class: DeviceClass):
    (descriptor,) = [d for d in bridge.descriptors if d.device_class is device_class]
    return descriptor


def test_three_descriptors_are_exported():
    bridge = Bridge(FakeTransport())

    assert [d.device_class for d in bridge.descriptors] == [
        DeviceClass.SWITCH,
        DeviceClass.METERED_SWITCH,
        DeviceClass.MOTION_SENSOR,
    ]
    assert [d.component_names for d in bridge.descriptors] == [
        ["wemoLSwitch"],
        ["wemoISwitch", "wemoIPower"],
        ["wemoMotion"],
    ]
    device_types = [d.device_type for d in bridge.descriptors]
    assert device_types == ["LIGHT", "LIGHT", "ACCESSORY"]


def test_descriptor_metadata_comes_from_settings():
    bridge = Bridge(FakeTransport())
    metered = _descriptor(bridge, DeviceClass.METERED_SWITCH)

    assert metered.manufacturer == "ESPHome"
    assert metered.search_tokens == ["esphome"]
    assert [b.name for b in metered.buttons] == [POWER_ON, POWER_OFF]
    assert metered.sensors[0].range == (0, 2000)
    assert metered.sensors[0].unit == "mW"
    assert _descriptor(bridge, DeviceClass.MOTION_SENSOR).buttons == []


def test_kitchen_plug_scenario():
    transport = FakeTransport(
        devices=[make_device()],
        script={
            KITCHEN: [
                PowerReadingEvent(KITCHEN, DeviceClass.METERED_SWITCH, "1", 125)
            ]
        },
    )
    bridge = Bridge(transport)
    metered = _descriptor(bridge, DeviceClass.METERED_SWITCH)
    updates: list[dict[str, Any]] = []

    async def send_component_update(payload: dict[str, Any]) -> None:
        updates.append(payload)

    metered.register_subscription(send_component_update)

    async def scenario():
        await bridge.start()
        await asyncio.sleep(0)
        listings = metered.discover()
        await metered.switches[0].setter(KITCHEN, True)
        state = await metered.switches[0].getter(KITCHEN)
        await asyncio.sleep(0)
        await bridge.registry.events.join()
        await bridge.stop()
        return listings, state

    listings, state = asyncio.run(scenario())

    assert listings == [{"id": KITCHEN, "name": "Kitchen", "reachable": True}]
    assert state is True
    assert transport.sessions[KITCHEN].commands == [1]
    assert updates == [
        {"uniqueDeviceId": KITCHEN, "component": "wemoIPower", "value": 125}
    ]
    assert transport.closed is True
    assert transport.sessions[KITCHEN].closed is True


def test_button_handler_sends_power_commands():
    transport = FakeTransport(devices=[make_device()])
    bridge = Bridge(transport)
    metered = _descriptor(bridge, DeviceClass.METERED_SWITCH)

    async def scenario():
        await bridge.start()
        await asyncio.sleep(0)
        await metered.button_handler(POWER_OFF, KITCHEN)
        await metered.button_handler(POWER_ON, KITCHEN)
        await bridge.stop()

    asyncio.run(scenario())

    assert transport.sessions[KITCHEN].commands == [0, 1]


def test_getter_for_unknown_device_rejects():
    bridge = Bridge(FakeTransport())
    motion = _descriptor(bridge, DeviceClass.MOTION_SENSOR)

    with pytest.raises(LookupError):
        asyncio.run(motion.sensors[0].getter("00:00:00:00:00:00"))


def test_stop_forwards_events_still_queued():
    transport = FakeTransport(devices=[make_device()])
    bridge = Bridge(transport)
    metered = _descriptor(bridge, DeviceClass.METERED_SWITCH)
    updates: list[dict[str, Any]] = []

    async def send_component_update(payload: dict[str, Any]) -> None:
        updates.append(payload)

    metered.register_subscription(send_component_update)

    async def scenario():
        await bridge.start()
        await asyncio.sleep(0)
        session = bridge.registry.require_session(KITCHEN)
        session.emit(PowerReadingEvent(KITCHEN, DeviceClass.METERED_SWITCH, "1", 5))
        session.emit(PowerReadingEvent(KITCHEN, DeviceClass.METERED_SWITCH, "1", 7))
        await bridge.stop()

    asyncio.run(scenario())

    assert [payload["value"] for payload in updates] == [5, 7]
    assert bridge.registry.events.empty()
