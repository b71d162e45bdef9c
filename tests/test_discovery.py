from __future__ import annotations

import asyncio
import logging

import pytest
from conftest import KITCHEN, FakeTransport, make_device

from espbridge.core import DeviceRegistry, DiscoveryCoordinator
from espbridge.errors import ScanError
from espbridge.models import DeviceClass, DeviceListing


@pytest.fixture
def coordinator(registry, transport) -> DiscoveryCoordinator:
    return DiscoveryCoordinator(registry, transport)


def test_discover_before_results_returns_empty_list(coordinator, transport):
    assert coordinator.discover_by_class(DeviceClass.METERED_SWITCH) == []
    assert transport.scans == 1


def test_found_devices_show_up_on_next_call(coordinator, transport):
    coordinator.discover_by_class(DeviceClass.METERED_SWITCH)
    transport.announce(make_device())

    assert coordinator.discover_by_class(DeviceClass.METERED_SWITCH) == [
        DeviceListing(id=KITCHEN, name="Kitchen", reachable=True)
    ]
    assert transport.scans == 2
    assert len(transport.callbacks) == 1


def test_discovery_filters_by_class(coordinator, transport):
    coordinator.start()
    transport.announce(make_device())
    transport.announce(
        make_device("11:22:33:44:55:66", "Porch", DeviceClass.MOTION_SENSOR)
    )

    listings = coordinator.discover_by_class(DeviceClass.MOTION_SENSOR)

    assert [listing.name for listing in listings] == ["Porch"]


def test_scan_error_is_logged_and_ignored(coordinator, registry, transport, caplog):
    caplog.set_level(logging.WARNING, logger="espbridge")
    coordinator.start()

    transport.announce(None, ScanError("Failed to connect to 10.0.0.7"))

    assert "10.0.0.7" in caplog.text
    assert len(registry) == 0


def test_snapshot_misses_devices_found_during_scan():
    transport = FakeTransport(devices=[make_device()])
    registry = DeviceRegistry(transport)
    coordinator = DiscoveryCoordinator(registry, transport)

    async def scenario():
        first = coordinator.discover_by_class(DeviceClass.METERED_SWITCH)
        await asyncio.sleep(0)
        second = coordinator.discover_by_class(DeviceClass.METERED_SWITCH)
        return first, second

    first, second = asyncio.run(scenario())

    assert first == []
    assert [listing.id for listing in second] == [KITCHEN]
