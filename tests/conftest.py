from __future__ import annotations

import asyncio

import pytest

from espbridge.config import get_settings
from espbridge.core import DeviceRegistry
from espbridge.models import DeviceClass, DeviceEvent, DiscoveredDevice

KITCHEN = "AA:BB:CC:DD:EE:FF"


@pytest.fixture(autouse=True)
def _isolate_settings_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("ESPBRIDGE_CONFIG", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def make_device(
    address: str = KITCHEN,
    name: str = "Kitchen",
    device_class: DeviceClass = DeviceClass.METERED_SWITCH,
) -> DiscoveredDevice:
    return DiscoveredDevice(
        address=address, display_name=name, device_class=device_class
    )


class FakeSession:
    def __init__(self, device: DiscoveredDevice, script: list[DeviceEvent]) -> None:
        self.address = device.address
        self.device_class = device.device_class
        self.listeners: list = []
        self.script = script
        self.opened = 0
        self.closed = False
        self.commands: list[int] = []
        self.raw_state = "0"
        self.error: Exception | None = None

    def subscribe(self, listener) -> None:
        self.listeners.append(listener)

    def open(self) -> None:
        self.opened += 1
        if self.script:
            loop = asyncio.get_running_loop()
            for event in self.script:
                loop.call_soon(self.emit, event)

    def emit(self, event: DeviceEvent) -> None:
        for listener in self.listeners:
            listener(event)

    async def set_binary_state(self, value: int) -> None:
        if self.error is not None:
            raise self.error
        self.commands.append(value)
        self.raw_state = str(value)

    async def get_binary_state(self) -> str:
        if self.error is not None:
            raise self.error
        return self.raw_state

    async def close(self) -> None:
        self.closed = True


class FakeTransport:
    """In-memory transport; ``devices`` are announced soon after each scan."""

    def __init__(
        self,
        devices: list[DiscoveredDevice] | None = None,
        script: dict[str, list[DeviceEvent]] | None = None,
    ) -> None:
        self.devices = devices or []
        self.script = script or {}
        self.callbacks: list = []
        self.sessions: dict[str, FakeSession] = {}
        self.scans = 0
        self.closed = False

    def discover(self, callback) -> None:
        self.scans += 1
        if callback not in self.callbacks:
            self.callbacks.append(callback)
        if self.devices:
            loop = asyncio.get_running_loop()
            for device in self.devices:
                loop.call_soon(self.announce, device)

    def announce(self, device: DiscoveredDevice | None, error: Exception | None = None):
        for callback in self.callbacks:
            callback(error, device)

    def create_session(self, device: DiscoveredDevice) -> FakeSession:
        session = FakeSession(device, self.script.get(device.address, []))
        self.sessions[device.address] = session
        return session

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def registry(transport: FakeTransport) -> DeviceRegistry:
    return DeviceRegistry(transport)
