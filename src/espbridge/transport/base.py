"""Interfaces of the device transport the bridge core talks to."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

from espbridge.models import DeviceClass, DeviceEvent, DiscoveredDevice

DiscoveryCallback = Callable[[Exception | None, DiscoveredDevice | None], None]
EventListener = Callable[[DeviceEvent], None]


class DeviceSession(Protocol):
    """Live, subscribed connection to one physical device."""

    address: str
    device_class: DeviceClass

    def subscribe(self, listener: EventListener) -> None:
        """Deliver every event of this session to ``listener``."""

    def open(self) -> None:
        """Start connecting in the background; must not suspend."""

    async def set_binary_state(self, value: int) -> None: ...

    async def get_binary_state(self) -> str: ...

    async def close(self) -> None: ...


class Transport(Protocol):
    """Network discovery plus session factory."""

    def discover(self, callback: DiscoveryCallback) -> None:
        """Trigger a scan; ``callback`` may fire any number of times later."""

    def create_session(self, device: DiscoveredDevice) -> DeviceSession: ...

    async def close(self) -> None: ...
