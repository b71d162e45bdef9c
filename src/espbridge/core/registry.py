from __future__ import annotations

import asyncio
import logging

from espbridge.errors import DeviceNotFoundError
from espbridge.models import (
    DeviceClass,
    DeviceEvent,
    DeviceListing,
    DiscoveredDevice,
    ErrorEvent,
)
from espbridge.transport.base import DeviceSession, Transport

logger = logging.getLogger(__name__)


class DeviceRegistry:
    """Known devices and their active sessions, keyed by address.

    Sessions put their state and power events on ``events``; a single
    consumer (the forwarder loop) drains it in delivery order.
    """

    def __init__(self, transport: Transport) -> None:
        self._transport = transport
        self._discovered: dict[str, DiscoveredDevice] = {}
        self._sessions: dict[str, DeviceSession] = {}
        self.events: asyncio.Queue[DeviceEvent] = asyncio.Queue()

    def __len__(self) -> int:
        return len(self._discovered)

    def __contains__(self, address: object) -> bool:
        return address in self._discovered

    def record_discovery(self, device: DiscoveredDevice) -> bool:
        if device.address in self._discovered:
            return False
        logger.info(
            "Adding %s '%s' (%s)",
            device.device_class.label,
            device.display_name,
            device.address,
        )
        self._discovered[device.address] = device
        return True

    def get(self, address: str) -> DiscoveredDevice | None:
        return self._discovered.get(address)

    def devices(self) -> list[DiscoveredDevice]:
        return list(self._discovered.values())

    def sessions(self) -> list[DeviceSession]:
        return list(self._sessions.values())

    def list_by_class(self, device_class: DeviceClass) -> list[DeviceListing]:
        return [
            DeviceListing(id=device.address, name=device.display_name)
            for device in self._discovered.values()
            if device.device_class is device_class
        ]

    def session_for(self, address: str) -> DeviceSession | None:
        """Return the session for ``address``, creating it on first use.

        Returns None for addresses never discovered. Nothing between the
        lookup and the table write suspends, so a session is created at
        most once per address.
        """
        session = self._sessions.get(address)
        if session is not None:
            return session

        device = self._discovered.get(address)
        if device is None:
            logger.debug("No discovered device with address %s", address)
            return None

        session = self._transport.create_session(device)
        session.subscribe(self._on_session_event)
        self._sessions[address] = session
        logger.debug("Created session for %s", address)
        session.open()
        return session

    def require_session(self, address: str) -> DeviceSession:
        session = self.session_for(address)
        if session is None:
            raise DeviceNotFoundError(address)
        return session

    def _on_session_event(self, event: DeviceEvent) -> None:
        if isinstance(event, ErrorEvent):
            # The session stays registered; reconnecting is up to the transport.
            logger.warning("Device error %s on %s", event.code, event.address)
            return
        self.events.put_nowait(event)

    async def close(self) -> None:
        sessions = list(self._sessions.values())
        self._sessions.clear()
        for session in sessions:
            await session.close()
