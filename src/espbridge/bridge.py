from __future__ import annotations

import asyncio
import contextlib
import logging

from espbridge.config import Settings
from espbridge.core import (
    CommandDispatcher,
    DeviceRegistry,
    DiscoveryCoordinator,
    EventForwarder,
    NotificationBus,
)
from espbridge.hub import DeviceDescriptor, build_descriptors
from espbridge.transport import EsphomeTransport, Transport

logger = logging.getLogger(__name__)


class Bridge:
    """Wires one registry to the dispatcher, forwarder and discovery."""

    def __init__(self, transport: Transport, settings: Settings | None = None) -> None:
        self.settings = settings or Settings()
        self.transport = transport
        self.registry = DeviceRegistry(transport)
        self.notifications = NotificationBus()
        self.dispatcher = CommandDispatcher(self.registry)
        self.forwarder = EventForwarder(self.registry, self.notifications)
        self.discovery = DiscoveryCoordinator(self.registry, transport)
        self.descriptors: list[DeviceDescriptor] = build_descriptors(self)
        self._pump: asyncio.Task[None] | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> Bridge:
        return cls(EsphomeTransport(settings.discovery), settings)

    async def start(self) -> None:
        if self._pump is None:
            self._pump = asyncio.create_task(self.forwarder.run())
        self.discovery.start()
        logger.info("Bridge started")

    async def stop(self) -> None:
        if self._pump is not None:
            self._pump.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._pump
            self._pump = None
        self.forwarder.drain()
        await self.forwarder.flush()
        await self.registry.close()
        await self.transport.close()
        logger.info("Bridge stopped")
