from __future__ import annotations

import logging

from espbridge.models import DeviceClass, DeviceListing, DiscoveredDevice
from espbridge.transport.base import Transport

from .registry import DeviceRegistry

logger = logging.getLogger(__name__)


class DiscoveryCoordinator:
    def __init__(self, registry: DeviceRegistry, transport: Transport) -> None:
        self._registry = registry
        self._transport = transport

    def start(self) -> None:
        """Trigger the initial scan; the transport keeps listening afterwards."""
        self._transport.discover(self.on_device_found)

    def discover_by_class(self, device_class: DeviceClass) -> list[DeviceListing]:
        """Trigger a scan and return what is known right now.

        Devices found by this scan show up in later calls only.
        """
        logger.info("Discovery of %s devices started", device_class.label)
        self._transport.discover(self.on_device_found)
        return self._registry.list_by_class(device_class)

    def on_device_found(
        self, error: Exception | None, device: DiscoveredDevice | None
    ) -> None:
        if error is not None:
            logger.warning("Discovery scan failed: %s", error)
            return
        if device is None:
            return
        self._registry.record_discovery(device)
