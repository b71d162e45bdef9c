"""espbridge - expose ESPHome switches and sensors to a home-automation hub."""

from __future__ import annotations

from importlib.metadata import version

from .bridge import Bridge
from .config import DiscoveryConfig, HubConfig, Settings, get_settings
from .core import (
    CommandDispatcher,
    DeviceRegistry,
    DiscoveryCoordinator,
    EventForwarder,
    NotificationBus,
)
from .models import ComponentUpdate, DeviceClass, DeviceListing, DiscoveredDevice

__all__ = [
    "Bridge",
    "CommandDispatcher",
    "ComponentUpdate",
    "DeviceClass",
    "DeviceListing",
    "DeviceRegistry",
    "DiscoveredDevice",
    "DiscoveryConfig",
    "DiscoveryCoordinator",
    "EventForwarder",
    "HubConfig",
    "NotificationBus",
    "Settings",
    "__version__",
    "get_settings",
]

__version__ = version("espbridge")
