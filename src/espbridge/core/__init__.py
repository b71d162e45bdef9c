from __future__ import annotations

from .discovery import DiscoveryCoordinator
from .dispatcher import POWER_OFF, POWER_ON, CommandDispatcher
from .forwarder import EventForwarder, NotificationBus
from .registry import DeviceRegistry

__all__ = [
    "POWER_OFF",
    "POWER_ON",
    "CommandDispatcher",
    "DeviceRegistry",
    "DiscoveryCoordinator",
    "EventForwarder",
    "NotificationBus",
]
