from __future__ import annotations

from .base import DeviceSession, DiscoveryCallback, EventListener, Transport
from .esphome import EsphomeSession, EsphomeTransport

__all__ = [
    "DeviceSession",
    "DiscoveryCallback",
    "EsphomeSession",
    "EsphomeTransport",
    "EventListener",
    "Transport",
]
