from __future__ import annotations

from .descriptors import (
    Button,
    DeviceDescriptor,
    DiscoveryInstructions,
    SensorComponent,
    SwitchComponent,
    build_descriptors,
)

__all__ = [
    "Button",
    "DeviceDescriptor",
    "DiscoveryInstructions",
    "SensorComponent",
    "SwitchComponent",
    "build_descriptors",
]
