"""Data models for espbridge."""

from espbridge.models.devices import (
    LOGICAL_COMPONENTS,
    ComponentRole,
    DeviceClass,
    DeviceListing,
    DiscoveredDevice,
    component_for,
    raw_state_to_bool,
    state_component_for,
)
from espbridge.models.events import (
    ComponentUpdate,
    DeviceEvent,
    ErrorEvent,
    PowerReadingEvent,
    StateChangeEvent,
    UpdateCallback,
)

__all__ = [
    "LOGICAL_COMPONENTS",
    "ComponentRole",
    "ComponentUpdate",
    "DeviceClass",
    "DeviceEvent",
    "DeviceListing",
    "DiscoveredDevice",
    "ErrorEvent",
    "PowerReadingEvent",
    "StateChangeEvent",
    "UpdateCallback",
    "component_for",
    "raw_state_to_bool",
    "state_component_for",
]
