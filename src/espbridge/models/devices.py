"""Device and logical component models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class DeviceClass(str, Enum):
    SWITCH = "switch"
    METERED_SWITCH = "metered_switch"
    MOTION_SENSOR = "motion_sensor"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ")


class ComponentRole(str, Enum):
    BINARY_SWITCH = "binary_switch"
    POWER_SENSOR = "power_sensor"
    MOTION_SENSOR = "motion_sensor"


# Hub-facing component names, kept stable for existing hub recipes.
LOGICAL_COMPONENTS: dict[DeviceClass, dict[str, ComponentRole]] = {
    DeviceClass.SWITCH: {
        "wemoLSwitch": ComponentRole.BINARY_SWITCH,
    },
    DeviceClass.METERED_SWITCH: {
        "wemoISwitch": ComponentRole.BINARY_SWITCH,
        "wemoIPower": ComponentRole.POWER_SENSOR,
    },
    DeviceClass.MOTION_SENSOR: {
        "wemoMotion": ComponentRole.MOTION_SENSOR,
    },
}

STATE_ROLES = (ComponentRole.BINARY_SWITCH, ComponentRole.MOTION_SENSOR)


def component_for(device_class: DeviceClass, role: ComponentRole) -> str | None:
    """Return the component name bound to ``role`` for a device class."""
    for name, component_role in LOGICAL_COMPONENTS[device_class].items():
        if component_role is role:
            return name
    return None


def state_component_for(device_class: DeviceClass) -> str | None:
    """Return the component a binary state change is reported on."""
    for role in STATE_ROLES:
        name = component_for(device_class, role)
        if name is not None:
            return name
    return None


def raw_state_to_bool(raw: object) -> bool:
    """Map a raw binary state to a bool.

    Only ``'0'`` is off. Metered switches report standby as ``'8'``, which
    counts as on like any other non-zero code.
    """
    return str(raw) != "0"


class DiscoveredDevice(BaseModel):
    """Physical device seen on the network (not necessarily connected)."""

    model_config = {"frozen": True, "extra": "forbid"}

    address: str
    display_name: str
    device_class: DeviceClass
    host: str | None = None
    port: int = Field(default=6053, ge=1, le=65535)
    model: str = ""
    version: str = ""


class DeviceListing(BaseModel):
    """Device entry as returned to the hub discovery screen."""

    model_config = {"frozen": True}

    id: str
    name: str
    reachable: bool = True
