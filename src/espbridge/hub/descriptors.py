"""Device descriptors handed to the hub SDK.

Each descriptor carries the static metadata the hub shows to users plus the
hooks it calls back into: discovery, update-callback registration, buttons,
switch setter/getter and sensor getters.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from espbridge.core import POWER_OFF, POWER_ON, DiscoveryCoordinator, NotificationBus
from espbridge.models import DeviceClass, UpdateCallback

if TYPE_CHECKING:
    from espbridge.bridge import Bridge


@dataclass(frozen=True)
class Button:
    name: str
    label: str


@dataclass(frozen=True)
class SwitchComponent:
    name: str
    label: str
    setter: Callable[[str, bool], Awaitable[None]]
    getter: Callable[[str], Awaitable[bool]]


@dataclass(frozen=True)
class SensorComponent:
    name: str
    label: str
    getter: Callable[[str], Awaitable[Any]]
    range: tuple[float, float] = (0, 1)
    unit: str = ""


@dataclass(frozen=True)
class DiscoveryInstructions:
    header_text: str
    description: str


@dataclass
class DeviceDescriptor:
    name: str
    manufacturer: str
    device_type: str
    device_class: DeviceClass
    discovery_instructions: DiscoveryInstructions
    discovery: DiscoveryCoordinator
    notifications: NotificationBus
    search_tokens: list[str] = field(default_factory=list)
    buttons: list[Button] = field(default_factory=list)
    button_handler: Callable[[str, str], Awaitable[None]] | None = None
    switches: list[SwitchComponent] = field(default_factory=list)
    sensors: list[SensorComponent] = field(default_factory=list)

    def discover(self) -> list[dict[str, Any]]:
        listings = self.discovery.discover_by_class(self.device_class)
        return [listing.model_dump() for listing in listings]

    def register_subscription(
        self,
        update_callback: UpdateCallback,
        optional_callbacks: dict[str, Any] | None = None,
    ) -> None:
        self.notifications.register(self.device_class, update_callback)

    @property
    def component_names(self) -> list[str]:
        return [c.name for c in self.switches] + [s.name for s in self.sensors]


POWER_BUTTONS = [
    Button(name=POWER_ON, label="Power On"),
    Button(name=POWER_OFF, label="Power Off"),
]


def _instructions(what: str) -> DiscoveryInstructions:
    return DiscoveryInstructions(
        header_text="Device Discovery",
        description=f"Press NEXT to discover {what}",
    )


def build_descriptors(bridge: Bridge) -> list[DeviceDescriptor]:
    """Build the switch, metered switch and motion sensor descriptors."""
    hub = bridge.settings.hub
    dispatcher = bridge.dispatcher

    def descriptor(
        name: str, device_type: str, device_class: DeviceClass, what: str
    ) -> DeviceDescriptor:
        return DeviceDescriptor(
            name=name,
            manufacturer=hub.manufacturer,
            device_type=device_type,
            device_class=device_class,
            discovery_instructions=_instructions(what),
            discovery=bridge.discovery,
            notifications=bridge.notifications,
            search_tokens=[hub.search_token],
        )

    switch = descriptor("Smart Switch", "LIGHT", DeviceClass.SWITCH, "switches")
    switch.buttons = list(POWER_BUTTONS)
    switch.button_handler = dispatcher.on_button_press
    switch.switches = [
        SwitchComponent(
            name="wemoLSwitch",
            label="Power",
            setter=dispatcher.set_switch,
            getter=dispatcher.get_switch,
        )
    ]

    metered = descriptor(
        "Metered Switch", "LIGHT", DeviceClass.METERED_SWITCH, "metered switches"
    )
    metered.buttons = list(POWER_BUTTONS)
    metered.button_handler = dispatcher.on_button_press
    metered.switches = [
        SwitchComponent(
            name="wemoISwitch",
            label="Power",
            setter=dispatcher.set_switch,
            getter=dispatcher.get_switch,
        )
    ]
    metered.sensors = [
        SensorComponent(
            name="wemoIPower",
            label="Consumption",
            getter=dispatcher.get_sensor,
            range=(0, 2000),
            unit="mW",
        )
    ]

    motion = descriptor(
        "Motion Sensor", "ACCESSORY", DeviceClass.MOTION_SENSOR, "motion sensors"
    )
    motion.sensors = [
        SensorComponent(
            name="wemoMotion",
            label="Motion",
            getter=dispatcher.get_sensor,
            range=(0, 1),
        )
    ]

    return [switch, metered, motion]
