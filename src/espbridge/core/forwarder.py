from __future__ import annotations

import asyncio
import logging

from espbridge.errors import classify_notification_error
from espbridge.models import (
    ComponentRole,
    ComponentUpdate,
    DeviceClass,
    DeviceEvent,
    ErrorEvent,
    PowerReadingEvent,
    StateChangeEvent,
    UpdateCallback,
    component_for,
    raw_state_to_bool,
    state_component_for,
)

from .registry import DeviceRegistry

logger = logging.getLogger(__name__)


class NotificationBus:
    """One hub update callback slot per device class."""

    def __init__(self) -> None:
        self._callbacks: dict[DeviceClass, UpdateCallback | None] = {
            device_class: None for device_class in DeviceClass
        }

    def register(self, device_class: DeviceClass, callback: UpdateCallback) -> None:
        if self._callbacks[device_class] is not None:
            logger.debug("Replacing update callback for %s", device_class.label)
        self._callbacks[device_class] = callback

    def unregister(self, device_class: DeviceClass) -> None:
        self._callbacks[device_class] = None

    def callback_for(self, device_class: DeviceClass) -> UpdateCallback | None:
        return self._callbacks[device_class]


class EventForwarder:
    """Push device state changes to the hub.

    Sends are fire-and-forget: each event yields at most one notification
    attempt, failures are logged and never retried.
    """

    def __init__(self, registry: DeviceRegistry, bus: NotificationBus) -> None:
        self._registry = registry
        self._bus = bus
        self._pending: set[asyncio.Task[None]] = set()

    def on_binary_state_change(
        self, raw_value: str, address: str, device_class: DeviceClass
    ) -> asyncio.Task[None] | None:
        component = state_component_for(device_class)
        if component is None:
            return None
        value = raw_state_to_bool(raw_value)
        logger.debug("State of %s (%s) is %s", address, component, value)
        return self._notify(
            device_class,
            ComponentUpdate(device_id=address, component=component, value=value),
        )

    def on_power_reading(
        self, instant_power: float, address: str, device_class: DeviceClass
    ) -> asyncio.Task[None] | None:
        # Metered switches report continuously; every reading is forwarded.
        component = component_for(device_class, ComponentRole.POWER_SENSOR)
        if component is None:
            return None
        logger.debug("Power of %s is %s", address, instant_power)
        update = ComponentUpdate(
            device_id=address, component=component, value=instant_power
        )
        return self._notify(device_class, update)

    def dispatch(self, event: DeviceEvent) -> asyncio.Task[None] | None:
        if isinstance(event, StateChangeEvent):
            return self.on_binary_state_change(
                event.raw_state, event.address, event.device_class
            )
        if isinstance(event, PowerReadingEvent):
            return self.on_power_reading(
                event.instant_power, event.address, event.device_class
            )
        if isinstance(event, ErrorEvent):
            logger.warning("Device error %s on %s", event.code, event.address)
        return None

    async def run(self) -> None:
        """Forward events from the registry channel until cancelled."""
        while True:
            event = await self._registry.events.get()
            try:
                self.dispatch(event)
            finally:
                self._registry.events.task_done()

    def drain(self) -> None:
        """Dispatch events still sitting in the registry channel."""
        events = self._registry.events
        while not events.empty():
            event = events.get_nowait()
            try:
                self.dispatch(event)
            finally:
                events.task_done()

    async def flush(self) -> None:
        """Wait for every in-flight notification to settle."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    def _notify(
        self, device_class: DeviceClass, update: ComponentUpdate
    ) -> asyncio.Task[None] | None:
        callback = self._bus.callback_for(device_class)
        if callback is None:
            return None
        task = asyncio.ensure_future(self._send(callback, update))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _send(self, callback: UpdateCallback, update: ComponentUpdate) -> None:
        try:
            await callback(update.to_payload())
        except Exception as exc:
            kind = classify_notification_error(exc)
            level = logging.DEBUG if kind.benign else logging.WARNING
            logger.log(
                level,
                "Sending notification to hub failed: %s %s: %s",
                update.device_id,
                update.component,
                exc,
            )
