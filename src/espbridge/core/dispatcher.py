from __future__ import annotations

import logging

from espbridge.errors import TransportError
from espbridge.models import raw_state_to_bool

from .registry import DeviceRegistry

logger = logging.getLogger(__name__)

POWER_ON = "POWER ON"
POWER_OFF = "POWER OFF"

BUTTON_STATES = {POWER_ON: 1, POWER_OFF: 0}


class CommandDispatcher:
    """Resolve hub commands to device sessions.

    Setters and buttons aimed at unknown devices are silent no-ops so the hub
    always gets a settled response. Getters raise ``DeviceNotFoundError``.
    """

    def __init__(self, registry: DeviceRegistry) -> None:
        self._registry = registry

    async def set_switch(self, address: str, desired: bool) -> None:
        logger.debug("set_switch %s -> %s", address, desired)
        await self._send(address, 1 if desired is True else 0)

    async def get_switch(self, address: str) -> bool:
        session = self._registry.require_session(address)
        raw = await session.get_binary_state()
        return raw_state_to_bool(raw)

    async def get_sensor(self, address: str) -> str:
        logger.debug("get_sensor %s", address)
        session = self._registry.require_session(address)
        return await session.get_binary_state()

    async def on_button_press(self, button_name: str, address: str) -> None:
        value = BUTTON_STATES.get(button_name)
        if value is None:
            logger.debug("Ignoring unknown button '%s' for %s", button_name, address)
            return
        await self._send(address, value)

    async def _send(self, address: str, value: int) -> None:
        session = self._registry.session_for(address)
        if session is None:
            return
        try:
            await session.set_binary_state(value)
        except TransportError as exc:
            logger.warning("Failed to set %s to %d: %s", address, value, exc.code)
