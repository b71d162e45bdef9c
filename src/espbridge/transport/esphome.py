"""ESPHome transport: mDNS discovery plus native API sessions."""

from __future__ import annotations

import asyncio
import logging
import string
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

import aioesphomeapi
from aioesphomeapi import (
    BinarySensorInfo,
    BinarySensorState,
    SensorInfo,
    SensorState,
    SwitchInfo,
    SwitchState,
)
from zeroconf import ServiceStateChange, Zeroconf
from zeroconf.asyncio import AsyncServiceBrowser, AsyncServiceInfo, AsyncZeroconf

from espbridge.config import DiscoveryConfig
from espbridge.errors import ScanError, TransportError
from espbridge.models import (
    DeviceClass,
    DeviceEvent,
    DiscoveredDevice,
    ErrorEvent,
    PowerReadingEvent,
    StateChangeEvent,
)

from .base import DiscoveryCallback, EventListener

logger = logging.getLogger(__name__)

MOTION_DEVICE_CLASSES = frozenset({"motion", "occupancy", "presence"})
POWER_DEVICE_CLASS = "power"

CONNECT_ERRORS = (
    asyncio.TimeoutError,
    aioesphomeapi.APIConnectionError,
    aioesphomeapi.InvalidAuthAPIError,
    ConnectionError,
    OSError,
)

ClientFactory = Callable[..., Any]


def _decode_txt_properties(properties: dict[bytes, bytes | None]) -> dict[str, str]:
    decoded: dict[str, str] = {}
    for key, value in properties.items():
        key_text = key.decode("utf-8", errors="replace")
        if value is None:
            value_text = ""
        elif isinstance(value, bytes):
            value_text = value.decode("utf-8", errors="replace")
        else:
            value_text = str(value)
        decoded[key_text] = value_text
    return decoded


def normalize_mac(value: str) -> str:
    if not value:
        return ""
    cleaned = value.replace(":", "").replace("-", "").replace(".", "")
    if len(cleaned) == 12 and all(ch in string.hexdigits for ch in cleaned):
        pairs = [cleaned[i : i + 2] for i in range(0, 12, 2)]
        return ":".join(pair.upper() for pair in pairs)
    return value


def _pick_ip(info: AsyncServiceInfo) -> str | None:
    addresses = info.parsed_addresses()
    if not addresses:
        return None
    for address in addresses:
        if ":" not in address:
            return address
    return addresses[0]


def _strip_service_suffix(name: str, service_type: str) -> str:
    suffix = f".{service_type}"
    if name.endswith(suffix):
        return name[: -len(suffix)]
    return name.rstrip(".")


@dataclass
class EntityKeys:
    switch: int | None = None
    power: int | None = None
    motion: int | None = None


def entity_keys(entities: Iterable[object]) -> EntityKeys:
    keys = EntityKeys()
    for entity in entities:
        if isinstance(entity, SwitchInfo) and keys.switch is None:
            keys.switch = entity.key
        elif isinstance(entity, SensorInfo) and keys.power is None:
            if entity.device_class == POWER_DEVICE_CLASS:
                keys.power = entity.key
        elif isinstance(entity, BinarySensorInfo) and keys.motion is None:
            if entity.device_class in MOTION_DEVICE_CLASSES:
                keys.motion = entity.key
    return keys


def classify_entities(entities: Iterable[object]) -> DeviceClass | None:
    """Pick the device class from the entities a device exposes."""
    keys = entity_keys(entities)
    if keys.switch is not None:
        if keys.power is not None:
            return DeviceClass.METERED_SWITCH
        return DeviceClass.SWITCH
    if keys.motion is not None:
        return DeviceClass.MOTION_SENSOR
    return None


async def probe_device(
    host: str,
    config: DiscoveryConfig,
    port: int | None = None,
    txt: dict[str, str] | None = None,
    client_factory: ClientFactory = aioesphomeapi.APIClient,
) -> DiscoveredDevice | None:
    """Connect to ``host`` and describe it, or None if it is not bridgeable."""
    port = port or config.port
    txt = txt or {}
    logger.debug("Probing %s:%d", host, port)
    client = client_factory(host, port=port, password=config.password)
    try:
        await asyncio.wait_for(
            client.connect(login=True, log_errors=False), timeout=config.timeout
        )
    except CONNECT_ERRORS as exc:
        reason = str(exc) or type(exc).__name__
        raise ScanError(f"Failed to connect to {host}: {reason}") from exc

    try:
        info = await client.device_info()
        entities, _services = await client.list_entities_services()
    except CONNECT_ERRORS as exc:
        reason = str(exc) or type(exc).__name__
        raise ScanError(f"Failed to query {host}: {reason}") from exc
    finally:
        await client.disconnect()

    device_class = classify_entities(entities)
    if device_class is None:
        logger.debug("Skipping '%s' at %s: no supported entities", info.name, host)
        return None

    address = normalize_mac(info.mac_address or txt.get("mac", ""))
    return DiscoveredDevice(
        address=address,
        display_name=info.friendly_name or info.name,
        device_class=device_class,
        host=host,
        port=port,
        model=info.model,
        version=info.esphome_version,
    )


class EsphomeSession:
    """Native API connection to one ESPHome device.

    Connects in the background once opened. A lost connection is reported
    as an error event and is not re-established.
    """

    def __init__(
        self,
        device: DiscoveredDevice,
        config: DiscoveryConfig,
        client_factory: ClientFactory = aioesphomeapi.APIClient,
    ) -> None:
        self.address = device.address
        self.device_class = device.device_class
        self._device = device
        self._config = config
        self._client_factory = client_factory
        self._client: Any = None
        self._keys = EntityKeys()
        self._listeners: list[EventListener] = []
        self._task: asyncio.Task[None] | None = None
        self._ready = asyncio.Event()
        self._failure: TransportError | None = None
        self._binary_state: str | None = None
        self._state_received = asyncio.Event()

    def subscribe(self, listener: EventListener) -> None:
        self._listeners.append(listener)

    def open(self) -> None:
        if self._task is None:
            self._task = asyncio.ensure_future(self._connect())

    async def _connect(self) -> None:
        host = self._device.host or self.address
        client = self._client_factory(
            host, port=self._device.port, password=self._config.password
        )
        self._client = client
        try:
            await asyncio.wait_for(
                client.connect(on_stop=self._on_stop, login=True),
                timeout=self._config.timeout,
            )
            entities, _services = await client.list_entities_services()
        except CONNECT_ERRORS as exc:
            self._fail(type(exc).__name__)
            return

        self._keys = entity_keys(entities)
        client.subscribe_states(self._on_state)
        self._ready.set()
        logger.info("Connected to '%s' at %s", self._device.display_name, host)

    async def _on_stop(self, expected_disconnect: bool) -> None:
        if not expected_disconnect:
            self._fail("DISCONNECTED")

    def _fail(self, code: str) -> None:
        self._failure = TransportError(self.address, code)
        self._ready.set()
        self._emit(ErrorEvent(address=self.address, code=code))

    def _emit(self, event: DeviceEvent) -> None:
        for listener in self._listeners:
            listener(event)

    def _record_state(self, on: bool) -> None:
        self._binary_state = "1" if on else "0"
        self._state_received.set()
        self._emit(
            StateChangeEvent(
                address=self.address,
                device_class=self.device_class,
                raw_state=self._binary_state,
            )
        )

    def _on_state(self, state: object) -> None:
        if isinstance(state, SwitchState) and state.key == self._keys.switch:
            self._record_state(state.state)
        elif isinstance(state, BinarySensorState) and state.key == self._keys.motion:
            if not state.missing_state:
                self._record_state(state.state)
        elif isinstance(state, SensorState) and state.key == self._keys.power:
            if state.missing_state:
                return
            self._emit(
                PowerReadingEvent(
                    address=self.address,
                    device_class=self.device_class,
                    raw_state=self._binary_state,
                    instant_power=state.state,
                )
            )

    async def _wait_ready(self) -> None:
        await self._ready.wait()
        if self._failure is not None:
            raise self._failure

    async def set_binary_state(self, value: int) -> None:
        await self._wait_ready()
        if self._keys.switch is None:
            raise TransportError(self.address, "NO_SWITCH")
        try:
            self._client.switch_command(self._keys.switch, bool(value))
        except aioesphomeapi.APIConnectionError as exc:
            raise TransportError(self.address, type(exc).__name__) from exc

    async def get_binary_state(self) -> str:
        await self._wait_ready()
        await self._state_received.wait()
        if self._binary_state is None:
            raise TransportError(self.address, "NO_STATE")
        return self._binary_state

    async def close(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        if self._client is not None and self._failure is None and self._ready.is_set():
            await self._client.disconnect()


class EsphomeTransport:
    """Browse mDNS for ESPHome devices and classify each one by probing it.

    The browser keeps running after the first ``discover`` call; later calls
    re-probe services that were announced but could not be described yet.
    """

    def __init__(
        self,
        config: DiscoveryConfig,
        client_factory: ClientFactory = aioesphomeapi.APIClient,
    ) -> None:
        self._config = config
        self._client_factory = client_factory
        self._callbacks: list[DiscoveryCallback] = []
        self._services: set[str] = set()
        self._described: set[str] = set()
        self._probing: set[str] = set()
        self._tasks: set[asyncio.Task[None]] = set()
        self._aiozc: AsyncZeroconf | None = None
        self._browser: AsyncServiceBrowser | None = None

    def discover(self, callback: DiscoveryCallback) -> None:
        if callback not in self._callbacks:
            self._callbacks.append(callback)

        if self._aiozc is None:
            logger.debug("Browsing mDNS for %s", self._config.service_type)
            self._aiozc = AsyncZeroconf()
            self._browser = AsyncServiceBrowser(
                self._aiozc.zeroconf,
                [self._config.service_type],
                handlers=[self._on_service_state_change],
            )
            return

        for name in self._services - self._described:
            self._schedule_probe(self._aiozc.zeroconf, name)

    def create_session(self, device: DiscoveredDevice) -> EsphomeSession:
        return EsphomeSession(device, self._config, client_factory=self._client_factory)

    def _on_service_state_change(
        self,
        zeroconf: Zeroconf,
        service_type: str,
        name: str,
        state_change: ServiceStateChange,
    ) -> None:
        if state_change is ServiceStateChange.Removed:
            self._services.discard(name)
            return
        self._services.add(name)
        if name not in self._described:
            self._schedule_probe(zeroconf, name)

    def _schedule_probe(self, zeroconf: Zeroconf, name: str) -> None:
        if name in self._probing:
            return
        self._probing.add(name)
        task = asyncio.ensure_future(self._probe(zeroconf, name))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _probe(self, zeroconf: Zeroconf, name: str) -> None:
        try:
            info = AsyncServiceInfo(self._config.service_type, name)
            timeout_ms = max(int(self._config.timeout * 1000), 1)
            if not await info.async_request(zeroconf, timeout_ms):
                logger.debug("No service info for %s", name)
                return
            host = _pick_ip(info)
            if host is None:
                return
            properties = _decode_txt_properties(info.properties)
            device = await probe_device(
                host,
                self._config,
                port=info.port,
                txt=properties,
                client_factory=self._client_factory,
            )
        except ScanError as exc:
            self._report(exc, None)
            return
        finally:
            self._probing.discard(name)

        self._described.add(name)
        if device is None:
            return
        logger.debug(
            "Discovered %s '%s' via mDNS",
            device.device_class.label,
            _strip_service_suffix(name, self._config.service_type),
        )
        self._report(None, device)

    def _report(self, error: Exception | None, device: DiscoveredDevice | None) -> None:
        for callback in list(self._callbacks):
            callback(error, device)

    async def close(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        if self._browser is not None:
            await self._browser.async_cancel()
            self._browser = None
        if self._aiozc is not None:
            await self._aiozc.async_close()
            self._aiozc = None
