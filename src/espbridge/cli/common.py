from __future__ import annotations

import asyncio
from pathlib import Path

import typer

from espbridge.bridge import Bridge
from espbridge.config import Settings, get_settings, resolve_config_path
from espbridge.models import DiscoveredDevice

POLL_INTERVAL = 0.1


def load_settings_or_exit() -> Settings:
    try:
        return get_settings()
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc


def resolve_config_path_or_exit(allow_missing: bool = False) -> tuple[Path, bool]:
    try:
        return resolve_config_path(allow_missing=allow_missing)
    except FileNotFoundError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc


def build_bridge(settings: Settings) -> Bridge:
    return Bridge.from_settings(settings)


async def collect_devices(bridge: Bridge, window: float) -> list[DiscoveredDevice]:
    """Run discovery for ``window`` seconds and return everything found."""
    await bridge.start()
    try:
        await asyncio.sleep(window)
        return bridge.registry.devices()
    finally:
        await bridge.stop()


async def wait_for_device(bridge: Bridge, address: str, window: float) -> bool:
    """Poll the registry until ``address`` shows up or ``window`` runs out."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + window
    while address not in bridge.registry:
        if loop.time() >= deadline:
            return False
        await asyncio.sleep(POLL_INTERVAL)
    return True
