from __future__ import annotations

import asyncio
from enum import Enum

import typer
from rich.console import Console

from espbridge.bridge import Bridge
from espbridge.cli.common import build_bridge, load_settings_or_exit, wait_for_device
from espbridge.errors import BridgeError
from espbridge.transport.esphome import normalize_mac


class SwitchAction(str, Enum):
    ON = "on"
    OFF = "off"
    STATUS = "status"


async def _run(
    bridge: Bridge, address: str, action: SwitchAction, window: float
) -> bool | None:
    await bridge.start()
    try:
        if not await wait_for_device(bridge, address, window):
            return None
        if action is not SwitchAction.STATUS:
            # The device pushes its new state later; report the one requested.
            desired = action is SwitchAction.ON
            session = bridge.registry.require_session(address)
            await asyncio.wait_for(
                session.set_binary_state(int(desired)), timeout=window
            )
            return desired
        return await asyncio.wait_for(
            bridge.dispatcher.get_switch(address), timeout=window
        )
    finally:
        await bridge.stop()


def switch(
    address: str = typer.Argument(..., help="Device MAC address"),
    action: SwitchAction = typer.Argument(
        SwitchAction.STATUS, help="on, off or status"
    ),
    timeout: float | None = typer.Option(
        None,
        "--timeout",
        "-t",
        help="Seconds to wait for the device. Uses config scan_window if omitted.",
    ),
) -> None:
    """Turn a switch on or off, or show its state."""
    console = Console()

    settings = load_settings_or_exit()
    window = timeout or settings.discovery.scan_window
    address = normalize_mac(address)

    try:
        state = asyncio.run(_run(build_bridge(settings), address, action, window))
    except (BridgeError, TimeoutError) as exc:
        console.print(f"[red]Error:[/red] {str(exc) or 'no response from device'}")
        raise typer.Exit(1) from None

    if state is None:
        console.print(f"[yellow]![/yellow] Device {address} not found")
        raise typer.Exit(1)

    label = "[green]ON[/green]" if state else "[dim]OFF[/dim]"
    console.print(f"{address}: {label}")


def register(app: typer.Typer) -> None:
    app.command()(switch)
