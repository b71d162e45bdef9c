from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Any

import typer
from rich.console import Console

from espbridge.bridge import Bridge
from espbridge.cli.common import build_bridge, load_settings_or_exit


async def _monitor(
    bridge: Bridge, console: Console, window: float, duration: float | None
) -> None:
    async def show(payload: dict[str, Any]) -> None:
        timestamp = datetime.now().strftime("%H:%M:%S")
        console.print(
            f"[dim]{timestamp}[/dim] [cyan]{payload['uniqueDeviceId']}[/cyan] "
            f"{payload['component']} = [green]{payload['value']}[/green]"
        )

    for descriptor in bridge.descriptors:
        descriptor.register_subscription(show)

    loop = asyncio.get_running_loop()
    deadline = None if duration is None else loop.time() + duration

    await bridge.start()
    try:
        while deadline is None or loop.time() < deadline:
            # Re-run discovery and open sessions for anything new.
            for descriptor in bridge.descriptors:
                for listing in descriptor.discover():
                    bridge.registry.session_for(listing["id"])
            delay = window if deadline is None else min(window, deadline - loop.time())
            await asyncio.sleep(max(delay, 0))
    finally:
        await bridge.stop()


def monitor(
    timeout: float | None = typer.Option(
        None,
        "--timeout",
        "-t",
        help="Seconds between discovery rounds. Uses config scan_window if omitted.",
    ),
    duration: float | None = typer.Option(
        None, "--duration", "-d", help="Stop after this many seconds"
    ),
) -> None:
    """Connect to every discovered device and print forwarded updates."""
    console = Console()

    settings = load_settings_or_exit()
    window = timeout or settings.discovery.scan_window

    console.print("Monitoring device updates...")
    console.print("Press Ctrl+C to stop.\n")

    try:
        asyncio.run(_monitor(build_bridge(settings), console, window, duration))
    except KeyboardInterrupt:
        console.print("\n[green]Monitor stopped.[/green]")


def register(app: typer.Typer) -> None:
    app.command()(monitor)
