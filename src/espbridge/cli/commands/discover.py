from __future__ import annotations

import asyncio
import logging

import typer
from rich.console import Console
from rich.table import Table

from espbridge.cli.common import build_bridge, collect_devices, load_settings_or_exit
from espbridge.models import DeviceClass

logger = logging.getLogger(__name__)


def discover(
    device_class: DeviceClass | None = typer.Option(
        None, "--class", "-c", help="Only show devices of this class"
    ),
    timeout: float | None = typer.Option(
        None,
        "--timeout",
        "-t",
        help="Seconds to listen for devices. Uses config scan_window if omitted.",
    ),
) -> None:
    """Discover bridgeable devices via mDNS."""
    console = Console()

    settings = load_settings_or_exit()
    window = timeout or settings.discovery.scan_window

    console.print(f"Discovering devices for {window:.1f}s...")
    logger.info(
        "Discovery settings: service=%s, probe timeout=%.2fs",
        settings.discovery.service_type,
        settings.discovery.timeout,
    )
    devices = asyncio.run(collect_devices(build_bridge(settings), window))
    if device_class is not None:
        devices = [d for d in devices if d.device_class is device_class]

    if not devices:
        console.print("No devices found.")
        return

    table = Table()
    table.add_column("Address", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Class", style="yellow")
    table.add_column("Host")
    table.add_column("Model")
    table.add_column("Version")

    for device in sorted(devices, key=lambda d: (d.device_class.value, d.address)):
        table.add_row(
            device.address,
            device.display_name,
            device.device_class.label,
            device.host or "",
            device.model,
            device.version,
        )

    console.print(table)
    console.print(f"\n[green]Found {len(devices)} device(s)[/green]")


def register(app: typer.Typer) -> None:
    app.command()(discover)
