from __future__ import annotations

from typing import Annotated

import typer

from espbridge.utils.logging import setup_logging

from . import config as config_cmd
from .commands.discover import register as register_discover
from .commands.monitor import register as register_monitor
from .commands.switch import register as register_switch

app = typer.Typer(
    help="espbridge - expose ESPHome devices to a home-automation hub",
    no_args_is_help=True,
)

app.add_typer(config_cmd.app, name="config")

register_discover(app)
register_switch(app)
register_monitor(app)


@app.callback(invoke_without_command=True)
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-v", help="Show version and exit"),
    ] = False,
) -> None:
    """espbridge CLI."""
    setup_logging()

    if version:
        from importlib.metadata import version as get_version

        typer.echo(f"espbridge version {get_version('espbridge')}")
        raise typer.Exit()
