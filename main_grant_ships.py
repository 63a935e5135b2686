"""Mini README: Entry point CLI for launching the Grant Ships service.

This script exposes a Typer CLI that starts the FastAPI application with
configurable host, port and production flags, and lists the chain gateways
that ``GRANTSHIPS_CHAIN_BACKEND`` may select. Settings come from
``GRANTSHIPS_*`` environment variables when options are omitted.
"""

from __future__ import annotations

import typer
import uvicorn

from grantships.chain import REGISTRY
from grantships.configuration import get_settings
from grantships.logging_utils import configure_root_logger

cli = typer.Typer(help="Launch and manage the Grant Ships service.")


@cli.command()
def run(
    host: str = typer.Option(None, help="Host interface to bind."),
    port: int = typer.Option(None, help="Port to listen on."),
    production: bool = typer.Option(
        False, help="Use production server settings (disable auto-reload)."
    ),
) -> None:
    """Start the FastAPI application using uvicorn."""

    settings = get_settings()
    effective_host = host or settings.interface_host
    effective_port = port or settings.interface_port
    configure_root_logger()

    # Browsers cannot navigate to the 0.0.0.0 sentinel, so print a loopback URL.
    browser_host = "127.0.0.1" if effective_host in {"0.0.0.0", "::"} else effective_host
    typer.echo(
        f"Starting Grant Ships on {effective_host}:{effective_port} "
        f"({settings.chain_backend} gateway, payouts "
        f"{'enabled' if settings.payouts_enabled else 'disabled'}).\n"
        f"API available at http://{browser_host}:{effective_port}"
    )
    uvicorn.run(
        "grantships.interface.web_app:create_application",
        host=effective_host,
        port=effective_port,
        factory=True,
        reload=not production,
    )


@cli.command()
def gateways() -> None:
    """List the chain gateways available to the platform."""

    for identifier in REGISTRY.available_gateways():
        typer.echo(identifier)


if __name__ == "__main__":
    cli()
