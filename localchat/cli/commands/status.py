import asyncio

import typer
from rich.console import Console

from localchat.cli.client import RuntimeClient
from localchat.internal.constants import RUNTIME_HOST, RUNTIME_PORT
from localchat.internal.logging import get_logger

logger = get_logger(__name__)
console = Console()


def status(
    host: str = typer.Option(RUNTIME_HOST, help="Host of the running service."),
    port: int = typer.Option(RUNTIME_PORT, help="Port of the running service."),
):
    """
    Show whether the service is up and the model is ready.
    """
    client = RuntimeClient(host=host, port=port)
    try:
        health = asyncio.run(client.health())
    except Exception as e:
        typer.echo(f"Could not connect to localchat at {client.base_url}. Is it running? Error: {e}")
        logger.error("Error checking runtime status", error=str(e))
        raise typer.Exit(1)

    console.print_json(data=health)
    if not health.get("modelReady"):
        typer.echo("Model is still initializing.")
