"""Serve command implementation."""

from typing import Optional

import typer
import uvicorn

from ..api import create_app
from .common import console, load_cli_config


def serve_command(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (default from config)"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Bind port (default from config)"),
) -> None:
    """Run the HTTP trigger server."""
    config = load_cli_config()
    api_config = config.config.api

    if not config.cron_secret:
        console.print(f"[yellow]⚠️  {api_config.cron_secret_env} is not set; the cron endpoint will refuse requests[/yellow]")
    if not config.admin_token:
        console.print(f"[yellow]⚠️  {api_config.admin_token_env} is not set; admin endpoints will refuse requests[/yellow]")

    app = create_app(config)
    uvicorn.run(app, host=host or api_config.host, port=port or api_config.port, log_config=None)
