"""Main CLI application."""

import logging

import typer
from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()

from ..log import setup_logging
from .init import init_command
from .refresh import refresh_command, status_command, translate_command
from .serve import serve_command
from .sources import sources_app

app = typer.Typer(
    name="sarnews",
    help="Sarawak News - regional RSS ingestion and refresh",
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Sarawak News command line."""
    setup_logging(logging.DEBUG if verbose else logging.INFO)


# Register commands
app.command("init")(init_command)
app.command("refresh")(refresh_command)
app.command("translate")(translate_command)
app.command("status")(status_command)
app.command("serve")(serve_command)
app.add_typer(sources_app, name="sources", help="Manage RSS sources")


if __name__ == "__main__":
    app()
