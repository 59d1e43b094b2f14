"""Shared CLI helpers."""

import typer
from rich.console import Console

from ..config import Config
from ..db import PostgresStorage

console = Console()


def load_cli_config() -> Config:
    """Load configuration or exit with a hint to run init."""
    config = Config()
    try:
        config.config
    except FileNotFoundError:
        console.print(f"[red]Config not found at {config.config_path}. Run 'sarnews init' first.[/red]")
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    return config


def open_storage(config: Config) -> PostgresStorage:
    return PostgresStorage(config.get_db_config())
