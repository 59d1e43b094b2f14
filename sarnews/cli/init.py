"""Init command implementation."""

from pathlib import Path

from pydantic import ValidationError
import typer
from rich.console import Console
from rich.panel import Panel

from ..config import ConfigModel, save_config
from ..config.loader import DEFAULT_CONFIG_PATH
from ..db import PostgresStorage, init_database, validate_connection
from ..exceptions import StorageError

console = Console()


def init_command(
    config_path: Path = typer.Option(
        DEFAULT_CONFIG_PATH,
        "--config",
        "-c",
        help="Configuration file to write",
    ),
    db_host: str = typer.Option("localhost", "--db-host", help="Postgres host"),
    db_port: int = typer.Option(5432, "--db-port", help="Postgres port"),
    db_name: str = typer.Option("sarnews", "--db-name", help="Database name"),
    db_user: str = typer.Option("sarnews", "--db-user", help="Database user"),
    translation_provider: str = typer.Option(
        "mymemory",
        "--translator",
        help="Translation provider (mymemory, openai, mock)",
    ),
    seed_sources: bool = typer.Option(
        True,
        "--seed-sources/--no-seed-sources",
        help="Seed the default Sarawak news feeds",
    ),
) -> None:
    """Initialize configuration and database."""
    console.print(Panel.fit("Sarawak News - Initialization", style="bold blue"))

    try:
        config = ConfigModel(
            postgres={
                "host": db_host,
                "port": db_port,
                "database": db_name,
                "user": db_user,
                "password_env": "SARNEWS_DB_PASSWORD",
            },
            translation={"provider": translation_provider},
        )
    except ValidationError as e:
        console.print(f"[red]Invalid options: {e}[/red]")
        raise typer.Exit(1)

    save_config(config, config_path)
    console.print(f"✅ Created config: {config_path}")

    # Validate database connection
    console.print("\n[bold]Testing database connection...[/bold]")
    db_config = config.postgres.model_dump()

    if not validate_connection(db_config):
        console.print(
            "[red]❌ Database connection failed![/red]\n"
            "Please ensure Postgres is running and credentials are correct.\n"
            "Set the password via environment variable: [bold]export SARNEWS_DB_PASSWORD=your_password[/bold]"
        )
        raise typer.Exit(1)

    console.print("✅ Database connection successful")

    console.print("\n[bold]Initializing database schema...[/bold]")
    try:
        init_database(db_config)
        console.print("✅ Database schema initialized")
    except Exception as e:
        console.print(f"[red]❌ Failed to initialize database: {e}[/red]")
        raise typer.Exit(1)

    if seed_sources:
        try:
            inserted = PostgresStorage(db_config).seed_default_sources()
        except StorageError as e:
            console.print(f"[red]❌ Failed to seed sources: {e}[/red]")
            raise typer.Exit(1)
        console.print(f"✅ Seeded {inserted} sources")

    console.print(
        Panel(
            f"[green]✅ Sarawak News initialized successfully![/green]\n\n"
            f"Configuration: {config_path}\n\n"
            f"Next steps:\n"
            f"1. Set database password: [bold]export SARNEWS_DB_PASSWORD=your_password[/bold]\n"
            f"2. Set trigger secrets: [bold]export CRON_SECRET=... ADMIN_TOKEN=...[/bold]\n"
            f"3. Run: [bold]sarnews refresh[/bold]",
            style="green",
        )
    )
