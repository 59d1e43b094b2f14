"""Refresh, translate and status commands."""

import asyncio
from typing import Optional

import pendulum
import typer
from rich.table import Table

from ..db import close_connection_pool, validate_connection
from ..exceptions import SarnewsError
from ..pipeline import RefreshOrchestrator, RefreshThrottled, RefreshTrigger
from .common import console, load_cli_config

_STATUS_STYLES = {
    "success": "green",
    "warning": "yellow",
    "error": "red",
}


async def _refresh(orchestrator: RefreshOrchestrator, trigger: RefreshTrigger):
    try:
        outcome = await orchestrator.refresh(trigger)
        if not isinstance(outcome, RefreshThrottled):
            with console.status("[dim]Translating new headlines...[/dim]"):
                translated = await orchestrator.wait_for_background()
            if translated is not None:
                console.print(f"[dim]Translated {translated} articles[/dim]")
        return outcome
    finally:
        if orchestrator.backfill is not None:
            await orchestrator.backfill.translator.aclose()


def refresh_command(
    auto: bool = typer.Option(
        False,
        "--auto",
        help="Behave like a scheduled trigger and respect the cooldown",
    ),
) -> None:
    """Fetch all active sources and store new relevant articles."""
    config = load_cli_config()

    console.print("[dim]Checking database connection...[/dim]")
    if not validate_connection(config.get_db_config()):
        console.print("[red]❌ Database connection failed![/red]")
        console.print("Please check your database configuration and ensure Postgres is running.")
        raise typer.Exit(1)

    orchestrator = RefreshOrchestrator.from_config(config)
    trigger = RefreshTrigger.SCHEDULED if auto else RefreshTrigger.MANUAL

    try:
        outcome = asyncio.run(_refresh(orchestrator, trigger))
    except KeyboardInterrupt:
        console.print("\n[yellow]Refresh interrupted by user[/yellow]")
        raise typer.Exit(1)
    except SarnewsError as e:
        console.print(f"[red]Refresh failed: {e}[/red]")
        raise typer.Exit(1)
    finally:
        close_connection_pool()

    if isinstance(outcome, RefreshThrottled):
        console.print(f"[yellow]Refresh throttled. Try again in {outcome.retry_after}s.[/yellow]")
        raise typer.Exit(2)

    style = _STATUS_STYLES[outcome.status.value]
    console.print(
        f"[{style}]Refresh {outcome.status.value}[/{style}]: "
        f"{outcome.added} added from {outcome.total} items"
    )

    table = Table(title="Sources")
    table.add_column("Source", style="cyan")
    table.add_column("Items", justify="right")
    table.add_column("Relevant", justify="right")
    table.add_column("Added", justify="right", style="green")
    table.add_column("Error", style="red")
    for source in outcome.sources:
        table.add_row(
            source.source_name,
            str(source.total),
            str(source.relevant),
            str(source.added),
            source.error or "",
        )
    console.print(table)

    if outcome.status.value == "error":
        raise typer.Exit(1)


def translate_command(
    limit: Optional[int] = typer.Option(None, "--limit", "-l", help="Articles to process (default: batch size)"),
) -> None:
    """Fill in missing translated titles."""
    config = load_cli_config()
    orchestrator = RefreshOrchestrator.from_config(config)

    if orchestrator.backfill is None:
        console.print("[yellow]No usable translation provider configured.[/yellow]")
        raise typer.Exit(1)

    async def _translate() -> int:
        try:
            return await orchestrator.translate_now(limit)
        finally:
            await orchestrator.backfill.translator.aclose()

    try:
        with console.status("[dim]Translating...[/dim]"):
            translated = asyncio.run(_translate())
    except SarnewsError as e:
        console.print(f"[red]Translation failed: {e}[/red]")
        raise typer.Exit(1)
    finally:
        close_connection_pool()

    console.print(f"[green]✅ Translated {translated} articles[/green]")


def status_command() -> None:
    """Show the last refresh outcome and cooldown."""
    config = load_cli_config()
    orchestrator = RefreshOrchestrator.from_config(config)

    try:
        state = orchestrator.read_state()
        retry_after = orchestrator.seconds_until_eligible(state)
        pending = orchestrator.storage.count_untranslated_articles()
    except SarnewsError as e:
        console.print(f"[red]Failed to read status: {e}[/red]")
        raise typer.Exit(1)
    finally:
        close_connection_pool()

    if state.last_refresh is None:
        console.print("[yellow]No refresh has completed yet.[/yellow]")
        return

    style = _STATUS_STYLES.get(state.status.value if state.status else "", "white")
    last = pendulum.instance(state.last_refresh)
    console.print(f"Last refresh: {last.to_datetime_string()} UTC ({last.diff_for_humans()})")
    console.print(f"Status: [{style}]{state.status.value if state.status else 'unknown'}[/{style}]")
    console.print(f"Added: {state.added}  Processed: {state.total}  Failed sources: {state.error_count}")
    if retry_after:
        console.print(f"Next automatic refresh allowed in {retry_after}s")
    else:
        console.print("Automatic refresh allowed now")
    console.print(f"Articles awaiting translation: {pending}")
