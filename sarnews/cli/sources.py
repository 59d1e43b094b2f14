"""Sources management commands."""

import asyncio
from typing import List, Optional

import pendulum
import typer
from rich.table import Table

from ..classifier import KeywordClassifier
from ..db import PostgresStorage, close_connection_pool
from ..exceptions import StorageError
from ..health import evaluate_feed_health, is_unhealthy
from ..ingestion import RSSFetcher
from ..models import Source
from .common import console, load_cli_config, open_storage

sources_app = typer.Typer(help="Manage RSS sources")


@sources_app.callback()
def _sources_callback(ctx: typer.Context) -> None:
    ctx.call_on_close(close_connection_pool)


def _resolve(storage: PostgresStorage, ref: str) -> Source:
    """Find a source by numeric ID or exact name."""
    if ref.isdigit():
        source = storage.get_source(int(ref))
    else:
        source = next((s for s in storage.list_sources() if s.name == ref), None)

    if source is None:
        console.print(f"[red]Source '{ref}' not found.[/red]")
        raise typer.Exit(1)
    return source


def _ago(value) -> str:
    return pendulum.instance(value).diff_for_humans() if value else "never"


@sources_app.command("list")
def sources_list(
    active_only: bool = typer.Option(False, "--active", help="Only show active sources"),
) -> None:
    """List all registered sources."""
    storage = open_storage(load_cli_config())

    try:
        sources = storage.list_active_sources() if active_only else storage.list_sources()
    except StorageError as e:
        console.print(f"[red]Failed to load sources: {e}[/red]")
        raise typer.Exit(1)

    if not sources:
        console.print("[yellow]No sources registered. Run 'sarnews init' to seed defaults.[/yellow]")
        return

    table = Table(title="Registered Sources")
    table.add_column("ID", style="dim", justify="right")
    table.add_column("Name", style="cyan")
    table.add_column("Active", style="yellow")
    table.add_column("Always", style="magenta")
    table.add_column("Errors", justify="right")
    table.add_column("Last success", style="green")
    table.add_column("Health")
    table.add_column("URL", style="blue")

    for source in sources:
        health = ""
        if source.is_active:
            health = "[red]unhealthy[/red]" if is_unhealthy(source) else "[green]ok[/green]"
        table.add_row(
            str(source.id),
            source.name,
            "✓" if source.is_active else "✗",
            "✓" if source.always_relevant else "",
            str(source.error_count) if source.error_count else "",
            _ago(source.last_success_at),
            health,
            source.url,
        )

    console.print(table)


@sources_app.command("add")
def sources_add(
    name: str = typer.Option(..., "--name", "-n", help="Source name"),
    url: str = typer.Option(..., "--url", "-u", help="RSS feed URL"),
    always_relevant: bool = typer.Option(
        False,
        "--always-relevant",
        "-a",
        help="Skip the keyword filter for this feed (regional outlets)",
    ),
    inactive: bool = typer.Option(False, "--inactive", help="Register without activating"),
) -> None:
    """Add a new RSS source."""
    storage = open_storage(load_cli_config())

    try:
        source = storage.add_source(name, url, always_relevant=always_relevant)
        if source is not None and inactive:
            storage.update_source(source.id, is_active=False)
    except StorageError as e:
        console.print(f"[red]Failed to add source: {e}[/red]")
        raise typer.Exit(1)

    if source is None:
        console.print(f"[red]A source with URL {url} already exists.[/red]")
        raise typer.Exit(1)

    console.print(f"[green]✅ Added source: {name} (id {source.id})[/green]")


@sources_app.command("remove")
def sources_remove(
    source_ref: str = typer.Argument(..., help="Source ID or name"),
) -> None:
    """Remove a source."""
    storage = open_storage(load_cli_config())
    source = _resolve(storage, source_ref)

    try:
        storage.remove_source(source.id)
    except StorageError as e:
        console.print(f"[red]Failed to remove source: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]✅ Removed source: {source.name}[/green]")


@sources_app.command("toggle")
def sources_toggle(
    source_ref: str = typer.Argument(..., help="Source ID or name"),
) -> None:
    """Activate or deactivate a source."""
    storage = open_storage(load_cli_config())
    source = _resolve(storage, source_ref)

    try:
        active = storage.toggle_source(source.id)
    except StorageError as e:
        console.print(f"[red]Failed to toggle source: {e}[/red]")
        raise typer.Exit(1)

    state = "activated" if active else "deactivated"
    console.print(f"[green]✅ {source.name} {state}[/green]")


@sources_app.command("test")
def sources_test(
    source_ref: Optional[str] = typer.Argument(None, help="Source ID or name (or test all active)"),
) -> None:
    """Fetch feeds without storing anything and report relevance."""
    config = load_cli_config()
    storage = open_storage(config)
    settings = config.config

    sources: List[Source] = [_resolve(storage, source_ref)] if source_ref else storage.list_active_sources()
    if not sources:
        console.print("[yellow]No active sources.[/yellow]")
        return

    fetcher = RSSFetcher(timeout=settings.refresh.fetch_timeout, user_agent=settings.refresh.user_agent)
    classifier = KeywordClassifier.from_config(settings.classifier)

    async def _fetch_all():
        return [await fetcher.fetch_feed(source) for source in sources]

    failed = 0
    for source, result in zip(sources, asyncio.run(_fetch_all())):
        if not result.success:
            failed += 1
            console.print(f"[red]❌ {source.name}: {result.error}[/red]")
            continue

        relevant = sum(
            1
            for item in result.items
            if item.title
            and classifier.is_relevant(item.title, item.snippet, always_relevant=source.always_relevant)
        )
        console.print(f"[green]✅ {source.name}: {result.item_count} items, {relevant} relevant[/green]")

    if failed:
        raise typer.Exit(1)


@sources_app.command("health")
def sources_health() -> None:
    """Show stale and repeatedly failing feeds."""
    storage = open_storage(load_cli_config())

    try:
        report = evaluate_feed_health(storage.list_sources())
    except StorageError as e:
        console.print(f"[red]Failed to load sources: {e}[/red]")
        raise typer.Exit(1)

    if report.healthy:
        console.print("[green]✅ All active feeds are healthy[/green]")
        return

    if report.stale_feeds:
        table = Table(title="Stale Feeds (no success in 24h)")
        table.add_column("Name", style="cyan")
        table.add_column("Last success", style="yellow")
        table.add_column("Hours", justify="right")
        for feed in report.stale_feeds:
            hours = "never" if feed.hours_since_success < 0 else f"{feed.hours_since_success:.1f}"
            table.add_row(feed.name, _ago(feed.last_success_at), hours)
        console.print(table)

    if report.error_feeds:
        table = Table(title="Failing Feeds (3+ consecutive errors)")
        table.add_column("Name", style="cyan")
        table.add_column("Errors", justify="right", style="red")
        table.add_column("Last error")
        for feed in report.error_feeds:
            table.add_row(feed.name, str(feed.error_count), feed.last_error or "")
        console.print(table)

    raise typer.Exit(1)
