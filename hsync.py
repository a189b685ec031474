#!/usr/bin/env python3
"""
HealthSync Bridge CLI

Merges health-store data with smart-scale measurements and uploads the
result to a personal server.

Usage:
    hsync sync
    hsync sync --dry-run
    hsync sync --daily --at 08:00
    hsync vendor login
    hsync vendor measurements --limit 10
    hsync config show
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from health_sync import (
    ConfigError,
    HealthSourceError,
    SyncError,
    SyncOrchestrator,
    SyncSettings,
    SyncWindow,
    run_daily,
    summarize,
)
from health_sync.scheduler import DEFAULT_RUN_AT, parse_run_at
from scale_connector import AuthError, RenphoClient

__version__ = "0.1.0"

CLI_ROOT = Path(__file__).parent

console = Console()

app = typer.Typer(
    name="hsync",
    help="HealthSync Bridge - health store and smart scale sync tool",
    no_args_is_help=True,
)


def version_callback(value: bool):
    """Show version and exit."""
    if value:
        console.print(f"[bold cyan]HealthSync Bridge[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    )
):
    """HealthSync Bridge - health store and smart scale sync tool."""
    pass


# ============================================================================
# Helper Functions
# ============================================================================

def _load_env(env_file: Optional[str]) -> None:
    """Load environment file. Priority: --env flag > .env.local > .env"""
    if env_file:
        env_path = Path(env_file)
        if not env_path.is_absolute():
            env_path = Path.cwd() / env_path
        if env_path.exists():
            load_dotenv(env_path, override=True)
            console.print(f"[green]📝 Loading environment from:[/green] [cyan]{env_file}[/cyan]")
        else:
            console.print(f"[yellow]⚠️  Environment file not found: {env_file}[/yellow]")
        return

    for env_path in (Path.cwd() / ".env.local", Path.cwd() / ".env"):
        if env_path.exists():
            load_dotenv(env_path, override=True)
            console.print(f"[dim]📝 Auto-loaded environment from {env_path.name}[/dim]")
            return


def _setup_logging(level: str, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


def _load_settings(env_file: Optional[str], verbose: bool = False) -> SyncSettings:
    """Load .env, build settings and configure logging, or exit 1."""
    _load_env(env_file)
    try:
        settings = SyncSettings.from_env()
    except ConfigError as e:
        console.print(f"[red]❌ {e.message}[/red]")
        raise typer.Exit(1)

    _setup_logging(settings.log_level, verbose)
    return settings


def _print_summary(payload, vendor_status: str, title: str) -> None:
    table = Table(title=title)
    table.add_column("Data", style="cyan")
    table.add_column("Value", style="green")
    for name, value in summarize(payload, vendor_status).as_rows():
        table.add_row(name, value)
    console.print(table)


# ============================================================================
# SYNC Command
# ============================================================================

@app.command()
def sync(
    daily: bool = typer.Option(False, "--daily", help="Keep running and sync once a day"),
    at: str = typer.Option(DEFAULT_RUN_AT.strftime("%H:%M"), "--at", help="Daily sync time (HH:MM, local)"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Build and print the payload without uploading"),
    lookback_days: Optional[int] = typer.Option(None, "--lookback-days", min=1, help="Sleep/weight/body fat window"),
    steps_lookback_days: Optional[int] = typer.Option(None, "--steps-lookback-days", min=1, help="Steps window"),
    env_file: Optional[str] = typer.Option(None, "--env", help="Environment file (.env.local, .env)"),
    verbose: bool = typer.Option(False, "--verbose", help="Verbose logging"),
):
    """
    Read the health store and scale, merge, and upload.

    Examples:
        hsync sync
        hsync sync --dry-run --lookback-days 7
        hsync sync --daily --at 07:30
    """
    settings = _load_settings(env_file, verbose)
    window = SyncWindow(
        lookback_days=lookback_days or settings.lookback_days,
        steps_lookback_days=steps_lookback_days or settings.steps_lookback_days,
    )

    try:
        run_at = parse_run_at(at)
    except ValueError as e:
        console.print(f"[red]❌ {e}[/red]")
        raise typer.Exit(1)

    try:
        orchestrator = SyncOrchestrator.from_settings(settings, upload=not dry_run)
    except ConfigError as e:
        console.print(f"[red]❌ {e.message}[/red]")
        raise typer.Exit(1)

    async def sync_once():
        if dry_run:
            payload, vendor_status = await orchestrator.build_payload(window)
            console.print_json(payload.to_json())
            _print_summary(payload, vendor_status, "Dry Run (not uploaded)")
            return

        console.print("🔄 Syncing...")
        result = await orchestrator.run_sync(window)
        _print_summary(result.payload, result.vendor_status, f"Synced (HTTP {result.upload_status_code})")

    async def run():
        async with orchestrator:
            if daily:
                console.print(f"⏰ Daily sync at [cyan]{run_at.strftime('%H:%M')}[/cyan] (Ctrl+C to stop)")
                await run_daily(sync_once, at=run_at)
            else:
                await sync_once()

    try:
        asyncio.run(run())
    except (SyncError, HealthSourceError, ConfigError) as e:
        console.print(f"[red]❌ {e.message}[/red]")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Stopped[/yellow]")

    console.print("[green]✅ Done[/green]")


# ============================================================================
# VENDOR Commands - Smart scale account
# ============================================================================

vendor_app = typer.Typer(help="Smart scale vendor account")
app.add_typer(vendor_app, name="vendor")

MEASUREMENT_COLUMNS = ("weight", "bmi", "bodyFat", "muscle", "water", "visceralFat", "bodyAge")


def _vendor_client(settings: SyncSettings) -> RenphoClient:
    credential = settings.vendor_credential()
    if credential is None:
        console.print("[red]❌ Vendor not configured[/red]")
        console.print("   Set [cyan]RENPHO_EMAIL[/cyan] and [cyan]RENPHO_PASSWORD[/cyan]")
        raise typer.Exit(1)
    return RenphoClient(credential, config=settings.vendor_config())


@vendor_app.command("login")
def vendor_login(
    env_file: Optional[str] = typer.Option(None, "--env", help="Environment file"),
    verbose: bool = typer.Option(False, "--verbose", help="Verbose logging"),
):
    """
    Check the vendor credential by signing in.

    Example:
        hsync vendor login
    """
    settings = _load_settings(env_file, verbose)
    client = _vendor_client(settings)

    async def login():
        async with client:
            return await client.authenticate()

    console.print("🔑 Signing in...")
    try:
        session = asyncio.run(login())
    except AuthError as e:
        console.print(f"[red]❌ {e.message}[/red] (attempts: {e.attempts})")
        raise typer.Exit(1)

    console.print(f"[green]✅ Signed in[/green] as user [cyan]{session.user_id}[/cyan]")


@vendor_app.command("measurements")
def vendor_measurements(
    limit: int = typer.Option(10, "--limit", "-n", min=1, help="Max measurements to show"),
    as_json: bool = typer.Option(False, "--json", help="Print normalized records as JSON"),
    env_file: Optional[str] = typer.Option(None, "--env", help="Environment file"),
    verbose: bool = typer.Option(False, "--verbose", help="Verbose logging"),
):
    """
    Fetch and show recent scale measurements.

    Example:
        hsync vendor measurements --limit 5
    """
    settings = _load_settings(env_file, verbose)
    client = _vendor_client(settings)

    async def fetch():
        async with client:
            await client.authenticate()
            return client.normalize(await client.fetch_measurements()), client.last_fetch_error

    try:
        records, fetch_error = asyncio.run(fetch())
    except AuthError as e:
        console.print(f"[red]❌ {e.message}[/red] (attempts: {e.attempts})")
        raise typer.Exit(1)

    if fetch_error is not None:
        console.print(f"[red]❌ {fetch_error.message}[/red]")
        raise typer.Exit(1)

    records = records[-limit:]
    if as_json:
        console.print_json(json.dumps(records))
        return

    if not records:
        console.print("[yellow]No measurements found[/yellow]")
        return

    table = Table(title=f"Scale Measurements (last {len(records)})")
    table.add_column("Date", style="dim")
    for column in MEASUREMENT_COLUMNS:
        table.add_column(column, justify="right")

    for record in records:
        table.add_row(
            record["date"] or "?",
            *(
                "" if record[column] is None else str(record[column])
                for column in MEASUREMENT_COLUMNS
            ),
        )
    console.print(table)


# ============================================================================
# CONFIG Commands
# ============================================================================

config_app = typer.Typer(help="Configuration")
app.add_typer(config_app, name="config")


@config_app.command("show")
def config_show(
    env_file: Optional[str] = typer.Option(None, "--env", help="Environment file"),
):
    """Show resolved settings, secrets masked."""
    settings = _load_settings(env_file)

    table = Table(title="HealthSync Settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    for name, value in settings.redacted().items():
        table.add_row(name, "[dim]not set[/dim]" if value is None else str(value))
    console.print(table)


# ============================================================================
# VERSION Command
# ============================================================================

@app.command()
def version():
    """Show version information."""
    console.print("[bold]HealthSync Bridge[/bold]")
    console.print(f"Version: [cyan]{__version__}[/cyan]")
    console.print()
    console.print(f"Location: [dim]{CLI_ROOT}[/dim]")


if __name__ == "__main__":
    app()
