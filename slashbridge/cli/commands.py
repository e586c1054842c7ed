"""slashbridge CLI: run the server, sync once, try out a command."""

from __future__ import annotations

import asyncio
from typing import Optional

import httpx
import typer
from rich.console import Console
from rich.table import Table

# Create Typer app
app = typer.Typer(help="slashbridge - remote actions as slash commands", no_args_is_help=True)
console = Console()

# Commands subcommand (talks to a running server)
cmd_app = typer.Typer(help="Browse commands registered on a running server", no_args_is_help=True)
app.add_typer(cmd_app, name="commands")


def _async_run(coro):
    """Run an async coroutine."""
    return asyncio.run(coro)


def _base_url(url: Optional[str]) -> str:
    from slashbridge.config import get_settings

    if url:
        return url.rstrip("/")
    settings = get_settings()
    host = "localhost" if settings.api_host in ("0.0.0.0", "") else settings.api_host
    return f"http://{host}:{settings.api_port}"


def _print_commands(commands: list[dict], title: str) -> None:
    table = Table(title=title)
    table.add_column("Trigger", style="cyan", no_wrap=True)
    table.add_column("Arguments", style="green")
    table.add_column("Autocomplete", style="yellow")
    for cmd in commands:
        args = [arg["name"] or "[dim]<empty>[/dim]" for arg in cmd["autocomplete_data"]["arguments"]]
        table.add_row(f"/{cmd['trigger']}", " ".join(args), "✓" if cmd["auto_complete"] else "")
    console.print(table)


@app.command()
def serve() -> None:
    """Start the API server and the background command sync."""
    from slashbridge.main import main

    main()


@app.command()
def sync(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level"),
) -> None:
    """Fetch the action definitions once and show what would be registered."""
    from slashbridge.logging_config import setup_logging
    from slashbridge.modules.actions.sync import ActionSync
    from slashbridge.modules.commands.registry import CommandRegistry

    setup_logging("DEBUG" if verbose else "WARNING")
    registry = CommandRegistry()
    outcome = _async_run(ActionSync(registry=registry).sync_once())

    if not outcome.ok:
        console.print(f"[red]✗ Sync failed ({outcome.error_category}): {outcome.error}[/red]")
        if outcome.registered:
            console.print(f"[yellow]Registered before the failure: {', '.join(outcome.registered)}[/yellow]")
        raise typer.Exit(1)

    _print_commands([cmd.to_dict() for cmd in registry.list_all()], "Synced Commands")
    console.print(f"\nETag: [dim]{outcome.etag or '-'}[/dim]")


@app.command()
def dispatch(
    line: str = typer.Argument(..., help="Command line as typed, e.g. 'deploy prod'"),
) -> None:
    """Send one command line to the action server and print the result."""
    from slashbridge.logging_config import setup_logging
    from slashbridge.modules.actions.dispatch import DispatchGateway

    setup_logging("WARNING")
    result = _async_run(DispatchGateway().dispatch(line))
    style = "yellow" if result.is_ephemeral else "green"
    console.print(f"[{style}]{result.response_type or 'in_channel'}[/{style}] {result.text}")


@app.command()
def config() -> None:
    """Show the effective configuration."""
    from slashbridge.config import get_settings

    settings = get_settings()
    table = Table(title="slashbridge configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    for name, value in settings.model_dump().items():
        table.add_row(name, str(value))
    table.add_row("completion_path", settings.completion_path)
    console.print(table)


# ─────────────────────────────────────────────────────────────────────────────
# Commands Commands (browse registered commands)
# ─────────────────────────────────────────────────────────────────────────────

@cmd_app.command("list")
def commands_list(
    url: Optional[str] = typer.Option(None, "--url", "-u", help="Server base URL"),
    search: Optional[str] = typer.Option(None, "--search", "-s", help="Filter by trigger or argument name"),
) -> None:
    """List commands registered on a running server."""
    params = {"search": search} if search else {}
    try:
        response = httpx.get(f"{_base_url(url)}/api/commands", params=params, timeout=10)
        response.raise_for_status()
    except httpx.HTTPError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    commands = response.json()["commands"]
    if not commands:
        console.print("[yellow]No commands registered.[/yellow]")
        return
    _print_commands(commands, "Registered Commands")
    console.print(f"\nTotal: {len(commands)} commands")


@cmd_app.command("show")
def commands_show(
    trigger: str = typer.Argument(..., help="Trigger to show, without the leading slash"),
    url: Optional[str] = typer.Option(None, "--url", "-u", help="Server base URL"),
) -> None:
    """Show one registered command and its argument slots."""
    try:
        response = httpx.get(f"{_base_url(url)}/api/commands/{trigger.lstrip('/')}", timeout=10)
    except httpx.HTTPError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    if response.status_code == 404:
        console.print(f"[red]Command '{trigger}' not registered.[/red]")
        raise typer.Exit(1)

    cmd = response.json()
    console.print(f"\n[bold cyan]/{cmd['trigger']}[/bold cyan]")
    for arg in cmd["autocomplete_data"]["arguments"]:
        console.print(f"  • {arg['name'] or '<empty>'} [dim]({arg['type']} from {arg['fetch_url']})[/dim]")
