"""Typer-based CLI for managing connections and inspecting balances."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

if TYPE_CHECKING:
    from .balances import BalanceEntry
    from .di import AppContainer


# Import with local function to avoid circular imports
def _load_settings(config_path: Optional[Path] = None):
    from .config import load_settings
    return load_settings(config_path)

def _build_container(settings):
    from .di import build_container
    return build_container(settings)

def _configure_logging(log_dir: Path | None = None):
    from .logging import configure_logging
    return configure_logging(log_dir)

app = typer.Typer(help="Exchange connections and balance dashboard CLI")
console = Console()
logger = logging.getLogger(__name__)


def run_cli(argv: list[str] | None = None) -> None:
    """Run CLI with optional argv parameter."""
    app(argv)


def init_components(config_path: Optional[Path] = None) -> "AppContainer":
    """Load settings and wire the container."""
    settings = _load_settings(config_path)
    _configure_logging(Path("logs"))
    return _build_container(settings)


@app.command()
def connections_add(
    user: str = typer.Option(..., help="Owning user id"),
    name: str = typer.Option(..., help="Display name"),
    exchange: str = typer.Option(..., help="Exchange id (e.g. binance, hyperliquid)"),
    key: str = typer.Option(..., help="API key, or wallet address for wallet venues"),
    secret: Optional[str] = typer.Option(None, help="API secret"),
    wallet_address: Optional[str] = typer.Option(None, help="API wallet address"),
    private_key: Optional[str] = typer.Option(None, help="API wallet private key"),
    config: Optional[Path] = typer.Option(None, help="Path to config file"),
) -> None:
    """Store a new exchange connection."""
    try:
        container = init_components(config)
        connection = container.connections.add(
            user,
            name,
            exchange,
            key,
            secret=secret,
            api_wallet_address=wallet_address,
            api_private_key=private_key,
        )
        console.print(Panel.fit(
            f"[green]✓ Connection created[/green]\n"
            f"ID: {connection.id}\n"
            f"Name: {connection.name}\n"
            f"Exchange: {connection.exchange}",
            title="Connection"
        ))
    except Exception as e:
        logger.error("Failed to add connection: %s", e, exc_info=True)
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


@app.command()
def connections_list(
    user: str = typer.Option(..., help="Owning user id"),
    config: Optional[Path] = typer.Option(None, help="Path to config file"),
) -> None:
    """List a user's connections."""
    try:
        container = init_components(config)
        connections = container.connections.list_for_user(user)

        if not connections:
            console.print("[yellow]No connections found[/yellow]")
            return

        table = Table(title="Connections")
        table.add_column("ID", style="cyan")
        table.add_column("Name", style="green")
        table.add_column("Exchange", style="blue")
        table.add_column("Created", style="dim")

        for connection in connections:
            table.add_row(
                connection.id,
                connection.name,
                connection.exchange,
                connection.created_at.strftime("%Y-%m-%d %H:%M:%S"),
            )

        console.print(table)

    except Exception as e:
        logger.error("Failed to list connections: %s", e, exc_info=True)
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


@app.command()
def connections_remove(
    connection_id: str = typer.Argument(..., help="Connection ID to delete"),
    user: str = typer.Option(..., help="Owning user id"),
    config: Optional[Path] = typer.Option(None, help="Path to config file"),
) -> None:
    """Delete a connection."""
    try:
        container = init_components(config)
        deleted = container.connections.delete(connection_id, user)
    except Exception as e:
        logger.error("Failed to remove connection: %s", e, exc_info=True)
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if not deleted:
        console.print(f"[red]Error:[/red] Connection {connection_id} not found")
        raise typer.Exit(1)
    console.print(f"[green]✓ Connection {connection_id} deleted[/green]")


@app.command()
def exchanges_list() -> None:
    """List exchange ids that connections can use."""
    from .exchanges import supported_exchanges

    exchanges = supported_exchanges()
    console.print(", ".join(exchanges))
    console.print(f"\n[bold]Total:[/bold] {len(exchanges)}")


@app.command()
def bots_add(
    user: str = typer.Option(..., help="Owning user id"),
    name: str = typer.Option(..., help="Display name"),
    bot_type: str = typer.Option(..., "--type", help="Bot type (e.g. grid, auto-invest)"),
    config: Optional[Path] = typer.Option(None, help="Path to config file"),
) -> None:
    """Create a bot in the stopped state."""
    try:
        container = init_components(config)
        bot = container.bots.add(user, name, bot_type)
    except Exception as e:
        logger.error("Failed to add bot: %s", e, exc_info=True)
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    console.print(f"[green]✓ Bot {bot.id} created[/green] ({bot.type}, {bot.status.value})")


@app.command()
def bots_list(
    user: str = typer.Option(..., help="Owning user id"),
    config: Optional[Path] = typer.Option(None, help="Path to config file"),
) -> None:
    """List a user's bots, newest first."""
    try:
        container = init_components(config)
        bots = container.bots.list_for_user(user)
    except Exception as e:
        logger.error("Failed to list bots: %s", e, exc_info=True)
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if not bots:
        console.print("[yellow]No bots found[/yellow]")
        return

    table = Table(title="Bots")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Type", style="blue")
    table.add_column("Status")

    for bot in bots:
        color = "green" if bot.status.value == "running" else "dim"
        table.add_row(bot.id, bot.name, bot.type, f"[{color}]{bot.status.value}[/{color}]")

    console.print(table)


def _change_bot_status(bot_id: str, user: str, config: Optional[Path], start: bool) -> None:
    from .errors import BotStateError

    try:
        container = init_components(config)
        action = container.bots.start if start else container.bots.stop
        bot = action(bot_id, user)
    except BotStateError as e:
        console.print(f"[red]{e.code.value}:[/red] {e}")
        raise typer.Exit(1)
    except Exception as e:
        logger.error("Failed to change bot status: %s", e, exc_info=True)
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if bot is None:
        console.print(f"[red]Error:[/red] Bot {bot_id} not found")
        raise typer.Exit(1)
    console.print(f"[green]✓ Bot {bot.id} is {bot.status.value}[/green]")


@app.command()
def bots_start(
    bot_id: str = typer.Argument(..., help="Bot ID"),
    user: str = typer.Option(..., help="Owning user id"),
    config: Optional[Path] = typer.Option(None, help="Path to config file"),
) -> None:
    """Start a stopped bot."""
    _change_bot_status(bot_id, user, config, start=True)


@app.command()
def bots_stop(
    bot_id: str = typer.Argument(..., help="Bot ID"),
    user: str = typer.Option(..., help="Owning user id"),
    config: Optional[Path] = typer.Option(None, help="Path to config file"),
) -> None:
    """Stop a running bot."""
    _change_bot_status(bot_id, user, config, start=False)


@app.command()
def balances_show(
    connection_id: str = typer.Argument(..., help="Connection ID"),
    user: str = typer.Option(..., help="Owning user id"),
    format_type: str = typer.Option("table", help="Output format (table/json)"),
    nonzero: bool = typer.Option(False, help="Hide assets with a zero balance"),
    price_url: Optional[str] = typer.Option(None, help="Origin of the price endpoint"),
    config: Optional[Path] = typer.Option(None, help="Path to config file"),
) -> None:
    """Fetch and display the balances of a connection."""
    try:
        container = init_components(config)
    except Exception as e:
        logger.error("Failed to initialize: %s", e, exc_info=True)
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    entries = asyncio.run(_fetch_balances_async(container, connection_id, user, price_url))
    if entries is None:
        raise typer.Exit(1)

    if nonzero:
        entries = [e for e in entries if e.total]

    if format_type == "json":
        console.print_json(json.dumps([e.to_dict() for e in entries]))
        return

    _print_balances(entries)


async def _fetch_balances_async(
    container: "AppContainer",
    connection_id: str,
    user: str,
    price_url: Optional[str],
) -> list["BalanceEntry"] | None:
    """Async implementation of balance fetching."""
    from .errors import classify_exchange_error

    try:
        connection = container.connections.get(connection_id, user)
        if connection is None:
            console.print(f"[red]Error:[/red] Connection {connection_id} not found")
            return None

        client = await container.client_cache.get(connection)
        return await container.balance_service.fetch_balances(
            client, connection, price_base_url=price_url
        )
    except Exception as e:
        classified = classify_exchange_error(e)
        logger.error("Failed to fetch balances: %s", e, exc_info=True)
        console.print(f"[red]{classified.code.value}:[/red] {classified.message}")
        return None
    finally:
        await container.close()


def _print_balances(entries: list["BalanceEntry"]) -> None:
    table = Table(title="Balances")
    table.add_column("Asset", style="cyan")
    table.add_column("Total", style="green", justify="right")
    table.add_column("Free", style="blue", justify="right")
    table.add_column("Used", style="yellow", justify="right")
    table.add_column("USD", style="magenta", justify="right")

    for entry in entries:
        usd_str = f"{entry.usd_value:,.2f}" if entry.usd_value is not None else "N/A"
        table.add_row(
            entry.asset,
            f"{entry.total:.8f}",
            f"{entry.free:.8f}",
            f"{entry.used:.8f}",
            usd_str,
        )

    console.print(table)

    total_usd = sum(e.usd_value for e in entries if e.usd_value is not None)
    console.print(f"\n[bold]Summary:[/bold] {len(entries)} assets, Total USD: {total_usd:,.2f}")


def main():
    """CLI main entry point."""
    app()


if __name__ == "__main__":
    main()
