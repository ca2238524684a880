"""okfutures stream <symbol> -- Stream decoded futures tables in real time.

Subscribes to the requested tables for one instrument (or underlying, for
the account table) and pretty-prints every decoded message.

Tables:
    ticker, trade, depth, position, account, order
"""

from __future__ import annotations

import asyncio

import typer
from rich.table import Table

from okfutures.cli.display import (
    account_table,
    book_table,
    console,
    order_table,
    position_table,
    ticker_table,
    trade_table,
)
from okfutures.ingestion.codec import (
    TABLE_FUTURES_ACCOUNT,
    TABLE_FUTURES_DEPTH_L2_TBT,
    TABLE_FUTURES_ORDER,
    TABLE_FUTURES_POSITION,
    TABLE_FUTURES_TICKER,
    TABLE_FUTURES_TRADE,
)

# Map of short table names to wire table names.
TABLE_MAP: dict[str, str] = {
    "ticker": TABLE_FUTURES_TICKER,
    "trade": TABLE_FUTURES_TRADE,
    "depth": TABLE_FUTURES_DEPTH_L2_TBT,
    "position": TABLE_FUTURES_POSITION,
    "account": TABLE_FUTURES_ACCOUNT,
    "order": TABLE_FUTURES_ORDER,
}

PRIVATE_TABLES = {"position", "account", "order"}


def list_tables() -> None:
    """Print available table names."""
    table = Table(title="Available Tables", show_lines=False, pad_edge=True)
    table.add_column("Name", style="bold")
    table.add_column("Wire table", style="dim")
    table.add_column("Login", style="dim")
    for name, wire in TABLE_MAP.items():
        table.add_row(name, wire, "yes" if name in PRIVATE_TABLES else "no")
    console.print(table)


# ---------------------------------------------------------------------------
# Core stream logic
# ---------------------------------------------------------------------------

async def _stream(symbol: str, tables: list[str], depth: int, proxy: str | None) -> None:
    from okfutures.config import get_config
    from okfutures.ingestion.ws_client import FuturesWSManager
    from okfutures.logging_config import configure_logging

    config = get_config()
    configure_logging(config.logging)

    manager = FuturesWSManager.from_config(config)
    if proxy:
        manager.set_proxy(proxy)

    if PRIVATE_TABLES.intersection(tables) and not config.okex.has_credentials:
        console.print(
            "[yellow]No OKEX_ACCESS_KEY / OKEX_SECRET_KEY / OKEX_PASSPHRASE set; "
            "private tables will stay silent.[/yellow]"
        )

    manager.set_ticker_callback(lambda tickers: console.print(ticker_table(tickers)))
    manager.set_trade_callback(lambda trades: console.print(trade_table(trades)))
    manager.set_account_callback(lambda accounts: console.print(account_table(accounts)))
    manager.set_position_callback(lambda positions: console.print(position_table(positions)))
    manager.set_order_callback(lambda orders: console.print(order_table(orders)))

    def on_book(action: str, books: list) -> None:
        for book in books:
            console.print(book_table(action, book, depth))

    manager.set_depth_l2_tbt_callback(on_book)

    subscribe = {
        "ticker": manager.subscribe_ticker,
        "trade": manager.subscribe_trade,
        "depth": manager.subscribe_depth_l2_tbt,
        "position": manager.subscribe_position,
        "account": manager.subscribe_account,
        "order": manager.subscribe_order,
    }
    for name in tables:
        await subscribe[name](f"{name}:{symbol}", symbol)

    console.print(f"[bold cyan]Streaming[/bold cyan] {', '.join(tables)} for {symbol} (Ctrl+C to stop)")
    async with manager:
        reader = await manager.start()
        await reader


# ---------------------------------------------------------------------------
# Main commands
# ---------------------------------------------------------------------------

def stream(
    symbol: str = typer.Argument(..., help="Instrument id, e.g. BTC-USD-200626 (underlying for account)"),
    table: list[str] = typer.Option(
        ["ticker"], "--table", "-t", help="Table to subscribe to; repeat for several"
    ),
    depth: int = typer.Option(10, "--depth", "-d", help="Book levels to print per side"),
    proxy: str | None = typer.Option(None, "--proxy", help="socks5:// or http(s):// proxy URL"),
) -> None:
    """Subscribe to futures tables for a symbol and print decoded messages."""
    unknown = [t for t in table if t not in TABLE_MAP]
    if unknown:
        console.print(f"[red]Unknown table:[/red] {', '.join(unknown)}")
        console.print()
        list_tables()
        raise typer.Exit(code=1)

    try:
        asyncio.run(_stream(symbol, table, depth, proxy))
    except KeyboardInterrupt:
        console.print("\n[dim]Stream stopped.[/dim]")


def tables() -> None:
    """List the tables that can be streamed."""
    list_tables()
