"""Rich console formatting helpers for the okfutures CLI."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

from okfutures.models import (
    DepthL2Tbt,
    FuturesAccount,
    FuturesOrder,
    FuturesPosition,
    FuturesTicker,
    FuturesTrade,
)

# Shared theme for consistent styling across all CLI output.
OKFUTURES_THEME = Theme(
    {
        "buy": "bold green",
        "sell": "bold red",
        "ask": "red",
        "bid": "green",
        "removed": "dim strike",
        "header": "bold cyan",
        "muted": "dim",
    }
)

console = Console(theme=OKFUTURES_THEME)


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------

def format_side(side: str | None) -> Text:
    """Return a Rich Text object with the trade side coloured appropriately."""
    if side is None:
        return Text("--", style="dim")
    s = side.lower()
    if s == "buy":
        return Text("BUY", style="buy")
    elif s == "sell":
        return Text("SELL", style="sell")
    return Text(side.upper(), style="dim")


def format_ts(ts: str | None) -> str:
    """Trim an ISO 8601 exchange timestamp to 'YYYY-MM-DD HH:MM:SS.mmm'."""
    if not ts:
        return "--"
    return ts.replace("T", " ").rstrip("Z")[:23]


def format_num(val: str | None) -> str:
    return val if val not in (None, "") else "--"


# ---------------------------------------------------------------------------
# Reusable table builders
# ---------------------------------------------------------------------------

def ticker_table(tickers: list[FuturesTicker]) -> Table:
    table = Table(title="futures/ticker", show_lines=False, pad_edge=True)
    table.add_column("Time", style="muted", width=23)
    table.add_column("Instrument", style="bold")
    table.add_column("Last", justify="right")
    table.add_column("Bid", justify="right", style="bid")
    table.add_column("Ask", justify="right", style="ask")
    table.add_column("Vol 24h", justify="right")
    table.add_column("OI", justify="right")
    for t in tickers:
        table.add_row(
            format_ts(t.timestamp),
            t.instrument_id,
            t.last,
            t.best_bid,
            t.best_ask,
            format_num(t.volume_24h),
            format_num(t.open_interest),
        )
    return table


def trade_table(trades: list[FuturesTrade]) -> Table:
    table = Table(title="futures/trade", show_lines=False, pad_edge=True)
    table.add_column("Time", style="muted", width=23)
    table.add_column("Instrument", style="bold")
    table.add_column("Price", justify="right")
    table.add_column("Qty", justify="right")
    table.add_column("Side", width=6)
    table.add_column("Trade ID", style="dim")
    for t in trades:
        table.add_row(
            format_ts(t.timestamp), t.instrument_id, t.price, t.qty, format_side(t.side), t.trade_id
        )
    return table


def book_table(action: str, book: DepthL2Tbt, depth: int = 10) -> Table:
    """Top levels of a book message; removed levels are struck through."""
    table = Table(
        title=f"futures/depth_l2_tbt {book.instrument_id} [{action}]",
        caption=f"{format_ts(book.timestamp)} checksum={book.checksum}",
        show_lines=False,
        pad_edge=True,
    )
    table.add_column("Bid size", justify="right")
    table.add_column("Bid", justify="right", style="bid")
    table.add_column("Ask", justify="right", style="ask")
    table.add_column("Ask size", justify="right")
    for i in range(min(depth, max(len(book.bids), len(book.asks)))):
        bid = book.bids[i] if i < len(book.bids) else None
        ask = book.asks[i] if i < len(book.asks) else None
        table.add_row(
            _level_cell(bid.size, bid.is_removal) if bid else "",
            _level_cell(bid.price, bid.is_removal) if bid else "",
            _level_cell(ask.price, ask.is_removal) if ask else "",
            _level_cell(ask.size, ask.is_removal) if ask else "",
        )
    return table


def _level_cell(value: str, removed: bool) -> Text:
    return Text(value, style="removed" if removed else "")


def account_table(accounts: list[FuturesAccount]) -> Table:
    table = Table(title="futures/account", show_lines=False, pad_edge=True)
    table.add_column("Currency", style="bold")
    table.add_column("Equity", justify="right")
    table.add_column("Available", justify="right")
    table.add_column("Margin", justify="right")
    table.add_column("Mode")
    table.add_column("Unrealized PnL", justify="right")
    for a in accounts:
        table.add_row(
            a.currency,
            format_num(a.equity),
            format_num(a.available or a.total_avail_balance),
            format_num(a.margin),
            format_num(a.margin_mode),
            format_num(a.unrealized_pnl),
        )
    return table


def position_table(positions: list[FuturesPosition]) -> Table:
    table = Table(title="futures/position", show_lines=False, pad_edge=True)
    table.add_column("Instrument", style="bold")
    table.add_column("Long qty", justify="right", style="buy")
    table.add_column("Long avg", justify="right")
    table.add_column("Short qty", justify="right", style="sell")
    table.add_column("Short avg", justify="right")
    table.add_column("Liq. price", justify="right")
    for p in positions:
        table.add_row(
            p.instrument_id,
            format_num(p.long_qty),
            format_num(p.long_avg_cost),
            format_num(p.short_qty),
            format_num(p.short_avg_cost),
            format_num(p.liquidation_price or p.long_liqui_price),
        )
    return table


def order_table(orders: list[FuturesOrder]) -> Table:
    table = Table(title="futures/order", show_lines=False, pad_edge=True)
    table.add_column("Time", style="muted", width=23)
    table.add_column("Instrument", style="bold")
    table.add_column("Order ID", style="dim")
    table.add_column("Price", justify="right")
    table.add_column("Size", justify="right")
    table.add_column("Filled", justify="right")
    table.add_column("State")
    for o in orders:
        table.add_row(
            format_ts(o.timestamp),
            o.instrument_id,
            o.order_id,
            o.price,
            o.size,
            o.filled_qty,
            o.state_name,
        )
    return table
