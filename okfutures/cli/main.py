"""okfutures CLI entry point.

Usage:
    python -m okfutures.cli.main [COMMAND] [OPTIONS]

Or via the installed console script:
    okfutures [COMMAND] [OPTIONS]
"""

from __future__ import annotations

import typer

from okfutures.cli.commands import stream

app = typer.Typer(
    name="okfutures",
    help="okfutures -- OKEx v3 futures WebSocket client",
    no_args_is_help=True,
    add_completion=False,
    pretty_exceptions_enable=True,
)

# Register sub-commands from each module.
app.command(name="stream", help="Stream decoded futures tables for a symbol")(stream.stream)
app.command(name="tables", help="List streamable tables")(stream.tables)


if __name__ == "__main__":
    app()
