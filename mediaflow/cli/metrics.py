"""Printing of command counters."""

import typer

from mediaflow.lib.cor import CounterSnapshot


def print_snapshot(snapshots: list[CounterSnapshot]) -> None:
    """Print one tab-separated line per counter."""
    if not snapshots:
        typer.echo("No counters recorded.")
        return
    for snapshot in snapshots:
        typer.echo(f"{snapshot.command}\t{snapshot.name}\t{snapshot.value}")
