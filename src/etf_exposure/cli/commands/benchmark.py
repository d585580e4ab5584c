"""Benchmark preset commands."""

from typing import Optional

import typer
from rich.table import Table

from ...core.benchmarks import BENCHMARK_MIXES, benchmark_label, benchmark_symbol, resolve_benchmark_for_mix
from ..common import console, load_positions

app = typer.Typer(help="Benchmark presets")


@app.command("list")
def list_benchmarks():
    """List available benchmark presets."""
    table = Table(title="Benchmarks")
    table.add_column("ID", style="bold")
    table.add_column("Symbol")
    table.add_column("Label")
    table.add_column("Description", style="dim")
    for mix in BENCHMARK_MIXES:
        table.add_row(mix.id, benchmark_symbol(mix), benchmark_label(mix), mix.description)
    console.print(table)


@app.command("pick")
def pick(
    positions: Optional[list[str]] = typer.Argument(None, help="Positions as SYMBOL:WEIGHT"),
    positions_param: Optional[str] = typer.Option(None, "--positions", "-p", help="Positions as JSON or URL param"),
):
    """Show which benchmark a mix is compared against by default."""
    mix = load_positions(positions, positions_param)
    chosen, symbol = resolve_benchmark_for_mix(mix)
    console.print(f"Default benchmark: [bold]{benchmark_label(chosen)}[/bold] ({symbol})")
