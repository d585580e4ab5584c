"""Mix-vs-benchmark comparison commands."""

from typing import Optional

import typer
from rich.table import Table

from ...core.benchmarks import benchmark_label
from ...core.config import get_config
from ...core.exceptions import EtfExposureError
from ...core.formatting import mix_line_from_positions
from ...core.models import GroupBy
from ..common import build_analyzer, console, fail, load_positions, pct, print_json

app = typer.Typer(help="Compare a mix with a benchmark")

DIMENSIONS = [g.value for g in GroupBy]
DETAIL_ROWS = 10


@app.command("run")
def run(
    positions: Optional[list[str]] = typer.Argument(None, help="Positions as SYMBOL:WEIGHT (e.g. VOO:60 QQQ:40)"),
    positions_param: Optional[str] = typer.Option(None, "--positions", "-p", help="Positions as JSON or URL param"),
    benchmark: Optional[str] = typer.Option(None, "--benchmark", "-b", help="Benchmark id or symbol (default: auto)"),
    against: Optional[list[str]] = typer.Option(
        None, "--against", "-a", help="Compare with another mix instead of a preset (repeat: -a VT:70 -a VXUS:30)"
    ),
    by: Optional[list[str]] = typer.Option(None, "--by", help=f"Tilt dimensions: {', '.join(DIMENSIONS)}"),
    limit: int = typer.Option(5, "--limit", "-n", help="Tilts per side"),
    detail: bool = typer.Option(False, "--detail", "-d", help="Show side-by-side weights per dimension"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of tables"),
):
    """Overlap and tilts of a mix against a benchmark."""
    dimensions = [d.lower() for d in (by or DIMENSIONS)]
    invalid = [d for d in dimensions if d not in DIMENSIONS]
    if invalid:
        console.print(f"[red]Invalid dimension {', '.join(invalid)}. Choose from: {', '.join(DIMENSIONS)}[/red]")
        raise typer.Exit(1)
    if GroupBy.STOCK.value not in dimensions:
        # overlap is computed from stock-level benchmark exposure
        dimensions.insert(0, GroupBy.STOCK.value)

    if against and benchmark:
        console.print("[red]Use either --benchmark or --against, not both[/red]")
        raise typer.Exit(1)

    mix = load_positions(positions, positions_param)
    groups = [GroupBy(d) for d in dimensions]
    try:
        analyzer = build_analyzer()
        if against:
            report = analyzer.compare_with_mix(mix, load_positions(against, None), dimensions=groups, limit=limit)
        else:
            report = analyzer.analyze(
                mix,
                benchmark=benchmark or get_config().default_benchmark or None,
                dimensions=groups,
                limit=limit,
            )
    except EtfExposureError as e:
        fail(e)

    if as_json:
        print_json(report.to_dict())
        return

    cmp = report.comparison
    console.print(f"[bold]{mix_line_from_positions(report.positions)}[/bold]")
    console.print(f"Benchmark: [bold]{benchmark_label(report.benchmark)}[/bold] ({report.benchmark_symbol})\n")
    console.print(f"  Overlap:    [green]{pct(cmp.overlap_pct)}[/green]")
    console.print(f"  Difference: [yellow]{pct(cmp.difference_pct)}[/yellow]")
    console.print(
        f"  [dim]Based on {cmp.visible_count} visible benchmark holdings "
        f"covering {pct(cmp.coverage_pct)} of the benchmark[/dim]\n"
    )

    if cmp.overweights or cmp.underweights:
        table = Table(title="Biggest differences")
        table.add_column("Ticker", style="bold")
        table.add_column("You", justify="right")
        table.add_column("Benchmark", justify="right")
        table.add_column("Delta", justify="right")
        for row in cmp.overweights + cmp.underweights:
            color = "green" if row.delta_pct > 0 else "red"
            table.add_row(
                row.ticker,
                pct(row.user_pct),
                pct(row.benchmark_pct),
                f"[{color}]{row.delta_pct:+.2f}%[/{color}]",
            )
        console.print(table)

    for dimension, summary in report.tilts.items():
        if not summary.overweights and not summary.underweights:
            continue
        table = Table(title=f"Tilts by {dimension}")
        table.add_column("Overweight", style="green")
        table.add_column("", justify="right")
        table.add_column("Underweight", style="red")
        table.add_column("", justify="right")
        depth = max(len(summary.overweights), len(summary.underweights))
        for i in range(depth):
            over = summary.overweights[i] if i < len(summary.overweights) else None
            under = summary.underweights[i] if i < len(summary.underweights) else None
            table.add_row(
                over.label if over else "",
                over.delta_formatted if over else "",
                under.label if under else "",
                under.delta_formatted if under else "",
            )
        console.print(table)

    if detail:
        for dimension, rows in report.side_by_side.items():
            if not rows:
                continue
            table = Table(title=f"Side by side by {dimension}")
            table.add_column(dimension.capitalize(), style="bold")
            table.add_column("You", justify="right")
            table.add_column("Benchmark", justify="right")
            table.add_column("Diff", justify="right")
            for row in rows[:DETAIL_ROWS]:
                color = "green" if row.diff_pct > 0 else "red" if row.diff_pct < 0 else "dim"
                table.add_row(
                    row.label,
                    f"{row.your_weight_pct:.1f}%",
                    f"{row.benchmark_weight_pct:.1f}%",
                    f"[{color}]{row.diff_pct:+.1f}%[/{color}]",
                )
            console.print(table)
