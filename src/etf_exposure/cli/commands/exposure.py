"""Look-through exposure commands."""

from typing import Optional

import typer
from rich.table import Table

from ...core.aggregations import aggregate_by_region, aggregate_by_sector, aggregate_holdings_by_symbol
from ...core.exceptions import EtfExposureError
from ...core.formatting import mix_line_from_positions
from ...core.insights import classify_exposure, compute_country_exposure, top_sectors
from ..common import build_analyzer, console, fail, load_positions, pct, print_json

app = typer.Typer(help="Look-through exposure")

VIEWS = ["holdings", "sector", "region"]


@app.command("show")
def show(
    positions: Optional[list[str]] = typer.Argument(None, help="Positions as SYMBOL:WEIGHT (e.g. VOO:60 QQQ:40)"),
    positions_param: Optional[str] = typer.Option(None, "--positions", "-p", help="Positions as JSON or URL param"),
    by: str = typer.Option("holdings", "--by", "-b", help=f"View: {', '.join(VIEWS)}"),
    limit: int = typer.Option(15, "--limit", "-n", help="Rows to show"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table"),
):
    """Show the weighted underlying exposure of an ETF mix."""
    by = by.lower()
    if by not in VIEWS:
        console.print(f"[red]Invalid view. Choose from: {', '.join(VIEWS)}[/red]")
        raise typer.Exit(1)

    mix = load_positions(positions, positions_param)
    try:
        analyzer = build_analyzer()
        rows = analyzer.exposure_rows(mix)
    except EtfExposureError as e:
        fail(e)

    if by == "holdings":
        slices = aggregate_holdings_by_symbol(rows)[:limit]
        data = [
            {"symbol": s.holding_symbol, "name": s.holding_name, "weightPct": float(s.total_weight_pct)}
            for s in slices
        ]
    else:
        groups = aggregate_by_sector(rows) if by == "sector" else aggregate_by_region(rows)
        data = [{"label": g.label, "weightPct": float(g.weight_pct)} for g in groups[:limit]]

    if as_json:
        print_json({"positions": [p.to_dict() for p in mix], "view": by, "rows": data})
        return

    split = compute_country_exposure(rows)
    console.print(f"[bold]{mix_line_from_positions(mix)}[/bold]")
    console.print(
        f"Profile: [cyan]{classify_exposure(rows)}[/cyan]  "
        f"US {split.us:.1f}% · Canada {split.canada:.1f}% · International {split.international:.1f}%"
    )
    leaders = " · ".join(f"{s.label} {s.weight_pct:.1f}%" for s in top_sectors(rows))
    if leaders:
        console.print(f"Top sectors: {leaders}")
    console.print()

    table = Table(title=f"Exposure by {by}")
    if by == "holdings":
        table.add_column("Symbol", style="bold")
        table.add_column("Name")
        table.add_column("Weight", justify="right")
        for row in data:
            table.add_row(row["symbol"], row["name"], pct(row["weightPct"]))
    else:
        table.add_column(by.capitalize(), style="bold")
        table.add_column("Weight", justify="right")
        for row in data:
            table.add_row(row["label"], pct(row["weightPct"]))

    console.print(table)
