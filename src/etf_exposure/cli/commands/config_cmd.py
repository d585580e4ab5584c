"""Configuration commands."""

import typer
from rich.table import Table

from ...core.config import config_keys, get_config, update_config
from ..common import console

app = typer.Typer(help="Configuration")


@app.command("show")
def show():
    """Show current configuration (anon key masked)."""
    cfg = get_config()
    table = Table(title="Configuration")
    table.add_column("Key", style="bold")
    table.add_column("Value")
    for key in config_keys():
        value = getattr(cfg, key)
        if key == "supabase_anon_key" and value:
            value = value[:4] + "…"
        table.add_row(key, str(value))
    console.print(table)


@app.command("set")
def set_value(
    key: str = typer.Argument(..., help="Config key"),
    value: str = typer.Argument(..., help="New value"),
):
    """Set a configuration value in config.json."""
    try:
        update_config(key, value)
    except KeyError:
        console.print(f"[red]Unknown key '{key}'. Choose from: {', '.join(config_keys())}[/red]")
        raise typer.Exit(1)
    except ValueError:
        console.print(f"[red]Invalid value for {key}: {value}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]{key} updated[/green]")
