"""Helpers shared by CLI commands."""

import json
from typing import Optional

import typer
from rich.console import Console

from ..core.analyzer import MixAnalyzer
from ..core.config import get_config
from ..core.exceptions import EtfExposureError
from ..core.models import Position
from ..core.positions import parse_position_tokens, parse_positions_param
from ..external.holdings_client import HoldingsClient

console = Console()


def load_positions(tokens: Optional[list[str]], positions_param: Optional[str]) -> list[Position]:
    """Positions from `SYMBOL:WEIGHT` tokens, or a --positions JSON/URL param."""
    if positions_param:
        value = positions_param
        if value.startswith("positions="):
            value = value[len("positions="):]
        return parse_positions_param(value)
    return parse_position_tokens(tokens or [])


def build_analyzer() -> MixAnalyzer:
    cfg = get_config()
    return MixAnalyzer(HoldingsClient.from_config(cfg), max_positions=cfg.max_positions)


def fail(err: EtfExposureError) -> None:
    console.print(f"[red]{err}[/red]")
    raise typer.Exit(1)


def print_json(data: dict) -> None:
    console.print_json(json.dumps(data))


def pct(value) -> str:
    return f"{value:.2f}%"
