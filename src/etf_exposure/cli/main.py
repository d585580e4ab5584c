"""Entry point for the etfx command."""

import logging

import typer

from ..core.config import get_config
from .commands import benchmark, compare, config_cmd, exposure

app = typer.Typer(
    name="etfx",
    help="Look-through exposure of ETF mixes and comparison against benchmarks",
    rich_markup_mode="rich",
    no_args_is_help=True,
)

app.add_typer(exposure.app, name="exposure", help="Look-through exposure")
app.add_typer(benchmark.app, name="benchmark", help="Benchmark presets")
app.add_typer(compare.app, name="compare", help="Overlap and tilts against a benchmark")
app.add_typer(config_cmd.app, name="config", help="Configuration")


@app.callback()
def startup(verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging")):
    """Configure logging."""
    level = logging.DEBUG if verbose else getattr(logging, get_config().log_level.upper(), logging.WARNING)
    logging.basicConfig(level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")


if __name__ == "__main__":
    app()
