"""Benchmark presets and default-benchmark selection.

The selection is a heuristic, first match wins:
  1. empty or unusable input      → first preset
  2. an all-in-one portfolio ETF  → its own preset (first hit in mix order)
  3. ≥ 50% US large-cap weight    → S&P 500
  4. ≥ 40% global weight          → global stocks
  5. otherwise                    → Nasdaq-100
"""

from collections.abc import Iterable
from decimal import Decimal
from typing import Optional

from .models import BenchmarkMix, Position
from .positions import coerce_weight

BENCHMARK_MIXES: tuple[BenchmarkMix, ...] = (
    BenchmarkMix(
        id="qqq",
        label="Nasdaq-100 (QQQ)",
        description="Megacap U.S. tech/growth heavy index.",
        positions=(Position("QQQ", Decimal("100")),),
    ),
    BenchmarkMix(
        id="voo",
        label="S&P 500 (VOO)",
        description="Broad U.S. large cap exposure.",
        positions=(Position("VOO", Decimal("100")),),
    ),
    BenchmarkMix(
        id="vt",
        label="Global Stocks (VT)",
        description="Global equity exposure (world index).",
        positions=(Position("VT", Decimal("100")),),
    ),
    BenchmarkMix(
        id="veqt",
        label="All-equity portfolio (VEQT.TO)",
        description="Vanguard all-equity portfolio ETF.",
        positions=(Position("VEQT.TO", Decimal("100")),),
    ),
    BenchmarkMix(
        id="vgro",
        label="Growth portfolio (VGRO.TO)",
        description="Vanguard 80/20 growth portfolio.",
        positions=(Position("VGRO.TO", Decimal("100")),),
    ),
    BenchmarkMix(
        id="xeqt",
        label="All-equity portfolio (XEQT.TO)",
        description="iShares all-equity portfolio ETF.",
        positions=(Position("XEQT.TO", Decimal("100")),),
    ),
)

US_LARGE_CAP_SYMBOLS = frozenset({"VOO", "SPY", "IVV", "SCHX", "SCHB", "VTI", "ITOT"})
GLOBAL_ETF_SYMBOLS = frozenset({"VT", "VXUS", "XAW", "XTOT", "XEQT.TO", "VEQT.TO"})

# All-in-one portfolio ETFs that are benchmarks in their own right.
# Insertion order matters only for documentation; lookup follows mix order.
ALL_IN_ONE_BENCHMARKS = {
    "VEQT.TO": "veqt",
    "VGRO.TO": "vgro",
    "XEQT.TO": "xeqt",
}

US_LARGE_CAP_SHARE = Decimal("0.5")
GLOBAL_SHARE = Decimal("0.4")


def find_benchmark_by_id(benchmark_id: str) -> BenchmarkMix:
    """Preset with this id, or the first preset when unknown."""
    for mix in BENCHMARK_MIXES:
        if mix.id == benchmark_id:
            return mix
    return BENCHMARK_MIXES[0]


def find_benchmark_by_symbol(symbol: str) -> Optional[BenchmarkMix]:
    normalized = symbol.strip().upper()
    for mix in BENCHMARK_MIXES:
        if benchmark_symbol(mix) == normalized or mix.id.upper() == normalized:
            return mix
    return None


def benchmark_symbol(mix: BenchmarkMix) -> str:
    if not mix.positions:
        return ""
    return mix.positions[0].symbol.strip().upper()


def benchmark_label(mix: BenchmarkMix) -> str:
    return mix.label or benchmark_symbol(mix) or mix.id


def _usable(item) -> Optional[Position]:
    """Symbol and finite weight, weight clamped at 0 (looser than normalize_positions)."""
    symbol = getattr(item, "symbol", None)
    weight = getattr(item, "weight_pct", None)
    if isinstance(item, dict):
        symbol = item.get("symbol")
        weight = item.get("weightPct", item.get("weight_pct"))
    if not isinstance(symbol, str) or not symbol.strip():
        return None
    weight = coerce_weight(weight)
    if weight is None:
        return None
    return Position(symbol=symbol.strip().upper(), weight_pct=max(Decimal("0"), weight))


def pick_default_benchmark(positions: Iterable) -> BenchmarkMix:
    normalized = [p for p in (_usable(item) for item in positions or []) if p is not None]
    if not normalized:
        return BENCHMARK_MIXES[0]

    for pos in normalized:
        if pos.symbol in ALL_IN_ONE_BENCHMARKS:
            return find_benchmark_by_id(ALL_IN_ONE_BENCHMARKS[pos.symbol])

    total = sum((p.weight_pct for p in normalized), Decimal("0"))
    if total > 0:
        us_weight = sum(
            (p.weight_pct for p in normalized if p.symbol in US_LARGE_CAP_SYMBOLS), Decimal("0")
        )
        if us_weight / total >= US_LARGE_CAP_SHARE:
            return find_benchmark_by_id("voo")

        global_weight = sum(
            (p.weight_pct for p in normalized if p.symbol in GLOBAL_ETF_SYMBOLS), Decimal("0")
        )
        if global_weight / total >= GLOBAL_SHARE:
            return find_benchmark_by_id("vt")

    return find_benchmark_by_id("qqq")


def get_fallback_benchmark(single_symbol: str) -> str:
    """Alternate benchmark symbol for a one-ETF mix that equals its own benchmark."""
    normalized = single_symbol.strip().upper()
    if normalized in US_LARGE_CAP_SYMBOLS:
        return "VT"
    return "VOO"


def resolve_benchmark_for_mix(positions: list[Position]) -> tuple[BenchmarkMix, str]:
    """Default benchmark and the symbol to fetch for it.

    Comparing a fund to itself is meaningless, so a single-ETF mix whose
    symbol is the chosen benchmark gets the fallback instead.
    """
    mix = pick_default_benchmark(positions)
    symbol = benchmark_symbol(mix)
    if len(positions) == 1 and positions[0].symbol.strip().upper() == symbol:
        symbol = get_fallback_benchmark(symbol)
        mix = find_benchmark_by_symbol(symbol) or mix
    return mix, symbol
