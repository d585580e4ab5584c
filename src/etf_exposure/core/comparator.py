"""Mix-vs-benchmark comparison: overlap, coverage and top per-ticker deltas.

Overlap is measured on the benchmark's visible universe only. Benchmarks
built from a fund's top-N disclosed holdings rarely sum to 100%, so both
sides are renormalized over the benchmark's tickers before intersecting:

    overlap = Σ min(benchmark_norm[t], user_norm[t])   for t in benchmark
"""

import logging
import re
from collections.abc import Iterable, Mapping
from decimal import ROUND_HALF_UP, Decimal

from .models import DeltaRow, MixComparisonResult
from .positions import coerce_weight

logger = logging.getLogger(__name__)

# Shared tickers whose weights differ by less than this are not reported
MIN_DELTA = Decimal("0.5")
TOP_DELTAS = 4

# Canadian ISIN-like identifiers, e.g. CA46434V1234
ISIN_LIKE_PATTERN = re.compile(r"^CA[0-9A-Z]{9,}$")
MAX_DISPLAY_TICKER_LENGTH = 8

_SLICE_EPSILON = Decimal("0.000001")
_CENTS = Decimal("0.01")


def round2(value: Decimal) -> Decimal:
    return value.quantize(_CENTS, rounding=ROUND_HALF_UP)


def is_display_ticker(symbol: str) -> bool:
    """False for identifiers that are not tickers a user would recognise."""
    normalized = symbol.strip().upper()
    if not normalized:
        return False
    if ISIN_LIKE_PATTERN.match(normalized):
        return False
    if len(normalized) > MAX_DISPLAY_TICKER_LENGTH:
        return False
    return True


def normalize_slice(weights: dict[str, Decimal]) -> dict[str, Decimal]:
    """Scale weights to sum to 100. Returned unchanged when the total is ~0."""
    total = sum(weights.values(), Decimal("0"))
    if total <= _SLICE_EPSILON:
        return dict(weights)
    return {symbol: weight / total * 100 for symbol, weight in weights.items()}


def _entry(item) -> tuple:
    if isinstance(item, Mapping):
        ticker = item.get("ticker", item.get("symbol"))
        weight = item.get("weightPct", item.get("weight_pct"))
    elif isinstance(item, tuple):
        if len(item) != 2:
            return None, None
        ticker, weight = item
    else:
        ticker = getattr(item, "ticker", getattr(item, "symbol", None))
        weight = getattr(item, "weight_pct", None)
    return ticker, weight


def _to_weight_map(entries: Iterable) -> dict[str, Decimal]:
    """Upper-case tickers, clamp weights at 0, drop empties, sum duplicates."""
    result: dict[str, Decimal] = {}
    for item in entries or []:
        ticker, weight = _entry(item)
        if not isinstance(ticker, str):
            continue
        ticker = ticker.strip().upper()
        weight = max(Decimal("0"), coerce_weight(weight) or Decimal("0"))
        if not ticker or weight <= 0:
            continue
        result[ticker] = result.get(ticker, Decimal("0")) + weight
    return result


def _top_deltas(diffs: list[DeltaRow]) -> tuple[DeltaRow, ...]:
    ranked = sorted(diffs, key=lambda d: (-abs(d.delta_pct), d.ticker))[:TOP_DELTAS]
    return tuple(
        DeltaRow(
            ticker=d.ticker,
            user_pct=round2(d.user_pct),
            benchmark_pct=round2(d.benchmark_pct),
            delta_pct=round2(d.delta_pct),
        )
        for d in ranked
    )


def compare_mixes(user: Iterable, benchmark: Iterable) -> MixComparisonResult:
    user_map = _to_weight_map(user)
    benchmark_map = _to_weight_map(benchmark)

    shared = [t for t in user_map if t in benchmark_map]
    user_only = [t for t in user_map if t not in benchmark_map]
    benchmark_only = [t for t in benchmark_map if t not in user_map]
    logger.debug(
        "compare_mixes: %d shared, %d user-only, %d benchmark-only tickers",
        len(shared), len(user_only), len(benchmark_only),
    )

    diffs = [
        DeltaRow(
            ticker=t,
            user_pct=user_map[t],
            benchmark_pct=benchmark_map[t],
            delta_pct=user_map[t] - benchmark_map[t],
        )
        for t in shared
    ]
    visible = [
        d for d in diffs
        if abs(d.delta_pct) >= MIN_DELTA and is_display_ticker(d.ticker)
    ]
    overweights = _top_deltas([d for d in visible if d.delta_pct > 0])
    underweights = _top_deltas([d for d in visible if d.delta_pct < 0])

    benchmark_slice_raw = dict(benchmark_map)
    user_slice_raw = {t: user_map.get(t, Decimal("0")) for t in benchmark_slice_raw}
    coverage = sum(benchmark_slice_raw.values(), Decimal("0"))

    benchmark_slice = normalize_slice(benchmark_slice_raw)
    user_slice = normalize_slice(user_slice_raw)
    overlap = sum(
        (min(weight, user_slice.get(t, Decimal("0"))) for t, weight in benchmark_slice.items()),
        Decimal("0"),
    )

    return MixComparisonResult(
        overlap_pct=round2(overlap),
        difference_pct=round2(max(Decimal("0"), 100 - overlap)),
        coverage_pct=round2(coverage),
        visible_count=len(benchmark_slice_raw),
        overweights=overweights,
        underweights=underweights,
    )
