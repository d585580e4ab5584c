"""Over/underweight tilts per group (sector, region or stock) against a benchmark."""

from collections.abc import Iterable, Mapping
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from .models import (
    BenchmarkExposureRow,
    BenchmarkRow,
    GroupExposure,
    GroupSlice,
    HoldingSlice,
    TiltRow,
    TiltSummary,
)
from .positions import coerce_weight

DEFAULT_TILT_LIMIT = 5
OTHER_LABEL = "Other"


def _bucket_key(label: Optional[str]) -> str:
    return ((label or "").strip() or OTHER_LABEL).lower()


def _display_label(label: Optional[str]) -> str:
    return (label or "").strip() or OTHER_LABEL


def format_delta(value: Decimal) -> str:
    """Signed one-decimal percentage: +3.2% / -1.0%."""
    if value.is_nan():
        return "0.0%"
    rounded = value.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    text = format(rounded, "f")
    return f"+{text}%" if value >= 0 else f"{text}%"


def _user_row(row) -> GroupExposure:
    if isinstance(row, Mapping):
        label = row.get("label")
        weight = row.get("weightPct", row.get("weight_pct"))
    else:
        label = getattr(row, "label", None)
        weight = getattr(row, "weight_pct", None)
    return GroupExposure(label=label, weight_pct=coerce_weight(weight) or Decimal("0"))


def _benchmark_row(row) -> BenchmarkExposureRow:
    if isinstance(row, Mapping):
        row = BenchmarkExposureRow.from_api(row)
    return BenchmarkExposureRow(
        group_key=getattr(row, "group_key", None),
        weight_pct=coerce_weight(getattr(row, "weight_pct", None)) or Decimal("0"),
    )


def _merge(user_exposure: Iterable, benchmark_exposure: Iterable) -> list[list]:
    """[display label, user weight, benchmark weight] per case-insensitive label, first-seen order."""
    buckets: dict[str, list] = {}

    def bucket(label):
        key = _bucket_key(label)
        if key not in buckets:
            buckets[key] = [_display_label(label), Decimal("0"), Decimal("0")]
        return buckets[key]

    for raw in user_exposure or []:
        row = _user_row(raw)
        bucket(row.label)[1] = row.weight_pct

    for raw in benchmark_exposure or []:
        row = _benchmark_row(raw)
        bucket(row.group_key)[2] = row.weight_pct

    return list(buckets.values())


def calculate_tilts(
    user_exposure: Iterable,
    benchmark_exposure: Iterable,
    limit: int = DEFAULT_TILT_LIMIT,
) -> TiltSummary:
    """Rank groups by user weight minus benchmark weight.

    No renormalization happens here: both sides must already be on a
    comparable basis (e.g. both summing to ~100).
    """
    entries = [(label, user - bench) for label, user, bench in _merge(user_exposure, benchmark_exposure)]

    overweights = sorted((e for e in entries if e[1] > 0), key=lambda e: -e[1])[:limit]
    underweights = sorted((e for e in entries if e[1] < 0), key=lambda e: e[1])[:limit]

    return TiltSummary(
        overweights=tuple(TiltRow(label, delta, format_delta(delta)) for label, delta in overweights),
        underweights=tuple(TiltRow(label, delta, format_delta(delta)) for label, delta in underweights),
    )


def build_benchmark_rows(raw: Iterable[Mapping]) -> list[BenchmarkRow]:
    rows = []
    for item in raw:
        yours = coerce_weight(item.get("yourWeightPct")) or Decimal("0")
        bench = coerce_weight(item.get("benchmarkWeightPct")) or Decimal("0")
        rows.append(
            BenchmarkRow(
                label=item.get("label", ""),
                your_weight_pct=yours,
                benchmark_weight_pct=bench,
                diff_pct=yours - bench,
                symbol=item.get("symbol"),
            )
        )
    return rows


def side_by_side_rows(
    user_exposure: Iterable,
    benchmark_exposure: Iterable,
    with_symbol: bool = False,
) -> list[BenchmarkRow]:
    """Your weight next to the benchmark weight per group, heaviest benchmark group first."""
    merged = sorted(_merge(user_exposure, benchmark_exposure), key=lambda b: (-b[2], -b[1], b[0]))
    return build_benchmark_rows(
        {
            "label": label,
            "symbol": label if with_symbol else None,
            "yourWeightPct": user,
            "benchmarkWeightPct": bench,
        }
        for label, user, bench in merged
    )


def user_group_exposure(slices: Iterable[GroupSlice]) -> list[GroupExposure]:
    return [GroupExposure(label=s.label, weight_pct=s.weight_pct) for s in slices]


def holding_group_exposure(holdings: Iterable[HoldingSlice]) -> list[GroupExposure]:
    return [GroupExposure(label=h.holding_symbol, weight_pct=h.total_weight_pct) for h in holdings]
