"""Collapse per-ETF exposure rows into per-holding, sector and region totals."""

from collections.abc import Iterable
from decimal import Decimal
from typing import Optional

from .models import ExposureRow, GroupSlice, HoldingSlice

# Groups at or below this summed weight are rounding noise
MIN_GROUP_WEIGHT = Decimal("0.1")
OTHER_LABEL = "Other"


def as_exposure_row(row) -> ExposureRow:
    return row if isinstance(row, ExposureRow) else ExposureRow.from_api(row)


def _share(weight: Decimal, total: Decimal) -> Decimal:
    if total <= 0:
        return Decimal("0")
    return weight / total * 100


def aggregate_holdings_by_symbol(rows: Iterable) -> list[HoldingSlice]:
    """Sum weights per holding symbol.

    The same holding appears once per ETF that contains it. Descriptive
    fields (name, sector, ...) come from the first row seen for a symbol.
    Rows without a symbol are dropped.
    """
    first_seen: dict[str, ExposureRow] = {}
    totals: dict[str, Decimal] = {}

    for raw in rows or []:
        row = as_exposure_row(raw)
        symbol = row.holding_symbol.strip().upper()
        if not symbol:
            continue
        if symbol not in first_seen:
            first_seen[symbol] = row
            totals[symbol] = Decimal("0")
        totals[symbol] += row.total_weight_pct

    grand_total = sum(totals.values(), Decimal("0"))
    slices = [
        HoldingSlice(
            holding_symbol=symbol,
            holding_name=first_seen[symbol].holding_name,
            country=first_seen[symbol].country,
            sector=first_seen[symbol].sector,
            asset_class=first_seen[symbol].asset_class,
            total_weight_pct=weight,
            normalized_weight_pct=_share(weight, grand_total),
        )
        for symbol, weight in totals.items()
    ]
    slices.sort(key=lambda s: (-s.total_weight_pct, s.holding_symbol))
    return slices


def _group_key(value: Optional[str]) -> str:
    if value is None:
        return OTHER_LABEL
    return value.strip() or OTHER_LABEL


def _aggregate_by(rows: Iterable, attr: str) -> list[GroupSlice]:
    totals: dict[str, Decimal] = {}
    for raw in rows or []:
        row = as_exposure_row(raw)
        key = _group_key(getattr(row, attr))
        totals[key] = totals.get(key, Decimal("0")) + row.total_weight_pct

    kept = [(label, weight) for label, weight in totals.items() if weight > MIN_GROUP_WEIGHT]
    kept.sort(key=lambda item: (-item[1], item[0]))
    kept_total = sum((weight for _, weight in kept), Decimal("0"))
    return [
        GroupSlice(label=label, weight_pct=weight, normalized_weight_pct=_share(weight, kept_total))
        for label, weight in kept
    ]


def aggregate_by_sector(rows: Iterable) -> list[GroupSlice]:
    """Sector totals above 0.1%, largest first. Missing sector → "Other"."""
    return _aggregate_by(rows, "sector")


def aggregate_by_region(rows: Iterable) -> list[GroupSlice]:
    """Country totals above 0.1%, largest first. Missing country → "Other"."""
    return _aggregate_by(rows, "country")
