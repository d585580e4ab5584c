"""Mix-level insights derived from exposure rows: region split and a one-word profile."""

from collections.abc import Iterable
from decimal import Decimal
from typing import Optional

from .aggregations import as_exposure_row, aggregate_by_sector
from .models import CountrySplit, GroupSlice

US = "US"
CANADA = "Canada"
INTERNATIONAL = "International"

_US_NAMES = {"us", "usa", "united states", "united states of america"}
_CANADA_NAMES = {"ca", "can", "canada"}


def normalize_country_to_region(country: Optional[str]) -> str:
    if not country:
        return INTERNATIONAL
    c = country.strip().lower()
    if c in _US_NAMES:
        return US
    if c in _CANADA_NAMES:
        return CANADA
    return INTERNATIONAL


def is_bond(asset_class: Optional[str]) -> bool:
    if not asset_class:
        return False
    a = asset_class.lower()
    return "bond" in a or "fixed income" in a


def classify_exposure(rows: Iterable) -> str:
    """
    Label a mix by where its weight sits.

    Region shares are taken over equity weight only; the dominant region
    wins ties in the order US, Canada, International.
    """
    rows = [as_exposure_row(r) for r in rows]
    if not rows:
        return "Diversified"

    equity = bonds = Decimal("0")
    region_weight = {US: Decimal("0"), CANADA: Decimal("0"), INTERNATIONAL: Decimal("0")}

    for row in rows:
        weight = row.total_weight_pct
        if weight <= 0:
            continue
        if is_bond(row.asset_class):
            bonds += weight
        else:
            equity += weight
            region_weight[normalize_country_to_region(row.country)] += weight

    total = (equity + bonds) or Decimal("1")
    equity_share = equity / total
    bond_share = bonds / total

    region_total = sum(region_weight.values(), Decimal("0")) or Decimal("1")
    us_share = region_weight[US] / region_total
    ca_share = region_weight[CANADA] / region_total
    intl_share = region_weight[INTERNATIONAL] / region_total

    if us_share >= ca_share and us_share >= intl_share:
        dominant, dominant_share = US, us_share
    elif ca_share >= intl_share:
        dominant, dominant_share = CANADA, ca_share
    else:
        dominant, dominant_share = INTERNATIONAL, intl_share

    if dominant == US and dominant_share >= Decimal("0.5"):
        return "U.S.-Concentrated"
    if dominant == CANADA and dominant_share >= Decimal("0.3"):
        return "Canada-Tilted"
    if dominant == INTERNATIONAL and dominant_share >= Decimal("0.4"):
        return "International-Heavy"

    if equity_share > Decimal("0.8"):
        return "Equity-Heavy"
    if equity_share > Decimal("0.6"):
        return "Growth-Oriented"
    if equity_share < Decimal("0.4") and bond_share > Decimal("0.3"):
        return "Conservative"
    return "Diversified"


def compute_country_exposure(rows: Iterable) -> CountrySplit:
    weights = {US: Decimal("0"), CANADA: Decimal("0"), INTERNATIONAL: Decimal("0")}
    for raw in rows:
        row = as_exposure_row(raw)
        if row.total_weight_pct <= 0:
            continue
        weights[normalize_country_to_region(row.country)] += row.total_weight_pct

    total = sum(weights.values(), Decimal("0")) or Decimal("1")
    return CountrySplit(
        us=weights[US] / total * 100,
        canada=weights[CANADA] / total * 100,
        international=weights[INTERNATIONAL] / total * 100,
    )


def top_sectors(rows: Iterable, limit: int = 2) -> list[GroupSlice]:
    return aggregate_by_sector(rows)[:limit]
