"""Data models for the exposure engine."""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional


class GroupBy(str, Enum):
    STOCK = "stock"
    SECTOR = "sector"
    REGION = "region"


def to_decimal(value, default: Decimal = Decimal("0")) -> Decimal:
    """Coerce an RPC number (int, float, numeric string) to Decimal."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, Decimal):
        return value if value.is_finite() else default
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return default
    return result if result.is_finite() else default


def _optional_str(value) -> Optional[str]:
    if value is None:
        return None
    return str(value)


@dataclass(frozen=True)
class Position:
    symbol: str
    weight_pct: Decimal

    def to_dict(self) -> dict:
        return {"symbol": self.symbol, "weightPct": float(self.weight_pct)}


@dataclass(frozen=True)
class ExposureRow:
    """One (ETF, underlying holding) row as returned by calculate_exposure."""
    holding_symbol: str
    holding_name: str = ""
    country: Optional[str] = None
    sector: Optional[str] = None
    asset_class: Optional[str] = None
    total_weight_pct: Decimal = Decimal("0")

    @classmethod
    def from_api(cls, row: dict) -> "ExposureRow":
        return cls(
            holding_symbol=str(row.get("holding_symbol") or ""),
            holding_name=str(row.get("holding_name") or ""),
            country=_optional_str(row.get("country")),
            sector=_optional_str(row.get("sector")),
            asset_class=_optional_str(row.get("asset_class")),
            total_weight_pct=to_decimal(row.get("total_weight_pct")),
        )

    def to_dict(self) -> dict:
        return {
            "holding_symbol": self.holding_symbol,
            "holding_name": self.holding_name,
            "country": self.country,
            "sector": self.sector,
            "asset_class": self.asset_class,
            "total_weight_pct": float(self.total_weight_pct),
        }


@dataclass(frozen=True)
class HoldingSlice:
    holding_symbol: str
    holding_name: str
    country: Optional[str]
    sector: Optional[str]
    asset_class: Optional[str]
    total_weight_pct: Decimal
    normalized_weight_pct: Decimal = Decimal("0")


@dataclass(frozen=True)
class GroupSlice:
    """Summed weight of one sector or region."""
    label: str
    weight_pct: Decimal
    normalized_weight_pct: Decimal = Decimal("0")


@dataclass(frozen=True)
class GroupExposure:
    label: Optional[str]
    weight_pct: Decimal


@dataclass(frozen=True)
class BenchmarkExposureRow:
    group_key: str
    weight_pct: Decimal

    @classmethod
    def from_api(cls, row: dict) -> "BenchmarkExposureRow":
        """Coalesce the two field namings the backend has used."""
        group_key = row.get("group_key")
        if group_key is None:
            group_key = row.get("label")
        weight = row.get("weight_pct")
        if weight is None:
            weight = row.get("total_weight_pct")
        return cls(
            group_key="Other" if group_key is None else str(group_key),
            weight_pct=to_decimal(weight),
        )


@dataclass(frozen=True)
class BenchmarkMix:
    id: str
    label: str
    description: str
    positions: tuple[Position, ...] = ()


@dataclass(frozen=True)
class DeltaRow:
    ticker: str
    user_pct: Decimal
    benchmark_pct: Decimal
    delta_pct: Decimal

    def to_dict(self) -> dict:
        return {
            "ticker": self.ticker,
            "userPct": float(self.user_pct),
            "benchmarkPct": float(self.benchmark_pct),
            "deltaPct": float(self.delta_pct),
        }


@dataclass(frozen=True)
class MixComparisonResult:
    overlap_pct: Decimal = Decimal("0")
    difference_pct: Decimal = Decimal("0")
    coverage_pct: Decimal = Decimal("0")
    visible_count: int = 0
    overweights: tuple[DeltaRow, ...] = ()
    underweights: tuple[DeltaRow, ...] = ()

    def to_dict(self) -> dict:
        return {
            "overlapPct": float(self.overlap_pct),
            "differencePct": float(self.difference_pct),
            "coveragePct": float(self.coverage_pct),
            "visibleCount": self.visible_count,
            "overweights": [r.to_dict() for r in self.overweights],
            "underweights": [r.to_dict() for r in self.underweights],
        }


@dataclass(frozen=True)
class TiltRow:
    label: str
    delta: Decimal
    delta_formatted: str


@dataclass(frozen=True)
class TiltSummary:
    overweights: tuple[TiltRow, ...] = ()
    underweights: tuple[TiltRow, ...] = ()

    def to_dict(self) -> dict:
        def rows(items):
            return [
                {"label": r.label, "delta": float(r.delta), "deltaFormatted": r.delta_formatted}
                for r in items
            ]
        return {"overweights": rows(self.overweights), "underweights": rows(self.underweights)}


@dataclass(frozen=True)
class BenchmarkRow:
    """Side-by-side weight of one label in the user mix and the benchmark."""
    label: str
    your_weight_pct: Decimal
    benchmark_weight_pct: Decimal
    diff_pct: Decimal
    symbol: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "symbol": self.symbol,
            "yourWeightPct": float(self.your_weight_pct),
            "benchmarkWeightPct": float(self.benchmark_weight_pct),
            "diffPct": float(self.diff_pct),
        }


@dataclass(frozen=True)
class CountrySplit:
    us: Decimal = Decimal("0")
    canada: Decimal = Decimal("0")
    international: Decimal = Decimal("0")


@dataclass
class MixReport:
    """Everything the analyzer computes for one mix against one benchmark."""
    positions: list[Position]
    benchmark: BenchmarkMix
    benchmark_symbol: str
    holdings: list[HoldingSlice] = field(default_factory=list)
    sectors: list[GroupSlice] = field(default_factory=list)
    regions: list[GroupSlice] = field(default_factory=list)
    classification: str = "Diversified"
    comparison: MixComparisonResult = field(default_factory=MixComparisonResult)
    tilts: dict[str, TiltSummary] = field(default_factory=dict)
    side_by_side: dict[str, list[BenchmarkRow]] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "positions": [p.to_dict() for p in self.positions],
            "benchmark": {"id": self.benchmark.id, "label": self.benchmark.label, "symbol": self.benchmark_symbol},
            "classification": self.classification,
            "holdings": [
                {"symbol": h.holding_symbol, "name": h.holding_name, "weightPct": float(h.total_weight_pct)}
                for h in self.holdings
            ],
            "sectors": [{"sector": s.label, "weightPct": float(s.weight_pct)} for s in self.sectors],
            "regions": [{"region": r.label, "weightPct": float(r.weight_pct)} for r in self.regions],
            "comparison": self.comparison.to_dict(),
            "tilts": {k: v.to_dict() for k, v in self.tilts.items()},
            "sideBySide": {k: [r.to_dict() for r in rows] for k, rows in self.side_by_side.items()},
        }
