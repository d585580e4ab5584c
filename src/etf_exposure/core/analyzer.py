"""End-to-end analysis of one mix: exposure, benchmark choice, overlap and tilts.

The analyzer owns no global state. The holdings client and the exposure
cache are passed in by the caller (one cache per session).
"""

import logging
from collections.abc import Iterable
from typing import Optional

from ..external.exposure_cache import ExposureCache
from .aggregations import aggregate_by_region, aggregate_by_sector, aggregate_holdings_by_symbol
from .benchmarks import benchmark_symbol, find_benchmark_by_symbol, resolve_benchmark_for_mix
from .comparator import compare_mixes
from .exceptions import UnknownBenchmarkError
from .formatting import format_mix_summary
from .insights import classify_exposure
from .models import BenchmarkExposureRow, BenchmarkMix, ExposureRow, GroupBy, MixReport, Position
from .positions import MAX_POSITIONS_FOR_EXPOSURE, normalize_positions, validate_for_exposure
from .tilts import (
    DEFAULT_TILT_LIMIT,
    calculate_tilts,
    holding_group_exposure,
    side_by_side_rows,
    user_group_exposure,
)

logger = logging.getLogger(__name__)

ALL_DIMENSIONS = (GroupBy.STOCK, GroupBy.SECTOR, GroupBy.REGION)
CUSTOM_MIX_ID = "mix"
CUSTOM_MIX_LABEL = "Custom mix"


class MixAnalyzer:
    def __init__(
        self,
        client,
        cache: Optional[ExposureCache] = None,
        max_positions: int = MAX_POSITIONS_FOR_EXPOSURE,
    ):
        self.client = client
        self.cache = cache if cache is not None else ExposureCache()
        self.max_positions = max_positions

    def exposure_rows(self, positions: list[Position]) -> list[ExposureRow]:
        validate_for_exposure(positions, self.max_positions)
        return self.cache.get_or_fetch(positions, self.client.fetch_exposure_rows)

    def choose_benchmark(self, positions: list[Position], benchmark: Optional[str] = None) -> tuple[BenchmarkMix, str]:
        """Explicit benchmark (id or symbol) or the default picked from the mix."""
        if benchmark:
            mix = find_benchmark_by_symbol(benchmark)
            if mix is None:
                raise UnknownBenchmarkError(f"Unknown benchmark '{benchmark}'")
            return mix, benchmark_symbol(mix)
        return resolve_benchmark_for_mix(positions)

    def _report(self, positions: list[Position], rows: list[ExposureRow], mix: BenchmarkMix, symbol: str) -> MixReport:
        return MixReport(
            positions=positions,
            benchmark=mix,
            benchmark_symbol=symbol,
            holdings=aggregate_holdings_by_symbol(rows),
            sectors=aggregate_by_sector(rows),
            regions=aggregate_by_region(rows),
            classification=classify_exposure(rows),
        )

    def _add_dimension(self, report: MixReport, dimension: GroupBy, benchmark_rows: list, limit: int) -> None:
        if dimension == GroupBy.STOCK:
            user = holding_group_exposure(report.holdings)
            report.comparison = compare_mixes(
                [(h.holding_symbol, h.total_weight_pct) for h in report.holdings],
                [(r.group_key, r.weight_pct) for r in benchmark_rows],
            )
        elif dimension == GroupBy.SECTOR:
            user = user_group_exposure(report.sectors)
        else:
            user = user_group_exposure(report.regions)
        report.tilts[dimension.value] = calculate_tilts(user, benchmark_rows, limit=limit)
        report.side_by_side[dimension.value] = side_by_side_rows(
            user, benchmark_rows, with_symbol=dimension == GroupBy.STOCK
        )

    def analyze(
        self,
        raw_positions: Iterable,
        benchmark: Optional[str] = None,
        dimensions: Iterable[GroupBy] = ALL_DIMENSIONS,
        limit: int = DEFAULT_TILT_LIMIT,
    ) -> MixReport:
        positions = normalize_positions(raw_positions)
        rows = self.exposure_rows(positions)
        mix, symbol = self.choose_benchmark(positions, benchmark)
        logger.info("Analyzing %d positions against %s", len(positions), symbol)

        report = self._report(positions, rows, mix, symbol)
        for dimension in dimensions:
            dimension = GroupBy(dimension)
            benchmark_rows = self.client.fetch_benchmark_exposure(symbol, dimension)
            self._add_dimension(report, dimension, benchmark_rows, limit)
        return report

    def compare_with_mix(
        self,
        raw_positions: Iterable,
        raw_target: Iterable,
        dimensions: Iterable[GroupBy] = ALL_DIMENSIONS,
        limit: int = DEFAULT_TILT_LIMIT,
    ) -> MixReport:
        """Compare a mix against another user-defined mix instead of a preset.

        Both sides are looked up through calculate_exposure, so the target
        must pass the same validation as the mix itself.
        """
        positions = normalize_positions(raw_positions)
        target = normalize_positions(raw_target)
        rows = self.exposure_rows(positions)
        target_rows = self.exposure_rows(target)
        summary = format_mix_summary(target)
        logger.info("Comparing %d positions against mix %s", len(positions), summary)

        target_mix = BenchmarkMix(
            id=CUSTOM_MIX_ID,
            label=CUSTOM_MIX_LABEL,
            description=summary,
            positions=tuple(target),
        )
        report = self._report(positions, rows, target_mix, summary)
        target_groups = {
            GroupBy.STOCK: [(h.holding_symbol, h.total_weight_pct) for h in aggregate_holdings_by_symbol(target_rows)],
            GroupBy.SECTOR: [(g.label, g.weight_pct) for g in aggregate_by_sector(target_rows)],
            GroupBy.REGION: [(g.label, g.weight_pct) for g in aggregate_by_region(target_rows)],
        }
        for dimension in dimensions:
            dimension = GroupBy(dimension)
            benchmark_rows = [
                BenchmarkExposureRow(group_key=label, weight_pct=weight) for label, weight in target_groups[dimension]
            ]
            self._add_dimension(report, dimension, benchmark_rows, limit)
        return report
