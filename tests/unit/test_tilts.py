"""Tests for group tilts."""

from decimal import Decimal
from types import SimpleNamespace

from etf_exposure.core.models import BenchmarkExposureRow, GroupExposure, GroupSlice
from etf_exposure.core.tilts import (
    build_benchmark_rows,
    calculate_tilts,
    format_delta,
    side_by_side_rows,
    user_group_exposure,
)


def _user(label, weight):
    return GroupExposure(label=label, weight_pct=Decimal(str(weight)))


def _bench(key, weight):
    return BenchmarkExposureRow(group_key=key, weight_pct=Decimal(str(weight)))


class TestCalculateTilts:
    def test_basic(self):
        result = calculate_tilts([_user("Tech", 50)], [_bench("Tech", 30), _bench("Health", 20)])
        assert [(r.label, r.delta_formatted) for r in result.overweights] == [("Tech", "+20.0%")]
        assert [(r.label, r.delta_formatted) for r in result.underweights] == [("Health", "-20.0%")]
        assert result.overweights[0].delta == Decimal("20")

    def test_labels_matched_case_insensitively(self):
        result = calculate_tilts([_user(" technology ", 40)], [_bench("Technology", 40)])
        assert result.overweights == ()
        assert result.underweights == ()

    def test_display_label_from_first_seen(self):
        result = calculate_tilts([_user(" Technology ", 50)], [_bench("TECHNOLOGY", 10)])
        assert result.overweights[0].label == "Technology"

    def test_missing_label_is_other(self):
        result = calculate_tilts([_user(None, 5)], [_bench("  ", 2)])
        assert [(r.label, r.delta) for r in result.overweights] == [("Other", Decimal("3"))]

    def test_ordering_and_limit(self):
        user = [_user(k, w) for k, w in [("A", 10), ("B", 30), ("C", 20)]]
        bench = [_bench(k, w) for k, w in [("D", 5), ("E", 15), ("F", 10)]]
        result = calculate_tilts(user, bench, limit=2)
        assert [r.label for r in result.overweights] == ["B", "C"]
        assert [r.label for r in result.underweights] == ["E", "F"]

    def test_zero_delta_omitted(self):
        result = calculate_tilts([_user("A", 10)], [_bench("A", 10)])
        assert result.overweights == () and result.underweights == ()

    def test_raw_dicts_accepted(self):
        user = [{"label": "Tech", "weightPct": 50}]
        bench = [{"label": "Tech", "total_weight_pct": "30"}, {"group_key": "Health", "weight_pct": 20}]
        result = calculate_tilts(user, bench)
        assert result.overweights[0].delta_formatted == "+20.0%"
        assert result.underweights[0].label == "Health"

    def test_float_and_int_weights(self):
        result = calculate_tilts([GroupExposure("Tech", 50.0)], [{"group_key": "Tech", "weight_pct": 30}])
        assert [(r.label, r.delta_formatted) for r in result.overweights] == [("Tech", "+20.0%")]
        assert result.overweights[0].delta == Decimal("20")

    def test_plain_objects_with_float_weights(self):
        user = [SimpleNamespace(label="Health", weight_pct=5)]
        bench = [BenchmarkExposureRow(group_key="Health", weight_pct=7.5)]
        result = calculate_tilts(user, bench)
        assert [(r.label, r.delta_formatted) for r in result.underweights] == [("Health", "-2.5%")]

    def test_user_slices_from_aggregator(self):
        slices = [GroupSlice(label="Tech", weight_pct=Decimal("60"))]
        result = calculate_tilts(user_group_exposure(slices), [_bench("Tech", 55)])
        assert result.overweights[0].delta_formatted == "+5.0%"

    def test_empty(self):
        result = calculate_tilts([], [])
        assert result.to_dict() == {"overweights": [], "underweights": []}


class TestFormatDelta:
    def test_positive(self):
        assert format_delta(Decimal("3.25")) == "+3.3%"

    def test_negative(self):
        assert format_delta(Decimal("-1")) == "-1.0%"

    def test_zero_is_signed(self):
        assert format_delta(Decimal("0")) == "+0.0%"

    def test_nan(self):
        assert format_delta(Decimal("NaN")) == "0.0%"


class TestBenchmarkRows:
    def test_diff(self):
        rows = build_benchmark_rows([
            {"label": "Apple", "symbol": "AAPL", "yourWeightPct": 8, "benchmarkWeightPct": 7},
        ])
        assert rows[0].diff_pct == Decimal("1")
        assert rows[0].symbol == "AAPL"


class TestSideBySide:
    def test_heaviest_benchmark_group_first(self):
        rows = side_by_side_rows(
            [_user("Tech", 50), _user("Energy", 5)],
            [_bench("Tech", 30), _bench("Health", 20)],
        )
        assert [(r.label, r.your_weight_pct, r.benchmark_weight_pct, r.diff_pct) for r in rows] == [
            ("Tech", Decimal("50"), Decimal("30"), Decimal("20")),
            ("Health", Decimal("0"), Decimal("20"), Decimal("-20")),
            ("Energy", Decimal("5"), Decimal("0"), Decimal("5")),
        ]
        assert rows[0].symbol is None

    def test_stock_rows_carry_symbol(self):
        rows = side_by_side_rows([_user("AAPL", 8)], [_bench("AAPL", 7)], with_symbol=True)
        assert rows[0].symbol == "AAPL"
        assert rows[0].to_dict() == {
            "label": "AAPL",
            "symbol": "AAPL",
            "yourWeightPct": 8.0,
            "benchmarkWeightPct": 7.0,
            "diffPct": 1.0,
        }
