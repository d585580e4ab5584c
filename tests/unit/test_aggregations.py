"""Tests for exposure aggregation."""

from decimal import Decimal

from conftest import row

from etf_exposure.core.aggregations import (
    aggregate_by_region,
    aggregate_by_sector,
    aggregate_holdings_by_symbol,
)


class TestHoldingsBySymbol:
    def test_sums_duplicates(self):
        rows = [row("A", 3), row("B", 5), row("A", 2)]
        totals = {s.holding_symbol: s.total_weight_pct for s in aggregate_holdings_by_symbol(rows)}
        assert totals == {"A": Decimal("5"), "B": Decimal("5")}

    def test_order_independent(self):
        rows = [row("A", 3), row("B", 5), row("a ", 2), row("C", 1)]
        assert aggregate_holdings_by_symbol(rows) == aggregate_holdings_by_symbol(list(reversed(rows)))

    def test_drops_empty_symbol(self):
        rows = [row("", 10), row("  ", 5), row("A", 1)]
        result = aggregate_holdings_by_symbol(rows)
        assert [s.holding_symbol for s in result] == ["A"]

    def test_normalized_share(self):
        result = aggregate_holdings_by_symbol([row("A", 3), row("B", 1)])
        shares = {s.holding_symbol: s.normalized_weight_pct for s in result}
        assert shares == {"A": Decimal("75"), "B": Decimal("25")}

    def test_zero_total(self):
        result = aggregate_holdings_by_symbol([row("A", 0)])
        assert result[0].normalized_weight_pct == Decimal("0")

    def test_keeps_first_name(self):
        result = aggregate_holdings_by_symbol([row("aapl", 1, name="Apple Inc."), row("AAPL", 1, name="APPLE")])
        assert result[0].holding_name == "Apple Inc."

    def test_accepts_raw_api_dicts(self):
        rows = [
            {"holding_symbol": "AAPL", "total_weight_pct": "4.5"},
            {"holding_symbol": "aapl", "total_weight_pct": 0.5},
        ]
        result = aggregate_holdings_by_symbol(rows)
        assert result[0].total_weight_pct == Decimal("5.0")

    def test_idempotent(self):
        rows = [row("A", 3), row("B", 5)]
        assert aggregate_holdings_by_symbol(rows) == aggregate_holdings_by_symbol(rows)


class TestBySector:
    def test_groups_and_sorts(self, voo_qqq_rows):
        result = aggregate_by_sector(voo_qqq_rows)
        assert [s.label for s in result] == ["Technology", "Consumer Discretionary", "Financials"]
        assert result[0].weight_pct == Decimal("15.8")

    def test_threshold_filters_noise(self):
        rows = [row("A", 5, "Tech"), row("B", "0.1", "Energy"), row("C", "0.05", None)]
        result = aggregate_by_sector(rows)
        assert [s.label for s in result] == ["Tech"]
        assert all(s.weight_pct > Decimal("0.1") for s in result)

    def test_missing_sector_is_other(self):
        rows = [row("A", 2, None), row("B", 3, "  ")]
        result = aggregate_by_sector(rows)
        assert result[0].label == "Other"
        assert result[0].weight_pct == Decimal("5")

    def test_sorted_descending(self):
        rows = [row("A", 1, "X"), row("B", 3, "Y"), row("C", 2, "Z")]
        weights = [s.weight_pct for s in aggregate_by_sector(rows)]
        assert weights == sorted(weights, reverse=True)

    def test_normalized_over_kept(self):
        rows = [row("A", 3, "X"), row("B", 1, "Y"), row("C", "0.05", "Z")]
        result = aggregate_by_sector(rows)
        assert [s.normalized_weight_pct for s in result] == [Decimal("75"), Decimal("25")]

    def test_empty(self):
        assert aggregate_by_sector([]) == []


class TestByRegion:
    def test_groups_by_country(self, voo_qqq_rows):
        result = aggregate_by_region(voo_qqq_rows)
        assert [(r.label, r.weight_pct) for r in result] == [
            ("United States", Decimal("18.1")),
            ("Netherlands", Decimal("0.6")),
        ]

    def test_trims_country(self):
        rows = [row("A", 1, country=" Canada "), row("B", 1, country="Canada")]
        result = aggregate_by_region(rows)
        assert len(result) == 1
        assert result[0].label == "Canada"
