"""Tests for benchmark presets and default selection."""

from decimal import Decimal

from etf_exposure.core.benchmarks import (
    BENCHMARK_MIXES,
    benchmark_label,
    find_benchmark_by_id,
    find_benchmark_by_symbol,
    get_fallback_benchmark,
    pick_default_benchmark,
    resolve_benchmark_for_mix,
)
from etf_exposure.core.models import BenchmarkMix, Position


def _pos(symbol, weight):
    return Position(symbol, Decimal(str(weight)))


class TestPickDefaultBenchmark:
    def test_empty_returns_first_preset(self):
        assert pick_default_benchmark([]) is BENCHMARK_MIXES[0]

    def test_invalid_only_returns_first_preset(self):
        assert pick_default_benchmark([{"symbol": " ", "weightPct": 50}]) is BENCHMARK_MIXES[0]

    def test_sp500_mix(self):
        assert pick_default_benchmark([_pos("VOO", 100)]).id == "voo"

    def test_us_large_cap_half(self):
        assert pick_default_benchmark([_pos("SPY", 50), _pos("ARKK", 50)]).id == "voo"

    def test_all_in_one_wins_over_us_share(self):
        mix = [_pos("VOO", 90), _pos("VGRO.TO", 10)]
        assert pick_default_benchmark(mix).id == "vgro"

    def test_all_in_one_first_match_in_mix_order(self):
        assert pick_default_benchmark([_pos("XEQT.TO", 50), _pos("VEQT.TO", 50)]).id == "xeqt"
        assert pick_default_benchmark([_pos("VEQT.TO", 50), _pos("XEQT.TO", 50)]).id == "veqt"

    def test_global_share(self):
        assert pick_default_benchmark([_pos("VXUS", 40), _pos("QQQ", 60)]).id == "vt"

    def test_below_thresholds_falls_back_to_qqq(self):
        assert pick_default_benchmark([_pos("VXUS", 39), _pos("SCHD", 61)]).id == "qqq"

    def test_lowercase_dict_input(self):
        assert pick_default_benchmark([{"symbol": " ivv ", "weightPct": 100}]).id == "voo"

    def test_negative_weights_clamped(self):
        mix = [{"symbol": "VOO", "weightPct": -10}, {"symbol": "QQQ", "weightPct": 10}]
        assert pick_default_benchmark(mix).id == "qqq"

    def test_zero_total_falls_back_to_qqq(self):
        assert pick_default_benchmark([{"symbol": "VOO", "weightPct": 0}]).id == "qqq"


class TestFallback:
    def test_us_large_cap_gets_global(self):
        assert get_fallback_benchmark("voo") == "VT"

    def test_global_gets_sp500(self):
        assert get_fallback_benchmark("VT") == "VOO"

    def test_other_gets_sp500(self):
        assert get_fallback_benchmark("ARKK") == "VOO"

    def test_single_etf_equal_to_benchmark(self):
        mix, symbol = resolve_benchmark_for_mix([_pos("VOO", 100)])
        assert (mix.id, symbol) == ("vt", "VT")

    def test_single_global_etf(self):
        mix, symbol = resolve_benchmark_for_mix([_pos("VT", 100)])
        assert (mix.id, symbol) == ("voo", "VOO")

    def test_multi_etf_untouched(self):
        mix, symbol = resolve_benchmark_for_mix([_pos("VOO", 60), _pos("QQQ", 40)])
        assert (mix.id, symbol) == ("voo", "VOO")


class TestLookup:
    def test_by_id_unknown_returns_first(self):
        assert find_benchmark_by_id("nope") is BENCHMARK_MIXES[0]

    def test_by_symbol_or_id(self):
        assert find_benchmark_by_symbol(" xeqt.to ").id == "xeqt"
        assert find_benchmark_by_symbol("vgro").id == "vgro"
        assert find_benchmark_by_symbol("ARKK") is None

    def test_label_fallbacks(self):
        assert benchmark_label(BENCHMARK_MIXES[1]) == "S&P 500 (VOO)"
        bare = BenchmarkMix(id="x", label="", description="", positions=(_pos("ABC", 100),))
        assert benchmark_label(bare) == "ABC"
        assert benchmark_label(BenchmarkMix(id="x", label="", description="")) == "x"
