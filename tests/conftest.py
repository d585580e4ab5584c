"""Shared pytest fixtures for exposure engine tests."""

from decimal import Decimal

import pytest

import etf_exposure.core.config as cfgmod
from etf_exposure.core.models import BenchmarkExposureRow, ExposureRow, GroupBy
from etf_exposure.core.positions import positions_key


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Each test gets its own config.json and no Supabase env vars."""
    config_path = tmp_path / "config.json"
    monkeypatch.setattr(cfgmod, "_config_path", lambda: config_path)
    monkeypatch.delenv(cfgmod.ENV_URL, raising=False)
    monkeypatch.delenv(cfgmod.ENV_ANON_KEY, raising=False)
    cfgmod.reset_config()
    yield config_path
    cfgmod.reset_config()


def row(symbol, weight, sector=None, country=None, name="", asset_class=None):
    return ExposureRow(
        holding_symbol=symbol,
        holding_name=name,
        country=country,
        sector=sector,
        asset_class=asset_class,
        total_weight_pct=Decimal(str(weight)),
    )


@pytest.fixture
def voo_qqq_rows():
    """Exposure rows for VOO 60 / QQQ 40 (top holdings only)."""
    return [
        # from VOO
        row("AAPL", 4.2, "Technology", "United States", "Apple Inc."),
        row("MSFT", 4.0, "Technology", "United States", "Microsoft Corp."),
        row("AMZN", 2.1, "Consumer Discretionary", "United States", "Amazon.com Inc."),
        row("JPM", 0.8, "Financials", "United States", "JPMorgan Chase & Co."),
        # from QQQ
        row("AAPL", 3.6, "Technology", "United States", "Apple Inc."),
        row("MSFT", 3.4, "Technology", "United States", "Microsoft Corp."),
        row("ASML", 0.6, "Technology", "Netherlands", "ASML Holding"),
        row("CASH", 0.05, None, None, "Cash"),
    ]


class FakeHoldingsClient:
    """In-memory stand-in for HoldingsClient; records calls."""

    max_positions = 5

    def __init__(self, rows=None, benchmark=None, rows_by_mix=None):
        self.rows = rows or []
        self.benchmark = benchmark or {}
        # positions_key -> rows, for mixes other than the default one
        self.rows_by_mix = rows_by_mix or {}
        self.exposure_calls = []
        self.benchmark_calls = []

    def fetch_exposure_rows(self, positions):
        self.exposure_calls.append(list(positions))
        return list(self.rows_by_mix.get(positions_key(positions), self.rows))

    def fetch_benchmark_exposure(self, symbol, group_by):
        group_by = GroupBy(group_by)
        self.benchmark_calls.append((symbol, group_by))
        return [
            BenchmarkExposureRow(group_key=k, weight_pct=Decimal(str(w)))
            for k, w in self.benchmark.get((symbol, group_by), [])
        ]


@pytest.fixture
def fake_client(voo_qqq_rows):
    benchmark = {
        ("VOO", GroupBy.STOCK): [("AAPL", 7.0), ("MSFT", 6.5), ("NVDA", 6.0), ("AMZN", 3.5)],
        ("VOO", GroupBy.SECTOR): [("Technology", 31.0), ("Financials", 13.0), ("Health Care", 11.0)],
        ("VOO", GroupBy.REGION): [("United States", 99.5)],
    }
    return FakeHoldingsClient(rows=voo_qqq_rows, benchmark=benchmark)


@pytest.fixture
def vt_rows():
    """Exposure rows for VT 100 (top holdings only)."""
    return [
        row("AAPL", 4.0, "Technology", "United States", "Apple Inc."),
        row("MSFT", 3.6, "Technology", "United States", "Microsoft Corp."),
        row("NESN", 0.5, "Consumer Staples", "Switzerland", "Nestle SA"),
    ]


@pytest.fixture
def mix_client(fake_client, vt_rows):
    fake_client.rows_by_mix["VT:100.0000"] = vt_rows
    return fake_client
