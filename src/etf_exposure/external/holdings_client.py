"""Holdings database RPCs via the Supabase PostgREST endpoint.

Two stored procedures are used:
  - calculate_exposure:      ETFs + weights → one row per (ETF, holding)
  - get_benchmark_exposure:  benchmark symbol + dimension → grouped weights
"""

import logging
from typing import Optional

import requests

from ..core.config import AppConfig, get_config
from ..core.exceptions import ConfigurationError, ExposureFetchError
from ..core.models import BenchmarkExposureRow, ExposureRow, GroupBy, Position
from ..core.positions import MAX_POSITIONS_FOR_EXPOSURE, validate_for_exposure

logger = logging.getLogger(__name__)

RPC_PATH = "/rest/v1/rpc"


class HoldingsClient:
    """Blocking client for the holdings RPCs. No retries; one timeout per request."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        max_positions: int = MAX_POSITIONS_FOR_EXPOSURE,
        session: Optional[requests.Session] = None,
    ):
        if not base_url or not api_key:
            raise ConfigurationError(
                "Supabase URL and anon key are required "
                "(config.json or ETF_EXPOSURE_SUPABASE_URL / ETF_EXPOSURE_SUPABASE_ANON_KEY)"
            )
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_positions = max_positions
        self.session = session or requests.Session()
        self.session.headers.update({
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        })

    @classmethod
    def from_config(cls, cfg: Optional[AppConfig] = None) -> "HoldingsClient":
        cfg = cfg or get_config()
        return cls(
            cfg.supabase_url,
            cfg.supabase_anon_key,
            timeout=cfg.request_timeout,
            max_positions=cfg.max_positions,
        )

    def _rpc(self, name: str, payload: dict) -> list:
        resp = self.session.post(f"{self.base_url}{RPC_PATH}/{name}", json=payload, timeout=self.timeout)
        resp.raise_for_status()
        data = resp.json()
        return data if isinstance(data, list) else []

    def fetch_exposure_rows(self, positions: list[Position]) -> list[ExposureRow]:
        """Holding-level exposure for a validated mix. Raises ExposureFetchError on failure."""
        validate_for_exposure(positions, self.max_positions)
        payload = {
            "etfs": [p.symbol for p in positions],
            "weights": [float(p.weight_pct) for p in positions],
        }
        try:
            data = self._rpc("calculate_exposure", payload)
        except (requests.RequestException, ValueError) as e:
            logger.error("calculate_exposure failed for %s: %s", payload["etfs"], e)
            raise ExposureFetchError("Unable to analyze your ETF mix right now.") from e
        rows = [ExposureRow.from_api(r) for r in data if isinstance(r, dict)]
        logger.debug("calculate_exposure returned %d rows for %s", len(rows), payload["etfs"])
        return rows

    def fetch_benchmark_exposure(self, benchmark_symbol: str, group_by: GroupBy) -> list[BenchmarkExposureRow]:
        """Grouped benchmark weights. Failures are logged and yield []."""
        group_by = GroupBy(group_by)
        payload = {"p_benchmark_etf_symbol": benchmark_symbol, "p_group_by": group_by.value}
        try:
            data = self._rpc("get_benchmark_exposure", payload)
        except (requests.RequestException, ValueError) as e:
            logger.error(
                "Error fetching benchmark exposure for %s by %s: %s", benchmark_symbol, group_by.value, e
            )
            return []
        return [BenchmarkExposureRow.from_api(r) for r in data if isinstance(r, dict)]
