"""Session-scoped cache of exposure rows keyed by canonical positions string."""

import logging
from typing import Callable

from ..core.models import ExposureRow, Position
from ..core.positions import positions_key

logger = logging.getLogger(__name__)


class ExposureCache:
    """Unbounded and never invalidated; stale holdings are fine within a session."""

    def __init__(self):
        self._rows: dict[str, list[ExposureRow]] = {}
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._rows)

    def get_or_fetch(
        self,
        positions: list[Position],
        fetch: Callable[[list[Position]], list[ExposureRow]],
    ) -> list[ExposureRow]:
        key = positions_key(positions)
        cached = self._rows.get(key)
        if cached is not None:
            self.hits += 1
            logger.debug("exposure cache hit: %s", key)
            return list(cached)
        self.misses += 1
        rows = fetch(positions)
        self._rows[key] = list(rows)
        return list(rows)
