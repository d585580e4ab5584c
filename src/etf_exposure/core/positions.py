"""Position normalization, weight-total checks and URL state.

normalize_positions() never raises: malformed rows are dropped. The
business rules (at least one position, at most five ETFs) live in
validate_for_exposure(), which does raise.
"""

import json
import logging
from collections.abc import Iterable, Mapping
from decimal import Decimal, InvalidOperation
from typing import Optional
from urllib.parse import unquote, urlencode

from .exceptions import InvalidMixError, TooManyPositionsError
from .models import Position

logger = logging.getLogger(__name__)

MAX_POSITIONS_FOR_EXPOSURE = 5

# "Ready" band for scratch mixes built in the compare view
SCRATCH_READY_MIN = Decimal("99.5")
SCRATCH_READY_MAX = Decimal("100.5")
# Direct submission requires the total to be 100 within this tolerance
TOTAL_WEIGHT_TOLERANCE = Decimal("0.0001")

_MAX_DECODE_ROUNDS = 3


def coerce_weight(value) -> Optional[Decimal]:
    """Return value as a finite Decimal, or None if it is not numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    elif not isinstance(value, (int, float)):
        return None
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    return result if result.is_finite() else None


def _read_field(item, *names):
    if isinstance(item, Mapping):
        for name in names:
            if name in item:
                return item[name]
        return None
    for name in names:
        if hasattr(item, name):
            return getattr(item, name)
    return None


def normalize_position(item) -> Optional[Position]:
    if isinstance(item, Position):
        symbol_value, weight_value = item.symbol, item.weight_pct
    elif isinstance(item, Mapping):
        symbol_value = _read_field(item, "symbol")
        weight_value = _read_field(item, "weightPct", "weight_pct")
    else:
        return None

    if not isinstance(symbol_value, str):
        return None
    symbol = symbol_value.strip().upper()
    if not symbol:
        return None

    weight = coerce_weight(weight_value)
    if weight is None or weight <= 0:
        return None
    return Position(symbol=symbol, weight_pct=weight)


def normalize_positions(raw: Iterable) -> list[Position]:
    """Drop invalid rows; keep duplicates and input order."""
    if raw is None:
        return []
    result = []
    for item in raw:
        position = normalize_position(item)
        if position is not None:
            result.append(position)
    return result


def validate_for_exposure(positions: list[Position], max_positions: int = MAX_POSITIONS_FOR_EXPOSURE) -> None:
    if not positions:
        raise InvalidMixError(
            "At least one ETF with a non-empty symbol and positive weight is required"
        )
    if len(positions) > max_positions:
        raise TooManyPositionsError(f"You can analyze up to {max_positions} ETFs at a time.")


def total_weight(positions: Iterable[Position]) -> Decimal:
    return sum((p.weight_pct for p in positions), Decimal("0"))


def allocation_percent(raw: Iterable) -> Decimal:
    """Sum of finite weights over rows that have a symbol (scratch editor total)."""
    total = Decimal("0")
    for item in raw:
        symbol = _read_field(item, "symbol")
        if not isinstance(symbol, str) or not symbol.strip():
            continue
        weight = coerce_weight(_read_field(item, "weightPct", "weight_pct"))
        if weight is not None:
            total += weight
    return total


def is_scratch_ready(raw: Iterable) -> bool:
    rows = list(raw)
    for item in rows:
        symbol = _read_field(item, "symbol")
        weight = coerce_weight(_read_field(item, "weightPct", "weight_pct"))
        has_symbol = isinstance(symbol, str) and bool(symbol.strip())
        if weight is not None and weight > 0 and not has_symbol:
            return False
    total = allocation_percent(rows)
    return SCRATCH_READY_MIN < total < SCRATCH_READY_MAX


def is_total_hundred(positions: Iterable[Position]) -> bool:
    return abs(total_weight(positions) - 100) < TOTAL_WEIGHT_TOLERANCE


def positions_key(positions: Iterable) -> str:
    """Canonical key for a mix: sorted SYMBOL:weight pairs, weights to 4 dp."""
    pairs = []
    for item in positions:
        symbol = _read_field(item, "symbol")
        symbol = symbol.strip().upper() if isinstance(symbol, str) else ""
        weight = coerce_weight(_read_field(item, "weightPct", "weight_pct")) or Decimal("0")
        pairs.append((symbol, weight))
    pairs.sort()
    return "|".join(f"{symbol}:{weight:.4f}" for symbol, weight in pairs)


def _json_number(value: Decimal):
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def build_positions_param(positions: Iterable) -> str:
    """Encode a mix as a `positions=<json>` query string ("" when empty)."""
    cleaned = normalize_positions(positions)
    if not cleaned:
        return ""
    payload = [{"symbol": p.symbol, "weightPct": _json_number(p.weight_pct)} for p in cleaned]
    return urlencode({"positions": json.dumps(payload, separators=(",", ":"))})


def _try_parse(value: str) -> Optional[list[Position]]:
    try:
        parsed = json.loads(value)
    except ValueError:
        return None
    if not isinstance(parsed, list):
        return []
    return normalize_positions(parsed)


def parse_positions_param(raw) -> list[Position]:
    """Parse positions from a query param that may be URL-encoded several times."""
    if not raw:
        return []
    candidate = raw[0] if isinstance(raw, (list, tuple)) else raw
    if not candidate or not isinstance(candidate, str):
        return []

    result = _try_parse(candidate)
    if result is not None:
        return result

    seen = {candidate}
    decoded = candidate
    for _ in range(_MAX_DECODE_ROUNDS):
        nxt = unquote(decoded)
        if nxt == decoded or nxt in seen:
            break
        seen.add(nxt)
        decoded = nxt
        result = _try_parse(decoded)
        if result is not None:
            return result

    logger.warning("Failed to parse positions param: %r", candidate)
    return []


def parse_position_tokens(tokens: Iterable[str]) -> list[Position]:
    """Parse CLI tokens like `VOO:60` or `xeqt.to=40` into normalized positions."""
    rows = []
    for token in tokens:
        sep = ":" if ":" in token else "="
        symbol, _, weight = token.rpartition(sep)
        if not symbol:
            symbol, weight = token, ""
        rows.append({"symbol": symbol, "weightPct": weight})
    return normalize_positions(rows)
