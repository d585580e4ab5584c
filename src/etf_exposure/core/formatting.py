"""One-line text summaries of a mix (e.g. "ETF Mix: VOO 60% · QQQ 40%")."""

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal

from .models import Position
from .positions import coerce_weight

MIX_PREFIX = "ETF Mix:"
JOINER = " · "
MAX_FULL_LIST_LENGTH = 70


def format_percent(value) -> str:
    """60 → "60%", 33.333 → "33.3%"."""
    weight = coerce_weight(value) or Decimal("0")
    rounded = weight.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    if rounded == rounded.to_integral_value():
        return f"{rounded:.0f}%"
    return f"{rounded:.1f}%"


def sorted_mix_positions(positions: Iterable[Position]) -> list[Position]:
    """Positions with a symbol and positive weight, heaviest first."""
    kept = [p for p in positions if p.symbol.strip() and p.weight_pct > 0]
    return sorted(kept, key=lambda p: -p.weight_pct)


def _entries(positions: Iterable[Position]) -> list[str]:
    return [f"{p.symbol.strip()} {format_percent(p.weight_pct)}" for p in sorted_mix_positions(positions)]


def mix_line_from_positions(positions: Iterable[Position]) -> str:
    entries = _entries(positions)
    if not entries:
        return ""

    full_line = f"{MIX_PREFIX} {JOINER.join(entries)}"
    if len(entries) <= 3:
        return full_line
    if len(entries) == 4 and len(full_line) <= MAX_FULL_LIST_LENGTH:
        return full_line

    top_three = JOINER.join(entries[:3])
    return f"{MIX_PREFIX} {top_three}{JOINER}+{len(entries) - 3}"


def format_mix_summary(positions: Iterable[Position]) -> str:
    return JOINER.join(_entries(positions))
