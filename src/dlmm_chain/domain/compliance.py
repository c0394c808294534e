"""BidAsk compliance: is a position's capital strictly monotonic toward the active bin?

Side convention (mirrored by the re-add strategy):
  ABOVE the active bin -> token X amounts, strictly ascending with bin id
  BELOW the active bin -> token Y amounts, strictly descending with bin id
A position straddling the active bin is split at floor((min + max) / 2):
active bin >= midpoint is treated as ABOVE, otherwise BELOW.
"""

import logging
from collections.abc import Iterable, Sequence

from src.dlmm_chain.domain.models import Bin, Pool, Position
from src.dlmm_common.enums import Side

logger = logging.getLogger(__name__)


def is_compliant(values: Sequence[int | float], ascending: bool) -> bool:
    """Strict monotonicity over non-zero values; ties fail, no data passes."""
    if len(values) <= 1:
        return True
    non_zero = [v for v in values if v != 0]
    if not non_zero:
        return True
    for i in range(1, len(non_zero)):
        prev, current = non_zero[i - 1], non_zero[i]
        if ascending and current <= prev:
            logger.debug("BidAsk ascending check failed at %d: %s <= %s", i, current, prev)
            return False
        if not ascending and current >= prev:
            logger.debug("BidAsk descending check failed at %d: %s >= %s", i, current, prev)
            return False
    return True


def aggregate_by_bin(bins: Iterable[Bin], side: Side) -> list[tuple[int, int]]:
    """Sum the side's token per bin id, drop zero totals, sort by bin id."""
    totals: dict[int, int] = {}
    for b in bins:
        amount = b.x if side is Side.ABOVE else b.y
        totals[b.bin_id] = totals.get(b.bin_id, 0) + amount
    return sorted((bin_id, total) for bin_id, total in totals.items() if total != 0)


def is_distribution_compliant(bins: Iterable[Bin], side: Side) -> bool:
    points = aggregate_by_bin(bins, side)
    if not points:
        return True
    logger.debug(
        "Bin distribution (%s): %s",
        side.value,
        ", ".join(f"Bin{bin_id}:{value}" for bin_id, value in points),
    )
    return is_compliant([value for _, value in points], ascending=side is Side.ABOVE)


def side_for_position(position: Position, current_bin_id: int) -> Side:
    """Which half of the BidAsk shape the position should hold."""
    if position.min_bin_id > current_bin_id:
        return Side.ABOVE
    if position.max_bin_id < current_bin_id:
        return Side.BELOW
    mid_bin_id = (position.min_bin_id + position.max_bin_id) // 2
    return Side.ABOVE if current_bin_id >= mid_bin_id else Side.BELOW


def position_compliance(position: Position, side: Side) -> bool:
    if not position.bins:
        return True
    return is_distribution_compliant(position.bins, side)


def pool_compliance(pool: Pool, side: Side) -> bool:
    """Pool-wide check over every position's bins, aggregated per bin id."""
    if not pool.positions:
        logger.debug("Pool %s has no positions, treated as compliant", pool.address[:8])
        return True
    result = is_distribution_compliant(pool.all_bins(), side)
    logger.debug("Pool %s BidAsk (%s): %s", pool.address[:8], side.value, result)
    return result


def bid_ask_distribution(total: float, bin_count: int, ascending: bool) -> list[float]:
    """Ideal linear BidAsk allocation of ``total`` over ``bin_count`` bins."""
    if bin_count <= 0:
        return []
    if bin_count == 1:
        return [total]
    unit = total / (bin_count * (bin_count + 1) / 2)
    distribution = [unit * (i + 1) for i in range(bin_count)]
    if not ascending:
        distribution.reverse()
    return distribution
