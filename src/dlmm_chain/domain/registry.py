"""Pool chain lookups — pure reads over in-memory state, no I/O."""

import logging
from dataclasses import dataclass

from src.dlmm_chain.domain.compliance import position_compliance, side_for_position
from src.dlmm_chain.domain.models import Pool, PoolChain, Position
from src.dlmm_common.enums import Side

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PositionCompliance:
    position: Position
    side: Side
    is_compliant: bool


@dataclass(frozen=True)
class NeighborCompliance:
    """Compliance of the positions around the active bin; None = no such position."""

    pool: Pool | None = None
    lower: PositionCompliance | None = None
    current: PositionCompliance | None = None
    higher: PositionCompliance | None = None

    def non_compliant_neighbors(self) -> list[PositionCompliance]:
        """Lower / higher entries needing a rebalance. The straddling one is never included."""
        return [pc for pc in (self.lower, self.higher) if pc is not None and not pc.is_compliant]


def pool_containing(chain: PoolChain, bin_id: int) -> Pool | None:
    return next((p for p in chain.pools if p.contains_bin(bin_id)), None)


def lower_neighbor_position(pool: Pool, bin_id: int) -> Position | None:
    """Closest position lying entirely below ``bin_id`` (greatest max bin; first wins ties)."""
    best: Position | None = None
    for position in pool.positions:
        if not position.bins or position.max_bin_id >= bin_id:
            continue
        if best is None or position.max_bin_id > best.max_bin_id:
            best = position
    return best


def higher_neighbor_position(pool: Pool, bin_id: int) -> Position | None:
    """Closest position lying entirely above ``bin_id`` (least min bin; first wins ties)."""
    best: Position | None = None
    for position in pool.positions:
        if not position.bins or position.min_bin_id <= bin_id:
            continue
        if best is None or position.min_bin_id < best.min_bin_id:
            best = position
    return best


def position_containing(pool: Pool, bin_id: int) -> Position | None:
    return next((p for p in pool.positions if p.contains_bin(bin_id)), None)


def _evaluate(position: Position, side: Side, label: str) -> PositionCompliance:
    result = position_compliance(position, side)
    logger.debug(
        "%s position %s bins %s: expect %s, compliant=%s",
        label,
        position.address[:8],
        position.bin_range,
        "ascending X" if side is Side.ABOVE else "descending Y",
        result,
    )
    return PositionCompliance(position=position, side=side, is_compliant=result)


def check_neighboring_compliance(chain: PoolChain) -> NeighborCompliance:
    current_bin_id = chain.current_bin_id
    if current_bin_id is None:
        logger.debug("No active bin observed yet")
        return NeighborCompliance()

    pool = pool_containing(chain, current_bin_id)
    if pool is None:
        logger.debug("No pool contains active bin %d", current_bin_id)
        return NeighborCompliance()

    lower = lower_neighbor_position(pool, current_bin_id)
    current = position_containing(pool, current_bin_id)
    higher = higher_neighbor_position(pool, current_bin_id)
    logger.debug(
        "Neighbors in pool %s around bin %d: lower=%s current=%s higher=%s",
        pool.address[:8],
        current_bin_id,
        lower.address[:8] if lower else "none",
        current.address[:8] if current else "none",
        higher.address[:8] if higher else "none",
    )

    return NeighborCompliance(
        pool=pool,
        lower=_evaluate(lower, Side.BELOW, "Lower") if lower else None,
        current=(
            _evaluate(current, side_for_position(current, current_bin_id), "Current")
            if current
            else None
        ),
        higher=_evaluate(higher, Side.ABOVE, "Higher") if higher else None,
    )
