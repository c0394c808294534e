"""Pydantic schemas for display rows and status API responses."""

from pydantic import BaseModel

from src.dlmm_chain.domain.registry import NeighborCompliance, PositionCompliance
from src.dlmm_common.enums import AdjustmentOutcome, MonitorState, PoolStatus, Side


class PoolDisplayRow(BaseModel):
    """One table row per position (or per position-less pool)."""

    address: str
    bin_range: str
    price_range: str
    token_x: str
    token_y: str
    status: PoolStatus = PoolStatus.NORMAL
    is_bid_ask: bool | None = None
    position_id: str | None = None


class ChainStatusOut(BaseModel):
    monitor_state: MonitorState
    current_bin_id: int | None
    current_price: float | None
    current_pool: str | None
    adjusting: bool
    status_message: str
    last_updated: str | None
    pool_count: int


class PositionComplianceOut(BaseModel):
    position: str
    bin_range: str
    side: Side
    is_compliant: bool

    @classmethod
    def from_domain(cls, pc: PositionCompliance) -> "PositionComplianceOut":
        return cls(
            position=pc.position.address,
            bin_range=str(pc.position.bin_range),
            side=pc.side,
            is_compliant=pc.is_compliant,
        )


class ComplianceOut(BaseModel):
    pool: str | None
    lower: PositionComplianceOut | None
    current: PositionComplianceOut | None
    higher: PositionComplianceOut | None

    @classmethod
    def from_domain(cls, report: NeighborCompliance) -> "ComplianceOut":
        def _opt(pc: PositionCompliance | None) -> PositionComplianceOut | None:
            return PositionComplianceOut.from_domain(pc) if pc else None

        return cls(
            pool=report.pool.address if report.pool else None,
            lower=_opt(report.lower),
            current=_opt(report.current),
            higher=_opt(report.higher),
        )


class AdjustmentResultOut(BaseModel):
    position: str
    side: Side
    outcome: AdjustmentOutcome
    error: str | None = None


class RebalanceTriggerOut(BaseModel):
    skipped: bool
    results: list[AdjustmentResultOut] = []
