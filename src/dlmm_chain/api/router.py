"""dlmm_chain status endpoints.

GET  /chain/status      — monitor state, active bin / price, adjusting flag
GET  /chain/pools       — display rows (one per position)
GET  /chain/pools/{address}  — summary of one tracked pool
GET  /chain/compliance  — BidAsk report for the positions around the active bin
POST /chain/rebalance   — external trigger; skipped while a rebalance is in flight
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from src.dlmm_chain.application.manager import ChainPoolsManager
from src.dlmm_chain.application.schemas import (
    AdjustmentResultOut,
    ChainStatusOut,
    ComplianceOut,
    RebalanceTriggerOut,
)
from src.dlmm_chain.domain.registry import check_neighboring_compliance
from src.dlmm_chain.infrastructure.display_sink import InMemoryDisplaySink
from src.dlmm_common.enums import MonitorState
from src.dlmm_common.errors import PoolNotFoundError
from src.dlmm_common.response import ApiResponse, success_response

router = APIRouter(prefix="/chain", tags=["chain"])


def get_manager(request: Request) -> ChainPoolsManager:
    return request.app.state.manager


def get_display(request: Request) -> InMemoryDisplaySink:
    return request.app.state.display


def _respond(request: Request, data: object) -> ApiResponse:
    resp = success_response(data)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/status")
async def get_status(
    request: Request,
    manager: Annotated[ChainPoolsManager, Depends(get_manager)],
    display: Annotated[InMemoryDisplaySink, Depends(get_display)],
) -> ApiResponse:
    chain = manager.chain
    current_pool = chain.current_pool()
    monitor = manager.monitor
    result = ChainStatusOut(
        monitor_state=monitor.state if monitor else MonitorState.IDLE,
        current_bin_id=chain.current_bin_id,
        current_price=chain.current_price,
        current_pool=current_pool.address if current_pool else None,
        adjusting=manager.coordinator.adjusting if manager.coordinator else False,
        status_message=display.status_message,
        last_updated=display.last_updated.isoformat() if display.last_updated else None,
        pool_count=len(chain.pools),
    )
    return _respond(request, result.model_dump(mode="json"))


@router.get("/pools")
async def list_pools(
    request: Request,
    display: Annotated[InMemoryDisplaySink, Depends(get_display)],
) -> ApiResponse:
    return _respond(request, [row.model_dump(mode="json") for row in display.rows])


@router.get("/pools/{address}")
async def get_pool(
    address: str,
    request: Request,
    manager: Annotated[ChainPoolsManager, Depends(get_manager)],
) -> ApiResponse:
    pool = manager.chain.get_pool_by_address(address)
    if pool is None:
        raise PoolNotFoundError(address)
    return _respond(request, pool.summary())


@router.get("/compliance")
async def get_compliance(
    request: Request,
    manager: Annotated[ChainPoolsManager, Depends(get_manager)],
) -> ApiResponse:
    report = check_neighboring_compliance(manager.chain)
    return _respond(request, ComplianceOut.from_domain(report).model_dump(mode="json"))


@router.post("/rebalance")
async def trigger_rebalance(
    request: Request,
    manager: Annotated[ChainPoolsManager, Depends(get_manager)],
) -> ApiResponse:
    skipped, results = await manager.trigger_rebalance()
    result = RebalanceTriggerOut(
        skipped=skipped,
        results=[
            AdjustmentResultOut(
                position=r.position, side=r.side, outcome=r.outcome, error=r.error
            )
            for r in results
        ],
    )
    return _respond(request, result.model_dump(mode="json"))
