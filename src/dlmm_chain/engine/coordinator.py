"""RebalanceCoordinator — restores the BidAsk shape of the positions next to the active bin.

At most one rebalance runs at a time (``adjusting`` guard); overlapping
triggers are logged and dropped, the next natural trigger re-evaluates.
Ledger operations run strictly one after another against the one wallet.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

from config.settings import settings
from src.dlmm_chain.domain.collaborators import DisplaySinkProtocol, WalletSignerProtocol
from src.dlmm_chain.domain.models import Pool, PoolChain, Position
from src.dlmm_chain.domain.registry import (
    NeighborCompliance,
    PositionCompliance,
    check_neighboring_compliance,
    pool_containing,
)
from src.dlmm_chain.engine.monitor import PriceMonitor
from src.dlmm_common.enums import AdjustmentOutcome, Side, StrategyType
from src.dlmm_common.errors import AddLiquidityError, RemoveLiquidityError

logger = logging.getLogger(__name__)

FULL_BPS = 10_000


class PoolRefresher(Protocol):
    async def refresh_pool(self, pool: Pool) -> None: ...

    def update_pools_display(self) -> None: ...

    def mark_adjusting(self, position_address: str, active: bool) -> None: ...


@dataclass(frozen=True)
class AdjustmentResult:
    position: str
    side: Side
    outcome: AdjustmentOutcome
    error: str | None = None


class RebalanceCoordinator:
    def __init__(
        self,
        chain: PoolChain,
        monitor: PriceMonitor,
        signer: WalletSignerProtocol,
        refresher: PoolRefresher,
        display: DisplaySinkProtocol | None = None,
        settle_delay_ms: int | None = None,
    ) -> None:
        self._chain = chain
        self._monitor = monitor
        self._signer = signer
        self._refresher = refresher
        self._display = display
        self._settle_delay_ms = (
            settings.POST_REMOVE_SETTLE_MS if settle_delay_ms is None else settle_delay_ms
        )
        self.adjusting = False
        self._tasks: set[asyncio.Task[list[AdjustmentResult]]] = set()

    def _status(self, message: str) -> None:
        if self._display is not None:
            self._display.update_status_message(message)

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------

    def handle_pool_crossing(self, previous_pool: Pool | None, current_pool: Pool | None) -> None:
        """Monitor callback: schedule a rebalance without blocking the polling loop."""
        if self.adjusting:
            logger.warning("Rebalance in progress, dropping pool-crossing trigger")
            return
        if current_pool is None:
            logger.warning("Price left every tracked pool, monitoring only")
            self._status("Price out of range, monitoring only")
            return
        task = asyncio.get_running_loop().create_task(self.check_and_adjust_neighboring_pools())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def wait_idle(self) -> None:
        """Await rebalances scheduled from monitor callbacks."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks))

    # ------------------------------------------------------------------
    # Check + adjust
    # ------------------------------------------------------------------

    async def check_and_adjust_neighboring_pools(self) -> list[AdjustmentResult]:
        if self.adjusting:
            logger.warning("Rebalance in progress, skipping check")
            return []

        self.adjusting = True
        results: list[AdjustmentResult] = []
        try:
            current_bin_id = self._monitor.current_bin_id
            logger.info(
                "Checking neighbor positions: price=%s, active bin=%s",
                self._monitor.current_price,
                current_bin_id,
            )
            self._status("Checking neighbor positions...")

            pool = pool_containing(self._chain, current_bin_id) if current_bin_id is not None else None
            if pool is None:
                logger.info("Active bin %s is outside every tracked pool, no adjustment", current_bin_id)
                self._status("Price out of range, monitoring only")
                return results

            report = check_neighboring_compliance(self._chain)
            _log_report(report)

            targets = report.non_compliant_neighbors()
            if not targets:
                logger.info("All neighbor positions match the BidAsk model")
                self._status("All positions normal")
                return results

            logger.info("%d position(s) need rebalancing", len(targets))
            self._status(f"Rebalancing {len(targets)} position(s)")
            for target in targets:
                results.append(await self.adjust_position(pool, target.position, target.side))

            logger.info("Finished rebalancing neighbor positions")
            self._status("Rebalance complete")
            return results
        except Exception:
            logger.exception("Check-and-adjust cycle aborted")
            self._status("Rebalance cycle failed, retrying on next trigger")
            return results
        finally:
            self.adjusting = False
            self._update_display()

    async def adjust_position(self, pool: Pool, position: Position, side: Side) -> AdjustmentResult:
        """Remove 100% of the position, then re-add the same totals as a BidAsk shape."""
        address = position.address
        bin_range = position.bin_range
        total_x, total_y = position.total_x, position.total_y
        owner = self._signer.public_identity()
        logger.info(
            "Rebalancing position %s bins %s (%s): x=%d y=%d",
            address,
            bin_range,
            side.value,
            total_x,
            total_y,
        )
        self._status(f"Rebalancing position {address[:8]}...")
        self._refresher.mark_adjusting(address, True)
        self._update_display()

        try:
            try:
                intent = await pool.service.remove_liquidity(
                    address, owner, bin_range, bps=FULL_BPS, should_claim_and_close=False
                )
                signature = await self._signer.sign_and_submit(intent)
            except Exception as exc:
                err = RemoveLiquidityError(address, str(exc))
                logger.error(err.message)
                self._status("Rebalance failed: remove liquidity error")
                return AdjustmentResult(address, side, AdjustmentOutcome.REMOVE_FAILED, err.message)
            logger.info("Removed liquidity from %s (%s)", address, signature)

            if self._settle_delay_ms > 0:
                await asyncio.sleep(self._settle_delay_ms / 1000)
            await self._refresh(pool)

            try:
                intent = await pool.service.add_liquidity_by_strategy(
                    address,
                    owner,
                    bin_range,
                    total_x,
                    total_y,
                    StrategyType.BID_ASK,
                    single_sided_x=side is Side.ABOVE,
                )
                signature = await self._signer.sign_and_submit(intent)
            except Exception as exc:
                # Capital stays in the wallet until the next successful cycle
                err = AddLiquidityError(address, str(exc))
                logger.error(err.message)
                self._status("Rebalance failed: add liquidity error")
                return AdjustmentResult(address, side, AdjustmentOutcome.ADD_FAILED, err.message)
            logger.info("Re-added BidAsk liquidity to %s (%s)", address, signature)
            return AdjustmentResult(address, side, AdjustmentOutcome.REBALANCED)
        finally:
            self._refresher.mark_adjusting(address, False)
            await self._refresh(pool)

    def _update_display(self) -> None:
        try:
            self._refresher.update_pools_display()
        except Exception:
            logger.exception("Failed to update pools display")

    async def _refresh(self, pool: Pool) -> None:
        try:
            await self._refresher.refresh_pool(pool)
        except Exception as exc:
            logger.error("Failed to refresh pool %s: %s", pool.address[:8], exc)


def _log_report(report: NeighborCompliance) -> None:
    def _line(label: str, pc: PositionCompliance | None) -> None:
        if pc is None:
            logger.info("- %s position: none", label)
        else:
            logger.info(
                "- %s position (%s...): %s",
                label,
                pc.position.address[:8],
                "compliant" if pc.is_compliant else "NOT compliant",
            )

    logger.info("Neighbor compliance:")
    _line("lower", report.lower)
    _line("current", report.current)
    _line("higher", report.higher)
