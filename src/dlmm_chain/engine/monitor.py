"""PriceMonitor — polls the active bin and raises price / pool-crossing events.

State machine: IDLE -> MONITORING -> STOPPED. The polling loop checks the
state at each iteration boundary; a refresh in progress always completes.
"""
import asyncio
import contextlib
import logging
from collections.abc import Callable

from config.settings import settings
from src.dlmm_chain.domain.collaborators import DisplaySinkProtocol
from src.dlmm_chain.domain.models import Pool, PoolChain
from src.dlmm_chain.domain.registry import pool_containing
from src.dlmm_common.datetime_utils import utc_now
from src.dlmm_common.enums import MonitorState

logger = logging.getLogger(__name__)

PriceChangeCallback = Callable[[float, float | None], None]
PoolCrossingCallback = Callable[[Pool | None, Pool | None], None]


class PriceMonitor:
    def __init__(
        self,
        chain: PoolChain,
        display: DisplaySinkProtocol | None = None,
        interval_ms: int | None = None,
    ) -> None:
        self._chain = chain
        self._display = display
        self._interval_ms = settings.PRICE_CHECK_INTERVAL_MS if interval_ms is None else interval_ms
        self.state = MonitorState.IDLE
        self.current_bin_id: int | None = None
        self.current_price: float | None = None
        self._price_change_callbacks: list[PriceChangeCallback] = []
        self._pool_crossing_callbacks: list[PoolCrossingCallback] = []
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task[None] | None = None

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def on_price_change(self, callback: PriceChangeCallback) -> None:
        self._price_change_callbacks.append(callback)

    def on_pool_crossing(self, callback: PoolCrossingCallback) -> None:
        self._pool_crossing_callbacks.append(callback)

    def _trigger_price_change(self, price: float, previous_price: float | None) -> None:
        for callback in self._price_change_callbacks:
            try:
                callback(price, previous_price)
            except Exception as exc:
                logger.error("Price-change callback %r failed: %s", callback, exc)

    def _trigger_pool_crossing(self, previous_pool: Pool | None, current_pool: Pool | None) -> None:
        for callback in self._pool_crossing_callbacks:
            try:
                callback(previous_pool, current_pool)
            except Exception as exc:
                logger.error("Pool-crossing callback %r failed: %s", callback, exc)

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------

    async def refresh_price(self) -> None:
        """Query the active bin once; on failure keep the previous state."""
        if not self._chain.pools:
            logger.warning("No pools available, cannot read price")
            return

        # The active bin is shared by every pool of the pair; read it from the first
        pool = self._chain.pools[0]
        try:
            active = await pool.service.active_bin()
        except Exception as exc:
            logger.error("Failed to read active bin from pool %s: %s", pool.address[:8], exc)
            return

        previous_bin_id = self.current_bin_id
        previous_price = self.current_price
        self.current_bin_id = active.bin_id
        self.current_price = active.price
        self._chain.update_current(active.bin_id, active.price)

        self._process_bin_change(active.bin_id, previous_bin_id, active.price, previous_price)

    def _process_bin_change(
        self,
        current_bin_id: int,
        previous_bin_id: int | None,
        current_price: float,
        previous_price: float | None,
    ) -> None:
        if previous_bin_id is None:
            logger.info("First active bin: %d, price: %s", current_bin_id, current_price)
        elif current_bin_id != previous_bin_id:
            logger.info(
                "Active bin changed: %d -> %d, price: %.8f -> %.8f",
                previous_bin_id,
                current_bin_id,
                previous_price or 0.0,
                current_price,
            )
            previous_pool = pool_containing(self._chain, previous_bin_id)
            current_pool = pool_containing(self._chain, current_bin_id)
            if previous_pool is not current_pool:
                logger.info(
                    "Pool boundary crossed: %s -> %s",
                    previous_pool.address[:8] if previous_pool else "none",
                    current_pool.address[:8] if current_pool else "none",
                )
                self._trigger_pool_crossing(previous_pool, current_pool)
            self._trigger_price_change(current_price, previous_price)
        elif previous_price and current_price != previous_price:
            change_pct = abs((current_price - previous_price) / previous_price) * 100
            logger.debug(
                "Price moved %.4f%%: %.8f -> %.8f, bin stays at %d",
                change_pct,
                previous_price,
                current_price,
                current_bin_id,
            )

        if self._display is not None:
            self._display.update_market(current_price, current_bin_id, utc_now())

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start_monitoring(self) -> None:
        if self.state is MonitorState.MONITORING:
            return
        if self.state is MonitorState.STOPPED:
            logger.warning("Monitor already stopped; create a new monitor to resume")
            return

        self.state = MonitorState.MONITORING
        logger.info("Price monitoring started (interval %dms)", self._interval_ms)
        await self.refresh_price()
        self._task = asyncio.create_task(self._monitoring_loop())

    async def _monitoring_loop(self) -> None:
        while self.state is MonitorState.MONITORING:
            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(self._stop_event.wait(), timeout=self._interval_ms / 1000)
            if self.state is not MonitorState.MONITORING:
                break
            try:
                await self.refresh_price()
            except Exception:
                logger.exception("Price refresh failed, polling continues")
        logger.debug("Monitoring loop exited")

    def stop_monitoring(self) -> None:
        if self.state is not MonitorState.MONITORING:
            return
        self.state = MonitorState.STOPPED
        self._stop_event.set()
        logger.info("Price monitoring stopped")

    async def wait_closed(self) -> None:
        """Wait for the polling loop to finish its current iteration and exit."""
        if self._task is not None:
            await self._task
