"""ChainPoolsManager — wires discovery, monitor and coordinator and runs the periodic check."""

import asyncio
import contextlib
import logging

from config.settings import settings
from src.dlmm_chain.application.discovery import PoolDiscoveryService
from src.dlmm_chain.domain.collaborators import (
    DisplaySinkProtocol,
    LedgerConnectionProtocol,
    WalletSignerProtocol,
)
from src.dlmm_chain.domain.models import PoolChain
from src.dlmm_chain.engine.coordinator import AdjustmentResult, RebalanceCoordinator
from src.dlmm_chain.engine.monitor import PriceMonitor
from src.dlmm_common.amounts import format_amount
from src.dlmm_common.errors import LedgerUnavailableError, WalletNotConfiguredError

logger = logging.getLogger(__name__)

LAMPORTS_DECIMALS = 9


class ChainPoolsManager:
    def __init__(
        self,
        connection: LedgerConnectionProtocol,
        signer: WalletSignerProtocol,
        discovery: PoolDiscoveryService,
        display: DisplaySinkProtocol,
        check_interval_ms: int | None = None,
    ) -> None:
        self._connection = connection
        self._signer = signer
        self._discovery = discovery
        self._display = display
        self._check_interval_ms = (
            settings.PERIODIC_CHECK_INTERVAL_MS if check_interval_ms is None else check_interval_ms
        )
        self.monitor: PriceMonitor | None = None
        self.coordinator: RebalanceCoordinator | None = None
        self.running = False
        self._stop_event = asyncio.Event()
        self._periodic_task: asyncio.Task[None] | None = None

    @property
    def chain(self) -> PoolChain:
        return self._discovery.chain

    async def initialize(self) -> None:
        """Verify liveness, discover pools and wire monitor -> coordinator.

        Raises WalletNotConfiguredError / LedgerUnavailableError; both are fatal.
        """
        identity = self._signer.public_identity()
        if not identity:
            raise WalletNotConfiguredError()

        slot = await self._connection.current_slot()
        if slot <= 0:
            raise LedgerUnavailableError(f"invalid slot {slot}")
        logger.info("Connected to ledger, slot %d", slot)
        logger.info("Using wallet %s", identity)

        try:
            lamports = await self._connection.get_balance(identity)
            logger.info("Wallet balance: %s SOL", format_amount(lamports, LAMPORTS_DECIMALS))
        except Exception as exc:
            logger.warning("Could not read wallet balance: %s", exc)

        chain = await self._discovery.discover_pools()
        self.monitor = PriceMonitor(chain, display=self._display)
        self.coordinator = RebalanceCoordinator(
            chain,
            self.monitor,
            self._signer,
            self._discovery,
            display=self._display,
        )
        self.monitor.on_pool_crossing(self.coordinator.handle_pool_crossing)
        logger.info("Initialization complete")

    async def start(self) -> None:
        if self.running:
            logger.warning("Manager already running")
            return
        if self.monitor is None or self.coordinator is None:
            await self.initialize()
        assert self.monitor is not None and self.coordinator is not None

        self.running = True
        self._display.update_status_message("Starting...")
        await self.monitor.start_monitoring()

        logger.info("Running initial neighbor check")
        await self.coordinator.check_and_adjust_neighboring_pools()

        self._periodic_task = asyncio.create_task(self._periodic_checks())
        self._display.update_status_message("Running")
        logger.info("Manager started")

    async def _periodic_checks(self) -> None:
        assert self.coordinator is not None
        while self.running:
            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(
                    self._stop_event.wait(), timeout=self._check_interval_ms / 1000
                )
            if not self.running:
                break
            logger.debug("Periodic neighbor check")
            try:
                await self.coordinator.check_and_adjust_neighboring_pools()
            except Exception:
                logger.exception("Periodic neighbor check failed")

    async def trigger_rebalance(self) -> tuple[bool, list[AdjustmentResult]]:
        """External trigger. Returns (skipped, results); skipped when one is in flight."""
        if self.coordinator is None:
            return True, []
        if self.coordinator.adjusting:
            logger.warning("Rebalance in progress, dropping external trigger")
            return True, []
        return False, await self.coordinator.check_and_adjust_neighboring_pools()

    async def stop(self) -> None:
        if not self.running:
            logger.warning("Manager not running")
            return
        self.running = False
        self._stop_event.set()
        if self.monitor is not None:
            self.monitor.stop_monitoring()
            await self.monitor.wait_closed()
        if self._periodic_task is not None:
            await self._periodic_task
        if self.coordinator is not None:
            await self.coordinator.wait_idle()
        self._display.update_status_message("Stopped")
        logger.info("Manager stopped")
