"""PoolDiscoveryService — loads the wallet's pools/positions and publishes display rows.

Positions are always re-fetched and replaced wholesale; local state is a
cache of the ledger, never authoritative.
"""

import logging
from collections.abc import Callable

from config.settings import settings
from src.dlmm_chain.application.schemas import PoolDisplayRow
from src.dlmm_chain.domain.bin_parser import extract_bins
from src.dlmm_chain.domain.collaborators import (
    DisplaySinkProtocol,
    PoolServiceProtocol,
    WalletSignerProtocol,
)
from src.dlmm_chain.domain.compliance import position_compliance, side_for_position
from src.dlmm_chain.domain.models import Pool, PoolChain, Position
from src.dlmm_common.amounts import truncate_address
from src.dlmm_common.enums import PoolStatus
from src.dlmm_common.retry import with_retry

logger = logging.getLogger(__name__)

PoolServiceFactory = Callable[[str], PoolServiceProtocol]


class PoolDiscoveryService:
    def __init__(
        self,
        signer: WalletSignerProtocol,
        pool_service_factory: PoolServiceFactory,
        display: DisplaySinkProtocol,
        pool_addresses: list[str] | None = None,
    ) -> None:
        self._signer = signer
        self._factory = pool_service_factory
        self._display = display
        self._pool_addresses = (
            list(settings.POOL_ADDRESSES) if pool_addresses is None else pool_addresses
        )
        self.chain = PoolChain()
        self.adjusting_positions: set[str] = set()

    async def discover_pools(self) -> PoolChain:
        owner = self._signer.public_identity()
        logger.info(
            "Searching %d configured pool(s) for positions of %s",
            len(self._pool_addresses),
            owner,
        )

        for address in self._pool_addresses:
            try:
                pool = await self._load_pool(address)
            except Exception as exc:
                logger.error("Failed to load pool %s: %s", address, exc)
                continue
            if pool is None:
                continue
            self.chain.add_pool(pool)
            self._log_pool_summary(pool)

        if not self.chain.pools:
            logger.warning("No pool holds positions of this wallet")
            self._display.update_status_message("No wallet pools found")
        else:
            logger.info("Discovered %d pool(s)", len(self.chain.pools))
            self._display.update_status_message(f"Found {len(self.chain.pools)} pool(s)")
            self.update_pools_display()
        return self.chain

    async def _load_pool(self, address: str) -> Pool | None:
        service = self._factory(address)
        token_x, token_y = await with_retry(
            service.token_info,
            f"pool info ({address})",
            max_retries=settings.MAX_POOL_FETCH_RETRIES,
        )
        pool = Pool(address=address, token_x=token_x, token_y=token_y, service=service)
        await self.refresh_pool(pool)
        if not pool.positions:
            logger.info("Pool %s has no usable positions, skipping", address)
            return None
        logger.info("Found %d position(s) in pool %s", len(pool.positions), address)
        return pool

    async def refresh_pool(self, pool: Pool) -> None:
        """Re-fetch the owner's positions in ``pool`` and swap them in."""
        owner = self._signer.public_identity()
        raw_positions = await with_retry(
            lambda: pool.service.positions_for_owner(owner),
            f"positions ({pool.address})",
            max_retries=settings.MAX_POSITION_FETCH_RETRIES,
        )

        positions: list[Position] = []
        for raw in raw_positions:
            bins = extract_bins(raw.data, raw.address)
            if not bins:
                logger.warning("Position %s has no usable bin data, skipping", raw.address)
                continue
            position = Position(
                address=raw.address,
                bins=tuple(bins),
                token_x_decimals=pool.token_x.decimals,
                token_y_decimals=pool.token_y.decimals,
            )
            formatted_x, formatted_y = position.formatted_liquidity()
            logger.debug(
                "Loaded position %s...: %d bins, %s %s, %s %s",
                raw.address[:8],
                len(bins),
                formatted_x,
                pool.token_x.symbol,
                formatted_y,
                pool.token_y.symbol,
            )
            positions.append(position)

        pool.replace_positions(positions)
        self.chain.sort_pools()

    def _log_pool_summary(self, pool: Pool) -> None:
        summary = pool.summary()
        logger.info("========== Pool summary ==========")
        logger.info("Pool: %s", summary["address"])
        logger.info("Tokens: %s/%s", pool.token_x.symbol, pool.token_y.symbol)
        logger.info("Positions: %d", summary["position_count"])
        logger.info(
            "Bins: %d to %d (%d bins)",
            summary["bin_range"]["min"],
            summary["bin_range"]["max"],
            summary["bin_range"]["count"],
        )
        logger.info("Price range: %s", summary["price_range"])
        logger.info(
            "Liquidity: %s %s, %s %s",
            summary["liquidity"]["x"]["formatted"],
            pool.token_x.symbol,
            summary["liquidity"]["y"]["formatted"],
            pool.token_y.symbol,
        )

    def mark_adjusting(self, position_address: str, active: bool) -> None:
        if active:
            self.adjusting_positions.add(position_address)
        else:
            self.adjusting_positions.discard(position_address)

    def build_display_rows(self) -> list[PoolDisplayRow]:
        current_bin_id = self.chain.current_bin_id
        rows: list[PoolDisplayRow] = []
        for pool in self.chain.pools:
            if not pool.positions:
                formatted_x, formatted_y = pool.formatted_liquidity()
                rows.append(
                    PoolDisplayRow(
                        address=pool.address,
                        bin_range=pool.bin_range_string(),
                        price_range=pool.price_range_string(),
                        token_x=f"{formatted_x} {pool.token_x.symbol}",
                        token_y=f"{formatted_y} {pool.token_y.symbol}",
                    )
                )
                continue

            for position in sorted(pool.positions, key=lambda p: p.max_bin_id, reverse=True):
                formatted_x, formatted_y = position.formatted_liquidity()
                status = PoolStatus.NORMAL
                is_bid_ask: bool | None = None
                if current_bin_id is not None:
                    if position.contains_bin(current_bin_id):
                        status = PoolStatus.CURRENT
                    side = side_for_position(position, current_bin_id)
                    is_bid_ask = position_compliance(position, side)
                if position.address in self.adjusting_positions:
                    status = PoolStatus.ADJUSTING
                rows.append(
                    PoolDisplayRow(
                        address=pool.address,
                        bin_range=str(position.bin_range),
                        price_range=position.price_range_string(),
                        token_x=f"{formatted_x} {pool.token_x.symbol}",
                        token_y=f"{formatted_y} {pool.token_y.symbol}",
                        status=status,
                        is_bid_ask=is_bid_ask,
                        position_id=truncate_address(position.address, 8),
                    )
                )
        return rows

    def update_pools_display(self) -> None:
        self._display.update_pools_data(self.build_display_rows())
