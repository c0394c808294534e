"""Integration-test fixtures.

The manager runs for real against in-memory fakes of the AMM bridge: each
pool's positions are served from ``ledger`` so remove / re-add calls change
what the next refresh sees.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from config.settings import settings
from src.dlmm_chain.application.discovery import PoolDiscoveryService
from src.dlmm_chain.application.manager import ChainPoolsManager
from src.dlmm_chain.domain.models import ActiveBin, RawPosition, TokenInfo, TxIntent
from src.dlmm_chain.infrastructure.display_sink import InMemoryDisplaySink


class FakeLedger:
    """Positions per pool as {address: {position: [(bin_id, x, y), ...]}}."""

    def __init__(self) -> None:
        self.positions: dict[str, dict[str, list[tuple[int, int, int]]]] = {}
        self.active_bins: list[int] = []
        self.submitted: list[TxIntent] = []

    def raw_positions(self, pool: str) -> list[RawPosition]:
        return [
            RawPosition(
                address=address,
                data={
                    "positionBinData": [
                        {"binId": i, "positionXAmount": str(x), "positionYAmount": str(y)}
                        for i, x, y in bins
                    ]
                },
            )
            for address, bins in self.positions[pool].items()
        ]

    def service(self, pool: str) -> AsyncMock:
        service = AsyncMock()
        service.address = pool
        service.token_info.return_value = (
            TokenInfo("MINTX", "SOL", 9),
            TokenInfo("MINTY", "USDC", 6),
        )
        service.positions_for_owner.side_effect = lambda owner: self.raw_positions(pool)
        service.active_bin.side_effect = lambda: ActiveBin(self.active_bins[0], 0.1)

        async def remove(position, owner, bin_range, bps=10_000, should_claim_and_close=False):
            return TxIntent("remove_liquidity", {"pool": pool, "position": position})

        async def add(position, owner, bin_range, total_x, total_y, strategy, single_sided_x):
            return TxIntent(
                "add_liquidity",
                {
                    "pool": pool,
                    "position": position,
                    "range": (bin_range.min_bin_id, bin_range.max_bin_id),
                    "x": total_x,
                    "y": total_y,
                    "single_sided_x": single_sided_x,
                },
            )

        service.remove_liquidity.side_effect = remove
        service.add_liquidity_by_strategy.side_effect = add
        return service

    async def submit(self, intent: TxIntent) -> str:
        """Apply the intent to the fake positions, BidAsk-shaped linearly."""
        self.submitted.append(intent)
        payload = intent.payload
        bins = self.positions[payload["pool"]][payload["position"]]
        if intent.kind == "remove_liquidity":
            self.positions[payload["pool"]][payload["position"]] = [(i, 0, 0) for i, _, _ in bins]
        else:
            lo, hi = payload["range"]
            count = hi - lo + 1
            weights = range(1, count + 1)
            if payload["single_sided_x"]:
                shaped = [(lo + k, payload["x"] * w // sum(weights), 0) for k, w in enumerate(weights)]
            else:
                shaped = [
                    (lo + k, 0, payload["y"] * w // sum(weights))
                    for k, w in enumerate(reversed(weights))
                ]
            self.positions[payload["pool"]][payload["position"]] = shaped
        return f"sig{len(self.submitted)}"


@pytest.fixture(autouse=True)
def fast_timings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "POST_REMOVE_SETTLE_MS", 0)
    monkeypatch.setattr(settings, "PRICE_CHECK_INTERVAL_MS", 60_000)


@pytest.fixture
def ledger() -> FakeLedger:
    return FakeLedger()


@pytest.fixture
def display() -> InMemoryDisplaySink:
    return InMemoryDisplaySink()


@pytest.fixture
def manager(ledger: FakeLedger, display: InMemoryDisplaySink) -> ChainPoolsManager:
    connection = AsyncMock()
    connection.current_slot.return_value = 1
    connection.get_balance.return_value = 10**9

    signer = MagicMock()
    signer.public_identity.return_value = "OWNER"
    signer.sign_and_submit = AsyncMock(side_effect=ledger.submit)

    discovery = PoolDiscoveryService(
        signer, ledger.service, display, pool_addresses=["POOL_B", "POOL_A"]
    )
    return ChainPoolsManager(connection, signer, discovery, display, check_interval_ms=60_000)
