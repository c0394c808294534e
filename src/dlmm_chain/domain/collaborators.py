# src/dlmm_chain/domain/collaborators.py
"""Collaborator Protocols — interface contracts for the ledger, wallet, AMM and display."""
from datetime import datetime
from typing import Any, Protocol

from src.dlmm_chain.domain.models import ActiveBin, BinRange, RawPosition, TokenInfo, TxIntent
from src.dlmm_common.enums import StrategyType


class LedgerConnectionProtocol(Protocol):
    async def current_slot(self) -> int: ...

    async def get_balance(self, address: str) -> int: ...


class WalletSignerProtocol(Protocol):
    def public_identity(self) -> str: ...

    async def sign_and_submit(self, intent: TxIntent) -> str: ...


class PoolServiceProtocol(Protocol):
    """AMM operations for one pool; intents are signed by the wallet signer."""

    address: str

    async def token_info(self) -> tuple[TokenInfo, TokenInfo]: ...

    async def active_bin(self) -> ActiveBin: ...

    async def positions_for_owner(self, owner: str) -> list[RawPosition]: ...

    async def remove_liquidity(
        self,
        position: str,
        owner: str,
        bin_range: BinRange,
        bps: int = 10_000,
        should_claim_and_close: bool = False,
    ) -> TxIntent: ...

    async def add_liquidity_by_strategy(
        self,
        position: str,
        owner: str,
        bin_range: BinRange,
        total_x: int,
        total_y: int,
        strategy: StrategyType,
        single_sided_x: bool,
    ) -> TxIntent: ...


class DisplaySinkProtocol(Protocol):
    def update_pools_data(self, rows: list[Any]) -> None: ...

    def update_market(self, price: float, bin_id: int, updated_at: datetime) -> None: ...

    def update_status_message(self, message: str) -> None: ...
