"""Domain models for dlmm_chain — pure dataclasses, no I/O.

Local state is a best-effort cache of the ledger: bin lists and position
lists are swapped wholesale on refresh, never mutated in place.
"""

from dataclasses import dataclass, field
from typing import Any

from src.dlmm_common.amounts import format_amount, format_price


@dataclass(frozen=True)
class Bin:
    """Immutable snapshot of one price bin held by a position."""

    bin_id: int
    x: int  # base units of token X
    y: int  # base units of token Y
    price: str | float | None = None  # raw per-base-unit price tag, if the SDK sent one

    @property
    def is_empty(self) -> bool:
        return self.x == 0 and self.y == 0


@dataclass(frozen=True)
class BinRange:
    min_bin_id: int
    max_bin_id: int

    def contains(self, bin_id: int) -> bool:
        return self.min_bin_id <= bin_id <= self.max_bin_id

    def __str__(self) -> str:
        return f"{self.min_bin_id}-{self.max_bin_id}"


@dataclass(frozen=True)
class TokenInfo:
    mint: str
    symbol: str
    decimals: int


@dataclass(frozen=True)
class ActiveBin:
    bin_id: int
    price: float


@dataclass(frozen=True)
class RawPosition:
    """Position as returned by the AMM service, before bin parsing."""

    address: str
    data: Any


@dataclass(frozen=True)
class TxIntent:
    """Unsigned ledger operation built by the AMM service."""

    kind: str  # "remove_liquidity" | "add_liquidity"
    payload: dict[str, Any]


def _price_range_string(bins: tuple["Bin", ...] | list["Bin"], x_decimals: int, y_decimals: int) -> str:
    if not bins:
        return "no data"
    ids = [b.bin_id for b in bins]
    lo, hi = min(ids), max(ids)
    lo_raw = next((b.price for b in bins if b.bin_id == lo and b.price), None)
    hi_raw = next((b.price for b in bins if b.bin_id == hi and b.price), None)
    if lo_raw is None or hi_raw is None:
        return "price pending"
    lo_fmt = format_price(lo_raw, x_decimals, y_decimals)
    hi_fmt = format_price(hi_raw, x_decimals, y_decimals)
    return f"{lo_fmt}-{hi_fmt}"


@dataclass
class Position:
    address: str
    bins: tuple[Bin, ...] = ()
    token_x_decimals: int = 9
    token_y_decimals: int = 6

    @property
    def has_bins(self) -> bool:
        return len(self.bins) > 0

    @property
    def min_bin_id(self) -> int:
        return min(b.bin_id for b in self.bins)

    @property
    def max_bin_id(self) -> int:
        return max(b.bin_id for b in self.bins)

    @property
    def bin_range(self) -> BinRange:
        return BinRange(self.min_bin_id, self.max_bin_id)

    @property
    def total_x(self) -> int:
        return sum(b.x for b in self.bins)

    @property
    def total_y(self) -> int:
        return sum(b.y for b in self.bins)

    def contains_bin(self, bin_id: int) -> bool:
        if not self.bins:
            return False
        return self.min_bin_id <= bin_id <= self.max_bin_id

    def replace_bins(self, bins: list[Bin] | tuple[Bin, ...]) -> None:
        self.bins = tuple(bins)

    def formatted_liquidity(self) -> tuple[str, str]:
        return (
            format_amount(self.total_x, self.token_x_decimals),
            format_amount(self.total_y, self.token_y_decimals),
        )

    def price_range_string(self) -> str:
        return _price_range_string(self.bins, self.token_x_decimals, self.token_y_decimals)


@dataclass
class Pool:
    """One DLMM pair; its bin range is the union of its positions' ranges."""

    address: str
    token_x: TokenInfo
    token_y: TokenInfo
    positions: list[Position] = field(default_factory=list)
    # AMM service bound to this pool; held for the coordinator, never called here
    service: Any = field(default=None, repr=False, compare=False)

    def all_bins(self) -> list[Bin]:
        return [b for p in self.positions for b in p.bins]

    def bin_ids(self) -> list[int]:
        return [b.bin_id for b in self.all_bins()]

    @property
    def bin_range(self) -> BinRange | None:
        ids = self.bin_ids()
        if not ids:
            return None
        return BinRange(min(ids), max(ids))

    def contains_bin(self, bin_id: int) -> bool:
        rng = self.bin_range
        return rng is not None and rng.contains(bin_id)

    def bin_range_string(self) -> str:
        rng = self.bin_range
        return str(rng) if rng is not None else "no data"

    def price_range_string(self) -> str:
        return _price_range_string(self.all_bins(), self.token_x.decimals, self.token_y.decimals)

    def has_only_token_x(self) -> bool:
        if not self.positions:
            return False
        return all(b.y == 0 for b in self.all_bins())

    def has_only_token_y(self) -> bool:
        if not self.positions:
            return False
        return all(b.x == 0 for b in self.all_bins())

    def total_liquidity(self) -> tuple[int, int]:
        return (
            sum(p.total_x for p in self.positions),
            sum(p.total_y for p in self.positions),
        )

    def formatted_liquidity(self) -> tuple[str, str]:
        total_x, total_y = self.total_liquidity()
        return (
            format_amount(total_x, self.token_x.decimals),
            format_amount(total_y, self.token_y.decimals),
        )

    def replace_positions(self, positions: list[Position]) -> None:
        self.positions = list(positions)

    def summary(self) -> dict[str, Any]:
        rng = self.bin_range
        if rng is None:
            return {"address": self.address, "position_count": 0}
        total_x, total_y = self.total_liquidity()
        formatted_x, formatted_y = self.formatted_liquidity()
        return {
            "address": self.address,
            "position_count": len(self.positions),
            "bin_range": {
                "min": rng.min_bin_id,
                "max": rng.max_bin_id,
                "count": len(self.bin_ids()),
            },
            "price_range": self.price_range_string(),
            "liquidity": {
                "x": {"amount": str(total_x), "formatted": formatted_x, "symbol": self.token_x.symbol},
                "y": {"amount": str(total_y), "formatted": formatted_y, "symbol": self.token_y.symbol},
            },
            "tokens": {
                "x": {"symbol": self.token_x.symbol, "decimals": self.token_x.decimals, "mint": self.token_x.mint},
                "y": {"symbol": self.token_y.symbol, "decimals": self.token_y.decimals, "mint": self.token_y.mint},
            },
        }


@dataclass
class PoolChain:
    """Pools sorted by ascending minimum bin id, plus the last observed market state."""

    pools: list[Pool] = field(default_factory=list)
    current_bin_id: int | None = None
    current_price: float | None = None

    def add_pool(self, pool: Pool) -> None:
        self.pools.append(pool)
        self.sort_pools()

    def sort_pools(self) -> None:
        # Pools without bins keep their relative order at the end
        self.pools.sort(
            key=lambda p: (p.bin_range is None, p.bin_range.min_bin_id if p.bin_range else 0)
        )

    def get_pool_by_address(self, address: str) -> Pool | None:
        return next((p for p in self.pools if p.address == address), None)

    def update_current(self, bin_id: int, price: float) -> None:
        self.current_bin_id = bin_id
        self.current_price = price

    def current_pool(self) -> Pool | None:
        if self.current_bin_id is None:
            return None
        return next((p for p in self.pools if p.contains_bin(self.current_bin_id)), None)

    def lower_pool(self) -> Pool | None:
        pool = self.current_pool()
        if pool is None:
            return None
        idx = self.pools.index(pool)
        return self.pools[idx - 1] if idx > 0 else None

    def higher_pool(self) -> Pool | None:
        pool = self.current_pool()
        if pool is None:
            return None
        idx = self.pools.index(pool)
        return self.pools[idx + 1] if idx < len(self.pools) - 1 else None
