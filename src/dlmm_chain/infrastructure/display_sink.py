"""In-memory display sink read by the status API."""

from datetime import datetime
from typing import Any

from src.dlmm_chain.application.schemas import PoolDisplayRow


class InMemoryDisplaySink:
    def __init__(self) -> None:
        self.rows: list[PoolDisplayRow] = []
        self.current_price: float | None = None
        self.current_bin_id: int | None = None
        self.last_updated: datetime | None = None
        self.status_message: str = ""

    def update_pools_data(self, rows: list[Any]) -> None:
        self.rows = list(rows)

    def update_market(self, price: float, bin_id: int, updated_at: datetime) -> None:
        self.current_price = price
        self.current_bin_id = bin_id
        self.last_updated = updated_at

    def update_status_message(self, message: str) -> None:
        self.status_message = message
