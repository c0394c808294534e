"""JSON-RPC ledger connection — liveness (getSlot) and SOL balance only."""

import logging
from typing import Any

import httpx

from config.settings import settings
from src.dlmm_common.errors import LedgerUnavailableError
from src.dlmm_common.retry import with_retry

logger = logging.getLogger(__name__)


class JsonRpcLedgerConnection:
    def __init__(self, client: httpx.AsyncClient, endpoint: str | None = None) -> None:
        self._client = client
        self._endpoint = endpoint or settings.RPC_ENDPOINT
        self._request_id = 0

    async def _call(self, method: str, params: list[Any]) -> Any:
        self._request_id += 1
        body = {"jsonrpc": "2.0", "id": self._request_id, "method": method, "params": params}
        try:
            resp = await self._client.post(self._endpoint, json=body)
            resp.raise_for_status()
            payload = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise LedgerUnavailableError(f"{method}: {exc}") from exc
        if "error" in payload:
            error = payload["error"]
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise LedgerUnavailableError(f"{method}: {message}")
        return payload.get("result")

    async def current_slot(self) -> int:
        slot = await with_retry(
            lambda: self._call("getSlot", [{"commitment": "confirmed"}]),
            "getSlot",
        )
        if not isinstance(slot, int) or slot <= 0:
            raise LedgerUnavailableError(f"invalid slot {slot!r}")
        logger.debug("Ledger reachable, slot %d", slot)
        return slot

    async def get_balance(self, address: str) -> int:
        """Balance in lamports."""
        result = await with_retry(
            lambda: self._call("getBalance", [address, {"commitment": "confirmed"}]),
            f"getBalance ({address})",
        )
        return int(result["value"])
