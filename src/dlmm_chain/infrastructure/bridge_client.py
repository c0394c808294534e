"""HTTP adapters for the AMM bridge (DLMM SDK sidecar that also holds the signing key).

Bridge endpoints:
  GET  /pools/{address}                    token metadata
  GET  /pools/{address}/active-bin         {"binId", "price"}
  GET  /pools/{address}/positions?owner=   {"userPositions": [{"publicKey", ...}]}
  POST /pools/{address}/remove-liquidity   unsigned tx intent
  POST /pools/{address}/add-liquidity      unsigned tx intent
  POST /transactions                       sign + submit, returns {"signature"}
"""

import logging
from typing import Any

import httpx

from src.dlmm_chain.domain.bin_parser import BIN_ID_PROBES, first_match
from src.dlmm_chain.domain.models import ActiveBin, BinRange, RawPosition, TokenInfo, TxIntent
from src.dlmm_common.enums import StrategyType
from src.dlmm_common.errors import BridgeRequestError

logger = logging.getLogger(__name__)

_DEFAULT_X_DECIMALS = 9
_DEFAULT_Y_DECIMALS = 6


async def _request(
    client: httpx.AsyncClient,
    method: str,
    path: str,
    *,
    params: dict[str, Any] | None = None,
    json: dict[str, Any] | None = None,
) -> Any:
    try:
        resp = await client.request(method, path, params=params, json=json)
        resp.raise_for_status()
        return resp.json()
    except httpx.HTTPStatusError as exc:
        raise BridgeRequestError(path, f"HTTP {exc.response.status_code}: {exc.response.text}") from exc
    except (httpx.HTTPError, ValueError) as exc:
        raise BridgeRequestError(path, str(exc)) from exc


def _token(data: dict[str, Any] | None, default_decimals: int, fallback: str) -> TokenInfo:
    data = data or {}
    mint = str(data.get("mint") or data.get("publicKey") or "unknown")
    symbol = data.get("symbol") or (f"{mint[:6]}..." if mint != "unknown" else fallback)
    decimals = data.get("decimals")
    return TokenInfo(
        mint=mint,
        symbol=symbol,
        decimals=int(decimals) if decimals is not None else default_decimals,
    )


class HttpPoolService:
    """PoolServiceProtocol over the bridge, bound to one pool address."""

    def __init__(self, client: httpx.AsyncClient, address: str) -> None:
        self._client = client
        self.address = address

    async def token_info(self) -> tuple[TokenInfo, TokenInfo]:
        data = await _request(self._client, "GET", f"/pools/{self.address}")
        return (
            _token(data.get("tokenX"), _DEFAULT_X_DECIMALS, "UnknownX"),
            _token(data.get("tokenY"), _DEFAULT_Y_DECIMALS, "UnknownY"),
        )

    async def active_bin(self) -> ActiveBin:
        data = await _request(self._client, "GET", f"/pools/{self.address}/active-bin")
        probe = first_match(BIN_ID_PROBES, data)
        if probe is None:
            raise BridgeRequestError(f"/pools/{self.address}/active-bin", "missing bin id")
        bin_id = probe.probe(data)
        raw_price = data.get("price")
        # Without a price tag the bin id is the best available ordering proxy
        price = float(raw_price) if raw_price is not None else float(bin_id)
        return ActiveBin(bin_id=int(bin_id), price=price)

    async def positions_for_owner(self, owner: str) -> list[RawPosition]:
        data = await _request(
            self._client, "GET", f"/pools/{self.address}/positions", params={"owner": owner}
        )
        entries = data.get("userPositions", []) if isinstance(data, dict) else data
        positions = []
        for entry in entries:
            address = entry.get("publicKey") or entry.get("address")
            if not address:
                logger.warning("Skipping position entry without address in pool %s", self.address)
                continue
            positions.append(RawPosition(address=str(address), data=entry))
        return positions

    async def remove_liquidity(
        self,
        position: str,
        owner: str,
        bin_range: BinRange,
        bps: int = 10_000,
        should_claim_and_close: bool = False,
    ) -> TxIntent:
        payload = await _request(
            self._client,
            "POST",
            f"/pools/{self.address}/remove-liquidity",
            json={
                "position": position,
                "user": owner,
                "fromBinId": bin_range.min_bin_id,
                "toBinId": bin_range.max_bin_id,
                "bps": bps,
                "shouldClaimAndClose": should_claim_and_close,
            },
        )
        return TxIntent(kind="remove_liquidity", payload=payload)

    async def add_liquidity_by_strategy(
        self,
        position: str,
        owner: str,
        bin_range: BinRange,
        total_x: int,
        total_y: int,
        strategy: StrategyType,
        single_sided_x: bool,
    ) -> TxIntent:
        payload = await _request(
            self._client,
            "POST",
            f"/pools/{self.address}/add-liquidity",
            json={
                "positionPubKey": position,
                "user": owner,
                # base-unit amounts exceed JSON number precision
                "totalXAmount": str(total_x),
                "totalYAmount": str(total_y),
                "strategy": {
                    "minBinId": bin_range.min_bin_id,
                    "maxBinId": bin_range.max_bin_id,
                    "strategyType": strategy.value,
                    "singleSidedX": single_sided_x,
                },
            },
        )
        return TxIntent(kind="add_liquidity", payload=payload)


class BridgeWalletSigner:
    """WalletSignerProtocol: the bridge signs with the key provisioned for ``address``."""

    def __init__(self, client: httpx.AsyncClient, address: str) -> None:
        self._client = client
        self._address = address

    def public_identity(self) -> str:
        return self._address

    async def sign_and_submit(self, intent: TxIntent) -> str:
        data = await _request(
            self._client,
            "POST",
            "/transactions",
            json={"owner": self._address, "kind": intent.kind, "intent": intent.payload},
        )
        signature = data.get("signature")
        if not signature:
            raise BridgeRequestError("/transactions", "no signature returned")
        logger.info("Transaction confirmed: %s", signature)
        return str(signature)
