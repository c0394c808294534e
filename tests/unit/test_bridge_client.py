"""Unit tests for the AMM bridge adapters."""

import json

import httpx
import pytest

from src.dlmm_chain.domain.models import BinRange, TxIntent
from src.dlmm_chain.infrastructure.bridge_client import BridgeWalletSigner, HttpPoolService
from src.dlmm_common.enums import StrategyType
from src.dlmm_common.errors import BridgeRequestError


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://bridge.test")


class TestHttpPoolService:
    async def test_token_info(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/pools/POOL_A"
            return httpx.Response(
                200,
                json={
                    "tokenX": {"mint": "So111", "symbol": "SOL", "decimals": 9},
                    "tokenY": {"publicKey": "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"},
                },
            )

        async with _client(handler) as client:
            token_x, token_y = await HttpPoolService(client, "POOL_A").token_info()
        assert (token_x.symbol, token_x.decimals) == ("SOL", 9)
        assert token_y.symbol == "EPjFWd..."
        assert token_y.decimals == 6

    async def test_active_bin(self) -> None:
        handler = lambda request: httpx.Response(200, json={"binId": -12, "price": "0.1523"})  # noqa: E731
        async with _client(handler) as client:
            active = await HttpPoolService(client, "POOL_A").active_bin()
        assert active.bin_id == -12
        assert active.price == pytest.approx(0.1523)

    async def test_active_bin_without_id(self) -> None:
        handler = lambda request: httpx.Response(200, json={"price": "1"})  # noqa: E731
        async with _client(handler) as client:
            with pytest.raises(BridgeRequestError):
                await HttpPoolService(client, "POOL_A").active_bin()

    async def test_positions_for_owner(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.params["owner"] == "OWNER"
            return httpx.Response(
                200,
                json={"userPositions": [{"publicKey": "POS1", "positionData": {}}, {"bad": True}]},
            )

        async with _client(handler) as client:
            positions = await HttpPoolService(client, "POOL_A").positions_for_owner("OWNER")
        assert [p.address for p in positions] == ["POS1"]
        assert positions[0].data["positionData"] == {}

    async def test_remove_liquidity_payload(self) -> None:
        bodies: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json={"tx": "base64"})

        async with _client(handler) as client:
            intent = await HttpPoolService(client, "POOL_A").remove_liquidity(
                "POS1", "OWNER", BinRange(8, 10)
            )
        assert intent == TxIntent("remove_liquidity", {"tx": "base64"})
        assert bodies[0] == {
            "position": "POS1",
            "user": "OWNER",
            "fromBinId": 8,
            "toBinId": 10,
            "bps": 10_000,
            "shouldClaimAndClose": False,
        }

    async def test_add_liquidity_payload(self) -> None:
        bodies: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/pools/POOL_A/add-liquidity"
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json={"tx": "base64"})

        async with _client(handler) as client:
            intent = await HttpPoolService(client, "POOL_A").add_liquidity_by_strategy(
                "POS1", "OWNER", BinRange(8, 10), 10**20, 0, StrategyType.BID_ASK, True
            )
        assert intent.kind == "add_liquidity"
        assert bodies[0]["totalXAmount"] == "100000000000000000000"
        assert bodies[0]["strategy"] == {
            "minBinId": 8,
            "maxBinId": 10,
            "strategyType": "BidAsk",
            "singleSidedX": True,
        }

    async def test_http_error_wrapped(self) -> None:
        handler = lambda request: httpx.Response(500, text="sdk exploded")  # noqa: E731
        async with _client(handler) as client:
            with pytest.raises(BridgeRequestError) as exc:
                await HttpPoolService(client, "POOL_A").token_info()
        assert exc.value.code == 1003
        assert "sdk exploded" in exc.value.message


class TestBridgeWalletSigner:
    async def test_sign_and_submit(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            assert body == {"owner": "OWNER", "kind": "add_liquidity", "intent": {"tx": "t"}}
            return httpx.Response(200, json={"signature": "5igNaTuRe"})

        async with _client(handler) as client:
            signer = BridgeWalletSigner(client, "OWNER")
            assert signer.public_identity() == "OWNER"
            assert await signer.sign_and_submit(TxIntent("add_liquidity", {"tx": "t"})) == "5igNaTuRe"

    async def test_missing_signature(self) -> None:
        handler = lambda request: httpx.Response(200, json={})  # noqa: E731
        async with _client(handler) as client:
            with pytest.raises(BridgeRequestError):
                await BridgeWalletSigner(client, "OWNER").sign_and_submit(TxIntent("x", {}))
