"""Tests for dlmm_common.errors and dlmm_common.response."""

from src.dlmm_common.errors import (
    AddLiquidityError,
    AppError,
    BinDataShapeError,
    BridgeRequestError,
    LedgerUnavailableError,
    PoolNotFoundError,
    RemoveLiquidityError,
    RetryExhaustedError,
    WalletNotConfiguredError,
)
from src.dlmm_common.response import error_response, success_response


class TestAppError:
    def test_base_error(self) -> None:
        err = AppError(code=9002, message="Internal error")
        assert err.code == 9002
        assert err.message == "Internal error"
        assert err.http_status == 500

    def test_custom_http_status(self) -> None:
        err = AppError(code=4001, message="Pool not found", http_status=404)
        assert err.http_status == 404

    def test_is_exception(self) -> None:
        err = AppError(code=1001, message="test")
        assert isinstance(err, Exception)


class TestSpecificErrors:
    def test_ledger_unavailable(self) -> None:
        err = LedgerUnavailableError("connection refused")
        assert err.code == 1001
        assert err.http_status == 503
        assert "connection refused" in err.message

    def test_retry_exhausted(self) -> None:
        err = RetryExhaustedError("getSlot", 4, "timeout")
        assert err.code == 1002
        assert "4 attempts" in err.message
        assert "timeout" in err.message

    def test_bridge_request(self) -> None:
        err = BridgeRequestError("/transactions", "HTTP 500")
        assert err.code == 1003
        assert err.http_status == 502

    def test_bin_data_shape(self) -> None:
        err = BinDataShapeError("amount 'abc' is not an integer")
        assert err.code == 2001
        assert err.http_status == 422

    def test_adjustment_errors(self) -> None:
        assert RemoveLiquidityError("POS", "slippage").code == 3001
        assert AddLiquidityError("POS", "funds").code == 3002
        assert "POS" in AddLiquidityError("POS", "funds").message

    def test_pool_not_found(self) -> None:
        err = PoolNotFoundError("POOL_A")
        assert err.code == 4001
        assert err.http_status == 404

    def test_wallet_not_configured(self) -> None:
        assert WalletNotConfiguredError().code == 9001


class TestApiResponse:
    def test_success(self) -> None:
        resp = success_response({"pool": "abc"})
        assert resp.code == 0
        assert resp.message == "success"
        assert resp.data == {"pool": "abc"}

    def test_error(self) -> None:
        resp = error_response(4001, "Pool not found")
        assert resp.code == 4001
        assert resp.message == "Pool not found"
        assert resp.data is None

    def test_serialization(self) -> None:
        resp = success_response({"bin_id": 7})
        d = resp.model_dump()
        assert "code" in d
        assert "message" in d
        assert "data" in d
        assert "timestamp" in d
        assert "request_id" in d
