"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Connectivity (ledger RPC, AMM bridge)
  2xxx: Data shape (bin payloads)
  3xxx: Adjustment (remove / re-add liquidity)
  4xxx: Chain state
  9xxx: Startup / System
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Connectivity ---

class LedgerUnavailableError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(1001, f"Ledger RPC unavailable: {detail}", 503)


class RetryExhaustedError(AppError):
    def __init__(self, context: str, attempts: int, last_error: str) -> None:
        super().__init__(
            1002,
            f"{context} failed after {attempts} attempts: {last_error}",
            503,
        )


class BridgeRequestError(AppError):
    def __init__(self, path: str, detail: str) -> None:
        super().__init__(1003, f"AMM bridge request {path} failed: {detail}", 502)


# --- 2xxx: Data shape ---

class BinDataShapeError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(2001, f"Unrecognised bin payload: {detail}", 422)


# --- 3xxx: Adjustment ---

class RemoveLiquidityError(AppError):
    def __init__(self, position: str, detail: str) -> None:
        super().__init__(3001, f"Remove liquidity failed for {position}: {detail}", 502)


class AddLiquidityError(AppError):
    def __init__(self, position: str, detail: str) -> None:
        super().__init__(3002, f"Add liquidity failed for {position}: {detail}", 502)


# --- 4xxx: Chain state ---

class PoolNotFoundError(AppError):
    def __init__(self, address: str) -> None:
        super().__init__(4001, f"Pool not found: {address}", 404)


# --- 9xxx: Startup / System ---

class WalletNotConfiguredError(AppError):
    def __init__(self) -> None:
        super().__init__(
            9001,
            "No wallet identity configured; set WALLET_ADDRESS and provision the bridge key",
            500,
        )
