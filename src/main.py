"""FastAPI application entry point — runs the chain manager and serves its status.

Run with: uvicorn src.main:app --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config.settings import settings
from src.dlmm_chain.api.router import router as chain_router
from src.dlmm_chain.application.discovery import PoolDiscoveryService
from src.dlmm_chain.application.manager import ChainPoolsManager
from src.dlmm_chain.infrastructure.bridge_client import BridgeWalletSigner, HttpPoolService
from src.dlmm_chain.infrastructure.display_sink import InMemoryDisplaySink
from src.dlmm_chain.infrastructure.rpc_connection import JsonRpcLedgerConnection
from src.dlmm_common.errors import AppError
from src.dlmm_common.logging_config import configure_logging
from src.dlmm_common.response import error_response
from src.dlmm_gateway.middleware.request_log import RequestLogMiddleware

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: connect, discover, start monitoring. Startup errors are fatal."""
    configure_logging()
    logger.info("Starting %s v%s", settings.APP_NAME, settings.APP_VERSION)

    rpc_client = httpx.AsyncClient(timeout=settings.RPC_TIMEOUT_SECONDS)
    bridge_client = httpx.AsyncClient(
        base_url=settings.AMM_BRIDGE_URL, timeout=settings.AMM_BRIDGE_TIMEOUT_SECONDS
    )
    display = InMemoryDisplaySink()
    signer = BridgeWalletSigner(bridge_client, settings.WALLET_ADDRESS)
    discovery = PoolDiscoveryService(
        signer,
        lambda address: HttpPoolService(bridge_client, address),
        display,
    )
    manager = ChainPoolsManager(JsonRpcLedgerConnection(rpc_client), signer, discovery, display)
    app.state.display = display
    app.state.manager = manager

    try:
        await manager.start()
        yield
    finally:
        if manager.running:
            await manager.stop()
        await bridge_client.aclose()
        await rpc_client.aclose()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(chain_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": settings.APP_VERSION}
