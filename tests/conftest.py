"""Shared test fixtures."""

from unittest.mock import MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from src.dlmm_chain.infrastructure.display_sink import InMemoryDisplaySink
from src.main import app


@pytest.fixture
def display() -> InMemoryDisplaySink:
    return InMemoryDisplaySink()


@pytest.fixture
async def client(display: InMemoryDisplaySink) -> AsyncClient:
    """Async HTTP client for the status API; lifespan is not run, state is injected."""
    app.state.display = display
    app.state.manager = MagicMock()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
