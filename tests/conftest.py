"""
Pytest Configuration and Fixtures

Shared fixtures for the clinical workflow server tests.
"""
from datetime import datetime, timezone

import httpx
import pytest

from md_mcp_server.config import Settings
from md_mcp_server.http_server import create_http_app
from md_mcp_server.main import build_registries
from md_mcp_server.reference import load_reference_data


@pytest.fixture
def reference():
    """Bundled clinical reference tables."""
    return load_reference_data()


@pytest.fixture
def now() -> datetime:
    """Fixed evaluation time so generated ids and dates are stable."""
    return datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def registries():
    """Tool, resource and prompt registries as the server builds them."""
    return build_registries()


@pytest.fixture
def settings() -> Settings:
    return Settings(max_sessions=2)


@pytest.fixture
def app(settings):
    return create_http_app(settings)


@pytest.fixture
async def async_client(app):
    """Create async test client."""
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client
