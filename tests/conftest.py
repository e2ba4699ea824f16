"""
Pytest configuration for the MCP Lite tests.
"""

from __future__ import annotations

from typing import Any

import pytest

from mcp_lite.config import AppConfig
from mcp_lite.context import RequestContext
from mcp_lite.registry import Registry

# Configure pytest-asyncio mode
pytest_plugins = ["pytest_asyncio"]


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (deselect with '-m \"not integration\"')",
    )


@pytest.fixture
def registry() -> Registry:
    """Create an empty registry."""
    return Registry()


@pytest.fixture
def config() -> AppConfig:
    """Create a default configuration."""
    return AppConfig()


@pytest.fixture
def make_context(registry: Registry, config: AppConfig) -> Any:
    """Factory for RequestContext objects bound to the test registry."""

    def _make(method: str = "tools/call", request_id: Any = 1) -> RequestContext:
        return RequestContext(
            method=method, request_id=request_id, registry=registry, config=config
        )

    return _make
