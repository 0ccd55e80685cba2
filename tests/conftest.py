"""Pytest configuration and fixtures."""

from typing import Any

import pytest
from fastapi.testclient import TestClient

from readwise_mcp.config.loader import Settings, get_settings
from readwise_mcp.main import create_app
from readwise_mcp.mcp.registry import ToolRegistry

API_KEY = "test-secret"


class CallCounter:
    """Records every tool invocation made through the stub registry."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []

    def record(self, name: str, arguments: Any) -> None:
        self.calls.append((name, arguments))

    @property
    def count(self) -> int:
        return len(self.calls)


def make_settings(**overrides: Any) -> Settings:
    values = {"readwise_token": "test-readwise-token", "mcp_api_key": "", "log_format": "console"}
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def calls() -> CallCounter:
    return CallCounter()


@pytest.fixture
def registry(calls: CallCounter) -> ToolRegistry:
    """Stub collaborator: one echoing tool and one that always fails."""
    registry = ToolRegistry()

    async def echo_handler(arguments: dict[str, Any]) -> dict[str, Any]:
        calls.record("echo", arguments)
        return {
            "content": [{"type": "text", "text": f"echo: {arguments.get('message', '')}"}],
            "isError": False,
            "_meta": {"arguments": arguments},
        }

    async def failing_handler(arguments: dict[str, Any]) -> dict[str, Any]:
        calls.record("X", arguments)
        raise RuntimeError("upstream exploded for X")

    registry.register(
        name="echo",
        description="Echoes the message argument",
        input_schema={
            "type": "object",
            "properties": {"message": {"type": "string"}},
            "required": ["message"],
        },
        handler=echo_handler,
    )
    registry.register(
        name="X",
        description="Always fails",
        input_schema={"type": "object", "properties": {}},
        handler=failing_handler,
    )
    return registry


@pytest.fixture
def settings() -> Settings:
    """Settings with authentication disabled."""
    return make_settings()


@pytest.fixture
def client(settings: Settings, registry: ToolRegistry) -> TestClient:
    """Test client for an app without authentication."""
    return TestClient(create_app(settings, registry))


@pytest.fixture
def auth_client(registry: ToolRegistry) -> TestClient:
    """Test client for an app that requires API_KEY."""
    return TestClient(create_app(make_settings(mcp_api_key=API_KEY), registry))


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def sample_jsonrpc_request():
    """Sample JSON-RPC request factory."""
    def _make_request(method: str, params: dict | None = None, id: Any = 1):
        return {
            "jsonrpc": "2.0",
            "id": id,
            "method": method,
            "params": params or {},
        }
    return _make_request
