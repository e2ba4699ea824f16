"""
Tests for the built-in MCP methods.

This test module validates:
- initialize, initialized and ping
- tools/list and tools/call, including built-in fallbacks and argument checks
- resources/list and resources/read, including template fall-through
- Application-level error results
"""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from mcp_lite.builtins import SYSTEM_INFO_TOOL, SYSTEM_STATUS_URI
from mcp_lite.config import AppConfig, ToolsConfig
from mcp_lite.context import RequestContext
from mcp_lite.dispatch import ProtocolFailure
from mcp_lite.methods import (
    INVALID_ARGUMENTS,
    MCP_METHODS,
    RESOURCE_NOT_FOUND,
    UNKNOWN_TOOL,
    handle_call_tool,
    handle_initialize,
    handle_initialized,
    handle_list_resources,
    handle_list_tools,
    handle_ping,
    handle_read_resource,
)
from mcp_lite.registry import Registry, ResourceDescriptor, ToolDescriptor
from mcp_lite.schema import SchemaBuilder

# =============================================================================
# Helper Functions
# =============================================================================

MESSAGE_SCHEMA = SchemaBuilder().add_string("message", required=True).build()


def echo_tool(arguments: Any, context: Any) -> dict[str, Any]:
    """Echo the message and the tool's user context."""
    return {
        "content": [{"type": "text", "text": f"echo: {arguments['message']}"}],
        "context": context,
    }


async def async_tool(arguments: Any, _context: Any) -> dict[str, Any]:
    """Coroutine tool handler."""
    await asyncio.sleep(0)
    return {"content": [{"type": "text", "text": "async"}], "arguments": arguments}


def echo_resource(uri: str, _context: Any) -> str:
    """Return the URI as text."""
    return f"Resource echo: {uri}"


def declining_resource(_uri: str, _context: Any) -> None:
    """Resource handler that declines every URI."""
    return None


# =============================================================================
# Tests for lifecycle methods
# =============================================================================


class TestLifecycle:
    """Tests for initialize, initialized and ping."""

    @pytest.mark.asyncio
    async def test_initialize(self, make_context: Any) -> None:
        """Test the initialize result shape."""
        result = await handle_initialize({}, 1, make_context("initialize"))

        assert result["protocolVersion"] == "2025-06-18"
        assert result["serverInfo"] == {"name": "MCP Lite Server", "version": "1.0.0"}
        assert result["capabilities"]["tools"] == {"listChanged": False}
        assert result["capabilities"]["resources"] == {
            "subscribe": False,
            "listChanged": False,
        }

    @pytest.mark.asyncio
    async def test_initialize_uses_configured_identity(self, registry: Registry) -> None:
        """Test that serverInfo comes from configuration."""
        config = AppConfig(server={"name": "Bench", "version": "0.3.1"})
        ctx = RequestContext(method="initialize", request_id=1, registry=registry, config=config)

        result = await handle_initialize(None, 1, ctx)

        assert result["serverInfo"] == {"name": "Bench", "version": "0.3.1"}

    @pytest.mark.asyncio
    async def test_initialized_returns_none(self, make_context: Any) -> None:
        """Test that the initialized handler produces no result."""
        assert await handle_initialized(None, None, make_context("initialized", None)) is None

    @pytest.mark.asyncio
    async def test_ping(self, make_context: Any) -> None:
        """Test ping."""
        assert await handle_ping(None, 1, make_context("ping")) == {"status": "pong"}

    def test_method_table(self) -> None:
        """Test that every MCP method is in the table."""
        names = [entry.name for entry in MCP_METHODS]

        assert names == [
            "initialize",
            "initialized",
            "notifications/initialized",
            "ping",
            "tools/list",
            "tools/call",
            "resources/list",
            "resources/read",
        ]


# =============================================================================
# Tests for tools
# =============================================================================


class TestTools:
    """Tests for tools/list and tools/call."""

    @pytest.mark.asyncio
    async def test_list_tools_fallback(self, make_context: Any) -> None:
        """Test that the built-in tool is listed when none are registered."""
        result = await handle_list_tools(None, 1, make_context("tools/list"))

        assert [tool["name"] for tool in result["tools"]] == [SYSTEM_INFO_TOOL]
        assert result["tools"][0]["inputSchema"]["type"] == "object"

    @pytest.mark.asyncio
    async def test_list_tools_fallback_disabled(self, registry: Registry) -> None:
        """Test that fallbacks can be turned off."""
        config = AppConfig(tools=ToolsConfig(builtin_fallbacks=False))
        ctx = RequestContext(method="tools/list", request_id=1, registry=registry, config=config)

        assert await handle_list_tools(None, 1, ctx) == {"tools": []}

    @pytest.mark.asyncio
    async def test_list_tools_registered(self, registry: Registry, make_context: Any) -> None:
        """Test that registered tools replace the fallback."""
        registry.register_tool(
            ToolDescriptor(name="echo", handler=echo_tool, input_schema=MESSAGE_SCHEMA)
        )

        result = await handle_list_tools(None, 1, make_context("tools/list"))

        assert [tool["name"] for tool in result["tools"]] == ["echo"]

    @pytest.mark.asyncio
    async def test_call_registered_tool(self, registry: Registry, make_context: Any) -> None:
        """Test calling a tool passes arguments and the tool's context."""
        registry.register_tool(
            ToolDescriptor(
                name="echo",
                handler=echo_tool,
                input_schema=MESSAGE_SCHEMA,
                context={"owner": "tests"},
            )
        )

        result = await handle_call_tool(
            {"name": "echo", "arguments": {"message": "hi"}}, 1, make_context()
        )

        assert result["content"][0]["text"] == "echo: hi"
        assert result["context"] == {"owner": "tests"}

    @pytest.mark.asyncio
    async def test_call_async_tool(self, registry: Registry, make_context: Any) -> None:
        """Test calling a coroutine tool handler."""
        registry.register_tool(ToolDescriptor(name="later", handler=async_tool))

        result = await handle_call_tool({"name": "later"}, 1, make_context())

        assert result["content"][0]["text"] == "async"
        assert result["arguments"] is None

    @pytest.mark.asyncio
    async def test_call_unknown_tool(self, make_context: Any) -> None:
        """Test that an unknown tool is an application-level error."""
        result = await handle_call_tool({"name": "nope"}, 1, make_context())

        assert result == {"error": UNKNOWN_TOOL}

    @pytest.mark.asyncio
    async def test_call_builtin_tool(self, make_context: Any) -> None:
        """Test that the built-in tool is callable by name."""
        result = await handle_call_tool({"name": SYSTEM_INFO_TOOL}, 1, make_context())

        assert result["content"][0]["type"] == "text"
        assert result["content"][0]["text"].startswith("System Information:")

    @pytest.mark.asyncio
    async def test_invalid_arguments(self, registry: Registry, make_context: Any) -> None:
        """Test that schema violations are reported without calling the tool."""
        called = []

        def tracking_tool(arguments: Any, _context: Any) -> dict[str, Any]:
            called.append(arguments)
            return {"content": []}

        registry.register_tool(
            ToolDescriptor(name="echo", handler=tracking_tool, input_schema=MESSAGE_SCHEMA)
        )

        result = await handle_call_tool(
            {"name": "echo", "arguments": {"message": 5}}, 1, make_context()
        )

        assert result["error"] == INVALID_ARGUMENTS
        assert result["validation"] == {
            "kind": "type_mismatch",
            "message": "Expected string",
            "path": "root.message",
        }
        assert called == []

    @pytest.mark.asyncio
    async def test_validation_disabled(self, registry: Registry) -> None:
        """Test that argument validation can be turned off."""
        registry.register_tool(
            ToolDescriptor(
                name="raw",
                handler=lambda arguments, _ctx: {"got": arguments},
                input_schema=MESSAGE_SCHEMA,
            )
        )
        config = AppConfig(tools=ToolsConfig(validate_arguments=False))
        ctx = RequestContext(method="tools/call", request_id=1, registry=registry, config=config)

        result = await handle_call_tool({"name": "raw", "arguments": {"message": 5}}, 1, ctx)

        assert result == {"got": {"message": 5}}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("params", [None, [], "echo", {"arguments": {}}, {"name": 3}])
    async def test_bad_params(self, params: Any, make_context: Any) -> None:
        """Test that missing or malformed params are Invalid params."""
        result = await handle_call_tool(params, 1, make_context())

        assert isinstance(result, ProtocolFailure)
        assert result.kind == ProtocolFailure.INVALID_PARAMS


# =============================================================================
# Tests for resources
# =============================================================================


class TestResources:
    """Tests for resources/list and resources/read."""

    @pytest.mark.asyncio
    async def test_list_resources_fallback(self, make_context: Any) -> None:
        """Test that the built-in resource is listed when none are registered."""
        result = await handle_list_resources(None, 1, make_context("resources/list"))

        assert [r["uri"] for r in result["resources"]] == [SYSTEM_STATUS_URI]

    @pytest.mark.asyncio
    async def test_read_templated_resource(
        self, registry: Registry, make_context: Any
    ) -> None:
        """Test reading a resource through its URI template."""
        registry.register_resource(
            ResourceDescriptor(
                uri_template="echo://{message}",
                name="echo",
                handler=echo_resource,
                mime_type="text/markdown",
            )
        )

        result = await handle_read_resource({"uri": "echo://hello"}, 1, make_context())

        assert result == {
            "contents": [
                {
                    "uri": "echo://hello",
                    "mimeType": "text/markdown",
                    "text": "Resource echo: echo://hello",
                }
            ]
        }

    @pytest.mark.asyncio
    async def test_declining_handler_falls_through(
        self, registry: Registry, make_context: Any
    ) -> None:
        """Test that a None-returning handler passes to the next match."""
        registry.register_resource(
            ResourceDescriptor(uri_template="echo://{m}", name="first", handler=declining_resource)
        )
        registry.register_resource(
            ResourceDescriptor(uri_template="echo://{m}", name="second", handler=echo_resource)
        )

        result = await handle_read_resource({"uri": "echo://x"}, 1, make_context())

        assert result["contents"][0]["text"] == "Resource echo: echo://x"

    @pytest.mark.asyncio
    async def test_unmatched_uri(self, registry: Registry, make_context: Any) -> None:
        """Test that an unmatched URI is an application-level error."""
        registry.register_resource(
            ResourceDescriptor(uri_template="echo://{m}", name="echo", handler=echo_resource)
        )

        result = await handle_read_resource({"uri": "echo://a/b"}, 1, make_context())

        assert result == {"error": RESOURCE_NOT_FOUND}

    @pytest.mark.asyncio
    async def test_read_builtin_resource(self, make_context: Any) -> None:
        """Test reading the built-in status resource."""
        result = await handle_read_resource({"uri": SYSTEM_STATUS_URI}, 1, make_context())

        content = result["contents"][0]
        assert content["uri"] == SYSTEM_STATUS_URI
        assert content["mimeType"] == "text/plain"
        assert content["text"].startswith("System Status Report")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("params", [None, {}, {"uri": 1}])
    async def test_bad_params(self, params: Any, make_context: Any) -> None:
        """Test that a missing or non-string uri is Invalid params."""
        result = await handle_read_resource(params, 1, make_context())

        assert isinstance(result, ProtocolFailure)
        assert result.kind == ProtocolFailure.INVALID_PARAMS
