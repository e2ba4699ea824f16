"""
Tests for the example echo tool and resource.
"""

from __future__ import annotations

from mcp_lite.demo import (
    ECHO_SCHEMA,
    ECHO_TEMPLATE,
    echo_resource,
    echo_tool,
    register_demo_handlers,
)
from mcp_lite.registry import Registry
from mcp_lite.schema import validate


class TestEchoHandlers:
    """Tests for the echo handlers."""

    def test_echo_tool(self) -> None:
        """Test that the tool echoes its message."""
        assert echo_tool({"message": "hi"}, None) == {
            "content": [{"type": "text", "text": "Tool echo: hi"}]
        }

    def test_echo_tool_without_message(self) -> None:
        """Test that a missing message yields no result."""
        assert echo_tool({}, None) is None
        assert echo_tool(None, None) is None

    def test_echo_resource(self) -> None:
        """Test that the resource echoes the URI segment."""
        assert echo_resource("echo://hello", None) == "Resource echo: hello"
        assert echo_resource("echo://a/b", None) is None

    def test_schema(self) -> None:
        """Test that the tool schema requires a string message."""
        assert ECHO_SCHEMA["required"] == ["message"]
        assert validate({"message": "x"}, ECHO_SCHEMA).ok
        assert not validate({}, ECHO_SCHEMA).ok


class TestRegisterDemoHandlers:
    """Tests for demo registration."""

    def test_registers_both(self, registry: Registry) -> None:
        """Test that the echo tool and resource are registered."""
        register_demo_handlers(registry)

        assert registry.list_tools()[0]["name"] == "echo"
        assert registry.list_resources()[0]["uri"] == ECHO_TEMPLATE
