"""
Example tool and resource handlers.

Registers an ``echo`` tool (with a required ``message`` argument) and an
``echo://{message}`` resource. Enabled with ``--demo`` or
``tools.enable_demo: true``.
"""

from __future__ import annotations

from typing import Any

from mcp_lite.registry import Registry, ResourceDescriptor, ToolDescriptor
from mcp_lite.schema import SchemaBuilder
from mcp_lite.uri_template import match_uri_template

ECHO_TEMPLATE = "echo://{message}"

ECHO_SCHEMA = (
    SchemaBuilder()
    .add_string("message", "Message to echo", required=True)
    .build()
)


def echo_tool(arguments: Any, _context: Any) -> dict[str, Any] | None:
    """Echo back the provided message."""
    message = arguments.get("message") if isinstance(arguments, dict) else None
    if not isinstance(message, str):
        return None
    return {"content": [{"type": "text", "text": f"Tool echo: {message}"}]}


def echo_resource(uri: str, _context: Any) -> str | None:
    """Echo back the message segment of an echo:// URI."""
    params = match_uri_template(ECHO_TEMPLATE, uri)
    if params is None:
        return None
    return f"Resource echo: {params['message']}"


def register_demo_handlers(registry: Registry) -> None:
    """Register the echo tool and echo resource."""
    registry.register_tool(
        ToolDescriptor(
            name="echo",
            title="Echo Tool",
            description="Echoes back the provided message",
            input_schema=ECHO_SCHEMA,
            handler=echo_tool,
        )
    )
    registry.register_resource(
        ResourceDescriptor(
            uri_template=ECHO_TEMPLATE,
            name="echo",
            title="Echo Resource",
            description="Echoes back messages as resources",
            mime_type="text/plain",
            handler=echo_resource,
        )
    )
