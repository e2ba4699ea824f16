"""
Built-in MCP methods for the MCP Lite engine.

This module implements the MCP methods and the static method table:
- initialize: capability negotiation
- initialized: client notification (no response)
- ping: liveness check
- tools/list, tools/call: tool discovery and invocation
- resources/list, resources/read: resource discovery and reads

Unknown tools and unreadable resources are reported as application data in
a successful result ({"error": "Unknown tool"} / {"error": "Resource not
found"}), not as JSON-RPC errors. Schema violations of tools/call arguments
are reported the same way ({"error": "Invalid arguments", ...}).
"""

from __future__ import annotations

import inspect
from typing import Any

from mcp_lite.builtins import (
    SYSTEM_INFO_TOOL,
    SYSTEM_STATUS_URI,
    system_info_listing,
    system_info_tool,
    system_status_listing,
    system_status_resource,
)
from mcp_lite.context import RequestContext
from mcp_lite.dispatch import MethodEntry, ProtocolFailure
from mcp_lite.logging import get_logger
from mcp_lite.registry import DEFAULT_MIME_TYPE
from mcp_lite.schema import validate_tool_arguments

logger = get_logger(__name__)

UNKNOWN_TOOL = "Unknown tool"
RESOURCE_NOT_FOUND = "Resource not found"
INVALID_ARGUMENTS = "Invalid arguments"


async def _invoke(handler: Any, *args: Any) -> Any:
    result = handler(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


def _contents(uri: str, mime_type: str, text: Any) -> dict[str, Any]:
    if not isinstance(text, str):
        text = str(text)
    return {"contents": [{"uri": uri, "mimeType": mime_type, "text": text}]}


# =============================================================================
# Lifecycle
# =============================================================================


async def handle_initialize(
    _params: Any, _request_id: Any, ctx: RequestContext
) -> dict[str, Any]:
    """Answer initialize with server capabilities and identity."""
    server = ctx.config.server
    logger.info("Initialize request", extra={"request_id": ctx.request_id})
    return {
        "capabilities": {
            "tools": {"listChanged": False},
            "resources": {"subscribe": False, "listChanged": False},
        },
        "serverInfo": {"name": server.name, "version": server.version},
        "protocolVersion": server.protocol_version,
    }


async def handle_initialized(_params: Any, _request_id: Any, _ctx: RequestContext) -> None:
    """Acknowledge the initialized notification."""
    logger.info("Client initialized")
    return None


async def handle_ping(
    _params: Any, _request_id: Any, _ctx: RequestContext
) -> dict[str, str]:
    """Answer ping."""
    return {"status": "pong"}


# =============================================================================
# Tools
# =============================================================================


async def handle_list_tools(
    _params: Any, _request_id: Any, ctx: RequestContext
) -> dict[str, Any]:
    """List registered tools, or the built-in tool when none are registered."""
    tools = ctx.registry.list_tools()
    if not tools and ctx.config.tools.builtin_fallbacks:
        tools = [system_info_listing()]
    return {"tools": tools}


async def handle_call_tool(params: Any, _request_id: Any, ctx: RequestContext) -> Any:
    """
    Invoke a tool by name.

    Resolution order: registered tools, then the built-in tool, then an
    application-level "Unknown tool" result. When argument validation is
    enabled, arguments are checked against the tool's input schema before
    its handler runs.
    """
    if not isinstance(params, dict):
        return ProtocolFailure.invalid_params("tools/call requires an object of params")

    name = params.get("name")
    if not isinstance(name, str):
        return ProtocolFailure.invalid_params("Tool name must be a string")

    arguments = params.get("arguments")
    options = ctx.config.tools

    tool = ctx.registry.find_tool(name)
    if tool is not None:
        if options.validate_arguments:
            result = validate_tool_arguments(
                arguments, tool.input_schema, strict=options.strict_schema
            )
            if not result.ok:
                logger.info(
                    "Tool arguments rejected",
                    extra={"tool": name, "validation": result.to_dict()},
                )
                return {"error": INVALID_ARGUMENTS, "validation": result.to_dict()}

        logger.debug("Calling tool", extra={"tool": name})
        return await _invoke(tool.handler, arguments, tool.context)

    if options.builtin_fallbacks and name == SYSTEM_INFO_TOOL:
        return system_info_tool(arguments, ctx)

    logger.info("Unknown tool requested", extra={"tool": name})
    return {"error": UNKNOWN_TOOL}


# =============================================================================
# Resources
# =============================================================================


async def handle_list_resources(
    _params: Any, _request_id: Any, ctx: RequestContext
) -> dict[str, Any]:
    """List registered resources, or the built-in resource when none are registered."""
    resources = ctx.registry.list_resources()
    if not resources and ctx.config.tools.builtin_fallbacks:
        resources = [system_status_listing()]
    return {"resources": resources}


async def handle_read_resource(params: Any, _request_id: Any, ctx: RequestContext) -> Any:
    """
    Read a resource by concrete URI.

    Every registered resource whose template matches is tried in
    registration order; the first handler returning text wins. Then the
    built-in resource is tried by exact URI.
    """
    if not isinstance(params, dict):
        return ProtocolFailure.invalid_params("resources/read requires an object of params")

    uri = params.get("uri")
    if not isinstance(uri, str):
        return ProtocolFailure.invalid_params("Resource uri must be a string")

    for resource, uri_params in ctx.registry.match_resources(uri):
        logger.debug(
            "Reading resource",
            extra={"resource": resource.name, "uri": uri, "uri_params": uri_params},
        )
        text = await _invoke(resource.handler, uri, resource.context)
        if text is None:
            continue
        return _contents(uri, resource.mime_type or DEFAULT_MIME_TYPE, text)

    if ctx.config.tools.builtin_fallbacks and uri == SYSTEM_STATUS_URI:
        return _contents(uri, DEFAULT_MIME_TYPE, system_status_resource(uri, ctx))

    logger.info("Resource not found", extra={"uri": uri})
    return {"error": RESOURCE_NOT_FOUND}


# =============================================================================
# Method Table
# =============================================================================

MCP_METHODS: tuple[MethodEntry, ...] = (
    MethodEntry("initialize", handle_initialize),
    MethodEntry("initialized", handle_initialized),
    # name used by current MCP clients
    MethodEntry("notifications/initialized", handle_initialized),
    MethodEntry("ping", handle_ping),
    MethodEntry("tools/list", handle_list_tools),
    MethodEntry("tools/call", handle_call_tool),
    MethodEntry("resources/list", handle_list_resources),
    MethodEntry("resources/read", handle_read_resource),
)
