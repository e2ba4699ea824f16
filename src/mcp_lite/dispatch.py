"""
JSON-RPC method dispatch for the MCP Lite engine.

This module routes parsed messages to method handlers held in a static,
ordered method table and turns handler outcomes into wire responses.

Handler contract:
    handler(params, request_id, ctx) -> value | ProtocolFailure | None

- any other value: success, wrapped as a JSON-RPC response
- None: failure without detail, answered with Internal error (-32603)
- ProtocolFailure: a protocol-level error (Invalid params or Internal error)

A handler may also raise ToolError; it is converted to a ProtocolFailure
("invalid_argument" becomes Invalid params, everything else Internal error).
Handlers may be plain functions or coroutine functions.

Notifications never produce output, whatever their handler returns or raises,
and even when no handler exists for the method.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any, ClassVar

from mcp_lite.context import RequestContext
from mcp_lite.errors import ToolError
from mcp_lite.logging import get_logger
from mcp_lite.protocol import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    ErrorMessage,
    JSONRPCError,
    Message,
    Notification,
    Request,
    Response,
    create_error,
    create_response,
    parse_message,
)

logger = get_logger(__name__)

MethodHandler = Callable[[Any, Any, RequestContext], Any | Awaitable[Any]]
ContextFactory = Callable[[Request | Notification], RequestContext]


@dataclass(frozen=True)
class ProtocolFailure:
    """
    A handler outcome that must be reported as a JSON-RPC error.

    This is the only way a method handler asks for a protocol-level error
    instead of returning an application-level result.

    Attributes:
        kind: "invalid_params" or "internal"; unknown kinds are treated as internal.
        message: Optional error message (defaults per kind).
        data: Optional structured error data.
    """

    kind: str
    message: str | None = None
    data: Any = None

    INVALID_PARAMS: ClassVar[str] = "invalid_params"
    INTERNAL: ClassVar[str] = "internal"

    @classmethod
    def invalid_params(cls, message: str | None = None, data: Any = None) -> ProtocolFailure:
        """Create an Invalid params failure."""
        return cls(kind=cls.INVALID_PARAMS, message=message, data=data)

    @classmethod
    def internal(cls, message: str | None = None, data: Any = None) -> ProtocolFailure:
        """Create an Internal error failure."""
        return cls(kind=cls.INTERNAL, message=message, data=data)

    @classmethod
    def from_tool_error(cls, error: ToolError) -> ProtocolFailure:
        """Convert a ToolError raised by a handler."""
        kind = cls.INVALID_PARAMS if error.error_code == "invalid_argument" else cls.INTERNAL
        return cls(kind=kind, message=error.message, data=error.to_dict())

    def to_jsonrpc_error(self) -> JSONRPCError:
        """Map the failure onto a JSON-RPC error object."""
        if self.kind == self.INVALID_PARAMS:
            return JSONRPCError(INVALID_PARAMS, self.message or "Invalid params", self.data)
        return JSONRPCError(INTERNAL_ERROR, self.message or "Internal error", self.data)


@dataclass(frozen=True)
class MethodEntry:
    """A (method name, handler) row of a method table."""

    name: str
    handler: MethodHandler


def find_method(methods: Sequence[MethodEntry], name: str) -> MethodHandler | None:
    """
    Look up a method handler by exact name.

    Args:
        methods: Ordered method table.
        name: Method name.

    Returns:
        The handler of the first matching entry, or None.
    """
    for entry in methods:
        if entry.name == name:
            return entry.handler
    return None


async def call_method(
    handler: MethodHandler,
    params: Any,
    request_id: Any,
    ctx: RequestContext,
) -> Any:
    """
    Invoke a method handler and normalise exceptions into ProtocolFailure.

    Returns:
        The handler result, None, or a ProtocolFailure.
    """
    try:
        result = handler(params, request_id, ctx)
        if inspect.isawaitable(result):
            result = await result
        return result
    except ToolError as e:
        logger.warning(
            "Method handler raised ToolError",
            extra={"method": ctx.method, "error_code": e.error_code, "error": e.message},
        )
        return ProtocolFailure.from_tool_error(e)
    except Exception as e:
        logger.exception(
            "Unexpected error in method handler",
            extra={"method": ctx.method, "request_id": request_id},
        )
        return ProtocolFailure.internal(
            "Internal error",
            data={"exception_type": type(e).__name__, "exception": str(e)},
        )


async def dispatch_message(
    message: Message,
    methods: Sequence[MethodEntry],
    context_factory: ContextFactory,
) -> str | None:
    """
    Dispatch a parsed message and build the wire response.

    Args:
        message: A parsed message.
        methods: Ordered method table.
        context_factory: Builds the RequestContext for a call.

    Returns:
        JSON text of the response, or None when no response is owed.
    """
    if isinstance(message, Response | ErrorMessage):
        return create_error(message.id, INVALID_REQUEST, "Invalid request")

    is_request = isinstance(message, Request)
    handler = find_method(methods, message.method)

    if handler is None:
        if is_request:
            logger.info("Method not found", extra={"method": message.method})
            return create_error(message.id, METHOD_NOT_FOUND, "Method not found")
        logger.debug("Dropping notification for unknown method", extra={"method": message.method})
        return None

    ctx = context_factory(message)
    outcome = await call_method(handler, message.params, message.id, ctx)

    if not is_request:
        return None

    if outcome is None:
        return create_error(message.id, INTERNAL_ERROR, "Internal error")

    try:
        if isinstance(outcome, ProtocolFailure):
            error = outcome.to_jsonrpc_error()
            return create_error(message.id, error.code, error.message, error.data)

        return create_response(message.id, outcome)
    except (TypeError, ValueError):
        # Result or error data is not representable as JSON
        logger.exception(
            "Failed to serialize method outcome",
            extra={"method": message.method, "request_id": message.id},
        )
        return create_error(message.id, INTERNAL_ERROR, "Internal error")


async def process_message(
    message_json: str | bytes,
    methods: Sequence[MethodEntry],
    context_factory: ContextFactory,
) -> str | None:
    """
    Process one raw JSON-RPC message end to end.

    Args:
        message_json: Raw message text.
        methods: Ordered method table.
        context_factory: Builds the RequestContext for a call.

    Returns:
        JSON text of the response, or None for notifications.
    """
    try:
        message = parse_message(message_json)
    except JSONRPCError as e:
        logger.warning("Failed to parse JSON-RPC message", extra={"error": e.message})
        return create_error(None, PARSE_ERROR, "Parse error")

    return await dispatch_message(message, methods, context_factory)
