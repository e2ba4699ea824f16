"""
JSON-RPC 2.0 message codec for the MCP Lite engine.

This module parses raw JSON-RPC 2.0 text into typed messages and serializes
requests, notifications, responses and errors back to text.

Features:
- Classification of inbound messages into Request, Notification, Response
  and ErrorMessage
- Deep-copied payloads, so a message never aliases the decoded source tree
- Response/error/request/notification builders
- Per-kind message invariant checks

Error Codes:
- -32700: Parse error (malformed JSON, bad jsonrpc version, ambiguous shape)
- -32600: Invalid Request (a response/error was sent where a call was expected)
- -32601: Method not found
- -32602: Invalid params
- -32603: Internal error
"""

from __future__ import annotations

import copy
import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar

# =============================================================================
# JSON-RPC Constants
# =============================================================================

JSONRPC_VERSION = "2.0"

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

# Request identifiers are JSON values; in practice strings or numbers.
RequestId = Any


class MessageType(Enum):
    """The four mutually exclusive JSON-RPC message shapes."""

    REQUEST = "request"
    NOTIFICATION = "notification"
    RESPONSE = "response"
    ERROR = "error"


# =============================================================================
# Data Classes
# =============================================================================


class JSONRPCError(Exception):
    """
    Represents a JSON-RPC 2.0 error object.

    This class is both an Exception (so it can be raised) and a data container
    for JSON-RPC error information.

    Attributes:
        code: Integer JSON-RPC 2.0 error code.
        message: Human-readable error message.
        data: Optional structured error data.
    """

    def __init__(
        self,
        code: int,
        message: str,
        data: Any | None = None,
    ) -> None:
        """
        Initialize a JSONRPCError.

        Args:
            code: Integer error code.
            message: Human-readable error message.
            data: Optional structured error data.
        """
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data

    def to_dict(self) -> dict[str, Any]:
        """
        Convert the error to a dictionary for JSON serialization.

        Returns:
            Dictionary with code, message, and optionally data.
        """
        result: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.data is not None:
            result["data"] = self.data
        return result

    def __repr__(self) -> str:
        """Return a detailed string representation."""
        return (
            f"JSONRPCError(code={self.code}, "
            f"message={self.message!r}, "
            f"data={self.data!r})"
        )


@dataclass
class Request:
    """
    A JSON-RPC call that expects a response.

    Attributes:
        method: Method name to invoke.
        id: Non-null request identifier echoed in the response.
        params: Optional parameters (any JSON value).
    """

    method: str
    id: RequestId
    params: Any = None

    jsonrpc: ClassVar[str] = JSONRPC_VERSION
    type: ClassVar[MessageType] = MessageType.REQUEST

    def to_dict(self) -> dict[str, Any]:
        """Convert the request to its wire dictionary."""
        data: dict[str, Any] = {"jsonrpc": self.jsonrpc, "method": self.method}
        if self.params is not None:
            data["params"] = self.params
        data["id"] = self.id
        return data


@dataclass
class Notification:
    """
    A JSON-RPC call without an id; never answered.

    Attributes:
        method: Method name to invoke.
        params: Optional parameters (any JSON value).
    """

    method: str
    params: Any = None

    jsonrpc: ClassVar[str] = JSONRPC_VERSION
    type: ClassVar[MessageType] = MessageType.NOTIFICATION

    @property
    def id(self) -> None:
        """Notifications never carry an id."""
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert the notification to its wire dictionary."""
        data: dict[str, Any] = {"jsonrpc": self.jsonrpc, "method": self.method}
        if self.params is not None:
            data["params"] = self.params
        return data


@dataclass
class Response:
    """
    A successful JSON-RPC response.

    Attributes:
        result: Result value (None is encoded as JSON null).
        id: Identifier of the request being answered.
    """

    result: Any = None
    id: RequestId = None

    jsonrpc: ClassVar[str] = JSONRPC_VERSION
    type: ClassVar[MessageType] = MessageType.RESPONSE

    def to_dict(self) -> dict[str, Any]:
        """Convert the response to its wire dictionary."""
        return {"jsonrpc": self.jsonrpc, "result": self.result, "id": self.id}


@dataclass
class ErrorMessage:
    """
    A JSON-RPC error response.

    Attributes:
        error: The error object, normally {code, message, data?}.
        id: Identifier of the request being answered (None for parse errors).
    """

    error: Any
    id: RequestId = None

    jsonrpc: ClassVar[str] = JSONRPC_VERSION
    type: ClassVar[MessageType] = MessageType.ERROR

    @property
    def code(self) -> int | None:
        """Return the error code, if the error object carries one."""
        if isinstance(self.error, dict):
            return self.error.get("code")
        return None

    @property
    def message(self) -> str | None:
        """Return the error message, if the error object carries one."""
        if isinstance(self.error, dict):
            return self.error.get("message")
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert the error response to its wire dictionary."""
        return {"jsonrpc": self.jsonrpc, "error": self.error, "id": self.id}


Message = Request | Notification | Response | ErrorMessage


# =============================================================================
# Parsing
# =============================================================================


def parse_message(message_json: str | bytes) -> Message:
    """
    Parse a JSON-RPC 2.0 message from raw text.

    Any failure is a hard parse failure: no partial message is returned and
    the caller answers with a Parse error (-32700) if a response is owed.

    Args:
        message_json: Raw JSON text.

    Returns:
        The classified message.

    Raises:
        JSONRPCError: With code PARSE_ERROR for malformed JSON, a missing or
            wrong jsonrpc version, or a shape that is none of the four kinds.

    Example:
        >>> msg = parse_message('{"jsonrpc":"2.0","id":1,"method":"ping"}')
        >>> msg.type
        <MessageType.REQUEST: 'request'>
    """
    try:
        data = json.loads(message_json)
        return message_from_dict(data)
    except ValueError as e:
        raise JSONRPCError(
            code=PARSE_ERROR,
            message=f"Parse error: Invalid JSON - {e}",
        ) from e
    except RecursionError as e:
        raise JSONRPCError(
            code=PARSE_ERROR,
            message="Parse error: message nested too deeply",
        ) from e


def message_from_dict(data: Any) -> Message:
    """
    Classify an already decoded JSON tree as a JSON-RPC message.

    Payload values (params, id, result, error) are deep-copied so the message
    owns independent copies of them.

    Args:
        data: Decoded JSON value.

    Returns:
        The classified message.

    Raises:
        JSONRPCError: With code PARSE_ERROR if the tree is not a valid message.
    """
    if not isinstance(data, dict):
        raise JSONRPCError(
            code=PARSE_ERROR,
            message="Parse error: message must be a JSON object",
        )

    jsonrpc = data.get("jsonrpc")
    if jsonrpc != JSONRPC_VERSION:
        raise JSONRPCError(
            code=PARSE_ERROR,
            message=f"Parse error: jsonrpc must be '2.0', got {jsonrpc!r}",
        )

    method = data.get("method")
    request_id = copy.deepcopy(data.get("id"))

    if isinstance(method, str):
        params = copy.deepcopy(data.get("params"))
        if request_id is not None:
            return Request(method=method, id=request_id, params=params)
        return Notification(method=method, params=params)

    if "result" in data:
        return Response(result=copy.deepcopy(data["result"]), id=request_id)

    if "error" in data:
        return ErrorMessage(error=copy.deepcopy(data["error"]), id=request_id)

    raise JSONRPCError(
        code=PARSE_ERROR,
        message="Parse error: not a request, notification, response or error",
    )


def validate_message(message: Message) -> bool:
    """
    Check the per-kind invariants of a message.

    Args:
        message: Message to check.

    Returns:
        True if the message is well formed for its kind.
    """
    if message.jsonrpc != JSONRPC_VERSION:
        return False

    if isinstance(message, Request):
        return bool(message.method) and message.id is not None
    if isinstance(message, Notification):
        return isinstance(message.method, str) and bool(message.method)
    if isinstance(message, Response):
        return message.id is not None
    if isinstance(message, ErrorMessage):
        return isinstance(message.error, dict)
    return False


# =============================================================================
# Serialization
# =============================================================================


def _dumps(data: dict[str, Any]) -> str:
    # NaN and Infinity are not JSON
    return json.dumps(data, separators=(",", ":"), allow_nan=False)


def create_response(request_id: RequestId, result: Any = None) -> str:
    """
    Serialize a successful response.

    A missing result and a missing id are both encoded as JSON null.

    Args:
        request_id: Identifier of the request being answered.
        result: Result value.

    Returns:
        JSON text of the response.

    Example:
        >>> create_response(1, {"status": "pong"})
        '{"jsonrpc":"2.0","result":{"status":"pong"},"id":1}'
    """
    return _dumps(Response(result=result, id=request_id).to_dict())


def create_error(
    request_id: RequestId,
    code: int,
    message: str | None,
    data: Any | None = None,
) -> str:
    """
    Serialize an error response.

    Args:
        request_id: Identifier of the request being answered (None for parse errors).
        code: JSON-RPC error code.
        message: Error message; "Unknown error" when empty.
        data: Optional structured error data.

    Returns:
        JSON text of the error response.

    Example:
        >>> create_error(None, PARSE_ERROR, "Parse error")
        '{"jsonrpc":"2.0","error":{"code":-32700,"message":"Parse error"},"id":null}'
    """
    error = JSONRPCError(code=code, message=message or "Unknown error", data=data)
    return _dumps(ErrorMessage(error=error.to_dict(), id=request_id).to_dict())


def create_request(
    method: str,
    params: Any | None = None,
    request_id: RequestId = None,
) -> str:
    """
    Serialize an outbound call.

    The id is only emitted when given; without one the result is a
    notification.

    Args:
        method: Method name.
        params: Optional parameters.
        request_id: Optional request identifier.

    Returns:
        JSON text of the request or notification.
    """
    if request_id is None:
        return create_notification(method, params)
    return _dumps(Request(method=method, id=request_id, params=params).to_dict())


def create_notification(method: str, params: Any | None = None) -> str:
    """Serialize a notification (a call without an id)."""
    return _dumps(Notification(method=method, params=params).to_dict())
