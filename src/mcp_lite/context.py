"""
Request context for the MCP Lite engine.

This module defines the RequestContext dataclass that carries everything a
built-in MCP method needs for a single exchange: the method name and request
id, the registry to consult, and the server configuration.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from mcp_lite.config import AppConfig
from mcp_lite.registry import Registry

if TYPE_CHECKING:
    from mcp_lite.protocol import Notification, Request


@dataclass
class RequestContext:
    """
    Encapsulates the context of a single JSON-RPC exchange.

    Attributes:
        method: Method name being dispatched (e.g., "tools/call").
        request_id: Request identifier, None for notifications.
        registry: Registry holding the tools and resources to serve.
        config: Application configuration.
        timestamp: When the message was received (UTC).
        metadata: Additional transport-supplied context.
    """

    method: str
    request_id: Any
    registry: Registry
    config: AppConfig = field(default_factory=AppConfig)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def is_notification(self) -> bool:
        """Check if the exchange is a notification (no response owed)."""
        return self.request_id is None

    def to_dict(self) -> dict[str, Any]:
        """
        Convert RequestContext to a dictionary for logging.

        Returns:
            Dictionary with context information.
        """
        return {
            "method": self.method,
            "request_id": self.request_id,
            "timestamp": self.timestamp.isoformat(),
            "metadata": self.metadata,
        }

    @classmethod
    def from_message(
        cls,
        message: Request | Notification,
        registry: Registry,
        config: AppConfig | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> RequestContext:
        """
        Create a RequestContext from a parsed request or notification.

        Args:
            message: The parsed call.
            registry: Registry to serve from.
            config: Optional configuration (defaults to AppConfig()).
            metadata: Optional additional metadata.

        Returns:
            A RequestContext instance for the message.
        """
        return cls(
            method=message.method,
            request_id=message.id,
            registry=registry,
            config=config or AppConfig(),
            timestamp=datetime.now(UTC),
            metadata=metadata or {},
        )
