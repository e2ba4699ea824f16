"""
MCP Server implementation for the MCP Lite engine.

This module implements the MCPServer class: it owns the configuration, the
registry and the method table, turns raw JSON-RPC text into responses, and
can serve line-delimited JSON-RPC 2.0 over stdio (stdin/stdout).
"""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Sequence
from typing import Any, TextIO

from mcp_lite.config import AppConfig
from mcp_lite.context import RequestContext
from mcp_lite.demo import register_demo_handlers
from mcp_lite.dispatch import MethodEntry, process_message
from mcp_lite.logging import get_logger
from mcp_lite.methods import MCP_METHODS
from mcp_lite.protocol import (
    INTERNAL_ERROR,
    INVALID_REQUEST,
    PARSE_ERROR,
    Notification,
    Request,
    create_error,
)
from mcp_lite.registry import (
    Registry,
    ResourceDescriptor,
    ToolDescriptor,
)

logger = get_logger(__name__)

# Longest accepted stdio message line
MAX_LINE_BYTES = 16 * 1024 * 1024


class MCPServer:
    """
    MCP Server façade over the message-processing engine.

    Example:
        >>> server = MCPServer()
        >>> server.register_tool(ToolDescriptor(name="echo", handler=echo))
        >>> response = await server.handle_message('{"jsonrpc":"2.0","id":1,"method":"ping"}')

    Attributes:
        config: Application configuration.
        registry: Registry with registered tools and resources.
        methods: Static method table.
        running: Whether the stdio loop is currently running.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        registry: Registry | None = None,
        methods: Sequence[MethodEntry] = MCP_METHODS,
        stdin: TextIO | None = None,
        stdout: TextIO | None = None,
    ) -> None:
        """
        Initialize the MCP Server.

        Args:
            config: Optional AppConfig. Uses defaults if not provided.
            registry: Optional Registry. A fresh one is created if not provided.
            methods: Method table to dispatch against.
            stdin: Optional stdin stream. Uses sys.stdin if not provided.
            stdout: Optional stdout stream. Uses sys.stdout if not provided.
        """
        self.config = config if config is not None else AppConfig()
        self.registry = registry if registry is not None else Registry()
        self.methods = tuple(methods)
        self._stdin = stdin if stdin is not None else sys.stdin
        self._stdout = stdout if stdout is not None else sys.stdout
        self.running = False

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    def register_tool(self, descriptor: ToolDescriptor) -> ToolDescriptor:
        """Register a tool; see Registry.register_tool."""
        return self.registry.register_tool(descriptor)

    def register_resource(self, descriptor: ResourceDescriptor) -> ResourceDescriptor:
        """Register a resource; see Registry.register_resource."""
        return self.registry.register_resource(descriptor)

    def unregister_tool(self, name: str) -> None:
        """Unregister a tool; see Registry.unregister_tool."""
        self.registry.unregister_tool(name)

    def unregister_resource(self, name: str) -> None:
        """Unregister a resource; see Registry.unregister_resource."""
        self.registry.unregister_resource(name)

    def stats(self) -> dict[str, Any]:
        """Return registry counts."""
        stats = self.registry.stats()
        return {
            "total_tools": stats.total_tools,
            "total_resources": stats.total_resources,
        }

    # -------------------------------------------------------------------------
    # Message handling
    # -------------------------------------------------------------------------

    async def handle_message(
        self,
        message_json: str | bytes,
        metadata: dict[str, Any] | None = None,
    ) -> str | None:
        """
        Handle a single JSON-RPC message.

        Args:
            message_json: Raw JSON text of the message.
            metadata: Optional transport metadata attached to the context.

        Returns:
            JSON text of the response, or None for notifications.
        """

        def context_factory(message: Request | Notification) -> RequestContext:
            return RequestContext.from_message(
                message, self.registry, config=self.config, metadata=metadata
            )

        return await process_message(message_json, self.methods, context_factory)

    async def serve_stream(self, reader: asyncio.StreamReader) -> None:
        """
        Serve line-delimited messages from a stream until EOF or stop().

        Args:
            reader: Stream yielding one JSON-RPC message per line.
        """
        self.running = True
        logger.info("MCP Server starting", extra=self.stats())

        try:
            while self.running:
                try:
                    line = await reader.readline()
                except ValueError as e:
                    # Line longer than the reader limit; it has been discarded
                    logger.warning("Oversized message dropped", extra={"error": str(e)})
                    self._write_response(create_error(None, INVALID_REQUEST, "Request too large"))
                    continue

                if not line:
                    # EOF reached
                    break

                try:
                    try:
                        message_json = line.decode("utf-8").strip()
                    except UnicodeDecodeError as e:
                        logger.warning(
                            "Invalid UTF-8 encoding in message",
                            extra={"error": str(e)},
                        )
                        self._write_response(create_error(None, PARSE_ERROR, "Parse error"))
                        continue

                    if not message_json:
                        continue

                    response = await self.handle_message(message_json)
                    if response is not None:
                        self._write_response(response)

                except Exception as e:
                    logger.exception("Error in server loop", extra={"error": str(e)})
                    self._write_response(create_error(None, INTERNAL_ERROR, "Internal error"))
        finally:
            self.running = False
            logger.info("MCP Server stopped")

    async def run(self) -> None:
        """
        Run the server, reading from stdin and writing to stdout.

        The server runs until stdin is closed or stop() is called.
        Each line from stdin is treated as one JSON-RPC message.
        """
        loop = asyncio.get_running_loop()
        reader = asyncio.StreamReader(limit=MAX_LINE_BYTES)
        protocol = asyncio.StreamReaderProtocol(reader)
        await loop.connect_read_pipe(lambda: protocol, self._stdin)
        await self.serve_stream(reader)

    def stop(self) -> None:
        """Stop the server gracefully."""
        self.running = False

    def _write_response(self, response_json: str) -> None:
        """Write a response to stdout."""
        self._stdout.write(response_json + "\n")
        self._stdout.flush()


def create_server(
    config: AppConfig | None = None,
    registry: Registry | None = None,
) -> MCPServer:
    """
    Create and configure an MCP Server instance.

    The example echo tool and resource are registered when
    ``tools.enable_demo`` is set.

    Args:
        config: Optional configuration. Defaults are used if not provided.
        registry: Optional custom registry.

    Returns:
        Configured MCPServer instance.
    """
    server = MCPServer(config=config, registry=registry)
    if server.config.tools.enable_demo:
        register_demo_handlers(server.registry)
    return server
