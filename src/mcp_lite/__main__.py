"""
Command-line entry point for the MCP Lite server.

Usage:
    mcp-lite [--config PATH] [--log-level LEVEL] [--debug] [--demo]
    python -m mcp_lite [...]
"""

from __future__ import annotations

import asyncio
import sys

from pydantic import ValidationError

from mcp_lite.config import load_config
from mcp_lite.logging import get_logger, setup_logging
from mcp_lite.server import create_server

logger = get_logger(__name__)


def main(argv: list[str] | None = None) -> int:
    """
    Load configuration, set up logging and serve stdio until EOF.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:]).

    Returns:
        Process exit code.
    """
    try:
        config = load_config(cli_args=argv)
    except (FileNotFoundError, ValidationError) as e:
        print(f"mcp-lite: configuration error: {e}", file=sys.stderr)
        return 2

    setup_logging(config.logging)
    server = create_server(config)

    logger.info(
        "Starting MCP Lite server",
        extra={
            "server_name": config.server.name,
            "protocol_version": config.server.protocol_version,
            "demo": config.tools.enable_demo,
        },
    )

    try:
        asyncio.run(server.run())
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")

    return 0


if __name__ == "__main__":
    sys.exit(main())
