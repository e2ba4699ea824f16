"""
Built-in fallback tool and resource.

When no tools are registered, tools/list advertises ``get_system_info``;
when no resources are registered, resources/list advertises
``system://status``. Both are also reachable by name/URI whenever a
registered entry does not shadow them.
"""

from __future__ import annotations

import os
import platform
from time import time
from typing import Any

import psutil

from mcp_lite import __version__
from mcp_lite.context import RequestContext
from mcp_lite.logging import get_logger
from mcp_lite.schema import object_schema

logger = get_logger(__name__)

SYSTEM_INFO_TOOL = "get_system_info"
SYSTEM_STATUS_URI = "system://status"
SYSTEM_STATUS_NAME = "system_status"


def system_info_listing() -> dict[str, Any]:
    """Return the tools/list entry of the built-in tool."""
    return {
        "name": SYSTEM_INFO_TOOL,
        "title": "System Information",
        "description": "Get host system information",
        "inputSchema": object_schema(properties={}),
    }


def system_status_listing() -> dict[str, Any]:
    """Return the resources/list entry of the built-in resource."""
    return {
        "uri": SYSTEM_STATUS_URI,
        "name": SYSTEM_STATUS_NAME,
        "title": "System Status",
        "description": "Current host and server status",
        "mimeType": "text/plain",
    }


def _uptime_seconds() -> int:
    try:
        return int(time() - psutil.boot_time())
    except (OSError, RuntimeError) as e:
        logger.debug("Could not read boot time: %r", e)
        return 0


def _process_uptime_ms() -> int:
    try:
        return int((time() - psutil.Process(os.getpid()).create_time()) * 1000)
    except (psutil.Error, OSError) as e:
        logger.debug("Could not read process start time: %r", e)
        return 0


def collect_system_info() -> dict[str, Any]:
    """
    Collect a snapshot of host information.

    Returns:
        Dictionary with memory, uptime, CPU and platform fields.
    """
    memory = psutil.virtual_memory()
    return {
        "hostname": platform.node(),
        "platform": f"{platform.system()} {platform.release()}",
        "machine": platform.machine(),
        "python_version": platform.python_version(),
        "cpu_count": psutil.cpu_count() or 0,
        "memory_total_bytes": memory.total,
        "memory_available_bytes": memory.available,
        "uptime_seconds": _uptime_seconds(),
        "process_uptime_ms": _process_uptime_ms(),
    }


def system_info_tool(_arguments: Any, _ctx: RequestContext) -> dict[str, Any]:
    """Built-in tool returning host information as text content."""
    info = collect_system_info()
    text = (
        "System Information:\n"
        f"- Hostname: {info['hostname']}\n"
        f"- Platform: {info['platform']} ({info['machine']})\n"
        f"- Python: {info['python_version']}\n"
        f"- CPU cores: {info['cpu_count']}\n"
        f"- Available memory: {info['memory_available_bytes']} bytes\n"
        f"- Uptime: {info['uptime_seconds']} s\n"
    )
    return {"content": [{"type": "text", "text": text}]}


def system_status_resource(_uri: str, ctx: RequestContext) -> str:
    """Built-in resource describing host and server status."""
    info = collect_system_info()
    stats = ctx.registry.stats()
    server = ctx.config.server
    return (
        "System Status Report\n"
        "====================\n"
        f"Server: {server.name} {server.version} (mcp-lite {__version__})\n"
        f"Protocol Version: {server.protocol_version}\n"
        f"Registered Tools: {stats.total_tools}\n"
        f"Registered Resources: {stats.total_resources}\n"
        f"Available Memory: {info['memory_available_bytes']} bytes\n"
        f"Total Memory: {info['memory_total_bytes']} bytes\n"
        f"Process Uptime: {info['process_uptime_ms']} ms\n"
        f"Platform: {info['platform']}\n"
    )
