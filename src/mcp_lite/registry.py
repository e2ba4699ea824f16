"""
Tool and resource registry for the MCP Lite engine.

This module provides:
- ToolDescriptor / ResourceDescriptor: registered entries with their handlers
- Registry: ordered, lock-guarded collection of descriptors keyed by name
- Registry.tool / Registry.resource: decorators for registering handlers
- get_default_registry: process-wide registry singleton

Registry structure is guarded by a single lock. Lookups hand back the
descriptor objects themselves, and handlers are invoked by the caller after
the lock is released, so a slow tool never blocks registration or listing.
Unregistering an entry while a call to it is in flight is safe: the
in-flight call keeps the descriptor it already resolved.
"""

from __future__ import annotations

import copy
import threading
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from mcp_lite.errors import AlreadyExistsError, InvalidArgumentError, NotFoundError
from mcp_lite.logging import get_logger
from mcp_lite.uri_template import match_uri_template

logger = get_logger(__name__)

DEFAULT_MIME_TYPE = "text/plain"

# Handlers may be plain functions or coroutine functions.
ToolHandler = Callable[[Any, Any], Any | Awaitable[Any]]
ResourceHandler = Callable[[str, Any], str | None | Awaitable[str | None]]

# Default global registry (singleton)
_default_registry: Registry | None = None


@dataclass
class ToolDescriptor:
    """
    A tool exposed through tools/list and tools/call.

    Attributes:
        name: Unique tool name.
        handler: Callable invoked as handler(arguments, context).
        title: Optional human-readable title.
        description: Optional description.
        input_schema: Optional schema for the call arguments.
        context: Opaque user value passed to every handler call.
    """

    name: str
    handler: ToolHandler
    title: str | None = None
    description: str | None = None
    input_schema: dict[str, Any] | None = None
    context: Any = None

    def to_listing(self) -> dict[str, Any]:
        """Return the tools/list entry (no handler, no context)."""
        entry: dict[str, Any] = {"name": self.name}
        if self.title:
            entry["title"] = self.title
        if self.description:
            entry["description"] = self.description
        if self.input_schema is not None:
            entry["inputSchema"] = copy.deepcopy(self.input_schema)
        return entry


@dataclass
class ResourceDescriptor:
    """
    A resource exposed through resources/list and resources/read.

    Attributes:
        uri_template: URI template (e.g., "echo://{message}").
        name: Unique resource name.
        handler: Callable invoked as handler(uri, context), returning text or None.
        title: Optional human-readable title.
        description: Optional description.
        mime_type: MIME type of the content.
        context: Opaque user value passed to every handler call.
    """

    uri_template: str
    name: str
    handler: ResourceHandler
    title: str | None = None
    description: str | None = None
    mime_type: str = DEFAULT_MIME_TYPE
    context: Any = None

    def to_listing(self) -> dict[str, Any]:
        """Return the resources/list entry (no handler, no context)."""
        entry: dict[str, Any] = {"uri": self.uri_template, "name": self.name}
        if self.title:
            entry["title"] = self.title
        if self.description:
            entry["description"] = self.description
        if self.mime_type:
            entry["mimeType"] = self.mime_type
        return entry


@dataclass
class RegistryStats:
    """Counts of registered entries."""

    total_tools: int = 0
    total_resources: int = 0
    names: dict[str, list[str]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_tools": self.total_tools,
            "total_resources": self.total_resources,
            "names": self.names,
        }


class Registry:
    """
    Registry of tool and resource descriptors.

    Entries are kept in registration order. Names are unique within tools and
    within resources; a tool and a resource may share a name.

    Example:
        >>> registry = Registry()
        >>> registry.register_tool(ToolDescriptor(name="echo", handler=echo))
        >>> registry.find_tool("echo").name
        'echo'
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._lock = threading.Lock()
        self._tools: list[ToolDescriptor] = []
        self._resources: list[ResourceDescriptor] = []

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    def register_tool(self, descriptor: ToolDescriptor) -> ToolDescriptor:
        """
        Register a tool.

        Text fields and the input schema are copied, so later changes to the
        caller's objects do not affect the registry.

        Args:
            descriptor: Tool to register.

        Returns:
            The stored descriptor.

        Raises:
            InvalidArgumentError: If the name or handler is missing.
            AlreadyExistsError: If a tool with the same name is registered.
        """
        if not descriptor.name or not isinstance(descriptor.name, str):
            raise InvalidArgumentError("Tool name is required", details={"field": "name"})
        if descriptor.handler is None or not callable(descriptor.handler):
            raise InvalidArgumentError(
                "Tool handler is required",
                details={"field": "handler", "tool": descriptor.name},
            )

        stored = ToolDescriptor(
            name=descriptor.name,
            handler=descriptor.handler,
            title=descriptor.title,
            description=descriptor.description,
            input_schema=copy.deepcopy(descriptor.input_schema),
            context=descriptor.context,
        )

        with self._lock:
            if any(tool.name == stored.name for tool in self._tools):
                raise AlreadyExistsError(
                    f"Tool '{stored.name}' is already registered",
                    details={"tool": stored.name},
                )
            self._tools.append(stored)

        logger.info("Tool registered", extra={"tool": stored.name})
        return stored

    def register_resource(self, descriptor: ResourceDescriptor) -> ResourceDescriptor:
        """
        Register a resource.

        Args:
            descriptor: Resource to register.

        Returns:
            The stored descriptor.

        Raises:
            InvalidArgumentError: If the URI template, name or handler is missing.
            AlreadyExistsError: If a resource with the same name is registered.
        """
        if not descriptor.uri_template or not isinstance(descriptor.uri_template, str):
            raise InvalidArgumentError(
                "Resource URI template is required", details={"field": "uri_template"}
            )
        if not descriptor.name or not isinstance(descriptor.name, str):
            raise InvalidArgumentError(
                "Resource name is required", details={"field": "name"}
            )
        if descriptor.handler is None or not callable(descriptor.handler):
            raise InvalidArgumentError(
                "Resource handler is required",
                details={"field": "handler", "resource": descriptor.name},
            )

        stored = ResourceDescriptor(
            uri_template=descriptor.uri_template,
            name=descriptor.name,
            handler=descriptor.handler,
            title=descriptor.title,
            description=descriptor.description,
            mime_type=descriptor.mime_type or DEFAULT_MIME_TYPE,
            context=descriptor.context,
        )

        with self._lock:
            if any(resource.name == stored.name for resource in self._resources):
                raise AlreadyExistsError(
                    f"Resource '{stored.name}' is already registered",
                    details={"resource": stored.name},
                )
            self._resources.append(stored)

        logger.info(
            "Resource registered",
            extra={"resource": stored.name, "uri_template": stored.uri_template},
        )
        return stored

    def unregister_tool(self, name: str) -> None:
        """
        Remove a tool by name.

        Raises:
            NotFoundError: If no tool has that name.
        """
        with self._lock:
            for index, tool in enumerate(self._tools):
                if tool.name == name:
                    del self._tools[index]
                    break
            else:
                raise NotFoundError(
                    f"Tool '{name}' is not registered", details={"tool": name}
                )
        logger.info("Tool unregistered", extra={"tool": name})

    def unregister_resource(self, name: str) -> None:
        """
        Remove a resource by name.

        Raises:
            NotFoundError: If no resource has that name.
        """
        with self._lock:
            for index, resource in enumerate(self._resources):
                if resource.name == name:
                    del self._resources[index]
                    break
            else:
                raise NotFoundError(
                    f"Resource '{name}' is not registered", details={"resource": name}
                )
        logger.info("Resource unregistered", extra={"resource": name})

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def find_tool(self, name: str) -> ToolDescriptor | None:
        """
        Look up a tool by exact name.

        Returns:
            The first tool with that name, or None.
        """
        with self._lock:
            for tool in self._tools:
                if tool.name == name:
                    return tool
        return None

    def find_resource(self, name: str) -> ResourceDescriptor | None:
        """Look up a resource by exact name."""
        with self._lock:
            for resource in self._resources:
                if resource.name == name:
                    return resource
        return None

    def match_resources(
        self, uri: str
    ) -> list[tuple[ResourceDescriptor, dict[str, str]]]:
        """
        Find every resource whose URI template matches a concrete URI.

        Args:
            uri: Concrete resource URI.

        Returns:
            (descriptor, parameters) pairs in registration order.
        """
        with self._lock:
            resources = list(self._resources)

        matches = []
        for resource in resources:
            params = match_uri_template(resource.uri_template, uri)
            if params is not None:
                matches.append((resource, params))
        return matches

    def list_tools(self) -> list[dict[str, Any]]:
        """Return tools/list entries in registration order."""
        with self._lock:
            tools = list(self._tools)
        return [tool.to_listing() for tool in tools]

    def list_resources(self) -> list[dict[str, Any]]:
        """Return resources/list entries in registration order."""
        with self._lock:
            resources = list(self._resources)
        return [resource.to_listing() for resource in resources]

    def stats(self) -> RegistryStats:
        """Return counts and names of registered entries."""
        with self._lock:
            return RegistryStats(
                total_tools=len(self._tools),
                total_resources=len(self._resources),
                names={
                    "tools": [tool.name for tool in self._tools],
                    "resources": [resource.name for resource in self._resources],
                },
            )

    # -------------------------------------------------------------------------
    # Decorators
    # -------------------------------------------------------------------------

    def tool(
        self,
        name: str,
        *,
        title: str | None = None,
        description: str | None = None,
        input_schema: dict[str, Any] | None = None,
        context: Any = None,
    ) -> Callable[[ToolHandler], ToolHandler]:
        """
        Decorator registering a function as a tool handler.

        Example:
            >>> @registry.tool("echo", input_schema={"type": "object"})
            ... def echo(arguments, _context):
            ...     return {"content": [{"type": "text", "text": arguments["message"]}]}
        """

        def decorator(handler: ToolHandler) -> ToolHandler:
            self.register_tool(
                ToolDescriptor(
                    name=name,
                    handler=handler,
                    title=title,
                    description=description or (handler.__doc__ or "").strip() or None,
                    input_schema=input_schema,
                    context=context,
                )
            )
            return handler

        return decorator

    def resource(
        self,
        uri_template: str,
        name: str,
        *,
        title: str | None = None,
        description: str | None = None,
        mime_type: str = DEFAULT_MIME_TYPE,
        context: Any = None,
    ) -> Callable[[ResourceHandler], ResourceHandler]:
        """Decorator registering a function as a resource handler."""

        def decorator(handler: ResourceHandler) -> ResourceHandler:
            self.register_resource(
                ResourceDescriptor(
                    uri_template=uri_template,
                    name=name,
                    handler=handler,
                    title=title,
                    description=description,
                    mime_type=mime_type,
                    context=context,
                )
            )
            return handler

        return decorator

    def __len__(self) -> int:
        """Return the number of registered tools and resources."""
        with self._lock:
            return len(self._tools) + len(self._resources)


def get_default_registry() -> Registry:
    """
    Get the default global registry.

    This registry is a singleton that can be used for registering tools and
    resources at module import time with the Registry decorators.

    Returns:
        The default Registry instance.
    """
    global _default_registry
    if _default_registry is None:
        _default_registry = Registry()
    return _default_registry
