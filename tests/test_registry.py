"""
Tests for the tool and resource registry.

This test module validates:
- Registration, duplicate and invalid descriptor handling
- Copy-on-register semantics
- Lookup, template matching and listing
- Unregistration
- Decorator registration
- Concurrent registration and lookup from many threads
"""

from __future__ import annotations

import threading
from typing import Any

import pytest

from mcp_lite.errors import AlreadyExistsError, InvalidArgumentError, NotFoundError
from mcp_lite.registry import (
    DEFAULT_MIME_TYPE,
    Registry,
    ResourceDescriptor,
    ToolDescriptor,
    get_default_registry,
)

# =============================================================================
# Helper Functions
# =============================================================================


def echo_tool(arguments: Any, _context: Any) -> dict[str, Any]:
    """Echo the arguments back."""
    return {"echo": arguments}


def text_resource(uri: str, _context: Any) -> str:
    """Return the URI as text."""
    return uri


# =============================================================================
# Tests for tool registration
# =============================================================================


class TestToolRegistration:
    """Tests for tool registration."""

    def test_register_and_find(self, registry: Registry) -> None:
        """Test registering a tool and finding it by name."""
        registry.register_tool(ToolDescriptor(name="echo", handler=echo_tool))

        tool = registry.find_tool("echo")

        assert tool is not None
        assert tool.name == "echo"
        assert tool.handler is echo_tool
        assert len(registry) == 1

    def test_find_unknown(self, registry: Registry) -> None:
        """Test that an unknown name yields None."""
        assert registry.find_tool("missing") is None

    def test_duplicate_name_rejected(self, registry: Registry) -> None:
        """Test that a second tool with the same name is rejected."""
        registry.register_tool(ToolDescriptor(name="echo", handler=echo_tool))

        with pytest.raises(AlreadyExistsError) as exc_info:
            registry.register_tool(ToolDescriptor(name="echo", handler=echo_tool))

        assert exc_info.value.error_code == "already_exists"
        assert registry.stats().total_tools == 1

    def test_duplicate_keeps_first_handler(self, registry: Registry) -> None:
        """Test that a rejected duplicate does not replace the first handler."""
        registry.register_tool(ToolDescriptor(name="echo", handler=echo_tool))

        with pytest.raises(AlreadyExistsError):
            registry.register_tool(
                ToolDescriptor(name="echo", handler=lambda _a, _c: {"other": True})
            )

        tool = registry.find_tool("echo")
        assert tool is not None
        assert tool.handler({"x": 1}, None) == {"echo": {"x": 1}}

    def test_missing_name_rejected(self, registry: Registry) -> None:
        """Test that a nameless tool is rejected."""
        with pytest.raises(InvalidArgumentError):
            registry.register_tool(ToolDescriptor(name="", handler=echo_tool))

    def test_missing_handler_rejected(self, registry: Registry) -> None:
        """Test that a tool without a callable handler is rejected."""
        with pytest.raises(InvalidArgumentError):
            registry.register_tool(ToolDescriptor(name="echo", handler=None))  # type: ignore[arg-type]

    def test_schema_is_copied(self, registry: Registry) -> None:
        """Test that later changes to the caller's schema do not leak in."""
        schema = {"type": "object", "properties": {"message": {"type": "string"}}}
        registry.register_tool(
            ToolDescriptor(name="echo", handler=echo_tool, input_schema=schema)
        )

        schema["properties"]["message"]["type"] = "integer"

        stored = registry.find_tool("echo")
        assert stored is not None
        assert stored.input_schema == {
            "type": "object",
            "properties": {"message": {"type": "string"}},
        }

    def test_listing(self, registry: Registry) -> None:
        """Test tools/list entries keep registration order and omit handlers."""
        registry.register_tool(
            ToolDescriptor(
                name="b",
                handler=echo_tool,
                title="B",
                description="second letter",
                input_schema={"type": "object"},
                context={"secret": 1},
            )
        )
        registry.register_tool(ToolDescriptor(name="a", handler=echo_tool))

        listing = registry.list_tools()

        assert listing == [
            {
                "name": "b",
                "title": "B",
                "description": "second letter",
                "inputSchema": {"type": "object"},
            },
            {"name": "a"},
        ]

    def test_unregister(self, registry: Registry) -> None:
        """Test removing a tool."""
        registry.register_tool(ToolDescriptor(name="echo", handler=echo_tool))

        registry.unregister_tool("echo")

        assert registry.find_tool("echo") is None
        assert len(registry) == 0

    def test_unregister_unknown(self, registry: Registry) -> None:
        """Test that removing an unknown tool raises NotFoundError."""
        with pytest.raises(NotFoundError):
            registry.unregister_tool("missing")

    def test_name_reusable_after_unregister(self, registry: Registry) -> None:
        """Test that an unregistered name can be registered again."""
        registry.register_tool(ToolDescriptor(name="echo", handler=echo_tool))
        registry.unregister_tool("echo")

        registry.register_tool(ToolDescriptor(name="echo", handler=echo_tool))

        assert registry.find_tool("echo") is not None


# =============================================================================
# Tests for resource registration
# =============================================================================


class TestResourceRegistration:
    """Tests for resource registration."""

    def test_register_and_match(self, registry: Registry) -> None:
        """Test template matching against registered resources."""
        registry.register_resource(
            ResourceDescriptor(uri_template="echo://{message}", name="echo", handler=text_resource)
        )

        matches = registry.match_resources("echo://hello")

        assert len(matches) == 1
        resource, params = matches[0]
        assert resource.name == "echo"
        assert params == {"message": "hello"}
        assert registry.match_resources("echo://a/b") == []

    def test_matches_in_registration_order(self, registry: Registry) -> None:
        """Test that every matching resource is returned in order."""
        registry.register_resource(
            ResourceDescriptor(uri_template="data://{key}", name="first", handler=text_resource)
        )
        registry.register_resource(
            ResourceDescriptor(uri_template="data://fixed", name="second", handler=text_resource)
        )

        names = [resource.name for resource, _ in registry.match_resources("data://fixed")]

        assert names == ["first", "second"]

    def test_default_mime_type(self, registry: Registry) -> None:
        """Test that an empty MIME type falls back to text/plain."""
        stored = registry.register_resource(
            ResourceDescriptor(
                uri_template="echo://{message}", name="echo", handler=text_resource, mime_type=""
            )
        )

        assert stored.mime_type == DEFAULT_MIME_TYPE

    def test_listing(self, registry: Registry) -> None:
        """Test resources/list entries."""
        registry.register_resource(
            ResourceDescriptor(
                uri_template="echo://{message}",
                name="echo",
                handler=text_resource,
                title="Echo",
                description="Echoes",
            )
        )

        assert registry.list_resources() == [
            {
                "uri": "echo://{message}",
                "name": "echo",
                "title": "Echo",
                "description": "Echoes",
                "mimeType": "text/plain",
            }
        ]

    def test_duplicate_name_rejected(self, registry: Registry) -> None:
        """Test that resource names are unique."""
        registry.register_resource(
            ResourceDescriptor(uri_template="a://{x}", name="dup", handler=text_resource)
        )

        with pytest.raises(AlreadyExistsError):
            registry.register_resource(
                ResourceDescriptor(uri_template="b://{x}", name="dup", handler=text_resource)
            )

    def test_tool_and_resource_may_share_name(self, registry: Registry) -> None:
        """Test that tool and resource namespaces are separate."""
        registry.register_tool(ToolDescriptor(name="echo", handler=echo_tool))
        registry.register_resource(
            ResourceDescriptor(uri_template="echo://{m}", name="echo", handler=text_resource)
        )

        assert registry.find_tool("echo") is not None
        assert registry.find_resource("echo") is not None

    def test_missing_template_rejected(self, registry: Registry) -> None:
        """Test that a resource needs a URI template."""
        with pytest.raises(InvalidArgumentError):
            registry.register_resource(
                ResourceDescriptor(uri_template="", name="x", handler=text_resource)
            )

    def test_unregister(self, registry: Registry) -> None:
        """Test removing a resource."""
        registry.register_resource(
            ResourceDescriptor(uri_template="echo://{m}", name="echo", handler=text_resource)
        )

        registry.unregister_resource("echo")

        assert registry.match_resources("echo://x") == []
        with pytest.raises(NotFoundError):
            registry.unregister_resource("echo")


# =============================================================================
# Tests for decorators and defaults
# =============================================================================


class TestDecorators:
    """Tests for decorator registration."""

    def test_tool_decorator_uses_docstring(self, registry: Registry) -> None:
        """Test that the docstring becomes the description."""

        @registry.tool("greet", input_schema={"type": "object"})
        def greet(_arguments: Any, _context: Any) -> dict[str, Any]:
            """Say hello."""
            return {"content": []}

        tool = registry.find_tool("greet")

        assert tool is not None
        assert tool.description == "Say hello."
        assert tool.handler is greet

    def test_resource_decorator(self, registry: Registry) -> None:
        """Test registering a resource with the decorator."""

        @registry.resource("notes://{id}", "notes", mime_type="text/markdown")
        def notes(uri: str, _context: Any) -> str:
            return f"# {uri}"

        resource = registry.find_resource("notes")

        assert resource is not None
        assert resource.mime_type == "text/markdown"

    def test_default_registry_is_singleton(self) -> None:
        """Test that get_default_registry returns the same object."""
        assert get_default_registry() is get_default_registry()

    def test_stats(self, registry: Registry) -> None:
        """Test registry statistics."""
        registry.register_tool(ToolDescriptor(name="echo", handler=echo_tool))

        stats = registry.stats().to_dict()

        assert stats == {
            "total_tools": 1,
            "total_resources": 0,
            "names": {"tools": ["echo"], "resources": []},
        }


# =============================================================================
# Tests for concurrency
# =============================================================================


class TestConcurrency:
    """Tests for concurrent registry use."""

    def test_concurrent_register_and_lookup(self, registry: Registry) -> None:
        """Test that registrations from many threads are all retained."""
        errors: list[BaseException] = []
        workers = 8
        per_worker = 25

        def worker(worker_id: int) -> None:
            try:
                for i in range(per_worker):
                    name = f"tool-{worker_id}-{i}"
                    registry.register_tool(ToolDescriptor(name=name, handler=echo_tool))
                    assert registry.find_tool(name) is not None
                    registry.list_tools()
            except BaseException as e:  # noqa: BLE001
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(workers)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert registry.stats().total_tools == workers * per_worker

    def test_concurrent_duplicate_registration(self, registry: Registry) -> None:
        """Test that exactly one of many racing registrations wins."""
        barrier = threading.Barrier(8)
        outcomes: list[str] = []
        outcomes_lock = threading.Lock()

        def worker() -> None:
            barrier.wait()
            try:
                registry.register_tool(ToolDescriptor(name="shared", handler=echo_tool))
                outcome = "ok"
            except AlreadyExistsError:
                outcome = "duplicate"
            with outcomes_lock:
                outcomes.append(outcome)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert outcomes.count("ok") == 1
        assert outcomes.count("duplicate") == 7

    def test_unregister_during_lookup(self, registry: Registry) -> None:
        """Test that a resolved descriptor stays usable after unregistration."""
        registry.register_tool(ToolDescriptor(name="echo", handler=echo_tool))
        tool = registry.find_tool("echo")

        registry.unregister_tool("echo")

        assert tool is not None
        assert tool.handler({"m": 1}, tool.context) == {"echo": {"m": 1}}
