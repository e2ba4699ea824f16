"""
URI template matching for resource addressing.

A template such as ``echo://{message}`` is split on ``/`` into segments and
compared position by position with a concrete URI. A segment of the exact
form ``{name}`` binds ``name`` to the corresponding URI segment; every other
segment must match byte for byte. Empty segments (from ``//`` or a leading or
trailing ``/``) are dropped before comparison, so ``echo://hello`` splits into
``["echo:", "hello"]``.
"""

from __future__ import annotations

from mcp_lite.logging import get_logger

logger = get_logger(__name__)


def split_segments(uri: str) -> list[str]:
    """
    Split a URI or template into its non-empty ``/``-separated segments.

    Args:
        uri: URI or template string.

    Returns:
        Ordered list of segments.
    """
    return [segment for segment in uri.split("/") if segment]


def placeholder_name(segment: str) -> str | None:
    """
    Return the parameter name of a ``{name}`` segment.

    Args:
        segment: A single template segment.

    Returns:
        The name between the braces, or None for a literal segment.
    """
    if len(segment) < 3 or segment[0] != "{" or segment[-1] != "}":
        return None
    return segment[1:-1]


def match_uri_template(template: str, uri: str) -> dict[str, str] | None:
    """
    Match a concrete URI against a template and extract its parameters.

    Args:
        template: Registered URI template (e.g., "echo://{message}").
        uri: Concrete URI to test (e.g., "echo://hello").

    Returns:
        Mapping of placeholder names to segment values on a match (empty for
        a fully literal template), or None when the URI does not match.

    Example:
        >>> match_uri_template("echo://{message}", "echo://hello")
        {'message': 'hello'}
        >>> match_uri_template("echo://{message}", "echo://a/b") is None
        True
    """
    template_segments = split_segments(template)
    uri_segments = split_segments(uri)

    if not template_segments or len(template_segments) != len(uri_segments):
        return None

    params: dict[str, str] = {}
    for expected, actual in zip(template_segments, uri_segments, strict=True):
        name = placeholder_name(expected)
        if name is not None:
            params[name] = actual
            continue
        if expected != actual:
            logger.debug(
                "URI segment mismatch",
                extra={"template": template, "expected": expected, "actual": actual},
            )
            return None

    return params
