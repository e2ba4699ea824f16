"""
MCP Lite - a compact Model Context Protocol message-processing engine.

This package implements the JSON-RPC 2.0 message codec, the MCP method
dispatcher, a dynamic tool/resource registry, a restricted schema validator
for tool arguments and a URI-template matcher for resource addressing.
Transports are thin consumers; a line-delimited stdio loop is included.
"""

__version__ = "1.0.0"
