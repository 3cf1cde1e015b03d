"""
MCP Swimlanes
=============

MCP server for swimlanes.io sequence diagrams.

Supports:
- Editable links and PNG image links from diagram text
- PNG rendering (returned as base64 image content)
- Natural-language prompt to diagram text via Anthropic or OpenAI

Transport modes:
- STDIO (default): For Claude Desktop and other MCP clients
- SSE: Server-Sent Events over HTTP
- HTTP: Streamable HTTP transport
"""

__version__ = "0.1.0"

from .server import create_server, mcp

__all__ = ["create_server", "mcp", "__version__"]
