#!/usr/bin/env python3
"""
MCP Swimlanes - Entry Point

Supports multiple transport modes:
- stdio: Standard I/O (default, for Claude Desktop)
- sse: Server-Sent Events over HTTP
- http: Streamable HTTP transport
"""

import argparse
import logging
import os

from .config import Settings


def main():
    parser = argparse.ArgumentParser(
        description="MCP server for swimlanes.io diagrams",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run with STDIO transport (default, for Claude Desktop)
  mcp-swimlanes

  # Run with SSE transport on port 8080
  mcp-swimlanes --transport sse --port 8080

  # Use a custom syntax reference for the prompt tools
  mcp-swimlanes --syntax-file ./syntax.md

Note: The *_from_prompt tools require ANTHROPIC_API_KEY or OPENAI_API_KEY.
"""
    )
    parser.add_argument(
        "--transport",
        choices=["stdio", "sse", "http"],
        default="stdio",
        help="Transport mode (default: stdio)"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8080,
        help="Port for SSE/HTTP transport (default: 8080)"
    )
    parser.add_argument(
        "--host",
        type=str,
        default="0.0.0.0",
        help="Host to bind for SSE/HTTP transport (default: 0.0.0.0)"
    )
    parser.add_argument(
        "--syntax-file",
        type=str,
        default=None,
        help="Syntax reference injected into LLM prompts (default: bundled syntax.md)"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=Settings.from_env().log_level,
        help="Logging level (default: INFO)"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__import__('mcp_swimlanes').__version__}"
    )

    args = parser.parse_args()

    # Logs go to stderr; stdout carries the stdio transport
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s | %(message)s",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)

    if args.syntax_file:
        os.environ["SWIMLANES_SYNTAX_FILE"] = os.path.abspath(args.syntax_file)

    # Build the server after setting environment
    from .server import create_server
    mcp = create_server()

    logging.info("Starting mcp-swimlanes (transport=%s)", args.transport)

    if args.transport == "stdio":
        mcp.run()
        return

    mcp.settings.host = args.host
    mcp.settings.port = args.port
    if args.transport == "sse":
        logging.info("SSE endpoint: http://%s:%s%s", args.host, args.port, mcp.settings.sse_path)
        mcp.run(transport="sse")
    else:
        logging.info("MCP endpoint: http://%s:%s%s", args.host, args.port, mcp.settings.streamable_http_path)
        mcp.run(transport="streamable-http")


if __name__ == "__main__":
    main()
