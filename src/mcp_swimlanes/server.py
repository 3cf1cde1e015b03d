#!/usr/bin/env python3
"""
MCP Swimlanes - Server Implementation
=====================================

Exposes swimlanes.io diagram generation as MCP tools.

Tools:
- swimlanes.generate_link: Editable diagram link from diagram text
- swimlanes.generate_image_link: PNG image link from diagram text
- swimlanes.generate_image: PNG image (base64) from diagram text
- swimlanes.text_from_prompt: Diagram text from a natural-language prompt
- swimlanes.image_from_prompt: PNG image straight from a prompt
- swimlanes.link_from_prompt: Editable link straight from a prompt

The prompt tools need ANTHROPIC_API_KEY or OPENAI_API_KEY.
"""

import logging
from pathlib import Path
from typing import Annotated, Any, Literal, Mapping, Optional, Sequence

from mcp.server.fastmcp import FastMCP, Image
from pydantic import Field

from .config import Settings
from .errors import ConfigurationError, InvalidArgument, UnknownTool
from .llm import LlmClient
from .swimlanes import SwimlanesClient

logger = logging.getLogger(__name__)

STRING_FIELDS = ("text", "prompt", "provider", "model")
OPTIONAL_STRING_FIELDS = ("provider", "model")
BOOLEAN_FIELDS = ("high_resolution",)

DiagramText = Annotated[str, Field(description="Swimlanes.io diagram text")]
HighResolution = Annotated[bool, Field(description="Double image size for high-DPI output")]
Prompt = Annotated[str, Field(description="Natural-language description of the swimlane diagram")]
ProviderName = Annotated[
    Optional[Literal["anthropic", "openai"]],
    Field(description="LLM provider override (optional)"),
]
ModelName = Annotated[Optional[str], Field(description="Model name override (optional)")]


def coerce_arguments(arguments: Optional[Mapping[str, Any]], required: Sequence[str]) -> dict:
    """Normalize raw tool arguments and check required fields.

    String fields are passed through ``str()``; blank optional strings count
    as absent and the provider name is lowercased. Boolean fields default to
    False. A required field that is missing or blank raises InvalidArgument.
    """
    args = dict(arguments or {})

    for key in STRING_FIELDS:
        if args.get(key) is not None:
            args[key] = str(args[key])

    for key in OPTIONAL_STRING_FIELDS:
        if key in args and (args[key] is None or not args[key].strip()):
            del args[key]
    if "provider" in args:
        args["provider"] = args["provider"].strip().lower()

    for key in BOOLEAN_FIELDS:
        value = args.get(key)
        if value is None:
            args[key] = False
        elif not isinstance(value, str):
            args[key] = bool(value)

    for key in required:
        value = args.get(key)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise InvalidArgument(f"Missing required argument: {key}")

    return args


def load_syntax_reference(path: Path) -> str:
    """Read the swimlanes.io syntax reference injected into LLM prompts."""
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot read syntax reference '{path}': {e}") from e


class SwimlanesMCP(FastMCP):
    """FastMCP server that rejects unknown tools and bad arguments up front."""

    async def call_tool(self, name: str, arguments: dict[str, Any]):
        tool = self._tool_manager.get_tool(name)
        if tool is None:
            logger.warning("Unknown tool requested: %s", name)
            raise UnknownTool(name)

        args = coerce_arguments(arguments, tool.parameters.get("required", []))
        # Drop keys the tool does not declare (high_resolution on link tools)
        args = {k: v for k, v in args.items() if k in tool.parameters.get("properties", {})}

        logger.info("Calling tool %s", name)
        try:
            return await super().call_tool(name, args)
        except Exception as e:
            logger.warning("Tool %s failed: %s", name, e)
            raise


def _register_tools(
    server: FastMCP,
    diagrams: SwimlanesClient,
    llm: LlmClient,
    syntax_file: Path,
) -> None:
    async def prompt_text(prompt: str, provider: Optional[str], model: Optional[str]) -> str:
        reference = load_syntax_reference(syntax_file)
        return await llm.prompt_to_text(prompt, reference, provider=provider, model=model)

    @server.tool(
        name="swimlanes.generate_link",
        description="Generate an editable Swimlanes diagram link from diagram text",
        structured_output=False,
    )
    async def generate_link(text: DiagramText) -> str:
        return await diagrams.link_from_text(text)

    @server.tool(
        name="swimlanes.generate_image_link",
        description="Generate a PNG image link from diagram text",
        structured_output=False,
    )
    async def generate_image_link(text: DiagramText, high_resolution: HighResolution = False) -> str:
        return await diagrams.image_link_from_text(text, high_resolution)

    @server.tool(
        name="swimlanes.generate_image",
        description="Return the PNG image (base64) for given diagram text",
        structured_output=False,
    )
    async def generate_image(text: DiagramText, high_resolution: HighResolution = False) -> Image:
        data = await diagrams.image_bytes_from_text(text, high_resolution)
        return Image(data=data, format="png")

    @server.tool(
        name="swimlanes.text_from_prompt",
        description="Convert a natural-language prompt into Swimlanes.io syntax using an LLM (requires API key)",
        structured_output=False,
    )
    async def text_from_prompt(
        prompt: Prompt,
        provider: ProviderName = None,
        model: ModelName = None,
    ) -> str:
        return await prompt_text(prompt, provider, model)

    @server.tool(
        name="swimlanes.image_from_prompt",
        description="Generate a PNG image (base64) directly from a natural-language prompt",
        structured_output=False,
    )
    async def image_from_prompt(
        prompt: Prompt,
        high_resolution: HighResolution = False,
        provider: ProviderName = None,
        model: ModelName = None,
    ) -> Image:
        text = await prompt_text(prompt, provider, model)
        data = await diagrams.image_bytes_from_text(text, high_resolution)
        return Image(data=data, format="png")

    @server.tool(
        name="swimlanes.link_from_prompt",
        description="Generate a view/edit link directly from a natural-language prompt",
        structured_output=False,
    )
    async def link_from_prompt(
        prompt: Prompt,
        provider: ProviderName = None,
        model: ModelName = None,
    ) -> str:
        text = await prompt_text(prompt, provider, model)
        return await diagrams.link_from_text(text)


def create_server(
    settings: Optional[Settings] = None,
    diagrams: Optional[SwimlanesClient] = None,
    llm: Optional[LlmClient] = None,
) -> SwimlanesMCP:
    """Create an MCP server with the swimlanes tools registered.

    Clients are built from ``settings`` unless passed in.
    """
    settings = settings or Settings.from_env()
    diagrams = diagrams or SwimlanesClient(settings.api_url, timeout=settings.http_timeout)
    llm = llm or LlmClient(timeout=settings.http_timeout)

    server = SwimlanesMCP("mcp-swimlanes")
    _register_tools(server, diagrams, llm, settings.syntax_file)
    return server


# Initialize the MCP server
mcp = create_server()
