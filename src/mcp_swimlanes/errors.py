"""Error types raised by the swimlanes tools.

FastMCP turns any exception escaping a tool into an ``isError`` result, so
these only need a readable message.
"""

from typing import Optional


class SwimlanesError(Exception):
    """Base error for the swimlanes server."""


class InvalidArgument(SwimlanesError):
    """Raised when a tool argument is missing or unusable."""


class UnknownTool(SwimlanesError):
    """Raised when a tool name is not registered."""

    def __init__(self, name: str):
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class ConfigurationError(SwimlanesError):
    """Raised when the environment does not allow the call (keys, files)."""


class DownstreamError(SwimlanesError):
    """Raised when a remote service answers with an unexpected status."""

    def __init__(self, message: str, status: int, body: Optional[str] = None):
        text = f"{message} ({status})"
        if body:
            text = f"{text}: {body}"
        super().__init__(text)
        self.status = status
        self.body = body


class ProtocolViolation(SwimlanesError):
    """Raised when a success response lacks a field the contract requires."""


class EmptyResponseError(SwimlanesError):
    """Raised when an LLM provider returns no usable text."""

    def __init__(self, provider: str):
        super().__init__(f"{provider} returned no content")
        self.provider = provider


NO_BODY = "<no body>"


def safe_text(response) -> str:
    """Best-effort body text for error messages."""
    try:
        return response.text
    except Exception:
        return NO_BODY
