"""Shared fixtures: mocked HTTP transports and preconfigured servers."""

import json
from typing import Callable, List

import httpx
import pytest

from mcp_swimlanes.config import Settings
from mcp_swimlanes.llm import LlmClient
from mcp_swimlanes.server import create_server
from mcp_swimlanes.swimlanes import SwimlanesClient

API = "https://api.swimlanes.io/v1"
PNG = bytes([0x89, 0x50, 0x4E, 0x47, 0x0D, 0x0A, 0x1A, 0x0A, 0x00, 0x01])


class Recorder:
    """Routes requests to a handler and keeps every request it saw."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.handler = handler
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))

    def body(self, index: int = 0) -> dict:
        return json.loads(self.requests[index].content)


def diagram_service(request: httpx.Request) -> httpx.Response:
    """A well-behaved swimlanes.io API."""
    path = request.url.path
    if path == "/v1/link":
        return httpx.Response(201, headers={"Location": "https://swimlanes.io/d/abc"})
    if path == "/v1/image-link":
        return httpx.Response(201, headers={"Location": "https://swimlanes.io/i/abc.png"})
    if path == "/v1/image":
        return httpx.Response(303, headers={"Location": "https://img.swimlanes.io/z.png"})
    if request.url.host == "img.swimlanes.io":
        return httpx.Response(200, content=PNG, headers={"Content-Type": "image/png"})
    return httpx.Response(404, text="not found")


def llm_service(request: httpx.Request) -> httpx.Response:
    """Anthropic and OpenAI both answering with the same diagram text."""
    text = "\n  title: Checkout\nCustomer -> Shop: Order\n"
    if request.url.host == "api.anthropic.com":
        return httpx.Response(200, json={"content": [{"type": "text", "text": text}]})
    if request.url.host == "api.openai.com":
        return httpx.Response(200, json={"choices": [{"message": {"role": "assistant", "content": text}}]})
    return httpx.Response(404, text="not found")


@pytest.fixture
def syntax_file(tmp_path):
    path = tmp_path / "syntax.md"
    path.write_text("SYNTAX-REFERENCE: A -> B: message", encoding="utf-8")
    return path


@pytest.fixture
def diagram_recorder():
    return Recorder(diagram_service)


@pytest.fixture
def llm_recorder():
    return Recorder(llm_service)


@pytest.fixture
def make_server(syntax_file, diagram_recorder, llm_recorder):
    """Build a server wired to the mocked services with a given environment."""

    def _make(environ=None):
        settings = Settings(syntax_file=syntax_file)
        diagrams = SwimlanesClient(API, http=diagram_recorder.client())
        llm = LlmClient(environ=environ or {}, http=llm_recorder.client())
        return create_server(settings, diagrams=diagrams, llm=llm)

    return _make
