"""
Swimlanes.io API client
=======================

Thin async adapter over the three swimlanes.io endpoints:

- POST /link        -> 201, Location = editable diagram link
- POST /image-link  -> 201, Location = PNG image link
- POST /image       -> 303, Location = PNG url, fetched with a second GET

The /image redirect is inspected rather than followed so the 303 status can
be checked before the PNG is downloaded. The download itself follows
redirects.
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Optional

import httpx

from .config import DEFAULT_API_URL, DEFAULT_TIMEOUT
from .errors import DownstreamError, ProtocolViolation, safe_text

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DiagramRequest:
    """Diagram text plus rendering options, as sent to the API."""

    text: str
    high_resolution: bool = False

    def link_body(self) -> dict:
        return {"text": self.text}

    def image_body(self) -> dict:
        return {"text": self.text, "high_resolution": self.high_resolution}


class SwimlanesClient:
    """Client for the swimlanes.io v1 API.

    Args:
        base_url: API root, without trailing slash
        http: Optional shared ``httpx.AsyncClient``; when omitted a client is
            opened per call
        timeout: Timeout in seconds for per-call clients
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        http: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self._http = http
        self.timeout = timeout

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._http is not None:
            yield self._http
            return
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            yield client

    async def _send(
        self,
        client: httpx.AsyncClient,
        method: str,
        url: str,
        follow_redirects: bool = False,
        **kwargs,
    ) -> httpx.Response:
        try:
            response = await client.request(method, url, follow_redirects=follow_redirects, **kwargs)
        except httpx.HTTPError as e:
            raise DownstreamError(f"Request to {url} failed: {e}", status=0) from e
        logger.debug("%s %s -> %s", method, url, response.status_code)
        return response

    @staticmethod
    def _location(response: httpx.Response, what: str) -> str:
        location = response.headers.get("location")
        if not location:
            raise ProtocolViolation(f"Missing Location header in {what}")
        return location

    async def link_from_text(self, text: str) -> str:
        """Create an editable diagram link and return its URL."""
        request = DiagramRequest(text)
        async with self._session() as client:
            response = await self._send(client, "POST", f"{self.base_url}/link", json=request.link_body())

        # 201 is documented; other 2xx are accepted as well
        if not response.is_success:
            raise DownstreamError(
                "Failed to generate diagram link", response.status_code, safe_text(response)
            )
        return self._location(response, "response")

    async def image_link_from_text(self, text: str, high_resolution: bool = False) -> str:
        """Create a PNG image link and return its URL."""
        request = DiagramRequest(text, high_resolution)
        async with self._session() as client:
            response = await self._send(
                client, "POST", f"{self.base_url}/image-link", json=request.image_body()
            )

        if response.status_code != httpx.codes.CREATED:
            raise DownstreamError(
                "Failed to generate image link", response.status_code, safe_text(response)
            )
        return self._location(response, "response")

    async def image_bytes_from_text(self, text: str, high_resolution: bool = False) -> bytes:
        """Render the diagram and return the raw PNG bytes."""
        request = DiagramRequest(text, high_resolution)
        async with self._session() as client:
            response = await self._send(
                client, "POST", f"{self.base_url}/image", json=request.image_body()
            )
            if response.status_code != httpx.codes.SEE_OTHER:
                raise DownstreamError(
                    "Unexpected status from /image", response.status_code, safe_text(response)
                )

            location = self._location(response, "image redirect")
            image_url = str(response.url.join(location))
            image = await self._send(client, "GET", image_url, follow_redirects=True)

        if not image.is_success:
            raise DownstreamError("Failed to download image", image.status_code, safe_text(image))
        return image.content
