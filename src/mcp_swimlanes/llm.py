"""
Prompt to swimlanes.io text via an LLM
======================================

Two providers are supported, Anthropic and OpenAI. The provider is either
given explicitly or picked from whichever API key is present in the
environment (Anthropic first).
"""

import logging
import os
from contextlib import asynccontextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any, AsyncIterator, Callable, Mapping, Optional

import httpx

from .config import DEFAULT_TIMEOUT
from .errors import ConfigurationError, DownstreamError, EmptyResponseError, InvalidArgument, safe_text

logger = logging.getLogger(__name__)


class Provider(str, Enum):
    ANTHROPIC = "anthropic"
    OPENAI = "openai"


SYSTEM_PROMPT = " ".join([
    "You are an expert at writing swimlanes.io diagrams.",
    "Given a user prompt, output ONLY valid swimlanes.io syntax text.",
    "Do not explain. Do not wrap in code fences. Use concise, readable labels.",
    "Prefer the simplest constructs that accurately reflect the prompt.",
])


def build_user_prompt(prompt: str, syntax_reference: str) -> str:
    return "\n".join([
        "Swimlanes.io syntax reference:",
        "---",
        syntax_reference,
        "---",
        "Task: Convert the following description into a swimlanes.io diagram. Output only the diagram text.",
        f"Description: {prompt}",
    ])


# ============================================================================
# Provider table
# ============================================================================

def _anthropic_request(api_key: str, model: str, system: str, user: str) -> tuple:
    headers = {
        "content-type": "application/json",
        "x-api-key": api_key,
        "anthropic-version": "2023-06-01",
    }
    body = {
        "model": model,
        "max_tokens": 1024,
        "system": system,
        "messages": [{"role": "user", "content": user}],
    }
    return headers, body


def _anthropic_text(data: Any) -> Optional[str]:
    content = data.get("content") if isinstance(data, dict) else None
    if isinstance(content, list) and content and isinstance(content[0], dict):
        return content[0].get("text")
    return None


def _openai_request(api_key: str, model: str, system: str, user: str) -> tuple:
    headers = {
        "content-type": "application/json",
        "authorization": f"Bearer {api_key}",
    }
    body = {
        "model": model,
        "temperature": 0,
        "messages": [
            {"role": "system", "content": system},
            {"role": "user", "content": user},
        ],
    }
    return headers, body


def _openai_text(data: Any) -> Optional[str]:
    choices = data.get("choices") if isinstance(data, dict) else None
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return None
    message = choices[0].get("message") or {}
    content = message.get("content")
    return None if content is None else str(content)


@dataclass(frozen=True)
class ProviderSpec:
    label: str
    url: str
    key_env: str
    model_env: str
    default_model: str
    build_request: Callable[[str, str, str, str], tuple]
    extract_text: Callable[[Any], Optional[str]]


PROVIDERS = {
    Provider.ANTHROPIC: ProviderSpec(
        label="Anthropic",
        url="https://api.anthropic.com/v1/messages",
        key_env="ANTHROPIC_API_KEY",
        model_env="ANTHROPIC_MODEL",
        default_model="claude-3-5-sonnet-latest",
        build_request=_anthropic_request,
        extract_text=_anthropic_text,
    ),
    Provider.OPENAI: ProviderSpec(
        label="OpenAI",
        url="https://api.openai.com/v1/chat/completions",
        key_env="OPENAI_API_KEY",
        model_env="OPENAI_MODEL",
        default_model="gpt-4o-mini",
        build_request=_openai_request,
        extract_text=_openai_text,
    ),
}


def resolve_provider(override: Optional[str], environ: Mapping[str, str]) -> Provider:
    """Pick the provider: explicit override, else the first key found."""
    if override:
        try:
            return Provider(str(override).lower())
        except ValueError:
            choices = ", ".join(p.value for p in Provider)
            raise InvalidArgument(f"Unknown provider '{override}'. Expected one of: {choices}")

    for provider in (Provider.ANTHROPIC, Provider.OPENAI):
        if environ.get(PROVIDERS[provider].key_env):
            return provider

    raise ConfigurationError("No LLM provider configured. Set ANTHROPIC_API_KEY or OPENAI_API_KEY.")


def resolve_model(provider: Provider, override: Optional[str], environ: Mapping[str, str]) -> str:
    spec = PROVIDERS[provider]
    return override or environ.get(spec.model_env) or spec.default_model


class LlmClient:
    """Turns natural-language prompts into swimlanes.io diagram text.

    Args:
        environ: Environment snapshot used for keys and model overrides;
            defaults to ``os.environ``
        http: Optional shared ``httpx.AsyncClient``
        timeout: Timeout in seconds for per-call clients
    """

    def __init__(
        self,
        environ: Optional[Mapping[str, str]] = None,
        http: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.environ = os.environ if environ is None else environ
        self._http = http
        self.timeout = timeout

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._http is not None:
            yield self._http
            return
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            yield client

    async def prompt_to_text(
        self,
        prompt: str,
        syntax_reference: str,
        provider: Optional[str] = None,
        model: Optional[str] = None,
    ) -> str:
        """Ask the resolved provider for diagram text and return it stripped."""
        chosen = resolve_provider(provider, self.environ)
        spec = PROVIDERS[chosen]

        api_key = self.environ.get(spec.key_env)
        if not api_key:
            raise ConfigurationError(f"{spec.key_env} not set")

        chosen_model = resolve_model(chosen, model, self.environ)
        headers, body = spec.build_request(
            api_key, chosen_model, SYSTEM_PROMPT, build_user_prompt(prompt, syntax_reference)
        )
        logger.info("Requesting diagram text from %s (model=%s)", spec.label, chosen_model)

        async with self._session() as client:
            try:
                response = await client.post(spec.url, headers=headers, json=body)
            except httpx.HTTPError as e:
                raise DownstreamError(f"{spec.label} request failed: {e}", status=0) from e

        if not response.is_success:
            raise DownstreamError(f"{spec.label} error", response.status_code, safe_text(response))

        try:
            data = response.json()
        except ValueError:
            data = None
        content = spec.extract_text(data)
        if not content or not content.strip():
            raise EmptyResponseError(spec.label)
        return content.strip()
