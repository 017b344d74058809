"""Async client for OpenAI-compatible chat completion endpoints."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

import httpx

from .cost import Usage
from .errors import CompletionError

log = logging.getLogger(__name__)

ROLE_SYSTEM = "system"
ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"


@dataclass(frozen=True)
class RequestParams:
    """Generation parameters. Zero means "use the provider default"."""

    max_tokens: int = 0
    temperature: float = 0.0
    top_p: float = 0.0
    presence_penalty: float = 0.0
    frequency_penalty: float = 0.0


@dataclass(frozen=True)
class ChatMessage:
    role: str
    content: str


@dataclass(frozen=True)
class Completion:
    text: str
    usage: Usage


@runtime_checkable
class CompletionClient(Protocol):
    async def complete(
        self, model: str, messages: list[ChatMessage], params: RequestParams
    ) -> Completion: ...


class OpenAIChatClient:
    """Posts to ``/v1/chat/completions`` and returns the first choice.

    Errors are raised as :class:`CompletionError`; nothing is retried.
    """

    DEFAULT_BASE_URL = "https://api.openai.com"
    DEFAULT_TIMEOUT_SECS = 120.0

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout_secs: float = DEFAULT_TIMEOUT_SECS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=timeout_secs,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def complete(
        self, model: str, messages: list[ChatMessage], params: RequestParams
    ) -> Completion:
        body = self._build_body(model, messages, params)
        t0 = time.monotonic()
        try:
            resp = await self._client.post("/v1/chat/completions", json=body)
        except httpx.TimeoutException as e:
            raise CompletionError(f"request to {self.base_url} timed out") from e
        except httpx.HTTPError as e:
            raise CompletionError(f"request to {self.base_url} failed: {e}") from e

        elapsed = time.monotonic() - t0
        if resp.status_code >= 400:
            raise CompletionError(f"HTTP {resp.status_code}: {resp.text[:200]}")

        try:
            data = resp.json()
        except ValueError as e:
            raise CompletionError("response is not valid JSON") from e

        completion = self._parse_response(data)
        log.info(
            "Completion (model=%s): %.1fs, in=%d, out=%d",
            model,
            elapsed,
            completion.usage.input_tokens,
            completion.usage.output_tokens,
        )
        return completion

    @staticmethod
    def _build_body(
        model: str, messages: list[ChatMessage], params: RequestParams
    ) -> dict[str, Any]:
        body: dict[str, Any] = {
            "model": model,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
            "n": 1,
            "stream": False,
        }
        optional = {
            "max_tokens": params.max_tokens,
            "temperature": params.temperature,
            "top_p": params.top_p,
            "presence_penalty": params.presence_penalty,
            "frequency_penalty": params.frequency_penalty,
        }
        body.update({k: v for k, v in optional.items() if v})
        return body

    @staticmethod
    def _parse_response(data: Any) -> Completion:
        if not isinstance(data, dict):
            raise CompletionError("unexpected response shape")
        choices = data.get("choices") or []
        if not choices:
            raise CompletionError("response contains no choices")

        text = (choices[0].get("message") or {}).get("content") or ""
        usage = data.get("usage") or {}
        return Completion(
            text=text,
            usage=Usage(
                input_tokens=int(usage.get("prompt_tokens", 0) or 0),
                output_tokens=int(usage.get("completion_tokens", 0) or 0),
            ),
        )
