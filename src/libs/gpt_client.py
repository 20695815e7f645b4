"""
Chat-completion client used for advisory appraisal summaries.

Async httpx client for the OpenAI API. Rate limits, server errors and
timeouts are retried with exponential backoff; other client errors fail
immediately.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Protocol

import httpx
import structlog
from src.core.config import get_settings

logger = structlog.get_logger()


class GPTClientError(Exception):
    """Base exception for GPT client errors."""


class GPTRateLimitError(GPTClientError):
    """Raised when rate limited by OpenAI."""


class GPTTimeoutError(GPTClientError):
    """Raised when request times out."""


class GPTAPIError(GPTClientError):
    """Raised for other API errors."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass(slots=True)
class GPTResponse:
    """Parsed chat completion."""

    content: str
    model: str
    total_tokens: int
    latency_ms: int
    finish_reason: str


class GPTClientProtocol(Protocol):
    """Protocol for GPT client (allows mocking)."""

    async def chat_completion(
        self,
        messages: list[dict[str, str]],
        temperature: float = 0.7,
        max_tokens: int = 800,
    ) -> GPTResponse:
        """Send chat completion request."""
        ...


class OpenAIClient:
    """Async OpenAI API client with retry logic."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        max_retries: int | None = None,
        timeout_seconds: int | None = None,
    ) -> None:
        settings = get_settings()
        self.api_key = api_key or settings.openai_api_key
        self.base_url = (base_url or settings.openai_base_url).rstrip("/")
        self.model = model or settings.openai_model
        self.max_retries = max(
            1, max_retries if max_retries is not None else settings.gpt_max_retries
        )
        self.timeout = (
            timeout_seconds if timeout_seconds is not None else settings.gpt_timeout_seconds
        )

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def chat_completion(
        self,
        messages: list[dict[str, str]],
        temperature: float = 0.7,
        max_tokens: int = 800,
    ) -> GPTResponse:
        if not self.configured:
            raise GPTClientError("OPENAI_API_KEY not configured")

        payload = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}

        last_error: GPTClientError | None = None
        async with httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout) as client:
            for attempt in range(1, self.max_retries + 1):
                started = time.perf_counter()
                try:
                    response = await client.post("/chat/completions", headers=headers, json=payload)
                except httpx.TimeoutException:
                    last_error = GPTTimeoutError(f"Request timed out (attempt {attempt})")
                except httpx.RequestError as exc:
                    last_error = GPTClientError(f"Request failed: {exc}")
                else:
                    latency_ms = int((time.perf_counter() - started) * 1000)
                    if response.status_code == 200:
                        return self._parse_response(response.json(), latency_ms)
                    if response.status_code == 429:
                        last_error = GPTRateLimitError(f"Rate limited (attempt {attempt})")
                    elif response.status_code >= 500:
                        last_error = GPTAPIError(
                            f"Server error: {response.status_code}",
                            status_code=response.status_code,
                        )
                    else:
                        raise GPTAPIError(
                            f"API error {response.status_code}: {response.text[:200]}",
                            status_code=response.status_code,
                        )

                await logger.awarning(
                    "gpt_attempt_failed",
                    attempt=attempt,
                    max_retries=self.max_retries,
                    error=str(last_error),
                )
                if attempt < self.max_retries:
                    # 1s, 2s, 4s ...
                    await asyncio.sleep(2 ** (attempt - 1))

        raise last_error or GPTClientError("All retries exhausted")

    def _parse_response(self, data: dict[str, Any], latency_ms: int) -> GPTResponse:
        choice = data["choices"][0]
        usage = data.get("usage", {})
        return GPTResponse(
            content=choice["message"]["content"] or "",
            model=data.get("model", self.model),
            total_tokens=usage.get("total_tokens", 0),
            latency_ms=latency_ms,
            finish_reason=choice.get("finish_reason", "unknown"),
        )
