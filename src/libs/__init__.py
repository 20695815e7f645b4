"""Clients for third-party services."""

from src.libs.gpt_client import (
    GPTAPIError,
    GPTClientError,
    GPTClientProtocol,
    GPTRateLimitError,
    GPTResponse,
    GPTTimeoutError,
    OpenAIClient,
)

__all__ = [
    "GPTAPIError",
    "GPTClientError",
    "GPTClientProtocol",
    "GPTRateLimitError",
    "GPTResponse",
    "GPTTimeoutError",
    "OpenAIClient",
]
