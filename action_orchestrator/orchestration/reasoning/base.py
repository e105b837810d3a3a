"""Reasoning service boundary.

The plan generator treats the language model as an opaque function: it sends
one text prompt and receives either text or a classifiable failure.

Failures are classified as:

- ``ReasoningRateLimitError``: quota rejection (HTTP 429). Retried with backoff.
- ``ReasoningServiceError``: any other failure of the call. Not retried.
- ``ReasoningConfigurationError``: missing credentials/config. Surfaced to callers.
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from pydantic import Field

from action_orchestrator.core.errors import ReasoningRateLimitError

from ..schemas.base import BaseSchema

RATE_LIMIT_MARKERS = ("429", "rate limit", "rate-limit", "ratelimit", "resource_exhausted", "too many requests")


class ReasoningResult(BaseSchema):
    """Text returned by the reasoning service plus usage metadata."""

    text: str = Field(..., description="Raw response text")
    total_tokens: Optional[int] = Field(default=None, description="Tokens consumed by the call, if reported")
    model: Optional[str] = Field(default=None, description="Model that served the call")


@runtime_checkable
class ReasoningService(Protocol):
    """Protocol for reasoning service implementations."""

    async def complete(self, prompt: str) -> ReasoningResult: ...


def is_rate_limit_error(exc: BaseException) -> bool:
    """Classify ``exc`` as a quota rejection.

    Recognizes ``ReasoningRateLimitError``, any exception carrying a
    ``status_code``/``status`` of 429, and messages containing a rate-limit
    marker (``429``, ``RESOURCE_EXHAUSTED``, ``rate limit``...).
    """
    if isinstance(exc, ReasoningRateLimitError):
        return True
    for attr in ("status_code", "status"):
        if getattr(exc, attr, None) == 429:
            return True
    message = str(exc).lower()
    return any(marker in message for marker in RATE_LIMIT_MARKERS)
