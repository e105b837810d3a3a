"""Error types for the action orchestrator.

Defines a small hierarchy of exceptions raised by the rate limiter, the
reasoning service boundary, the planner and the executor.

Only ``ReasoningConfigurationError`` is expected to reach callers of
``ActionOrchestrator.investigate``; everything else is absorbed into empty
plans, dropped plan entries or per-invocation failure outcomes.
"""

from __future__ import annotations

from typing import Optional


class OrchestrationError(Exception):
    """Base error for all action orchestrator exceptions."""


class RateLimitTimeoutError(OrchestrationError):
    """Raised when waiting for bucket tokens would exceed the caller's timeout."""

    def __init__(self, key: str, tokens: float, timeout: float) -> None:
        self.key = key
        self.tokens = tokens
        self.timeout = timeout
        super().__init__(f"Timed out after {timeout:.2f}s waiting for {tokens:g} token(s) on '{key}'")


class ReasoningServiceError(OrchestrationError):
    """Raised when the reasoning service call fails."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class ReasoningRateLimitError(ReasoningServiceError):
    """Raised when the reasoning service rejects a call because of quota (HTTP 429)."""

    def __init__(self, message: str = "reasoning service rate limited (429)") -> None:
        super().__init__(message, status_code=429)


class ReasoningConfigurationError(OrchestrationError):
    """Raised when the reasoning service is missing required credentials or config."""


class PlanGenerationError(OrchestrationError):
    """Raised internally when a plan cannot be produced."""


class ToolNotFoundError(OrchestrationError):
    """Raised when an invocation references a tool that is not registered."""

    def __init__(self, tool_name: str) -> None:
        self.tool_name = tool_name
        super().__init__(f"Tool not found: {tool_name}")


class ToolExecutionError(OrchestrationError):
    """Raised by built-in handlers when a tool cannot run."""

    def __init__(self, tool_name: str, message: str) -> None:
        self.tool_name = tool_name
        super().__init__(f"Tool '{tool_name}' failed: {message}")
