"""Reasoning service boundary used by the plan generator."""

from .base import ReasoningResult, ReasoningService, is_rate_limit_error
from .pydantic_ai import PydanticAIReasoningService, create_reasoning_service

__all__ = [
    "PydanticAIReasoningService",
    "ReasoningResult",
    "ReasoningService",
    "create_reasoning_service",
    "is_rate_limit_error",
]
