"""Pydantic AI reasoning service.

This module provides the default ``ReasoningService`` implementation. It wraps
a Pydantic AI ``Agent`` with a plain-text output and maps provider failures
onto the orchestrator's error taxonomy:

- HTTP 429 from the model provider -> ``ReasoningRateLimitError``
- missing credentials / unknown model -> ``ReasoningConfigurationError``
- anything else -> ``ReasoningServiceError``
"""

import os
from typing import Any, Dict, List, Optional

from action_orchestrator.core.config import ReasoningConfig
from action_orchestrator.core.errors import (
    ReasoningConfigurationError,
    ReasoningRateLimitError,
    ReasoningServiceError,
)
from action_orchestrator.core.logging_config import get_logger

from .base import ReasoningResult, is_rate_limit_error

logger = get_logger(__name__)

PLANNER_SYSTEM_PROMPT = (
    "You are a security investigation AI. You select investigation tools for a SOC analyst "
    "and answer only with a JSON array."
)

# Official environment variables read by each Pydantic AI provider
PROVIDER_ENV_VARS: Dict[str, List[str]] = {
    "google-gla": ["GOOGLE_API_KEY", "GEMINI_API_KEY"],
    "google-vertex": ["GOOGLE_API_KEY"],
    "gemini": ["GEMINI_API_KEY", "GOOGLE_API_KEY"],
    "google": ["GOOGLE_API_KEY", "GEMINI_API_KEY"],
    "openai": ["OPENAI_API_KEY"],
    "anthropic": ["ANTHROPIC_API_KEY"],
}

# Providers that need no credentials (local/test models)
CREDENTIAL_FREE_PROVIDERS = {"test", "function", "ollama"}


def export_provider_api_key(config: ReasoningConfig) -> bool:
    """Export the configured API key to the provider's official environment variables.

    Existing environment values are left untouched.

    Returns:
        True if a key is available for the provider, False otherwise.
    """
    api_key = config.api_key()
    env_vars = PROVIDER_ENV_VARS.get(config.provider, [])
    if api_key is None:
        return any(os.environ.get(name) for name in env_vars)
    for name in env_vars:
        os.environ.setdefault(name, api_key)
    return True


class PydanticAIReasoningService:
    """Reasoning service backed by a Pydantic AI ``Agent``.

    Attributes:
        _model: Pydantic AI model instance or model identifier string
        _agent: Lazily created Pydantic AI agent
    """

    def __init__(self, model: Any, *, system_prompt: str = PLANNER_SYSTEM_PROMPT) -> None:
        """Initialize the service.

        Args:
            model: Pydantic AI model (e.g. ``"google-gla:gemini-2.0-flash"`` or a model instance)
            system_prompt: Instructions sent with every planning request
        """
        self._model = model
        self._system_prompt = system_prompt
        self._agent = None

    @property
    def model_name(self) -> str:
        return self._model if isinstance(self._model, str) else getattr(self._model, "model_name", repr(self._model))

    def _get_agent(self) -> Any:
        if self._agent is None:
            try:
                from pydantic_ai import Agent

                self._agent = Agent(self._model, system_prompt=self._system_prompt)
            except Exception as e:
                raise ReasoningConfigurationError(f"Failed to initialize reasoning model {self.model_name}: {e}") from e
        return self._agent

    async def complete(self, prompt: str) -> ReasoningResult:
        """Send ``prompt`` to the model and return its text response.

        Raises:
            ReasoningRateLimitError: If the provider rejected the call with a quota error
            ReasoningServiceError: For any other provider failure
            ReasoningConfigurationError: If the agent cannot be created
        """
        from pydantic_ai.exceptions import ModelHTTPError

        agent = self._get_agent()
        logger.debug(f"Invoking reasoning model {self.model_name} with prompt length {len(prompt)}")
        try:
            result = await agent.run(prompt)
        except ModelHTTPError as e:
            if e.status_code == 429:
                raise ReasoningRateLimitError(str(e)) from e
            raise ReasoningServiceError(str(e), status_code=e.status_code) from e
        except Exception as e:
            if is_rate_limit_error(e):
                raise ReasoningRateLimitError(str(e)) from e
            raise ReasoningServiceError(f"Reasoning call failed: {e}") from e

        output = getattr(result, "output", None)
        if output is None:
            output = getattr(result, "data", "")
        return ReasoningResult(text=str(output), total_tokens=_total_tokens(result), model=self.model_name)


def _total_tokens(result: Any) -> Optional[int]:
    try:
        usage = result.usage()
    except Exception:
        return None
    total = getattr(usage, "total_tokens", None)
    if total is None:
        request = getattr(usage, "request_tokens", None) or getattr(usage, "input_tokens", None) or 0
        response = getattr(usage, "response_tokens", None) or getattr(usage, "output_tokens", None) or 0
        total = request + response
    return int(total) if total else None


def create_reasoning_service(config: ReasoningConfig) -> PydanticAIReasoningService:
    """Create the default reasoning service from configuration.

    Raises:
        ReasoningConfigurationError: If no API key is available for the configured provider
    """
    provider = config.provider
    if provider not in CREDENTIAL_FREE_PROVIDERS and not export_provider_api_key(config):
        env_names = ", ".join(PROVIDER_ENV_VARS.get(provider, [])) or "API key"
        raise ReasoningConfigurationError(f"{env_names} not configured for reasoning model {config.model}")
    logger.info(f"Reasoning service configured: model={config.model}")
    return PydanticAIReasoningService(config.model)
