from __future__ import annotations

import os
from typing import List

import pytest
from pydantic_ai.exceptions import ModelHTTPError
from pydantic_ai.messages import ModelMessage, ModelResponse, TextPart
from pydantic_ai.models.function import AgentInfo, FunctionModel

from action_orchestrator.core.config import ReasoningConfig
from action_orchestrator.core.errors import (
    ReasoningConfigurationError,
    ReasoningRateLimitError,
    ReasoningServiceError,
)
from action_orchestrator.orchestration.reasoning import (
    PydanticAIReasoningService,
    ReasoningService,
    create_reasoning_service,
    is_rate_limit_error,
)
from action_orchestrator.orchestration.reasoning.pydantic_ai import export_provider_api_key

KEY_VARS = ("GEMINI_API_KEY", "GOOGLE_API_KEY", "OPENAI_API_KEY", "ANTHROPIC_API_KEY")


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch):
    for name in KEY_VARS:
        # setenv first so the original value is restored on teardown
        monkeypatch.setenv(name, "placeholder")
        monkeypatch.delenv(name)
    return os.environ


def _reply(text: str) -> FunctionModel:
    def _fn(messages: List[ModelMessage], info: AgentInfo) -> ModelResponse:
        return ModelResponse(parts=[TextPart(content=text)])

    return FunctionModel(_fn)


def _raise(exc: Exception) -> FunctionModel:
    def _fn(messages: List[ModelMessage], info: AgentInfo) -> ModelResponse:
        raise exc

    return FunctionModel(_fn)


@pytest.mark.asyncio
async def test_complete_returns_model_text() -> None:
    service = PydanticAIReasoningService(_reply('[{"tool": "check_ip_reputation"}]'))

    result = await service.complete("plan please")

    assert result.text == '[{"tool": "check_ip_reputation"}]'
    assert isinstance(service, ReasoningService)


@pytest.mark.asyncio
async def test_complete_maps_http_429_to_rate_limit_error() -> None:
    service = PydanticAIReasoningService(_raise(ModelHTTPError(status_code=429, model_name="gemini", body=None)))

    with pytest.raises(ReasoningRateLimitError) as exc_info:
        await service.complete("plan please")

    assert exc_info.value.status_code == 429


@pytest.mark.asyncio
async def test_complete_maps_other_http_errors_to_service_error() -> None:
    service = PydanticAIReasoningService(_raise(ModelHTTPError(status_code=500, model_name="gemini", body=None)))

    with pytest.raises(ReasoningServiceError) as exc_info:
        await service.complete("plan please")

    assert not isinstance(exc_info.value, ReasoningRateLimitError)
    assert exc_info.value.status_code == 500


@pytest.mark.asyncio
async def test_complete_classifies_quota_messages() -> None:
    service = PydanticAIReasoningService(_raise(RuntimeError("RESOURCE_EXHAUSTED: quota")))

    with pytest.raises(ReasoningRateLimitError):
        await service.complete("plan please")


def test_is_rate_limit_error() -> None:
    class _WithStatus(Exception):
        status_code = 429

    assert is_rate_limit_error(ReasoningRateLimitError())
    assert is_rate_limit_error(_WithStatus("x"))
    assert is_rate_limit_error(RuntimeError("Too Many Requests"))
    assert not is_rate_limit_error(RuntimeError("connection reset"))
    assert not is_rate_limit_error(ReasoningServiceError("boom", status_code=500))


def test_reasoning_config_provider_and_key() -> None:
    cfg = ReasoningConfig(model="google-gla:gemini-2.0-flash", google_api_key="g")
    assert cfg.provider == "google-gla"
    assert cfg.api_key() == "g"

    cfg = ReasoningConfig(model="openai:gpt-4o", openai_api_key="o", gemini_api_key="g")
    assert cfg.provider == "openai"
    assert cfg.api_key() == "o"


def test_export_provider_api_key_sets_official_env_vars(clean_env) -> None:
    cfg = ReasoningConfig(model="google-gla:gemini-2.0-flash", gemini_api_key="secret")

    assert export_provider_api_key(cfg) is True
    assert clean_env["GOOGLE_API_KEY"] == "secret"
    assert clean_env["GEMINI_API_KEY"] == "secret"


def test_export_provider_api_key_keeps_existing_env(clean_env) -> None:
    clean_env["OPENAI_API_KEY"] = "from-env"

    assert export_provider_api_key(ReasoningConfig(model="openai:gpt-4o", openai_api_key="from-config")) is True
    assert clean_env["OPENAI_API_KEY"] == "from-env"


def test_create_reasoning_service_requires_key(clean_env) -> None:
    with pytest.raises(ReasoningConfigurationError, match="GOOGLE_API_KEY"):
        create_reasoning_service(ReasoningConfig(model="google-gla:gemini-2.0-flash"))


def test_create_reasoning_service_with_key(clean_env) -> None:
    service = create_reasoning_service(ReasoningConfig(model="google-gla:gemini-2.0-flash", gemini_api_key="k"))

    assert isinstance(service, PydanticAIReasoningService)
    assert service.model_name == "google-gla:gemini-2.0-flash"


def test_create_reasoning_service_test_model_needs_no_key(clean_env) -> None:
    service = create_reasoning_service(ReasoningConfig(model="test"))
    assert service.model_name == "test"
