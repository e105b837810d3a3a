from __future__ import annotations

import asyncio
from typing import Any, List, Mapping, Optional

import pytest

from action_orchestrator.core.config import Settings
from action_orchestrator.core.errors import ReasoningConfigurationError
from action_orchestrator.orchestration import (
    ActionOrchestrator,
    InvestigationContext,
    InvestigationEntities,
    SecurityProviders,
)
from action_orchestrator.orchestration.capabilities import Capability, CapabilityRegistry
from action_orchestrator.orchestration.factory import build_default_registry, build_limiter, build_orchestrator
from action_orchestrator.orchestration.reasoning.base import ReasoningResult
from action_orchestrator.orchestration.usage import InMemoryUsageLedger


class _FixedReasoning:
    def __init__(self, text: str, total_tokens: Optional[int] = None) -> None:
        self.text = text
        self.total_tokens = total_tokens
        self.calls = 0

    async def complete(self, prompt: str) -> ReasoningResult:
        self.calls += 1
        return ReasoningResult(text=self.text, total_tokens=self.total_tokens, model="fixed")


class _BrokenConfigReasoning:
    async def complete(self, prompt: str) -> ReasoningResult:
        raise ReasoningConfigurationError("GEMINI_API_KEY not configured")


def _settings(**kwargs: Any) -> Settings:
    return Settings(_env_file=None, **kwargs)


def _context() -> InvestigationContext:
    return InvestigationContext(
        tenant_id="tenant-1",
        alert_title="Malware download",
        alert_description="Endpoint fetched a binary from a suspicious domain",
        entities=InvestigationEntities(ip="10.0.0.1", hash="abc123", domain="evil.example"),
    )


def _providers(calls: List[str]) -> SecurityProviders:
    async def check_ip(ip: str) -> Mapping[str, Any]:
        calls.append(f"ip:{ip}")
        return {"ip": ip, "score": 90}

    async def check_hash(file_hash: str) -> Mapping[str, Any]:
        raise RuntimeError("VirusTotal unavailable")

    return SecurityProviders(check_ip=check_ip, check_hash=check_hash)


PLAN = (
    '[{"tool": "check_ip_reputation", "params": {"ip": "10.0.0.1"}, "reason": "Source IP"},'
    ' {"tool": "analyze_file_hash", "params": {"hash": "abc123"}, "reason": "Downloaded binary"},'
    ' {"tool": "ghost_tool", "params": {}, "reason": "Hallucinated"}]'
)


@pytest.mark.asyncio
async def test_investigate_plans_and_executes() -> None:
    calls: List[str] = []
    orchestrator = build_orchestrator(_settings(), reasoning=_FixedReasoning(PLAN), providers=_providers(calls))

    result = await orchestrator.investigate(_context())

    assert [inv.tool for inv in result.plan] == ["check_ip_reputation", "analyze_file_hash"]
    assert [o.tool for o in result.outcomes] == ["check_ip_reputation", "analyze_file_hash"]
    assert result.outcomes[0].result == {"ip": "10.0.0.1", "score": 90}
    assert result.outcomes[1].error == "VirusTotal unavailable"
    assert [o.tool for o in result.failures] == ["analyze_file_hash"]
    assert calls == ["ip:10.0.0.1"]


@pytest.mark.asyncio
async def test_investigate_with_empty_plan_skips_execution() -> None:
    orchestrator = build_orchestrator(_settings(), reasoning=_FixedReasoning("no tools needed: []"))

    result = await orchestrator.investigate(_context())

    assert result.plan == []
    assert result.outcomes == []


@pytest.mark.asyncio
async def test_investigate_propagates_configuration_error() -> None:
    orchestrator = build_orchestrator(_settings(), reasoning=_BrokenConfigReasoning())

    with pytest.raises(ReasoningConfigurationError):
        await orchestrator.investigate(_context())


@pytest.mark.asyncio
async def test_investigate_passes_execution_context_to_handlers() -> None:
    seen: List[Any] = []

    async def whoami(params: Mapping[str, Any], context: Any) -> Any:
        seen.append(context)
        return "ok"

    reg = CapabilityRegistry()
    reg.register(Capability(name="whoami", description="Report the caller", handler=whoami))
    orchestrator = build_orchestrator(
        _settings(),
        reasoning=_FixedReasoning('[{"tool": "whoami", "reason": "test"}]'),
        registry=reg,
    )

    await orchestrator.investigate(_context())
    await orchestrator.investigate(_context(), execution_context={"tenant_id": "override"})

    assert seen[0].tenant_id == "tenant-1"
    assert seen[1] == {"tenant_id": "override"}


@pytest.mark.asyncio
async def test_investigate_honours_cancel_event() -> None:
    async def hang(params: Mapping[str, Any], context: Any) -> Any:
        await asyncio.sleep(10)

    reg = CapabilityRegistry()
    reg.register(Capability(name="hang", description="Never returns", handler=hang))
    orchestrator = build_orchestrator(
        _settings(), reasoning=_FixedReasoning('[{"tool": "hang", "reason": "test"}]'), registry=reg
    )
    cancel = asyncio.Event()
    asyncio.get_running_loop().call_later(0.05, cancel.set)

    result = await orchestrator.investigate(_context(), cancel_event=cancel)

    assert result.outcomes[0].error == "cancelled"


@pytest.mark.asyncio
async def test_usage_is_recorded_through_factory() -> None:
    ledger = InMemoryUsageLedger()
    orchestrator = build_orchestrator(_settings(), reasoning=_FixedReasoning("[]", total_tokens=77), usage_recorder=ledger)

    await orchestrator.investigate(_context())
    await orchestrator.planner.usage.drain()

    assert ledger.total("tenant-1") == 77


def test_build_limiter_uses_configured_default() -> None:
    limiter = build_limiter(_settings(rate_limit_default_capacity=5, rate_limit_default_refill_rate=0.5))

    cfg = limiter.config_for("unknown-vendor")
    assert cfg.capacity == 5
    assert cfg.refill_rate == 0.5
    assert limiter.config_for("virustotal").capacity == 4


def test_build_default_registry_allows_extra_capabilities() -> None:
    extra = Capability(name="enrich_domain", description="Custom enrichment", handler=lambda p, c: None)

    reg = build_default_registry(limiter=build_limiter(_settings()), extra_capabilities=[extra])

    assert len(reg) == 6
    assert reg.get("enrich_domain") is extra


def test_build_orchestrator_requires_reasoning_credentials(monkeypatch) -> None:
    for name in ("GEMINI_API_KEY", "GOOGLE_API_KEY"):
        monkeypatch.setenv(name, "placeholder")
        monkeypatch.delenv(name)

    with pytest.raises(ReasoningConfigurationError):
        build_orchestrator(_settings(reasoning_model="google-gla:gemini-2.0-flash"))


def test_build_orchestrator_wires_settings() -> None:
    orchestrator = build_orchestrator(
        _settings(executor_max_concurrency=3, executor_invocation_timeout=5.0),
        reasoning=_FixedReasoning("[]"),
    )

    assert isinstance(orchestrator, ActionOrchestrator)
    assert orchestrator.executor._max_concurrency == 3
    assert orchestrator.executor._timeout == 5.0
