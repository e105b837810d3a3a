from __future__ import annotations

"""Convenience factories for wiring the orchestration engine.

This module contains small helpers to build the shared rate limiter, the
default capability registry and an ``ActionOrchestrator`` from ``Settings``.

The intent is to keep application wiring and tests concise, while still
allowing deployments to provide their own reasoning service, providers,
registry and limiter.
"""

from typing import Iterable, Optional

from action_orchestrator.core.config import Settings

from .capabilities.base import Capability
from .capabilities.builtin import SecurityProviders, build_security_capabilities
from .capabilities.registry import CapabilityRegistry
from .planning.planner import PlanGenerator
from .planning.validator import PlanValidator
from .ratelimit import BucketConfig, RateLimiter
from .reasoning.base import ReasoningService
from .reasoning.pydantic_ai import create_reasoning_service
from .runtime.executor import ConcurrentExecutor
from .service import ActionOrchestrator, ActionOrchestratorDeps
from .usage import LoggingUsageRecorder, UsageRecorder


def build_limiter(settings: Settings) -> RateLimiter:
    """Build a ``RateLimiter`` with the static table and the configured fallback bucket."""
    cfg = settings.rate_limit
    return RateLimiter(default=BucketConfig(capacity=cfg.default_capacity, refill_rate=cfg.default_refill_rate))


def build_default_registry(
    *,
    limiter: RateLimiter,
    providers: Optional[SecurityProviders] = None,
    extra_capabilities: Iterable[Capability] = (),
) -> CapabilityRegistry:
    """Build the default ``CapabilityRegistry``.

    The default registry includes the built-in security tools, followed by any
    ``extra_capabilities`` (which replace built-ins of the same name).
    """
    reg = CapabilityRegistry()
    for cap in build_security_capabilities(providers or SecurityProviders(), limiter):
        reg.register(cap)
    for cap in extra_capabilities:
        reg.register(cap)
    return reg


def build_orchestrator(
    settings: Optional[Settings] = None,
    *,
    reasoning: Optional[ReasoningService] = None,
    providers: Optional[SecurityProviders] = None,
    registry: Optional[CapabilityRegistry] = None,
    limiter: Optional[RateLimiter] = None,
    usage_recorder: Optional[UsageRecorder] = None,
    strict_params: bool = False,
) -> ActionOrchestrator:
    """Construct an ``ActionOrchestrator`` from settings and optional overrides.

    Raises:
        ReasoningConfigurationError: If no reasoning service is given and the
            configured model has no credentials.
    """
    if settings is None:
        from action_orchestrator.core.config import settings as default_settings

        settings = default_settings

    if limiter is None:
        limiter = build_limiter(settings)
    if registry is None:
        registry = build_default_registry(limiter=limiter, providers=providers)
    if reasoning is None:
        reasoning = create_reasoning_service(settings.reasoning)

    planner_cfg = settings.planner
    executor_cfg = settings.executor
    planner = PlanGenerator(
        reasoning=reasoning,
        registry=registry,
        limiter=limiter,
        validator=PlanValidator(registry, strict_params=strict_params),
        usage_recorder=usage_recorder or LoggingUsageRecorder(),
        max_attempts=planner_cfg.max_attempts,
        base_delay=planner_cfg.base_delay,
        timeout=planner_cfg.timeout,
    )
    executor = ConcurrentExecutor(
        registry,
        max_concurrency=executor_cfg.max_concurrency,
        timeout=executor_cfg.invocation_timeout,
    )
    return ActionOrchestrator(deps=ActionOrchestratorDeps(planner=planner, executor=executor))
