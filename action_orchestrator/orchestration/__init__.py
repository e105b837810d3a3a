"""Action orchestration engine: rate limiting, tool planning and execution.

Design overview
---------------

The engine is built from five components, leaves first:

- ``ratelimit.RateLimiter``: per-service token buckets. Every outbound call to
  a quota-limited API waits on its bucket instead of being rejected.
- ``capabilities.CapabilityRegistry``: tool name → declaration + handler.
- ``planning.PlanGenerator``: asks the reasoning service which tools to run,
  retrying quota rejections with exponential backoff.
- ``planning.PlanValidator``: drops malformed entries and unknown tools.
- ``runtime.ConcurrentExecutor``: runs the plan in parallel, one isolated task
  per invocation.

Typical usage
-------------

Most applications should use ``factory.build_orchestrator`` and call
``ActionOrchestrator.investigate(context)``.
"""

from .capabilities import Capability, CapabilityRegistry, ParameterSchema, ParameterSpec, SecurityProviders
from .planning import PlanGenerator, PlanValidator
from .ratelimit import BucketConfig, RateLimiter
from .runtime import ConcurrentExecutor
from .schemas.domain import (
    ExecutionOutcome,
    InvestigationContext,
    InvestigationEntities,
    InvestigationResult,
    Invocation,
)
from .service import ActionOrchestrator, ActionOrchestratorDeps

__all__ = [
    "ActionOrchestrator",
    "ActionOrchestratorDeps",
    "BucketConfig",
    "Capability",
    "CapabilityRegistry",
    "ConcurrentExecutor",
    "ExecutionOutcome",
    "InvestigationContext",
    "InvestigationEntities",
    "InvestigationResult",
    "Invocation",
    "ParameterSchema",
    "ParameterSpec",
    "PlanGenerator",
    "PlanValidator",
    "RateLimiter",
    "SecurityProviders",
]
