from __future__ import annotations

"""High-level orchestration service for investigation assists.

``ActionOrchestrator`` provides an application-friendly API for running one
investigation assist without manually wiring the planner and executor.

Workflow
--------

1. ``PlanGenerator`` proposes tool invocations for the context and filters
   them through the validator.
2. ``ConcurrentExecutor`` runs the validated invocations in parallel.
3. The plan and outcomes are returned as an ``InvestigationResult``.

``ActionOrchestrator`` is intentionally thin: planning and execution semantics
live in their own components. Only configuration errors of the reasoning
service escape ``investigate``; every other failure shows up as a shorter plan
or a failure outcome.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from .planning.planner import PlanGenerator
from .runtime.executor import ConcurrentExecutor
from .schemas.domain import ExecutionOutcome, InvestigationContext, InvestigationResult, Invocation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActionOrchestratorDeps:
    """Dependency bundle for ``ActionOrchestrator``."""

    planner: PlanGenerator
    executor: ConcurrentExecutor


class ActionOrchestrator:
    """Plan and execute tool invocations for an investigation context."""

    def __init__(self, *, deps: ActionOrchestratorDeps) -> None:
        self._deps = deps

    @property
    def planner(self) -> PlanGenerator:
        return self._deps.planner

    @property
    def executor(self) -> ConcurrentExecutor:
        return self._deps.executor

    async def plan(self, context: InvestigationContext) -> List[Invocation]:
        return await self._deps.planner.generate(context)

    async def execute(
        self,
        plan: Sequence[Invocation],
        context: Any = None,
        *,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> List[ExecutionOutcome]:
        return await self._deps.executor.execute_all(plan, context, cancel_event=cancel_event)

    async def investigate(
        self,
        context: InvestigationContext,
        *,
        execution_context: Any = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> InvestigationResult:
        """Plan and execute tools for ``context``.

        Parameters
        ----------
        context:
            The investigation to assist.
        execution_context:
            Record passed to every handler. Defaults to ``context``.
        cancel_event:
            Optional event that cancels invocations still running once set.

        Raises
        ------
        ReasoningConfigurationError
            If the reasoning service is missing credentials or configuration.
        """
        plan = await self.plan(context)
        if not plan:
            logger.info(f"No tool calls planned for tenant {context.tenant_id}")
            return InvestigationResult(plan=[], outcomes=[])

        handler_context = context if execution_context is None else execution_context
        outcomes = await self.execute(plan, handler_context, cancel_event=cancel_event)
        return InvestigationResult(plan=plan, outcomes=outcomes)
