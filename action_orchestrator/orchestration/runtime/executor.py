from __future__ import annotations

"""Concurrent plan execution.

``ConcurrentExecutor`` runs a validated plan against the capability registry.

Execution model
---------------

- Fan-out: one asyncio task per invocation, bounded by a semaphore.
- Isolation: each task converts every handler failure (exception, timeout,
  cancellation signal) into a failure ``ExecutionOutcome``. No task ever
  raises, so one invocation can never cancel or affect its siblings.
- Fan-in: outcomes are returned in input order, each tagged with its tool and
  reason.

Cancellation
------------

``timeout`` bounds each handler call. ``cancel_event`` is an optional
``asyncio.Event``; once set, invocations still running (or not yet started)
finish with a ``cancelled`` failure outcome instead of hanging the batch.
"""

import asyncio
import logging
import time
from typing import Any, List, Optional, Sequence

from action_orchestrator.core import monitoring
from action_orchestrator.core.errors import ToolNotFoundError

from ..capabilities.registry import CapabilityRegistry
from ..schemas.domain import ExecutionOutcome, Invocation

logger = logging.getLogger(__name__)


class ConcurrentExecutor:
    """Execute invocations in parallel with per-invocation failure isolation."""

    def __init__(
        self,
        registry: CapabilityRegistry,
        *,
        max_concurrency: int = 8,
        timeout: Optional[float] = 30.0,
    ) -> None:
        """
        Initialize the executor.

        Args:
            registry: Registry used to resolve tool names to handlers.
            max_concurrency: Maximum number of handlers running at once.
            timeout: Per-invocation timeout in seconds; None disables it.
        """
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self._registry = registry
        self._max_concurrency = max_concurrency
        self._timeout = timeout

    async def execute_all(
        self,
        invocations: Sequence[Invocation],
        context: Any = None,
        *,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> List[ExecutionOutcome]:
        """Execute every invocation concurrently.

        Returns
        -------
        list[ExecutionOutcome]
            Exactly one outcome per invocation, in input order.
        """
        if not invocations:
            return []

        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def _bounded(invocation: Invocation) -> ExecutionOutcome:
            async with semaphore:
                return await self.execute_one(invocation, context, cancel_event=cancel_event)

        tasks = [asyncio.ensure_future(_bounded(invocation)) for invocation in invocations]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        outcomes: List[ExecutionOutcome] = []
        for invocation, result in zip(invocations, results):
            if isinstance(result, BaseException):
                # execute_one never raises; this only covers interpreter-level surprises
                logger.error(f"Invocation task for {invocation.tool} crashed: {result!r}")
                outcomes.append(ExecutionOutcome.failed(invocation, str(result) or type(result).__name__))
            else:
                outcomes.append(result)

        failed = sum(1 for o in outcomes if not o.success)
        logger.info(f"Executed {len(outcomes)} tool call(s): {len(outcomes) - failed} succeeded, {failed} failed")
        return outcomes

    async def execute_one(
        self,
        invocation: Invocation,
        context: Any = None,
        *,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ExecutionOutcome:
        """Execute a single invocation and wrap its result or failure."""
        cap = self._registry.get(invocation.tool)
        if cap is None:
            logger.warning(f"Tool not found: {invocation.tool}")
            return ExecutionOutcome.failed(invocation, str(ToolNotFoundError(invocation.tool)))

        if cancel_event is not None and cancel_event.is_set():
            return ExecutionOutcome.failed(invocation, "cancelled")

        started = time.monotonic()
        handler_task = asyncio.ensure_future(cap.invoke(invocation.params, context))
        waiters = {handler_task}
        cancel_task: Optional[asyncio.Future] = None
        if cancel_event is not None:
            cancel_task = asyncio.ensure_future(cancel_event.wait())
            waiters.add(cancel_task)

        try:
            done, _ = await asyncio.wait(waiters, timeout=self._timeout, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            handler_task.cancel()
            if cancel_task is not None:
                cancel_task.cancel()
            raise

        if cancel_task is not None and not cancel_task.done():
            cancel_task.cancel()

        if handler_task in done:
            outcome = self._wrap(invocation, handler_task)
        else:
            handler_task.cancel()
            if cancel_task is not None and cancel_task in done:
                message = "cancelled"
            else:
                message = f"cancelled: timed out after {self._timeout}s"
            logger.warning(f"Tool {invocation.tool} {message}")
            outcome = ExecutionOutcome.failed(invocation, message)

        monitoring.log_tool_execution(invocation.tool, outcome.success, (time.monotonic() - started) * 1000)
        return outcome

    @staticmethod
    def _wrap(invocation: Invocation, task: asyncio.Future) -> ExecutionOutcome:
        if task.cancelled():
            return ExecutionOutcome.failed(invocation, "cancelled")
        exc = task.exception()
        if exc is not None:
            logger.error(f"Tool {invocation.tool} failed: {exc}")
            return ExecutionOutcome.failed(invocation, str(exc) or type(exc).__name__)
        return ExecutionOutcome.succeeded(invocation, task.result())
