from __future__ import annotations

"""Reasoning service usage accounting.

Token usage of successful planning calls is reported to a ``UsageRecorder``.
Reporting is fire-and-forget: ``UsageReporter.report`` schedules the recorder
call as a background task and any failure is logged, never raised to the
planning operation.

Implementations:

- ``LoggingUsageRecorder``: logs usage and forwards it to Logfire.
- ``InMemoryUsageLedger``: per-tenant totals and daily counters with a budget
  check. Persistent billing storage lives outside this package.
"""

import asyncio
import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Callable, Dict, Optional, Protocol, Set, Tuple

from action_orchestrator.core import monitoring

logger = logging.getLogger(__name__)


class UsageRecorder(Protocol):
    """Protocol for usage recorders."""

    async def record(self, tenant_id: Optional[str], total_tokens: int, model: Optional[str] = None) -> None: ...


class LoggingUsageRecorder:
    """Recorder that only logs usage."""

    async def record(self, tenant_id: Optional[str], total_tokens: int, model: Optional[str] = None) -> None:
        logger.info(f"Recorded {total_tokens} tokens for tenant {tenant_id} (model={model})")
        monitoring.log_llm_call(model, total_tokens)


@dataclass(frozen=True)
class BudgetStatus:
    """Result of ``InMemoryUsageLedger.check_budget``."""

    allowed: bool
    usage: int
    limit: Optional[int]
    remaining: Optional[int]


class InMemoryUsageLedger:
    """Process-local usage ledger.

    Keeps a running total per tenant and a per-day counter keyed by
    ``(tenant_id, date)``. ``limits`` maps tenant ids to total token budgets;
    tenants without a limit are unlimited.
    """

    def __init__(
        self,
        limits: Optional[Dict[str, int]] = None,
        *,
        today: Callable[[], date] = lambda: datetime.now(timezone.utc).date(),
    ) -> None:
        self._limits: Dict[str, int] = dict(limits or {})
        self._today = today
        self._totals: Dict[str, int] = defaultdict(int)
        self._daily: Dict[Tuple[str, date], int] = defaultdict(int)

    async def record(self, tenant_id: Optional[str], total_tokens: int, model: Optional[str] = None) -> None:
        if total_tokens <= 0:
            return
        key = tenant_id or "unknown"
        self._totals[key] += total_tokens
        self._daily[(key, self._today())] += total_tokens
        logger.debug(f"Recorded {total_tokens} tokens for tenant {key}")

    def total(self, tenant_id: str) -> int:
        return self._totals.get(tenant_id, 0)

    def daily(self, tenant_id: str, day: Optional[date] = None) -> int:
        return self._daily.get((tenant_id, day or self._today()), 0)

    def check_budget(self, tenant_id: str) -> BudgetStatus:
        """Check whether ``tenant_id`` still has token budget left."""
        usage = self.total(tenant_id)
        limit = self._limits.get(tenant_id)
        if limit is None:
            return BudgetStatus(allowed=True, usage=usage, limit=None, remaining=None)
        remaining = max(limit - usage, 0)
        return BudgetStatus(allowed=usage < limit, usage=usage, limit=limit, remaining=remaining)


class UsageReporter:
    """Schedules recorder calls as background tasks.

    Strong references to pending tasks are kept until they finish so they are
    not garbage collected mid-flight.
    """

    def __init__(self, recorder: Optional[UsageRecorder]) -> None:
        self._recorder = recorder
        self._pending: Set[asyncio.Task] = set()

    def report(self, tenant_id: Optional[str], total_tokens: Optional[int], model: Optional[str] = None) -> None:
        """Record usage without waiting for the recorder."""
        if self._recorder is None or not total_tokens:
            return
        try:
            task = asyncio.ensure_future(self._recorder.record(tenant_id, total_tokens, model))
        except Exception as e:
            logger.error(f"Usage recording failed to start: {e}")
            return
        self._pending.add(task)
        task.add_done_callback(self._on_done)

    def _on_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Usage recording failed: {exc}")

    async def drain(self) -> None:
        """Wait for pending recorder calls (used on shutdown and in tests)."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
