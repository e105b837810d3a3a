from __future__ import annotations

"""Plan generation for investigation contexts.

This module defines ``PlanGenerator``, which asks the reasoning service which
registered tools to run for an investigation.

Responsibilities
----------------

- Build the planning prompt from the context and the registry's tool descriptions.
- Call the reasoning service through the ``reasoning-service`` rate limit bucket.
- Retry quota rejections with exponential backoff, under an overall timeout.
- Extract and parse the JSON array from the free-text response.
- Report token usage in the background.

Failure policy
--------------

A failure to plan degrades to an empty plan. The single exception is a
``ReasoningConfigurationError`` (missing credentials), which propagates to the
caller because retrying or degrading cannot fix it.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional

from action_orchestrator.core import monitoring
from action_orchestrator.core.errors import PlanGenerationError, ReasoningConfigurationError

from ..capabilities.registry import CapabilityRegistry
from ..ratelimit import REASONING_SERVICE_KEY, RateLimiter
from ..reasoning.base import ReasoningResult, ReasoningService, is_rate_limit_error
from ..schemas.domain import InvestigationContext, Invocation
from ..usage import UsageRecorder, UsageReporter
from .prompt import build_planning_prompt, parse_plan
from .validator import PlanValidator

logger = logging.getLogger(__name__)


class PlanGenerator:
    """Produce validated tool invocations for an investigation context.

    The reasoning service, limiter and registry are injected so that all
    generators and executors in a process share the same buckets and tools.
    """

    def __init__(
        self,
        *,
        reasoning: ReasoningService,
        registry: CapabilityRegistry,
        limiter: RateLimiter,
        validator: Optional[PlanValidator] = None,
        usage_recorder: Optional[UsageRecorder] = None,
        max_attempts: int = 3,
        base_delay: float = 2.0,
        timeout: Optional[float] = 60.0,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        """
        Initialize the generator.

        Args:
            reasoning: The reasoning service that proposes tool calls.
            registry: Registered tools; described in the prompt and used for validation.
            limiter: Shared rate limiter; every reasoning call consumes a ``reasoning-service`` token.
            validator: Plan validator. Defaults to a non-strict validator over ``registry``.
            usage_recorder: Receives token usage of successful calls. None disables reporting.
            max_attempts: Attempt ceiling for rate-limited reasoning calls.
            base_delay: First backoff delay in seconds; doubled after each rate-limited attempt.
            timeout: Overall timeout in seconds for the call including all retries.
            sleep: Coroutine function used for backoff waits.
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._reasoning = reasoning
        self._registry = registry
        self._limiter = limiter
        self._validator = validator or PlanValidator(registry)
        self._usage = UsageReporter(usage_recorder)
        self._max_attempts = max_attempts
        self._base_delay = base_delay
        self._timeout = timeout
        self._sleep = sleep

    @property
    def usage(self) -> UsageReporter:
        return self._usage

    async def generate(self, context: InvestigationContext) -> List[Invocation]:
        """Generate a validated plan for ``context``.

        Returns
        -------
        list[Invocation]
            Valid invocations in the order proposed; empty when planning failed.

        Raises
        ------
        ReasoningConfigurationError
            If the reasoning service is not configured.
        """
        raw = await self.propose(context)
        plan = self._validator.validate(raw)
        monitoring.log_plan_generated(context.tenant_id, proposed=len(raw), accepted=len(plan))
        return plan

    async def propose(self, context: InvestigationContext) -> List[Any]:
        """Return the raw parsed plan array proposed by the reasoning service."""
        prompt = build_planning_prompt(context, self._registry)
        try:
            result = await self._complete(prompt)
        except ReasoningConfigurationError:
            raise
        except Exception as e:
            logger.error(f"Planning failed: {e}")
            monitoring.log_error(type(e).__name__, str(e), {"tenant_id": context.tenant_id})
            return []

        self._usage.report(context.tenant_id, result.total_tokens, result.model)
        return parse_plan(result.text)

    async def _complete(self, prompt: str) -> ReasoningResult:
        if self._timeout is None:
            return await self._complete_with_retry(prompt)
        try:
            return await asyncio.wait_for(self._complete_with_retry(prompt), timeout=self._timeout)
        except asyncio.TimeoutError as e:
            raise PlanGenerationError(f"Planning timed out after {self._timeout}s") from e

    async def _complete_with_retry(self, prompt: str) -> ReasoningResult:
        """Call the reasoning service, retrying rate-limit rejections with exponential backoff."""
        delay = self._base_delay
        attempt = 0
        while True:
            attempt += 1
            await self._limiter.consume(REASONING_SERVICE_KEY)
            try:
                return await self._reasoning.complete(prompt)
            except ReasoningConfigurationError:
                raise
            except Exception as e:
                if not is_rate_limit_error(e) or attempt >= self._max_attempts:
                    raise
                logger.warning(
                    f"Rate limited (429), retrying in {delay * 1000:.0f}ms... (Attempt {attempt}/{self._max_attempts})"
                )
                await self._sleep(delay)
                delay *= 2
