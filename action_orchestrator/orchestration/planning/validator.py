from __future__ import annotations

"""Plan validation.

The reasoning service's output is a best-effort suggestion. ``PlanValidator``
keeps the entries that are usable and drops the rest with a warning:

- the entry must be an object with a string ``tool`` and a string ``reason``,
- ``params``, when present, must be an object,
- ``tool`` must name a registered capability,
- with ``strict_params`` enabled, required parameters must be present and
  enum-restricted parameters must use an allowed value.
"""

import logging
from typing import Any, List, Mapping

from ..capabilities.registry import CapabilityRegistry
from ..schemas.domain import Invocation

logger = logging.getLogger(__name__)


class PlanValidator:
    """Filter raw plan entries against the registry and the entry contract."""

    def __init__(self, registry: CapabilityRegistry, *, strict_params: bool = False) -> None:
        self._registry = registry
        self._strict_params = strict_params

    def validate(self, raw_plan: Any) -> List[Invocation]:
        """
        Return the valid entries of ``raw_plan`` as ``Invocation`` models, in order.

        Args:
            raw_plan: The parsed JSON array produced by the reasoning service.
        """
        if not isinstance(raw_plan, list):
            logger.warning(f"Plan is not a list: {type(raw_plan).__name__}")
            return []

        plan: List[Invocation] = []
        for entry in raw_plan:
            invocation = self._validate_entry(entry)
            if invocation is not None:
                plan.append(invocation)
        if len(plan) != len(raw_plan):
            logger.info(f"Plan validation kept {len(plan)} of {len(raw_plan)} entries")
        return plan

    def _validate_entry(self, entry: Any) -> Invocation | None:
        if not isinstance(entry, Mapping):
            logger.warning(f"Skipping invalid tool call structure: {entry!r}")
            return None

        tool = entry.get("tool")
        reason = entry.get("reason")
        params = entry.get("params")
        if params is None:
            params = {}
        if not isinstance(tool, str) or not isinstance(reason, str) or not isinstance(params, Mapping):
            logger.warning(f"Skipping invalid tool call structure: {dict(entry)!r}")
            return None

        cap = self._registry.get(tool)
        if cap is None:
            logger.warning(f"Skipping unregistered tool: {tool}")
            return None

        if self._strict_params:
            missing = cap.parameters.missing(params)
            if missing:
                logger.warning(f"Skipping {tool}: missing required params {missing}")
                return None
            invalid = cap.parameters.enum_violations(params)
            if invalid:
                logger.warning(f"Skipping {tool}: params outside allowed values {invalid}")
                return None

        return Invocation(tool=tool, params=dict(params), reason=reason)
