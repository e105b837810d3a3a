"""Domain models shared by the planner, validator and executor.

These are the in-process records that flow through one investigation assist:

- ``InvestigationContext``: what the caller knows about the alert under investigation.
- ``Invocation``: one planned call to a registered tool.
- ``ExecutionOutcome``: the recorded result of executing one invocation.
- ``InvestigationResult``: the validated plan plus its outcomes.

None of these models is persisted by the orchestrator; callers serialize them.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import Field

from .base import BaseSchema


class InvestigationEntities(BaseSchema):
    """Known entity values extracted from the alert."""

    ip: Optional[str] = None
    username: Optional[str] = None
    hash: Optional[str] = None
    domain: Optional[str] = None


class InvestigationContext(BaseSchema):
    """Input record for plan generation."""

    tenant_id: Optional[str] = None
    alert_title: str = ""
    alert_description: str = ""
    entities: InvestigationEntities = Field(default_factory=InvestigationEntities)
    objective: str = ""


class Invocation(BaseSchema):
    """One validated entry of a plan."""

    tool: str
    params: Dict[str, Any] = Field(default_factory=dict)
    reason: str


class ExecutionOutcome(BaseSchema):
    """Result of executing one ``Invocation``.

    ``result`` holds the handler's return value on success and
    ``{"error": <message>}`` on failure.
    """

    tool: str
    reason: str
    success: bool
    result: Any = None

    @property
    def error(self) -> Optional[str]:
        if self.success or not isinstance(self.result, dict):
            return None
        return self.result.get("error")

    @classmethod
    def succeeded(cls, invocation: Invocation, result: Any) -> "ExecutionOutcome":
        return cls(tool=invocation.tool, reason=invocation.reason, success=True, result=result)

    @classmethod
    def failed(cls, invocation: Invocation, message: str) -> "ExecutionOutcome":
        return cls(tool=invocation.tool, reason=invocation.reason, success=False, result={"error": message})

    def to_dict(self) -> Dict[str, Any]:
        """Render the ``{tool, reason, result}`` shape returned to API callers."""
        return {"tool": self.tool, "reason": self.reason, "result": self.result}


class InvestigationResult(BaseSchema):
    """Validated plan and the outcomes of executing it."""

    plan: List[Invocation] = Field(default_factory=list)
    outcomes: List[ExecutionOutcome] = Field(default_factory=list)

    @property
    def failures(self) -> List[ExecutionOutcome]:
        return [o for o in self.outcomes if not o.success]
