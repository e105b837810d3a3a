"""Planning components.

 The planning subsystem turns an ``InvestigationContext`` into a plan: an
 ordered list of ``Invocation`` items naming registered tools.

 - ``PlanGenerator`` builds the prompt, calls the reasoning service with
   rate limiting and backoff, and parses the JSON array out of the response.
 - ``PlanValidator`` drops entries that are malformed or name unknown tools.

 The planner itself does not execute tools; plans are consumed by
 ``action_orchestrator.orchestration.runtime.ConcurrentExecutor``.
 """

from .planner import PlanGenerator
from .prompt import build_planning_prompt, extract_json_array, parse_plan
from .validator import PlanValidator

__all__ = [
    "PlanGenerator",
    "PlanValidator",
    "build_planning_prompt",
    "extract_json_array",
    "parse_plan",
]
