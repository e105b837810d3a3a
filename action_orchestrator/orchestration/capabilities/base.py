"""Capability declaration and handler invocation.

A capability (tool) is the execution unit for a plan invocation:

- the planner advertises each capability's name and description to the
  reasoning service,
- the validator checks plan entries against the registered names (and,
  optionally, the parameter schema),
- the executor calls the capability's handler with the invocation's
  parameters and the caller's execution context.

Handlers take ``(params, context)`` and either return a result or raise.
Coroutine functions are awaited directly; plain functions run in a worker
thread so a blocking vendor SDK cannot stall the event loop.
"""

from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional

from pydantic import Field

from ..schemas.base import BaseSchema

Handler = Callable[[Mapping[str, Any], Any], Any]


class ParameterSpec(BaseSchema):
    """Declaration of a single tool parameter."""

    type: str = Field(..., description="JSON type of the parameter (string, number, ...)")
    description: str = Field(default="", description="What the parameter means")
    enum: Optional[List[str]] = Field(default=None, description="Allowed values, if restricted")


class ParameterSchema(BaseSchema):
    """JSON-schema style parameter block of a capability."""

    type: str = "object"
    properties: Dict[str, ParameterSpec] = Field(default_factory=dict)
    required: List[str] = Field(default_factory=list)

    def missing(self, params: Mapping[str, Any]) -> List[str]:
        """Required parameter names absent from ``params``."""
        return [name for name in self.required if params.get(name) is None]

    def enum_violations(self, params: Mapping[str, Any]) -> List[str]:
        """Parameter names whose value falls outside the declared enum."""
        bad: List[str] = []
        for name, spec in self.properties.items():
            if spec.enum is not None and name in params and params[name] not in spec.enum:
                bad.append(name)
        return bad


@dataclass(frozen=True)
class Capability:
    """A named, schema-described action exposed for planning and execution.

    Attributes
    ----------
    name:
        Unique tool name referenced by plan entries.
    description:
        Human-readable description shown to the reasoning service.
    handler:
        Callable ``(params, context) -> result``; may be sync or async.
    parameters:
        Declared parameter schema.
    service_key:
        Rate limiter key the handler throttles on, if it calls out.
    """

    name: str
    description: str
    handler: Handler
    parameters: ParameterSchema = field(default_factory=ParameterSchema)
    service_key: Optional[str] = None

    async def invoke(self, params: Mapping[str, Any], context: Any) -> Any:
        """Run the handler and return its result, propagating any exception."""
        if inspect.iscoroutinefunction(self.handler):
            return await self.handler(params, context)
        result = await asyncio.to_thread(self.handler, params, context)
        if inspect.isawaitable(result):
            result = await result
        return result

    def to_tool_definition(self) -> Dict[str, Any]:
        """Render the declaration in function-calling format."""
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters.model_dump(exclude_none=True),
        }
