from .base import BaseSchema
from .domain import (
    ExecutionOutcome,
    InvestigationContext,
    InvestigationEntities,
    InvestigationResult,
    Invocation,
)

__all__ = [
    "BaseSchema",
    "ExecutionOutcome",
    "InvestigationContext",
    "InvestigationEntities",
    "InvestigationResult",
    "Invocation",
]
