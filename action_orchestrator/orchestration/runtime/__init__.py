"""Concurrent execution runtime for validated plans.

 The main entry point is ``ConcurrentExecutor``: it fans a plan out into one
 task per invocation, isolates each handler's failure, and collects exactly one
 ``ExecutionOutcome`` per invocation.
 """

from .executor import ConcurrentExecutor

__all__ = [
    "ConcurrentExecutor",
]
