"""Action Orchestrator.

This package contains the action orchestration engine used by the security
operations dashboard to turn an investigation context into a set of executed,
auditable tool calls.

High-level architecture
-----------------------

The codebase is organized around two concerns:

- **Pacing outbound calls**: every quota-limited third-party API (the
  reasoning model, threat-intelligence lookups, EDR queries) is gated by a
  per-service token bucket. Callers wait for tokens rather than being rejected.
- **Planning and executing tools**: a reasoning service proposes which
  registered tools to call for an investigation; the proposal is filtered
  against the registry and the surviving invocations run concurrently with
  per-invocation failure isolation.

Core subpackages
----------------

- ``action_orchestrator.core``: logging, monitoring, settings and the error
  hierarchy.
- ``action_orchestrator.orchestration``: rate limiter, capability registry,
  plan generation/validation, concurrent executor and the
  ``ActionOrchestrator`` facade.

Typical workflow
----------------

Most integrations should use
``action_orchestrator.orchestration.factory.build_orchestrator``:

1. Build an ``InvestigationContext`` from the alert under investigation.
2. Call ``ActionOrchestrator.investigate(context)``.
3. Serialize the returned ``InvestigationResult`` for the caller.
"""
