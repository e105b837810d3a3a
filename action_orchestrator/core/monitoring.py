"""
Monitoring and Tracing Configuration Module.

This module provides integration with Pydantic Logfire for monitoring and
tracing of the orchestration engine, including:
- Reasoning model calls and token usage
- Generated plans (size, dropped entries)
- Tool execution outcomes and latency
- Error tracking

Every helper degrades to a debug log line when Logfire is disabled or not
installed, so callers never need to guard their calls.
"""

import logging
import os
from typing import Optional

logger = logging.getLogger(__name__)

# Logfire configuration from environment
LOGFIRE_ENABLED = os.getenv("LOGFIRE_ENABLED", "false").lower() in ("true", "1", "yes")
LOGFIRE_TOKEN = os.getenv("LOGFIRE_TOKEN", "")
LOGFIRE_ENVIRONMENT = os.getenv("LOGFIRE_ENVIRONMENT", "development")
LOGFIRE_SERVICE_NAME = os.getenv("LOGFIRE_SERVICE_NAME", "action-orchestrator")
LOGFIRE_SERVICE_VERSION = os.getenv("LOGFIRE_SERVICE_VERSION", "0.0.0")

# Feature flags
LOGFIRE_TRACE_PYDANTIC_AI = os.getenv("LOGFIRE_TRACE_PYDANTIC_AI", "true").lower() in ("true", "1", "yes")
LOGFIRE_TRACE_HTTPX = os.getenv("LOGFIRE_TRACE_HTTPX", "false").lower() in ("true", "1", "yes")

_logfire_active = False


def _active_logfire():
    """Return the configured logfire module, raising when monitoring is inactive."""
    if not _logfire_active:
        raise RuntimeError("logfire not initialized")
    import logfire

    return logfire


def initialize_logfire() -> bool:
    """
    Initialize Pydantic Logfire for monitoring and tracing.

    The initialization is conditional based on the LOGFIRE_ENABLED environment variable.

    Returns:
        True when Logfire was configured, False otherwise.
    """
    global _logfire_active

    if not LOGFIRE_ENABLED:
        logger.info("Logfire monitoring is disabled. Set LOGFIRE_ENABLED=true to enable.")
        return False

    if not LOGFIRE_TOKEN:
        logger.warning(
            "Logfire is enabled but LOGFIRE_TOKEN is not set. "
            "Monitoring will not work. Set LOGFIRE_TOKEN to enable Logfire."
        )
        return False

    try:
        import logfire

        logfire.configure(
            token=LOGFIRE_TOKEN,
            service_name=LOGFIRE_SERVICE_NAME,
            service_version=LOGFIRE_SERVICE_VERSION,
            environment=LOGFIRE_ENVIRONMENT,
        )

        if LOGFIRE_TRACE_PYDANTIC_AI:
            try:
                logfire.instrument_pydantic_ai()
                logger.info("Logfire: Pydantic AI instrumentation enabled")
            except Exception as e:
                logger.warning(f"Failed to instrument Pydantic AI: {e}")

        if LOGFIRE_TRACE_HTTPX:
            try:
                logfire.instrument_httpx()
                logger.info("Logfire: HTTPX instrumentation enabled")
            except Exception as e:
                logger.warning(f"Failed to instrument HTTPX: {e}")

        logger.info(f"Logfire monitoring initialized: environment={LOGFIRE_ENVIRONMENT}, service={LOGFIRE_SERVICE_NAME}")
        _logfire_active = True
        return True

    except ImportError:
        logger.warning("Logfire is enabled but 'logfire' package is not installed. Install it with: pip install logfire")
    except Exception as e:
        logger.error(f"Failed to initialize Logfire: {e}", exc_info=True)
    return False


def log_plan_generated(tenant_id: Optional[str], proposed: int, accepted: int) -> None:
    """
    Log a generated plan.

    Args:
        tenant_id: The tenant the investigation belongs to
        proposed: Number of entries the reasoning service proposed
        accepted: Number of entries that survived validation
    """
    try:
        logfire = _active_logfire()
        logfire.info("Plan generated", tenant_id=tenant_id, proposed=proposed, accepted=accepted)
    except Exception:
        logger.debug(f"Could not log plan to Logfire: proposed={proposed} accepted={accepted}")


def log_tool_execution(tool: str, success: bool, duration_ms: float) -> None:
    """
    Log the completion of a single tool invocation.

    Args:
        tool: The tool name
        success: Whether the handler succeeded
        duration_ms: Handler latency in milliseconds
    """
    try:
        logfire = _active_logfire()
        logfire.info("Tool executed", tool=tool, success=success, duration_ms=duration_ms)
    except Exception:
        logger.debug(f"Could not log tool execution to Logfire: tool={tool}")


def log_llm_call(model: Optional[str], tokens_used: int, cost_usd: Optional[float] = None) -> None:
    """
    Log an LLM model call with usage metrics.

    Args:
        model: The model name
        tokens_used: Total tokens used in the call
        cost_usd: The cost in USD (optional)
    """
    try:
        logfire = _active_logfire()
        logfire.info("LLM call completed", model=model, tokens_used=tokens_used, cost_usd=cost_usd)
    except Exception:
        logger.debug(f"Could not log LLM call to Logfire: model={model}")


def log_error(error_type: str, error_message: str, context: Optional[dict] = None) -> None:
    """
    Log an error with context for debugging.

    Args:
        error_type: Type of error
        error_message: Error message
        context: Additional context dictionary
    """
    try:
        logfire = _active_logfire()
        logfire.error(f"{error_type}: {error_message}", **(context or {}))
    except Exception:
        logger.debug(f"Could not log error to Logfire: {error_type}")


# Initialize Logfire on module import
initialize_logfire()
