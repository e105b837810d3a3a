"""
Unit tests for the Logfire monitoring module.

This test suite covers:
- Environment variable parsing
- Initialization with missing token or disabled flag
- Helper functions forwarding to Logfire when active
- Graceful degradation when Logfire is inactive
"""

import importlib
import os
from unittest.mock import MagicMock, patch

import pytest

from action_orchestrator.core import monitoring


@pytest.fixture(autouse=True)
def _reload_monitoring_after_test():
    yield
    with patch.dict(os.environ, {"LOGFIRE_ENABLED": "false"}):
        importlib.reload(monitoring)


class TestLogfireEnvironmentConfiguration:
    """Test environment variable configuration for Logfire."""

    def test_logfire_disabled_by_default(self):
        with patch.dict(os.environ, {}, clear=True):
            importlib.reload(monitoring)

            assert monitoring.LOGFIRE_ENABLED is False
            assert monitoring.LOGFIRE_SERVICE_NAME == "action-orchestrator"

    @pytest.mark.parametrize("value", ["true", "1", "yes", "TRUE"])
    def test_logfire_enabled_values(self, value):
        with patch.dict(os.environ, {"LOGFIRE_ENABLED": value, "LOGFIRE_TOKEN": ""}):
            importlib.reload(monitoring)

            assert monitoring.LOGFIRE_ENABLED is True

    def test_logfire_settings_from_environment(self):
        env = {
            "LOGFIRE_SERVICE_NAME": "soc-planner",
            "LOGFIRE_ENVIRONMENT": "staging",
            "LOGFIRE_TRACE_HTTPX": "true",
        }
        with patch.dict(os.environ, env):
            importlib.reload(monitoring)

            assert monitoring.LOGFIRE_SERVICE_NAME == "soc-planner"
            assert monitoring.LOGFIRE_ENVIRONMENT == "staging"
            assert monitoring.LOGFIRE_TRACE_HTTPX is True


class TestInitializeLogfire:
    """Test initialize_logfire behaviour."""

    def test_disabled_returns_false(self):
        with patch.object(monitoring, "LOGFIRE_ENABLED", False):
            assert monitoring.initialize_logfire() is False

    def test_enabled_without_token_returns_false(self):
        with patch.object(monitoring, "LOGFIRE_ENABLED", True), patch.object(monitoring, "LOGFIRE_TOKEN", ""):
            assert monitoring.initialize_logfire() is False

    def test_enabled_with_token_configures_logfire(self):
        fake_logfire = MagicMock()
        with patch.object(monitoring, "LOGFIRE_ENABLED", True), patch.object(
            monitoring, "LOGFIRE_TOKEN", "token"
        ), patch.dict("sys.modules", {"logfire": fake_logfire}):
            assert monitoring.initialize_logfire() is True

        fake_logfire.configure.assert_called_once()
        assert fake_logfire.configure.call_args.kwargs["token"] == "token"
        fake_logfire.instrument_pydantic_ai.assert_called_once()

    def test_configure_failure_returns_false(self):
        fake_logfire = MagicMock()
        fake_logfire.configure.side_effect = RuntimeError("bad token")
        with patch.object(monitoring, "LOGFIRE_ENABLED", True), patch.object(
            monitoring, "LOGFIRE_TOKEN", "token"
        ), patch.dict("sys.modules", {"logfire": fake_logfire}):
            assert monitoring.initialize_logfire() is False


class TestLoggingHelpers:
    """Test the helper functions."""

    @pytest.mark.parametrize(
        "call",
        [
            lambda: monitoring.log_plan_generated("t1", proposed=3, accepted=2),
            lambda: monitoring.log_tool_execution("check_ip_reputation", True, 12.5),
            lambda: monitoring.log_llm_call("gemini", 100),
            lambda: monitoring.log_error("ValueError", "bad", {"tenant_id": "t1"}),
        ],
    )
    def test_helpers_do_not_raise_when_inactive(self, call):
        with patch.object(monitoring, "_logfire_active", False):
            call()

    def test_helpers_forward_to_logfire_when_active(self):
        fake_logfire = MagicMock()
        with patch.object(monitoring, "_logfire_active", True), patch.dict("sys.modules", {"logfire": fake_logfire}):
            monitoring.log_plan_generated("t1", proposed=3, accepted=2)
            monitoring.log_tool_execution("enrich_domain", False, 5.0)
            monitoring.log_error("RuntimeError", "boom", {"tenant_id": "t1"})

        fake_logfire.info.assert_any_call("Plan generated", tenant_id="t1", proposed=3, accepted=2)
        fake_logfire.info.assert_any_call("Tool executed", tool="enrich_domain", success=False, duration_ms=5.0)
        fake_logfire.error.assert_called_once_with("RuntimeError: boom", tenant_id="t1")

    def test_helper_swallows_logfire_failure(self):
        fake_logfire = MagicMock()
        fake_logfire.info.side_effect = RuntimeError("exporter down")
        with patch.object(monitoring, "_logfire_active", True), patch.dict("sys.modules", {"logfire": fake_logfire}):
            monitoring.log_llm_call("gemini", 10, cost_usd=0.01)
