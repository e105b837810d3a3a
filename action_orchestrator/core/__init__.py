"""
Core utilities and configuration for the action orchestrator.

This package provides core functionality including logging configuration,
monitoring hooks, settings and the shared error hierarchy.
"""

from action_orchestrator.core.logging_config import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
