from __future__ import annotations

"""Capability registry.

The registry maps a tool name to its ``Capability`` declaration and handler.

The plan generator reads it to describe the available tools, the validator to
drop entries naming unknown tools, and the executor to resolve handlers.
Registration happens once at startup; the registry is read-only afterwards.
"""

import logging
from typing import Any, Dict, List, Optional

from .base import Capability

logger = logging.getLogger(__name__)


class CapabilityRegistry:
    """
    In-memory mapping of tool names to capabilities.

    Notes:
        - ``register`` overwrites any existing mapping for the tool name.
        - ``get`` returns ``None`` if the tool is missing.
    """

    def __init__(self) -> None:
        """Initialize an empty capability registry."""
        self._caps: Dict[str, Capability] = {}

    def register(self, cap: Capability) -> None:
        """
        Register a capability.

        Args:
            cap: The capability to register. An existing entry with the same name is replaced.
        """
        if cap.name in self._caps:
            logger.debug(f"Replacing registered tool: {cap.name}")
        self._caps[cap.name] = cap
        logger.info(f"Registered tool: {cap.name}")

    def get(self, name: str) -> Optional[Capability]:
        """
        Retrieve a registered capability by name.

        Args:
            name: The tool name.

        Returns:
            The capability, or None if no tool is registered under ``name``.
        """
        return self._caps.get(name)

    def has(self, name: str) -> bool:
        """Check if a tool is registered."""
        return name in self._caps

    def list(self) -> List[Capability]:
        """Return all registered capabilities."""
        return list(self._caps.values())

    def names(self) -> List[str]:
        return list(self._caps)

    def describe(self) -> str:
        """Render ``- name: description`` lines for the planning prompt."""
        return "\n".join(f"- {cap.name}: {cap.description}" for cap in self._caps.values())

    def tool_definitions(self) -> List[Dict[str, Any]]:
        return [cap.to_tool_definition() for cap in self._caps.values()]

    def __len__(self) -> int:
        return len(self._caps)

    def __contains__(self, name: object) -> bool:
        return name in self._caps
