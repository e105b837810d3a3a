"""Planning prompt construction and response parsing."""

from __future__ import annotations

import json
import logging
from typing import Any, List, Optional

from ..capabilities.registry import CapabilityRegistry
from ..schemas.domain import InvestigationContext

logger = logging.getLogger(__name__)

PLANNING_PROMPT_TEMPLATE = """You are a security investigation AI. Given the context, decide which tools to call.

Context:
- Alert: {alert_title}
- Description: {alert_description}
- Entities: IP={ip}, User={username}, Hash={hash}, Domain={domain}
- Objective: {objective}

Available Tools:
{tools}

Respond with a JSON array of tool calls. Each object should have:
- tool: tool name
- params: object with parameters
- reason: why this tool is needed

Example:
[
  {{"tool": "check_ip_reputation", "params": {{"ip": "192.168.1.1"}}, "reason": "Check if source IP is malicious"}},
  {{"tool": "analyze_user_behavior", "params": {{"username": "admin"}}, "reason": "User performed suspicious action"}}
]

If no tools are needed, respond with: []

ONLY respond with valid JSON, no markdown or extra text."""


def build_planning_prompt(context: InvestigationContext, registry: CapabilityRegistry) -> str:
    """Render the planning request for ``context`` and the registered tools."""
    entities = context.entities
    return PLANNING_PROMPT_TEMPLATE.format(
        alert_title=context.alert_title,
        alert_description=context.alert_description,
        ip=entities.ip or "N/A",
        username=entities.username or "N/A",
        hash=entities.hash or "N/A",
        domain=entities.domain or "N/A",
        objective=context.objective,
        tools=registry.describe() or "(none)",
    )


def extract_json_array(text: str) -> Optional[str]:
    """Return the first balanced ``[...]`` region of ``text``.

    Brackets inside JSON string literals do not count towards the balance.
    Returns None when ``text`` has no ``[`` or the first one is never closed.
    """
    start = text.find("[")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "[":
            depth += 1
        elif ch == "]":
            depth -= 1
            if depth == 0:
                return text[start : i + 1]
    return None


def parse_plan(text: str) -> List[Any]:
    """Parse the reasoning response into a raw list of plan entries.

    Any failure (no array, invalid JSON, non-list value) yields an empty list.
    """
    region = extract_json_array(text.strip())
    if region is None:
        logger.warning(f"No JSON array found in reasoning response: {text[:100]}...")
        return []
    try:
        parsed = json.loads(region)
    except json.JSONDecodeError as e:
        logger.error(f"JSON parse of plan failed: {e}")
        return []
    if not isinstance(parsed, list):
        logger.warning("Reasoning response is not a JSON array")
        return []
    return parsed
