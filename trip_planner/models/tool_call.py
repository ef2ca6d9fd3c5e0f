# Role: Tool-calling records exchanged with the reasoning engine. ToolCall is what the engine proposes,
# ToolResult is what we feed back as a tool message (keyed by the call id).

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any


def new_tool_call_id() -> str:
    return f"call_{uuid.uuid4().hex[:12]}"


@dataclass
class ToolCall:
    """
    Canonical representation of a tool request.

    arguments may be a dict (structured providers) or a raw JSON string (OpenAI-style providers);
    the orchestrator parses it leniently before dispatch.
    """
    name: str
    arguments: Any = field(default_factory=dict)
    id: str = field(default_factory=new_tool_call_id)


@dataclass(frozen=True)
class ToolResult:
    tool_call_id: str
    name: str
    content: Any
