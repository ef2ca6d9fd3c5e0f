# Role: Capability interface for the reasoning engine. The orchestrator only needs one operation:
# given the running context and the tool catalog, return text and/or proposed tool calls.

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Protocol, Sequence

from trip_planner.models.message import Message
from trip_planner.models.tool_call import ToolCall


@dataclass(frozen=True)
class EngineReply:
    text: str = ""
    tool_calls: List[ToolCall] = field(default_factory=list)


class ReasoningEngine(Protocol):
    def complete(self, context: Sequence[Message], tool_catalog: List[Dict[str, Any]]) -> EngineReply:
        """
        context[0] is the system message; the rest is the transcript plus any assistant tool-call turns and
        tool results appended during this request. Raises on transport/service failure.
        """
        ...
