# Role: Single chat message schema for the canonical transcript. Produced by the transcript normalizer,
# extended by the agent loop (assistant tool calls + tool results) and passed to the reasoning engine.

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from trip_planner.models.tool_call import ToolCall

Role = Literal["user", "assistant", "tool", "system"]

ALLOWED_ROLES = {"user", "assistant", "tool", "system"}


class Message(BaseModel):
    role: Role
    content: str = ""

    # Key line: tool entries keep the call id (and tool name) so results pair with their call.
    tool_call_id: Optional[str] = None
    name: Optional[str] = None

    # Assistant turns that proposed tools carry them, so the engine sees call -> result pairs.
    tool_calls: List[ToolCall] = Field(default_factory=list)

    hidden: bool = False
