# Role: Tagged classification of one reasoning-engine reply. Decision drives the agent loop as a single
# match: answer with text / surface a slot request / dispatch a tool batch / re-prompt on an empty reply.
# The validator enforces that each action carries exactly the data it needs.

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from trip_planner.models.response import SignalType
from trip_planner.models.tool_call import ToolCall


class Action(str, Enum):
    TEXT = "text"
    SLOT_REQUEST = "slot_request"
    TOOL_BATCH = "tool_batch"
    EMPTY = "empty"


class Decision(BaseModel):
    action: Action
    text: Optional[str] = None
    signal_type: Optional[SignalType] = None
    tool_calls: List[ToolCall] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_payload(self):
        if self.action == Action.TEXT and not (self.text or "").strip():
            raise ValueError("text is required when action=TEXT")

        if self.action == Action.SLOT_REQUEST and self.signal_type is None:
            raise ValueError("signal_type is required when action=SLOT_REQUEST")

        if self.action == Action.TOOL_BATCH and not self.tool_calls:
            raise ValueError("tool_calls is required when action=TOOL_BATCH")

        # Non-batch actions must not carry tool calls
        if self.action != Action.TOOL_BATCH and self.tool_calls:
            raise ValueError("tool_calls must be empty unless action=TOOL_BATCH")

        return self
