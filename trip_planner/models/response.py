# Role: Wire contract of one planning turn. Request = transcript + optional user id; Response = assistant
# text plus at most one signal (dateNeeded / guestsNeeded / planReady with a Plan payload).

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from trip_planner.models.plan import Plan

SignalType = Literal["dateNeeded", "guestsNeeded", "planReady"]


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Key line: records stay loose here; the transcript normalizer owns their validation.
    messages: List[Any] = Field(default_factory=list)
    user_id: Optional[str] = Field(default=None, alias="userId")


class Signal(BaseModel):
    type: SignalType
    payload: Optional[Plan] = None


class AgentResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ai_text: str = Field(alias="aiText")
    signal: Optional[Signal] = None

    @classmethod
    def text(cls, ai_text: str) -> "AgentResponse":
        return cls(ai_text=ai_text)

    @classmethod
    def slot_request(cls, ai_text: str, signal_type: SignalType) -> "AgentResponse":
        return cls(ai_text=ai_text, signal=Signal(type=signal_type))

    @classmethod
    def plan_ready(cls, ai_text: str, plan: Plan) -> "AgentResponse":
        return cls(ai_text=ai_text, signal=Signal(type="planReady", payload=plan))

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
