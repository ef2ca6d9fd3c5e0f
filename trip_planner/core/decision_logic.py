# Role: Routing brain for one engine reply. Classifies the reply into exactly one Decision:
# surface a slot request, dispatch a tool batch, answer with text, or re-prompt on an empty reply.

from __future__ import annotations

import logging

from trip_planner.core.tool_registry import ToolKind, ToolRegistry
from trip_planner.llm.reasoning_engine import EngineReply
from trip_planner.models.decision import Action, Decision

logger = logging.getLogger(__name__)


class DecisionLogic:
    def decide(self, reply: EngineReply, registry: ToolRegistry, request_id: str = "-") -> Decision:
        # 1) Any UI-only slot request wins (first one in emission order); the rest of the batch is dropped
        # 2) Other tool calls -> dispatch as a batch
        # 3) Non-empty text -> final answer
        # 4) Nothing usable -> empty
        calls = list(reply.tool_calls or [])

        for call in calls:
            spec = registry.get(call.name)
            if spec is not None and spec.kind == ToolKind.SLOT_REQUEST:
                if len(calls) > 1:
                    logger.info(
                        "[chat][%s] Slot request %r wins; discarding %d other proposed call(s)",
                        request_id,
                        call.name,
                        len(calls) - 1,
                    )
                return Decision(action=Action.SLOT_REQUEST, signal_type=spec.signal_type, text=reply.text or None)

        if calls:
            return Decision(action=Action.TOOL_BATCH, tool_calls=calls, text=reply.text or None)

        text = (reply.text or "").strip()
        if text:
            return Decision(action=Action.TEXT, text=text)

        return Decision(action=Action.EMPTY)
