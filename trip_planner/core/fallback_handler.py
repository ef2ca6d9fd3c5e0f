# Role: Deterministic planning flow used when no reasoning engine is configured. Walks the slot gate
# (destination -> dates -> guests) and, once everything is known, returns a basic outline plan.

from __future__ import annotations

import logging
from typing import Optional

from trip_planner.core.image_resolver import ImageResolver
from trip_planner.core.slot_gate import SlotGate
from trip_planner.models.plan import Plan
from trip_planner.models.response import AgentResponse
from trip_planner.models.slots import GateOutcome, Slots
from trip_planner.utils.clarification import build_gate_question

logger = logging.getLogger(__name__)

OUTLINE_TEXT = "The AI planner is temporarily unavailable, but here is a basic outline."
OUTLINE_DESCRIPTION = "This is a fallback plan. The AI planner is currently unavailable."


class FallbackHandler:
    def __init__(self, image_resolver: ImageResolver, slot_gate: Optional[SlotGate] = None) -> None:
        self.image_resolver = image_resolver
        self.slot_gate = slot_gate or SlotGate()

    def respond(self, slots: Slots, request_id: str = "-") -> AgentResponse:
        # 1) Missing slot -> the same templated question/signal the gate uses
        # 2) All known -> outline plan (resolved image, zero price, no itinerary or costs)
        outcome = self.slot_gate.evaluate(slots)
        logger.info("[chat][%s] Running fallback flow. Slots: %s", request_id, slots)

        if outcome == GateOutcome.GENERIC_PROMPT:
            return AgentResponse.text(build_gate_question(outcome))
        if outcome in (GateOutcome.DATE_NEEDED, GateOutcome.GUESTS_NEEDED):
            return AgentResponse.slot_request(build_gate_question(outcome, slots.destination), outcome.value)

        plan = Plan(
            location=slots.destination or "",
            country="Unavailable",
            date_range="N/A",
            description=OUTLINE_DESCRIPTION,
            image=self.image_resolver.resolve(slots.destination, request_id=request_id),
            price=0,
            itinerary=[],
            cost_breakdown=[],
        )
        return AgentResponse.plan_ready(OUTLINE_TEXT, plan)
