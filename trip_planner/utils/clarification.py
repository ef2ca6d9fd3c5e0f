# Role: Deterministic "one question" builder. Converts a gate outcome (or an engine-requested slot) into the
# single user-facing question that accompanies the slot-request signal.

from __future__ import annotations

import logging
from typing import Optional

from trip_planner.models.slots import GateOutcome

logger = logging.getLogger(__name__)

GENERIC_PROMPT = "Where would you like to go on your next adventure?"


def build_gate_question(outcome: GateOutcome, destination: Optional[str] = None) -> str:
    # Step 1: trace the outcome (helps follow the dialog in debug mode).
    logger.debug("CLARIFICATION_BUILDER outcome=%s destination=%s", outcome.value, destination)

    if outcome == GateOutcome.DATE_NEEDED:
        if destination:
            return f"Sounds exciting! When would you like to go to {destination}?"
        return "When would you like to travel?"

    if outcome == GateOutcome.GUESTS_NEEDED:
        return "And how many people will be traveling?"

    return GENERIC_PROMPT


def build_engine_slot_question(signal_type: str) -> str:
    # Role: wording when the reasoning engine itself asked for the slot.
    if signal_type == GateOutcome.DATE_NEEDED.value:
        return "When would you like to travel?"
    if signal_type == GateOutcome.GUESTS_NEEDED.value:
        return "How many people are traveling?"
    return GENERIC_PROMPT
