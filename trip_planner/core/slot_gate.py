# Role: Input gatekeeper for plan generation. Derives Slots from the transcript suffix after the last plan
# snapshot and maps them to exactly one gate outcome per turn, in strict priority order:
# destination -> dates -> guests -> eligible.

from __future__ import annotations

from typing import Sequence

from trip_planner.models.message import Message
from trip_planner.models.slots import GateOutcome, Slots
from trip_planner.utils.history_extractors import (
    extract_destination,
    has_dates,
    has_guests,
    messages_since_snapshot,
    user_text,
)


class SlotGate:
    def derive(self, history: Sequence[Message]) -> Slots:
        # 1) Keep only entries after the most recent plan snapshot
        # 2) Concatenate user text
        # 3) Run the deterministic extractors
        relevant = messages_since_snapshot(history)
        text = user_text(relevant)
        destination = extract_destination(text)
        return Slots(
            destination_known=destination is not None,
            dates_known=has_dates(text),
            guests_known=has_guests(text),
            destination=destination,
        )

    def evaluate(self, slots: Slots) -> GateOutcome:
        # Key line: only one missing slot is surfaced per turn.
        if not slots.destination_known:
            return GateOutcome.GENERIC_PROMPT
        if not slots.dates_known:
            return GateOutcome.DATE_NEEDED
        if not slots.guests_known:
            return GateOutcome.GUESTS_NEEDED
        return GateOutcome.ELIGIBLE
