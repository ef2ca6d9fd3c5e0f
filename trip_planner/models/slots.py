# Role: Derived readiness flags for plan generation. Never stored; recomputed every request from the
# transcript suffix after the last plan snapshot.

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class Slots:
    destination_known: bool
    dates_known: bool
    guests_known: bool
    destination: Optional[str] = None


class GateOutcome(str, Enum):
    GENERIC_PROMPT = "generic_prompt"
    DATE_NEEDED = "dateNeeded"
    GUESTS_NEEDED = "guestsNeeded"
    ELIGIBLE = "eligible"
