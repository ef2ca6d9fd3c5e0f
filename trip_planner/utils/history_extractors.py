# Role: Deterministic slot parsing over the transcript. Finds the last plan snapshot, then extracts
# destination / dates / guest cues from user text with regexes and a small city gazetteer
# (no LLM calls, fully testable).

from __future__ import annotations

import re
from typing import Optional, Sequence

from trip_planner.models.message import Message

CITY_GAZETTEER = (
    "Paris",
    "London",
    "Rome",
    "Barcelona",
    "Bali",
    "Tokyo",
    "New York",
    "Dubai",
    "Istanbul",
    "Amsterdam",
    "Madrid",
    "Milan",
    "Kyoto",
    "Lisbon",
    "Prague",
    "China",
)

_SNAPSHOT = re.compile(r"\[plan_snapshot\]", re.IGNORECASE)

# Key line: capitalized words joined by single spaces only, so a match never runs across messages.
_DESTINATION_CUE = re.compile(r"\b(to|in|for|at)\s+([A-Z][a-z]+(?: [A-Z][a-z]+)*)")

_ISO = r"\d{4}-\d{2}-\d{2}"
_DATE_RANGE = re.compile(rf"(?:from\s+{_ISO}\s+(?:to|until|till)\s+{_ISO})|(?:{_ISO}\s*(?:-|–|—)\s*{_ISO})", re.IGNORECASE)
_DATE_MARKER = "📅"

_GUEST_CUE = re.compile(r"👤|\badults?\b|\bchild(?:ren)?\b|\bkids?\b|\bguests?\b|\bpeople\b|\btravell?ers?\b", re.IGNORECASE)
_DIGIT = re.compile(r"\d")

_GAZETTEER_PATTERNS = [(city, re.compile(rf"\b{re.escape(city)}\b", re.IGNORECASE)) for city in CITY_GAZETTEER]


def last_snapshot_index(history: Sequence[Message]) -> int:
    # Role: index of the most recent plan snapshot (any role), -1 if none.
    for i in range(len(history) - 1, -1, -1):
        if _SNAPSHOT.search(history[i].content or ""):
            return i
    return -1


def messages_since_snapshot(history: Sequence[Message]) -> list[Message]:
    return list(history[last_snapshot_index(history) + 1 :])


def user_text(history: Sequence[Message], separator: str = "\n") -> str:
    return separator.join((m.content or "") for m in history if m.role == "user")


def extract_destination(text: str) -> Optional[str]:
    # 1) "to/in/for/at" + Capitalized Words (case-sensitive)
    # 2) otherwise the first gazetteer city, in gazetteer order, found anywhere (case-insensitive, word-bounded)
    if not text:
        return None
    m = _DESTINATION_CUE.search(text)
    if m:
        return m.group(2)

    for city, pattern in _GAZETTEER_PATTERNS:
        if pattern.search(text):
            return city
    return None


def has_dates(text: str) -> bool:
    if not text:
        return False
    return _DATE_MARKER in text or bool(_DATE_RANGE.search(text))


def has_guests(text: str) -> bool:
    # Key line: a cue word alone ("how many people?") is not enough; a count must be present too.
    if not text:
        return False
    return bool(_GUEST_CUE.search(text)) and bool(_DIGIT.search(text))
