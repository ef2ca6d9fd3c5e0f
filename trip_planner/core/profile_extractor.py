# Role: Preference extraction from cumulative user text. A static {category -> {tag -> pattern}} table is
# matched against every user message of the transcript; hits become UserProfile updates (monotonic merge).

from __future__ import annotations

import re
from typing import Dict, List, Pattern, Sequence, Union

from trip_planner.models.message import Message
from trip_planner.models.user_profile import LIST_CATEGORIES, UserProfile

PREFERENCE_PATTERNS: Dict[str, Dict[str, Pattern[str]]] = {
    "travel_style": {
        "beach": re.compile(r"beach"),
        "active": re.compile(r"active|hiking|adventure"),
        "urban": re.compile(r"city|urban"),
        "relaxing": re.compile(r"relax|spa|leisure"),
    },
    "companionship": {
        "solo": re.compile(r"solo|by myself"),
        "family": re.compile(r"family|with my kids"),
        "friends": re.compile(r"friends|group"),
    },
    "flight_class": {
        "premium_economy": re.compile(r"premium economy"),
        "business": re.compile(r"business class"),
        "first": re.compile(r"first class"),
    },
    "budget_stance": {
        "comfort": re.compile(r"comfort|luxury"),
        "saving": re.compile(r"saving|budget"),
    },
    "liked_activities": {
        "hiking": re.compile(r"hiking"),
        "wine tasting": re.compile(r"wine"),
        "museums": re.compile(r"museum"),
        "shopping": re.compile(r"shopping"),
        "extreme sports": re.compile(r"extreme sports|adrenaline"),
    },
}


class ProfileExtractor:
    def __init__(self, patterns: Dict[str, Dict[str, Pattern[str]]] | None = None) -> None:
        self.patterns = patterns or PREFERENCE_PATTERNS

    def extract(self, history: Sequence[Message]) -> Dict[str, Union[str, List[str]]]:
        # 1) Concatenate all user text (whole transcript, not just since the last snapshot)
        # 2) Lists collect every matching tag; scalars keep the last matching tag in table order
        text = " ".join((m.content or "") for m in history if m.role == "user").lower()
        if not text.strip():
            return {}

        updates: Dict[str, Union[str, List[str]]] = {}
        for category, tags in self.patterns.items():
            for tag, pattern in tags.items():
                if not pattern.search(text):
                    continue
                if category in LIST_CATEGORIES:
                    updates.setdefault(category, [])
                    updates[category].append(tag)  # type: ignore[union-attr]
                else:
                    updates[category] = tag
        return updates

    def update(self, profile: UserProfile, history: Sequence[Message]) -> UserProfile:
        profile.apply_updates(self.extract(history))
        return profile
