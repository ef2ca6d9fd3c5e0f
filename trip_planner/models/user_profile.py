# Role: Per-user preference accumulator (travel style, companionship, flight class, budget stance, liked
# activities). apply_updates() merges extracted tags monotonically: lists only grow, scalars overwrite.

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

LIST_CATEGORIES = ("travel_style", "liked_activities")
SCALAR_CATEGORIES = ("companionship", "flight_class", "budget_stance")


class UserProfile(BaseModel):
    travel_style: List[str] = Field(default_factory=list)
    companionship: Optional[str] = None
    flight_class: str = "economy"
    budget_stance: str = "balanced"
    liked_activities: List[str] = Field(default_factory=list)

    def apply_updates(self, updates: Dict[str, Any]) -> None:
        # 1) Ignore empty updates
        # 2) Merge list categories without duplicates (never remove)
        # 3) Overwrite scalar categories with the latest non-empty value
        if not updates:
            return

        for category in LIST_CATEGORIES:
            tags = updates.get(category)
            if isinstance(tags, str):
                tags = [tags]
            if not isinstance(tags, list):
                continue
            current: List[str] = getattr(self, category)
            for tag in tags:
                if isinstance(tag, str):
                    cleaned = tag.strip()
                    if cleaned and cleaned not in current:
                        current.append(cleaned)

        for category in SCALAR_CATEGORIES:
            value = updates.get(category)
            if isinstance(value, str) and value.strip():
                setattr(self, category, value.strip())


class UserMemory(BaseModel):
    user_id: str
    profile: UserProfile = Field(default_factory=UserProfile)
    last_destination: Optional[str] = None
    request_count: int = 0

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
