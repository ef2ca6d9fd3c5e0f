# Role: Read-only transparency endpoint for the UI.
# Does NOT change any flow logic. Only exposes the current memory snapshot by user id.

from datetime import datetime
from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel

from trip_planner.api.deps import orchestrator

router = APIRouter(tags=["profile"])


class ProfileSnapshot(BaseModel):
    user_id: str
    profile: dict
    last_destination: Optional[str]
    request_count: int
    updated_at: datetime


@router.get("/profile/{user_id}", response_model=ProfileSnapshot)
def get_profile(user_id: str) -> ProfileSnapshot:
    memory = orchestrator.store.get(user_id)
    return ProfileSnapshot(
        user_id=memory.user_id,
        profile=memory.profile.model_dump(),
        last_destination=memory.last_destination,
        request_count=memory.request_count,
        updated_at=memory.updated_at,
    )
