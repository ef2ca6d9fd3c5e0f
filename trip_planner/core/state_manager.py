# Role: Per-user memory store. Owns lifecycle of UserMemory objects behind a small {get, mutate} contract,
# so the in-process dict can later be swapped for an external cache without touching the orchestrator.

from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Callable, Dict, Protocol

from trip_planner.models.user_profile import UserMemory


class UserMemoryStore(Protocol):
    """
    get() returns a detached copy; mutate() applies fn to the stored memory and returns a copy of the result.
    Implementations must preserve the monotonic-merge contract of UserProfile.apply_updates.
    """

    def get(self, user_id: str) -> UserMemory:
        ...

    def mutate(self, user_id: str, fn: Callable[[UserMemory], None]) -> UserMemory:
        ...


class InMemoryUserMemoryStore(UserMemoryStore):
    def __init__(self) -> None:
        self._memories: Dict[str, UserMemory] = {}
        self._lock = threading.Lock()

    def _get_or_create(self, user_id: str) -> UserMemory:
        memory = self._memories.get(user_id)
        if memory is None:
            memory = UserMemory(user_id=user_id)
            self._memories[user_id] = memory
        return memory

    def get(self, user_id: str) -> UserMemory:
        with self._lock:
            return self._get_or_create(user_id).model_copy(deep=True)

    def mutate(self, user_id: str, fn: Callable[[UserMemory], None]) -> UserMemory:
        # 1) Apply fn under the lock (serializes same-user writes inside this process)
        # 2) Stamp updated_at
        # 3) Hand back a copy so callers cannot mutate stored state by accident
        with self._lock:
            memory = self._get_or_create(user_id)
            fn(memory)
            memory.updated_at = datetime.now(timezone.utc)
            return memory.model_copy(deep=True)
