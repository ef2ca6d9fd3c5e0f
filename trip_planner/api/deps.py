# Role: Process-wide singletons shared by the routers. One orchestrator (and therefore one user store and one
# image cache) per process; the reasoning engine is only created when GEMINI_API_KEY is present.

from __future__ import annotations

from trip_planner.core.orchestrator import PlanOrchestrator
from trip_planner.llm.gemini_client import default_reasoning_engine

orchestrator = PlanOrchestrator(engine=default_reasoning_engine())
