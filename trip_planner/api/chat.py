# Role: Thin HTTP adapter for the planning endpoint. Validates the request shape and delegates the entire
# turn to PlanOrchestrator (business logic lives in core, not in the API layer).

from fastapi import APIRouter

from trip_planner.api.deps import orchestrator
from trip_planner.models.response import AgentResponse, ChatRequest

router = APIRouter(prefix="/chat", tags=["chat"])


@router.post("/travel", response_model=AgentResponse, response_model_exclude_none=True)
def travel(req: ChatRequest) -> AgentResponse:
    # 1) Forward (messages, userId) to the orchestrator
    # 2) Return {aiText, signal?} with camelCase keys and no null fields
    return orchestrator.handle_request(req)
