"""
HTTP surface tests through FastAPI's TestClient. Credentials are removed before the app is imported so the
process-wide orchestrator starts without an engine and never touches the network.
"""

import os

for _name in ("GEMINI_API_KEY", "UNSPLASH_ACCESS_KEY", "AMADEUS_CLIENT_ID", "AMADEUS_CLIENT_SECRET"):
    os.environ.pop(_name, None)

import pytest
from fastapi import status
from fastapi.testclient import TestClient

from conftest import ROME_TRANSCRIPT, StubEngine, call, rome_plan_arguments
from trip_planner.api.deps import orchestrator
from trip_planner.core.image_resolver import FALLBACK_IMAGE_URL
from trip_planner.llm.reasoning_engine import EngineReply
from trip_planner.main import app


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


def test_health_and_root(client):
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/").json()["health"] == "/health"


def test_generic_prompt_without_engine(client):
    r = client.post("/chat/travel", json={"messages": [{"role": "user", "content": "Hello"}]})
    assert r.status_code == status.HTTP_200_OK
    assert r.json() == {"aiText": "Where would you like to go on your next adventure?"}


def test_guests_needed_signal(client):
    r = client.post(
        "/chat/travel",
        json={"messages": [{"role": "user", "content": "Paris from 2025-06-01 to 2025-06-10"}], "userId": "api-1"},
    )
    assert r.json() == {"aiText": "And how many people will be traveling?", "signal": {"type": "guestsNeeded"}}


def test_plan_ready_with_stub_engine(client, monkeypatch):
    monkeypatch.setattr(orchestrator, "engine", StubEngine([EngineReply(tool_calls=[call("create_plan", rome_plan_arguments())])]))

    r = client.post("/chat/travel", json={"messages": ROME_TRANSCRIPT, "userId": "api-rome"})
    body = r.json()

    assert body["aiText"] == "Here is your personalized plan!"
    assert body["signal"]["type"] == "planReady"
    assert body["signal"]["payload"]["location"] == "Rome"
    assert body["signal"]["payload"]["image"] == FALLBACK_IMAGE_URL
    assert "costBreakdown" in body["signal"]["payload"]


def test_profile_snapshot(client):
    client.post(
        "/chat/travel",
        json={"messages": [{"role": "user", "content": "A family beach trip to Bali"}], "userId": "api-profile"},
    )
    body = client.get("/profile/api-profile").json()

    assert body["user_id"] == "api-profile"
    assert body["last_destination"] == "Bali"
    assert body["request_count"] == 1
    assert body["profile"]["companionship"] == "family"
    assert "beach" in body["profile"]["travel_style"]


def test_missing_messages_defaults_to_empty_transcript(client):
    r = client.post("/chat/travel", json={})
    assert r.status_code == status.HTTP_200_OK
    assert "aiText" in r.json()
