"""
Shared fixtures: a scripted reasoning engine, a counting photo client and an orchestrator wired with
fakes only (no network, no credentials).
"""

from typing import Any, Callable, Dict, List, Optional, Sequence, Union

import pytest

from trip_planner.core.image_resolver import ImageResolver
from trip_planner.core.orchestrator import PlanOrchestrator
from trip_planner.core.state_manager import InMemoryUserMemoryStore
from trip_planner.core.tool_registry import ToolKind, ToolRegistry, ToolSpec
from trip_planner.llm.reasoning_engine import EngineReply
from trip_planner.models.message import Message
from trip_planner.models.tool_call import ToolCall

Step = Union[EngineReply, Exception, Callable[[Sequence[Message]], EngineReply]]


class StubEngine:
    """Replays scripted replies; the last step repeats once the script runs out."""

    def __init__(self, steps: List[Step]) -> None:
        self.steps = steps
        self.calls = 0
        self.contexts: List[List[Message]] = []
        self.catalogs: List[List[Dict[str, Any]]] = []

    def complete(self, context: Sequence[Message], tool_catalog: List[Dict[str, Any]]) -> EngineReply:
        self.calls += 1
        self.contexts.append(list(context))
        self.catalogs.append(tool_catalog)
        step = self.steps[min(self.calls - 1, len(self.steps) - 1)]
        if isinstance(step, Exception):
            raise step
        if callable(step):
            return step(context)
        return step


class CountingPhotoClient:
    def __init__(self, urls: Optional[List[str]] = None, error: Optional[Exception] = None) -> None:
        self.urls = urls if urls is not None else ["https://images.example.com/photo.jpg"]
        self.error = error
        self.queries: List[str] = []

    def search(self, query: str, access_key: str, per_page: int = 1) -> List[str]:
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        return list(self.urls)


def call(name: str, arguments: Any = None, id: Optional[str] = None) -> ToolCall:
    kwargs: Dict[str, Any] = {"name": name, "arguments": {} if arguments is None else arguments}
    if id is not None:
        kwargs["id"] = id
    return ToolCall(**kwargs)


def rome_plan_arguments() -> Dict[str, Any]:
    return {
        "location": "Rome",
        "country": "Italy",
        "dateRange": "Jun 1 - Jun 3, 2025",
        "description": "A relaxed city break focusing on museums, as requested.",
        "image": "https://engine.example.com/not-trusted.jpg",
        "price": 1.0,
        "weather": {"temp": 27, "icon": "sunny"},
        "itinerary": [
            {
                "date": "2025-06-02",
                "day": "Jun 2",
                "events": [
                    {"type": "tour", "icon": "tour", "time": "14:00", "duration": "3h", "title": "Colosseum", "details": ""},
                    {"type": "meal", "icon": "meal", "time": "09:00", "duration": "1h", "title": "Breakfast", "details": ""},
                ],
            },
            {
                "date": "2025-06-01",
                "day": "Jun 1",
                "events": [
                    {"type": "flight", "icon": "plane", "time": "08:30", "duration": "2h", "title": "Flight", "details": ""},
                ],
            },
        ],
        "costBreakdown": [
            {"item": "Flight", "provider": "ITA Airways", "details": "Round trip", "price": 320.5, "iconType": "date", "iconValue": "Jun 1"},
            {"item": "Hotel", "provider": "Hotel Artemide", "details": "2 nights", "price": 410.0, "iconType": "image", "iconValue": "https://x/h.jpg"},
            {"item": "Colosseum tour", "provider": "CoopCulture", "details": "Guided", "price": 55.25, "iconType": "date", "iconValue": "Jun 2"},
            {"item": "Vatican Museums", "provider": "Musei Vaticani", "details": "Skip the line", "price": 40.0, "iconType": "date", "iconValue": "Jun 2"},
            {"item": "Airport transfer", "provider": "Rome Cabs", "details": "Both ways", "price": 90.1, "iconType": "date", "iconValue": "Jun 1"},
        ],
    }


ROME_TRANSCRIPT = [
    {"role": "user", "content": "I want to go to Rome"},
    {"role": "assistant", "content": "Sounds exciting! When would you like to go to Rome?"},
    {"role": "user", "content": "📅 from 2025-06-01 to 2025-06-03"},
    {"role": "assistant", "content": "And how many people will be traveling?"},
    {"role": "user", "content": "👤 2 adults"},
]


@pytest.fixture
def photo_client() -> CountingPhotoClient:
    return CountingPhotoClient(urls=["https://images.example.com/rome.jpg"])


@pytest.fixture
def image_resolver(photo_client: CountingPhotoClient) -> ImageResolver:
    return ImageResolver(photo_client=photo_client, access_key="test-key", max_entries=16)


@pytest.fixture
def lookup_calls() -> List[Dict[str, Any]]:
    return []


@pytest.fixture
def registry(image_resolver: ImageResolver, lookup_calls: List[Dict[str, Any]]) -> ToolRegistry:
    """Default catalog with fake lookup handlers (flights/hotels/weather never leave the process)."""
    from trip_planner.core.handlers import build_default_registry

    default = build_default_registry(image_resolver=image_resolver)

    def fake_lookup(name: str) -> Callable[[Dict[str, Any]], Dict[str, Any]]:
        def handler(arguments: Dict[str, Any]) -> Dict[str, Any]:
            lookup_calls.append({"name": name, "arguments": arguments})
            return {"tool": name, "results": [{"price": 100}]}

        return handler

    specs = []
    for name in default.names():
        spec = default.get(name)
        if name in {"search_flights", "search_hotels", "get_weather"}:
            spec = ToolSpec(
                name=spec.name,
                description=spec.description,
                parameters=spec.parameters,
                kind=ToolKind.LOOKUP,
                handler=fake_lookup(name),
            )
        specs.append(spec)
    return ToolRegistry(specs)


@pytest.fixture
def make_orchestrator(registry: ToolRegistry, image_resolver: ImageResolver):
    def factory(engine: Optional[StubEngine], max_turns: int = 6, **kwargs: Any) -> PlanOrchestrator:
        return PlanOrchestrator(
            engine=engine,
            registry=kwargs.pop("registry", registry),
            store=kwargs.pop("store", InMemoryUserMemoryStore()),
            image_resolver=image_resolver,
            max_turns=max_turns,
            **kwargs,
        )

    return factory
