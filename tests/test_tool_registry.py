import math
from datetime import date
from types import SimpleNamespace

import pytest

from conftest import rome_plan_arguments
from trip_planner.core.handlers import CREATE_PLAN, build_default_registry, finalize_plan, post_process_plan
from trip_planner.core.tool_registry import ToolKind, ToolRegistry, ToolSpec
from trip_planner.models.plan import Plan


def _echo(arguments):
    return {"echo": arguments}


def _boom(arguments):
    raise RuntimeError("upstream exploded")


def test_duplicate_registration_raises():
    registry = ToolRegistry([ToolSpec(name="echo", description="", handler=_echo)])
    with pytest.raises(ValueError):
        registry.register(ToolSpec(name="echo", description="", handler=_echo))


def test_specs_validate_their_kind():
    with pytest.raises(ValueError):
        ToolSpec(name="request_x", description="", kind=ToolKind.SLOT_REQUEST)
    with pytest.raises(ValueError):
        ToolSpec(name="lookup", description="", kind=ToolKind.LOOKUP)


def test_dispatch_unknown_and_ui_only_tools_return_none():
    registry = ToolRegistry(
        [ToolSpec(name="request_dates", description="", kind=ToolKind.SLOT_REQUEST, signal_type="dateNeeded")]
    )
    assert registry.dispatch("nope", {}) is None
    assert registry.dispatch("request_dates", {}) is None


def test_handler_exceptions_become_error_results():
    registry = ToolRegistry([ToolSpec(name="boom", description="", handler=_boom)])
    assert registry.dispatch("boom", {}) == {"error": "upstream exploded"}


def test_default_catalog(image_resolver):
    registry = build_default_registry(image_resolver=image_resolver)
    assert registry.names() == [
        "request_dates",
        "request_guests",
        "search_flights",
        "search_hotels",
        "get_weather",
        "get_destination_image",
        "create_plan",
    ]
    assert registry.get(CREATE_PLAN).kind == ToolKind.TERMINAL
    assert registry.get("request_guests").signal_type == "guestsNeeded"
    for entry in registry.catalog():
        assert set(entry) == {"name", "description", "parameters"}


def test_lookup_without_credentials_degrades_to_error(image_resolver, monkeypatch):
    monkeypatch.delenv("AMADEUS_CLIENT_ID", raising=False)
    monkeypatch.delenv("AMADEUS_CLIENT_SECRET", raising=False)
    registry = build_default_registry(image_resolver=image_resolver)

    result = registry.dispatch("search_flights", {"origin": "TLV", "destination": "FCO", "depart_date": "2025-06-01"})
    assert result == {"error": "Flight search is not configured"}
    result = registry.dispatch("search_hotels", {"location": "Rome", "check_in": "2025-06-01", "check_out": "2025-06-03"})
    assert result == {"error": "Hotel search is not configured"}


class RecordingClient:
    """Stands in for the flight/hotel/weather clients and records what the handlers pass."""

    def __init__(self):
        self.calls = []

    def _ok(self, **kwargs):
        self.calls.append(kwargs)
        return SimpleNamespace(ok=True, data={"received": kwargs}, error=None)

    def search(self, **kwargs):
        return self._ok(**kwargs)

    def get_forecast(self, destination, start=None, end=None):
        return self._ok(destination=destination, start=start, end=end)


def test_unparseable_adults_falls_back_to_one(image_resolver):
    flights, hotels = RecordingClient(), RecordingClient()
    registry = build_default_registry(image_resolver=image_resolver, flight_client=flights, hotel_client=hotels)

    result = registry.dispatch(
        "search_flights", {"origin": "TLV", "destination": "FCO", "depart_date": "2025-06-01", "adults": "two"}
    )
    registry.dispatch("search_hotels", {"location": "Rome", "check_in": "2025-06-01", "check_out": "2025-06-03", "adults": "3"})

    assert "error" not in result
    assert flights.calls[0]["adults"] == 1
    assert hotels.calls[0]["adults"] == 3


def test_unparseable_weather_dates_are_dropped(image_resolver):
    weather = RecordingClient()
    registry = build_default_registry(image_resolver=image_resolver, weather_client=weather)

    result = registry.dispatch("get_weather", {"destination": "Rome", "start_date": "next week", "end_date": "2025-06-03"})

    assert "error" not in result
    assert weather.calls == [{"destination": "Rome", "start": None, "end": date(2025, 6, 3)}]


def test_destination_image_tool_uses_resolver(image_resolver, photo_client):
    registry = build_default_registry(image_resolver=image_resolver)
    result = registry.dispatch("get_destination_image", {"destination": "Rome"})
    assert result == {"destination": "Rome", "image": "https://images.example.com/rome.jpg"}
    assert photo_client.queries == ["Rome travel"]


def test_finalizer_recomputes_price_from_cost_lines():
    args = rome_plan_arguments()
    plan = finalize_plan(args)

    assert len(plan.cost_breakdown) >= 5
    assert plan.price == math.fsum(line["price"] for line in args["costBreakdown"])
    assert plan.price != args["price"]


def test_finalizer_orders_days_and_events():
    plan = finalize_plan(rome_plan_arguments())

    assert [d.date for d in plan.itinerary] == ["2025-06-01", "2025-06-02"]
    assert [e.time for e in plan.itinerary[1].events] == ["09:00", "14:00"]


def test_finalizer_rejects_plan_without_location():
    args = rome_plan_arguments()
    del args["location"]
    registry = ToolRegistry([ToolSpec(name=CREATE_PLAN, description="", kind=ToolKind.TERMINAL, handler=finalize_plan)])

    result = registry.dispatch(CREATE_PLAN, args)
    assert isinstance(result, dict) and "location" in result["error"]


def test_post_process_replaces_image_and_clamps_icons(image_resolver):
    args = rome_plan_arguments()
    args["weather"]["icon"] = "thunderstorm"
    args["costBreakdown"][0]["iconType"] = "emoji"

    plan = post_process_plan(Plan.model_validate(args), image_resolver)

    assert plan.image == "https://images.example.com/rome.jpg"
    assert plan.weather.icon == "sunny"
    assert plan.cost_breakdown[0].icon_type == "date"
