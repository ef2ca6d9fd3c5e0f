# Role: Default tool catalog for the planner. Declares the JSON schemas the reasoning engine sees and binds
# each tool to its handler: UI-only slot requests, external lookups (flights, hotels, weather, images) and the
# terminal create_plan finalizer.

from __future__ import annotations

import logging
import math
import re
from datetime import date
from typing import Any, Dict, Optional, Tuple

from trip_planner.core.image_resolver import ImageResolver
from trip_planner.core.tool_registry import ToolKind, ToolRegistry, ToolSpec
from trip_planner.models.plan import COST_ICON_TYPES, WEATHER_ICONS, ItineraryDay, ItineraryEvent, Plan
from trip_planner.tools.flight_client import AmadeusFlightClient
from trip_planner.tools.hotel_client import AmadeusHotelClient
from trip_planner.tools.weather_client import WeatherClient

logger = logging.getLogger(__name__)

CREATE_PLAN = "create_plan"

_EVENT_SCHEMA = {
    "type": "object",
    "properties": {
        "type": {"type": "string"},
        "icon": {"type": "string"},
        "time": {"type": "string", "description": "HH:MM, 24h"},
        "duration": {"type": "string"},
        "title": {"type": "string"},
        "details": {"type": "string"},
    },
    "required": ["type", "icon", "time", "duration", "title", "details"],
}

CREATE_PLAN_PARAMETERS: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "location": {"type": "string"},
        "country": {"type": "string"},
        "dateRange": {"type": "string"},
        "description": {"type": "string"},
        "image": {"type": "string"},
        "price": {"type": "number"},
        "weather": {
            "type": "object",
            "properties": {
                "temp": {"type": "number"},
                "icon": {"type": "string", "enum": list(WEATHER_ICONS)},
            },
        },
        "itinerary": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "date": {"type": "string", "description": "YYYY-MM-DD"},
                    "day": {"type": "string", "description": "e.g., Dec 26"},
                    "events": {"type": "array", "items": _EVENT_SCHEMA},
                },
                "required": ["date", "day", "events"],
            },
        },
        "costBreakdown": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "item": {"type": "string"},
                    "provider": {"type": "string"},
                    "details": {"type": "string"},
                    "price": {"type": "number"},
                    "iconType": {"type": "string", "enum": list(COST_ICON_TYPES)},
                    "iconValue": {
                        "type": "string",
                        "description": "A URL for the image OR 'Month Day' for date (e.g., 'Dec 26')",
                    },
                },
                "required": ["item", "provider", "details", "price", "iconType", "iconValue"],
            },
        },
    },
    "required": ["location", "country", "dateRange", "description", "image", "price", "itinerary", "costBreakdown"],
}

_NO_PARAMETERS: Dict[str, Any] = {"type": "object", "properties": {}}


# -----------------------------
# Plan finalizer (pure)
# -----------------------------

def _time_key(event: ItineraryEvent) -> Tuple[int, int]:
    # Unparseable times keep their relative order after the timed ones (sort is stable).
    m = re.match(r"^\s*(\d{1,2}):(\d{2})", event.time or "")
    if not m:
        return (1, 0)
    return (0, int(m.group(1)) * 60 + int(m.group(2)))


def _day_key(day: ItineraryDay) -> Tuple[int, str]:
    try:
        return (0, date.fromisoformat(day.date.strip()).isoformat())
    except (AttributeError, ValueError):
        return (1, "")


def finalize_plan(arguments: Dict[str, Any]) -> Plan:
    # 1) Validate the engine's arguments into a Plan (raises on malformed plans)
    # 2) Order days by date and events by time
    # 3) Recompute price as the exact sum of the cost lines
    plan = Plan.model_validate(arguments)

    for day in plan.itinerary:
        day.events.sort(key=_time_key)
    plan.itinerary.sort(key=_day_key)

    plan.price = math.fsum(line.price for line in plan.cost_breakdown)
    return plan


def post_process_plan(plan: Plan, image_resolver: ImageResolver, request_id: str = "-") -> Plan:
    # Key line: the engine's image is never trusted; enumerated fields are clamped to what the UI renders.
    plan.image = image_resolver.resolve(plan.location, request_id=request_id)
    if plan.weather is not None and plan.weather.icon not in WEATHER_ICONS:
        plan.weather.icon = WEATHER_ICONS[0]
    for line in plan.cost_breakdown:
        if line.icon_type not in COST_ICON_TYPES:
            line.icon_type = "date"
    return plan


# -----------------------------
# Lookup handlers
# -----------------------------

def _text(arguments: Dict[str, Any], key: str) -> str:
    value = arguments.get(key)
    return value.strip() if isinstance(value, str) else ""


def _optional_date(arguments: Dict[str, Any], key: str) -> Optional[date]:
    raw = _text(arguments, key)
    if not raw:
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        logger.warning("Ignoring unparseable %s=%r (expected YYYY-MM-DD)", key, raw)
        return None


def _adults(arguments: Dict[str, Any]) -> int:
    raw = arguments.get("adults")
    if raw is None or raw == "":
        return 1
    try:
        return max(1, int(raw))
    except (TypeError, ValueError):
        logger.warning("Ignoring unparseable adults=%r; using 1", raw)
        return 1


def _result_payload(result: Any) -> Dict[str, Any]:
    if result.ok:
        return result.data
    return {"error": result.error or "lookup failed"}


def build_default_registry(
    *,
    image_resolver: ImageResolver,
    flight_client: Optional[AmadeusFlightClient] = None,
    hotel_client: Optional[AmadeusHotelClient] = None,
    weather_client: Optional[WeatherClient] = None,
) -> ToolRegistry:
    flights = flight_client or AmadeusFlightClient()
    hotels = hotel_client or AmadeusHotelClient()
    weather = weather_client or WeatherClient()

    def search_flights(arguments: Dict[str, Any]) -> Dict[str, Any]:
        return _result_payload(
            flights.search(
                origin=_text(arguments, "origin"),
                destination=_text(arguments, "destination"),
                depart_date=_text(arguments, "depart_date"),
                return_date=_text(arguments, "return_date") or None,
                adults=_adults(arguments),
            )
        )

    def search_hotels(arguments: Dict[str, Any]) -> Dict[str, Any]:
        return _result_payload(
            hotels.search(
                location=_text(arguments, "location"),
                check_in=_text(arguments, "check_in"),
                check_out=_text(arguments, "check_out"),
                adults=_adults(arguments),
            )
        )

    def get_weather(arguments: Dict[str, Any]) -> Dict[str, Any]:
        return _result_payload(
            weather.get_forecast(
                _text(arguments, "destination"),
                _optional_date(arguments, "start_date"),
                _optional_date(arguments, "end_date"),
            )
        )

    def get_destination_image(arguments: Dict[str, Any]) -> Dict[str, Any]:
        destination = _text(arguments, "destination")
        return {"destination": destination, "image": image_resolver.resolve(destination)}

    return ToolRegistry(
        [
            ToolSpec(
                name="request_dates",
                description=(
                    "Call this function to ask the user for their desired travel dates. "
                    "Use this when dates are unknown but required for planning."
                ),
                parameters=_NO_PARAMETERS,
                kind=ToolKind.SLOT_REQUEST,
                signal_type="dateNeeded",
            ),
            ToolSpec(
                name="request_guests",
                description=(
                    "Call this function to ask the user how many people are traveling (e.g., adults, children). "
                    "Use this when the number of guests is unknown and you need it to create a plan."
                ),
                parameters=_NO_PARAMETERS,
                kind=ToolKind.SLOT_REQUEST,
                signal_type="guestsNeeded",
            ),
            ToolSpec(
                name="search_flights",
                description="Search flight offers. Returns fares sorted by price (cheapest first).",
                parameters={
                    "type": "object",
                    "properties": {
                        "origin": {"type": "string", "description": "City name or IATA code"},
                        "destination": {"type": "string", "description": "City name or IATA code"},
                        "depart_date": {"type": "string", "description": "YYYY-MM-DD"},
                        "return_date": {"type": "string", "description": "YYYY-MM-DD, optional"},
                        "adults": {"type": "integer"},
                    },
                    "required": ["origin", "destination", "depart_date"],
                },
                kind=ToolKind.LOOKUP,
                handler=search_flights,
            ),
            ToolSpec(
                name="search_hotels",
                description="Search hotel offers for a stay. Returns properties sorted by total price.",
                parameters={
                    "type": "object",
                    "properties": {
                        "location": {"type": "string", "description": "City name or IATA city code"},
                        "check_in": {"type": "string", "description": "YYYY-MM-DD"},
                        "check_out": {"type": "string", "description": "YYYY-MM-DD"},
                        "adults": {"type": "integer"},
                    },
                    "required": ["location", "check_in", "check_out"],
                },
                kind=ToolKind.LOOKUP,
                handler=search_hotels,
            ),
            ToolSpec(
                name="get_weather",
                description="Forecast summary for a destination and date window (temp in °C and a plan icon).",
                parameters={
                    "type": "object",
                    "properties": {
                        "destination": {"type": "string"},
                        "start_date": {"type": "string", "description": "YYYY-MM-DD"},
                        "end_date": {"type": "string", "description": "YYYY-MM-DD"},
                    },
                    "required": ["destination"],
                },
                kind=ToolKind.LOOKUP,
                handler=get_weather,
            ),
            ToolSpec(
                name="get_destination_image",
                description="Representative photo URL for a destination.",
                parameters={
                    "type": "object",
                    "properties": {"destination": {"type": "string"}},
                    "required": ["destination"],
                },
                kind=ToolKind.LOOKUP,
                handler=get_destination_image,
            ),
            ToolSpec(
                name=CREATE_PLAN,
                description=(
                    "Call this function ONLY when the destination, dates, and number of guests are all known. "
                    "It returns a full, detailed, day-by-day travel plan with a cost breakdown."
                ),
                parameters=CREATE_PLAN_PARAMETERS,
                kind=ToolKind.TERMINAL,
                handler=finalize_plan,
            ),
        ]
    )
