# Role: Terminal output of the planner. The engine fills the create_plan arguments; the finalizer validates
# them into a Plan, orders the itinerary and recomputes price from the cost breakdown.

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

WEATHER_ICONS = ("sunny", "partly-sunny", "cloudy")
COST_ICON_TYPES = ("image", "date")


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Weather(_CamelModel):
    temp: Optional[float] = None
    icon: str = "sunny"


class ItineraryEvent(_CamelModel):
    type: str = ""
    icon: str = ""
    time: str = ""
    duration: str = ""
    title: str = ""
    details: str = ""


class ItineraryDay(_CamelModel):
    date: str = Field(description="YYYY-MM-DD")
    day: str = Field(default="", description="e.g., Dec 26")
    events: List[ItineraryEvent] = Field(default_factory=list)


class CostLine(_CamelModel):
    item: str = ""
    provider: str = ""
    details: str = ""
    price: float = 0.0
    icon_type: str = Field(default="date", alias="iconType")
    icon_value: str = Field(default="", alias="iconValue")


class Plan(_CamelModel):
    location: str
    country: str = ""
    date_range: str = Field(default="", alias="dateRange")
    description: str = ""
    image: str = ""
    price: float = 0.0
    weather: Optional[Weather] = None
    itinerary: List[ItineraryDay] = Field(default_factory=list)
    cost_breakdown: List[CostLine] = Field(default_factory=list, alias="costBreakdown")
