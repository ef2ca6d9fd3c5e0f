# Role: External tool adapter for weather. Calls Open-Meteo geocoding + forecast endpoints and returns a
# compact summary for the trip window, including a plan-ready icon (sunny / partly-sunny / cloudy).

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Optional

import requests


@dataclass(frozen=True)
class WeatherToolResult:
    ok: bool
    data: Dict[str, Any]
    error: Optional[str] = None


def icon_for(precip_mm: Optional[float], cloud_pct: Optional[float]) -> str:
    # Key line: the plan card only knows three icons.
    if (precip_mm or 0) >= 1.0 or (cloud_pct or 0) >= 70:
        return "cloudy"
    if (cloud_pct or 0) >= 30:
        return "partly-sunny"
    return "sunny"


def _mean(values: list) -> Optional[float]:
    nums = [float(v) for v in values if isinstance(v, (int, float))]
    return round(sum(nums) / len(nums), 1) if nums else None


class WeatherClient:
    GEO_URL = "https://geocoding-api.open-meteo.com/v1/search"
    FORECAST_URL = "https://api.open-meteo.com/v1/forecast"
    FORECAST_HORIZON_DAYS = 16
    _TIMEOUT_SECONDS = 15

    def get_forecast(self, destination: str, start: Optional[date] = None, end: Optional[date] = None) -> WeatherToolResult:
        # 1) Validate destination + date window
        # 2) Geocode destination -> (lat, lon)
        # 3) Fetch forecast for requested date range
        # 4) Normalize a small summary (avg temp, total precipitation, icon)

        dest = (destination or "").strip()
        if not dest:
            return WeatherToolResult(ok=False, data={}, error="Missing destination")

        # Treat "no dates" as "today" for tool calls
        start = start or date.today()
        end = end or start

        days = (end - start).days + 1
        if days <= 0:
            return WeatherToolResult(ok=False, data={}, error="Invalid date range")

        # Key line: safety net on forecast horizon.
        if (end - date.today()).days >= self.FORECAST_HORIZON_DAYS or days > self.FORECAST_HORIZON_DAYS:
            return WeatherToolResult(
                ok=False,
                data={},
                error=f"Forecast range too far out (Open-Meteo forecasts up to ~{self.FORECAST_HORIZON_DAYS} days).",
            )

        try:
            geo = self._geocode(dest)
            if not geo:
                return WeatherToolResult(ok=False, data={}, error=f"Could not geocode '{dest}'")

            params = {
                "latitude": geo["latitude"],
                "longitude": geo["longitude"],
                "daily": "temperature_2m_max,temperature_2m_min,precipitation_sum,cloud_cover_mean",
                "timezone": "auto",
                "start_date": start.isoformat(),
                "end_date": end.isoformat(),
            }

            r = requests.get(self.FORECAST_URL, params=params, timeout=self._TIMEOUT_SECONDS)
            r.raise_for_status()
            payload = r.json()

            daily = payload.get("daily", {})
            times = daily.get("time", [])
            if not times:
                return WeatherToolResult(ok=False, data={}, error="No daily forecast returned")

            tmax = _mean(daily.get("temperature_2m_max", []))
            tmin = _mean(daily.get("temperature_2m_min", []))
            precip = daily.get("precipitation_sum", [])
            total_precip = round(sum(p for p in precip if isinstance(p, (int, float))), 1)
            cloud = _mean(daily.get("cloud_cover_mean", []))

            temp = round((tmax + tmin) / 2, 1) if tmax is not None and tmin is not None else tmax
            name = geo.get("name") or dest
            country = geo.get("country")

            data = {
                "source": "open-meteo",
                "location": f"{name}, {country}" if country else name,
                "country": country,
                "timeframe": f"{times[0]} to {times[-1]}",
                "temp": temp,
                "temp_min_c": tmin,
                "temp_max_c": tmax,
                "precip_total_mm": total_precip,
                "icon": icon_for(total_precip / len(times), cloud),
            }
            return WeatherToolResult(ok=True, data=data)

        except requests.RequestException as e:
            return WeatherToolResult(ok=False, data={}, error=f"Open-Meteo request failed: {e}")
        except (TypeError, ValueError, KeyError) as e:
            return WeatherToolResult(ok=False, data={}, error=f"Bad Open-Meteo payload: {e}")

    def _geocode(self, name: str) -> Optional[Dict[str, Any]]:
        # Role: resolve city name -> coordinates (single best result).
        params = {"name": name, "count": 1, "language": "en", "format": "json"}
        r = requests.get(self.GEO_URL, params=params, timeout=self._TIMEOUT_SECONDS)
        r.raise_for_status()
        payload = r.json()
        results = payload.get("results") or []
        return results[0] if results else None
