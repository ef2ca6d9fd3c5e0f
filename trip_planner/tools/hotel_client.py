# Role: External tool adapter for hotels. Resolves a location to an IATA city code, lists hotel ids in that
# city and fetches offers for the stay, returning compact property summaries (cheapest first).

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional

from amadeus import Client, Location, ResponseError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HotelToolResult:
    ok: bool
    data: Dict[str, Any]
    error: Optional[str] = None


def nights_between(check_in: str, check_out: str) -> int:
    return (date.fromisoformat(check_out) - date.fromisoformat(check_in)).days


class AmadeusHotelClient:
    MAX_HOTEL_IDS = 15
    MAX_RESULTS = 8

    def __init__(self, client: Optional[Client] = None) -> None:
        self._client = client
        self._city_cache: Dict[str, str] = {}

    def _get_client(self) -> Optional[Client]:
        if self._client is None:
            client_id = os.getenv("AMADEUS_CLIENT_ID")
            client_secret = os.getenv("AMADEUS_CLIENT_SECRET")
            if not client_id or not client_secret:
                return None
            self._client = Client(
                client_id=client_id,
                client_secret=client_secret,
                hostname=os.getenv("AMADEUS_HOSTNAME", "test"),
            )
        return self._client

    def _resolve_city_code(self, client: Client, location: str) -> Optional[str]:
        raw = (location or "").strip()
        if not raw:
            return None
        # allow direct city IATA
        if re.fullmatch(r"[A-Za-z]{3}", raw):
            return raw.upper()

        key = raw.lower()
        if key in self._city_cache:
            return self._city_cache[key]

        try:
            resp = client.reference_data.locations.get(keyword=raw, subType=Location.CITY)
        except ResponseError as e:
            logger.warning("Amadeus city lookup failed for %r: %s", raw, e)
            return None

        codes = [it.get("iataCode") for it in (resp.data or []) if it.get("iataCode")]
        if not codes:
            return None
        self._city_cache[key] = codes[0].upper()
        return self._city_cache[key]

    def search(self, *, location: str, check_in: str, check_out: str, adults: int = 1) -> HotelToolResult:
        # 1) Validate credentials + stay window
        # 2) City code -> hotel ids
        # 3) Offers for those ids; keep the cheapest offer per hotel

        client = self._get_client()
        if client is None:
            return HotelToolResult(ok=False, data={}, error="Hotel search is not configured")

        try:
            nights = nights_between(check_in, check_out)
        except (TypeError, ValueError):
            return HotelToolResult(ok=False, data={}, error="check_in/check_out must be YYYY-MM-DD")
        if nights <= 0:
            return HotelToolResult(ok=False, data={}, error="check_out must be after check_in")

        city_code = self._resolve_city_code(client, location)
        if not city_code:
            return HotelToolResult(ok=False, data={}, error=f"Unknown city '{location}'")

        try:
            by_city = client.reference_data.locations.hotels.by_city.get(cityCode=city_code)
            hotel_ids = [h.get("hotelId") for h in (by_city.data or []) if h.get("hotelId")][: self.MAX_HOTEL_IDS]
            if not hotel_ids:
                return HotelToolResult(ok=True, data={"location": location, "city_code": city_code, "properties": []})

            offers = client.shopping.hotel_offers_search.get(
                hotelIds=",".join(hotel_ids),
                adults=str(max(1, int(adults or 1))),
                checkInDate=check_in,
                checkOutDate=check_out,
            )
        except ResponseError as e:
            return HotelToolResult(ok=False, data={}, error=f"Amadeus hotel search failed: {e}")

        properties: List[Dict[str, Any]] = []
        for item in offers.data or []:
            summary = self._map_item(item, nights)
            if summary is not None:
                properties.append(summary)
        properties.sort(key=lambda p: p["price_total"])

        data = {
            "location": location,
            "city_code": city_code,
            "check_in": check_in,
            "check_out": check_out,
            "nights": nights,
            "properties": properties[: self.MAX_RESULTS],
        }
        return HotelToolResult(ok=True, data=data)

    def _map_item(self, item: Dict[str, Any], nights: int) -> Optional[Dict[str, Any]]:
        hotel_info = item.get("hotel") or {}

        cheapest_total: Optional[float] = None
        cheapest_offer: Dict[str, Any] = {}
        for off in item.get("offers") or []:
            try:
                total = float((off.get("price") or {}).get("total"))
            except (TypeError, ValueError):
                continue
            if cheapest_total is None or total < cheapest_total:
                cheapest_total = total
                cheapest_offer = off

        if cheapest_total is None:
            return None

        return {
            "name": hotel_info.get("name") or "Unknown",
            "hotel_id": hotel_info.get("hotelId") or item.get("hotelId"),
            "rating": hotel_info.get("rating"),
            "price_total": round(cheapest_total, 2),
            "price_per_night": round(cheapest_total / max(1, nights), 2),
            "currency": (cheapest_offer.get("price") or {}).get("currency"),
            "offer_id": cheapest_offer.get("id"),
        }
