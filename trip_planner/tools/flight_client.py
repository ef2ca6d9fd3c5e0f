# Role: External tool adapter for flights. Resolves free-text origin/destination to IATA codes, searches
# Amadeus flight offers and maps them to compact fare summaries. Carrier display names are resolved in
# parallel (independent lookups, joined before returning).

from __future__ import annotations

import logging
import os
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from amadeus import Client, Location, ResponseError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FlightToolResult:
    ok: bool
    data: Dict[str, Any]
    error: Optional[str] = None


def pick_iata(label: str) -> Optional[str]:
    # Role: "City, CODE" / "(CODE)" / "CODE" -> CODE, else None.
    if not label:
        return None
    m = re.search(r"\(([A-Za-z]{3})\)", label)
    if m:
        return m.group(1).upper()
    last = label.split(",")[-1].strip()
    if re.fullmatch(r"[A-Za-z]{3}", last):
        return last.upper()
    return None


def pretty_duration(iso_duration: Optional[str]) -> str:
    # "PT3H45M" -> "3h 45m"
    if not iso_duration:
        return ""
    h = re.search(r"(\d+)H", iso_duration)
    m = re.search(r"(\d+)M", iso_duration)
    parts = []
    if h:
        parts.append(f"{h.group(1)}h")
    if m:
        parts.append(f"{m.group(1)}m")
    return " ".join(parts)


def hhmm(iso_ts: Optional[str]) -> str:
    if not iso_ts:
        return ""
    try:
        return datetime.fromisoformat(iso_ts).strftime("%H:%M")
    except ValueError:
        return ""


def stop_label(stops: int) -> str:
    if stops <= 0:
        return "Direct"
    return "1 stop" if stops == 1 else f"{stops} stops"


class AmadeusFlightClient:
    MAX_OFFERS = 10
    _CARRIER_WORKERS = 4

    def __init__(self, client: Optional[Client] = None) -> None:
        # Key line: lazy-init so a missing credential degrades to an error result instead of crashing.
        self._client = client
        self._iata_cache: Dict[str, str] = {}
        self._carrier_cache: Dict[str, str] = {}

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

    def _resolve_iata(self, client: Client, text: str) -> Optional[str]:
        raw = (text or "").strip()
        if not raw:
            return None
        if re.fullmatch(r"[A-Za-z]{3}", raw):
            return raw.upper()
        code = pick_iata(raw)
        if code:
            return code

        key = raw.lower()
        if key in self._iata_cache:
            return self._iata_cache[key]

        try:
            resp = client.reference_data.locations.get(keyword=raw, subType=Location.ANY)
        except ResponseError as e:
            logger.warning("Amadeus location lookup failed for %r: %s", raw, e)
            return None

        # Prefer CITY over AIRPORT
        candidates = [it for it in (resp.data or []) if it.get("iataCode")]
        candidates.sort(key=lambda it: 1 if (it.get("subType") or "").upper() == "CITY" else 0, reverse=True)
        if not candidates:
            return None
        code = candidates[0]["iataCode"].upper()
        self._iata_cache[key] = code
        return code

    def _carrier_name(self, client: Client, code: str) -> str:
        if code in self._carrier_cache:
            return self._carrier_cache[code]
        try:
            resp = client.reference_data.airlines.get(airlineCodes=code)
            rows = resp.data or []
            name = (rows[0].get("commonName") or rows[0].get("businessName")) if rows else None
        except ResponseError as e:
            logger.debug("Carrier lookup failed for %s: %s", code, e)
            name = None
        name = name.title() if name else code
        self._carrier_cache[code] = name
        return name

    def _resolve_carriers(self, client: Client, codes: List[str]) -> Dict[str, str]:
        # Key line: fan-out over distinct codes; result order is irrelevant, only the mapping is used.
        unique = sorted({c for c in codes if c})
        if not unique:
            return {}
        with ThreadPoolExecutor(max_workers=min(self._CARRIER_WORKERS, len(unique))) as pool:
            names = list(pool.map(lambda c: self._carrier_name(client, c), unique))
        return dict(zip(unique, names))

    def search(
        self,
        *,
        origin: str,
        destination: str,
        depart_date: str,
        return_date: Optional[str] = None,
        adults: int = 1,
        currency: str = "USD",
    ) -> FlightToolResult:
        # 1) Validate credentials + inputs
        # 2) Resolve IATA codes
        # 3) Search offers, map to fare summaries (cheapest first)
        # 4) Resolve carrier names in parallel

        client = self._get_client()
        if client is None:
            return FlightToolResult(ok=False, data={}, error="Flight search is not configured")
        if not depart_date:
            return FlightToolResult(ok=False, data={}, error="Missing depart_date (YYYY-MM-DD)")

        o = self._resolve_iata(client, origin)
        d = self._resolve_iata(client, destination)
        if not o or not d:
            missing = "origin" if not o else "destination"
            return FlightToolResult(ok=False, data={}, error=f"Unknown {missing} location")

        params: Dict[str, Any] = {
            "originLocationCode": o,
            "destinationLocationCode": d,
            "departureDate": depart_date,
            "adults": max(1, int(adults or 1)),
            "currencyCode": currency,
            "max": self.MAX_OFFERS,
        }
        if return_date:
            params["returnDate"] = return_date

        try:
            resp = client.shopping.flight_offers_search.get(**params)
        except ResponseError as e:
            return FlightToolResult(ok=False, data={}, error=f"Amadeus flight search failed: {e}")

        fares: List[Dict[str, Any]] = []
        for offer in resp.data or []:
            fare = self._map_offer(offer)
            if fare is not None:
                fares.append(fare)
        fares.sort(key=lambda f: f["price"])

        names = self._resolve_carriers(client, [f["carrier_code"] for f in fares])
        for fare in fares:
            fare["airline"] = names.get(fare["carrier_code"], fare["carrier_code"])

        data = {
            "origin": o,
            "destination": d,
            "depart_date": depart_date,
            "return_date": return_date,
            "currency": currency,
            "offers": fares,
        }
        return FlightToolResult(ok=True, data=data)

    def _map_offer(self, offer: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        price = (offer.get("price") or {}).get("grandTotal") or (offer.get("price") or {}).get("total")
        try:
            price_f = float(price)
        except (TypeError, ValueError):
            return None

        itineraries = offer.get("itineraries") or []
        first = itineraries[0] if itineraries else {}
        segments = first.get("segments") or []
        seg0 = segments[0] if segments else {}
        seg_last = segments[-1] if segments else {}
        carrier = seg0.get("carrierCode") or (offer.get("validatingAirlineCodes") or [""])[0]
        stops = max(0, len(segments) - 1)

        return {
            "id": offer.get("id"),
            "carrier_code": carrier,
            "airline": carrier,
            "depart": hhmm((seg0.get("departure") or {}).get("at")),
            "arrive": hhmm((seg_last.get("arrival") or {}).get("at")),
            "airport_from": (seg0.get("departure") or {}).get("iataCode"),
            "airport_to": (seg_last.get("arrival") or {}).get("iataCode"),
            "duration": f"{pretty_duration(first.get('duration'))} / {stop_label(stops)}".strip(" /"),
            "stops": stops,
            "price": round(price_f, 2),
        }
