"""
Google Places Integration — Attractions and sights in a city.

Uses the Places API (New) Text Search endpoint to find top attractions
for the city. Places are not dated, so each record is dated to the first
day of the requested range (the earliest day the visit can happen).

Popularity rule: the Google rating (0-5) normalized to 0-1 is above 0.7.
"""

import logging
from datetime import date
from typing import Any, Optional

from trip_events.core.config import is_google_places_configured
from trip_events.models.events import (
    DEFAULT_VENUE,
    PRICE_FREE,
    Coordinates,
    EventRecord,
)
from trip_events.services.integrations.base import ProviderAdapter, stable_id, text
from trip_events.services.integrations.pricing import extract_price

logger = logging.getLogger(__name__)

BASE_URL = "https://places.googleapis.com/v1/places:searchText"
MAX_RESULTS = 20
POPULARITY_THRESHOLD = 0.7
MAX_RATING = 5.0
DEFAULT_ATTRACTION_CATEGORY = "Attraction"

FIELD_MASK = ",".join([
    "places.id",
    "places.displayName",
    "places.formattedAddress",
    "places.location",
    "places.rating",
    "places.priceLevel",
    "places.priceRange",
    "places.primaryTypeDisplayName",
    "places.editorialSummary",
    "places.websiteUri",
    "places.googleMapsUri",
])


class GooglePlacesAdapter(ProviderAdapter):
    """Async adapter for Google Places Text Search (attractions)."""

    name = "Google Places"

    def is_configured(self) -> bool:
        return is_google_places_configured(self._settings)

    async def _search(
        self, city: str, start_date: date, end_date: date
    ) -> list[Any]:
        headers = {
            "X-Goog-Api-Key": self._settings.google_places_api_key,
            "X-Goog-FieldMask": FIELD_MASK,
        }
        body = {
            "textQuery": f"top attractions in {city}",
            "pageSize": MAX_RESULTS,
        }

        data = await self._make_request("POST", BASE_URL, headers=headers, json=body)
        return data.get("places") or []

    def _normalize(
        self, raw: dict[str, Any], city: str, start_date: date, end_date: date
    ) -> Optional[EventRecord]:
        name = text((raw.get("displayName") or {}).get("text"))
        if not name:
            return None

        rating = _rating(raw)
        return EventRecord(
            id=f"places_{raw.get('id') or stable_id(name, raw.get('formattedAddress'))}",
            name=name,
            category=(
                text((raw.get("primaryTypeDisplayName") or {}).get("text"))
                or DEFAULT_ATTRACTION_CATEGORY
            ),
            venue=text(raw.get("formattedAddress")) or DEFAULT_VENUE,
            address=text(raw.get("formattedAddress")),
            date=start_date,
            price=_price(raw),
            description=text((raw.get("editorialSummary") or {}).get("text")) or name,
            booking_url=text(raw.get("websiteUri")) or text(raw.get("googleMapsUri")),
            source=self.name,
            coordinates=_coordinates(raw.get("location")),
            is_popular=(rating or 0.0) / MAX_RATING > POPULARITY_THRESHOLD,
            rating=rating,
            requires_ticket=False,
            city=city,
        )


def _price(place: dict[str, Any]) -> str:
    if place.get("priceLevel") == "PRICE_LEVEL_FREE":
        return PRICE_FREE
    price_range = place.get("priceRange") or {}
    return extract_price(
        (price_range.get("startPrice") or {}).get("units"),
        (price_range.get("endPrice") or {}).get("units"),
    )


def _rating(place: dict[str, Any]) -> Optional[float]:
    try:
        return float(place["rating"])
    except (KeyError, TypeError, ValueError):
        return None


def _coordinates(location: Any) -> Optional[Coordinates]:
    if not isinstance(location, dict):
        return None
    try:
        return Coordinates(
            lat=float(location["latitude"]),
            lon=float(location["longitude"]),
        )
    except (KeyError, TypeError, ValueError):
        return None
