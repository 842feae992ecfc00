"""
Yelp Fusion API Integration — Restaurants and dining in a city.

Queries the Yelp Fusion API v3 business search for restaurants in the
requested city and normalizes them into EventRecords. Restaurants are not
dated, so each record is dated to the first day of the requested range.

Yelp only exposes a coarse price level ("$" to "$$$$"), which is mapped to
an approximate per-person average.

Popularity rule: the Yelp rating (0-5) normalized to 0-1 is above 0.7.
"""

import logging
from datetime import date
from typing import Any, Optional

from trip_events.core.config import is_yelp_configured
from trip_events.models.events import DEFAULT_VENUE, Coordinates, EventRecord
from trip_events.services.integrations.base import ProviderAdapter, stable_id, text
from trip_events.services.integrations.pricing import extract_price

logger = logging.getLogger(__name__)

# ======================================================================
# Constants
# ======================================================================

BASE_URL = "https://api.yelp.com/v3"
MAX_RESULTS = 20  # Yelp max is 50
POPULARITY_THRESHOLD = 0.7
MAX_RATING = 5.0
RESTAURANT_CATEGORY = "Restaurant"

# Yelp price level → approximate per-person average in USD
YELP_PRICE_TO_AVERAGE: dict[str, int] = {
    "$": 15,
    "$$": 30,
    "$$$": 60,
    "$$$$": 120,
}


# ======================================================================
# YelpAdapter
# ======================================================================

class YelpAdapter(ProviderAdapter):
    """Async adapter for Yelp Fusion API v3 restaurant search."""

    name = "Yelp"

    def is_configured(self) -> bool:
        return is_yelp_configured(self._settings)

    async def _search(
        self, city: str, start_date: date, end_date: date
    ) -> list[Any]:
        headers = {
            "Authorization": f"Bearer {self._settings.yelp_api_key}",
            "Accept": "application/json",
        }
        params: dict[str, Any] = {
            "location": city,
            "categories": "restaurants",
            "sort_by": "rating",
            "limit": MAX_RESULTS,
        }

        data = await self._make_request(
            "GET", f"{BASE_URL}/businesses/search", params=params, headers=headers
        )
        return data.get("businesses") or []

    def _normalize(
        self, raw: dict[str, Any], city: str, start_date: date, end_date: date
    ) -> Optional[EventRecord]:
        """
        Convert a Yelp business object to an EventRecord.

        Permanently closed businesses are dropped.
        """
        name = text(raw.get("name"))
        if not name or raw.get("is_closed"):
            return None

        location = raw.get("location") or {}
        categories = [
            cat.get("title") for cat in raw.get("categories") or []
            if isinstance(cat, dict) and text(cat.get("title"))
        ]
        rating = _rating(raw)

        return EventRecord(
            id=f"yelp_{raw.get('id') or stable_id(name, location.get('address1'))}",
            name=name,
            category=RESTAURANT_CATEGORY,
            venue=text(location.get("address1")) or DEFAULT_VENUE,
            address=", ".join(
                line for line in location.get("display_address") or []
                if isinstance(line, str)
            ) or None,
            date=start_date,
            price=extract_price(average=_price_level_average(raw.get("price"))),
            description=", ".join(categories) or name,
            image_url=text(raw.get("image_url")),
            booking_url=text(raw.get("url")),
            source=self.name,
            coordinates=_coordinates(raw.get("coordinates")),
            is_popular=(rating or 0.0) / MAX_RATING > POPULARITY_THRESHOLD,
            rating=rating,
            requires_ticket=False,
            city=city,
        )


def _price_level_average(level: Any) -> Optional[int]:
    if not isinstance(level, str):
        return None
    return YELP_PRICE_TO_AVERAGE.get(level)


def _rating(business: dict[str, Any]) -> Optional[float]:
    try:
        return float(business["rating"])
    except (KeyError, TypeError, ValueError):
        return None


def _coordinates(coordinates: Any) -> Optional[Coordinates]:
    if not isinstance(coordinates, dict):
        return None
    try:
        return Coordinates(
            lat=float(coordinates["latitude"]),
            lon=float(coordinates["longitude"]),
        )
    except (KeyError, TypeError, ValueError):
        return None
