"""
Ticketmaster Discovery API Integration — Search ticketed events in a city.

Queries the Ticketmaster Discovery API v2 for concerts, theater, sports
and other live events in the requested city and date range, and
normalizes each event into an EventRecord.

Popularity rule: an event is popular when its dates.status.code is
"onsale".
"""

import logging
from datetime import date
from typing import Any, Optional

from trip_events.core.config import is_ticketmaster_configured
from trip_events.models.events import (
    DEFAULT_CATEGORY,
    DEFAULT_VENUE,
    Coordinates,
    EventRecord,
)
from trip_events.services.integrations.base import (
    ProviderAdapter,
    normalize_time,
    parse_date,
    stable_id,
    text,
)
from trip_events.services.integrations.pricing import extract_price

logger = logging.getLogger(__name__)

# ======================================================================
# Constants
# ======================================================================

BASE_URL = "https://app.ticketmaster.com/discovery/v2"
PAGE_SIZE = 50

# Status codes that mark an event as popular
ONSALE_STATUSES = {"onsale"}

# Ticketmaster uses "Undefined" as a placeholder classification name
UNDEFINED = "Undefined"


# ======================================================================
# TicketmasterAdapter
# ======================================================================

class TicketmasterAdapter(ProviderAdapter):
    """Async adapter for Ticketmaster Discovery API v2 event search."""

    name = "Ticketmaster"

    def is_configured(self) -> bool:
        return is_ticketmaster_configured(self._settings)

    async def _search(
        self, city: str, start_date: date, end_date: date
    ) -> list[Any]:
        params: dict[str, Any] = {
            "apikey": self._settings.ticketmaster_api_key,
            "city": city,
            "startDateTime": f"{start_date.isoformat()}T00:00:00Z",
            "endDateTime": f"{end_date.isoformat()}T23:59:59Z",
            "size": PAGE_SIZE,
            "sort": "date,asc",
        }

        data = await self._make_request("GET", f"{BASE_URL}/events.json", params=params)
        embedded = data.get("_embedded") or {}
        return embedded.get("events") or []

    def _normalize(
        self, raw: dict[str, Any], city: str, start_date: date, end_date: date
    ) -> Optional[EventRecord]:
        """
        Convert a Ticketmaster event object to an EventRecord.

        Drops events without a name or a valid localDate.
        """
        name = text(raw.get("name"))
        dates = raw.get("dates") or {}
        start = dates.get("start") or {}
        event_date = parse_date(start.get("localDate"))
        if not name or event_date is None:
            return None

        venue_data = _first(((raw.get("_embedded") or {}).get("venues")))
        price_info = _first(raw.get("priceRanges"))
        status_code = ((dates.get("status") or {}).get("code") or "").lower()
        address = venue_data.get("address")
        event_id = raw.get("id") or stable_id(
            name, venue_data.get("name"), event_date, start.get("localTime")
        )

        return EventRecord(
            id=f"tm_{event_id}",
            name=name,
            category=_classification_name(raw, "segment") or DEFAULT_CATEGORY,
            venue=text(venue_data.get("name")) or DEFAULT_VENUE,
            address=text(address.get("line1")) if isinstance(address, dict) else None,
            date=event_date,
            time=normalize_time(start.get("localTime")),
            price=extract_price(price_info.get("min"), price_info.get("max")),
            description=(
                text(raw.get("info"))
                or text(raw.get("pleaseNote"))
                or f"Experience {name}"
            ),
            image_url=select_best_image(raw.get("images") or []),
            booking_url=text(raw.get("url")),
            source=self.name,
            coordinates=_venue_coordinates(venue_data),
            is_popular=status_code in ONSALE_STATUSES,
            requires_ticket=True,
            city=city,
        )


def _first(items: Any) -> dict[str, Any]:
    """Return the first dict of a list, or an empty dict."""
    if isinstance(items, list) and items and isinstance(items[0], dict):
        return items[0]
    return {}


def _classification_name(event: dict[str, Any], level: str) -> Optional[str]:
    """Read classifications[0].<level>.name, ignoring "Undefined"."""
    classification = _first(event.get("classifications"))
    name = text((classification.get(level) or {}).get("name"))
    if name == UNDEFINED:
        return None
    return name


def _venue_coordinates(venue: dict[str, Any]) -> Optional[Coordinates]:
    """Ticketmaster sends venue coordinates as strings."""
    location = venue.get("location") or {}
    try:
        return Coordinates(
            lat=float(location["latitude"]),
            lon=float(location["longitude"]),
        )
    except (KeyError, TypeError, ValueError):
        return None


def select_best_image(images: list[dict[str, Any]]) -> Optional[str]:
    """
    Select the best image from Ticketmaster's image array.

    Prefers 16:9 ratio images with width >= 640 pixels.
    Falls back to any 16:9 image, then the first available image.
    """
    images = [img for img in images if isinstance(img, dict)]
    if not images:
        return None

    for img in images:
        if img.get("ratio") == "16_9" and (img.get("width") or 0) >= 640:
            return img.get("url")

    for img in images:
        if img.get("ratio") == "16_9":
            return img.get("url")

    return images[0].get("url")
