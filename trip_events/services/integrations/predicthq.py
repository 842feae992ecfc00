"""
PredictHQ API Integration — Festivals, conferences and community events.

Queries the PredictHQ Events API v1 for events active in the requested
date range and matching the city, and normalizes them into EventRecords.
PredictHQ does not sell tickets, so prices are always "Check website".

Popularity rule: PredictHQ rank (0-100) normalized to 0-1 is above 0.7.
"""

import logging
from datetime import date
from typing import Any, Optional

from trip_events.core.config import is_predicthq_configured
from trip_events.models.events import (
    DEFAULT_CATEGORY,
    DEFAULT_VENUE,
    PRICE_CHECK_WEBSITE,
    Coordinates,
    EventRecord,
)
from trip_events.services.integrations.base import (
    ProviderAdapter,
    split_local_datetime,
    stable_id,
    text,
)

logger = logging.getLogger(__name__)

BASE_URL = "https://api.predicthq.com/v1"
PAGE_SIZE = 50
POPULARITY_THRESHOLD = 0.7
MAX_RANK = 100.0

CATEGORIES = [
    "concerts",
    "sports",
    "festivals",
    "performing-arts",
    "conferences",
    "expos",
    "community",
]


class PredictHQAdapter(ProviderAdapter):
    """Async adapter for the PredictHQ Events API."""

    name = "PredictHQ"

    def is_configured(self) -> bool:
        return is_predicthq_configured(self._settings)

    async def _search(
        self, city: str, start_date: date, end_date: date
    ) -> list[Any]:
        params: dict[str, Any] = {
            "q": city,
            "active.gte": start_date.isoformat(),
            "active.lte": end_date.isoformat(),
            "category": ",".join(CATEGORIES),
            "limit": PAGE_SIZE,
            "sort": "rank",
        }
        headers = {
            "Authorization": f"Bearer {self._settings.predicthq_access_token}",
            "Accept": "application/json",
        }

        data = await self._make_request(
            "GET", f"{BASE_URL}/events/", params=params, headers=headers
        )
        return data.get("results") or []

    def _normalize(
        self, raw: dict[str, Any], city: str, start_date: date, end_date: date
    ) -> Optional[EventRecord]:
        name = text(raw.get("title"))
        # start_local is the venue's wall clock; start is UTC
        event_date, event_time = split_local_datetime(
            raw.get("start_local") or raw.get("start")
        )
        if not name or event_date is None:
            return None

        category = _format_category(raw.get("category"))
        event_id = raw.get("id") or stable_id(
            name, raw.get("location"), event_date, event_time
        )
        return EventRecord(
            id=f"phq_{event_id}",
            name=name,
            category=category or DEFAULT_CATEGORY,
            venue=_venue_name(raw) or DEFAULT_VENUE,
            address=_venue_address(raw),
            date=event_date,
            time=event_time,
            price=PRICE_CHECK_WEBSITE,
            description=(
                text(raw.get("description"))
                or (f"{name} - {category}" if category else name)
            ),
            source=self.name,
            coordinates=_coordinates(raw.get("location")),
            is_popular=_rank(raw) / MAX_RANK > POPULARITY_THRESHOLD,
            city=city,
        )


def _format_category(value: Any) -> Optional[str]:
    """Turn "performing-arts" into "Performing Arts"."""
    label = text(value)
    if not label:
        return None
    return label.replace("-", " ").title()


def _venue_entity(event: dict[str, Any]) -> dict[str, Any]:
    for entity in event.get("entities") or []:
        if isinstance(entity, dict) and entity.get("type") == "venue":
            return entity
    return {}


def _venue_name(event: dict[str, Any]) -> Optional[str]:
    venue = _venue_entity(event)
    if venue:
        return text(venue.get("name"))
    entities = event.get("entities") or []
    if entities and isinstance(entities[0], dict):
        return text(entities[0].get("name"))
    return None


def _venue_address(event: dict[str, Any]) -> Optional[str]:
    return text(_venue_entity(event).get("formatted_address"))


def _rank(event: dict[str, Any]) -> float:
    try:
        return float(event.get("rank") or 0.0)
    except (TypeError, ValueError):
        return 0.0


def _coordinates(location: Any) -> Optional[Coordinates]:
    """PredictHQ uses GeoJSON order: [lon, lat]."""
    if not isinstance(location, list) or len(location) != 2:
        return None
    try:
        return Coordinates(lat=float(location[1]), lon=float(location[0]))
    except (TypeError, ValueError):
        return None
