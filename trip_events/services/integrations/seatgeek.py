"""
SeatGeek API Integration — Ticket marketplace events in a city.

Queries the SeatGeek Platform API v2 for events at venues in the requested
city and normalizes them into EventRecords. SeatGeek reports local
timestamps ("2024-06-02T20:00:00"), which are split into date and HH:MM
so they compare cleanly with Ticketmaster's localDate/localTime.

Popularity rule: SeatGeek's normalized event score (0-1) is above 0.7.
"""

import logging
from datetime import date
from typing import Any, Optional

from trip_events.core.config import is_seatgeek_configured
from trip_events.models.events import (
    DEFAULT_CATEGORY,
    DEFAULT_VENUE,
    Coordinates,
    EventRecord,
)
from trip_events.services.integrations.base import (
    ProviderAdapter,
    split_local_datetime,
    stable_id,
    text,
)
from trip_events.services.integrations.pricing import extract_price

logger = logging.getLogger(__name__)

BASE_URL = "https://api.seatgeek.com/2"
PAGE_SIZE = 50
POPULARITY_THRESHOLD = 0.7


class SeatGeekAdapter(ProviderAdapter):
    """Async adapter for SeatGeek event search."""

    name = "SeatGeek"

    def is_configured(self) -> bool:
        return is_seatgeek_configured(self._settings)

    async def _search(
        self, city: str, start_date: date, end_date: date
    ) -> list[Any]:
        params: dict[str, Any] = {
            "venue.city": city,
            "datetime_utc.gte": f"{start_date.isoformat()}T00:00:00",
            "datetime_utc.lte": f"{end_date.isoformat()}T23:59:59",
            "per_page": PAGE_SIZE,
            "client_id": self._settings.seatgeek_client_id,
        }
        if self._settings.seatgeek_client_secret:
            params["client_secret"] = self._settings.seatgeek_client_secret

        data = await self._make_request("GET", f"{BASE_URL}/events", params=params)
        return data.get("events") or []

    def _normalize(
        self, raw: dict[str, Any], city: str, start_date: date, end_date: date
    ) -> Optional[EventRecord]:
        name = text(raw.get("title")) or text(raw.get("short_title"))
        event_date, event_time = split_local_datetime(raw.get("datetime_local"))
        if not name or event_date is None:
            return None

        venue = raw.get("venue") or {}
        venue_name = text(venue.get("name"))
        stats = raw.get("stats") or {}
        performers = raw.get("performers") or []
        image_url = None
        if performers and isinstance(performers[0], dict):
            image_url = text(performers[0].get("image"))

        return EventRecord(
            id=f"sg_{raw.get('id') or stable_id(name, venue_name, event_date, event_time)}",
            name=name,
            category=_format_type(raw.get("type")) or DEFAULT_CATEGORY,
            venue=venue_name or DEFAULT_VENUE,
            address=text(venue.get("address")),
            date=event_date,
            time=event_time,
            price=extract_price(
                stats.get("lowest_price"),
                stats.get("highest_price"),
                stats.get("average_price"),
            ),
            description=f"{name} at {venue_name}" if venue_name else name,
            image_url=image_url,
            booking_url=text(raw.get("url")),
            source=self.name,
            coordinates=_venue_coordinates(venue),
            is_popular=_score(raw) > POPULARITY_THRESHOLD,
            requires_ticket=True,
            city=city,
        )


def _format_type(value: Any) -> Optional[str]:
    """Turn SeatGeek's event type ("music_festival") into a label ("Music Festival")."""
    label = text(value)
    if not label:
        return None
    return label.replace("_", " ").title()


def _score(event: dict[str, Any]) -> float:
    try:
        return float(event.get("score") or 0.0)
    except (TypeError, ValueError):
        return 0.0


def _venue_coordinates(venue: dict[str, Any]) -> Optional[Coordinates]:
    location = venue.get("location") or {}
    if location.get("lat") is None or location.get("lon") is None:
        return None
    try:
        return Coordinates(lat=float(location["lat"]), lon=float(location["lon"]))
    except (TypeError, ValueError):
        return None
