"""
Google Events Integration — Event listings from Google search via SerpAPI.

Uses SerpAPI's google_events engine to pull the event cards Google shows
for "events in <city>". Google reports dates as display text ("Jun 2",
"Sun, Jun 2, 8 – 10 PM"), so this adapter parses month/day and clock time
out of that text. The year is inferred from the query range, and cards whose
date is unreadable or falls outside the range are dropped.

Popularity rule: Google gives no popularity signal, so records are never
flagged popular.
"""

import logging
import re
from datetime import date
from typing import Any, Optional

from trip_events.core.config import is_serpapi_configured
from trip_events.models.events import (
    DEFAULT_CATEGORY,
    DEFAULT_VENUE,
    EventRecord,
)
from trip_events.services.integrations.base import ProviderAdapter, stable_id, text

logger = logging.getLogger(__name__)

BASE_URL = "https://serpapi.com/search.json"

MONTHS = ["jan", "feb", "mar", "apr", "may", "jun",
          "jul", "aug", "sep", "oct", "nov", "dec"]

_MONTH_DAY = re.compile(r"\b([A-Za-z]{3,9})\.?\s+(\d{1,2})\b")
# "8 – 10 PM": the start shares the end's meridiem
_TIME_RANGE = re.compile(
    r"\b(\d{1,2})(?::(\d{2}))?\s*[–-]\s*\d{1,2}(?::\d{2})?\s*(AM|PM)\b", re.I
)
_TIME_SINGLE = re.compile(r"\b(\d{1,2})(?::(\d{2}))?\s*(AM|PM)\b", re.I)
_SLUG = re.compile(r"[^a-z0-9]+")


class GoogleEventsAdapter(ProviderAdapter):
    """Async adapter for SerpAPI's Google Events engine."""

    name = "Google Events"

    def is_configured(self) -> bool:
        return is_serpapi_configured(self._settings)

    async def _search(
        self, city: str, start_date: date, end_date: date
    ) -> list[Any]:
        params: dict[str, Any] = {
            "engine": "google_events",
            "q": f"events in {city} {start_date.isoformat()}",
            "api_key": self._settings.serpapi_key,
            "hl": "en",
            "gl": "us",
        }

        data = await self._make_request("GET", BASE_URL, params=params)
        return data.get("events_results") or []

    def _normalize(
        self, raw: dict[str, Any], city: str, start_date: date, end_date: date
    ) -> Optional[EventRecord]:
        name = text(raw.get("title"))
        if not name:
            return None

        date_info = raw.get("date") or {}
        when = date_info.get("when")
        event_date = (
            parse_month_day(date_info.get("start_date"), start_date, end_date)
            or parse_month_day(when, start_date, end_date)
        )
        if event_date is None:
            return None

        address_lines = [
            line for line in (raw.get("address") or []) if isinstance(line, str)
        ]
        venue = raw.get("venue") or {}
        card_key = stable_id(
            name, text(venue.get("name")), "|".join(address_lines),
            text(when), event_date.isoformat(),
        )

        return EventRecord(
            id=f"google_{_slug(name)}_{card_key}",
            name=name,
            category=DEFAULT_CATEGORY,
            venue=(
                text(venue.get("name"))
                or (text(address_lines[0]) if address_lines else None)
                or DEFAULT_VENUE
            ),
            address=", ".join(address_lines) or None,
            date=event_date,
            time=parse_clock_time(when),
            description=text(raw.get("description")) or name,
            image_url=text(raw.get("image")) or text(raw.get("thumbnail")),
            booking_url=_ticket_link(raw) or text(raw.get("link")),
            source=self.name,
            city=city,
        )


def parse_month_day(value: Any, range_start: date, range_end: date) -> Optional[date]:
    """
    Parse "Jun 2" style text into a date inside [range_start, range_end].

    The year is taken from whichever end of the range puts the month/day
    inside it, so December-to-January ranges resolve. Returns None when the
    text has no month/day or no such year exists.
    """
    if not isinstance(value, str):
        return None
    for match in _MONTH_DAY.finditer(value):
        prefix = match.group(1)[:3].lower()
        if prefix not in MONTHS:
            continue
        month = MONTHS.index(prefix) + 1
        day = int(match.group(2))
        for year in sorted({range_start.year, range_end.year}):
            try:
                candidate = date(year, month, day)
            except ValueError:
                continue
            if range_start <= candidate <= range_end:
                return candidate
        return None
    return None


def parse_clock_time(value: Any) -> Optional[str]:
    """Parse the start time from "Sun, Jun 2, 8:30 PM – 11 PM" into "20:30"."""
    if not isinstance(value, str):
        return None
    match = _TIME_RANGE.search(value) or _TIME_SINGLE.search(value)
    if not match:
        return None
    hour = int(match.group(1))
    minute = int(match.group(2) or 0)
    meridiem = match.group(3).upper()
    if not 1 <= hour <= 12 or minute > 59:
        return None
    hour = hour % 12 + (12 if meridiem == "PM" else 0)
    return f"{hour:02d}:{minute:02d}"


def _ticket_link(event: dict[str, Any]) -> Optional[str]:
    for info in event.get("ticket_info") or []:
        if isinstance(info, dict) and text(info.get("link")):
            return text(info.get("link"))
    return None


def _slug(value: str) -> str:
    return _SLUG.sub("_", value.lower()).strip("_") or "event"
