"""
Free Activities — Curated no-cost things to do in any city.

Has no upstream and needs no credentials: it renders a fixed list of
free activity templates for the requested city. Records are dated to the
first day of the requested range.

Popularity rule: curated activities are never flagged popular.
"""

import logging
import re
from datetime import date
from typing import Any, Optional

from trip_events.models.events import PRICE_FREE, EventRecord
from trip_events.services.integrations.base import ProviderAdapter, text

logger = logging.getLogger(__name__)

# (key, name pattern, category, venue pattern, description, rating)
FREE_ACTIVITY_TEMPLATES: list[tuple[str, str, str, str, str, float]] = [
    (
        "park",
        "{city} Central Park",
        "Outdoor",
        "Central {city}",
        "Large urban park with trails, playgrounds, and picnic areas",
        4.5,
    ),
    (
        "farmers-market",
        "Farmers Market",
        "Activity",
        "{city} Square",
        "Local produce, crafts, and food vendors",
        4.4,
    ),
    (
        "waterfront",
        "Beach/Lake Day",
        "Outdoor",
        "{city} Waterfront",
        "Relax by the water, swim, or play beach sports",
        4.6,
    ),
    (
        "walking-tour",
        "Self-Guided Historic Walk",
        "Attraction",
        "Downtown {city}",
        "Explore {city}'s historic district at your own pace",
        4.3,
    ),
    (
        "sunset",
        "Sunset Viewpoint",
        "Outdoor",
        "{city} Overlook",
        "Catch the sunset over {city} from a scenic lookout",
        4.7,
    ),
]

_SLUG = re.compile(r"[^a-z0-9]+")


class FreeActivitiesAdapter(ProviderAdapter):
    """Curated free activities; always configured, never calls out."""

    name = "Free Activities"

    def is_configured(self) -> bool:
        return True

    async def _search(
        self, city: str, start_date: date, end_date: date
    ) -> list[Any]:
        return [
            {
                "key": key,
                "name": name.format(city=city),
                "category": category,
                "venue": venue.format(city=city),
                "description": description.format(city=city),
                "rating": rating,
            }
            for key, name, category, venue, description, rating
            in FREE_ACTIVITY_TEMPLATES
        ]

    def _normalize(
        self, raw: dict[str, Any], city: str, start_date: date, end_date: date
    ) -> Optional[EventRecord]:
        city_slug = _SLUG.sub("-", city.lower()).strip("-")
        return EventRecord(
            id=f"free_{city_slug}_{raw['key']}",
            name=raw["name"],
            category=raw["category"],
            venue=raw["venue"],
            date=start_date,
            price=PRICE_FREE,
            description=text(raw.get("description")) or raw["name"],
            source=self.name,
            rating=raw.get("rating"),
            requires_ticket=False,
            city=city,
        )
