"""
Fallback Generator — Placeholder events when no provider returns data.

Synthesizes plausible local events so the aggregation response is never
empty. Used only as a last resort: the aggregator calls it when every
provider came back empty, never to top up real results.

Output size is min(days * 3, 15) where days counts both ends of the range.
Templates are drawn without replacement, so no two generated records share
a (name, venue, date) key.
"""

import logging
import random
import uuid
from datetime import date, timedelta
from typing import Optional

from trip_events.models.events import EventRecord

logger = logging.getLogger(__name__)

# ======================================================================
# Constants
# ======================================================================

FALLBACK_SOURCE = "Local"
RECORDS_PER_DAY = 3
MAX_RECORDS = 15

# Daytime window for generated start times (hours, inclusive)
EARLIEST_HOUR = 10
LATEST_HOUR = 21

# Generated ticket price range in dollars (inclusive)
MIN_PRICE = 20
MAX_PRICE = 99

POPULARITY_CHANCE = 0.3

# (name pattern, category, venue)
EVENT_TEMPLATES: list[tuple[str, str, str]] = [
    ("{city} Food & Wine Festival", "Festival", "Downtown Convention Center"),
    ("Live Jazz at Blue Note", "Music", "Blue Note Jazz Club"),
    ("{city} Marathon", "Sports", "City Center"),
    ("Stand-up Comedy Night", "Comedy", "The Laugh Track"),
    ("{city} Symphony Orchestra", "Music", "Symphony Hall"),
    ("Farmers Market", "Community", "Central Park"),
    ("Art Gallery Opening", "Arts", "Modern Art Museum"),
    ("Craft Beer Festival", "Festival", "Brewery District"),
    ("Tech Meetup", "Conference", "Tech Hub"),
    ("{city} Film Festival", "Film", "Independent Cinema"),
    ("Local Band Showcase", "Music", "The Venue"),
    ("Yoga in the Park", "Wellness", "Riverside Park"),
    ("{city} Book Fair", "Literary", "Public Library"),
    ("Street Food Festival", "Food", "Historic District"),
    ("Basketball Game - {city} vs Rivals", "Sports", "Sports Arena"),
]


def fallback_count(start_date: date, end_date: date) -> int:
    """Number of records generated for a range: min(days * 3, 15)."""
    days = max((end_date - start_date).days + 1, 1)
    return min(days * RECORDS_PER_DAY, MAX_RECORDS)


class FallbackGenerator:
    """Builds placeholder EventRecords tagged with source "Local"."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.Random()

    def generate(
        self, city: str, start_date: date, end_date: date
    ) -> list[EventRecord]:
        count = fallback_count(start_date, end_date)
        span = max((end_date - start_date).days, 0)
        batch = uuid.uuid4().hex[:8]

        templates = self._rng.sample(EVENT_TEMPLATES, count)
        records: list[EventRecord] = []
        for i, (name_pattern, category, venue) in enumerate(templates):
            name = name_pattern.format(city=city)
            hour = self._rng.randint(EARLIEST_HOUR, LATEST_HOUR)
            minute = self._rng.choice(("00", "30"))

            records.append(EventRecord(
                id=f"local_{batch}_{i}",
                name=name,
                category=category,
                venue=venue,
                date=start_date + timedelta(days=self._rng.randint(0, span)),
                time=f"{hour:02d}:{minute}",
                price=f"${self._rng.randint(MIN_PRICE, MAX_PRICE)}",
                description=f"Experience {name} in {city}",
                source=FALLBACK_SOURCE,
                is_popular=self._rng.random() < POPULARITY_CHANCE,
                city=city,
            ))

        logger.info(
            "Generated %d fallback events for '%s' (%s to %s)",
            len(records), city, start_date, end_date,
        )
        return records
