"""
Event Models — Pydantic schemas for aggregated "things to do".

Defines the canonical record every provider adapter produces and the
response returned by the events/suggestions endpoints:
- GET /api/v1/events — chronological event listing
- GET /api/v1/suggestions — rating-ordered suggestions

Records are immutable once built. JSON output uses camelCase aliases.
"""

from __future__ import annotations

import datetime
import re
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

# Sentinel price values
PRICE_FREE = "free"
PRICE_CHECK_WEBSITE = "Check website"

# Default display values
DEFAULT_CATEGORY = "Event"
DEFAULT_VENUE = "Venue TBA"

_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class Coordinates(BaseModel):
    """Geo point for a venue."""

    model_config = ConfigDict(frozen=True)

    lat: float
    lon: float


class EventRecord(BaseModel):
    """
    Canonical record for an event, attraction, restaurant or free activity.

    Every adapter (and the fallback generator) maps its upstream payload
    into this shape. Required display fields are never empty.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str
    name: str
    category: str = DEFAULT_CATEGORY
    venue: str = DEFAULT_VENUE
    address: Optional[str] = None
    date: datetime.date
    time: Optional[str] = None  # "HH:MM", 24h
    price: str = PRICE_CHECK_WEBSITE
    description: str = ""
    image_url: Optional[str] = None
    booking_url: Optional[str] = None
    source: str
    coordinates: Optional[Coordinates] = None
    is_popular: bool = False
    rating: Optional[float] = None
    requires_ticket: bool = False
    city: str

    @field_validator("id", "name", "category", "venue", "source", "city", "price")
    @classmethod
    def validate_non_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must not be empty")
        return v

    @field_validator("time")
    @classmethod
    def validate_time(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not _TIME_PATTERN.match(v):
            raise ValueError(f"time must be HH:MM, got {v!r}")
        return v

    @model_validator(mode="before")
    @classmethod
    def default_description(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("description"):
            data = {**data, "description": data.get("name")}
        return data


class AggregationResult(BaseModel):
    """Final deduplicated, ranked list with summary metadata."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    events: list[EventRecord] = Field(default_factory=list)
    total_count: int = 0
    sources: list[str] = Field(default_factory=list)

    @classmethod
    def from_records(cls, records: list[EventRecord]) -> "AggregationResult":
        """Build a result, deriving the count and distinct sources in first-seen order."""
        sources: list[str] = []
        for record in records:
            if record.source not in sources:
                sources.append(record.source)
        return cls(events=records, total_count=len(records), sources=sources)
