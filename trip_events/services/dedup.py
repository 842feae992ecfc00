"""
Cross-provider deduplication.

Two records are treated as the same happening when their name, venue and
date match exactly. The first record seen wins and later duplicates are
dropped whole; fields are never merged across providers.

Matching is exact on purpose: "Jazz Night" and "Jazz Night (21+)" stay
separate, and two unrelated events with identical names at the same venue
on the same day collapse into one.
"""

import logging
from datetime import date

from trip_events.models.events import EventRecord

logger = logging.getLogger(__name__)

DedupKey = tuple[str, str, date]


def dedup_key(record: EventRecord) -> DedupKey:
    return (record.name, record.venue, record.date)


def dedupe(records: list[EventRecord]) -> list[EventRecord]:
    """Drop records whose (name, venue, date) repeats an earlier record, keeping order."""
    seen: set[DedupKey] = set()
    unique: list[EventRecord] = []

    for record in records:
        key = dedup_key(record)
        if key in seen:
            logger.debug(
                "Dedup: dropping '%s' from %s (duplicate of earlier record)",
                record.name, record.source,
            )
            continue
        seen.add(key)
        unique.append(record)

    return unique
