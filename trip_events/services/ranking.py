"""
Ranking policies for aggregated records.

CHRONOLOGICAL — calendar-style event lists (the events endpoint):
    ascending by (date, time); a missing time sorts as "00:00".
RELEVANCE — suggestion lists mixing events, attractions and dining
(the suggestions endpoint): descending by rating (missing = 0), then
ticketed records before unticketed ones.

Both sorts are stable, so provider registration order breaks ties.
"""

from enum import Enum

from trip_events.models.events import EventRecord

MIDNIGHT = "00:00"


class RankingPolicy(str, Enum):
    CHRONOLOGICAL = "chronological"
    RELEVANCE = "relevance"


def rank_chronological(records: list[EventRecord]) -> list[EventRecord]:
    return sorted(records, key=lambda r: (r.date, r.time or MIDNIGHT))


def rank_by_relevance(records: list[EventRecord]) -> list[EventRecord]:
    return sorted(records, key=lambda r: (-(r.rating or 0.0), not r.requires_ticket))


def rank(records: list[EventRecord], policy: RankingPolicy) -> list[EventRecord]:
    if policy is RankingPolicy.RELEVANCE:
        return rank_by_relevance(records)
    return rank_chronological(records)
