"""
Aggregator Service — Unifies all provider adapters into one ranked list.

Calls every configured adapter in parallel using asyncio.gather(), waits
for all of them, concatenates their records in registration order, falls
back to generated placeholders only when nothing came back, deduplicates,
and ranks with the pipeline's policy.

Two pipelines are wired here:
- events: Ticketmaster, SeatGeek, PredictHQ, Google Events (chronological)
- suggestions: Ticketmaster, Google Places, Yelp, free activities (relevance)
"""

import asyncio
import logging
from datetime import date
from typing import Optional, Sequence

from trip_events.core.config import ProviderSettings, get_settings
from trip_events.models.events import AggregationResult, EventRecord
from trip_events.services.dedup import dedupe
from trip_events.services.fallback import FallbackGenerator
from trip_events.services.integrations.base import ProviderAdapter
from trip_events.services.integrations.free_activities import FreeActivitiesAdapter
from trip_events.services.integrations.google_events import GoogleEventsAdapter
from trip_events.services.integrations.places import GooglePlacesAdapter
from trip_events.services.integrations.predicthq import PredictHQAdapter
from trip_events.services.integrations.seatgeek import SeatGeekAdapter
from trip_events.services.integrations.ticketmaster import TicketmasterAdapter
from trip_events.services.integrations.yelp import YelpAdapter
from trip_events.services.ranking import RankingPolicy, rank

logger = logging.getLogger(__name__)


class AggregatorService:
    """
    Async service that aggregates results from a list of provider adapters
    in parallel, deduplicates, and returns a ranked AggregationResult.
    """

    def __init__(
        self,
        adapters: Sequence[ProviderAdapter],
        policy: RankingPolicy = RankingPolicy.CHRONOLOGICAL,
        fallback: Optional[FallbackGenerator] = None,
    ) -> None:
        self._adapters = list(adapters)
        self._policy = policy
        self._fallback = fallback or FallbackGenerator()

    @property
    def adapters(self) -> list[ProviderAdapter]:
        return list(self._adapters)

    @property
    def policy(self) -> RankingPolicy:
        return self._policy

    async def aggregate(
        self, city: str, start_date: date, end_date: date
    ) -> AggregationResult:
        """
        Aggregate records from all adapters for a city and date range.

        Args:
            city: City name as entered by the user.
            start_date: First day of the range (inclusive).
            end_date: Last day of the range (inclusive), >= start_date.

        Returns:
            AggregationResult with the ranked records, their count and the
            distinct source names. Never empty: falls back to generated
            "Local" records when every adapter returned nothing.
        """
        results = await asyncio.gather(
            *(adapter.fetch(city, start_date, end_date) for adapter in self._adapters),
            return_exceptions=True,
        )

        all_records: list[EventRecord] = []
        empty: list[str] = []

        for adapter, result in zip(self._adapters, results):
            if isinstance(result, BaseException):
                # fetch() swallows its own errors; this is a contract breach
                logger.error("Adapter '%s' raised: %r", adapter.name, result)
                empty.append(adapter.name)
            elif not result:
                empty.append(adapter.name)
            else:
                all_records.extend(result)

        if empty:
            logger.info(
                "Adapters with no results (%d/%d): %s",
                len(empty), len(self._adapters), ", ".join(empty),
            )

        if not all_records:
            logger.warning(
                "No provider returned events for '%s' — using fallback", city
            )
            all_records = self._fallback.generate(city, start_date, end_date)

        deduplicated = dedupe(all_records)
        ranked = rank(deduplicated, self._policy)

        logger.info(
            "Aggregation complete: %d records (%d before dedup) for '%s'",
            len(ranked), len(all_records), city,
        )

        return AggregationResult.from_records(ranked)


# ======================================================================
# Pipeline factories
# ======================================================================

def build_events_aggregator(
    settings: Optional[ProviderSettings] = None,
) -> AggregatorService:
    """Calendar-style event pipeline, sorted chronologically."""
    settings = settings or get_settings()
    return AggregatorService(
        adapters=[
            TicketmasterAdapter(settings),
            SeatGeekAdapter(settings),
            PredictHQAdapter(settings),
            GoogleEventsAdapter(settings),
        ],
        policy=RankingPolicy.CHRONOLOGICAL,
    )


def build_suggestions_aggregator(
    settings: Optional[ProviderSettings] = None,
) -> AggregatorService:
    """Suggestion pipeline mixing events, attractions and dining, sorted by relevance."""
    settings = settings or get_settings()
    return AggregatorService(
        adapters=[
            TicketmasterAdapter(settings),
            GooglePlacesAdapter(settings),
            YelpAdapter(settings),
            FreeActivitiesAdapter(settings),
        ],
        policy=RankingPolicy.RELEVANCE,
    )
