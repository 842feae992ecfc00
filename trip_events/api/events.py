"""
Events API — Aggregated things to do for a city and date range.

Handles request validation and caching for the two aggregation pipelines.
The aggregation core assumes a valid (city, start, end) triple; every check
on that triple happens here.
"""

import logging
from datetime import date
from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from trip_events.core.config import API_V1_PREFIX
from trip_events.models.events import AggregationResult
from trip_events.services.cache import cache_key, get_cached, set_cached
from trip_events.services.integrations.aggregator import (
    AggregatorService,
    build_events_aggregator,
    build_suggestions_aggregator,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix=API_V1_PREFIX, tags=["events"])

# --- Constants ---
MAX_RANGE_DAYS = 90
CACHE_CONTROL = "s-maxage=86400, stale-while-revalidate"  # 24 hours


# ===================================================================
# Dependencies
# ===================================================================

@lru_cache(maxsize=1)
def get_events_aggregator() -> AggregatorService:
    return build_events_aggregator()


@lru_cache(maxsize=1)
def get_suggestions_aggregator() -> AggregatorService:
    return build_suggestions_aggregator()


# ===================================================================
# Shared helper: validate, check cache, aggregate
# ===================================================================

def _validate_query(city: str, start: date, end: date) -> str:
    """Return the stripped city, or raise 400 on an unusable request."""
    city = city.strip()
    if not city:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="city must not be blank",
        )
    if start > end:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="start must be on or before end",
        )
    if (end - start).days + 1 > MAX_RANGE_DAYS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"date range must not exceed {MAX_RANGE_DAYS} days",
        )
    return city


async def _aggregate(
    pipeline: str,
    aggregator: AggregatorService,
    city: str,
    start: date,
    end: date,
    response: Response,
) -> AggregationResult:
    city = _validate_query(city, start, end)
    response.headers["Cache-Control"] = CACHE_CONTROL

    key = cache_key(pipeline, city, start, end)
    cached = get_cached(key)
    if cached is not None:
        logger.debug("Cache hit for %s", key)
        return cached

    try:
        result = await aggregator.aggregate(city, start, end)
    except Exception as exc:
        logger.error("Aggregation failed for '%s': %s", city, exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch events",
        )

    set_cached(key, result)
    return result


# ===================================================================
# GET /api/v1/events — Chronological event listing
# ===================================================================

@router.get(
    "/events",
    status_code=status.HTTP_200_OK,
    response_model=AggregationResult,
)
async def list_events(
    response: Response,
    city: str = Query(..., min_length=1),
    start: date = Query(...),
    end: date = Query(...),
    aggregator: AggregatorService = Depends(get_events_aggregator),
) -> AggregationResult:
    """
    List events in a city between two dates, earliest first.

    Returns:
        200: Deduplicated events with total count and source names.
        400: Blank city, start after end, or range too long.
        422: Missing or malformed query parameters.
        500: Aggregation failed unexpectedly.
    """
    return await _aggregate("events", aggregator, city, start, end, response)


# ===================================================================
# GET /api/v1/suggestions — Rating-ordered suggestions
# ===================================================================

@router.get(
    "/suggestions",
    status_code=status.HTTP_200_OK,
    response_model=AggregationResult,
)
async def list_suggestions(
    response: Response,
    city: str = Query(..., min_length=1),
    start: date = Query(...),
    end: date = Query(...),
    aggregator: AggregatorService = Depends(get_suggestions_aggregator),
) -> AggregationResult:
    """
    Suggest things to do (events, attractions, dining, free activities).

    Ordered by rating, then ticketed before unticketed.
    """
    return await _aggregate("suggestions", aggregator, city, start, end, response)
