"""
Provider Adapter base — shared fetch contract for every upstream source.

Each concrete adapter knows how to query one upstream and how to map one
raw payload item into an EventRecord. This base class owns everything the
adapters have in common:

- credentials resolved once from an injected ProviderSettings
- a per-adapter deadline so a hanging upstream cannot stall aggregation
- authenticated HTTP with exponential backoff on HTTP 429
- a FetchResult that tells "no data" apart from "error" for logging,
  collapsed to a plain list at the public fetch() boundary
"""

import abc
import asyncio
import hashlib
import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Literal, Optional

import httpx
from pydantic import ValidationError

from trip_events.core.config import ProviderSettings, get_settings
from trip_events.models.events import EventRecord

logger = logging.getLogger(__name__)

# ======================================================================
# Constants
# ======================================================================

DEFAULT_TIMEOUT = 5.0  # seconds, per HTTP attempt
MAX_RETRIES = 3
ADAPTER_TIMEOUT = 12.0  # seconds, whole fetch including retries

_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})(?::\d{2}(?:\.\d+)?)?")


class ProviderError(Exception):
    """Raised inside an adapter when its upstream cannot be used."""

    pass


@dataclass(frozen=True)
class FetchResult:
    """Outcome of one adapter fetch, before it is collapsed to a list."""

    status: Literal["ok", "no_data", "error"]
    records: list[EventRecord] = field(default_factory=list)
    error: Optional[str] = None

    @classmethod
    def ok(cls, records: list[EventRecord]) -> "FetchResult":
        if not records:
            return cls(status="no_data")
        return cls(status="ok", records=records)

    @classmethod
    def no_data(cls) -> "FetchResult":
        return cls(status="no_data")

    @classmethod
    def failed(cls, error: str) -> "FetchResult":
        return cls(status="error", error=error)


# ======================================================================
# Date / time normalization
# ======================================================================

def parse_date(value: Any) -> Optional[date]:
    """
    Parse an upstream date into a calendar date.

    Accepts "YYYY-MM-DD" and ISO 8601 datetimes (the date part is used
    as-is, no timezone conversion). Returns None when unparseable.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or len(value) < 10:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def normalize_time(value: Any) -> Optional[str]:
    """
    Normalize an upstream clock time to "HH:MM" (24h).

    Accepts "HH:MM", "HH:MM:SS" and ISO datetimes ("YYYY-MM-DDTHH:MM:SS").
    Returns None when absent or unparseable.
    """
    if not isinstance(value, str) or not value:
        return None
    if "T" in value:
        value = value.split("T", 1)[1]
    match = _TIME_PATTERN.match(value)
    if not match:
        return None
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        return None
    return f"{hour:02d}:{minute:02d}"


def split_local_datetime(value: Any) -> tuple[Optional[date], Optional[str]]:
    """Split a local ISO timestamp into (date, "HH:MM")."""
    if not isinstance(value, str):
        return None, None
    time_value = normalize_time(value) if "T" in value else None
    return parse_date(value), time_value


def text(value: Any) -> Optional[str]:
    """Return a stripped non-empty string, or None."""
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def stable_id(*parts: Any) -> str:
    """Short sha256 digest of the parts, for upstream items that carry no id."""
    payload = "|".join("" if part is None else str(part) for part in parts)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:16]


# ======================================================================
# ProviderAdapter
# ======================================================================

class ProviderAdapter(abc.ABC):
    """
    Async adapter for one upstream provider.

    Subclasses implement is_configured(), _search() and _normalize().
    Callers only ever use fetch(), which never raises.
    """

    name: str = "Provider"

    def __init__(
        self,
        settings: Optional[ProviderSettings] = None,
        timeout: float = ADAPTER_TIMEOUT,
    ) -> None:
        self._settings = settings or get_settings()
        self._timeout = timeout

    @abc.abstractmethod
    def is_configured(self) -> bool:
        """Return True when the credentials this adapter needs are present."""

    @abc.abstractmethod
    async def _search(
        self, city: str, start_date: date, end_date: date
    ) -> list[Any]:
        """Query the upstream and return its raw result items."""

    @abc.abstractmethod
    def _normalize(
        self, raw: dict[str, Any], city: str, start_date: date, end_date: date
    ) -> Optional[EventRecord]:
        """Map one raw item to an EventRecord, or None to drop it."""

    async def fetch(
        self, city: str, start_date: date, end_date: date
    ) -> list[EventRecord]:
        """
        Fetch and normalize records for a city and date range.

        Returns [] on any failure (missing credentials, timeout, HTTP error,
        malformed payload). Cancellation is propagated.
        """
        try:
            result = await asyncio.wait_for(
                self.fetch_result(city, start_date, end_date),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            result = FetchResult.failed(f"timed out after {self._timeout:.0f}s")
        except ProviderError as exc:
            result = FetchResult.failed(str(exc))
        except Exception as exc:
            logger.exception("%s adapter crashed", self.name)
            result = FetchResult.failed(f"unexpected error: {exc}")

        if result.status == "error":
            logger.warning("%s unavailable: %s", self.name, result.error)
        elif result.status == "no_data":
            logger.info("%s returned no data for '%s'", self.name, city)
        else:
            logger.info("%s returned %d records", self.name, len(result.records))

        return result.records

    async def fetch_result(
        self, city: str, start_date: date, end_date: date
    ) -> FetchResult:
        """
        Fetch records and report how it went.

        Raises ProviderError when the upstream is unusable; fetch() turns
        that into an empty list.
        """
        if not self.is_configured():
            logger.warning("%s not configured — skipping", self.name)
            return FetchResult.no_data()

        items = await self._search(city, start_date, end_date)
        return FetchResult.ok(self._normalize_all(items, city, start_date, end_date))

    def _normalize_all(
        self,
        items: list[Any],
        city: str,
        start_date: date,
        end_date: date,
    ) -> list[EventRecord]:
        records: list[EventRecord] = []
        for raw in items:
            if not isinstance(raw, dict):
                continue
            try:
                record = self._normalize(raw, city, start_date, end_date)
            except ValidationError as exc:
                logger.debug("%s: dropping invalid record: %s", self.name, exc)
                continue
            except (AttributeError, TypeError) as exc:
                # nested field had an unexpected shape
                logger.debug("%s: dropping malformed record: %s", self.name, exc)
                continue
            if record is None:
                logger.debug("%s: dropping record without name or date", self.name)
                continue
            records.append(record)
        return records

    async def _make_request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
        json: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """
        Make an HTTP request with retry on rate limit.

        Returns the parsed JSON object. Raises ProviderError on any error.
        """
        async with httpx.AsyncClient(timeout=DEFAULT_TIMEOUT) as client:
            for retry in range(MAX_RETRIES):
                try:
                    response = await client.request(
                        method,
                        url,
                        params=params,
                        headers=headers,
                        json=json,
                    )

                    if response.status_code == 429:
                        delay = 2**retry
                        logger.warning(
                            "%s API rate limited (429), retrying in %ds "
                            "(attempt %d/%d)",
                            self.name, delay, retry + 1, MAX_RETRIES,
                        )
                        await asyncio.sleep(delay)
                        continue

                    response.raise_for_status()
                    data = response.json()

                except httpx.TimeoutException:
                    logger.warning(
                        "%s API timeout (attempt %d/%d)",
                        self.name, retry + 1, MAX_RETRIES,
                    )
                    if retry < MAX_RETRIES - 1:
                        await asyncio.sleep(1)
                    continue

                except httpx.HTTPStatusError as exc:
                    raise ProviderError(
                        f"HTTP error {exc.response.status_code}"
                    ) from exc

                except httpx.HTTPError as exc:
                    raise ProviderError(f"request error: {exc}") from exc

                except ValueError as exc:
                    raise ProviderError("response was not valid JSON") from exc

                if not isinstance(data, dict):
                    raise ProviderError("unexpected response payload")
                return data

        raise ProviderError(f"exhausted all {MAX_RETRIES} retries")
