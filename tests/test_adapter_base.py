"""
ProviderAdapter base tests.

Tests that:
1. fetch() never raises: provider errors, crashes and timeouts become []
2. fetch_result() tells "no data" apart from "error"
3. Unconfigured adapters report no_data without calling the upstream
4. Malformed items and records without name/date are dropped, not fatal
5. _make_request retries on HTTP 429 with exponential backoff
6. _make_request raises ProviderError on HTTP/transport/JSON errors
7. Date/time normalization helpers

Run with: pytest tests/test_adapter_base.py -v
"""

import asyncio
from datetime import date
from typing import Any, Optional
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from trip_events.core.config import ProviderSettings
from trip_events.models.events import EventRecord
from trip_events.services.integrations.base import (
    MAX_RETRIES,
    FetchResult,
    ProviderAdapter,
    ProviderError,
    normalize_time,
    parse_date,
    split_local_datetime,
    stable_id,
)

URL = "https://api.example.com/events"
START = date(2024, 6, 1)
END = date(2024, 6, 3)


# ---------------------------------------------------------------------------
# Test adapter
# ---------------------------------------------------------------------------

class _StubAdapter(ProviderAdapter):
    """Adapter whose upstream behaviour is scripted per test."""

    name = "Stub"

    def __init__(self, items=None, error=None, configured=True, hang=False, **kwargs):
        super().__init__(settings=ProviderSettings(), **kwargs)
        self.items = items or []
        self.error = error
        self.configured = configured
        self.hang = hang
        self.search_calls = 0

    def is_configured(self) -> bool:
        return self.configured

    async def _search(self, city, start_date, end_date) -> list[Any]:
        self.search_calls += 1
        if self.hang:
            await asyncio.Event().wait()
        if self.error is not None:
            raise self.error
        return self.items

    def _normalize(self, raw, city, start_date, end_date) -> Optional[EventRecord]:
        event_date = parse_date(raw.get("date"))
        if not raw.get("name") or event_date is None:
            return None
        return EventRecord(
            id=f"stub_{raw['name']}",
            name=raw["name"],
            venue=raw.get("venue", "Venue TBA"),
            date=event_date,
            time=raw.get("time"),
            source=self.name,
            city=city,
        )


def _mock_client(**kwargs) -> AsyncMock:
    mock_client = AsyncMock()
    mock_client.request = AsyncMock(**kwargs)
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    return mock_client


def _response(status_code: int, **kwargs) -> httpx.Response:
    return httpx.Response(status_code, request=httpx.Request("GET", URL), **kwargs)


# ======================================================================
# TestFetchContract
# ======================================================================

class TestFetchContract:
    """Test that fetch() collapses every failure to an empty list."""

    async def test_returns_normalized_records(self):
        adapter = _StubAdapter(items=[{"name": "Jazz Night", "date": "2024-06-02"}])
        records = await adapter.fetch("Austin", START, END)
        assert len(records) == 1
        assert records[0].name == "Jazz Night"
        assert records[0].city == "Austin"

    async def test_provider_error_returns_empty(self):
        adapter = _StubAdapter(error=ProviderError("HTTP error 500"))
        assert await adapter.fetch("Austin", START, END) == []

    async def test_unexpected_exception_returns_empty(self):
        adapter = _StubAdapter(error=RuntimeError("boom"))
        assert await adapter.fetch("Austin", START, END) == []

    async def test_timeout_returns_empty(self):
        adapter = _StubAdapter(hang=True, timeout=0.05)
        assert await adapter.fetch("Austin", START, END) == []

    async def test_unconfigured_skips_upstream(self):
        adapter = _StubAdapter(configured=False, items=[{"name": "X", "date": "2024-06-02"}])
        assert await adapter.fetch("Austin", START, END) == []
        assert adapter.search_calls == 0

    async def test_cancellation_propagates(self):
        adapter = _StubAdapter(hang=True, timeout=10)
        task = asyncio.ensure_future(adapter.fetch("Austin", START, END))
        await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task


class TestFetchResult:
    """Test the internal no_data / error / ok distinction."""

    async def test_ok(self):
        adapter = _StubAdapter(items=[{"name": "A", "date": "2024-06-02"}])
        result = await adapter.fetch_result("Austin", START, END)
        assert result.status == "ok"
        assert len(result.records) == 1

    async def test_no_data_when_upstream_empty(self):
        result = await _StubAdapter(items=[]).fetch_result("Austin", START, END)
        assert result.status == "no_data"
        assert result.records == []

    async def test_no_data_when_unconfigured(self):
        result = await _StubAdapter(configured=False).fetch_result("Austin", START, END)
        assert result.status == "no_data"

    async def test_no_data_when_every_record_dropped(self):
        adapter = _StubAdapter(items=[{"name": "A", "date": "soon"}])
        result = await adapter.fetch_result("Austin", START, END)
        assert result.status == "no_data"

    async def test_error_raises_inside_fetch_result(self):
        adapter = _StubAdapter(error=ProviderError("down"))
        with pytest.raises(ProviderError):
            await adapter.fetch_result("Austin", START, END)

    def test_failed_factory(self):
        result = FetchResult.failed("down")
        assert result.status == "error"
        assert result.error == "down"
        assert result.records == []


class TestRecordDropping:
    """Test that bad items are dropped individually."""

    async def test_missing_name_dropped(self):
        adapter = _StubAdapter(items=[
            {"date": "2024-06-02"},
            {"name": "Kept", "date": "2024-06-02"},
        ])
        records = await adapter.fetch("Austin", START, END)
        assert [r.name for r in records] == ["Kept"]

    async def test_malformed_date_dropped(self):
        adapter = _StubAdapter(items=[
            {"name": "Bad", "date": "2024-13-45"},
            {"name": "Good", "date": "2024-06-02"},
        ])
        records = await adapter.fetch("Austin", START, END)
        assert [r.name for r in records] == ["Good"]

    async def test_invalid_field_dropped(self):
        """A record that fails model validation is dropped, not fatal."""
        adapter = _StubAdapter(items=[
            {"name": "Bad time", "date": "2024-06-02", "time": "8pm"},
            {"name": "Good", "date": "2024-06-02", "time": "20:00"},
        ])
        records = await adapter.fetch("Austin", START, END)
        assert [r.name for r in records] == ["Good"]

    async def test_non_dict_items_skipped(self):
        adapter = _StubAdapter(items=["junk", None, {"name": "Good", "date": "2024-06-02"}])
        records = await adapter.fetch("Austin", START, END)
        assert len(records) == 1

    async def test_wrongly_shaped_nested_field_dropped(self):
        adapter = _StubAdapter(items=[
            {"name": "Bad", "date": "2024-06-02", "venue": ["not", "a", "string"]},
            {"name": "Good", "date": "2024-06-02"},
        ])
        records = await adapter.fetch("Austin", START, END)
        assert [r.name for r in records] == ["Good"]


# ======================================================================
# TestMakeRequest
# ======================================================================

class TestMakeRequest:
    """Test HTTP handling with retry on rate limit."""

    async def test_success_returns_json(self):
        mock_client = _mock_client(return_value=_response(200, json={"ok": True}))
        with patch("httpx.AsyncClient", return_value=mock_client):
            data = await _StubAdapter()._make_request("GET", URL, params={"a": 1})
        assert data == {"ok": True}
        mock_client.request.assert_called_once_with(
            "GET", URL, params={"a": 1}, headers=None, json=None
        )

    async def test_retries_on_429_then_succeeds(self):
        mock_client = _mock_client(side_effect=[_response(429), _response(200, json={"ok": True})])
        sleep = AsyncMock()
        with patch("httpx.AsyncClient", return_value=mock_client), \
             patch("asyncio.sleep", sleep):
            data = await _StubAdapter()._make_request("GET", URL)
        assert data == {"ok": True}
        assert mock_client.request.call_count == 2
        sleep.assert_awaited_once_with(1)

    async def test_exhausts_retries_on_repeated_429(self):
        mock_client = _mock_client(return_value=_response(429))
        sleep = AsyncMock()
        with patch("httpx.AsyncClient", return_value=mock_client), \
             patch("asyncio.sleep", sleep):
            with pytest.raises(ProviderError, match="exhausted"):
                await _StubAdapter()._make_request("GET", URL)
        assert mock_client.request.call_count == MAX_RETRIES
        assert [c.args[0] for c in sleep.await_args_list] == [1, 2, 4]

    async def test_timeout_retries_then_raises(self):
        mock_client = _mock_client(side_effect=httpx.TimeoutException("timeout"))
        with patch("httpx.AsyncClient", return_value=mock_client), \
             patch("asyncio.sleep", new_callable=AsyncMock):
            with pytest.raises(ProviderError):
                await _StubAdapter()._make_request("GET", URL)
        assert mock_client.request.call_count == MAX_RETRIES

    async def test_http_error_raises_without_retry(self):
        mock_client = _mock_client(return_value=_response(500, text="Internal Server Error"))
        with patch("httpx.AsyncClient", return_value=mock_client):
            with pytest.raises(ProviderError, match="500"):
                await _StubAdapter()._make_request("GET", URL)
        assert mock_client.request.call_count == 1

    async def test_connection_error_raises(self):
        mock_client = _mock_client(side_effect=httpx.ConnectError("refused"))
        with patch("httpx.AsyncClient", return_value=mock_client):
            with pytest.raises(ProviderError):
                await _StubAdapter()._make_request("GET", URL)

    async def test_invalid_json_raises(self):
        mock_client = _mock_client(return_value=_response(200, text="<html>"))
        with patch("httpx.AsyncClient", return_value=mock_client):
            with pytest.raises(ProviderError, match="JSON"):
                await _StubAdapter()._make_request("GET", URL)

    async def test_non_object_json_raises(self):
        mock_client = _mock_client(return_value=_response(200, json=[1, 2, 3]))
        with patch("httpx.AsyncClient", return_value=mock_client):
            with pytest.raises(ProviderError):
                await _StubAdapter()._make_request("GET", URL)


# ======================================================================
# TestNormalizationHelpers
# ======================================================================

class TestNormalizationHelpers:
    """Test shared date/time parsing."""

    @pytest.mark.parametrize("value,expected", [
        ("2024-06-02", date(2024, 6, 2)),
        ("2024-06-02T20:00:00", date(2024, 6, 2)),
        ("2024-06-02T20:00:00Z", date(2024, 6, 2)),
        ("2024-02-30", None),
        ("June 2", None),
        ("", None),
        (None, None),
        (20240602, None),
    ])
    def test_parse_date(self, value, expected):
        assert parse_date(value) == expected

    @pytest.mark.parametrize("value,expected", [
        ("20:00", "20:00"),
        ("19:30:00", "19:30"),
        ("7:05", "07:05"),
        ("2024-06-02T21:15:00", "21:15"),
        ("2024-06-02T21:15:00Z", "21:15"),
        ("24:00", None),
        ("12:75", None),
        ("TBA", None),
        ("", None),
        (None, None),
    ])
    def test_normalize_time(self, value, expected):
        assert normalize_time(value) == expected

    def test_split_local_datetime(self):
        assert split_local_datetime("2024-06-02T20:00:00") == (date(2024, 6, 2), "20:00")

    def test_split_date_only(self):
        assert split_local_datetime("2024-06-02") == (date(2024, 6, 2), None)

    def test_split_missing(self):
        assert split_local_datetime(None) == (None, None)

    def test_stable_id_is_deterministic(self):
        assert stable_id("Jazz Night", "Blue Note", date(2024, 6, 2)) == stable_id(
            "Jazz Night", "Blue Note", date(2024, 6, 2)
        )

    def test_stable_id_distinguishes_parts(self):
        assert stable_id("Trivia Night", "Bar A") != stable_id("Trivia Night", "Bar B")
        assert stable_id("a", "bc") != stable_id("ab", "c")
        assert len(stable_id("x")) == 16
