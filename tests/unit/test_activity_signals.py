"""
Unit tests for activity signal sources.
"""

import pytest
import aiohttp
from datetime import date
from unittest.mock import AsyncMock, MagicMock, patch

from compliance_engine.exceptions import SignalUnavailableError
from compliance_engine.integrations.activity_signals import (
    HttpActivitySignalSource,
    StaticActivitySignalSource,
)

VENUE = "venue-bondi"
DAY = date(2026, 2, 24)


def _mock_session(status=200, json_data=None, text="", get_side_effect=None):
    """Build an aiohttp.ClientSession stand-in returning one response."""
    mock_response = MagicMock()
    mock_response.status = status
    mock_response.json = AsyncMock(return_value=json_data or {})
    mock_response.text = AsyncMock(return_value=text)
    mock_response.__aenter__ = AsyncMock(return_value=mock_response)
    mock_response.__aexit__ = AsyncMock(return_value=False)

    mock_session = MagicMock()
    if get_side_effect is not None:
        mock_session.get = MagicMock(side_effect=get_side_effect)
    else:
        mock_session.get = MagicMock(return_value=mock_response)
    mock_session.__aenter__ = AsyncMock(return_value=mock_session)
    mock_session.__aexit__ = AsyncMock(return_value=False)
    return mock_session


# ============================================================
# STATIC SOURCE
# ============================================================

class TestStaticActivitySignalSource:
    """Tests for the in-memory source."""

    @pytest.mark.asyncio
    async def test_recorded_fact(self):
        source = StaticActivitySignalSource([(VENUE, "temp_check", DAY)])

        assert await source.occurred(VENUE, "temp_check", DAY) is True
        assert await source.occurred(VENUE, "temp_check", date(2026, 2, 25)) is False
        assert await source.occurred("venue-manly", "temp_check", DAY) is False
        assert source.calls == 3

    @pytest.mark.asyncio
    async def test_unavailable_key_raises(self):
        source = StaticActivitySignalSource()
        source.mark_unavailable("receiving_log")

        with pytest.raises(SignalUnavailableError) as exc_info:
            await source.occurred(VENUE, "receiving_log", DAY)

        assert exc_info.value.source_key == "receiving_log"

        source.mark_available("receiving_log")
        assert await source.occurred(VENUE, "receiving_log", DAY) is False


# ============================================================
# HTTP SOURCE
# ============================================================

class TestHttpActivitySignalSource:
    """Tests for the HTTP source."""

    @pytest.fixture
    def source(self):
        return HttpActivitySignalSource(base_url="http://activity.local/api/", timeout=1.0, max_retries=2)

    @pytest.mark.asyncio
    async def test_occurred_true(self, source):
        mock_session = _mock_session(json_data={"occurred": True})

        with patch('aiohttp.ClientSession', return_value=mock_session):
            assert await source.occurred(VENUE, "temp_check", DAY) is True

        mock_session.get.assert_called_once_with(
            "http://activity.local/api/venues/venue-bondi/activity/temp_check",
            params={"date": "2026-02-24"},
        )

    @pytest.mark.asyncio
    async def test_occurred_false(self, source):
        mock_session = _mock_session(json_data={"occurred": False})

        with patch('aiohttp.ClientSession', return_value=mock_session):
            assert await source.occurred(VENUE, "temp_check", DAY) is False

    @pytest.mark.asyncio
    async def test_404_means_no_activity(self, source):
        mock_session = _mock_session(status=404)

        with patch('aiohttp.ClientSession', return_value=mock_session):
            assert await source.occurred(VENUE, "temp_check", DAY) is False

    @pytest.mark.asyncio
    async def test_server_error_is_unavailable_without_retry(self, source):
        mock_session = _mock_session(status=503, text="Service Unavailable")

        with patch('aiohttp.ClientSession', return_value=mock_session):
            with pytest.raises(SignalUnavailableError, match="HTTP 503"):
                await source.occurred(VENUE, "temp_check", DAY)

        assert mock_session.get.call_count == 1

    @pytest.mark.asyncio
    async def test_connection_errors_retried_then_unavailable(self, source):
        mock_session = _mock_session(get_side_effect=aiohttp.ClientConnectionError("refused"))

        with patch('aiohttp.ClientSession', return_value=mock_session), \
             patch('compliance_engine.utils.retry.asyncio.sleep', new_callable=AsyncMock) as mock_sleep:
            with pytest.raises(SignalUnavailableError):
                await source.occurred(VENUE, "temp_check", DAY)

        assert mock_session.get.call_count == 3
        assert mock_sleep.await_count == 2

    @pytest.mark.asyncio
    async def test_not_configured(self):
        source = HttpActivitySignalSource()
        source.base_url = ""

        with pytest.raises(SignalUnavailableError, match="not configured"):
            await source.occurred(VENUE, "temp_check", DAY)
