"""
Activity signal sources for auto-tick correlation.

An activity signal answers one question: did activity type X happen for
venue V on day D? Typical keys are "temp_check" (a temperature log exists)
and "receiving_log" (a goods-receiving entry exists). The logs themselves
belong to the host application; these adapters only read the fact.

Sources:
- StaticActivitySignalSource: in-memory facts (local runs, tests)
- HttpActivitySignalSource: the host's activity-log service over HTTP
"""

import asyncio
import logging
from datetime import date
from typing import Optional, Protocol, Set, Tuple, Iterable

import aiohttp

from config import settings
from ..exceptions import SignalUnavailableError
from ..utils.retry import retry_with_backoff, RetryExhausted, ACTIVITY_SIGNAL_RETRY

logger = logging.getLogger(__name__)


class ActivitySignalSource(Protocol):
    """Read-only view of external activity logs."""

    async def occurred(self, venue_id: str, activity_key: str, day: date) -> bool:
        """Whether the activity happened. Raises SignalUnavailableError if unknown."""
        ...


class StaticActivitySignalSource:
    """Activity facts held in memory."""

    def __init__(self, facts: Optional[Iterable[Tuple[str, str, date]]] = None):
        self._facts: Set[Tuple[str, str, date]] = set(facts or [])
        self._unavailable: Set[str] = set()
        self.calls = 0

    def record(self, venue_id: str, activity_key: str, day: date) -> None:
        """Register that an activity happened."""
        self._facts.add((venue_id, activity_key, day))

    def mark_unavailable(self, activity_key: str) -> None:
        """Make lookups for a key fail as if its log were unreachable."""
        self._unavailable.add(activity_key)

    def mark_available(self, activity_key: str) -> None:
        self._unavailable.discard(activity_key)

    async def occurred(self, venue_id: str, activity_key: str, day: date) -> bool:
        self.calls += 1
        if activity_key in self._unavailable:
            raise SignalUnavailableError(activity_key, "source marked unavailable")
        return (venue_id, activity_key, day) in self._facts


class HttpActivitySignalSource:
    """
    Activity facts from the host application's activity-log service.

    GET {base_url}/venues/{venue_id}/activity/{activity_key}?date=YYYY-MM-DD
    answers {"occurred": true|false}. A 404 means no such activity.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
    ):
        self.base_url = (base_url or settings.activity_signal_url or "").rstrip("/")
        self.timeout = timeout if timeout is not None else settings.activity_signal_timeout
        self.max_retries = max_retries if max_retries is not None else settings.activity_signal_retries

    def _url(self, venue_id: str, activity_key: str) -> str:
        return f"{self.base_url}/venues/{venue_id}/activity/{activity_key}"

    async def _fetch(self, venue_id: str, activity_key: str, day: date) -> bool:
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.get(
                self._url(venue_id, activity_key),
                params={"date": day.isoformat()},
            ) as response:
                if response.status == 404:
                    return False
                if response.status != 200:
                    body = await response.text()
                    raise SignalUnavailableError(
                        activity_key, f"HTTP {response.status}: {body[:200]}"
                    )
                data = await response.json()
                return bool(data.get("occurred", False))

    async def occurred(self, venue_id: str, activity_key: str, day: date) -> bool:
        if not self.base_url:
            raise SignalUnavailableError(activity_key, "activity signal URL not configured")

        retry_on = ACTIVITY_SIGNAL_RETRY["retry_on"] + (aiohttp.ClientError, asyncio.TimeoutError)
        try:
            return await retry_with_backoff(
                self._fetch,
                venue_id,
                activity_key,
                day,
                max_retries=self.max_retries,
                base_delay=ACTIVITY_SIGNAL_RETRY["base_delay"],
                max_delay=ACTIVITY_SIGNAL_RETRY["max_delay"],
                retry_on=retry_on,
                skip_on=(SignalUnavailableError,),
            )
        except RetryExhausted as e:
            raise SignalUnavailableError(activity_key, str(e)) from e


# Singleton
_signal_source: Optional[ActivitySignalSource] = None


def get_activity_signal_source() -> ActivitySignalSource:
    """HTTP source when an activity-log URL is configured, otherwise in-memory."""
    global _signal_source
    if _signal_source is None:
        if settings.activity_signal_url:
            _signal_source = HttpActivitySignalSource()
            logger.info(f"Activity signals from {settings.activity_signal_url}")
        else:
            _signal_source = StaticActivitySignalSource()
            logger.warning("No activity signal URL configured; auto-tick signals are never satisfied")
    return _signal_source
