import logging
import math
import re
import socket
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Dict, List, Optional, Pattern, Tuple

import requests

from timebill.core.config import settings
from timebill.core.exceptions import (
    ExternalServiceException,
    ServiceTimeoutException,
    ServiceUnavailableException,
)
from timebill.integrations.activitywatch.base import TimeDurationProvider
from timebill.integrations.activitywatch.cache import BucketCache
from timebill.schemas.activity import (
    ActivityBuckets,
    ActivityCategories,
    ActivityDuration,
    ActivityStatus,
)
from timebill.utils.timeout import run_blocking

logger = logging.getLogger(__name__)

WINDOW_BUCKET_PREFIX = "aw-watcher-window"
AFK_BUCKET_PREFIX = "aw-watcher-afk"

# Buckets, window events, settings and AFK events, one after another
REQUESTS_PER_LOOKUP = 4

CATEGORY_LOOKBACK_DAYS = 7


def fallback_category_regex(category: str) -> Pattern[str]:
    """Case-insensitive pattern from the category name without -, _ and spaces."""
    normalized = re.sub(r"[-_\s]", "", category.lower())
    return re.compile(re.escape(normalized), re.IGNORECASE)


def parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def event_matches(event: Dict[str, Any], pattern: Pattern[str]) -> bool:
    """An event matches on its app, its title or any of its categories."""
    data = event.get("data") or {}
    if data.get("app") and pattern.search(str(data["app"])):
        return True
    if data.get("title") and pattern.search(str(data["title"])):
        return True
    categories = data.get("category")
    if isinstance(categories, list):
        return any(pattern.search(str(c)) for c in categories)
    return False


def subtract_afk(
    window_events: List[Dict[str, Any]], afk_events: List[Dict[str, Any]]
) -> int:
    """
    Active seconds across window events after removing AFK overlap.

    Each window event loses the overlap with every AFK period and never goes
    below zero. The total is rounded to whole seconds.
    """
    afk_periods = []
    for afk in afk_events:
        if (afk.get("data") or {}).get("status") != "afk":
            continue
        start = parse_timestamp(afk["timestamp"])
        afk_periods.append((start, start + timedelta(seconds=afk.get("duration", 0))))

    total = 0.0
    for event in window_events:
        duration = float(event.get("duration", 0))
        start = parse_timestamp(event["timestamp"])
        end = start + timedelta(seconds=duration)

        active = duration
        for afk_start, afk_end in afk_periods:
            overlap_start = max(start, afk_start)
            overlap_end = min(end, afk_end)
            if overlap_start < overlap_end:
                active -= (overlap_end - overlap_start).total_seconds()

        total += max(0.0, active)

    return math.floor(total + 0.5)


def split_seconds(total_seconds: int) -> Tuple[int, int]:
    """Whole hours and the minutes left over; leftover seconds are dropped."""
    return total_seconds // 3600, (total_seconds % 3600) // 60


class ActivityWatchProvider(TimeDurationProvider):
    """
    Time-duration provider backed by the ActivityWatch REST API.

    The HTTP calls are blocking ``requests`` calls, each bounded by
    ``timeout``. The async entry points run a whole lookup in a worker thread
    bounded by ``lookup_timeout``, which covers several sequential requests.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        hostname: Optional[str] = None,
        timeout: Optional[float] = None,
        cache: Optional[BucketCache] = None,
        session: Optional[requests.Session] = None,
        day_start_hour: Optional[int] = None,
        utc_offset_hours: Optional[int] = None,
        lookup_timeout: Optional[float] = None,
    ):
        self.base_url = (base_url or settings.ACTIVITYWATCH_URL).rstrip("/")
        self.hostname = hostname or settings.ACTIVITYWATCH_HOSTNAME or socket.gethostname()
        self.timeout = timeout or settings.ACTIVITYWATCH_TIMEOUT
        self.lookup_timeout = (
            lookup_timeout
            or settings.ACTIVITYWATCH_LOOKUP_TIMEOUT
            or self.timeout * REQUESTS_PER_LOOKUP
        )
        self.cache = cache or BucketCache(settings.ACTIVITYWATCH_BUCKET_CACHE_TTL)
        self.session = session or requests.Session()
        self.day_start_hour = (
            settings.ACTIVITYWATCH_DAY_START_HOUR if day_start_hour is None else day_start_hour
        )
        self.utc_offset_hours = (
            settings.ACTIVITYWATCH_UTC_OFFSET_HOURS
            if utc_offset_hours is None
            else utc_offset_hours
        )

    # HTTP

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.get(
                url,
                params=params,
                timeout=self.timeout,
                headers={"Connection": "close"},
            )
            response.raise_for_status()
            return response.json()
        # ConnectTimeout is also a ConnectionError; treat it as a timeout
        except requests.exceptions.Timeout:
            logger.error(f"ActivityWatch request timed out: {url}")
            raise ServiceTimeoutException(
                "ActivityWatch request timed out", details={"url": self.base_url}
            )
        except requests.exceptions.ConnectionError:
            logger.error(f"ActivityWatch is not reachable at {self.base_url}")
            raise ServiceUnavailableException(
                "ActivityWatch is not running or not accessible",
                details={"url": self.base_url},
            )
        except requests.exceptions.HTTPError as e:
            status_code = e.response.status_code if e.response is not None else None
            logger.error(f"ActivityWatch returned {status_code} for {url}")
            raise ExternalServiceException(
                f"ActivityWatch request failed with status {status_code}",
                details={"url": self.base_url, "status_code": status_code},
            )
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.error(f"ActivityWatch request to {url} failed: {e}")
            raise ExternalServiceException(
                f"ActivityWatch request failed: {e}", details={"url": self.base_url}
            )

    # Buckets

    def get_buckets(self) -> Dict[str, Any]:
        buckets = self.cache.get()
        if buckets is None:
            buckets = self._get("/api/0/buckets") or {}
            self.cache.set(buckets)
        return buckets

    def _find_bucket(self, prefix: str) -> str:
        buckets = self.get_buckets()
        preferred = f"{prefix}_{self.hostname}"
        if preferred in buckets:
            return preferred

        for bucket_id in buckets:
            if bucket_id.startswith(prefix):
                return bucket_id

        raise ExternalServiceException(
            f"No {prefix} bucket found in ActivityWatch",
            details={"hostname": self.hostname},
        )

    def day_window(self, work_date: date) -> Tuple[str, str]:
        """Start and end of a working day, which begins at ``day_start_hour``."""
        tz = timezone(timedelta(hours=self.utc_offset_hours))
        start = datetime.combine(work_date, time(hour=self.day_start_hour), tzinfo=tz)
        end = start + timedelta(days=1)
        return start.isoformat(), end.isoformat()

    def _get_events_between(self, bucket_id: str, start: str, end: str) -> List[Dict[str, Any]]:
        return (
            self._get(
                f"/api/0/buckets/{bucket_id}/events",
                params={"start": start, "end": end, "limit": -1},
            )
            or []
        )

    def get_events(self, bucket_id: str, work_date: date) -> List[Dict[str, Any]]:
        start, end = self.day_window(work_date)
        return self._get_events_between(bucket_id, start, end)

    # Categories

    def get_categories(self, now: Optional[datetime] = None) -> ActivityCategories:
        """
        Category names configured in ActivityWatch plus the apps seen in the
        window watcher over the last ``CATEGORY_LOOKBACK_DAYS`` days.
        """
        categories = set()
        for category_class in (self._get("/api/0/settings") or {}).get("classes") or []:
            if (category_class.get("rule") or {}).get("type") == "regex":
                categories.update(str(part) for part in category_class.get("name") or [])

        end = now or datetime.now(timezone.utc)
        start = end - timedelta(days=CATEGORY_LOOKBACK_DAYS)
        events = self._get_events_between(
            self._find_bucket(WINDOW_BUCKET_PREFIX), start.isoformat(), end.isoformat()
        )

        apps = set()
        for event in events:
            data = event.get("data") or {}
            if data.get("app"):
                apps.add(str(data["app"]))
            if isinstance(data.get("category"), list):
                categories.update(str(c) for c in data["category"])

        return ActivityCategories(categories=sorted(categories), apps=sorted(apps))

    def get_category_regex(self, category: str) -> Pattern[str]:
        """
        Pattern for a category as configured in ActivityWatch.

        Falls back to a pattern built from the name when the settings cannot
        be read or hold no regex rule for it.
        """
        try:
            aw_settings = self._get("/api/0/settings") or {}
        except (ExternalServiceException, ServiceTimeoutException) as e:
            logger.warning(
                f"Could not read ActivityWatch settings for '{category}', using fallback: {e.message}"
            )
            return fallback_category_regex(category)

        for category_class in aw_settings.get("classes") or []:
            name = category_class.get("name")
            rule = category_class.get("rule") or {}
            if not name or category not in name or rule.get("type") != "regex":
                continue
            flags = re.IGNORECASE if rule.get("ignore_case", True) is not False else 0
            try:
                return re.compile(rule.get("regex", ""), flags)
            except re.error as e:
                logger.warning(f"Invalid ActivityWatch regex for '{category}': {e}")
                break

        return fallback_category_regex(category)

    def get_time_by_category(
        self, category: str, work_date: date, exclude_afk: bool = False
    ) -> ActivityDuration:
        window_events = self.get_events(self._find_bucket(WINDOW_BUCKET_PREFIX), work_date)
        pattern = self.get_category_regex(category)
        matched = [event for event in window_events if event_matches(event, pattern)]

        if exclude_afk:
            afk_events = self.get_events(self._find_bucket(AFK_BUCKET_PREFIX), work_date)
            total_seconds = subtract_afk(matched, afk_events)
        else:
            total_seconds = math.floor(
                sum(float(event.get("duration", 0)) for event in matched) + 0.5
            )

        hours, minutes = split_seconds(total_seconds)
        logger.debug(
            f"ActivityWatch: {len(matched)} events for '{category}' on {work_date}, "
            f"{total_seconds}s"
        )
        return ActivityDuration(
            category=category,
            work_date=work_date,
            hours=hours,
            minutes=minutes,
            total_seconds=total_seconds,
            exclude_afk=exclude_afk,
        )

    def check_status(self) -> ActivityStatus:
        try:
            buckets = self._get("/api/0/buckets") or {}
        except (ExternalServiceException, ServiceTimeoutException) as e:
            return ActivityStatus(running=False, message=e.message, url=self.base_url)

        self.cache.set(buckets)
        return ActivityStatus(
            running=True,
            message="ActivityWatch is running",
            url=self.base_url,
            buckets=len(buckets),
        )

    # Async entry points

    async def get_duration(
        self, category: str, work_date: date, exclude_afk: bool = False
    ) -> ActivityDuration:
        return await run_blocking(
            self.get_time_by_category,
            category,
            work_date,
            exclude_afk,
            timeout=self.lookup_timeout,
            error_message=f"ActivityWatch lookup for '{category}' timed out",
        )

    async def get_status(self) -> ActivityStatus:
        return await run_blocking(
            self.check_status,
            timeout=self.lookup_timeout,
            error_message="ActivityWatch status check timed out",
        )

    async def list_buckets(self) -> ActivityBuckets:
        buckets = await run_blocking(
            self.get_buckets,
            timeout=self.lookup_timeout,
            error_message="ActivityWatch bucket listing timed out",
        )
        return ActivityBuckets(count=len(buckets), buckets=buckets)

    async def list_categories(self) -> ActivityCategories:
        return await run_blocking(
            self.get_categories,
            timeout=self.lookup_timeout,
            error_message="ActivityWatch category listing timed out",
        )
