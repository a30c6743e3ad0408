from functools import lru_cache

from timebill.core.config import settings
from timebill.integrations.activitywatch.base import TimeDurationProvider
from timebill.integrations.activitywatch.cache import BucketCache
from timebill.integrations.activitywatch.client import ActivityWatchProvider


@lru_cache()
def get_activity_provider() -> TimeDurationProvider:
    """
    Provides the ActivityWatch provider for dependency injection.

    One instance per process, so the bucket cache and the HTTP session are
    shared between requests.
    """
    return ActivityWatchProvider(
        base_url=settings.ACTIVITYWATCH_URL,
        timeout=settings.ACTIVITYWATCH_TIMEOUT,
        cache=BucketCache(settings.ACTIVITYWATCH_BUCKET_CACHE_TTL),
    )
