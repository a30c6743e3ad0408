from abc import ABC, abstractmethod
from datetime import date

from timebill.schemas.activity import (
    ActivityBuckets,
    ActivityCategories,
    ActivityDuration,
    ActivityStatus,
)


class TimeDurationProvider(ABC):
    """
    Abstract base class for anything that can tell how long was spent on a
    category of work on a given day.
    """

    @abstractmethod
    async def get_duration(
        self, category: str, work_date: date, exclude_afk: bool = False
    ) -> ActivityDuration:
        """
        Tracked time for a category on a day

        Args:
            category: Category name, app name or title pattern
            work_date: The working day to look up
            exclude_afk: Subtract away-from-keyboard periods

        Returns:
            ActivityDuration with whole hours and remaining minutes
        """
        pass

    @abstractmethod
    async def get_status(self) -> ActivityStatus:
        """Report whether the provider can be reached."""
        pass

    @abstractmethod
    async def list_buckets(self) -> ActivityBuckets:
        """Raw data sources known to the provider."""
        pass

    @abstractmethod
    async def list_categories(self) -> ActivityCategories:
        """Category names and apps a client's activity category can be set to."""
        pass
