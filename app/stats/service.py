"""
Statistics service: reads the stores and hands the collections to the
pure aggregators in aggregate.py.
"""

from datetime import datetime
from typing import List, Optional

from app.storage.base import ItemStore, MatchStore

from .aggregate import (
    category_breakdown,
    category_statistics,
    count_items,
    daily_breakdown,
    location_statistics,
    match_quality_summary,
    monthly_breakdown,
)
from .models import (
    CategoryStatistics,
    LocationStatistics,
    OverallStatistics,
    TimeBucket,
)


class StatisticsService:

    def __init__(
        self,
        item_store: ItemStore,
        match_store: MatchStore,
        months: int = 12,
        days: int = 30,
    ):
        self._items = item_store
        self._matches = match_store
        self.months = months
        self.days = days

    def get_overall_statistics(self, now: Optional[datetime] = None) -> OverallStatistics:
        items = self._items.list_all_items()
        counts = count_items(items)
        return OverallStatistics(
            lost_count=counts.lost_count,
            found_count=counts.found_count,
            resolved_count=counts.resolved_count,
            total_count=counts.total_count,
            by_status=counts.by_status,
            category_breakdown=category_breakdown(items),
            time_breakdown=monthly_breakdown(items, self.months, now),
            recent_activity=daily_breakdown(items, self.days, now),
            match_statistics=match_quality_summary(self._matches.list_all_matches()),
        )

    def get_daily_statistics(
        self,
        days: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> List[TimeBucket]:
        return daily_breakdown(self._items.list_all_items(), days or self.days, now)

    def get_category_statistics(self, category: str) -> CategoryStatistics:
        return category_statistics(self._items.list_all_items(), category)

    def get_location_statistics(self, location: str) -> LocationStatistics:
        return location_statistics(self._items.list_all_items(), location)
