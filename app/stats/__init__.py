"""
Campus Lost & Found Statistics

Category, location and time-bucketed item counts plus the match-quality
summary. All figures are recomputed from the stores on every request.
"""

from .models import (
    LostFoundCount,
    BreakdownEntry,
    TimeBucket,
    ItemCounts,
    MatchStatistics,
    OverallStatistics,
    CategoryStatistics,
    LocationStatistics,
)
from .service import StatisticsService

__all__ = [
    "LostFoundCount",
    "BreakdownEntry",
    "TimeBucket",
    "ItemCounts",
    "MatchStatistics",
    "OverallStatistics",
    "CategoryStatistics",
    "LocationStatistics",
    "StatisticsService",
]
