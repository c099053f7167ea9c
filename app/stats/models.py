"""
Statistics Models

Pydantic models for item and match aggregates. Counts only; no item text.
"""

from datetime import datetime
from typing import Dict, List
from pydantic import BaseModel, Field

from app.storage.models import utc_now


class LostFoundCount(BaseModel):
    lost: int = 0
    found: int = 0

    @property
    def total(self) -> int:
        return self.lost + self.found


class BreakdownEntry(BaseModel):
    """One row of a ranked category or location breakdown."""
    key: str
    lost: int = 0
    found: int = 0
    total: int = 0


class TimeBucket(BaseModel):
    """
    Counts for one calendar bucket.

    `bucket` is YYYY-MM for months and YYYY-MM-DD for days.
    """
    bucket: str
    label: str
    lost: int = 0
    found: int = 0
    total: int = 0


class ItemCounts(BaseModel):
    lost_count: int = 0
    found_count: int = 0
    resolved_count: int = 0
    total_count: int = 0
    by_status: Dict[str, int] = Field(default_factory=dict)


class MatchStatistics(BaseModel):
    """Match-quality summary. avg_score is 0.0 when there are no matches."""
    total: int = 0
    confirmed: int = 0
    pending: int = 0
    rejected: int = 0
    avg_score: float = 0.0


class OverallStatistics(BaseModel):
    lost_count: int
    found_count: int
    resolved_count: int
    total_count: int
    by_status: Dict[str, int]
    category_breakdown: Dict[str, LostFoundCount]
    time_breakdown: List[TimeBucket] = Field(
        description="Trailing calendar months, oldest first, zero-filled"
    )
    recent_activity: List[TimeBucket] = Field(
        description="Trailing calendar days, oldest first, zero-filled"
    )
    match_statistics: MatchStatistics
    generated_at: datetime = Field(default_factory=utc_now)


class CategoryStatistics(BaseModel):
    category: str
    lost_count: int
    found_count: int
    resolved_count: int
    total_count: int
    top_locations: List[BreakdownEntry]


class LocationStatistics(BaseModel):
    location: str
    lost_count: int
    found_count: int
    resolved_count: int
    total_count: int
    category_breakdown: List[BreakdownEntry]
