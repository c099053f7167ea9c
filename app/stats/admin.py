"""
Statistics Endpoints

GET /api/v1/stats                      - Overall item/match statistics
GET /api/v1/stats/daily                - Per-day counts, trailing window
GET /api/v1/stats/category/{category}  - One category with top locations
GET /api/v1/stats/location/{location}  - One location with category breakdown
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from app.shared.errors import MatchingError

from .models import (
    CategoryStatistics,
    LocationStatistics,
    OverallStatistics,
    TimeBucket,
)
from .service import StatisticsService


router = APIRouter(prefix="/api/v1/stats", tags=["stats"])


def get_statistics(request: Request) -> StatisticsService:
    return request.app.state.statistics


@router.get("", response_model=OverallStatistics)
def overall_statistics(stats: StatisticsService = Depends(get_statistics)):
    try:
        return stats.get_overall_statistics()
    except MatchingError as e:
        raise HTTPException(status_code=e.http_code, detail=e.message)


@router.get("/daily", response_model=List[TimeBucket])
def daily_statistics(
    days: Optional[int] = Query(None, ge=1, le=366),
    stats: StatisticsService = Depends(get_statistics),
):
    try:
        return stats.get_daily_statistics(days)
    except MatchingError as e:
        raise HTTPException(status_code=e.http_code, detail=e.message)


@router.get("/category/{category}", response_model=CategoryStatistics)
def category_statistics(category: str, stats: StatisticsService = Depends(get_statistics)):
    try:
        return stats.get_category_statistics(category)
    except MatchingError as e:
        raise HTTPException(status_code=e.http_code, detail=e.message)


@router.get("/location/{location}", response_model=LocationStatistics)
def location_statistics(location: str, stats: StatisticsService = Depends(get_statistics)):
    try:
        return stats.get_location_statistics(location)
    except MatchingError as e:
        raise HTTPException(status_code=e.http_code, detail=e.message)
