"""
Statistics Aggregator

Pure aggregation over item and match collections. Everything is recomputed
on each call; there is no cached or incremental view.

Usage:
    from app.stats.aggregate import category_breakdown, monthly_breakdown

    categories = category_breakdown(items)
    months = monthly_breakdown(items, months=12)
"""

from collections import OrderedDict
from datetime import date, datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Sequence

from app.storage.models import Item, ItemStatus, ItemType, Match, MatchStatus

from .models import (
    BreakdownEntry,
    CategoryStatistics,
    ItemCounts,
    LocationStatistics,
    LostFoundCount,
    MatchStatistics,
    TimeBucket,
)

TOP_LOCATIONS_LIMIT = 10


def _as_utc(moment: datetime) -> datetime:
    """Naive timestamps are treated as UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def _shift_month(year: int, month: int, offset: int):
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def _bump(counts, item: Item) -> None:
    if item.type == ItemType.LOST:
        counts.lost += 1
    else:
        counts.found += 1


def count_items(items: Iterable[Item]) -> ItemCounts:
    """Totals by type and by status (every status present, zero-filled)."""
    counts = ItemCounts(by_status={s.value: 0 for s in ItemStatus})
    for item in items:
        counts.total_count += 1
        counts.by_status[item.status.value] += 1
        if item.type == ItemType.LOST:
            counts.lost_count += 1
        else:
            counts.found_count += 1
    counts.resolved_count = counts.by_status[ItemStatus.RESOLVED.value]
    return counts


def category_breakdown(items: Iterable[Item]) -> Dict[str, LostFoundCount]:
    breakdown: Dict[str, LostFoundCount] = {}
    for item in items:
        _bump(breakdown.setdefault(item.category, LostFoundCount()), item)
    return breakdown


def location_breakdown(items: Iterable[Item]) -> Dict[str, LostFoundCount]:
    breakdown: Dict[str, LostFoundCount] = {}
    for item in items:
        _bump(breakdown.setdefault(item.location, LostFoundCount()), item)
    return breakdown


def rank_breakdown(
    breakdown: Dict[str, LostFoundCount],
    limit: Optional[int] = None,
) -> List[BreakdownEntry]:
    """Sort a breakdown by total descending (ties by key) and optionally cut it."""
    entries = [
        BreakdownEntry(key=key, lost=c.lost, found=c.found, total=c.total)
        for key, c in breakdown.items()
    ]
    entries.sort(key=lambda e: (-e.total, e.key))
    return entries[:limit] if limit is not None else entries


def _fill_buckets(buckets: "OrderedDict[str, TimeBucket]", items: Iterable[Item], key_fn) -> List[TimeBucket]:
    for item in items:
        bucket = buckets.get(key_fn(_as_utc(item.created_at)))
        if bucket is None:
            continue
        _bump(bucket, item)
        bucket.total += 1
    return list(buckets.values())


def monthly_breakdown(
    items: Iterable[Item],
    months: int = 12,
    now: Optional[datetime] = None,
) -> List[TimeBucket]:
    """
    Counts per calendar month for the trailing `months` months.

    Every month in the window is present even with zero items; items outside
    the window are ignored.
    """
    current = _as_utc(now or datetime.now(timezone.utc))
    buckets: "OrderedDict[str, TimeBucket]" = OrderedDict()
    for offset in range(-(months - 1), 1):
        year, month = _shift_month(current.year, current.month, offset)
        key = f"{year:04d}-{month:02d}"
        buckets[key] = TimeBucket(bucket=key, label=date(year, month, 1).strftime("%b %Y"))

    return _fill_buckets(buckets, items, lambda moment: f"{moment.year:04d}-{moment.month:02d}")


def daily_breakdown(
    items: Iterable[Item],
    days: int = 30,
    now: Optional[datetime] = None,
) -> List[TimeBucket]:
    """Counts per calendar day for the trailing `days` days, zero-filled."""
    today = _as_utc(now or datetime.now(timezone.utc)).date()
    buckets: "OrderedDict[str, TimeBucket]" = OrderedDict()
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        buckets[day.isoformat()] = TimeBucket(bucket=day.isoformat(), label=day.strftime("%b %d"))

    return _fill_buckets(buckets, items, lambda moment: moment.date().isoformat())


def match_quality_summary(matches: Sequence[Match]) -> MatchStatistics:
    """Status counts and mean score; avg_score is 0.0 for no matches."""
    stats = MatchStatistics(total=len(matches))
    if not matches:
        return stats

    for match in matches:
        if match.status == MatchStatus.CONFIRMED:
            stats.confirmed += 1
        elif match.status == MatchStatus.PENDING:
            stats.pending += 1
        elif match.status == MatchStatus.REJECTED:
            stats.rejected += 1

    stats.avg_score = sum(m.match_score for m in matches) / len(matches)
    return stats


def category_statistics(items: Iterable[Item], category: str) -> CategoryStatistics:
    """Counts for one category (exact match) with its busiest locations."""
    selected = [item for item in items if item.category == category]
    counts = count_items(selected)
    return CategoryStatistics(
        category=category,
        lost_count=counts.lost_count,
        found_count=counts.found_count,
        resolved_count=counts.resolved_count,
        total_count=counts.total_count,
        top_locations=rank_breakdown(location_breakdown(selected), TOP_LOCATIONS_LIMIT),
    )


def location_statistics(items: Iterable[Item], location: str) -> LocationStatistics:
    """Counts for items whose location contains `location` (case-insensitive)."""
    needle = location.lower()
    selected = [item for item in items if needle in item.location.lower()]
    counts = count_items(selected)
    return LocationStatistics(
        location=location,
        lost_count=counts.lost_count,
        found_count=counts.found_count,
        resolved_count=counts.resolved_count,
        total_count=counts.total_count,
        category_breakdown=rank_breakdown(category_breakdown(selected)),
    )
