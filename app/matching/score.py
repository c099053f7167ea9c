"""
Match Scoring

Pure functions for text similarity and the weighted lost/found score.

Score model (0-100):
- Category exact match (case-sensitive):         40
- Location exact match (case-insensitive):       20
  or substring containment either direction:     10
- Name token similarity x 25, rounded half-up:    0-25
- Description token similarity x 15, half-up:     0-15

Total capped at 100.
"""

import math
from typing import Optional, Set

from app.storage.models import Item

from .models import ScoreBreakdown

CATEGORY_WEIGHT = 40
LOCATION_EXACT_WEIGHT = 20
LOCATION_PARTIAL_WEIGHT = 10
NAME_WEIGHT = 25
DESCRIPTION_WEIGHT = 15
MAX_SCORE = 100


def _tokens(text: Optional[str]) -> Set[str]:
    return set((text or "").lower().split())


def round_half_up(value: float) -> int:
    """Round non-negative values with .5 going up (12.5 -> 13)."""
    return int(math.floor(value + 0.5))


def calculate_similarity(text1: Optional[str], text2: Optional[str]) -> float:
    """
    Jaccard index over lower-cased whitespace tokens.

    No stemming and no punctuation stripping. Two blank strings score 0.0,
    not 1.0.
    """
    set1 = _tokens(text1)
    set2 = _tokens(text2)

    union = set1 | set2
    if not union:
        return 0.0

    return len(set1 & set2) / len(union)


def location_points(location1: str, location2: str) -> int:
    loc1 = location1.lower()
    loc2 = location2.lower()
    if loc1 == loc2:
        return LOCATION_EXACT_WEIGHT
    if loc1 in loc2 or loc2 in loc1:
        return LOCATION_PARTIAL_WEIGHT
    return 0


def score_breakdown(lost_item: Item, found_item: Item) -> ScoreBreakdown:
    """Per-component points for a lost/found pair."""
    category = CATEGORY_WEIGHT if lost_item.category == found_item.category else 0
    location = location_points(lost_item.location, found_item.location)
    name = round_half_up(
        calculate_similarity(lost_item.name, found_item.name) * NAME_WEIGHT
    )
    description = round_half_up(
        calculate_similarity(lost_item.description, found_item.description) * DESCRIPTION_WEIGHT
    )

    return ScoreBreakdown(
        category=category,
        location=location,
        name=name,
        description=description,
        total=min(category + location + name + description, MAX_SCORE),
    )


def calculate_match_score(lost_item: Item, found_item: Item) -> int:
    """Calculate match score between a lost item and a found item."""
    return score_breakdown(lost_item, found_item).total
