"""
Campus Lost & Found Matching Engine

Lost report <-> found report matching.

This module answers: "Which found items could be this lost item, and vice versa?"

- Scores pairs with a weighted model (category, location, name and
  description token overlap)
- Persists pairs scoring at least 30 as pending matches, never twice
- Joins matches back to their items for display
- Lets an operator confirm, reject or delete a match

Version: matching_engine_v1
"""

from .models import (
    MatchFilter,
    MatchView,
    ItemSummary,
    ScoreBreakdown,
)
from .score import calculate_similarity, calculate_match_score, score_breakdown
from .match import MatchingEngine, MATCH_THRESHOLD

__all__ = [
    "MatchFilter",
    "MatchView",
    "ItemSummary",
    "ScoreBreakdown",
    "calculate_similarity",
    "calculate_match_score",
    "score_breakdown",
    "MatchingEngine",
    "MATCH_THRESHOLD",
]

__version__ = "matching_engine_v1"
