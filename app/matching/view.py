"""
Match Repository View

Read-side join of match records back to their lost/found items.

Joins are tolerant: a match whose item was deleted still renders, with the
missing side reduced to its id. Output is ordered by match_score descending,
then created_at ascending.
"""

from typing import Dict, Iterable, List, Optional

from app.storage.models import Item, Match

from .models import ItemSummary, MatchFilter, MatchView


def join_match(match: Match, items_by_id: Dict[str, Item]) -> MatchView:
    return MatchView(
        id=match.id,
        match_score=match.match_score,
        status=match.status,
        created_at=match.created_at,
        lost_item=ItemSummary.from_item(match.lost_item_id, items_by_id.get(match.lost_item_id)),
        found_item=ItemSummary.from_item(match.found_item_id, items_by_id.get(match.found_item_id)),
    )


def sort_match_views(views: Iterable[MatchView]) -> List[MatchView]:
    return sorted(views, key=lambda v: (-v.match_score, v.created_at))


def passes_filter(view: MatchView, match_filter: Optional[MatchFilter]) -> bool:
    if match_filter is None:
        return True
    if match_filter.status is not None and view.status != match_filter.status:
        return False
    if match_filter.category:
        # deleted lost item -> no category to compare
        category = view.lost_item.category
        if category is None or category.lower() != match_filter.category.lower():
            return False
    return True


def build_match_views(
    matches: Iterable[Match],
    items: Iterable[Item],
    match_filter: Optional[MatchFilter] = None,
) -> List[MatchView]:
    """
    Join matches to items, apply the filter, and sort.

    Args:
        matches: Match records from the match store
        items: Current item collection
        match_filter: Optional category/status filter

    Returns:
        Joined views, best score first
    """
    items_by_id = {item.id: item for item in items}
    views = [join_match(match, items_by_id) for match in matches]
    return sort_match_views(v for v in views if passes_filter(v, match_filter))
