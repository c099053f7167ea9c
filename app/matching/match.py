"""
Matching Engine Core Logic

Discovers lost/found pairings for a newly reported item and serves the
read side of the match collection.

Discovery pipeline:
1. Resolve the new item (ItemNotFound if absent)
2. Fetch opposite-type active candidates (same category OR location containment)
3. Orient each pair into (lost, found); skip pairs that already have a match
4. Score the pair; persist a pending match when score >= MATCH_THRESHOLD
5. Return the newly created matches

Discovery runs are serialized through the engine lock, and the stores reject
duplicate pairs, so repeated or overlapping runs never create two matches for
the same (lost_item_id, found_item_id).

Version: matching_engine_v1
"""

import logging
from threading import Lock
from typing import List, Optional, Tuple, Union

from app.shared.errors import (
    InvalidStatus,
    ItemNotFound,
    MatchAlreadyExists,
    MatchNotFound,
    StorageUnavailable,
)
from app.stats.aggregate import match_quality_summary
from app.stats.models import MatchStatistics
from app.storage.base import ItemStore, MatchStore
from app.storage.models import (
    CandidateQuery,
    Item,
    ItemType,
    Match,
    MatchCreate,
    MatchStatus,
)

from .models import MatchFilter, MatchView, ScoreBreakdown
from .score import calculate_match_score, score_breakdown
from .view import build_match_views, join_match

logger = logging.getLogger(__name__)

MATCH_THRESHOLD = 30


def orient_pair(item: Item, candidate: Item) -> Tuple[Item, Item]:
    """Return (lost, found) for two items of opposite type."""
    if item.type == ItemType.LOST:
        return item, candidate
    return candidate, item


def parse_match_status(status: Union[str, MatchStatus]) -> MatchStatus:
    try:
        return MatchStatus(status)
    except ValueError:
        raise InvalidStatus(status, [s.value for s in MatchStatus]) from None


class MatchingEngine:
    """
    Match discovery and match repository view over injected stores.

    Holds no item or match state of its own; every call reads the stores.
    """

    def __init__(self, item_store: ItemStore, match_store: MatchStore):
        self._items = item_store
        self._matches = match_store
        self._discovery_lock = Lock()

    @property
    def item_store(self) -> ItemStore:
        return self._items

    @property
    def match_store(self) -> MatchStore:
        return self._matches

    def _require_item(self, item_id: str) -> Item:
        item = self._items.get_item_by_id(item_id)
        if item is None:
            raise ItemNotFound(item_id)
        return item

    # ===== DISCOVERY =====

    def discover_matches(self, item_id: str) -> List[Match]:
        """
        Find and persist matches for a newly reported item.

        Args:
            item_id: ID of the new lost or found item

        Returns:
            Matches created by this call (empty when nothing qualifies)

        Raises:
            ItemNotFound: item_id does not exist
            StorageUnavailable: a store read/write failed
        """
        with self._discovery_lock:
            item = self._require_item(item_id)

            candidates = self._items.list_candidates(CandidateQuery(
                item_type=item.type.opposite,
                category=item.category,
                location=item.location,
            ))
            logger.info(
                f"Discovery for {item.type.value} item {item.id}: "
                f"{len(candidates)} candidates"
            )

            created: List[Match] = []
            for candidate in candidates:
                lost_item, found_item = orient_pair(item, candidate)

                if self._matches.match_exists(lost_item.id, found_item.id):
                    logger.debug(f"Skip existing pair lost={lost_item.id} found={found_item.id}")
                    continue

                score = calculate_match_score(lost_item, found_item)
                if score < MATCH_THRESHOLD:
                    logger.debug(
                        f"Skip pair lost={lost_item.id} found={found_item.id}: "
                        f"score {score} < {MATCH_THRESHOLD}"
                    )
                    continue

                try:
                    match = self._matches.create_match(MatchCreate(
                        lost_item_id=lost_item.id,
                        found_item_id=found_item.id,
                        match_score=score,
                    ))
                except MatchAlreadyExists as e:
                    logger.info(f"Pair already stored by a concurrent writer: {e.message}")
                    continue

                created.append(match)
                logger.info(
                    f"Created match {match.id} lost={lost_item.id} "
                    f"found={found_item.id} score={score}"
                )

            return created

    def discover_matches_safely(self, item_id: str) -> List[Match]:
        """
        Best-effort discovery for the item-creation path.

        The item is already persisted and is not rolled back; a failure here
        is logged and yields no matches. Discovery can be re-run later via
        discover_matches.
        """
        try:
            return self.discover_matches(item_id)
        except (StorageUnavailable, ItemNotFound) as e:
            logger.error(f"Match discovery failed after creating item {item_id}: {e.message}")
            return []

    # ===== REPOSITORY VIEW =====

    def list_matches(self, match_filter: Optional[MatchFilter] = None) -> List[MatchView]:
        return build_match_views(
            self._matches.list_all_matches(),
            self._items.list_all_items(),
            match_filter,
        )

    def get_matches_for_item(self, item_id: str) -> List[MatchView]:
        """
        Matches that reference item_id as either side.

        Matches outlive their items, so a deleted item still lists its
        matches. ItemNotFound only when nothing references the id and no
        such item exists.
        """
        related = [
            m for m in self._matches.list_all_matches()
            if item_id in (m.lost_item_id, m.found_item_id)
        ]
        if not related:
            self._require_item(item_id)
            return []
        return build_match_views(related, self._items.list_all_items())

    def get_match_by_id(self, match_id: str) -> MatchView:
        match = self._matches.get_match_by_id(match_id)
        if match is None:
            raise MatchNotFound(match_id)
        items = {}
        for ref in (match.lost_item_id, match.found_item_id):
            item = self._items.get_item_by_id(ref)
            if item is not None:
                items[ref] = item
        return join_match(match, items)

    def explain_match(self, match_id: str) -> ScoreBreakdown:
        """Recompute the score components for a stored match."""
        match = self._matches.get_match_by_id(match_id)
        if match is None:
            raise MatchNotFound(match_id)
        return score_breakdown(
            self._require_item(match.lost_item_id),
            self._require_item(match.found_item_id),
        )

    # ===== LIFECYCLE =====

    def set_match_status(self, match_id: str, status: Union[str, MatchStatus]) -> bool:
        """
        Confirm, reject or reset a match.

        Raises InvalidStatus before touching the store. Returns False when
        the match does not exist.
        """
        new_status = parse_match_status(status)
        updated = self._matches.update_match_status(match_id, new_status)
        if updated:
            logger.info(f"Match {match_id} status -> {new_status.value}")
        return updated

    def delete_match(self, match_id: str) -> bool:
        deleted = self._matches.delete_match(match_id)
        if deleted:
            logger.info(f"Deleted match {match_id}")
        return deleted

    def get_match_statistics(self) -> MatchStatistics:
        return match_quality_summary(self._matches.list_all_matches())
