"""
In-Memory Storage Backend

Process-local item and match stores. Used when no DATABASE_URL is
configured and as the substitutable fake in tests.
"""

import uuid
from datetime import datetime
from threading import Lock
from typing import Callable, Dict, List, Optional

from app.shared.errors import MatchAlreadyExists

from .base import ItemStore, MatchStore
from .models import (
    CandidateQuery,
    Item,
    ItemCreate,
    ItemStatus,
    Match,
    MatchCreate,
    MatchStatus,
    utc_now,
)

Clock = Callable[[], datetime]


def _new_id() -> str:
    return uuid.uuid4().hex


class InMemoryItemStore(ItemStore):
    backend = "memory"

    def __init__(self, clock: Clock = utc_now):
        self._clock = clock
        self._items: Dict[str, Item] = {}
        self._lock = Lock()

    def add(self, item: Item) -> Item:
        """Insert a fully-formed item (seeding and tests)."""
        with self._lock:
            self._items[item.id] = item
        return item

    def get_item_by_id(self, item_id: str) -> Optional[Item]:
        with self._lock:
            item = self._items.get(item_id)
        return item.model_copy() if item else None

    def list_candidates(self, query: CandidateQuery) -> List[Item]:
        with self._lock:
            items = [i.model_copy() for i in self._items.values() if query.accepts(i)]
        items.sort(key=lambda i: i.created_at, reverse=True)
        return items

    def list_all_items(self) -> List[Item]:
        with self._lock:
            return [i.model_copy() for i in self._items.values()]

    def create_item(self, data: ItemCreate) -> Item:
        item = Item(
            id=_new_id(),
            created_at=self._clock(),
            status=ItemStatus.ACTIVE,
            **data.model_dump(),
        )
        return self.add(item).model_copy()

    def update_item_status(self, item_id: str, status: ItemStatus) -> bool:
        with self._lock:
            item = self._items.get(item_id)
            if item is None:
                return False
            self._items[item_id] = item.model_copy(update={"status": ItemStatus(status)})
            return True

    def delete_item(self, item_id: str) -> bool:
        with self._lock:
            return self._items.pop(item_id, None) is not None


class InMemoryMatchStore(MatchStore):
    backend = "memory"

    def __init__(self, clock: Clock = utc_now):
        self._clock = clock
        self._matches: Dict[str, Match] = {}
        self._pairs: Dict[tuple, str] = {}
        self._lock = Lock()

    def match_exists(self, lost_item_id: str, found_item_id: str) -> bool:
        with self._lock:
            return (lost_item_id, found_item_id) in self._pairs

    def create_match(self, data: MatchCreate) -> Match:
        pair = (data.lost_item_id, data.found_item_id)
        with self._lock:
            if pair in self._pairs:
                raise MatchAlreadyExists(*pair)
            match = Match(
                id=_new_id(),
                lost_item_id=data.lost_item_id,
                found_item_id=data.found_item_id,
                match_score=data.match_score,
                status=MatchStatus.PENDING,
                created_at=self._clock(),
            )
            self._matches[match.id] = match
            self._pairs[pair] = match.id
        return match.model_copy()

    def get_match_by_id(self, match_id: str) -> Optional[Match]:
        with self._lock:
            match = self._matches.get(match_id)
        return match.model_copy() if match else None

    def update_match_status(self, match_id: str, status: MatchStatus) -> bool:
        with self._lock:
            match = self._matches.get(match_id)
            if match is None:
                return False
            self._matches[match_id] = match.model_copy(update={"status": MatchStatus(status)})
            return True

    def delete_match(self, match_id: str) -> bool:
        with self._lock:
            match = self._matches.pop(match_id, None)
            if match is None:
                return False
            self._pairs.pop((match.lost_item_id, match.found_item_id), None)
            return True

    def list_all_matches(self) -> List[Match]:
        with self._lock:
            return [m.model_copy() for m in self._matches.values()]
