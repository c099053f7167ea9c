"""
Storage Interfaces

Abstract collaborators consumed by the matching engine. Implementations own
id and timestamp assignment; the engine treats ids as opaque tokens.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from .models import (
    CandidateQuery,
    Item,
    ItemCreate,
    ItemStatus,
    Match,
    MatchCreate,
    MatchStatus,
)


class ItemStore(ABC):
    """Read interface over reported items (plus the few writes the API needs)."""

    backend: str = "abstract"

    @abstractmethod
    def get_item_by_id(self, item_id: str) -> Optional[Item]:
        pass

    @abstractmethod
    def list_candidates(self, query: CandidateQuery) -> List[Item]:
        """Active items matching the query, newest first."""
        pass

    @abstractmethod
    def list_all_items(self) -> List[Item]:
        pass

    @abstractmethod
    def create_item(self, data: ItemCreate) -> Item:
        pass

    @abstractmethod
    def update_item_status(self, item_id: str, status: ItemStatus) -> bool:
        pass

    @abstractmethod
    def delete_item(self, item_id: str) -> bool:
        pass


class MatchStore(ABC):
    """
    Write interface for match records.

    create_match must reject a second record for the same
    (lost_item_id, found_item_id) pair with MatchAlreadyExists.
    """

    backend: str = "abstract"

    @abstractmethod
    def match_exists(self, lost_item_id: str, found_item_id: str) -> bool:
        pass

    @abstractmethod
    def create_match(self, data: MatchCreate) -> Match:
        pass

    @abstractmethod
    def get_match_by_id(self, match_id: str) -> Optional[Match]:
        pass

    @abstractmethod
    def update_match_status(self, match_id: str, status: MatchStatus) -> bool:
        pass

    @abstractmethod
    def delete_match(self, match_id: str) -> bool:
        pass

    @abstractmethod
    def list_all_matches(self) -> List[Match]:
        pass
