"""
Storage Records

Pydantic models for the records owned by the item and match stores.

Items are read-only to the matching engine. Matches reference items by id
only; joined views are built fresh on every read.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ItemType(str, Enum):
    LOST = "lost"
    FOUND = "found"

    @property
    def opposite(self) -> "ItemType":
        return ItemType.FOUND if self is ItemType.LOST else ItemType.LOST


class ItemStatus(str, Enum):
    ACTIVE = "active"
    MATCHED = "matched"
    RESOLVED = "resolved"


class MatchStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"


class ItemCreate(BaseModel):
    """
    Payload for reporting a lost or found item.
    """
    type: ItemType
    name: str = Field(min_length=1)
    description: str = ""
    category: str = Field(min_length=1)
    location: str = Field(min_length=1)
    date_occurred: Optional[datetime] = None
    contact: Optional[str] = None
    image_path: Optional[str] = None
    user_id: Optional[str] = None

    class Config:
        extra = "forbid"


class Item(BaseModel):
    """
    A single lost or found report as stored by the item store.
    """
    id: str
    type: ItemType
    name: str
    description: str = ""
    category: str
    location: str
    date_occurred: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utc_now)
    status: ItemStatus = ItemStatus.ACTIVE
    contact: Optional[str] = None
    image_path: Optional[str] = None
    user_id: Optional[str] = None

    class Config:
        extra = "ignore"


class MatchCreate(BaseModel):
    """Fields supplied by discovery; the store assigns id, status and created_at."""
    lost_item_id: str
    found_item_id: str
    match_score: int = Field(ge=0, le=100)

    class Config:
        extra = "forbid"


class Match(BaseModel):
    """
    A scored pairing between one lost item and one found item.
    """
    id: str
    lost_item_id: str
    found_item_id: str
    match_score: int = Field(ge=0, le=100)
    status: MatchStatus = MatchStatus.PENDING
    created_at: datetime = Field(default_factory=utc_now)

    class Config:
        extra = "ignore"


class CandidateQuery(BaseModel):
    """
    Typed pre-filter for discovery candidates.

    Selects active items of `item_type` whose category equals `category`
    or whose location contains `location` (case-insensitive).
    """
    item_type: ItemType
    category: str
    location: str

    class Config:
        extra = "forbid"

    def accepts(self, item: Item) -> bool:
        if item.type != self.item_type or item.status != ItemStatus.ACTIVE:
            return False
        if item.category == self.category:
            return True
        return self.location.lower() in item.location.lower()
