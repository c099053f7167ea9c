"""
Matching Engine Models

Pydantic models for joined match views, filters, score breakdowns and the
API request/response wrappers.

Version: matching_engine_v1
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from app.storage.models import Item, ItemStatus, Match, MatchStatus, utc_now


class ScoreBreakdown(BaseModel):
    """Points contributed by each component of the match score."""
    category: int = Field(ge=0, le=40)
    location: int = Field(ge=0, le=20)
    name: int = Field(ge=0, le=25)
    description: int = Field(ge=0, le=15)
    total: int = Field(ge=0, le=100)

    class Config:
        extra = "forbid"


class MatchFilter(BaseModel):
    """
    Optional filters for listing matches.

    `category` is compared case-insensitively against the lost item's
    category.
    """
    category: Optional[str] = None
    status: Optional[MatchStatus] = None

    class Config:
        extra = "forbid"


class ItemSummary(BaseModel):
    """
    Item fields shown next to a match.

    Every field except `id` is None when the item has since been deleted.
    """
    id: str
    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    location: Optional[str] = None
    date: Optional[datetime] = None
    contact: Optional[str] = None
    image: Optional[str] = None
    status: Optional[ItemStatus] = None

    @classmethod
    def from_item(cls, item_id: str, item: Optional[Item]) -> "ItemSummary":
        if item is None:
            return cls(id=item_id)
        return cls(
            id=item.id,
            name=item.name,
            description=item.description,
            category=item.category,
            location=item.location,
            date=item.date_occurred,
            contact=item.contact,
            image=item.image_path,
            status=item.status,
        )


class MatchView(BaseModel):
    """A match joined with both of its item summaries."""
    id: str
    match_score: int
    status: MatchStatus
    created_at: datetime
    lost_item: ItemSummary
    found_item: ItemSummary


# Request / response models for API endpoints

class MatchStatusUpdate(BaseModel):
    """Body for PUT /matches/{id}/status. Validated by the engine."""
    status: str


class MatchListResponse(BaseModel):
    success: bool = True
    count: int
    matches: List[MatchView]


class MatchDetailResponse(BaseModel):
    success: bool = True
    match: MatchView


class DiscoveryResponse(BaseModel):
    success: bool = True
    item_id: str
    created_count: int
    matches: List[Match]


class MessageResponse(BaseModel):
    success: bool = True
    message: str
    generated_at: datetime = Field(default_factory=utc_now)
