"""
Matching Engine Endpoints

GET    /api/v1/matches                    - List matches (optional category/status filter)
GET    /api/v1/matches/stats              - Match-quality summary
GET    /api/v1/matches/item/{item_id}     - Matches involving one item
POST   /api/v1/matches/discover/{item_id} - Re-run discovery for an item
GET    /api/v1/matches/{match_id}         - One joined match
GET    /api/v1/matches/{match_id}/breakdown - Score components for a match
PUT    /api/v1/matches/{match_id}/status  - Confirm / reject (admin key)
DELETE /api/v1/matches/{match_id}         - Delete (admin key)

Version: matching_engine_v1
"""

from typing import Optional
from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request

from app.shared.errors import MatchingError
from app.stats.models import MatchStatistics
from app.storage.models import MatchStatus

from .match import MatchingEngine
from .models import (
    DiscoveryResponse,
    MatchDetailResponse,
    MatchFilter,
    MatchListResponse,
    MatchStatusUpdate,
    MessageResponse,
    ScoreBreakdown,
)


router = APIRouter(
    prefix="/api/v1/matches",
    tags=["matches"],
)


def get_engine(request: Request) -> MatchingEngine:
    return request.app.state.engine


def verify_admin_key(
    request: Request,
    x_admin_api_key: Optional[str] = Header(None),
) -> bool:
    """Require X-Admin-API-Key when ADMIN_API_KEY is configured."""
    expected_key = request.app.state.settings.admin_api_key
    if expected_key and x_admin_api_key != expected_key:
        raise HTTPException(status_code=403, detail="Invalid admin API key")
    return True


def _http_error(e: MatchingError) -> HTTPException:
    return HTTPException(status_code=e.http_code, detail=e.message)


@router.get("", response_model=MatchListResponse)
def list_matches(
    category: Optional[str] = Query(None, description="Lost item category (case-insensitive)"),
    status: Optional[MatchStatus] = Query(None),
    engine: MatchingEngine = Depends(get_engine),
):
    """List all matches, best score first."""
    try:
        matches = engine.list_matches(MatchFilter(category=category, status=status))
    except MatchingError as e:
        raise _http_error(e)
    return MatchListResponse(count=len(matches), matches=matches)


@router.get("/stats", response_model=MatchStatistics)
def match_statistics(engine: MatchingEngine = Depends(get_engine)):
    try:
        return engine.get_match_statistics()
    except MatchingError as e:
        raise _http_error(e)


@router.get("/item/{item_id}", response_model=MatchListResponse)
def matches_for_item(item_id: str, engine: MatchingEngine = Depends(get_engine)):
    try:
        matches = engine.get_matches_for_item(item_id)
    except MatchingError as e:
        raise _http_error(e)
    return MatchListResponse(count=len(matches), matches=matches)


@router.post("/discover/{item_id}", response_model=DiscoveryResponse)
def discover_for_item(item_id: str, engine: MatchingEngine = Depends(get_engine)):
    """
    Run discovery for an existing item.

    Idempotent: pairs that already have a match are skipped, so a repeat
    call returns an empty list.
    """
    try:
        created = engine.discover_matches(item_id)
    except MatchingError as e:
        raise _http_error(e)
    return DiscoveryResponse(item_id=item_id, created_count=len(created), matches=created)


@router.get("/{match_id}", response_model=MatchDetailResponse)
def get_match(match_id: str, engine: MatchingEngine = Depends(get_engine)):
    try:
        return MatchDetailResponse(match=engine.get_match_by_id(match_id))
    except MatchingError as e:
        raise _http_error(e)


@router.get("/{match_id}/breakdown", response_model=ScoreBreakdown)
def get_match_breakdown(match_id: str, engine: MatchingEngine = Depends(get_engine)):
    try:
        return engine.explain_match(match_id)
    except MatchingError as e:
        raise _http_error(e)


@router.put("/{match_id}/status", response_model=MessageResponse)
def update_match_status(
    match_id: str,
    body: MatchStatusUpdate,
    engine: MatchingEngine = Depends(get_engine),
    _: bool = Depends(verify_admin_key),
):
    try:
        updated = engine.set_match_status(match_id, body.status)
    except MatchingError as e:
        raise _http_error(e)
    if not updated:
        raise HTTPException(status_code=404, detail=f"Match not found: {match_id}")
    return MessageResponse(message="Match status updated successfully")


@router.delete("/{match_id}", response_model=MessageResponse)
def delete_match(
    match_id: str,
    engine: MatchingEngine = Depends(get_engine),
    _: bool = Depends(verify_admin_key),
):
    try:
        deleted = engine.delete_match(match_id)
    except MatchingError as e:
        raise _http_error(e)
    if not deleted:
        raise HTTPException(status_code=404, detail=f"Match not found: {match_id}")
    return MessageResponse(message="Match deleted successfully")
