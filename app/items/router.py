"""
Item Endpoints

Thin surface over the item store. Creating an item triggers best-effort
match discovery: if discovery fails the item stays created and the failure
is logged (the two writes are not one transaction).

POST   /api/v1/items              - Report a lost/found item
GET    /api/v1/items/{item_id}    - Fetch one item
PUT    /api/v1/items/{item_id}/status - Mark active/matched/resolved
DELETE /api/v1/items/{item_id}    - Delete (matches are kept)
"""

from typing import List
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from app.matching.admin import get_engine, verify_admin_key
from app.matching.match import MatchingEngine
from app.shared.errors import MatchingError
from app.storage.models import Item, ItemCreate, ItemStatus, Match

router = APIRouter(prefix="/api/v1/items", tags=["items"])


class ItemCreatedResponse(BaseModel):
    success: bool = True
    item: Item
    matches: List[Match]


class ItemStatusUpdate(BaseModel):
    status: ItemStatus


@router.post("", response_model=ItemCreatedResponse, status_code=201)
def create_item(data: ItemCreate, engine: MatchingEngine = Depends(get_engine)):
    try:
        item = engine.item_store.create_item(data)
    except MatchingError as e:
        raise HTTPException(status_code=e.http_code, detail=e.message)
    matches = engine.discover_matches_safely(item.id)
    return ItemCreatedResponse(item=item, matches=matches)


@router.get("/{item_id}", response_model=Item)
def get_item(item_id: str, engine: MatchingEngine = Depends(get_engine)):
    try:
        item = engine.item_store.get_item_by_id(item_id)
    except MatchingError as e:
        raise HTTPException(status_code=e.http_code, detail=e.message)
    if item is None:
        raise HTTPException(status_code=404, detail=f"Item not found: {item_id}")
    return item


@router.put("/{item_id}/status")
def update_item_status(
    item_id: str,
    body: ItemStatusUpdate,
    engine: MatchingEngine = Depends(get_engine),
    _: bool = Depends(verify_admin_key),
):
    try:
        updated = engine.item_store.update_item_status(item_id, body.status)
    except MatchingError as e:
        raise HTTPException(status_code=e.http_code, detail=e.message)
    if not updated:
        raise HTTPException(status_code=404, detail=f"Item not found: {item_id}")
    return {"success": True, "message": "Item status updated successfully"}


@router.delete("/{item_id}")
def delete_item(
    item_id: str,
    engine: MatchingEngine = Depends(get_engine),
    _: bool = Depends(verify_admin_key),
):
    try:
        deleted = engine.item_store.delete_item(item_id)
    except MatchingError as e:
        raise HTTPException(status_code=e.http_code, detail=e.message)
    if not deleted:
        raise HTTPException(status_code=404, detail=f"Item not found: {item_id}")
    return {"success": True, "message": "Item deleted successfully"}
