"""
Campus Lost & Found Storage Layer

Item and match stores consumed by the matching engine:
- ItemStore / MatchStore: abstract interfaces
- InMemory*: process-local backend (default, tests)
- Postgres*: psycopg2 backend, selected by DATABASE_URL
"""

from typing import Tuple

from app.shared.settings import Settings

from .models import (
    ItemType,
    ItemStatus,
    MatchStatus,
    Item,
    ItemCreate,
    Match,
    MatchCreate,
    CandidateQuery,
)
from .base import ItemStore, MatchStore
from .memory import InMemoryItemStore, InMemoryMatchStore


def build_stores(settings: Settings) -> Tuple[ItemStore, MatchStore]:
    """Build the item/match store pair selected by settings."""
    if settings.storage_backend == "postgres":
        from .postgres import PostgresItemStore, PostgresMatchStore
        return (
            PostgresItemStore(settings.database_url),
            PostgresMatchStore(settings.database_url),
        )
    if settings.storage_backend == "memory":
        return InMemoryItemStore(), InMemoryMatchStore()
    raise ValueError(f"Unknown STORAGE_BACKEND: {settings.storage_backend}")


__all__ = [
    "ItemType",
    "ItemStatus",
    "MatchStatus",
    "Item",
    "ItemCreate",
    "Match",
    "MatchCreate",
    "CandidateQuery",
    "ItemStore",
    "MatchStore",
    "InMemoryItemStore",
    "InMemoryMatchStore",
    "build_stores",
]
