"""
PostgreSQL Storage Backend

psycopg2-backed item and match stores. Tables are created on first use.

The matches table carries UNIQUE (lost_item_id, found_item_id) so two
overlapping discovery runs cannot persist the same pair twice. There is no
foreign key from matches to items: matches survive item deletion.

Every psycopg2.Error is re-raised as StorageUnavailable.
"""

import logging
import uuid
from contextlib import contextmanager
from typing import List, Optional

import psycopg2
from psycopg2.extras import RealDictCursor

from app.shared.errors import MatchAlreadyExists, StorageUnavailable

from .base import ItemStore, MatchStore
from .models import (
    CandidateQuery,
    Item,
    ItemCreate,
    ItemStatus,
    Match,
    MatchCreate,
    MatchStatus,
)

logger = logging.getLogger(__name__)


SCHEMA_SQL = """
    CREATE TABLE IF NOT EXISTS items (
        id VARCHAR(64) PRIMARY KEY,
        type VARCHAR(10) NOT NULL,
        name TEXT NOT NULL,
        description TEXT NOT NULL DEFAULT '',
        category VARCHAR(100) NOT NULL,
        location VARCHAR(255) NOT NULL,
        date_occurred TIMESTAMPTZ,
        contact TEXT,
        image_path TEXT,
        user_id VARCHAR(64),
        status VARCHAR(20) NOT NULL DEFAULT 'active',
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    );

    CREATE INDEX IF NOT EXISTS idx_items_type_status
        ON items(type, status);
    CREATE INDEX IF NOT EXISTS idx_items_category
        ON items(category);

    CREATE TABLE IF NOT EXISTS matches (
        id VARCHAR(64) PRIMARY KEY,
        lost_item_id VARCHAR(64) NOT NULL,
        found_item_id VARCHAR(64) NOT NULL,
        match_score INTEGER NOT NULL CHECK (match_score BETWEEN 0 AND 100),
        status VARCHAR(20) NOT NULL DEFAULT 'pending',
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        CONSTRAINT uq_matches_lost_found UNIQUE (lost_item_id, found_item_id)
    );

    CREATE INDEX IF NOT EXISTS idx_matches_lost
        ON matches(lost_item_id);
    CREATE INDEX IF NOT EXISTS idx_matches_found
        ON matches(found_item_id);
"""


class _PostgresBase:
    backend = "postgres"

    def __init__(self, db_url: str):
        if not db_url:
            raise ValueError("DATABASE_URL is required for the postgres backend")
        self._db_url = db_url
        self._tables_ready = False

    def _get_conn(self, operation: str):
        try:
            return psycopg2.connect(self._db_url, cursor_factory=RealDictCursor)
        except psycopg2.Error as e:
            logger.error(f"DB connection failed during {operation}: {e}")
            raise StorageUnavailable(operation, e) from e

    def _ensure_tables(self, cur) -> None:
        if self._tables_ready:
            return
        cur.execute(SCHEMA_SQL)
        self._tables_ready = True

    @contextmanager
    def _cursor(self, operation: str):
        """Yield a cursor inside one committed transaction."""
        conn = self._get_conn(operation)
        try:
            cur = conn.cursor()
            self._ensure_tables(cur)
            yield cur
            conn.commit()
            cur.close()
        except psycopg2.Error as e:
            conn.rollback()
            logger.error(f"DB error during {operation}: {e}")
            raise StorageUnavailable(operation, e) from e
        finally:
            conn.close()


class PostgresItemStore(_PostgresBase, ItemStore):

    def get_item_by_id(self, item_id: str) -> Optional[Item]:
        with self._cursor("get_item_by_id") as cur:
            cur.execute("SELECT * FROM items WHERE id = %s", (item_id,))
            row = cur.fetchone()
        return Item(**row) if row else None

    def list_candidates(self, query: CandidateQuery) -> List[Item]:
        with self._cursor("list_candidates") as cur:
            cur.execute("""
                SELECT * FROM items
                WHERE type = %s
                  AND status = %s
                  AND (category = %s OR POSITION(LOWER(%s) IN LOWER(location)) > 0)
                ORDER BY created_at DESC
            """, (
                query.item_type.value,
                ItemStatus.ACTIVE.value,
                query.category,
                query.location,
            ))
            rows = cur.fetchall()
        return [Item(**row) for row in rows]

    def list_all_items(self) -> List[Item]:
        with self._cursor("list_all_items") as cur:
            cur.execute("SELECT * FROM items ORDER BY created_at DESC")
            rows = cur.fetchall()
        return [Item(**row) for row in rows]

    def create_item(self, data: ItemCreate) -> Item:
        with self._cursor("create_item") as cur:
            cur.execute("""
                INSERT INTO items
                (id, type, name, description, category, location,
                 date_occurred, contact, image_path, user_id, status)
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                RETURNING *
            """, (
                uuid.uuid4().hex,
                data.type.value,
                data.name,
                data.description,
                data.category,
                data.location,
                data.date_occurred,
                data.contact,
                data.image_path,
                data.user_id,
                ItemStatus.ACTIVE.value,
            ))
            row = cur.fetchone()
        return Item(**row)

    def update_item_status(self, item_id: str, status: ItemStatus) -> bool:
        with self._cursor("update_item_status") as cur:
            cur.execute(
                "UPDATE items SET status = %s WHERE id = %s",
                (ItemStatus(status).value, item_id),
            )
            updated = cur.rowcount
        return updated > 0

    def delete_item(self, item_id: str) -> bool:
        with self._cursor("delete_item") as cur:
            cur.execute("DELETE FROM items WHERE id = %s", (item_id,))
            deleted = cur.rowcount
        return deleted > 0


class PostgresMatchStore(_PostgresBase, MatchStore):

    def match_exists(self, lost_item_id: str, found_item_id: str) -> bool:
        with self._cursor("match_exists") as cur:
            cur.execute("""
                SELECT EXISTS (
                    SELECT 1 FROM matches
                    WHERE lost_item_id = %s AND found_item_id = %s
                ) AS match_exists
            """, (lost_item_id, found_item_id))
            row = cur.fetchone()
        return bool(row and row["match_exists"])

    def create_match(self, data: MatchCreate) -> Match:
        with self._cursor("create_match") as cur:
            cur.execute("""
                INSERT INTO matches
                (id, lost_item_id, found_item_id, match_score, status)
                VALUES (%s, %s, %s, %s, %s)
                ON CONFLICT (lost_item_id, found_item_id) DO NOTHING
                RETURNING *
            """, (
                uuid.uuid4().hex,
                data.lost_item_id,
                data.found_item_id,
                data.match_score,
                MatchStatus.PENDING.value,
            ))
            row = cur.fetchone()
        if row is None:
            raise MatchAlreadyExists(data.lost_item_id, data.found_item_id)
        return Match(**row)

    def get_match_by_id(self, match_id: str) -> Optional[Match]:
        with self._cursor("get_match_by_id") as cur:
            cur.execute("SELECT * FROM matches WHERE id = %s", (match_id,))
            row = cur.fetchone()
        return Match(**row) if row else None

    def update_match_status(self, match_id: str, status: MatchStatus) -> bool:
        with self._cursor("update_match_status") as cur:
            cur.execute(
                "UPDATE matches SET status = %s WHERE id = %s",
                (MatchStatus(status).value, match_id),
            )
            updated = cur.rowcount
        return updated > 0

    def delete_match(self, match_id: str) -> bool:
        with self._cursor("delete_match") as cur:
            cur.execute("DELETE FROM matches WHERE id = %s", (match_id,))
            deleted = cur.rowcount
        return deleted > 0

    def list_all_matches(self) -> List[Match]:
        with self._cursor("list_all_matches") as cur:
            cur.execute("SELECT * FROM matches ORDER BY created_at ASC")
            rows = cur.fetchall()
        return [Match(**row) for row in rows]
