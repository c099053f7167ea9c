"""
Matching Engine Tests

Tests validate:
- Discovery threshold boundary (29 -> nothing, 30 -> one match)
- Candidate pre-filter (opposite type, active, category OR location)
- Duplicate prevention across repeated and racing discovery runs
- Best-effort discovery after item creation
- Joined views: ordering, filtering, deleted items
- Status transitions and validation

Version: matching_engine_v1
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import List

import pytest

from app.matching.match import MatchingEngine, MATCH_THRESHOLD, orient_pair
from app.matching.models import MatchFilter
from app.matching.view import build_match_views
from app.shared.errors import (
    InvalidStatus,
    ItemNotFound,
    MatchNotFound,
    StorageUnavailable,
)
from app.storage.memory import InMemoryItemStore, InMemoryMatchStore
from app.storage.models import (
    CandidateQuery,
    Item,
    ItemStatus,
    ItemType,
    Match,
    MatchStatus,
)


BASE_TIME = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


# ============================================================================
# Test Fixtures
# ============================================================================

class FakeClock:
    """Monotonic clock advancing one second per call."""

    def __init__(self, start: datetime = BASE_TIME):
        self.current = start

    def __call__(self) -> datetime:
        self.current = self.current + timedelta(seconds=1)
        return self.current


def make_item(
    item_id: str,
    item_type: ItemType,
    name: str,
    description: str = "",
    category: str = "Other",
    location: str = "Campus",
    status: ItemStatus = ItemStatus.ACTIVE,
) -> Item:
    """Helper to create test items."""
    return Item(
        id=item_id,
        type=item_type,
        name=name,
        description=description,
        category=category,
        location=location,
        status=status,
        created_at=BASE_TIME,
    )


def make_match(match_id: str, score: int, created_at: datetime, lost="L1", found="F1") -> Match:
    return Match(
        id=match_id,
        lost_item_id=lost,
        found_item_id=found,
        match_score=score,
        created_at=created_at,
    )


@pytest.fixture
def item_store() -> InMemoryItemStore:
    return InMemoryItemStore(clock=FakeClock())


@pytest.fixture
def match_store() -> InMemoryMatchStore:
    return InMemoryMatchStore(clock=FakeClock())


@pytest.fixture
def engine(item_store, match_store) -> MatchingEngine:
    return MatchingEngine(item_store, match_store)


@pytest.fixture
def phone_pair(item_store):
    """Lost and found reports of the same phone (score 100)."""
    lost = item_store.add(make_item(
        "lost-phone", ItemType.LOST, "iPhone 13",
        "Blue iPhone 13 cracked screen", "Electronics", "Library",
    ))
    found = item_store.add(make_item(
        "found-phone", ItemType.FOUND, "iPhone 13",
        "Blue iPhone 13 cracked screen", "Electronics", "Library",
    ))
    return lost, found


# ============================================================================
# Discovery Tests
# ============================================================================

class TestDiscovery:
    """Test match discovery for a newly reported item."""

    def test_unknown_item_raises(self, engine):
        with pytest.raises(ItemNotFound):
            engine.discover_matches("missing")

    def test_creates_pending_match(self, engine, phone_pair):
        lost, found = phone_pair

        created = engine.discover_matches(lost.id)

        assert len(created) == 1
        match = created[0]
        assert match.lost_item_id == lost.id
        assert match.found_item_id == found.id
        assert match.match_score == 100
        assert match.status == MatchStatus.PENDING

    def test_orientation_from_found_side(self, engine, phone_pair):
        """Discovery from the found item still stores (lost, found)."""
        lost, found = phone_pair

        created = engine.discover_matches(found.id)

        assert created[0].lost_item_id == lost.id
        assert created[0].found_item_id == found.id

    def test_score_29_creates_nothing(self, engine, item_store, match_store):
        # location exact (20) + name 3/8 * 25 = 9.375 -> 9 ; total 29
        item_store.add(make_item("L1", ItemType.LOST, "red blue green x1 x2", "aaa", "Keys", "Library"))
        item_store.add(make_item("F1", ItemType.FOUND, "red blue green y1 y2 y3", "bbb", "Bags", "library"))

        assert engine.discover_matches("L1") == []
        assert match_store.list_all_matches() == []

    def test_score_30_creates_one(self, engine, item_store, match_store):
        # location exact (20) + name 2/5 * 25 = 10 ; total 30
        item_store.add(make_item("L1", ItemType.LOST, "red blue x1", "aaa", "Keys", "Library"))
        item_store.add(make_item("F1", ItemType.FOUND, "red blue y1 y2", "bbb", "Bags", "library"))

        created = engine.discover_matches("L1")

        assert len(created) == 1
        assert created[0].match_score == MATCH_THRESHOLD == 30

    def test_repeat_discovery_never_duplicates(self, engine, phone_pair, match_store):
        lost, found = phone_pair

        first = engine.discover_matches(lost.id)
        second = engine.discover_matches(lost.id)
        from_other_side = engine.discover_matches(found.id)

        assert len(first) == 1
        assert second == []
        assert from_other_side == []
        assert len(match_store.list_all_matches()) == 1

    def test_racing_writer_is_skipped(self, item_store, phone_pair):
        """A store-level uniqueness conflict is handled, not raised."""

        class BlindMatchStore(InMemoryMatchStore):
            def match_exists(self, lost_item_id, found_item_id):
                return False

        store = BlindMatchStore()
        engine = MatchingEngine(item_store, store)
        lost, _ = phone_pair

        assert len(engine.discover_matches(lost.id)) == 1
        assert engine.discover_matches(lost.id) == []
        assert len(store.list_all_matches()) == 1

    def test_same_type_items_never_paired(self, engine, item_store):
        item_store.add(make_item("L1", ItemType.LOST, "umbrella", category="Other", location="Gym"))
        item_store.add(make_item("L2", ItemType.LOST, "umbrella", category="Other", location="Gym"))

        assert engine.discover_matches("L1") == []

    def test_inactive_candidates_skipped(self, engine, item_store):
        item_store.add(make_item("L1", ItemType.LOST, "umbrella", category="Other", location="Gym"))
        item_store.add(make_item(
            "F1", ItemType.FOUND, "umbrella", category="Other", location="Gym",
            status=ItemStatus.RESOLVED,
        ))

        assert engine.discover_matches("L1") == []

    def test_prefilter_excludes_different_category_and_location(self, engine, item_store):
        """Identical names alone do not make a candidate."""
        item_store.add(make_item("L1", ItemType.LOST, "black umbrella", "compact", "Other", "Gym"))
        item_store.add(make_item("F1", ItemType.FOUND, "black umbrella", "compact", "Bags", "Hall"))

        assert engine.discover_matches("L1") == []

    def test_prefilter_location_containment(self, engine, item_store):
        """Different category but the candidate's location contains ours."""
        item_store.add(make_item("L1", ItemType.LOST, "black umbrella", "compact", "Other", "Library"))
        item_store.add(make_item("F1", ItemType.FOUND, "black umbrella", "compact", "Bags", "Main Library"))

        created = engine.discover_matches("L1")

        # location partial (10) + name (25) + description (15)
        assert [m.match_score for m in created] == [50]

    def test_multiple_candidates(self, engine, item_store):
        item_store.add(make_item("F-new", ItemType.FOUND, "blue backpack", "laptop inside", "Bags", "Gym"))
        item_store.add(make_item("L1", ItemType.LOST, "blue backpack", "laptop inside", "Bags", "Gym"))
        item_store.add(make_item("L2", ItemType.LOST, "red suitcase", "wheels", "Bags", "Airport"))

        created = engine.discover_matches("F-new")

        by_lost = {m.lost_item_id: m.match_score for m in created}
        assert by_lost == {"L1": 100, "L2": 40}

    def test_orient_pair(self):
        lost = make_item("L", ItemType.LOST, "x")
        found = make_item("F", ItemType.FOUND, "x")
        assert orient_pair(lost, found) == (lost, found)
        assert orient_pair(found, lost) == (lost, found)


class TestBestEffortDiscovery:
    """Discovery after item creation never undoes the creation."""

    def test_storage_failure_logged_and_swallowed(self, match_store, caplog):

        class BrokenItemStore(InMemoryItemStore):
            def list_candidates(self, query: CandidateQuery) -> List[Item]:
                raise StorageUnavailable("list_candidates")

        items = BrokenItemStore()
        items.add(make_item("L1", ItemType.LOST, "wallet"))
        engine = MatchingEngine(items, match_store)

        with pytest.raises(StorageUnavailable):
            engine.discover_matches("L1")

        with caplog.at_level(logging.ERROR, logger="app.matching.match"):
            assert engine.discover_matches_safely("L1") == []

        assert "Match discovery failed" in caplog.text
        assert items.get_item_by_id("L1") is not None

    def test_success_passes_through(self, engine, phone_pair):
        lost, _ = phone_pair
        assert len(engine.discover_matches_safely(lost.id)) == 1


# ============================================================================
# Repository View Tests
# ============================================================================

class TestRepositoryView:
    """Test joined, ordered match views."""

    def test_order_by_score_then_created_at(self):
        t1 = BASE_TIME
        t2 = BASE_TIME + timedelta(minutes=1)
        t3 = BASE_TIME + timedelta(minutes=2)
        matches = [
            make_match("m-85-late", 85, t2),
            make_match("m-92", 92, t3),
            make_match("m-85-early", 85, t1),
        ]

        views = build_match_views(matches, [])

        assert [v.id for v in views] == ["m-92", "m-85-early", "m-85-late"]

    def test_join_includes_item_fields(self, engine, phone_pair):
        lost, found = phone_pair
        engine.discover_matches(lost.id)

        view = engine.list_matches()[0]

        assert view.lost_item.id == lost.id
        assert view.lost_item.name == "iPhone 13"
        assert view.found_item.location == "Library"

    def test_deleted_item_degrades_gracefully(self, engine, phone_pair, item_store):
        lost, found = phone_pair
        match = engine.discover_matches(lost.id)[0]
        item_store.delete_item(found.id)

        view = engine.get_match_by_id(match.id)

        assert view.found_item.id == found.id
        assert view.found_item.name is None
        assert view.found_item.category is None
        assert view.lost_item.name == "iPhone 13"
        assert len(engine.list_matches()) == 1

    def test_deleted_item_still_lists_its_matches(self, engine, phone_pair, item_store):
        lost, found = phone_pair
        match = engine.discover_matches(lost.id)[0]
        item_store.delete_item(found.id)

        views = engine.get_matches_for_item(found.id)

        assert [v.id for v in views] == [match.id]
        assert views[0].found_item.id == found.id
        assert views[0].found_item.name is None
        assert views[0].lost_item.name == "iPhone 13"

    def test_category_filter_case_insensitive(self, engine, phone_pair, item_store):
        lost, _ = phone_pair
        engine.discover_matches(lost.id)

        assert len(engine.list_matches(MatchFilter(category="electronics"))) == 1
        assert engine.list_matches(MatchFilter(category="Books")) == []

    def test_status_filter(self, engine, phone_pair):
        lost, _ = phone_pair
        match = engine.discover_matches(lost.id)[0]
        engine.set_match_status(match.id, "confirmed")

        assert len(engine.list_matches(MatchFilter(status=MatchStatus.CONFIRMED))) == 1
        assert engine.list_matches(MatchFilter(status=MatchStatus.PENDING)) == []

    def test_matches_for_item(self, engine, phone_pair, item_store):
        lost, found = phone_pair
        item_store.add(make_item("L-other", ItemType.LOST, "kindle", category="Books", location="Hall"))
        engine.discover_matches(lost.id)

        assert len(engine.get_matches_for_item(found.id)) == 1
        assert engine.get_matches_for_item("L-other") == []

    def test_matches_for_unknown_item(self, engine):
        with pytest.raises(ItemNotFound):
            engine.get_matches_for_item("nope")

    def test_unknown_match(self, engine):
        with pytest.raises(MatchNotFound):
            engine.get_match_by_id("nope")

    def test_explain_match(self, engine, phone_pair):
        lost, _ = phone_pair
        match = engine.discover_matches(lost.id)[0]

        breakdown = engine.explain_match(match.id)

        assert (breakdown.category, breakdown.location, breakdown.name, breakdown.description) == (40, 20, 25, 15)


# ============================================================================
# Lifecycle Tests
# ============================================================================

class TestLifecycle:
    """Test status transitions and deletion."""

    @pytest.mark.parametrize("status", ["confirmed", "rejected", "pending", MatchStatus.CONFIRMED])
    def test_valid_status(self, engine, phone_pair, match_store, status):
        lost, _ = phone_pair
        match = engine.discover_matches(lost.id)[0]

        assert engine.set_match_status(match.id, status) is True
        assert match_store.get_match_by_id(match.id).status == MatchStatus(status)

    @pytest.mark.parametrize("status", ["approved", "Confirmed", "", None])
    def test_invalid_status_rejected_before_write(self, engine, phone_pair, match_store, status):
        lost, _ = phone_pair
        match = engine.discover_matches(lost.id)[0]

        with pytest.raises(InvalidStatus):
            engine.set_match_status(match.id, status)

        assert match_store.get_match_by_id(match.id).status == MatchStatus.PENDING

    def test_invalid_status_not_chained(self, engine):
        with pytest.raises(InvalidStatus) as exc_info:
            engine.set_match_status("m1", "approved")

        assert exc_info.value.__cause__ is None
        assert exc_info.value.__suppress_context__ is True

    def test_status_of_missing_match(self, engine):
        assert engine.set_match_status("nope", "confirmed") is False

    def test_delete_match(self, engine, phone_pair):
        lost, _ = phone_pair
        match = engine.discover_matches(lost.id)[0]

        assert engine.delete_match(match.id) is True
        assert engine.delete_match(match.id) is False
        assert engine.list_matches() == []

    def test_rediscover_after_delete(self, engine, phone_pair):
        """Deleting a match frees the pair for a later discovery run."""
        lost, _ = phone_pair
        match = engine.discover_matches(lost.id)[0]
        engine.delete_match(match.id)

        assert len(engine.discover_matches(lost.id)) == 1

    def test_match_statistics_empty(self, engine):
        stats = engine.get_match_statistics()
        assert stats.total == 0
        assert stats.avg_score == 0
