"""
Campus Lost & Found Error Taxonomy

Domain exceptions raised by the matching engine and the storage backends.
Each carries an HTTP status code so routers can translate it directly.
"""

from typing import Iterable, Optional


class MatchingError(Exception):
    """Base class for matching engine failures."""

    http_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ItemNotFound(MatchingError):
    """Referenced item id does not exist. Not retried."""

    http_code = 404

    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"Item not found: {item_id}")


class MatchNotFound(MatchingError):
    """Referenced match id does not exist."""

    http_code = 404

    def __init__(self, match_id: str):
        self.match_id = match_id
        super().__init__(f"Match not found: {match_id}")


class InvalidStatus(MatchingError):
    """Status outside the allowed set. Raised before any write."""

    http_code = 400

    def __init__(self, status: object, allowed: Iterable[str] = ()):
        self.status = status
        self.allowed = list(allowed)
        detail = f"Invalid status: {status!r}"
        if self.allowed:
            detail += f". Must be one of: {', '.join(self.allowed)}"
        super().__init__(detail)


class StorageUnavailable(MatchingError):
    """Underlying collection read/write failed."""

    http_code = 503

    def __init__(self, operation: str, cause: Optional[BaseException] = None):
        self.operation = operation
        self.cause = cause
        detail = f"Storage unavailable during {operation}"
        if cause is not None:
            detail += f": {cause}"
        super().__init__(detail)


class MatchAlreadyExists(MatchingError):
    """A match for this (lost, found) pair is already stored."""

    http_code = 409

    def __init__(self, lost_item_id: str, found_item_id: str):
        self.lost_item_id = lost_item_id
        self.found_item_id = found_item_id
        super().__init__(
            f"Match already exists for lost={lost_item_id} found={found_item_id}"
        )
