"""Campus Lost & Found Shared Utilities"""

from .errors import (
    MatchingError,
    ItemNotFound,
    MatchNotFound,
    InvalidStatus,
    StorageUnavailable,
    MatchAlreadyExists,
)
from .settings import Settings, get_settings
from .log_config import configure_logging

__all__ = [
    "MatchingError",
    "ItemNotFound",
    "MatchNotFound",
    "InvalidStatus",
    "StorageUnavailable",
    "MatchAlreadyExists",
    "Settings",
    "get_settings",
    "configure_logging",
]
