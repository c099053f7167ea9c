"""
Service configuration, read from environment variables.
"""

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List, Optional


def _split_csv(value: str) -> List[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


@dataclass(frozen=True)
class Settings:
    database_url: Optional[str] = None
    storage_backend: str = "memory"
    admin_api_key: Optional[str] = None
    log_level: str = "INFO"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    stats_months: int = 12
    stats_days: int = 30

    def __post_init__(self):
        if self.stats_months < 1:
            raise ValueError(f"STATS_MONTHS must be >= 1, got {self.stats_months}")
        if self.stats_days < 1:
            raise ValueError(f"STATS_DAYS must be >= 1, got {self.stats_days}")

    @classmethod
    def from_env(cls) -> "Settings":
        database_url = os.getenv("DATABASE_URL") or None
        # DATABASE_URL alone selects postgres; STORAGE_BACKEND overrides
        backend = os.getenv("STORAGE_BACKEND", "postgres" if database_url else "memory")
        return cls(
            database_url=database_url,
            storage_backend=backend.strip().lower(),
            admin_api_key=os.getenv("ADMIN_API_KEY") or None,
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            cors_origins=_split_csv(os.getenv("CORS_ORIGINS", "*")) or ["*"],
            stats_months=int(os.getenv("STATS_MONTHS", "12")),
            stats_days=int(os.getenv("STATS_DAYS", "30")),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get process-wide settings (cached after first read)."""
    return Settings.from_env()
