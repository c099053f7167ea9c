"""
Campus Lost & Found API Server
Lost/found reporting with automatic match discovery.
Version 1.0.0

Stores are chosen from the environment (see app/shared/settings.py):
- DATABASE_URL set      -> PostgreSQL
- otherwise             -> in-memory
"""

import logging
from typing import Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.health import router as health_router
from app.items import router as items_router
from app.matching.admin import router as matching_router
from app.matching.match import MatchingEngine
from app.shared.log_config import configure_logging
from app.shared.settings import Settings, get_settings
from app.stats.admin import router as stats_router
from app.stats.service import StatisticsService
from app.storage import build_stores
from app.storage.base import ItemStore, MatchStore

API_VERSION = "1.0.0"

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    item_store: Optional[ItemStore] = None,
    match_store: Optional[MatchStore] = None,
) -> FastAPI:
    """
    Build the API with injected or settings-selected stores.

    Tests pass in-memory stores; deployments rely on the environment.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    if item_store is None or match_store is None:
        default_items, default_matches = build_stores(settings)
        item_store = item_store or default_items
        match_store = match_store or default_matches

    # ============================================
    # App Configuration
    # ============================================
    app = FastAPI(
        title="Campus Lost & Found API",
        description="Lost/found item reporting with automatic match discovery",
        version=API_VERSION,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.engine = MatchingEngine(item_store, match_store)
    app.state.statistics = StatisticsService(
        item_store,
        match_store,
        months=settings.stats_months,
        days=settings.stats_days,
    )

    app.include_router(health_router)
    app.include_router(items_router)
    app.include_router(matching_router)
    app.include_router(stats_router)

    # ============================================
    # Core Endpoints
    # ============================================
    @app.get("/")
    def root():
        return {
            "service": "Campus Lost & Found API",
            "version": API_VERSION,
            "status": "operational",
            "storage": item_store.backend,
        }

    logger.info(f"API {API_VERSION} ready (storage={item_store.backend})")
    return app


app = create_app()
