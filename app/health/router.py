"""
Deployment Health Check Endpoint
================================
Returns the status of the deployed Campus Lost & Found API.
"""

from datetime import datetime, timezone
from fastapi import APIRouter, Request

from app.matching import __version__ as matching_version
from app.shared.errors import StorageUnavailable

router = APIRouter(prefix="/api/v1/health", tags=["Health"])


@router.get("")
def deployment_health(request: Request):
    """
    Health check covering both stores.
    Reports "degraded" when a store cannot be read.
    """
    engine = request.app.state.engine
    status = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "api_version": request.app.version,
        "matching_version": matching_version,
        "components": {},
    }

    try:
        items = engine.item_store.list_all_items()
        status["components"]["item_store"] = {
            "status": "healthy",
            "backend": engine.item_store.backend,
            "items": len(items),
        }
    except StorageUnavailable as e:
        status["components"]["item_store"] = {"status": "error", "error": e.message}

    try:
        matches = engine.match_store.list_all_matches()
        status["components"]["match_store"] = {
            "status": "healthy",
            "backend": engine.match_store.backend,
            "matches": len(matches),
        }
    except StorageUnavailable as e:
        status["components"]["match_store"] = {"status": "error", "error": e.message}

    all_healthy = all(
        c.get("status") == "healthy" for c in status["components"].values()
    )
    status["overall_status"] = "healthy" if all_healthy else "degraded"
    return status


@router.get("/quick")
def quick_health():
    """Quick health check for load balancers."""
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}
