"""
Health check endpoints for production deployment.

Provides:
- /health - Basic liveness check (is the app running?)
- /metrics - Application metrics for monitoring
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from catalog import CardCatalog
from dependencies import get_catalog, get_registry, get_sessions
from players import PlayerRegistry
from session import SessionManager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """
    Basic liveness check - is the app running?

    This endpoint should always return 200 if the process is alive.
    """
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/metrics")
async def metrics(
    catalog: CardCatalog = Depends(get_catalog),
    registry: PlayerRegistry = Depends(get_registry),
    sessions: SessionManager = Depends(get_sessions),
):
    """
    Expose application metrics for monitoring.

    Returns operational metrics useful for dashboards and alerting.
    """
    all_sessions = sessions.get_all()
    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "packs": len(catalog.get_all_packs()),
        "cards": catalog.card_count(),
        "registered_players": len(registry.get_all()),
        "active_sessions": len(all_sessions),
        "players_in_sessions": sum(len(s.players) for s in all_sessions),
        "games_in_progress": sum(1 for s in all_sessions if s.running),
    }
