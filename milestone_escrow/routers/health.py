"""Health check endpoint."""
from __future__ import annotations

import logging

from fastapi import APIRouter
from sqlalchemy import text

from milestone_escrow.config import get_settings
from milestone_escrow.db import get_engine

router = APIRouter(prefix="/health", tags=["health"])
logger = logging.getLogger(__name__)


def _db_status() -> str:
    """Return 'ok' if the DB is reachable, 'error' otherwise."""

    try:
        engine = get_engine()
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return "ok"
    except Exception:  # noqa: BLE001
        logger.exception("DB health check failed")
        return "error"


@router.get("", summary="Health check")
def healthcheck() -> dict[str, object]:
    """Return a simple health payload."""

    settings = get_settings()
    db_status = _db_status()
    return {
        "status": "ok" if db_status == "ok" else "degraded",
        "env": settings.app_env,
        "db_ok": db_status == "ok",
        "db_status": db_status,
        "zero_amount_milestones_allowed": settings.ALLOW_ZERO_AMOUNT_MILESTONES,
    }
