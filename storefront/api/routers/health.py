"""
Health Endpoints
GET /health - Liveness check, no dependencies touched
GET /status - Database reachability, upload directory and active limits
"""

import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

from fastapi import APIRouter, Depends, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import APISettings, get_settings
from ..dependencies import get_db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _check_database(db: Session, settings: APISettings) -> Dict[str, Any]:
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Database check failed: {e}")
        return {"status": "unhealthy", "error": str(e)}
    # Never echo credentials
    return {"status": "healthy", "url": settings.database_url.split("@")[-1]}


def _check_uploads(settings: APISettings) -> Dict[str, Any]:
    upload_dir = Path(settings.upload_dir)
    if not upload_dir.is_dir():
        return {"status": "unhealthy", "error": f"missing directory {upload_dir}"}
    if not os.access(upload_dir, os.W_OK):
        return {"status": "unhealthy", "error": f"directory not writable {upload_dir}"}
    return {"status": "healthy", "path": upload_dir.as_posix()}


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check() -> Dict[str, str]:
    return {"status": "healthy", "timestamp": _now()}


@router.get("/status", status_code=status.HTTP_200_OK)
def status_check(
    settings: APISettings = Depends(get_settings),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """
    Detailed status.

    Overall status is ``degraded`` when any component is unhealthy; the
    endpoint itself still answers 200 so monitors can read the details.
    """
    components = {
        "database": _check_database(db, settings),
        "uploads": _check_uploads(settings),
    }
    healthy = all(c["status"] == "healthy" for c in components.values())

    return {
        "status": "healthy" if healthy else "degraded",
        "timestamp": _now(),
        "version": settings.version,
        "components": components,
        "limits": {
            "pagination_max_limit": settings.pagination_max_limit,
            "max_upload_bytes": settings.max_upload_bytes,
        },
    }
