"""
Health check endpoints
"""
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.engine import Engine

from api.dependencies import get_engine
from core.database import check_connection

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
async def health_check(engine: Engine = Depends(get_engine)):
    """Health check including the database connection"""
    db_status = "healthy"
    try:
        check_connection(engine)
    except Exception as e:
        db_status = f"unhealthy: {e}"
        logger.error(f"Database health check failed: {e}")

    return {
        "status": "healthy" if db_status == "healthy" else "unhealthy",
        "database": db_status,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/liveness")
async def liveness_probe():
    """Kubernetes liveness probe"""
    return {"status": "alive", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/readiness")
async def readiness_probe(engine: Engine = Depends(get_engine)):
    """Kubernetes readiness probe"""
    try:
        check_connection(engine)
    except Exception as e:
        logger.error(f"Readiness check failed: {e}")
        raise HTTPException(status_code=503, detail="Service not ready")
    return {"status": "ready", "timestamp": datetime.now(timezone.utc).isoformat()}
