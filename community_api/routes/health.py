"""
Health check endpoints for monitoring system status.
"""

import logging
from datetime import datetime
from typing import Dict, Any
from uuid import uuid4

from fastapi import APIRouter
from sqlalchemy import func, select, text
from sqlalchemy.exc import SQLAlchemyError

from community_api.cache import redis_client
from community_api.config import STATS_CACHE_TTL_SECONDS
from community_api.db import get_session
from community_api.models import Base, CONTENT_MODELS, LEDGER_MODELS
from community_api.services.engagement import COUNTER_FOR_ACTION

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])

API_VERSION = "1.0.0"


def check_database_health() -> Dict[str, str]:
    """
    Check database connectivity and health.

    Returns:
        Dict with status and optional error details
    """
    try:
        with get_session() as db:
            result = db.execute(text("SELECT 1")).scalar()
            if result == 1:
                return {"status": "ok"}
            return {"status": "down", "error": "Unexpected query result"}
    except SQLAlchemyError as e:
        logger.warning("Database health check failed: %s", e)
        return {"status": "down", "error": f"Database error: {str(e)}"}


def check_redis_health() -> Dict[str, str]:
    """
    Check Redis connectivity and health.

    Returns:
        Dict with status and optional error details
    """
    if not redis_client._enabled:
        return {"status": "disabled"}

    if not redis_client.is_available:
        return {"status": "down", "error": "Redis client not available"}

    try:
        if redis_client.ping():
            return {"status": "ok"}
        return {"status": "down", "error": "Redis ping failed"}
    except Exception as e:
        logger.warning("Redis health check failed: %s", e)
        return {"status": "down", "error": f"Redis error: {str(e)}"}


@router.get("/")
async def health_check() -> Dict[str, Any]:
    """
    Comprehensive health check endpoint.

    Returns:
        Dict containing:
        - status: "ok" | "degraded" | "down"
        - db: database health status
        - redis: Redis health status
        - version: API version
        - timestamp: current UTC timestamp
    """
    db_health = check_database_health()
    redis_health = check_redis_health()

    overall_status = "ok"
    if db_health["status"] == "down":
        overall_status = "down"  # Database is critical
    elif redis_health["status"] == "down":
        overall_status = "degraded"  # Cache only

    return {
        "status": overall_status,
        "db": db_health,
        "redis": redis_health,
        "version": API_VERSION,
        "timestamp": datetime.utcnow().isoformat(),
    }


def _engagement_drift(db) -> Dict[str, Dict[str, int]]:
    """Ledger rows vs. summed denormalized counters, per action."""
    report = {}
    for action, ledger_model in LEDGER_MODELS.items():
        column = COUNTER_FOR_ACTION[action]
        counted = sum(
            db.query(func.coalesce(func.sum(getattr(model, column)), 0)).scalar()
            for model in CONTENT_MODELS.values()
        )
        recorded = db.query(func.count(ledger_model.id)).scalar()
        report[action.value] = {"ledger_rows": recorded, "counter_total": counted, "drift": counted - recorded}
    return report


@router.get("/db")
async def database_health() -> Dict[str, Any]:
    """
    Database check with row counts per table and engagement counter drift.

    A positive share drift is normal: external shares are counted without a
    ledger row. Any like drift means `reconcile` should be run.
    """
    health_status = check_database_health()

    try:
        with get_session() as db:
            health_status["tables"] = {
                table.name: db.execute(select(func.count()).select_from(table)).scalar()
                for table in Base.metadata.sorted_tables
            }
            health_status["engagement"] = _engagement_drift(db)
    except SQLAlchemyError as e:
        logger.warning("Extended database health check failed: %s", e)
        health_status["error"] = f"Extended check failed: {str(e)}"

    health_status["timestamp"] = datetime.utcnow().isoformat()
    return health_status


@router.get("/redis")
async def redis_health() -> Dict[str, Any]:
    """
    Round-trip a payload through the statistics cache helpers.
    """
    health_status = check_redis_health()
    if not redis_client.is_available:
        return health_status

    key = f"stats:health:{uuid4().hex}"
    payload = [{"entity_id": 0, "total_count": 0, "unique_count": 0}]

    written = redis_client.set_json(key, payload, STATS_CACHE_TTL_SECONDS)
    read_back = redis_client.get_json(key) == payload
    removed = redis_client.delete(key)

    health_status["cache"] = {
        "write": written,
        "read": read_back,
        "delete": removed,
        "ttl_seconds": STATS_CACHE_TTL_SECONDS,
    }
    if health_status["status"] == "ok" and not (written and read_back):
        health_status["status"] = "degraded"
    return health_status
