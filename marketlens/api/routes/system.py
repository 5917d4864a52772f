"""
System Routes for MarketLens API
Health checks and statistics
"""

from fastapi import APIRouter
from typing import Dict, Any
import time
import logging

from ...database import db_manager
from ...services.scheduler import sweep_scheduler

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check():
    """
    Health check endpoint

    Returns:
        Database health and whether the expiry sweep is scheduled
    """
    db_healthy = await db_manager.health_check()

    checks = {
        "database": db_healthy,
        "sweep_scheduler": sweep_scheduler.scheduler.running or not sweep_scheduler.enabled
    }

    return {
        "status": "healthy" if all(checks.values()) else "unhealthy",
        "checks": checks,
        "timestamp": time.time()
    }


@router.get("/stats", response_model=Dict[str, Any])
async def get_system_stats():
    """
    Row counts per table plus scheduled jobs
    """
    table_counts = await db_manager.get_stats()

    return {
        "database": table_counts,
        "jobs": sweep_scheduler.list_jobs(),
        "last_sweep_deleted": sweep_scheduler.last_deleted_count,
        "timestamp": time.time()
    }
