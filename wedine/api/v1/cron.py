"""
Scheduled job routes
Called by the scheduler with the cron bearer token; GET and POST both run the job
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from ...core.security import verify_cron_token
from ...services.lifecycle_service import lifecycle_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.api_route("/cleanup-orders", methods=["GET", "POST"])
def cron_cleanup_orders(_: bool = Depends(verify_cron_token)):
    """Archive expired orders"""
    timestamp = datetime.now(timezone.utc).isoformat()
    logger.info("Cron cleanup-orders started")
    result = lifecycle_service.cleanup_expired_orders()
    return {
        "success": True,
        "message": "Cleanup job completed successfully",
        "timestamp": timestamp,
        "processed": result["processed"],
        "errors": result["errors"],
        "execution_time_ms": result["execution_time_ms"],
    }


@router.api_route("/move-ready-orders", methods=["GET", "POST"])
def cron_move_ready_orders(_: bool = Depends(verify_cron_token)):
    """Move delivered and paid orders to history"""
    timestamp = datetime.now(timezone.utc).isoformat()
    result = lifecycle_service.archive_completed_orders()
    return {
        "success": True,
        "message": f"Moved {result['moved']} orders to history",
        "timestamp": timestamp,
        "moved": result["moved"],
    }
