"""
Dashboard Routes for Legendary Signatures API
"""

from fastapi import APIRouter, HTTPException, Depends
from auth import verify_admin_access
from error_handling import StoreError, internal_error
from services.analytics import dashboard_summary
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["dashboard"])


@router.get("/dashboard")
async def get_dashboard(admin_data: dict = Depends(verify_admin_access)):
    """Sales summary for the admin dashboard"""
    try:
        return dashboard_summary()

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to get dashboard summary", e)
