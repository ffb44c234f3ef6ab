"""
Admin Tools for Legendary Signatures API

Sample data seeding and connectivity diagnostics for Firestore, Firebase
Storage and outbound network access.
"""

from fastapi import APIRouter, HTTPException, Depends, status
from auth import verify_admin_access
from error_handling import StoreError, internal_error
from media_storage import get_media_storage
from models import SeedRequest
from datetime import datetime, timezone
import firebase_init
import seed_data
import requests
import logging
import time

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin-tools"])

NETWORK_PROBE_URL = "https://www.google.com/favicon.ico"
NETWORK_PROBE_TIMEOUT = 5


def probe_firestore() -> dict:
    """Write, read back and delete a diagnostics document"""
    started = time.monotonic()
    try:
        test_ref = firebase_init.db.collection('_diagnostics').document('probe')
        test_ref.set({'timestamp': datetime.now(timezone.utc)})
        readable = test_ref.get().exists
        test_ref.delete()
        elapsed = int((time.monotonic() - started) * 1000)
        return {
            "success": readable,
            "message": "Firestore read/write is working" if readable else "Firestore write could not be read back",
            "details": f"{'Firestore' if firebase_init.firestore_available else 'Local store'} round trip in {elapsed}ms",
        }
    except Exception as e:
        logger.error(f"Firestore probe failed: {e}")
        return {"success": False, "message": "Firestore read/write failed", "details": str(e)}


def probe_network() -> dict:
    """Check outbound HTTP access"""
    try:
        response = requests.head(NETWORK_PROBE_URL, timeout=NETWORK_PROBE_TIMEOUT)
        return {
            "success": response.status_code < 500,
            "message": "Network connectivity is working",
            "details": f"HEAD {NETWORK_PROBE_URL} returned {response.status_code}",
        }
    except requests.RequestException as e:
        logger.warning(f"Network probe failed: {e}")
        return {"success": False, "message": "Network connectivity issue detected", "details": str(e)}


@router.post("/seed")
async def seed(request: SeedRequest, admin_data: dict = Depends(verify_admin_access)):
    """Seed sample data; collections with documents are skipped unless force is set"""
    try:
        results = seed_data.seed_all(request.collections, request.force)
        logger.info(f"Admin {admin_data.get('email')} seeded data: {results}")
        return {
            "success": True,
            "message": f"Seeded {sum(r['created'] for r in results)} documents",
            "results": results,
        }

    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to seed data", e)


@router.get("/diagnostics")
async def run_diagnostics(admin_data: dict = Depends(verify_admin_access)):
    """Run every connectivity probe"""
    results = {
        "firestore": probe_firestore(),
        "storage": get_media_storage().probe(),
        "network": probe_network(),
    }
    return {
        "success": all(result["success"] for result in results.values()),
        "firestoreAvailable": firebase_init.firestore_available,
        "results": results,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/diagnostics/storage")
async def storage_diagnostics(admin_data: dict = Depends(verify_admin_access)):
    return get_media_storage().probe()
