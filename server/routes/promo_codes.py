"""
Promo Code Routes for Legendary Signatures API
"""

from fastapi import APIRouter, HTTPException, Depends, status
from auth import verify_admin_access
from database import DatabaseService, PromoCodeService
from error_handling import NotFoundError, StoreError, internal_error
from models import PromoCodeCreate, PromoCodeUpdate, PromoValidationRequest
from services import promotions
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["promo-codes"])


@router.post("/promo-codes/validate")
async def validate_promo_code(request: PromoValidationRequest):
    """Check a promo code against an order total"""
    return promotions.validate_promo_code(request.code, request.orderTotal)


@router.get("/admin/promo-codes")
async def list_promo_codes(admin_data: dict = Depends(verify_admin_access)):
    try:
        promo_codes = PromoCodeService.list_promo_codes()
        return {"promoCodes": promo_codes, "count": len(promo_codes)}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to list promo codes", e)


@router.get("/admin/promo-codes/generate")
async def generate_promo_code(admin_data: dict = Depends(verify_admin_access)):
    """A random 6-digit code that is not in use"""
    try:
        return {"code": promotions.generate_unique_code()}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to generate promo code", e)


@router.get("/admin/promo-codes/{promo_id}")
async def get_promo_code(promo_id: str, admin_data: dict = Depends(verify_admin_access)):
    try:
        promo_code = PromoCodeService.get_promo_code(promo_id)
        if not promo_code:
            raise NotFoundError('promo code', promo_id)
        return promo_code

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to get promo code", e)


@router.post("/admin/promo-codes", status_code=status.HTTP_201_CREATED)
async def create_promo_code(promo_code: PromoCodeCreate, admin_data: dict = Depends(verify_admin_access)):
    try:
        created = promotions.create_promo_code(promo_code.model_dump(), admin_data.get('uid'))
        return {
            "success": True,
            "message": "Promo code created successfully",
            "promo_id": created['id'],
            "code": created['code'],
        }

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to create promo code", e)


@router.put("/admin/promo-codes/{promo_id}")
async def update_promo_code(promo_id: str, updates: PromoCodeUpdate,
                            admin_data: dict = Depends(verify_admin_access)):
    try:
        update_data = updates.model_dump(exclude_unset=True)
        if not update_data:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update")

        updated = promotions.update_promo_code(promo_id, update_data)
        logger.info(f"Admin {admin_data.get('email')} updated promo code {promo_id}")
        return {"success": True, "message": "Promo code updated successfully", "promoCode": updated}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to update promo code", e)


@router.delete("/admin/promo-codes/{promo_id}")
async def delete_promo_code(promo_id: str, admin_data: dict = Depends(verify_admin_access)):
    try:
        if not PromoCodeService.get_promo_code(promo_id):
            raise NotFoundError('promo code', promo_id)
        DatabaseService.delete_document('promoCodes', promo_id)
        logger.info(f"Admin {admin_data.get('email')} deleted promo code {promo_id}")
        return {"success": True, "message": "Promo code deleted successfully", "promo_id": promo_id}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to delete promo code", e)
