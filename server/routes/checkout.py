"""
Checkout Routes for Legendary Signatures API
"""

from fastapi import APIRouter, HTTPException, Depends, status
from auth import verify_firebase_token
from error_handling import StoreError, internal_error
from models import CheckoutRequest, QuoteRequest
from services import checkout as checkout_service
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/checkout", tags=["checkout"])


@router.post("/quote")
async def quote_cart(quote_request: QuoteRequest):
    """Price breakdown for a cart without placing an order"""
    try:
        items = [item.model_dump() for item in quote_request.items]
        return checkout_service.quote(items, quote_request.promoCode)

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to price cart", e)


@router.post("", status_code=status.HTTP_201_CREATED)
async def checkout(checkout_request: CheckoutRequest, user_data: dict = Depends(verify_firebase_token)):
    """Place a product order for the current user"""
    try:
        logger.info(f"Processing checkout of {len(checkout_request.items)} items for {user_data.get('uid')}")
        result = checkout_service.place_order(user_data, checkout_request.model_dump())

        return {
            "success": True,
            "message": "Order placed successfully",
            **result,
        }

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to process checkout", e)
