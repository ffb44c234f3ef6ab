"""
Profile Routes for Legendary Signatures API

The signed-in user's own profile and wishlist. The users document is
created with role "customer" the first time a user is seen.
"""

from fastapi import APIRouter, HTTPException, Depends, status
from auth import verify_firebase_token
from database import ProductService, UserService
from error_handling import NotFoundError, StoreError, internal_error
from models import ProfileUpdate, WishlistItem
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/profile", tags=["profile"])


@router.get("")
async def get_profile(user_data: dict = Depends(verify_firebase_token)):
    try:
        return UserService.ensure_user(user_data)

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to get profile", e)


@router.put("")
async def update_profile(updates: ProfileUpdate, user_data: dict = Depends(verify_firebase_token)):
    try:
        update_data = updates.model_dump(exclude_unset=True)
        if not update_data:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update")

        UserService.ensure_user(user_data)
        UserService.update_user(user_data['uid'], update_data)
        return {"success": True, "message": "Profile updated successfully"}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to update profile", e)


@router.post("/login")
async def record_login(user_data: dict = Depends(verify_firebase_token)):
    """Record a sign-in on the user's profile"""
    try:
        user = UserService.ensure_user(user_data)
        now = datetime.now(timezone.utc)
        UserService.update_user(user_data['uid'], {'lastLogin': now})
        return {"success": True, "role": user.get('role', 'customer'), "lastLogin": now.isoformat()}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to record login", e)


@router.get("/wishlist")
async def get_wishlist(user_data: dict = Depends(verify_firebase_token)):
    """Wishlisted products that still exist"""
    try:
        user = UserService.ensure_user(user_data)
        products = []
        for product_id in user.get('wishlist', []):
            product = ProductService.get_product(product_id)
            if product:
                products.append(product)
        return {"products": products, "count": len(products)}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to get wishlist", e)


@router.post("/wishlist")
async def add_to_wishlist(item: WishlistItem, user_data: dict = Depends(verify_firebase_token)):
    try:
        if not ProductService.get_product(item.productId):
            raise NotFoundError('product', item.productId)

        user = UserService.ensure_user(user_data)
        wishlist = list(user.get('wishlist', []))
        if item.productId not in wishlist:
            wishlist.append(item.productId)
            UserService.update_user(user_data['uid'], {'wishlist': wishlist})

        return {"success": True, "wishlist": wishlist}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to add to wishlist", e)


@router.delete("/wishlist/{product_id}")
async def remove_from_wishlist(product_id: str, user_data: dict = Depends(verify_firebase_token)):
    try:
        user = UserService.ensure_user(user_data)
        wishlist = [pid for pid in user.get('wishlist', []) if pid != product_id]
        UserService.update_user(user_data['uid'], {'wishlist': wishlist})
        return {"success": True, "wishlist": wishlist}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to remove from wishlist", e)
