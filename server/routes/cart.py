"""
Cart Routes for Legendary Signatures API

One cart document per user at carts/{uid}. Item prices are copied from the
product when added; checkout prices the cart again from the catalog.
"""

from fastapi import APIRouter, HTTPException, Depends
from auth import verify_firebase_token
from database import DatabaseService, ProductService
from error_handling import NotFoundError, ProductUnavailableError, StoreError, internal_error
from models import CartItemAdd, CartItemUpdate
from utils import round_money
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cart", tags=["cart"])


def _load_items(user_uid: str) -> list:
    cart = DatabaseService.get_document('carts', user_uid)
    return list(cart.get('items', [])) if cart else []


def _save_items(user_uid: str, items: list) -> dict:
    DatabaseService.create_document('carts', user_uid, {
        'items': items,
        'updatedAt': datetime.now(timezone.utc)
    })
    return cart_response(items)


def cart_response(items: list) -> dict:
    return {
        "items": items,
        "itemCount": sum(item['quantity'] for item in items),
        "total": round_money(sum(item['price'] * item['quantity'] for item in items)),
    }


@router.get("")
async def get_cart(user_data: dict = Depends(verify_firebase_token)):
    try:
        return cart_response(_load_items(user_data['uid']))

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to get cart", e)


@router.post("/items")
async def add_cart_item(item: CartItemAdd, user_data: dict = Depends(verify_firebase_token)):
    """Add a product; adding the same product again increases its quantity"""
    try:
        product = ProductService.get_product(item.productId)
        if not product:
            raise NotFoundError('product', item.productId)
        if not product.get('available', True):
            raise ProductUnavailableError(item.productId)

        items = _load_items(user_data['uid'])
        for line in items:
            if line['productId'] == item.productId:
                line['quantity'] += item.quantity
                break
        else:
            items.append({
                'productId': item.productId,
                'name': product.get('title', ''),
                'price': round_money(product.get('price', 0)),
                'quantity': item.quantity,
                'image': product.get('imageUrl', ''),
            })

        return _save_items(user_data['uid'], items)

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to add cart item", e)


@router.put("/items/{product_id}")
async def update_cart_item(product_id: str, update: CartItemUpdate, user_data: dict = Depends(verify_firebase_token)):
    """Set a line's quantity; 0 removes the line"""
    try:
        items = _load_items(user_data['uid'])
        if not any(line['productId'] == product_id for line in items):
            raise NotFoundError('cart item', product_id)

        if update.quantity == 0:
            items = [line for line in items if line['productId'] != product_id]
        else:
            for line in items:
                if line['productId'] == product_id:
                    line['quantity'] = update.quantity

        return _save_items(user_data['uid'], items)

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to update cart item", e)


@router.delete("/items/{product_id}")
async def remove_cart_item(product_id: str, user_data: dict = Depends(verify_firebase_token)):
    try:
        items = [line for line in _load_items(user_data['uid']) if line['productId'] != product_id]
        return _save_items(user_data['uid'], items)

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to remove cart item", e)


@router.delete("")
async def clear_cart(user_data: dict = Depends(verify_firebase_token)):
    try:
        DatabaseService.delete_document('carts', user_data['uid'])
        return cart_response([])

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to clear cart", e)
