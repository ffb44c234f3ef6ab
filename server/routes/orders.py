"""
Order Routes for Legendary Signatures API

Customers read their own orders; admins list every order, move orders and
payments through their statuses, and push orders held in the local
fallback store to Firestore.
"""

from fastapi import APIRouter, HTTPException, Depends, Query
from auth import verify_firebase_token, verify_admin_access, verify_user_or_admin, require_user_ownership_or_admin
from config import ORDER_LIST_LIMIT
from database import OrderService
from error_handling import NotFoundError, StoreError, internal_error
from models import OrderStatusUpdate, PaymentStatusUpdate
from services import orders as order_workflow
from typing import Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["orders"])


@router.get("/orders")
async def list_my_orders(
    orderType: Optional[str] = Query(None, pattern='^(product|video)$'),
    user_data: dict = Depends(verify_firebase_token)
):
    """Orders placed by the current user, newest first"""
    try:
        orders = OrderService.list_user_orders(user_data['uid'], orderType)
        return {"orders": orders, "count": len(orders)}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to list orders", e)


@router.get("/orders/{order_id}")
async def get_my_order(order_id: str, user_data: dict = Depends(verify_user_or_admin)):
    """One order; customers only see their own"""
    try:
        order = OrderService.get_order(order_id)
        if not order:
            raise NotFoundError('order', order_id)
        require_user_ownership_or_admin(order.get('userId'), user_data)
        return order

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to get order", e)


@router.get("/admin/orders")
async def list_orders(
    status: str = Query('all'),
    limit: int = Query(ORDER_LIST_LIMIT, ge=1, le=500),
    admin_data: dict = Depends(verify_admin_access)
):
    """All orders, newest first, optionally filtered by orderStatus"""
    try:
        orders = OrderService.list_orders(status, limit)
        return {"orders": orders, "count": len(orders), "status": status}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to list orders", e)


@router.get("/admin/orders/{order_id}")
async def get_order(order_id: str, admin_data: dict = Depends(verify_admin_access)):
    try:
        order = OrderService.get_order(order_id)
        if not order:
            raise NotFoundError('order', order_id)
        return order

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to get order", e)


@router.patch("/admin/orders/{order_id}/status")
async def update_order_status(order_id: str, update: OrderStatusUpdate,
                              admin_data: dict = Depends(verify_admin_access)):
    """Move an order to its next fulfilment status"""
    try:
        order = order_workflow.update_order_status(
            order_id,
            update.orderStatus,
            comment=update.comment,
            tracking_number=update.trackingNumber,
            shipping_method=update.shippingMethod,
            changed_by=admin_data.get('uid'),
        )
        logger.info(f"Admin {admin_data.get('email')} set order {order_id} to {update.orderStatus}")

        return {
            "success": True,
            "message": f"Order status updated to {update.orderStatus}",
            "order_id": order_id,
            "orderStatus": order['orderStatus'],
            "history": order['history'],
        }

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to update order status", e)


@router.patch("/admin/orders/{order_id}/payment")
async def update_payment_status(order_id: str, update: PaymentStatusUpdate,
                                admin_data: dict = Depends(verify_admin_access)):
    try:
        order = order_workflow.update_payment_status(order_id, update.paymentStatus, update.comment)
        logger.info(f"Admin {admin_data.get('email')} set payment of order {order_id} to {update.paymentStatus}")

        return {
            "success": True,
            "message": f"Payment status updated to {update.paymentStatus}",
            "order_id": order_id,
            "paymentStatus": order['paymentStatus'],
        }

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to update payment status", e)


@router.post("/admin/orders/sync")
async def sync_offline_orders(admin_data: dict = Depends(verify_admin_access)):
    """Push orders saved while Firestore was unreachable"""
    try:
        result = OrderService.sync_offline_orders()
        logger.info(f"Admin {admin_data.get('email')} synced offline orders: {result['synced']['orders']}")
        return {"success": not result['failed'], **result}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to sync offline orders", e)
