"""
Order Workflow Services

Status transitions for orders and their payments. Every status change is
appended to the order's history.
"""

from datetime import datetime, timezone
import logging
from typing import Any, Dict, Optional

from database import OrderService
from error_handling import InvalidStatusTransitionError, NotFoundError
from utils import history_entry, validate_status_transition

logger = logging.getLogger(__name__)

ORDER_TRANSITIONS = {
    'pending': ['processing', 'cancelled'],
    'processing': ['shipped', 'cancelled'],
    'shipped': ['delivered'],
    'delivered': [],
    'cancelled': [],
}

PAYMENT_TRANSITIONS = {
    'pending': ['paid', 'failed'],
    'failed': ['paid'],
    'paid': ['refunded'],
    'refunded': [],
}


def _require_order(order_id: str) -> Dict[str, Any]:
    order = OrderService.get_order(order_id)
    if not order:
        raise NotFoundError('order', order_id)
    return order


def update_order_status(order_id: str, new_status: str, comment: Optional[str] = None,
                        tracking_number: Optional[str] = None, shipping_method: Optional[str] = None,
                        changed_by: Optional[str] = None) -> Dict[str, Any]:
    """
    Move an order to a new fulfilment status

    Args:
        order_id: Order ID
        new_status: Target orderStatus
        comment: Note stored with the history entry
        tracking_number: Carrier tracking number, usually given when shipping
        shipping_method: Carrier or service name
        changed_by: UID of the admin making the change

    Returns:
        dict: The updated order

    Raises:
        NotFoundError: If the order does not exist
        InvalidStatusTransitionError: If the order cannot reach new_status
    """
    order = _require_order(order_id)
    current_status = order.get('orderStatus', 'pending')

    if not validate_status_transition(ORDER_TRANSITIONS, current_status, new_status):
        raise InvalidStatusTransitionError('order', current_status, new_status,
                                           ORDER_TRANSITIONS.get(current_status, []))

    entry = history_entry(new_status, comment or f"Order status changed to {new_status}")
    if changed_by:
        entry['changedBy'] = changed_by

    updates = {
        'orderStatus': new_status,
        'history': list(order.get('history') or []) + [entry],
    }
    if tracking_number:
        updates['trackingNumber'] = tracking_number
    if shipping_method:
        updates['shippingMethod'] = shipping_method
    if new_status == 'delivered':
        updates['deliveredAt'] = datetime.now(timezone.utc)

    OrderService.update_order(order_id, updates)
    logger.info(f"Order {order_id} moved from {current_status} to {new_status}")
    return {**order, **updates}


def update_payment_status(order_id: str, new_status: str, comment: Optional[str] = None) -> Dict[str, Any]:
    """
    Move an order's payment to a new status

    Raises:
        NotFoundError: If the order does not exist
        InvalidStatusTransitionError: If the payment cannot reach new_status
    """
    order = _require_order(order_id)
    current_status = order.get('paymentStatus', 'pending')

    if not validate_status_transition(PAYMENT_TRANSITIONS, current_status, new_status):
        raise InvalidStatusTransitionError('payment', current_status, new_status,
                                           PAYMENT_TRANSITIONS.get(current_status, []))

    updates = {
        'paymentStatus': new_status,
        'history': list(order.get('history') or []) + [
            history_entry(order.get('orderStatus', 'pending'), comment or f"Payment marked as {new_status}")
        ],
    }
    OrderService.update_order(order_id, updates)
    logger.info(f"Payment for order {order_id} moved from {current_status} to {new_status}")
    return {**order, **updates}
