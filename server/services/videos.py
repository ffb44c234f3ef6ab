"""
Personalized Video Services

A video request is stored twice: as a `video` order (so it shows up with
the customer's other orders) and as a videoRequests document the admin
fulfils. Status changes on the request are mirrored into the order.
"""

from datetime import datetime, timezone
import logging
from typing import Any, Dict, Optional

from config import ORDER_LIST_LIMIT
from database import DatabaseService, OrderService
from error_handling import InvalidStatusTransitionError, NotFoundError, ProductUnavailableError, ValidationError
from services import orders as order_workflow
from utils import history_entry, round_money, validate_status_transition

logger = logging.getLogger(__name__)

VIDEO_REQUEST_TRANSITIONS = {
    'pending': ['accepted', 'rejected'],
    'accepted': ['completed', 'rejected'],
    'completed': [],
    'rejected': [],
}

# orderStatus of the linked order for each request status
ORDER_STATUS_FOR_REQUEST = {
    'pending': 'pending',
    'accepted': 'processing',
    'completed': 'delivered',
    'rejected': 'cancelled',
}


def get_player(player_id: str) -> Dict[str, Any]:
    player = DatabaseService.get_document('videoPlayers', player_id)
    if not player:
        raise NotFoundError('player', player_id)
    return player


def create_video_request(user_data: Dict[str, Any], request: Dict[str, Any]) -> Dict[str, Any]:
    """
    Create a video order and its videoRequests document

    Args:
        user_data: Authenticated user from the token
        request: VideoRequestCreate as a dict

    Returns:
        dict: order_id, video_request_id, price and stored_in

    Raises:
        NotFoundError: If the player does not exist
        ProductUnavailableError: If the player is not taking requests
    """
    player = get_player(request['playerId'])
    if not player.get('available', True):
        raise ProductUnavailableError(request['playerId'], "not taking video requests")

    price = round_money(player.get('price', 0))
    customer_name = request.get('customerName') or user_data.get('name') or 'Customer'
    customer_email = request.get('customerEmail') or user_data.get('email') or ''
    payment_method = request.get('paymentMethod', 'credit-card')

    order_data = {
        'userId': user_data.get('uid'),
        'customerInfo': {
            'name': customer_name,
            'email': customer_email,
            'phone': request.get('customerPhone') or '',
        },
        'items': [{
            'productId': request['playerId'],
            'productName': f"Personalized Video from {player.get('name', '')}",
            'quantity': 1,
            'price': price,
        }],
        'subtotal': price,
        'shipping': 0.0,
        'tax': 0.0,
        'discount': 0.0,
        'total': price,
        'paymentMethod': 'Credit Card' if payment_method == 'credit-card' else 'Cash on Delivery',
        'paymentStatus': 'paid' if payment_method == 'credit-card' else 'pending',
        'orderStatus': 'pending',
        'videoRequest': {
            'player': player.get('name', ''),
            'playerId': request['playerId'],
            'occasion': request['occasion'],
            'recipientName': request['recipientName'],
            'message': request['message'],
            'deliveryDate': request['deliveryDate'],
            'price': price,
            'status': 'pending',
            'customerName': customer_name,
            'customerEmail': customer_email,
        },
    }

    order_id, stored_in = OrderService.create_video_order(order_data)
    video_request_id = None
    if stored_in != 'none':
        video_request_id = (OrderService.get_order(order_id) or {}).get('videoRequestId')

    logger.info(f"Video request for player {request['playerId']} created as order {order_id} ({stored_in})")
    return {
        'order_id': order_id,
        'video_request_id': video_request_id,
        'price': price,
        'stored_in': stored_in,
    }


def get_video_request(request_id: str) -> Dict[str, Any]:
    store, snapshot = OrderService.locate(request_id, 'videoRequests')
    if snapshot is None:
        raise NotFoundError('video request', request_id)
    video_request = snapshot.to_dict()
    video_request['id'] = snapshot.id
    return video_request


def check_transition(video_request: Dict[str, Any], new_status: str):
    """Raise InvalidStatusTransitionError unless the request can move to new_status"""
    current_status = video_request.get('status', 'pending')
    if not validate_status_transition(VIDEO_REQUEST_TRANSITIONS, current_status, new_status):
        raise InvalidStatusTransitionError('video request', current_status, new_status,
                                           VIDEO_REQUEST_TRANSITIONS.get(current_status, []))


def list_video_requests(status_filter: str = 'all', limit: int = ORDER_LIST_LIMIT):
    filters = []
    if status_filter and status_filter != 'all':
        filters.append(('status', '==', status_filter))
    return OrderService.list_documents(filters, limit, 'videoRequests')


def list_user_video_requests(user_uid: str, limit: int = ORDER_LIST_LIMIT):
    return OrderService.list_documents([('userId', '==', user_uid)], limit, 'videoRequests')


def _mirror_to_order(video_request: Dict[str, Any], updates: Dict[str, Any], comment: str):
    """Copy a request's new status into its linked order"""
    order_id = video_request.get('orderId')
    if not order_id:
        return
    order = OrderService.get_order(order_id)
    if not order:
        logger.warning(f"Video request {video_request['id']} links to missing order {order_id}")
        return

    order_status = ORDER_STATUS_FOR_REQUEST[updates['status']]
    OrderService.update_order(order_id, {
        'videoRequest': {**(order.get('videoRequest') or {}), **updates},
        'orderStatus': order_status,
        'history': list(order.get('history') or []) + [history_entry(order_status, comment)],
    })


def update_video_request_status(request_id: str, new_status: str, video_url: Optional[str] = None,
                                thumbnail_url: Optional[str] = None, comment: Optional[str] = None) -> Dict[str, Any]:
    """
    Move a video request through its workflow

    Completing a request requires a video URL. The linked order's
    videoRequest, orderStatus and history follow the request.

    Raises:
        NotFoundError: If the request does not exist
        InvalidStatusTransitionError: If the request cannot reach new_status
        ValidationError: If a completed request has no video
    """
    store, snapshot = OrderService.locate(request_id, 'videoRequests')
    if snapshot is None:
        raise NotFoundError('video request', request_id)
    video_request = {**snapshot.to_dict(), 'id': snapshot.id}
    current_status = video_request.get('status', 'pending')
    check_transition(video_request, new_status)

    updates = {'status': new_status}
    if new_status == 'completed':
        video_url = video_url or video_request.get('videoUrl')
        if not video_url:
            raise ValidationError("A video URL or uploaded video is required to complete a request", 'videoUrl')
        updates['videoUrl'] = video_url
        updates['completedAt'] = datetime.now(timezone.utc)
    if thumbnail_url:
        updates['thumbnailUrl'] = thumbnail_url

    DatabaseService.update_document('videoRequests', request_id, {
        **updates,
        'updatedAt': datetime.now(timezone.utc)
    }, 'video request', store=store)
    _mirror_to_order(video_request, updates, comment or f"Video request {new_status}")

    logger.info(f"Video request {request_id} moved from {current_status} to {new_status}")
    return {**video_request, **updates}


def update_video_payment(request_id: str, payment_status: str) -> Dict[str, Any]:
    """Record a paid or failed payment on a video request and its order"""
    store, snapshot = OrderService.locate(request_id, 'videoRequests')
    if snapshot is None:
        raise NotFoundError('video request', request_id)
    video_request = {**snapshot.to_dict(), 'id': snapshot.id}

    if video_request.get('orderId'):
        order_workflow.update_payment_status(video_request['orderId'], payment_status,
                                             f"Video payment marked as {payment_status}")

    DatabaseService.update_document('videoRequests', request_id, {
        'paymentStatus': payment_status,
        'updatedAt': datetime.now(timezone.utc)
    }, 'video request', store=store)
    return {**video_request, 'paymentStatus': payment_status}
