from firebase_init import db, fallback_db
from firebase_admin import firestore
from google.api_core.exceptions import NotFound
from datetime import datetime, timezone
from typing import Dict, List, Optional, Any, Tuple
import logging

from config import ORDER_LIST_LIMIT
from error_handling import DatabaseOperationContext, NotFoundError
from utils import (
    generate_order_id, generate_offline_order_id, generate_video_request_id,
    history_entry, to_datetime
)

logger = logging.getLogger(__name__)

DESCENDING = firestore.Query.DESCENDING
ASCENDING = firestore.Query.ASCENDING


def newest_first(documents: List[Dict[str, Any]], field: str = 'createdAt') -> List[Dict[str, Any]]:
    """Sort in application code so queries do not need composite indexes"""
    epoch = datetime.min.replace(tzinfo=timezone.utc)
    return sorted(documents, key=lambda d: to_datetime(d.get(field)) or epoch, reverse=True)


class DatabaseService:
    """Service class for database operations"""

    @staticmethod
    def get_document(collection_name: str, doc_id: str, store=None) -> Optional[Dict[str, Any]]:
        """Get a document from Firestore, with its id, or None"""
        with DatabaseOperationContext('get', collection_name):
            doc = (store or db).collection(collection_name).document(doc_id).get()
            if doc.exists:
                data = doc.to_dict()
                data['id'] = doc.id
                return data
            return None

    @staticmethod
    def create_document(collection_name: str, doc_id: str, data: Dict[str, Any], store=None) -> str:
        """Create a document with a known id"""
        with DatabaseOperationContext('create', collection_name):
            (store or db).collection(collection_name).document(doc_id).set(data)
        logger.info(f"Created document {doc_id} in {collection_name}")
        return doc_id

    @staticmethod
    def add_document(collection_name: str, data: Dict[str, Any], store=None) -> str:
        """Create a document with a generated id"""
        with DatabaseOperationContext('add', collection_name):
            _, doc_ref = (store or db).collection(collection_name).add(data)
        logger.info(f"Created document {doc_ref.id} in {collection_name}")
        return doc_ref.id

    @staticmethod
    def update_document(collection_name: str, doc_id: str, updates: Dict[str, Any],
                        resource: str = None, store=None) -> bool:
        """Update a document; raises NotFoundError when it does not exist"""
        with DatabaseOperationContext('update', collection_name):
            try:
                (store or db).collection(collection_name).document(doc_id).update(updates)
            except NotFound:
                raise NotFoundError(resource or collection_name.rstrip('s'), doc_id)
        logger.info(f"Updated document {doc_id} in {collection_name}")
        return True

    @staticmethod
    def delete_document(collection_name: str, doc_id: str, store=None) -> bool:
        """Delete a document from Firestore"""
        with DatabaseOperationContext('delete', collection_name):
            (store or db).collection(collection_name).document(doc_id).delete()
        logger.info(f"Deleted document {doc_id} from {collection_name}")
        return True

    @staticmethod
    def query_documents(collection_name: str, filters: List[tuple] = None, order_by: str = None,
                        direction: str = ASCENDING, limit: int = None, store=None) -> List[Dict[str, Any]]:
        """Query documents with optional filters, ordering, and limit"""
        with DatabaseOperationContext('query', collection_name):
            query = (store or db).collection(collection_name)

            # Apply filters
            if filters:
                for field, operator, value in filters:
                    query = query.where(field, operator, value)

            # Apply ordering
            if order_by:
                query = query.order_by(order_by, direction=direction)

            # Apply limit
            if limit:
                query = query.limit(limit)

            results = []
            for doc in query.stream():
                data = doc.to_dict()
                data['id'] = doc.id
                results.append(data)

            return results


class ProductService:
    """Service class for product-related database operations"""

    @staticmethod
    def get_product(product_id: str) -> Optional[Dict[str, Any]]:
        """Get a product by its ID"""
        return DatabaseService.get_document('products', product_id)

    @staticmethod
    def list_products(limit: int = None) -> List[Dict[str, Any]]:
        """Newest products first"""
        return DatabaseService.query_documents('products', order_by='createdAt', direction=DESCENDING, limit=limit)

    @staticmethod
    def create_product(product_data: Dict[str, Any]) -> str:
        """Create a new product"""
        now = datetime.now(timezone.utc)
        product_data.setdefault('viewCount', 0)
        product_data.setdefault('soldCount', 0)
        product_data['createdAt'] = now
        product_data['updatedAt'] = now
        return DatabaseService.add_document('products', product_data)

    @staticmethod
    def update_product(product_id: str, updates: Dict[str, Any]) -> bool:
        """Update product data"""
        updates['updatedAt'] = datetime.now(timezone.utc)
        return DatabaseService.update_document('products', product_id, updates, 'product')

    @staticmethod
    def increment_view_count(product_id: str, current: int):
        try:
            db.collection('products').document(product_id).update({'viewCount': current + 1})
        except Exception as e:
            logger.warning(f"Could not update view count for product {product_id}: {e}")

    @staticmethod
    def record_sale(product_id: str, quantity: int):
        """Bump soldCount and draw down stock when the product tracks it"""
        product = ProductService.get_product(product_id)
        if not product:
            logger.warning(f"Sold product {product_id} no longer exists")
            return
        updates = {'soldCount': product.get('soldCount', 0) + quantity}
        if product.get('stock') is not None:
            remaining = max(0, product['stock'] - quantity)
            updates['stock'] = remaining
            if remaining == 0:
                updates['available'] = False
        ProductService.update_product(product_id, updates)


class UserService:
    """Service class for user-related database operations"""

    @staticmethod
    def get_user_by_uid(user_uid: str) -> Optional[Dict[str, Any]]:
        """Get a user by their UID"""
        return DatabaseService.get_document('users', user_uid)

    @staticmethod
    def create_user(user_uid: str, user_data: Dict[str, Any]) -> str:
        """Create a new user"""
        now = datetime.now(timezone.utc)
        user_data.setdefault('role', 'customer')
        user_data.setdefault('wishlist', [])
        user_data.setdefault('newsletter', False)
        user_data['createdAt'] = now
        user_data.setdefault('lastLogin', now)
        return DatabaseService.create_document('users', user_uid, user_data)

    @staticmethod
    def ensure_user(token_user: Dict[str, Any]) -> Dict[str, Any]:
        """Return the user document for an authenticated caller, creating it on first sight"""
        user_uid = token_user['uid']
        user = UserService.get_user_by_uid(user_uid)
        if user:
            return user
        UserService.create_user(user_uid, {
            'email': token_user.get('email') or '',
            'displayName': token_user.get('name') or '',
        })
        logger.info(f"Created user profile for {user_uid}")
        return UserService.get_user_by_uid(user_uid)

    @staticmethod
    def update_user(user_uid: str, updates: Dict[str, Any]) -> bool:
        """Update user data"""
        updates['updatedAt'] = datetime.now(timezone.utc)
        return DatabaseService.update_document('users', user_uid, updates, 'user')

    @staticmethod
    def get_users_by_roles(roles: List[str]) -> List[Dict[str, Any]]:
        return newest_first(DatabaseService.query_documents('users', filters=[('role', 'in', roles)]))

    @staticmethod
    def find_by_email(email: str) -> Optional[Dict[str, Any]]:
        users = DatabaseService.query_documents('users', filters=[('email', '==', email)], limit=1)
        return users[0] if users else None


class PromoCodeService:
    """Service class for promo code documents"""

    @staticmethod
    def get_promo_code(promo_id: str) -> Optional[Dict[str, Any]]:
        return DatabaseService.get_document('promoCodes', promo_id)

    @staticmethod
    def find_by_code(code: str, active_only: bool = False) -> Optional[Dict[str, Any]]:
        filters = [('code', '==', code)]
        if active_only:
            filters.append(('isActive', '==', True))
        matches = DatabaseService.query_documents('promoCodes', filters=filters, limit=1)
        return matches[0] if matches else None

    @staticmethod
    def list_promo_codes() -> List[Dict[str, Any]]:
        return DatabaseService.query_documents('promoCodes', order_by='createdAt', direction=DESCENDING)

    @staticmethod
    def record_usage(promo_id: str):
        """Count one more redemption of a promo code"""
        promo = PromoCodeService.get_promo_code(promo_id)
        if not promo:
            logger.warning(f"Redeemed promo code {promo_id} no longer exists")
            return
        DatabaseService.update_document('promoCodes', promo_id, {
            'usageCount': promo.get('usageCount', 0) + 1,
            'updatedAt': datetime.now(timezone.utc)
        })


class OrderService:
    """
    Service class for order documents

    Orders are written to Firestore first. When that write fails the order
    goes to the local fallback store instead and the caller still gets an
    order id. Reads fall back to the local store the same way.
    """

    @staticmethod
    def _write(order: Dict[str, Any], video_request: Dict[str, Any] = None) -> str:
        """Write an order (and its video request) to Firestore, else to the fallback store"""
        for store, stored_in in ((db, 'firestore'), (fallback_db, 'local')):
            try:
                batch = store.batch()
                batch.set(store.collection('orders').document(order['id']), order)
                if video_request:
                    batch.set(store.collection('videoRequests').document(video_request['id']), video_request)
                batch.commit()
                if stored_in == 'local':
                    logger.warning(f"Order {order['id']} saved to local fallback store")
                else:
                    logger.info(f"Order saved to Firestore with ID: {order['id']}")
                return stored_in
            except Exception as e:
                logger.error(f"Error saving order {order['id']} ({stored_in}): {e}")
        raise RuntimeError(f"Order {order['id']} could not be saved")

    @staticmethod
    def _with_meta(order_data: Dict[str, Any], order_id: str, order_type: str, comment: str) -> Dict[str, Any]:
        now = datetime.now(timezone.utc)
        return {
            **order_data,
            'id': order_id,
            'orderType': order_type,
            'createdAt': now,
            'updatedAt': now,
            'history': order_data.get('history') or [
                history_entry(order_data.get('orderStatus', 'pending'), comment, now)
            ],
        }

    @staticmethod
    def create_product_order(order_data: Dict[str, Any]) -> Tuple[str, str]:
        """
        Create a product order

        Args:
            order_data: Order fields without id, orderType or timestamps

        Returns:
            tuple: (order id, where it was stored: firestore, local or none)
        """
        try:
            order_id = generate_order_id("ORD")
            order = OrderService._with_meta(order_data, order_id, 'product', 'Order created')
            return order_id, OrderService._write(order)
        except Exception as e:
            logger.critical(f"Error creating order: {e}")
            return generate_offline_order_id("ORD"), 'none'

    @staticmethod
    def create_video_order(order_data: Dict[str, Any]) -> Tuple[str, str]:
        """
        Create a video order and its companion videoRequests document

        Args:
            order_data: Order fields including a videoRequest mapping

        Returns:
            tuple: (order id, where it was stored: firestore, local or none)
        """
        try:
            order_id = generate_order_id("VID")
            order = OrderService._with_meta(order_data, order_id, 'video', 'Video request created')
            video_request = {
                **order_data['videoRequest'],
                'id': generate_video_request_id(),
                'userId': order_data.get('userId'),
                'orderId': order_id,
                'createdAt': order['createdAt'],
                'status': order_data.get('orderStatus', 'pending'),
            }
            order['videoRequestId'] = video_request['id']
            return order_id, OrderService._write(order, video_request)
        except Exception as e:
            logger.critical(f"Error creating video order: {e}")
            return generate_offline_order_id("VID"), 'none'

    @staticmethod
    def locate(order_id: str, collection_name: str = 'orders'):
        """Find the store holding an order or video request: Firestore first, then the fallback store"""
        try:
            snapshot = db.collection(collection_name).document(order_id).get()
            if snapshot.exists:
                return db, snapshot
        except Exception as e:
            logger.error(f"Error getting {collection_name}/{order_id} from Firestore: {e}")

        snapshot = fallback_db.collection(collection_name).document(order_id).get()
        if snapshot.exists:
            return fallback_db, snapshot
        return None, None

    @staticmethod
    def get_order(order_id: str) -> Optional[Dict[str, Any]]:
        """Get an order by id, or None"""
        store, snapshot = OrderService.locate(order_id)
        if snapshot is None:
            return None
        order = snapshot.to_dict()
        order['id'] = snapshot.id
        order['offline'] = store is fallback_db
        return order

    @staticmethod
    def list_documents(filters: List[tuple], limit: int, collection_name: str = 'orders') -> List[Dict[str, Any]]:
        """Newest first from Firestore, or from the fallback store when Firestore errors"""
        try:
            orders = DatabaseService.query_documents(collection_name, filters=filters)
        except Exception as e:
            logger.error(f"Error with Firestore {collection_name} query, using local store: {e}")
            orders = DatabaseService.query_documents(collection_name, filters=filters, store=fallback_db)
            for order in orders:
                order['offline'] = True
        return newest_first(orders)[:limit]

    @staticmethod
    def list_orders(status_filter: str = 'all', limit: int = ORDER_LIST_LIMIT) -> List[Dict[str, Any]]:
        """Newest orders first, optionally filtered by orderStatus"""
        filters = []
        if status_filter and status_filter != 'all':
            filters.append(('orderStatus', '==', status_filter))
        return OrderService.list_documents(filters, limit)

    @staticmethod
    def list_user_orders(user_uid: str, order_type: str = None, limit: int = ORDER_LIST_LIMIT) -> List[Dict[str, Any]]:
        filters = [('userId', '==', user_uid)]
        if order_type:
            filters.append(('orderType', '==', order_type))
        return OrderService.list_documents(filters, limit)

    @staticmethod
    def update_order(order_id: str, updates: Dict[str, Any]) -> bool:
        """Update an order wherever it is stored"""
        store, snapshot = OrderService.locate(order_id)
        if snapshot is None:
            raise NotFoundError('order', order_id)
        updates['updatedAt'] = datetime.now(timezone.utc)
        return DatabaseService.update_document('orders', order_id, updates, 'order', store=store)

    @staticmethod
    def next_numeric_order_id() -> int:
        """One more than the highest numericOrderId, 1 when none exist"""
        try:
            latest = DatabaseService.query_documents(
                'orders', order_by='numericOrderId', direction=DESCENDING, limit=1
            )
            if latest:
                return int(latest[0].get('numericOrderId') or 0) + 1
        except Exception as e:
            logger.error(f"Error getting latest order ID: {e}")
        return 1

    @staticmethod
    def sync_offline_orders() -> Dict[str, Any]:
        """Copy orders and video requests held locally into Firestore"""
        synced = {'orders': [], 'videoRequests': []}
        failed = []
        for collection_name in ('orders', 'videoRequests'):
            for doc in list(fallback_db.collection(collection_name).stream()):
                try:
                    db.collection(collection_name).document(doc.id).set(doc.to_dict())
                    fallback_db.collection(collection_name).document(doc.id).delete()
                    synced[collection_name].append(doc.id)
                except Exception as e:
                    logger.error(f"Could not sync {collection_name}/{doc.id}: {e}")
                    failed.append(doc.id)
        logger.info(f"Synced {len(synced['orders'])} offline orders to Firestore")
        return {'synced': synced, 'failed': failed}
