"""
Dashboard Analytics

Aggregates computed from the orders, users, products and categories
collections. Cancelled orders and refunded payments do not count towards
revenue.
"""

from collections import Counter
from datetime import datetime, timedelta, timezone
import logging
from typing import Any, Dict, List

from config import RECENT_ORDERS_COUNT
from database import DatabaseService, OrderService, newest_first
from models import ORDER_STATUSES
from utils import round_money, safe_float, safe_int, to_datetime

logger = logging.getLogger(__name__)

RECENT_WINDOW_DAYS = 30
TOP_CATEGORIES_COUNT = 5


def _counts_as_revenue(order: Dict[str, Any]) -> bool:
    return order.get('orderStatus') != 'cancelled' and order.get('paymentStatus') != 'refunded'


def _is_recent(value: Any, since: datetime) -> bool:
    created = to_datetime(value)
    return created is not None and created >= since


def top_categories(orders: List[Dict[str, Any]], categories: List[Dict[str, Any]],
                   products: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Categories ranked by number of items sold"""
    names = {category['id']: category.get('name', category['id']) for category in categories}
    product_categories = {product['id']: product.get('categoryId') for product in products}

    sold = Counter()
    for order in orders:
        if order.get('orderType') == 'video' or not _counts_as_revenue(order):
            continue
        for item in order.get('items') or []:
            category_id = item.get('categoryId') or product_categories.get(item.get('productId'))
            if category_id:
                sold[category_id] += safe_int(item.get('quantity'), 1)

    return [
        {'categoryId': category_id, 'name': names.get(category_id, category_id), 'itemsSold': count}
        for category_id, count in sold.most_common(TOP_CATEGORIES_COUNT)
    ]


def dashboard_summary(now: datetime = None) -> Dict[str, Any]:
    """
    Sales dashboard figures

    Returns:
        dict: totalRevenue, totalOrders, recentOrderCount, orderStatusCounts,
        recentOrders, newCustomers, inventoryValue, topCategories
    """
    now = now or datetime.now(timezone.utc)
    since = now - timedelta(days=RECENT_WINDOW_DAYS)

    orders = OrderService.list_documents([], limit=None)
    customers = DatabaseService.query_documents('users', filters=[('role', '==', 'customer')])
    products = DatabaseService.query_documents('products')
    categories = DatabaseService.query_documents('categories')

    status_counts = {status_name: 0 for status_name in ORDER_STATUSES}
    for order in orders:
        order_status = order.get('orderStatus', 'pending')
        status_counts[order_status] = status_counts.get(order_status, 0) + 1

    revenue_orders = [order for order in orders if _counts_as_revenue(order)]
    inventory_value = sum(
        safe_float(product.get('price')) * safe_int(product.get('stock'))
        for product in products
        if product.get('stock') is not None
    )

    summary = {
        'totalRevenue': round_money(sum(safe_float(order.get('total')) for order in revenue_orders)),
        'recentRevenue': round_money(sum(
            safe_float(order.get('total')) for order in revenue_orders
            if _is_recent(order.get('createdAt'), since)
        )),
        'totalOrders': len(orders),
        'recentOrderCount': sum(1 for order in orders if _is_recent(order.get('createdAt'), since)),
        'orderStatusCounts': status_counts,
        'recentOrders': newest_first(orders)[:RECENT_ORDERS_COUNT],
        'totalCustomers': len(customers),
        'newCustomers': sum(1 for user in customers if _is_recent(user.get('createdAt'), since)),
        'totalProducts': len(products),
        'inventoryValue': round_money(inventory_value),
        'topCategories': top_categories(orders, categories, products),
        'windowDays': RECENT_WINDOW_DAYS,
    }
    logger.debug(f"Dashboard summary computed over {len(orders)} orders")
    return summary


def customer_order_stats(orders: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Order count and total spent for one customer's orders"""
    spent = sum(safe_float(order.get('total')) for order in orders if _counts_as_revenue(order))
    return {'orderCount': len(orders), 'totalSpent': round_money(spent)}
