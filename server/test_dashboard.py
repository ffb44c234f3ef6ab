import pytest
from datetime import datetime, timedelta, timezone

from services.analytics import dashboard_summary, customer_order_stats


@pytest.fixture
def shop(store, add_product):
    now = datetime.now(timezone.utc)
    store.collection('categories').document('football-jerseys').set({'name': 'Football Jerseys'})
    store.collection('categories').document('photographs').set({'name': 'Photographs'})
    add_product('messi-jersey', price=1000.0, stock=2, categoryId='football-jerseys')
    add_product('messi-photo', price=200.0, stock=5, categoryId='photographs')
    add_product('ronaldo-boots', price=800.0)

    orders = {
        'ORD-1': {'orderStatus': 'delivered', 'paymentStatus': 'paid', 'total': 1050.0, 'createdAt': now,
                  'items': [{'productId': 'messi-jersey', 'quantity': 1, 'categoryId': 'football-jerseys'}]},
        'ORD-2': {'orderStatus': 'pending', 'paymentStatus': 'pending', 'total': 470.0,
                  'createdAt': now - timedelta(days=60),
                  'items': [{'productId': 'messi-photo', 'quantity': 3}]},
        'ORD-3': {'orderStatus': 'cancelled', 'paymentStatus': 'pending', 'total': 300.0, 'createdAt': now,
                  'items': [{'productId': 'messi-photo', 'quantity': 1}]},
        'ORD-4': {'orderStatus': 'delivered', 'paymentStatus': 'refunded', 'total': 999.0, 'createdAt': now,
                  'items': [{'productId': 'messi-jersey', 'quantity': 1}]},
        'VID-1': {'orderType': 'video', 'orderStatus': 'processing', 'paymentStatus': 'paid', 'total': 499.99,
                  'createdAt': now, 'items': [{'productId': 'player-messi', 'quantity': 1}]},
    }
    for order_id, order in orders.items():
        store.collection('orders').document(order_id).set({'orderType': 'product', **order})

    store.collection('users').document('customer-1').set({'role': 'customer', 'createdAt': now})
    store.collection('users').document('customer-2').set({'role': 'customer', 'createdAt': now - timedelta(days=90)})
    return now


class TestDashboardSummary:

    def test_revenue_excludes_cancelled_and_refunded(self, shop):
        summary = dashboard_summary()
        assert summary['totalRevenue'] == 2019.99
        assert summary['recentRevenue'] == 1549.99

    def test_order_counts(self, shop):
        summary = dashboard_summary()
        assert summary['totalOrders'] == 5
        assert summary['recentOrderCount'] == 4
        assert summary['orderStatusCounts'] == {
            'pending': 1, 'processing': 1, 'shipped': 0, 'delivered': 2, 'cancelled': 1,
        }
        assert len(summary['recentOrders']) == 5
        assert summary['recentOrders'][-1]['id'] == 'ORD-2'

    def test_customers_and_inventory(self, shop):
        summary = dashboard_summary()
        assert summary['totalCustomers'] == 2
        assert summary['newCustomers'] == 1
        assert summary['totalProducts'] == 3
        assert summary['inventoryValue'] == 3000.0

    def test_top_categories_by_items_sold(self, shop):
        summary = dashboard_summary()
        assert summary['topCategories'] == [
            {'categoryId': 'photographs', 'name': 'Photographs', 'itemsSold': 3},
            {'categoryId': 'football-jerseys', 'name': 'Football Jerseys', 'itemsSold': 1},
        ]

    def test_empty_store(self):
        summary = dashboard_summary()
        assert summary['totalRevenue'] == 0.0
        assert summary['recentOrders'] == []
        assert summary['topCategories'] == []

    def test_customer_order_stats(self):
        orders = [{'total': 100.0, 'orderStatus': 'delivered'}, {'total': 50.0, 'orderStatus': 'cancelled'}]
        assert customer_order_stats(orders) == {'orderCount': 2, 'totalSpent': 100.0}


class TestDashboardRoute:

    def test_admin_dashboard(self, client, admin_headers, shop):
        response = client.get("/api/admin/dashboard", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["windowDays"] == 30

    def test_dashboard_requires_admin(self, client, customer_headers):
        assert client.get("/api/admin/dashboard", headers=customer_headers).status_code == 403
