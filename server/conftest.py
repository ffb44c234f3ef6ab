import os

# Tests run against the in-memory document store
os.environ['STORE_BACKEND'] = 'memory'
os.environ.setdefault('ENVIRONMENT', 'test')

import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import patch
from fastapi.testclient import TestClient

import firebase_init
from main import app

# Bearer tokens accepted by the patched Firebase token check
TOKENS = {
    'customer-token': {'uid': 'customer-1', 'email': 'fan@example.com', 'name': 'Football Fan'},
    'other-token': {'uid': 'customer-2', 'email': 'other@example.com', 'name': 'Other Fan'},
    'admin-token': {'uid': 'admin-1', 'email': 'admin@legendary-signatures.com', 'name': 'Store Admin'},
    'superadmin-token': {'uid': 'superadmin-1', 'email': 'owner@legendary-signatures.com', 'name': 'Owner'},
}


def _verify_id_token(id_token, *args, **kwargs):
    if id_token not in TOKENS:
        raise ValueError("Token could not be verified")
    return dict(TOKENS[id_token])


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(autouse=True)
def store():
    """Empty document stores with the admin accounts in place"""
    firebase_init.db.reset()
    firebase_init.fallback_db.reset()
    now = datetime.now(timezone.utc)
    for token, role in (('admin-token', 'admin'), ('superadmin-token', 'superadmin')):
        user = TOKENS[token]
        firebase_init.db.collection('users').document(user['uid']).set({
            'email': user['email'],
            'displayName': user['name'],
            'role': role,
            'createdAt': now,
        })
    yield firebase_init.db
    firebase_init.db.reset()
    firebase_init.fallback_db.reset()


@pytest.fixture(autouse=True)
def firebase_tokens():
    with patch('auth.auth.verify_id_token', side_effect=_verify_id_token) as verify:
        yield verify


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def customer_headers():
    return bearer('customer-token')


@pytest.fixture
def other_headers():
    return bearer('other-token')


@pytest.fixture
def admin_headers():
    return bearer('admin-token')


@pytest.fixture
def superadmin_headers():
    return bearer('superadmin-token')


@pytest.fixture
def add_product(store):
    """Write a product document and return its id"""
    def _add(product_id='messi-jersey', **fields):
        now = datetime.now(timezone.utc)
        product = {
            'title': 'Lionel Messi Signed Argentina Jersey',
            'type': 'shirt',
            'signedBy': 'Lionel Messi',
            'price': 400.0,
            'available': True,
            'featured': False,
            'categoryId': 'football-jerseys',
            'imageUrl': '/images/messi-signed-jersey.png',
            'tags': ['messi', 'argentina'],
            'viewCount': 0,
            'soldCount': 0,
            'createdAt': now,
            'updatedAt': now,
        }
        product.update(fields)
        store.collection('products').document(product_id).set(product)
        return product_id
    return _add


@pytest.fixture
def add_promo_code(store):
    """Write a promo code document and return its id"""
    def _add(promo_id='promo-1', **fields):
        now = datetime.now(timezone.utc)
        promo = {
            'code': 'SAVE10',
            'discountType': 'percentage',
            'discountValue': 10,
            'usageCount': 0,
            'startDate': now - timedelta(days=1),
            'endDate': now + timedelta(days=30),
            'isActive': True,
            'createdAt': now,
        }
        promo.update(fields)
        store.collection('promoCodes').document(promo_id).set(promo)
        return promo_id
    return _add


@pytest.fixture
def add_player(store):
    """Write a video player document and return its id"""
    def _add(player_id='player-messi', **fields):
        player = {
            'name': 'Lionel Messi',
            'position': 'Forward',
            'team': 'Inter Miami',
            'price': 499.99,
            'available': True,
            'featured': True,
            'createdAt': datetime.now(timezone.utc),
        }
        player.update(fields)
        store.collection('videoPlayers').document(player_id).set(player)
        return player_id
    return _add


@pytest.fixture
def checkout_customer():
    return {
        "firstName": "Ali",
        "lastName": "Hassan",
        "email": "ali@example.com",
        "phone": "+971 50 123 4567",
        "address": "1 Marina Walk",
        "city": "Dubai",
        "zipCode": "00000",
        "country": "UAE",
    }
