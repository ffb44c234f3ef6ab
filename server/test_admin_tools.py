import pytest
from unittest.mock import Mock, patch
import requests

import seed_data
from services import promotions


class TestSeeding:

    def test_seed_all_collections(self, client, store, admin_headers):
        response = client.post("/api/admin/seed", headers=admin_headers, json={})

        assert response.status_code == 200
        results = {result["collection"]: result for result in response.json()["results"]}
        assert set(results) == set(seed_data.SEEDERS)
        assert results["products"]["created"] == len(seed_data.SAMPLE_PRODUCTS)
        # categories are keyed by slug so product categoryId values resolve
        assert store.collection('categories').document('football-jerseys').get().exists

    def test_seeded_promo_codes_validate(self):
        seed_data.seed_all(['promoCodes'])
        assert promotions.validate_promo_code('250250', 800.0)["discount"] == 250.0
        assert promotions.validate_promo_code('100100', 400.0)["valid"] is False

    def test_non_empty_collection_is_skipped(self, client, admin_headers, add_product):
        add_product('messi-jersey')
        response = client.post("/api/admin/seed", headers=admin_headers, json={"collections": ["products"]})
        assert response.json()["results"] == [{"collection": "products", "created": 0, "skipped": True}]

    def test_force_overwrites_matching_documents(self, store, add_product):
        add_product('messi-jersey', price=1.0)
        result = seed_data.seed_collection('products', force=True)

        assert result["created"] == len(seed_data.SAMPLE_PRODUCTS)
        assert len(store.collection('products').get()) == len(seed_data.SAMPLE_PRODUCTS)
        assert store.collection('products').document('messi-jersey').get().get('price') != 1.0

    def test_force_keeps_promo_codes_unique(self, store):
        seed_data.seed_all(['promoCodes'])
        seed_data.seed_all(['promoCodes'], force=True)

        codes = sorted(doc.get('code') for doc in store.collection('promoCodes').stream())
        assert codes == ['100100', '250250']
        assert store.collection('promoCodes').document('100100').get().exists

    def test_force_twice_does_not_duplicate(self, store):
        seed_data.seed_all(force=True)
        seed_data.seed_all(force=True)
        for collection_name in ('products', 'videoPlayers', 'banners', 'testimonials', 'auctions'):
            expected = len(seed_data.SEEDERS[collection_name](seed_data.datetime.now(seed_data.timezone.utc)))
            assert len(store.collection(collection_name).get()) == expected

    def test_unknown_collection(self, client, admin_headers):
        response = client.post("/api/admin/seed", headers=admin_headers, json={"collections": ["giftCards"]})
        assert response.status_code == 400
        assert "giftCards" in response.json()["detail"]

    def test_seed_requires_admin(self, client, customer_headers):
        assert client.post("/api/admin/seed", headers=customer_headers, json={}).status_code == 403


class TestDiagnostics:

    @patch('routes.admin_tools.requests.head')
    def test_all_probes_pass(self, mock_head, client, admin_headers):
        mock_head.return_value = Mock(status_code=200)

        response = client.get("/api/admin/diagnostics", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["firestoreAvailable"] is False
        assert data["results"]["firestore"]["success"] is True
        assert data["results"]["storage"]["message"] == "Using in-memory media storage"
        mock_head.assert_called_once_with("https://www.google.com/favicon.ico", timeout=5)

    @patch('routes.admin_tools.requests.head')
    def test_network_failure_is_reported(self, mock_head, client, admin_headers):
        mock_head.side_effect = requests.ConnectionError("Name or service not known")

        data = client.get("/api/admin/diagnostics", headers=admin_headers).json()

        assert data["success"] is False
        assert data["results"]["network"]["success"] is False
        assert "Name or service not known" in data["results"]["network"]["details"]

    def test_storage_diagnostics(self, client, admin_headers):
        response = client.get("/api/admin/diagnostics/storage", headers=admin_headers)
        assert response.json()["success"] is True
