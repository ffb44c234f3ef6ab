import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

from error_handling import PromoCodeError
from services import promotions


def _dates(start_days=-1, end_days=30):
    now = datetime.now(timezone.utc)
    return {
        "startDate": (now + timedelta(days=start_days)).isoformat(),
        "endDate": (now + timedelta(days=end_days)).isoformat(),
    }


class TestValidation:

    def test_percentage_discount_capped_by_max_discount(self, add_promo_code):
        add_promo_code(code='100100', discountValue=10, maxDiscount=200)
        result = promotions.validate_promo_code('100100', 5000.0)
        assert result == {
            "valid": True,
            "discount": 200.0,
            "promoCodeId": "promo-1",
            "message": "Promo code applied successfully",
        }

    def test_fixed_discount_never_exceeds_total(self, add_promo_code):
        add_promo_code(code='250250', discountType='fixed', discountValue=250)
        assert promotions.validate_promo_code('250250', 100.0)["discount"] == 100.0

    def test_unknown_code(self):
        result = promotions.validate_promo_code('NOPE', 100.0)
        assert result["valid"] is False
        assert result["discount"] == 0.0
        assert result["message"] == "Invalid promo code"

    def test_inactive_code_is_invalid(self, add_promo_code):
        add_promo_code(isActive=False)
        assert promotions.validate_promo_code('SAVE10', 100.0)["message"] == "Invalid promo code"

    def test_expired_code(self, add_promo_code):
        now = datetime.now(timezone.utc)
        add_promo_code(startDate=now - timedelta(days=30), endDate=now - timedelta(days=1))
        assert promotions.validate_promo_code('SAVE10', 100.0)["message"] == "Promo code has expired"

    def test_code_not_started_yet(self, add_promo_code):
        now = datetime.now(timezone.utc)
        add_promo_code(startDate=now + timedelta(days=1), endDate=now + timedelta(days=10))
        assert promotions.validate_promo_code('SAVE10', 100.0)["valid"] is False

    def test_usage_limit_reached(self, add_promo_code):
        add_promo_code(usageLimit=5, usageCount=5)
        assert promotions.validate_promo_code('SAVE10', 100.0)["message"] == "Promo code has reached its usage limit"

    def test_minimum_order_value(self, add_promo_code):
        add_promo_code(minOrderValue=500)
        result = promotions.validate_promo_code('SAVE10', 499.0)
        assert result["message"] == "Order total must be at least $500 to use this code"

    def test_lookup_failure_is_reported_as_invalid(self):
        with patch('services.promotions.PromoCodeService.find_by_code', side_effect=Exception("boom")):
            result = promotions.validate_promo_code('SAVE10', 100.0)
        assert result["valid"] is False
        assert result["message"] == "Error validating promo code"

    def test_validate_endpoint_is_public(self, client, add_promo_code):
        add_promo_code()
        response = client.post("/api/promo-codes/validate", json={"code": " SAVE10 ", "orderTotal": 300})
        assert response.status_code == 200
        assert response.json()["discount"] == 30.0


class TestCodeGeneration:

    def test_generated_code_is_six_digits(self):
        code = promotions.generate_unique_code()
        assert len(code) == 6 and code.isdigit()

    def test_generation_gives_up_after_repeated_collisions(self, add_promo_code):
        add_promo_code(code='123456')
        with patch('services.promotions.generate_random_code', return_value='123456'):
            with pytest.raises(PromoCodeError):
                promotions.generate_unique_code()

    def test_generate_endpoint(self, client, admin_headers):
        response = client.get("/api/admin/promo-codes/generate", headers=admin_headers)
        assert response.status_code == 200
        assert len(response.json()["code"]) == 6


class TestAdminPromoCodes:

    def test_create_with_generated_code(self, client, store, admin_headers):
        response = client.post("/api/admin/promo-codes", headers=admin_headers, json={
            "discountType": "percentage",
            "discountValue": 15,
            **_dates(),
        })

        assert response.status_code == 201
        data = response.json()
        assert data["code"].isdigit()
        promo = store.collection('promoCodes').document(data["promo_id"]).get().to_dict()
        assert promo["usageCount"] == 0
        assert promo["createdBy"] == "admin-1"

    def test_create_uppercases_code(self, client, admin_headers):
        response = client.post("/api/admin/promo-codes", headers=admin_headers, json={
            "code": "summer24",
            "discountType": "fixed",
            "discountValue": 50,
            **_dates(),
        })
        assert response.json()["code"] == "SUMMER24"

    def test_code_validates_as_the_admin_typed_it(self, client, admin_headers):
        client.post("/api/admin/promo-codes", headers=admin_headers, json={
            "code": "summer24",
            "discountType": "fixed",
            "discountValue": 50,
            **_dates(),
        })
        response = client.post("/api/promo-codes/validate", json={"code": "summer24", "orderTotal": 300})
        assert response.json()["valid"] is True
        assert response.json()["discount"] == 50.0

    def test_duplicate_code_is_rejected(self, client, admin_headers, add_promo_code):
        add_promo_code(code='SUMMER24')
        response = client.post("/api/admin/promo-codes", headers=admin_headers, json={
            "code": "SUMMER24",
            "discountType": "fixed",
            "discountValue": 50,
            **_dates(),
        })
        assert response.status_code == 409
        assert response.json()["error"]["code"] == "DUPLICATE"

    def test_percentage_above_100_is_rejected(self, client, admin_headers):
        response = client.post("/api/admin/promo-codes", headers=admin_headers, json={
            "discountType": "percentage",
            "discountValue": 120,
            **_dates(),
        })
        assert response.status_code == 422

    def test_update_rejects_window_ending_before_start(self, client, admin_headers, add_promo_code):
        add_promo_code()
        response = client.put("/api/admin/promo-codes/promo-1", headers=admin_headers, json=_dates(start_days=5, end_days=2))
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "PROMO_CODE_ERROR"

    def test_update_cannot_take_another_codes_name(self, client, admin_headers, add_promo_code):
        add_promo_code('promo-1', code='SAVE10')
        add_promo_code('promo-2', code='SAVE20')
        response = client.put("/api/admin/promo-codes/promo-2", headers=admin_headers, json={"code": "save10"})
        assert response.status_code == 409

    def test_update_keeps_own_code(self, client, store, admin_headers, add_promo_code):
        add_promo_code()
        response = client.put("/api/admin/promo-codes/promo-1", headers=admin_headers,
                              json={"code": "SAVE10", "discountValue": 12})
        assert response.status_code == 200
        assert store.collection('promoCodes').document('promo-1').get().get('discountValue') == 12

    def test_list_get_and_delete(self, client, store, admin_headers, add_promo_code):
        add_promo_code()
        assert client.get("/api/admin/promo-codes", headers=admin_headers).json()["count"] == 1
        assert client.get("/api/admin/promo-codes/promo-1", headers=admin_headers).json()["code"] == "SAVE10"

        assert client.delete("/api/admin/promo-codes/promo-1", headers=admin_headers).status_code == 200
        assert client.get("/api/admin/promo-codes/promo-1", headers=admin_headers).status_code == 404
