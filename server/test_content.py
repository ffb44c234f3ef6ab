import json
import pytest
from datetime import datetime, timedelta, timezone


def _window(start_days=-1, end_days=30):
    now = datetime.now(timezone.utc)
    return {
        "startDate": (now + timedelta(days=start_days)).isoformat(),
        "endDate": (now + timedelta(days=end_days)).isoformat(),
    }


class TestTestimonials:

    def test_public_list_shows_approved_only(self, client, admin_headers):
        client.post("/api/admin/testimonials", headers=admin_headers,
                    json={"name": "Sarah", "content": "Perfect condition", "approved": True, "featured": True})
        client.post("/api/admin/testimonials", headers=admin_headers,
                    json={"name": "Mark", "content": "Awaiting review"})

        data = client.get("/api/testimonials").json()
        assert [t["name"] for t in data["testimonials"]] == ["Sarah"]
        assert client.get("/api/admin/testimonials", headers=admin_headers).json()["count"] == 2

    def test_approve_testimonial(self, client, admin_headers):
        testimonial_id = client.post("/api/admin/testimonials", headers=admin_headers,
                                     json={"name": "Mark", "content": "Great service"}).json()["testimonial_id"]

        client.patch(f"/api/admin/testimonials/{testimonial_id}/approve", headers=admin_headers)
        assert client.get("/api/testimonials").json()["count"] == 1

    def test_rating_range(self, client, admin_headers):
        response = client.post("/api/admin/testimonials", headers=admin_headers,
                               json={"name": "Mark", "content": "Great", "rating": 6})
        assert response.status_code == 422

    def test_update_and_delete(self, client, admin_headers):
        testimonial_id = client.post("/api/admin/testimonials", headers=admin_headers,
                                     json={"name": "Mark", "content": "Great"}).json()["testimonial_id"]

        assert client.put(f"/api/admin/testimonials/{testimonial_id}", headers=admin_headers,
                          json={"rating": 4}).status_code == 200
        assert client.delete(f"/api/admin/testimonials/{testimonial_id}", headers=admin_headers).status_code == 200
        assert client.delete(f"/api/admin/testimonials/{testimonial_id}", headers=admin_headers).status_code == 404


class TestSettings:

    def test_unknown_section_is_empty(self, client):
        assert client.get("/api/settings/footer").json() == {"section": "footer", "data": {}, "updatedAt": None}

    def test_save_and_read_section(self, client, admin_headers):
        response = client.put("/api/admin/settings/general", headers=admin_headers,
                              json={"data": {"storeName": "Legendary Signatures", "currency": "AED"}})
        assert response.status_code == 200

        data = client.get("/api/settings/general").json()
        assert data["data"]["storeName"] == "Legendary Signatures"
        assert data["updatedAt"] is not None

    def test_section_name_is_restricted(self, client, admin_headers):
        response = client.put("/api/admin/settings/bad.section", headers=admin_headers, json={"data": {}})
        assert response.status_code == 422


class TestContact:

    def test_submit_and_handle_message(self, client, admin_headers):
        response = client.post("/api/contact", json={
            "name": "Ali",
            "email": "ali@example.com",
            "subject": "Certificate",
            "message": "Is the Messi jersey certificate included?",
        })
        assert response.status_code == 201
        message_id = response.json()["message_id"]

        assert client.get("/api/admin/contact?handled=false", headers=admin_headers).json()["count"] == 1
        client.patch(f"/api/admin/contact/{message_id}/handled", headers=admin_headers)
        assert client.get("/api/admin/contact?handled=false", headers=admin_headers).json()["count"] == 0
        assert client.get("/api/admin/contact?handled=true", headers=admin_headers).json()["count"] == 1

    def test_invalid_email(self, client):
        response = client.post("/api/contact", json={"name": "Ali", "email": "not-an-email", "message": "Hi"})
        assert response.status_code == 422

    def test_handling_unknown_message(self, client, admin_headers):
        assert client.patch("/api/admin/contact/nope/handled", headers=admin_headers).status_code == 404


class TestBanners:

    def _create(self, client, headers, files=None, **fields):
        banner = {"title": "Messi Collection", "imageUrl": "/images/messi-banner.png", **_window()}
        banner.update(fields)
        return client.post("/api/admin/banners", headers=headers, data={"banner": json.dumps(banner)}, files=files)

    def test_live_banners_by_position(self, client, admin_headers):
        self._create(client, admin_headers, position="home_hero")
        self._create(client, admin_headers, position="shop_top")
        self._create(client, admin_headers, position="home_hero", **_window(start_days=2, end_days=5))
        self._create(client, admin_headers, position="home_hero", active=False)

        assert client.get("/api/banners").json()["count"] == 2
        assert client.get("/api/banners?position=home_hero").json()["count"] == 1
        assert client.get("/api/admin/banners", headers=admin_headers).json()["count"] == 4

    def test_create_with_uploaded_images(self, client, admin_headers):
        response = self._create(client, admin_headers, imageUrl=None, files={
            "image": ("hero.png", b"\x89PNG\r\n", "image/png"),
            "mobileImage": ("hero-mobile.webp", b"RIFF0000WEBP", "image/webp"),
        })
        assert response.status_code == 201
        banner_id = response.json()["banner_id"]

        banner = client.get(f"/api/admin/banners/{banner_id}", headers=admin_headers).json()
        assert banner["imageUrl"].startswith("http://localhost/media/banners/")
        assert banner["mobileImageUrl"].startswith("http://localhost/media/banners/")

    def test_banner_needs_an_image(self, client, admin_headers):
        response = self._create(client, admin_headers, imageUrl=None)
        assert response.status_code == 400

    def test_window_must_end_after_start(self, client, admin_headers):
        response = self._create(client, admin_headers, **_window(start_days=5, end_days=1))
        assert response.status_code == 422

    def test_update_checks_window_against_stored_dates(self, client, admin_headers):
        banner_id = self._create(client, admin_headers).json()["banner_id"]
        past = (datetime.now(timezone.utc) - timedelta(days=10)).isoformat()

        response = client.put(f"/api/admin/banners/{banner_id}", headers=admin_headers, json={"endDate": past})
        assert response.status_code == 400

    def test_toggle_and_delete(self, client, admin_headers):
        banner_id = self._create(client, admin_headers).json()["banner_id"]

        assert client.patch(f"/api/admin/banners/{banner_id}/active", headers=admin_headers).json()["active"] is False
        assert client.get("/api/banners").json()["count"] == 0

        assert client.delete(f"/api/admin/banners/{banner_id}", headers=admin_headers).status_code == 200
        assert client.get(f"/api/admin/banners/{banner_id}", headers=admin_headers).status_code == 404


class TestCategories:

    def test_slug_generated_from_name(self, client, admin_headers):
        response = client.post("/api/admin/categories", headers=admin_headers,
                               json={"name": "Signed Football Boots", "order": 2})
        assert response.status_code == 201
        assert response.json()["slug"] == "signed-football-boots"

        category = client.get("/api/categories/signed-football-boots").json()
        assert category["name"] == "Signed Football Boots"

    def test_duplicate_slug(self, client, admin_headers):
        client.post("/api/admin/categories", headers=admin_headers, json={"name": "Photographs"})
        response = client.post("/api/admin/categories", headers=admin_headers, json={"name": "photographs"})
        assert response.status_code == 409

    def test_list_in_display_order(self, client, admin_headers):
        client.post("/api/admin/categories", headers=admin_headers, json={"name": "Memorabilia", "order": 4})
        client.post("/api/admin/categories", headers=admin_headers,
                    json={"name": "Football Jerseys", "order": 1, "featured": True})

        data = client.get("/api/categories").json()
        assert [c["slug"] for c in data["categories"]] == ["football-jerseys", "memorabilia"]
        assert client.get("/api/categories?featured=true").json()["count"] == 1

    def test_update_and_delete(self, client, admin_headers):
        category_id = client.post("/api/admin/categories", headers=admin_headers,
                                  json={"name": "Photographs"}).json()["category_id"]

        client.put(f"/api/admin/categories/{category_id}", headers=admin_headers, json={"description": "Signed photos"})
        assert client.get(f"/api/categories/{category_id}").json()["description"] == "Signed photos"

        assert client.delete(f"/api/admin/categories/{category_id}", headers=admin_headers).status_code == 200
        assert client.get(f"/api/categories/{category_id}").status_code == 404
