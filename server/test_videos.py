import json
import pytest
from unittest.mock import patch

from database import OrderService
from error_handling import DatabaseError
from media_storage import get_media_storage


def _video_request(player_id='player-messi', **fields):
    request = {
        "playerId": player_id,
        "occasion": "Birthday",
        "recipientName": "Omar",
        "message": "Happy 10th birthday Omar!",
        "deliveryDate": "2025-03-01",
        "paymentMethod": "credit-card",
    }
    request.update(fields)
    return request


@pytest.fixture
def video_request(client, customer_headers, add_player):
    add_player()
    response = client.post("/api/video-requests", headers=customer_headers, json=_video_request())
    assert response.status_code == 201
    return response.json()


class TestPlayers:

    def test_only_available_players_are_listed(self, client, add_player):
        add_player('player-messi')
        add_player('player-retired', name='Retired Legend', available=False)

        data = client.get("/api/video-players").json()
        assert [player['id'] for player in data["players"]] == ['player-messi']

    def test_admin_creates_and_updates_player(self, client, admin_headers):
        response = client.post("/api/admin/video-players", headers=admin_headers, json={
            "name": "Kylian Mbappé",
            "price": 399.99,
        })
        assert response.status_code == 201
        player_id = response.json()["player_id"]

        client.put(f"/api/admin/video-players/{player_id}", headers=admin_headers, json={"price": 350})
        assert client.get(f"/api/video-players/{player_id}").json()["price"] == 350

    def test_unknown_player(self, client):
        assert client.get("/api/video-players/nobody").status_code == 404


class TestVideoRequests:

    def test_request_creates_video_order(self, client, store, video_request):
        assert video_request["order_id"].startswith("VID-")
        assert video_request["video_request_id"].startswith("VIDREQ-")
        assert video_request["price"] == 499.99
        assert video_request["stored_in"] == "firestore"

        order = store.collection('orders').document(video_request["order_id"]).get().to_dict()
        assert order["orderType"] == "video"
        assert order["shipping"] == 0.0
        assert order["tax"] == 0.0
        assert order["total"] == 499.99
        assert order["paymentStatus"] == "paid"
        assert order["videoRequest"]["recipientName"] == "Omar"
        assert order["customerInfo"]["email"] == "fan@example.com"

        request_doc = store.collection('videoRequests').document(video_request["video_request_id"]).get().to_dict()
        assert request_doc["orderId"] == video_request["order_id"]
        assert request_doc["userId"] == "customer-1"
        assert request_doc["status"] == "pending"

    def test_cash_on_delivery_request_is_unpaid(self, client, store, customer_headers, add_player):
        add_player()
        data = client.post("/api/video-requests", headers=customer_headers,
                           json=_video_request(paymentMethod="cash-on-delivery")).json()
        assert OrderService.get_order(data["order_id"])["paymentStatus"] == "pending"

    def test_unavailable_player(self, client, customer_headers, add_player):
        add_player(available=False)
        response = client.post("/api/video-requests", headers=customer_headers, json=_video_request())
        assert response.status_code == 409

    def test_unknown_player(self, client, customer_headers):
        response = client.post("/api/video-requests", headers=customer_headers, json=_video_request('nobody'))
        assert response.status_code == 404

    def test_customer_lists_own_requests(self, client, customer_headers, other_headers, video_request):
        assert client.get("/api/video-requests", headers=customer_headers).json()["count"] == 1
        assert client.get("/api/video-requests", headers=other_headers).json()["count"] == 0

    def test_other_customer_cannot_read_request(self, client, customer_headers, other_headers, video_request):
        request_id = video_request["video_request_id"]
        assert client.get(f"/api/video-requests/{request_id}", headers=customer_headers).status_code == 200
        assert client.get(f"/api/video-requests/{request_id}", headers=other_headers).status_code == 403

    def test_video_orders_show_with_customer_orders(self, client, customer_headers, video_request):
        data = client.get("/api/orders?orderType=video", headers=customer_headers).json()
        assert [order['id'] for order in data["orders"]] == [video_request["order_id"]]


class TestFulfilment:

    def _set_status(self, client, headers, request_id, status, **fields):
        return client.patch(f"/api/admin/video-requests/{request_id}/status", headers=headers,
                            json={"status": status, **fields})

    def test_accepting_moves_order_to_processing(self, client, admin_headers, video_request):
        response = self._set_status(client, admin_headers, video_request["video_request_id"], "accepted")

        assert response.status_code == 200
        order = OrderService.get_order(video_request["order_id"])
        assert order["orderStatus"] == "processing"
        assert order["videoRequest"]["status"] == "accepted"
        assert order["history"][-1]["comment"] == "Video request accepted"

    def test_completing_requires_a_video(self, client, admin_headers, video_request):
        request_id = video_request["video_request_id"]
        self._set_status(client, admin_headers, request_id, "accepted")

        response = self._set_status(client, admin_headers, request_id, "completed")
        assert response.status_code == 400
        assert response.json()["error"]["details"]["field"] == "videoUrl"

    def test_completing_with_video_url(self, client, store, admin_headers, video_request):
        request_id = video_request["video_request_id"]
        self._set_status(client, admin_headers, request_id, "accepted")

        response = self._set_status(client, admin_headers, request_id, "completed",
                                    videoUrl="https://cdn.example.com/omar.mp4")

        assert response.json()["videoUrl"] == "https://cdn.example.com/omar.mp4"
        assert store.collection('videoRequests').document(request_id).get().get('completedAt') is not None
        assert OrderService.get_order(video_request["order_id"])["orderStatus"] == "delivered"

    def test_pending_request_cannot_complete(self, client, admin_headers, video_request):
        response = self._set_status(client, admin_headers, video_request["video_request_id"], "completed",
                                    videoUrl="https://cdn.example.com/omar.mp4")
        assert response.status_code == 409

    def test_rejecting_cancels_order(self, client, admin_headers, video_request):
        self._set_status(client, admin_headers, video_request["video_request_id"], "rejected", comment="Unavailable")
        order = OrderService.get_order(video_request["order_id"])
        assert order["orderStatus"] == "cancelled"
        assert order["history"][-1]["comment"] == "Unavailable"

    def test_fulfil_with_uploaded_video(self, client, admin_headers, video_request):
        request_id = video_request["video_request_id"]
        self._set_status(client, admin_headers, request_id, "accepted")

        response = client.post(f"/api/admin/video-requests/{request_id}/fulfil", headers=admin_headers,
                               files={"videoFile": ("omar.mp4", b"\x00\x00\x00\x18ftypmp42", "video/mp4")})

        assert response.status_code == 200
        assert response.json()["videoUrl"].startswith(f"http://localhost/media/video-requests/{request_id}/")
        assert OrderService.get_order(video_request["order_id"])["orderStatus"] == "delivered"

    def test_fulfil_rejects_non_video_upload(self, client, admin_headers, video_request):
        request_id = video_request["video_request_id"]
        self._set_status(client, admin_headers, request_id, "accepted")

        response = client.post(f"/api/admin/video-requests/{request_id}/fulfil", headers=admin_headers,
                               files={"videoFile": ("notes.txt", b"hello", "text/plain")})
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "STORAGE_UPLOAD_ERROR"

    def test_fulfilling_pending_request_stores_nothing(self, client, admin_headers, video_request):
        storage = get_media_storage()
        stored_before = set(storage.objects)

        response = client.post(f"/api/admin/video-requests/{video_request['video_request_id']}/fulfil",
                               headers=admin_headers,
                               files={"videoFile": ("omar.mp4", b"\x00\x00\x00\x18ftypmp42", "video/mp4")})

        assert response.status_code == 409
        assert set(storage.objects) == stored_before

    @patch('routes.videos.video_service.update_video_request_status')
    def test_failed_fulfilment_removes_uploads(self, mock_update, client, admin_headers, video_request):
        mock_update.side_effect = DatabaseError("Firestore unavailable", "update", "videoRequests")
        request_id = video_request["video_request_id"]
        self._set_status(client, admin_headers, request_id, "accepted")
        storage = get_media_storage()
        stored_before = set(storage.objects)

        response = client.post(f"/api/admin/video-requests/{request_id}/fulfil", headers=admin_headers, files={
            "videoFile": ("omar.mp4", b"\x00\x00\x00\x18ftypmp42", "video/mp4"),
            "thumbnail": ("omar.png", b"\x89PNG\r\n\x1a\n", "image/png"),
        })

        assert response.status_code == 503
        assert set(storage.objects) == stored_before

    def test_admin_lists_by_status(self, client, admin_headers, video_request):
        assert client.get("/api/admin/video-requests?status=pending", headers=admin_headers).json()["count"] == 1
        assert client.get("/api/admin/video-requests?status=accepted", headers=admin_headers).json()["count"] == 0

    def test_payment_update_follows_order_payment_rules(self, client, store, admin_headers, customer_headers,
                                                        add_player):
        add_player()
        created = client.post("/api/video-requests", headers=customer_headers,
                              json=_video_request(paymentMethod="cash-on-delivery")).json()
        request_id = created["video_request_id"]

        response = client.patch(f"/api/admin/video-requests/{request_id}/payment", headers=admin_headers,
                                json={"paymentStatus": "paid"})

        assert response.status_code == 200
        assert OrderService.get_order(created["order_id"])["paymentStatus"] == "paid"
        assert store.collection('videoRequests').document(request_id).get().get('paymentStatus') == 'paid'

        again = client.patch(f"/api/admin/video-requests/{request_id}/payment", headers=admin_headers,
                             json={"paymentStatus": "failed"})
        assert again.status_code == 409


class TestVideoCatalog:

    def test_admin_creates_video_with_uploads(self, client, admin_headers):
        response = client.post("/api/admin/videos", headers=admin_headers, data={
            "video": json.dumps({"title": "Messi says hello", "player": "Lionel Messi", "featured": True}),
        }, files={
            "videoFile": ("hello.mp4", b"\x00\x00\x00\x18ftypmp42", "video/mp4"),
            "thumbnail": ("hello.png", b"\x89PNG\r\n", "image/png"),
        })

        assert response.status_code == 201
        data = response.json()
        assert data["videoUrl"].startswith("http://localhost/media/videos/")
        assert data["thumbnailUrl"].startswith("http://localhost/media/thumbnails/")

        featured = client.get("/api/videos?featured=true").json()
        assert [video['id'] for video in featured["videos"]] == [data["video_id"]]

    def test_video_form_must_be_valid_json_model(self, client, admin_headers):
        response = client.post("/api/admin/videos", headers=admin_headers,
                               data={"video": json.dumps({"title": "No player"})})
        assert response.status_code == 422

    def test_update_and_delete_video(self, client, admin_headers):
        created = client.post("/api/admin/videos", headers=admin_headers, data={
            "video": json.dumps({"title": "Clip", "player": "Neymar Jr", "videoUrl": "https://cdn.example.com/a.mp4"}),
        }).json()
        video_id = created["video_id"]

        client.put(f"/api/admin/videos/{video_id}", headers=admin_headers, json={"title": "Renamed"})
        assert client.get(f"/api/videos/{video_id}").json()["title"] == "Renamed"

        assert client.delete(f"/api/admin/videos/{video_id}", headers=admin_headers).status_code == 200
        assert client.get(f"/api/videos/{video_id}").status_code == 404
