"""
Tests for the HTTP API using FastAPI's TestClient.
"""

from datetime import datetime, timezone

import pytest

from conftest import image_file, slack_message
from execution_tracker.api.routes.sync import get_sync_engine_factory
from execution_tracker.errors import MessageSourceError
from execution_tracker.main import app
from execution_tracker.repositories import PhotoRepository, StoreRepository
from execution_tracker.services.sync_engine import build_sync_engine


def add_pending_photo(db, key="100.5:0", text=""):
    return PhotoRepository(db).create(
        message_id=None,
        source_key=key,
        image_url=f"https://blob.test/execution-images/{key}",
        raw_text=text,
        created_at=datetime(2026, 2, 2, 2, 40, tzinfo=timezone.utc),
    )


def test_root_and_health(client):
    assert client.get("/health").json()["status"] == "healthy"
    assert client.get("/").json()["endpoints"]["sync"] == "/api/sync"


class TestSync:
    def test_sync_with_date_range(self, client, fake_slack):
        fake_slack.messages = [slack_message("1770000000.000100", [image_file("a.jpg")])]

        response = client.post("/api/sync", json={"startDate": "2026-02-01", "endDate": "2026-02-10"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["count"] == 1
        assert body["scanned"] == 1
        assert body["hasMore"] is False
        assert body["errors"] == []

    def test_sync_without_body(self, client, fake_slack):
        fake_slack.messages = [slack_message("100.5", [image_file("a.jpg")])]

        body = client.post("/api/sync").json()

        assert body["success"] is True
        assert body["count"] == 1

    def test_missing_credentials_is_reported_not_raised(self, client, settings):
        app.dependency_overrides[get_sync_engine_factory] = lambda: build_sync_engine
        settings.slack_bot_token = ""

        response = client.post("/api/sync", json={})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is False
        assert "SLACK_BOT_TOKEN" in body["error"]

    def test_listing_failure(self, client, fake_slack):
        fake_slack.history_error = MessageSourceError("Slack API error: invalid_auth", "invalid_auth")

        body = client.post("/api/sync").json()

        assert body["success"] is False
        assert "invalid_auth" in body["error"]


class TestPhotos:
    def test_queue_lists_pending_with_store_suggestion(self, client, db):
        StoreRepository(db).create("Reliance Smart Koramangala")
        add_pending_photo(db, text="<@U012ABC> reliance smart koramangala endcap")

        body = client.get("/api/photos").json()

        assert body["total"] == 1
        assert body["total_pages"] == 1
        photo = body["photos"][0]
        assert photo["status"] == "pending"
        assert photo["store_suggestion"]["name"] == "Reliance Smart Koramangala"

    def test_queue_pagination(self, client, db):
        for i in range(3):
            add_pending_photo(db, key=f"100.{i}:0")

        body = client.get("/api/photos", params={"page": 2, "page_size": 2}).json()

        assert body["total"] == 3
        assert body["total_pages"] == 2
        assert len(body["photos"]) == 1

    def test_review_approve_then_conflict(self, client, db):
        store = StoreRepository(db).create("Koramangala")
        photo = add_pending_photo(db)

        response = client.post(
            f"/api/photos/{photo.id}/review",
            json={"action": "approve", "store_id": store.id, "brands": ["Brand A"]},
        )
        assert response.status_code == 200
        assert response.json()["status"] == "approved"
        assert response.json()["tagged_brands"] == ["Brand A"]

        again = client.post(f"/api/photos/{photo.id}/review", json={"action": "redundant"})
        assert again.status_code == 409
        assert again.json()["detail"]["success"] is False

    def test_review_unknown_photo(self, client):
        response = client.post("/api/photos/missing/review", json={"action": "redundant"})
        assert response.status_code == 404

    def test_review_reject_without_reason(self, client, db):
        photo = add_pending_photo(db)
        response = client.post(f"/api/photos/{photo.id}/review", json={"action": "reject"})
        assert response.status_code == 409

    def test_rejection_reasons(self, client):
        assert "Others" in client.get("/api/photos/rejection-reasons").json()

    def test_clear_queue(self, client, db):
        add_pending_photo(db, key="1:0")
        add_pending_photo(db, key="2:0")

        body = client.delete("/api/photos", params={"status": "pending"}).json()

        assert body == {"success": True, "deleted": 2}
        assert client.get("/api/photos").json()["total"] == 0

    def test_delete_photo(self, client, db):
        photo = add_pending_photo(db)
        assert client.delete(f"/api/photos/{photo.id}").status_code == 200
        assert client.delete(f"/api/photos/{photo.id}").status_code == 404


class TestStoresAndBrands:
    def test_create_and_list_stores(self, client):
        assert client.post("/api/stores", json={"name": "Koramangala"}).status_code == 201
        assert client.post("/api/stores", json={"name": "Koramangala"}).status_code == 409
        assert [s["name"] for s in client.get("/api/stores").json()] == ["Koramangala"]

    def test_seed_stores(self, client, settings, tmp_path):
        seed = tmp_path / "stores.yaml"
        seed.write_text("stores:\n  - name: Koramangala\n  - name: Whitefield\n")
        settings.stores_seed_file = str(seed)

        body = client.post("/api/stores/seed").json()

        assert body["success"] is True
        assert body["created"] == 2

    def test_seed_stores_missing_file(self, client, settings, tmp_path):
        settings.stores_seed_file = str(tmp_path / "missing.yaml")
        assert client.post("/api/stores/seed").status_code == 500

    def test_brand_lifecycle(self, client):
        store_id = client.post("/api/stores", json={"name": "Koramangala"}).json()["id"]

        created = client.post(
            "/api/brands", json={"name": "Brand A", "payout_amount": 250, "store_ids": [store_id]}
        )
        assert created.status_code == 201
        brand_id = created.json()["id"]
        assert client.get("/api/stores").json()[0]["eligible_brands"] == ["Brand A"]

        updated = client.put(f"/api/brands/{brand_id}", json={"name": "Brand B", "payout_amount": 300})
        assert updated.json()["name"] == "Brand B"
        assert client.get("/api/stores").json()[0]["eligible_brands"] == ["Brand B"]

        assert client.delete(f"/api/brands/{brand_id}").status_code == 200
        assert client.get("/api/brands").json() == []
        assert client.delete(f"/api/brands/{brand_id}").status_code == 404

    def test_negative_payout_is_rejected(self, client):
        assert client.post("/api/brands", json={"name": "Brand A", "payout_amount": -1}).status_code == 422


class TestDashboard:
    @pytest.fixture
    def approved_photo(self, client, db):
        store_id = client.post("/api/stores", json={"name": "Koramangala"}).json()["id"]
        client.post("/api/brands", json={"name": "Brand A", "payout_amount": 250, "store_ids": [store_id]})
        photo = add_pending_photo(db)
        client.post(
            f"/api/photos/{photo.id}/review",
            json={"action": "approve", "store_id": store_id, "brands": ["Brand A"]},
        )
        return photo

    def test_payout_report(self, client, approved_photo):
        body = client.get("/api/dashboard/payouts", params={"brand": "Brand A", "month": "2026-02"}).json()

        assert body["brand"] == "Brand A"
        row = body["rows"][0]
        assert row["store_name"] == "Koramangala"
        # 2026-02-02 08:10 IST falls in week 1
        assert row["weeks"][0] == "valid"
        assert row["earned"] == 250
        assert row["max_payout"] == 1000

    def test_payout_csv(self, client, approved_photo):
        response = client.get("/api/dashboard/payouts.csv", params={"brand": "Brand A", "month": "2026-02"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "attachment" in response.headers["content-disposition"]
        assert response.text.splitlines()[0] == "store,week_1,week_2,week_3,week_4,earned,max"

    def test_bad_month_and_unknown_brand(self, client):
        assert client.get("/api/dashboard/payouts", params={"brand": "X", "month": "Feb"}).status_code == 422
        assert client.get("/api/dashboard/payouts", params={"brand": "X", "month": "2026-02"}).status_code == 404

    def test_payout_csv_with_non_latin_brand_name(self, client):
        client.post("/api/brands", json={"name": "Brand ₹", "payout_amount": 250})

        response = client.get("/api/dashboard/payouts.csv", params={"brand": "Brand ₹", "month": "2026-02"})

        assert response.status_code == 200
        disposition = response.headers["content-disposition"]
        assert 'filename="payouts-Brand__-2026-02.csv"' in disposition
        assert "filename*=UTF-8''payouts-Brand_%E2%82%B9-2026-02.csv" in disposition
