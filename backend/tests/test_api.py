"""API tests for ingestion, normalization and analytics endpoints"""
import io
import uuid

import pytest

from conftest import CATALOG_HEADER, CATALOG_ROWS


@pytest.fixture
def catalog_bytes():
    return (CATALOG_HEADER + "".join(CATALOG_ROWS)).encode("utf-8")


@pytest.fixture
def upload_id(client, catalog_bytes):
    """Upload the sample catalog through the API"""
    response = client.post(
        "/api/v1/ingest/upload",
        files={"file": ("catalog.csv", io.BytesIO(catalog_bytes), "text/csv")},
    )
    assert response.status_code == 201
    return response.json()["upload_id"]


@pytest.fixture
def normalized_upload_id(client, upload_id):
    response = client.post(f"/api/v1/normalization/process/{upload_id}")
    assert response.status_code == 200
    return upload_id


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_root(client):
    assert client.get("/").json()["status"] == "running"


class TestIngestionEndpoints:

    def test_upload_response(self, client, catalog_bytes):
        response = client.post(
            "/api/v1/ingest/upload",
            files={"file": ("catalog.csv", io.BytesIO(catalog_bytes), "text/csv")},
        )
        data = response.json()

        assert response.status_code == 201
        assert data["status"] == "ingested"
        assert data["row_count"] == 12
        assert "packsize" in data["detected_headers"]
        assert data["preview_data"]["packsize"][0] == "600-800 g"

    def test_upload_rejects_extension(self, client):
        response = client.post(
            "/api/v1/ingest/upload",
            files={"file": ("catalog.xlsx", io.BytesIO(b"data"), "application/octet-stream")},
        )
        assert response.status_code == 400

    def test_upload_missing_column(self, client):
        response = client.post(
            "/api/v1/ingest/upload",
            files={"file": ("catalog.csv", io.BytesIO(b"name,price\nOnion,40\n"), "text/csv")},
        )
        assert response.status_code == 422
        assert "packsize" in response.json()["detail"]

    def test_status(self, client, upload_id):
        response = client.get(f"/api/v1/ingest/status/{upload_id}")
        assert response.status_code == 200
        assert response.json()["status"] == "ingested"

    def test_status_not_found(self, client):
        response = client.get(f"/api/v1/ingest/status/{uuid.uuid4()}")
        assert response.status_code == 404


class TestNormalizationEndpoints:

    def test_preview(self, client):
        response = client.post(
            "/api/v1/normalization/preview",
            json={"labels": ["600-800 g", "1 l", "Combo", None]},
        )
        items = response.json()["items"]

        assert response.status_code == 200
        assert items[0] == {"packsize": "600-800 g", "quantity": 700.0, "unit": "g", "rule": "gram"}
        assert items[1]["quantity"] == 1000.0
        assert items[1]["unit"] == "ml"
        assert items[2]["quantity"] is None
        assert items[2]["unit"] is None
        assert items[3]["packsize"] is None

    def test_preview_requires_labels(self, client):
        response = client.post("/api/v1/normalization/preview", json={"labels": []})
        assert response.status_code == 422

    def test_preview_rejects_long_label(self, client):
        response = client.post("/api/v1/normalization/preview", json={"labels": ["g" * 256]})
        assert response.status_code == 422

    def test_process(self, client, upload_id):
        response = client.post(f"/api/v1/normalization/process/{upload_id}")
        data = response.json()

        assert response.status_code == 200
        assert data["upload_id"] == upload_id
        assert data["parsed_records"] == 10
        assert data["priced_per_100g"] == 5
        assert client.get(f"/api/v1/ingest/status/{upload_id}").json()["status"] == "normalized"

    def test_process_not_found(self, client):
        response = client.post(f"/api/v1/normalization/process/{uuid.uuid4()}")
        assert response.status_code == 404

    def test_process_invalid_id(self, client):
        response = client.post("/api/v1/normalization/process/not-a-uuid")
        assert response.status_code == 422

    def test_quality_report(self, client, upload_id):
        response = client.get(f"/api/v1/normalization/quality/{upload_id}")
        data = response.json()

        assert response.status_code == 200
        assert data["summary"]["unparseable_records"] == 1
        assert data["summary"]["missing_labels"] == 1
        assert [issue["rule_name"] for issue in data["errors"]] == ["unparseable_packsize"]
        assert [issue["rule_name"] for issue in data["warnings"]] == ["unknown_unit"]

    def test_quality_report_not_found(self, client):
        response = client.get(f"/api/v1/normalization/quality/{uuid.uuid4()}")
        assert response.status_code == 404


class TestAnalyticsEndpoints:

    def test_cheapest(self, client, normalized_upload_id):
        response = client.get(
            "/api/v1/analytics/cheapest-per-100g",
            params={"upload_id": normalized_upload_id, "limit": 3},
        )
        assert response.status_code == 200
        assert [row["product_name"] for row in response.json()] == ["Onion", "Basmati Rice", "Potato Chips"]

    def test_best_value(self, client, normalized_upload_id):
        response = client.get("/api/v1/analytics/best-value", params={"upload_id": normalized_upload_id})
        assert len(response.json()) == 5

    def test_value_segments(self, client, normalized_upload_id):
        data = client.get(
            "/api/v1/analytics/value-segments",
            params={"upload_id": normalized_upload_id},
        ).json()

        assert data["average_price_per_100g"] == pytest.approx(33.042)
        premium = sorted(row["product_name"] for row in data["items"] if row["value_label"] == "Premium")
        assert premium == ["Nachos", "Paneer", "Potato Chips"]

    def test_top_premium(self, client, normalized_upload_id):
        rows = client.get("/api/v1/analytics/top-premium", params={"upload_id": normalized_upload_id}).json()
        assert rows[0]["product_name"] == "Nachos"

    def test_category_scores(self, client, normalized_upload_id):
        rows = client.get(
            "/api/v1/analytics/category-value-scores",
            params={"upload_id": normalized_upload_id},
        ).json()
        assert rows[0]["category"] == "Fruits & Vegetables"

    def test_price_rating_cap(self, client, normalized_upload_id):
        rows = client.get(
            "/api/v1/analytics/price-rating",
            params={"upload_id": normalized_upload_id, "max_price_per_100g": 45},
        ).json()
        assert len(rows) == 3

    def test_price_rating_rejects_non_positive_cap(self, client):
        response = client.get("/api/v1/analytics/price-rating", params={"max_price_per_100g": 0})
        assert response.status_code == 422

    def test_discounted(self, client, normalized_upload_id):
        rows = client.get("/api/v1/analytics/discounted", params={"upload_id": normalized_upload_id}).json()
        assert len(rows) == 8

    def test_analytics_before_normalization(self, client, upload_id):
        response = client.get("/api/v1/analytics/value-segments", params={"upload_id": upload_id})
        assert response.json() == {"average_price_per_100g": None, "items": []}
