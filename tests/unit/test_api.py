"""
Unit Tests - HTTP API
"""
import httpx
import pytest
from fastapi.testclient import TestClient

from stock_insights.config.settings import ReportingApiSettings
from stock_insights.ingestion import ReportingApiClient, SnapshotFetcher
from stock_insights.main import app
from stock_insights.serving.api.routes.classification import get_snapshot_fetcher


@pytest.fixture
def client():
    yield TestClient(app)
    app.dependency_overrides.clear()


def override_fetcher(handler) -> SnapshotFetcher:
    transport = httpx.MockTransport(handler)
    reporting = ReportingApiClient(
        ReportingApiSettings(base_url="http://reports.test"),
        client=httpx.AsyncClient(transport=transport),
    )
    fetcher = SnapshotFetcher(reporting)
    app.dependency_overrides[get_snapshot_fetcher] = lambda: fetcher
    return fetcher


class TestHealthEndpoints:
    """Tests for health endpoints"""

    def test_liveness(self, client):
        """Test liveness probe"""
        response = client.get("/api/v1/health/live")

        assert response.status_code == 200
        assert response.json() == {"status": "alive"}

    def test_readiness_without_fetcher(self, client):
        """Test readiness fails before startup has created the fetcher"""
        response = client.get("/api/v1/health/ready")

        assert response.status_code == 503

    def test_ready_after_startup(self):
        """Test readiness once the lifespan has run"""
        with TestClient(app) as started:
            response = started.get("/api/v1/health/ready")
            health = started.get("/api/v1/health").json()

        assert response.status_code == 200
        assert health["status"] == "healthy"
        assert health["checks"]["reporting_api"]["last_snapshot_items"] == 0

    def test_request_id_header(self, client):
        """Test request logging middleware echoes the request id"""
        response = client.get("/api/v1/health/live", headers={"X-Request-ID": "req-42"})

        assert response.headers["X-Request-ID"] == "req-42"
        assert "X-Response-Time" in response.headers


class TestClassificationEndpoints:
    """Tests for classification endpoints"""

    def test_classify(self, client, sample_records):
        """Test classifying a posted snapshot"""
        response = client.post("/api/v1/classification/classify", json={"items": sample_records})

        assert response.status_code == 200
        body = response.json()
        assert len(body["items"]) == 4
        assert body["items"][2]["riskLevel"] == "HIGH"
        assert body["items"][2]["recommendedAction"] == "DISCOUNT_SALE"
        assert body["summary"]["total_items"] == 4

    def test_classify_empty(self, client):
        """Test an empty snapshot is not an error"""
        response = client.post("/api/v1/classification/classify", json={"items": []})

        assert response.status_code == 200
        assert response.json()["items"] == []

    def test_classify_bad_demand_month(self, client):
        """Test a malformed demand month does not fail the request"""
        items = [{"id": "1", "monthlyDemand": [3, "n/a", 5]}, {"id": "2", "turnoverRate": 4}]

        response = client.post("/api/v1/classification/classify", json={"items": items})

        assert response.status_code == 200
        assert len(response.json()["items"]) == 2

    def test_classify_null_items(self, client):
        """Test a null item list is rejected"""
        response = client.post("/api/v1/classification/classify", json={"items": None})

        assert response.status_code == 422
        assert response.json()["retryable"] is False

    def test_quadrants(self, client, sample_records):
        """Test grouping by quadrant"""
        response = client.post("/api/v1/classification/quadrants", json={"items": sample_records})

        assert response.status_code == 200
        body = response.json()
        assert body["counts"] == {"STAR": 2, "QUESTION": 0, "CASH_COW": 0, "DOG": 2}
        assert body["avg_turnover"] == pytest.approx(7.675)
        assert {r["id"] for r in body["quadrants"]["STAR"]} == {"101", "102"}

    def test_strategies(self, client):
        """Test the strategy matrix"""
        response = client.get("/api/v1/classification/strategies")

        assert response.status_code == 200
        cells = {c["code"]: c for c in response.json()}
        assert len(cells) == 9
        assert cells["AX"]["management_priority"] == "Highest"
        assert cells["CZ"]["abc_class"] == "C"

    def test_snapshot(self, client, sample_records):
        """Test fetching and classifying the reporting snapshot"""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json={"turnoverAnalysis": sample_records})

        override_fetcher(handler)
        response = client.get("/api/v1/classification/snapshot", params={"category": "WEB"})

        assert response.status_code == 200
        assert len(response.json()["items"]) == 4
        assert seen["params"] == {"categoryCode": "WEB"}

    def test_snapshot_upstream_failure(self, client):
        """Test upstream failures surface as retryable 502"""
        override_fetcher(lambda request: httpx.Response(500))

        response = client.get("/api/v1/classification/snapshot")

        assert response.status_code == 502
        body = response.json()
        assert body["retryable"] is True
        assert body["upstream_status"] == 500

    def test_snapshot_without_fetcher(self, client):
        """Test the snapshot endpoint before startup"""
        response = client.get("/api/v1/classification/snapshot")

        assert response.status_code == 503
        assert response.json()["retryable"] is True
