# backend/modules/sales_reports/tests/test_sales_report_router.py

import pytest
from fastapi.testclient import TestClient

from app.app_factory import create_app
from modules.sales_reports.interfaces import InMemoryCreditSource, InMemoryOrderSource

from modules.sales_reports.tests.factories import OrderFactory

BASE_URL = "/api/v1/sales-reports"


def analytics_payload(**overrides):
    payload = {
        "restaurant_id": "rest-1",
        "start_date": "2026-10-16T00:00:00",
        "end_date": "2026-10-16T23:59:59",
        "menu_items": [
            {"id": "menu-paneer", "name": "Paneer Tikka", "category_name": "Starters", "price": 100.0}
        ],
        "allow_synthetic_data": False,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def orders():
    return [
        OrderFactory(payment_method="cash"),
        OrderFactory(payment_method="UPI via GPay"),
    ]


@pytest.fixture
def client(orders):
    app = create_app(InMemoryOrderSource(orders), InMemoryCreditSource())
    return TestClient(app)


class TestSalesReportRouter:
    """Test cases for the sales report endpoints"""

    def test_health(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["order_source"] is True

    def test_date_ranges(self, client):
        response = client.get(f"{BASE_URL}/date-ranges")

        assert response.status_code == 200
        labels = [entry["label"] for entry in response.json()]
        assert labels == [
            "Yesterday",
            "This Week",
            "Last 7 Days",
            "This Month",
            "Last 30 Days",
            "Last 3 Months",
        ]

    def test_analytics(self, client):
        response = client.post(f"{BASE_URL}/analytics", json=analytics_payload())

        assert response.status_code == 200
        data = response.json()
        assert data["data_source"] == "real"
        assert data["total_orders"] == 2
        assert data["total_revenue"] == pytest.approx(200.0)
        assert data["menu_item_sales"][0]["category_name"] == "Starters"

    def test_analytics_reversed_dates(self, client):
        payload = analytics_payload(start_date="2026-10-17T00:00:00", end_date="2026-10-16T00:00:00")

        response = client.post(f"{BASE_URL}/analytics", json=payload)

        assert response.status_code == 422

    def test_analytics_without_order_source(self):
        client = TestClient(create_app())

        response = client.post(f"{BASE_URL}/analytics", json=analytics_payload())

        assert response.status_code == 503
        assert response.json()["error_code"] == "ORDER_SOURCE_UNAVAILABLE"

    def test_analytics_store_unavailable(self):
        client = TestClient(create_app(InMemoryOrderSource(available=False)))

        response = client.post(f"{BASE_URL}/analytics", json=analytics_payload())

        assert response.status_code == 502
        body = response.json()
        assert body["error_code"] == "ORDER_RETRIEVAL_FAILED"
        assert body["detail"].startswith("Failed to fetch orders for analytics")

    def test_report_pdf(self, client):
        response = client.post(
            f"{BASE_URL}/report",
            json={"analytics": analytics_payload(), "title": "Spice Garden"},
        )

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert "sales-report-rest-1-20261016-20261016.pdf" in response.headers["content-disposition"]
        assert response.content.startswith(b"%PDF")

    def test_export_csv(self, client):
        response = client.post(
            f"{BASE_URL}/export",
            params={"format": "csv"},
            json={"analytics": analytics_payload(), "date_range_label": "Yesterday"},
        )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert response.text.startswith("Sales Report - Yesterday")

    def test_export_xlsx(self, client):
        response = client.post(
            f"{BASE_URL}/export",
            params={"format": "xlsx"},
            json={"analytics": analytics_payload()},
        )

        assert response.status_code == 200
        assert response.content[:2] == b"PK"

    def test_export_unsupported_format(self, client):
        response = client.post(
            f"{BASE_URL}/export",
            params={"format": "xml"},
            json={"analytics": analytics_payload()},
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "UNSUPPORTED_EXPORT_FORMAT"
