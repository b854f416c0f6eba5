"""
API tests for the transport order dashboard
"""
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_order_service
from api.main import create_app
from core.exceptions import OrderStoreError
from services.order_service import OrderService
from services.order_store import OrderStore


class TestHealthEndpoints:
    """Test health check endpoints"""

    def test_root_endpoint(self, client):
        response = client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert "message" in data
        assert "version" in data

    def test_health_check(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["database"] == "healthy"
        assert "timestamp" in data

    def test_liveness_probe(self, client):
        response = client.get("/health/liveness")
        assert response.status_code == 200
        assert response.json()["status"] == "alive"

    def test_readiness_probe(self, client):
        response = client.get("/health/readiness")
        assert response.status_code == 200
        assert response.json()["status"] == "ready"


class TestOverviewEndpoints:
    """Test the grouped order overview"""

    def test_empty_overview(self, client):
        response = client.get("/orders")
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 0
        assert data["new"] == []
        assert data["counts"] == {"new": 0, "in_progress": 0, "processed": 0, "unrecognized": 0}

    def test_orders_are_grouped_newest_first(self, client, add_order, order_data):
        review = add_order(status="Review", shipment_data=order_data)
        nieuw = add_order(status="Nieuw")
        processed = add_order(status="Verwerkt")
        odd = add_order(status="Geannuleerd")

        data = client.get("/orders").json()

        assert [row["id"] for row in data["new"]] == [nieuw, review]
        assert [row["id"] for row in data["processed"]] == [processed]
        assert [row["id"] for row in data["unrecognized"]] == [odd]
        assert data["in_progress"] == []
        assert data["total"] == 4

        row = data["new"][1]
        assert row["debtor"] == "Hittra"
        assert row["transport_type"] == "Next day"
        assert row["loading_from"] == "03-05-2024 - 08:00"
        assert row["goods_count"] == 1

    def test_limit(self, client, add_order):
        for _ in range(3):
            add_order()
        assert client.get("/orders", params={"limit": 2}).json()["total"] == 2

    def test_invalid_limit(self, client):
        assert client.get("/orders", params={"limit": 0}).status_code == 422

    def test_by_status(self, client, add_order):
        add_order(status="Review")
        in_progress = add_order(status="In Behandeling")

        response = client.get("/orders/by-status/In Behandeling")
        assert response.status_code == 200
        assert [row["id"] for row in response.json()] == [in_progress]

    def test_missing_table_returns_500(self, settings):
        app = create_app(settings.model_copy(update={"DATABASE_CREATE_TABLES": False}))
        client = TestClient(app)

        response = client.get("/orders")
        assert response.status_code == 500
        assert response.json()["error"] == "Store unavailable"


class TestOrderDetailEndpoints:
    """Test single order views"""

    def test_get_order(self, client, add_order, order_data):
        order_id = add_order(shipment_data=order_data, document_url="https://files.example.com/1.pdf")

        response = client.get(f"/orders/{order_id}")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "Review"
        assert data["status_bucket"] == "new"
        assert data["document_view"] == "embed"
        assert data["received_at"] == "01-05-2024 08:01"
        assert data["shipment_data"]["laad_locatie"]["plaats"] == "Rotterdam"
        assert data["available_actions"] == ["take_in_progress", "save", "delete"]

    def test_fenced_payload_is_normalized(self, client, add_order):
        order_id = add_order(shipment_data='```json\n{"goederen":[]}\n```')

        data = client.get(f"/orders/{order_id}").json()
        assert data["shipment_data"] == {"goederen": []}
        assert data["goods_count"] == 0

    def test_order_not_found(self, client):
        response = client.get("/orders/999")
        assert response.status_code == 404
        assert response.json()["detail"] == "Order not found"

    def test_form(self, client, add_order):
        order_id = add_order(shipment_data=None)

        response = client.get(f"/orders/{order_id}/form")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "Review"
        assert data["shipment_data"]["goederen"] == [{"omschrijving": None, "aantal": None, "gewicht_kg": None}]


class TestWorkflowEndpoints:
    """Test status transitions"""

    def test_full_workflow(self, client, add_order):
        order_id = add_order(status="Review")

        response = client.post(f"/orders/{order_id}/take-in-progress")
        assert response.status_code == 200
        assert response.json()["status"] == "In Behandeling"
        assert response.json()["available_actions"] == ["mark_processed", "save", "delete"]

        response = client.post(f"/orders/{order_id}/mark-processed")
        assert response.status_code == 200
        assert response.json()["status"] == "Verwerkt"
        assert response.json()["available_actions"] == ["save", "delete"]

        overview = client.get("/orders").json()
        assert [row["id"] for row in overview["processed"]] == [order_id]

    def test_invalid_transition(self, client, add_order):
        order_id = add_order(status="Verwerkt")

        response = client.post(f"/orders/{order_id}/take-in-progress")
        assert response.status_code == 409
        assert client.get(f"/orders/{order_id}").json()["status"] == "Verwerkt"

    def test_mark_processed_requires_in_progress(self, client, add_order):
        order_id = add_order(status="Nieuw")
        assert client.post(f"/orders/{order_id}/mark-processed").status_code == 409

    def test_transition_on_missing_order(self, client):
        assert client.post("/orders/999/take-in-progress").status_code == 404


class TestUpdateAndDeleteEndpoints:
    """Test saving the edit form and deleting orders"""

    def test_save_form(self, client, add_order, order_data):
        order_id = add_order(shipment_data=order_data)
        payload = {
            "status": "In Behandeling",
            "shipment_data": {
                "laad_locatie": {"straat": "Havenweg 14", "plaats": "Rotterdam"},
                "transport_details": {"datum_laden": "2024-05-06", "transport_type": ""},
                "goederen": [
                    {"omschrijving": "Pallets", "aantal": "6", "gewicht_kg": "1200"},
                    {"omschrijving": "Dozen", "aantal": "", "gewicht_kg": "12,5"},
                ],
            },
        }

        response = client.put(f"/orders/{order_id}", json=payload)
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "In Behandeling"
        assert data["goods_count"] == 2

        stored = client.get(f"/orders/{order_id}").json()["shipment_data"]
        assert stored["laad_locatie"]["straat"] == "Havenweg 14"
        assert stored["laad_locatie"]["postcode"] is None
        assert stored["transport_details"]["datum_laden"] == "2024-05-06"
        assert stored["transport_details"]["transport_type"] is None
        assert stored["goederen"][0] == {"omschrijving": "Pallets", "aantal": 6, "gewicht_kg": 1200}
        assert stored["goederen"][1] == {"omschrijving": "Dozen", "aantal": None, "gewicht_kg": 12.5}

    def test_save_rejects_non_numeric_quantity(self, client, add_order):
        order_id = add_order()
        payload = {"shipment_data": {"goederen": [{"aantal": "veel"}]}}
        assert client.put(f"/orders/{order_id}", json=payload).status_code == 422

    @pytest.mark.parametrize("weight", ["nan", "inf", "-Infinity"])
    def test_save_rejects_non_finite_weight(self, client, add_order, weight):
        order_id = add_order()
        payload = {"shipment_data": {"goederen": [{"gewicht_kg": weight}]}}
        assert client.put(f"/orders/{order_id}", json=payload).status_code == 422

    def test_save_missing_order(self, client):
        response = client.put("/orders/999", json={"status": "Verwerkt"})
        assert response.status_code == 404

    def test_delete_order(self, client, add_order):
        order_id = add_order()

        response = client.delete(f"/orders/{order_id}")
        assert response.status_code == 200
        assert response.json() == {"deleted": True, "order_id": order_id}
        assert client.get(f"/orders/{order_id}").status_code == 404
        assert client.delete(f"/orders/{order_id}").status_code == 404


class TestWriteFailures:
    """Store failures on writes surface as generic Dutch messages"""

    @pytest.fixture
    def store(self):
        return Mock(spec=OrderStore)

    @pytest.fixture
    def failing_client(self, app, store):
        app.dependency_overrides[get_order_service] = lambda: OrderService(store, cache_ttl_seconds=0)
        yield TestClient(app)
        app.dependency_overrides.clear()

    def test_status_update_failure(self, failing_client, store):
        store.get_order.return_value = Mock(status="Review")
        store.update_order.side_effect = OrderStoreError("permission denied")

        response = failing_client.post("/orders/1/take-in-progress")
        assert response.status_code == 500
        assert response.json()["detail"] == "Kon status niet bijwerken"

    def test_delete_failure(self, failing_client, store):
        store.delete_order.side_effect = OrderStoreError("permission denied")

        response = failing_client.delete("/orders/1")
        assert response.status_code == 500
        assert response.json()["detail"] == "Kon order niet verwijderen"

    def test_save_failure(self, failing_client, store):
        store.update_order.side_effect = OrderStoreError("permission denied")

        response = failing_client.put("/orders/1", json={"status": "Verwerkt"})
        assert response.status_code == 500
        assert response.json()["detail"] == "Kon order niet opslaan"
