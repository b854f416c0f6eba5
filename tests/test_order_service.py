"""
Tests for the order service use cases
"""
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import Mock

import pytest

from core.exceptions import (
    InvalidStatusTransitionError,
    OrderActionError,
    OrderNotFoundError,
    OrderStoreError,
)
from core.schemas import OrderUpdate, ShipmentData
from services.order_service import OrderService, to_detail, to_summary
from services.order_store import OrderStore


def make_order(order_id=1, status="Review", shipment_data=None, **overrides):
    values = dict(
        id=order_id,
        created_at=datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc),
        status=status,
        customer_email="orders@example.com",
        email_subject="Transportopdracht",
        email_body=None,
        document_url=None,
        shipment_data=shipment_data,
    )
    values.update(overrides)
    return SimpleNamespace(**values)


@pytest.fixture
def store():
    return Mock(spec=OrderStore)


@pytest.fixture
def service(store):
    return OrderService(store, cache_ttl_seconds=60)


class TestViews:

    def test_summary_of_fenced_payload(self):
        summary = to_summary(make_order(shipment_data='```json\n{"goederen":[]}\n```'))

        assert summary.goods_count == 0
        assert summary.transport_type == "-"
        assert summary.loading_from == "-"
        assert summary.debtor == "orders"

    def test_summary_of_full_payload(self, order_data):
        summary = to_summary(make_order(shipment_data=order_data))

        assert summary.transport_type == "Next day"
        assert summary.loading_from == "03-05-2024 - 08:00"
        assert summary.loading_until == "03-05-2024 - 12:00"
        assert summary.goods_count == 1

    def test_detail_of_processed_order(self):
        detail = to_detail(make_order(status="Verwerkt", document_url="https://storage.googleapis.com/b/o.pdf"))

        assert detail.status_bucket == "processed"
        assert detail.badge_variant == "outline"
        assert detail.document_view == "restricted"
        assert detail.available_actions == ["save", "delete"]
        assert detail.shipment_data == {}

    def test_detail_sends_formatted_receipt_time(self):
        detail = to_detail(make_order())

        assert detail.received_at == "01-05-2024 08:00"
        assert detail.model_dump(mode="json")["received_at"] == "01-05-2024 08:00"

    def test_detail_of_unknown_status(self):
        detail = to_detail(make_order(status="Geannuleerd"))
        assert detail.status_bucket is None
        assert detail.badge_variant == "default"


class TestReads:

    def test_overview_groups_orders(self, service, store):
        store.list_orders.return_value = [
            make_order(3, "Verwerkt"),
            make_order(2, "Onbekend"),
            make_order(1, "Nieuw"),
        ]
        overview = service.get_overview()

        assert [row.id for row in overview.new] == [1]
        assert [row.id for row in overview.processed] == [3]
        assert [row.id for row in overview.unrecognized] == [2]
        assert overview.counts == {"new": 1, "in_progress": 0, "processed": 1, "unrecognized": 1}
        assert overview.total == 3
        store.list_orders.assert_called_once_with(limit=100)

    def test_overview_is_cached(self, service, store):
        store.list_orders.return_value = []
        service.get_overview()
        service.get_overview()
        assert store.list_orders.call_count == 1

    def test_expired_entries_are_evicted(self, store, monkeypatch):
        clock = {"now": 1000.0}
        monkeypatch.setattr("services.order_service.time", SimpleNamespace(monotonic=lambda: clock["now"]))
        service = OrderService(store, cache_ttl_seconds=1)
        store.list_orders_by_status.return_value = []
        store.get_order.return_value = None

        for index in range(50):
            service.get_orders_by_status(f"status-{index}")
            with pytest.raises(OrderNotFoundError):
                service.get_order(index)
            clock["now"] += 2

        assert len(service._cache) == 2

    def test_cache_size_is_bounded(self, store):
        service = OrderService(store, cache_ttl_seconds=60, cache_max_entries=10)
        store.list_orders_by_status.return_value = []

        for index in range(100):
            service.get_orders_by_status(f"status-{index}")

        assert len(service._cache) <= 10
        service.get_orders_by_status("status-99")
        assert store.list_orders_by_status.call_count == 100

    def test_cache_can_be_disabled(self, store):
        service = OrderService(store, cache_ttl_seconds=0)
        store.list_orders.return_value = []
        service.get_overview()
        service.get_overview()
        assert store.list_orders.call_count == 2

    def test_missing_order(self, service, store):
        store.get_order.return_value = None
        with pytest.raises(OrderNotFoundError):
            service.get_order_detail(7)

    def test_read_failures_propagate(self, service, store):
        store.list_orders.side_effect = OrderStoreError("connection refused")
        with pytest.raises(OrderStoreError):
            service.get_overview()

    def test_form_has_one_goods_row(self, service, store):
        store.get_order.return_value = make_order(shipment_data="NULL")
        form = service.get_order_form(1)
        assert len(form.shipment_data.goods_items) == 1


class TestStatusActions:

    def test_take_in_progress(self, service, store):
        store.get_order.return_value = make_order(status="Review")
        store.update_order.return_value = make_order(status="In Behandeling")

        detail = service.take_in_progress(1)

        store.update_order.assert_called_once_with(1, {"status": "In Behandeling"})
        assert detail.status == "In Behandeling"
        assert detail.available_actions == ["mark_processed", "save", "delete"]

    def test_mark_processed(self, service, store):
        store.get_order.return_value = make_order(status="In Behandeling")
        store.update_order.return_value = make_order(status="Verwerkt")

        assert service.mark_processed(1).status == "Verwerkt"
        store.update_order.assert_called_once_with(1, {"status": "Verwerkt"})

    def test_invalid_transition_does_not_write(self, service, store):
        store.get_order.return_value = make_order(status="Verwerkt")
        with pytest.raises(InvalidStatusTransitionError):
            service.take_in_progress(1)
        store.update_order.assert_not_called()

    def test_store_failure_becomes_generic_error(self, service, store):
        store.get_order.return_value = make_order(status="Review")
        store.update_order.side_effect = OrderStoreError("permission denied for table orders")

        with pytest.raises(OrderActionError) as exc_info:
            service.take_in_progress(1)
        assert exc_info.value.message == "Kon status niet bijwerken"

    def test_missing_order(self, service, store):
        store.get_order.return_value = None
        with pytest.raises(OrderNotFoundError):
            service.mark_processed(1)

    def test_write_invalidates_cached_views(self, service, store):
        store.list_orders.return_value = [make_order(status="Review")]
        store.get_order.return_value = make_order(status="Review")
        service.get_overview()
        service.get_order(1)

        store.update_order.return_value = make_order(status="In Behandeling")
        service.take_in_progress(1)

        store.list_orders.return_value = [make_order(status="In Behandeling")]
        store.get_order.return_value = make_order(status="In Behandeling")
        assert [row.id for row in service.get_overview().in_progress] == [1]
        assert service.get_order(1).status == "In Behandeling"
        assert store.list_orders.call_count == 2


class TestUpdateAndDelete:

    def test_update_writes_status_and_payload(self, service, store, order_data):
        store.update_order.return_value = make_order(status="Verwerkt", shipment_data=order_data)
        update = OrderUpdate(status="Verwerkt", shipment_data=ShipmentData.model_validate(order_data))

        detail = service.update_order(1, update)

        order_id, values = store.update_order.call_args.args
        assert order_id == 1
        assert values["status"] == "Verwerkt"
        assert values["shipment_data"]["goederen"] == [{"omschrijving": "Pallets", "aantal": 4, "gewicht_kg": 800}]
        assert detail.goods_count == 1

    def test_empty_update_only_reads(self, service, store):
        store.get_order.return_value = make_order()
        assert service.update_order(1, OrderUpdate()).id == 1
        store.update_order.assert_not_called()

    def test_update_failure_message(self, service, store):
        store.update_order.side_effect = OrderStoreError("timeout")
        with pytest.raises(OrderActionError) as exc_info:
            service.update_order(1, OrderUpdate(status="Verwerkt"))
        assert exc_info.value.message == "Kon order niet opslaan"

    def test_update_missing_order(self, service, store):
        store.update_order.return_value = None
        with pytest.raises(OrderNotFoundError):
            service.update_order(1, OrderUpdate(status="Verwerkt"))

    def test_delete(self, service, store):
        store.delete_order.return_value = True
        assert service.delete_order(1) is True
        store.delete_order.assert_called_once_with(1)

    def test_delete_missing_order(self, service, store):
        store.delete_order.return_value = False
        with pytest.raises(OrderNotFoundError):
            service.delete_order(1)

    def test_delete_failure_message(self, service, store):
        store.delete_order.side_effect = OrderStoreError("foreign key violation")
        with pytest.raises(OrderActionError) as exc_info:
            service.delete_order(1)
        assert exc_info.value.message == "Kon order niet verwijderen"
