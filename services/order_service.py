"""
Order service with the dashboard use cases
"""
import logging
import time
from datetime import datetime, timezone
from threading import Lock
from typing import Any, Callable, Dict, List, Optional, Tuple

from core.exceptions import (
    ORDER_DELETE_FAILED,
    ORDER_SAVE_FAILED,
    STATUS_UPDATE_FAILED,
    OrderActionError,
    OrderNotFoundError,
    OrderStoreError,
)
from core.models import Order
from core.schemas import OrderDetail, OrderForm, OrdersOverview, OrderSummary, OrderUpdate
from services.order_data import (
    debtor_from_email,
    display_value,
    document_view,
    format_date_time,
    format_timestamp,
    goods_count,
    parse_order_data,
    section,
)
from services.order_form import build_shipment_form
from services.order_store import OrderStore
from services.order_workflow import (
    OrderAction,
    available_actions,
    badge_variant,
    group_orders,
    next_status,
    status_bucket,
)

logger = logging.getLogger(__name__)


def to_summary(order: Order) -> OrderSummary:
    """Overview row for an order"""
    payload = parse_order_data(order.shipment_data)
    details = section(payload, "transport_details")
    return OrderSummary(
        id=order.id,
        created_at=order.created_at,
        status=order.status,
        debtor=debtor_from_email(order.customer_email),
        customer_email=order.customer_email,
        email_subject=order.email_subject,
        transport_type=display_value(details.get("transport_type")),
        loading_from=format_date_time(details.get("datum_laden"), details.get("tijd_van")),
        loading_until=format_date_time(details.get("datum_laden"), details.get("tijd_tot")),
        goods_count=goods_count(payload),
    )


def to_detail(order: Order) -> OrderDetail:
    """Detail view of an order with its payload normalized"""
    payload = parse_order_data(order.shipment_data)
    bucket = status_bucket(order.status)
    return OrderDetail(
        id=order.id,
        created_at=order.created_at,
        received_at=format_timestamp(order.created_at),
        status=order.status,
        status_bucket=bucket.value if bucket else None,
        badge_variant=badge_variant(order.status),
        customer_email=order.customer_email,
        email_subject=order.email_subject,
        email_body=order.email_body,
        document_url=order.document_url,
        document_view=document_view(order.document_url),
        debtor=debtor_from_email(order.customer_email),
        shipment_data=payload,
        goods_count=goods_count(payload),
        available_actions=[action.value for action in available_actions(order.status)],
    )


class OrderService:
    """
    Reads and writes orders for the dashboard.

    Read results are cached for a few seconds; every successful write drops
    the cached overview and the cached view of the written order.
    """

    def __init__(
        self,
        store: OrderStore,
        list_limit: int = 100,
        cache_ttl_seconds: float = 3.0,
        cache_max_entries: int = 512,
    ):
        self.store = store
        self.list_limit = list_limit
        self.cache_ttl_seconds = cache_ttl_seconds
        self.cache_max_entries = cache_max_entries
        self._cache: Dict[Tuple[str, Any], Tuple[float, Any]] = {}
        self._cache_lock = Lock()

    # Cache

    def _cached(self, key: Tuple[str, Any], load: Callable[[], Any]) -> Any:
        if self.cache_ttl_seconds <= 0:
            return load()
        now = time.monotonic()
        with self._cache_lock:
            hit = self._cache.get(key)
            if hit is not None and now - hit[0] < self.cache_ttl_seconds:
                return hit[1]
        value = load()
        with self._cache_lock:
            self._evict(now)
            self._cache[key] = (now, value)
        return value

    def _evict(self, now: float):
        """Drop expired entries, then the oldest ones while the cache is full"""
        for key, (stored_at, _) in list(self._cache.items()):
            if now - stored_at >= self.cache_ttl_seconds:
                del self._cache[key]
        # dicts keep insertion order, so the first keys are the oldest
        while self._cache and len(self._cache) >= self.cache_max_entries:
            del self._cache[next(iter(self._cache))]

    def invalidate(self, order_id: Optional[int] = None):
        """Drop cached list views and, if given, the cached view of one order"""
        with self._cache_lock:
            for key in list(self._cache):
                kind, ident = key
                if kind in ("overview", "by_status") or (kind == "order" and ident == order_id):
                    del self._cache[key]

    # Reads (store failures propagate)

    def get_overview(self, limit: Optional[int] = None) -> OrdersOverview:
        limit = limit or self.list_limit
        return self._cached(("overview", limit), lambda: self._build_overview(limit))

    def _build_overview(self, limit: int) -> OrdersOverview:
        orders = self.store.list_orders(limit=limit)
        groups = group_orders(to_summary(order) for order in orders)
        return OrdersOverview(
            **groups,
            counts={name: len(rows) for name, rows in groups.items()},
            total=len(orders),
            generated_at=datetime.now(timezone.utc),
        )

    def get_orders_by_status(self, status: str) -> List[OrderSummary]:
        return self._cached(
            ("by_status", status),
            lambda: [to_summary(order) for order in self.store.list_orders_by_status(status)],
        )

    def get_order(self, order_id: int) -> Order:
        order = self._cached(("order", order_id), lambda: self.store.get_order(order_id))
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    def get_order_detail(self, order_id: int) -> OrderDetail:
        return to_detail(self.get_order(order_id))

    def get_order_form(self, order_id: int) -> OrderForm:
        order = self.get_order(order_id)
        return OrderForm(
            id=order.id,
            status=order.status,
            shipment_data=build_shipment_form(parse_order_data(order.shipment_data)),
        )

    # Writes (store failures become generic action errors)

    def _write(self, order_id: int, values: Dict[str, Any], failure_message: str) -> Order:
        try:
            order = self.store.update_order(order_id, values)
        except OrderStoreError as e:
            logger.error(f"Failed to update order {order_id}: {e}")
            raise OrderActionError(failure_message, order_id) from e
        if order is None:
            raise OrderNotFoundError(order_id)
        self.invalidate(order_id)
        return order

    def apply_action(self, order_id: int, action: OrderAction) -> OrderDetail:
        """Run a status transition after checking it against the stored status"""
        try:
            current = self.store.get_order(order_id)
        except OrderStoreError as e:
            logger.error(f"Failed to load order {order_id} for {OrderAction(action).value}: {e}")
            raise OrderActionError(STATUS_UPDATE_FAILED, order_id) from e
        if current is None:
            raise OrderNotFoundError(order_id)
        target = next_status(action, current.status)
        order = self._write(order_id, {"status": target}, STATUS_UPDATE_FAILED)
        logger.info(f"Order {order_id}: {current.status!r} -> {target!r}")
        return to_detail(order)

    def take_in_progress(self, order_id: int) -> OrderDetail:
        return self.apply_action(order_id, OrderAction.TAKE_IN_PROGRESS)

    def mark_processed(self, order_id: int) -> OrderDetail:
        return self.apply_action(order_id, OrderAction.MARK_PROCESSED)

    def update_order(self, order_id: int, update: OrderUpdate) -> OrderDetail:
        """Save status and payload from the edit form in one row update"""
        values: Dict[str, Any] = {}
        if update.status is not None:
            values["status"] = update.status
        if update.shipment_data is not None:
            values["shipment_data"] = update.shipment_data.to_payload()
        if not values:
            return self.get_order_detail(order_id)
        return to_detail(self._write(order_id, values, ORDER_SAVE_FAILED))

    def delete_order(self, order_id: int) -> bool:
        try:
            deleted = self.store.delete_order(order_id)
        except OrderStoreError as e:
            logger.error(f"Failed to delete order {order_id}: {e}")
            raise OrderActionError(ORDER_DELETE_FAILED, order_id) from e
        if not deleted:
            raise OrderNotFoundError(order_id)
        self.invalidate(order_id)
        return True
