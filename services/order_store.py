"""
Access to the `orders` table
"""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from core.database import session_scope
from core.exceptions import OrderStoreError
from core.models import Order

logger = logging.getLogger(__name__)

# Everything else on a row is written once by the ingestion workflow
UPDATABLE_FIELDS = frozenset({"status", "shipment_data"})


class OrderStore:
    """Table operations on orders; every call is its own transaction"""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def list_orders(self, limit: int = 100) -> List[Order]:
        """Newest orders first"""
        try:
            with session_scope(self.session_factory) as db:
                return (
                    db.query(Order)
                    .order_by(desc(Order.created_at), desc(Order.id))
                    .limit(limit)
                    .all()
                )
        except SQLAlchemyError as e:
            logger.error(f"Error fetching orders: {e}")
            raise OrderStoreError(f"Failed to fetch orders: {e}") from e

    def get_order(self, order_id: int) -> Optional[Order]:
        """A single order, or None when the id does not exist"""
        try:
            with session_scope(self.session_factory) as db:
                return db.query(Order).filter(Order.id == order_id).first()
        except SQLAlchemyError as e:
            logger.error(f"Error fetching order {order_id}: {e}")
            raise OrderStoreError(f"Failed to fetch order: {e}") from e

    def list_orders_by_status(self, status: str) -> List[Order]:
        """Orders with exactly this status, newest first"""
        try:
            with session_scope(self.session_factory) as db:
                return (
                    db.query(Order)
                    .filter(Order.status == status)
                    .order_by(desc(Order.created_at), desc(Order.id))
                    .all()
                )
        except SQLAlchemyError as e:
            logger.error(f"Error fetching orders by status {status!r}: {e}")
            raise OrderStoreError(f"Failed to fetch orders: {e}") from e

    def update_order(self, order_id: int, values: Dict[str, Any]) -> Optional[Order]:
        """
        Write a partial set of columns and return the updated order.

        Only `status` and `shipment_data` may change. Returns None when the id
        does not exist.
        """
        unknown = set(values) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

        try:
            with session_scope(self.session_factory) as db:
                order = db.query(Order).filter(Order.id == order_id).first()
                if order is None:
                    return None
                for field, value in values.items():
                    setattr(order, field, value)
                db.flush()
            logger.info(f"Updated order {order_id}: {', '.join(sorted(values))}")
            return order
        except SQLAlchemyError as e:
            logger.error(f"Error updating order {order_id}: {e}")
            raise OrderStoreError(f"Failed to update order: {e}") from e

    def delete_order(self, order_id: int) -> bool:
        """Remove the row; False when the id does not exist"""
        try:
            with session_scope(self.session_factory) as db:
                deleted = db.query(Order).filter(Order.id == order_id).delete(synchronize_session=False)
            if deleted:
                logger.info(f"Deleted order {order_id}")
            return bool(deleted)
        except SQLAlchemyError as e:
            logger.error(f"Error deleting order {order_id}: {e}")
            raise OrderStoreError(f"Failed to delete order: {e}") from e
