"""
Domain errors for the transport order dashboard
"""
from typing import Optional

# Generic, user-facing notices for failed writes
STATUS_UPDATE_FAILED = "Kon status niet bijwerken"
ORDER_DELETE_FAILED = "Kon order niet verwijderen"
ORDER_SAVE_FAILED = "Kon order niet opslaan"


class OrderError(Exception):
    """Base class for order errors"""


class OrderNotFoundError(OrderError):
    """The requested order does not exist"""

    def __init__(self, order_id: int):
        self.order_id = order_id
        super().__init__(f"Order {order_id} not found")


class OrderStoreError(OrderError):
    """The orders table rejected a read or a write"""


class OrderActionError(OrderError):
    """A write action failed; the message is safe to show to users"""

    def __init__(self, message: str, order_id: Optional[int] = None):
        self.message = message
        self.order_id = order_id
        super().__init__(message)


class InvalidStatusTransitionError(OrderError):
    """The requested action is not allowed from the current status"""

    def __init__(self, action: str, status: str):
        self.action = action
        self.status = status
        super().__init__(f"Cannot {action} an order with status {status!r}")
