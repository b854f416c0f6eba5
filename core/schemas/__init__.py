"""
Pydantic schemas for the transport order dashboard
"""
from .order import (
    LocationDetails,
    TransportDetails,
    GoodsItem,
    ShipmentData,
    OrderUpdate,
    OrderSummary,
    OrdersOverview,
    OrderDetail,
    OrderForm,
    OrderDeleted,
    blank_to_none,
    coerce_number,
)

__all__ = [
    # Payload schemas
    "LocationDetails",
    "TransportDetails",
    "GoodsItem",
    "ShipmentData",
    # Order schemas
    "OrderUpdate",
    "OrderSummary",
    "OrdersOverview",
    "OrderDetail",
    "OrderForm",
    "OrderDeleted",
    # Input coercion
    "blank_to_none",
    "coerce_number",
]
