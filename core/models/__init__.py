"""
Core models for the transport order dashboard
"""
from .base import BaseModel, Base
from .order import Order, OrderStatus

__all__ = [
    "BaseModel",
    "Base",
    "Order",
    "OrderStatus",
]
