"""
FastAPI dependencies
"""
from fastapi import Request
from sqlalchemy.engine import Engine

from services.order_service import OrderService


def get_engine(request: Request) -> Engine:
    return request.app.state.engine


def get_order_service(request: Request) -> OrderService:
    """The service built once in create_app"""
    return request.app.state.order_service
