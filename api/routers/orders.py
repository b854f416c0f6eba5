"""
Order endpoints: overview, detail, workflow actions, edits and deletion
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from api.dependencies import get_order_service
from core.exceptions import InvalidStatusTransitionError, OrderActionError, OrderNotFoundError
from core.schemas import (
    OrderDeleted,
    OrderDetail,
    OrderForm,
    OrdersOverview,
    OrderSummary,
    OrderUpdate,
)
from services.order_service import OrderService
from services.order_workflow import OrderAction

logger = logging.getLogger(__name__)

router = APIRouter()


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")


def _run_action(service: OrderService, order_id: int, action: OrderAction) -> OrderDetail:
    try:
        return service.apply_action(order_id, action)
    except OrderNotFoundError:
        raise _not_found()
    except InvalidStatusTransitionError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except OrderActionError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.message)


@router.get("", response_model=OrdersOverview)
async def get_orders_overview(
    limit: Optional[int] = Query(None, ge=1, le=1000, description="Maximum number of orders"),
    service: OrderService = Depends(get_order_service),
):
    """Newest orders grouped by workflow status"""
    return service.get_overview(limit)


@router.get("/by-status/{order_status}", response_model=List[OrderSummary])
async def get_orders_by_status(
    order_status: str,
    service: OrderService = Depends(get_order_service),
):
    """Orders whose stored status equals the given value exactly"""
    return service.get_orders_by_status(order_status)


@router.get("/{order_id}", response_model=OrderDetail)
async def get_order(
    order_id: int,
    service: OrderService = Depends(get_order_service),
):
    """A single order with its normalized shipment payload"""
    try:
        return service.get_order_detail(order_id)
    except OrderNotFoundError:
        raise _not_found()


@router.get("/{order_id}/form", response_model=OrderForm)
async def get_order_form(
    order_id: int,
    service: OrderService = Depends(get_order_service),
):
    """Initial values for the edit form"""
    try:
        return service.get_order_form(order_id)
    except OrderNotFoundError:
        raise _not_found()


@router.post("/{order_id}/take-in-progress", response_model=OrderDetail)
async def take_in_progress(
    order_id: int,
    service: OrderService = Depends(get_order_service),
):
    """Take a new order into progress"""
    return _run_action(service, order_id, OrderAction.TAKE_IN_PROGRESS)


@router.post("/{order_id}/mark-processed", response_model=OrderDetail)
async def mark_processed(
    order_id: int,
    service: OrderService = Depends(get_order_service),
):
    """Mark an order in progress as processed"""
    return _run_action(service, order_id, OrderAction.MARK_PROCESSED)


@router.put("/{order_id}", response_model=OrderDetail)
async def update_order(
    order_id: int,
    order_update: OrderUpdate,
    service: OrderService = Depends(get_order_service),
):
    """Save status and shipment payload from the edit form"""
    try:
        return service.update_order(order_id, order_update)
    except OrderNotFoundError:
        raise _not_found()
    except OrderActionError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.message)


@router.delete("/{order_id}", response_model=OrderDeleted)
async def delete_order(
    order_id: int,
    service: OrderService = Depends(get_order_service),
):
    """Delete an order permanently"""
    try:
        service.delete_order(order_id)
    except OrderNotFoundError:
        raise _not_found()
    except OrderActionError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.message)
    return OrderDeleted(order_id=order_id)
