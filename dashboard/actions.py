"""
User actions of the order detail page

Status changes are shown optimistically: the new status is displayed before
the API answers and rolled back when the call fails.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, MutableMapping, Optional

from pydantic import ValidationError

from core.exceptions import InvalidStatusTransitionError
from dashboard.api_client import DashboardApiError, OrdersApiClient
from services.order_form import form_to_payload
from services.order_workflow import OrderAction, next_status

logger = logging.getLogger(__name__)

STATUS_FAILED_NOTICE = "Er ging iets mis bij het bijwerken van de status"
DELETE_FAILED_NOTICE = "Er ging iets mis bij het verwijderen"
SAVE_FAILED_NOTICE = "Er ging iets mis bij het opslaan"
INVALID_INPUT_NOTICE = "Controleer de invoer: aantal en gewicht moeten getallen zijn"


@dataclass
class ActionResult:
    ok: bool
    message: str
    order: Optional[Dict[str, Any]] = field(default=None)


def displayed_status(order_id: int, stored_status: str, overrides: MutableMapping[int, str]) -> str:
    """The optimistic status if one is pending, else the stored one"""
    return overrides.get(order_id, stored_status)


def run_status_action(
    client: OrdersApiClient,
    order_id: int,
    action: OrderAction,
    current_status: str,
    overrides: MutableMapping[int, str],
    show_status: Callable[[str], None] = lambda status: None,
) -> ActionResult:
    """Apply a workflow transition with an optimistic status and rollback"""
    try:
        target = next_status(action, current_status)
    except InvalidStatusTransitionError as e:
        logger.warning(f"Refusing action on order {order_id}: {e}")
        return ActionResult(False, STATUS_FAILED_NOTICE)

    overrides[order_id] = target
    show_status(target)
    try:
        if action == OrderAction.TAKE_IN_PROGRESS:
            order = client.take_in_progress(order_id)
        else:
            order = client.mark_processed(order_id)
    except DashboardApiError as e:
        logger.error(f"Status change {action.value} failed for order {order_id}: {e.message}")
        overrides.pop(order_id, None)
        show_status(current_status)
        return ActionResult(False, STATUS_FAILED_NOTICE)

    # The stored status is authoritative again once the API confirmed it
    overrides.pop(order_id, None)
    return ActionResult(True, f"Status bijgewerkt naar {order['status']}", order)


def run_delete(client: OrdersApiClient, order_id: int) -> ActionResult:
    try:
        client.delete_order(order_id)
    except DashboardApiError as e:
        logger.error(f"Deleting order {order_id} failed: {e.message}")
        return ActionResult(False, DELETE_FAILED_NOTICE)
    return ActionResult(True, f"Order #{order_id} verwijderd")


def run_save(
    client: OrdersApiClient,
    order_id: int,
    status: Optional[str],
    form_values: Dict[str, Any],
) -> ActionResult:
    """Validate the raw form values and save them with the status"""
    try:
        payload = form_to_payload(form_values)
    except ValidationError as e:
        logger.warning(f"Invalid form input for order {order_id}: {e}")
        return ActionResult(False, INVALID_INPUT_NOTICE)

    try:
        order = client.save_order(order_id, status, payload)
    except DashboardApiError as e:
        logger.error(f"Saving order {order_id} failed: {e.message}")
        return ActionResult(False, SAVE_FAILED_NOTICE)
    return ActionResult(True, "Opgeslagen!", order)
