"""
Status workflow for transport orders

    Review / Nieuw  --take_in_progress-->  In Behandeling  --mark_processed-->  Verwerkt

Processed is terminal. Deleting is allowed from any state and is not a
transition.
"""
import enum
import logging
from typing import Dict, Iterable, List, Optional, TypeVar

from core.exceptions import InvalidStatusTransitionError
from core.models import OrderStatus

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StatusBucket(str, enum.Enum):
    """Sections of the order overview"""
    NEW = "new"
    IN_PROGRESS = "in_progress"
    PROCESSED = "processed"


class OrderAction(str, enum.Enum):
    """User actions on the order detail view"""
    TAKE_IN_PROGRESS = "take_in_progress"
    MARK_PROCESSED = "mark_processed"
    SAVE = "save"
    DELETE = "delete"


# The ingestion workflow writes "Review"; "Nieuw" is the older spelling
NEW_STATUSES = frozenset({OrderStatus.REVIEW.value, OrderStatus.NEW.value})

_BUCKETS = {
    OrderStatus.REVIEW.value: StatusBucket.NEW,
    OrderStatus.NEW.value: StatusBucket.NEW,
    OrderStatus.IN_PROGRESS.value: StatusBucket.IN_PROGRESS,
    OrderStatus.PROCESSED.value: StatusBucket.PROCESSED,
}

# action -> (allowed source statuses, target status)
TRANSITIONS = {
    OrderAction.TAKE_IN_PROGRESS: (NEW_STATUSES, OrderStatus.IN_PROGRESS.value),
    OrderAction.MARK_PROCESSED: (frozenset({OrderStatus.IN_PROGRESS.value}), OrderStatus.PROCESSED.value),
}

_BADGE_VARIANTS = {
    StatusBucket.NEW: "default",
    StatusBucket.IN_PROGRESS: "secondary",
    StatusBucket.PROCESSED: "outline",
}


def status_bucket(status: Optional[str]) -> Optional[StatusBucket]:
    """Overview section for a status; None for values outside the workflow"""
    return _BUCKETS.get(status)


def can_take_in_progress(status: Optional[str]) -> bool:
    return status in NEW_STATUSES


def can_mark_processed(status: Optional[str]) -> bool:
    return status == OrderStatus.IN_PROGRESS.value


def available_actions(status: Optional[str]) -> List[OrderAction]:
    """Controls shown on the detail view for the given status"""
    actions = []
    if can_take_in_progress(status):
        actions.append(OrderAction.TAKE_IN_PROGRESS)
    if can_mark_processed(status):
        actions.append(OrderAction.MARK_PROCESSED)
    actions.extend([OrderAction.SAVE, OrderAction.DELETE])
    return actions


def next_status(action: OrderAction, current: Optional[str]) -> str:
    """Target status of a transition, validated against the current status"""
    try:
        sources, target = TRANSITIONS[OrderAction(action)]
    except (KeyError, ValueError):
        raise InvalidStatusTransitionError(getattr(action, "value", str(action)), str(current))
    if current not in sources:
        raise InvalidStatusTransitionError(OrderAction(action).value, str(current))
    return target


def badge_variant(status: Optional[str]) -> str:
    """Badge style; unknown statuses look like new ones"""
    bucket = status_bucket(status) or StatusBucket.NEW
    return _BADGE_VARIANTS[bucket]


def group_orders(orders: Iterable[T], status_of=lambda order: order.status) -> Dict[str, List[T]]:
    """
    Split orders into the overview sections, keeping their order.

    Rows whose status is outside the workflow are collected under
    "unrecognized" instead of being dropped silently.
    """
    groups: Dict[str, List[T]] = {bucket.value: [] for bucket in StatusBucket}
    groups["unrecognized"] = []
    for order in orders:
        status = status_of(order)
        bucket = status_bucket(status)
        if bucket is None:
            logger.warning(f"Order has unrecognized status {status!r}")
            groups["unrecognized"].append(order)
        else:
            groups[bucket.value].append(order)
    return groups
