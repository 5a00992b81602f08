# orders/services/order_status.py

"""
ORDER STATUS TRANSITION AUTHORITY

This module defines the ONLY allowed status transitions for Order entities.
Two flows share the same status field:

- cashier flow (set_order_status / cancel_order)
- kitchen flow (update_kitchen_status), a strict subset with its own roles

Rules:
- Transitions are table-driven; anything not listed is rejected.
- "served" is never written by the cashier flow. Settlement
  (orders.services.payments) and the kitchen collapse below are the only
  writers.
- Table release happens after the transaction commits and never rolls back
  the status change.

KITCHEN_READY_COLLAPSES_TO_SERVED (settings, default True):
- True:  kitchen "ready" is stored as "served" directly and the table is freed.
- False: kitchen "ready" is stored as "ready" (still payable).
"""

from __future__ import annotations

import logging

from django.conf import settings
from django.db import transaction

from orders.models import Order
from orders.services.exceptions import (
    InvalidKitchenStatusTransitionError,
    InvalidOrderStatusTransitionError,
)
from orders.services.order_lookup import get_order
from permissions.guard import assert_staff_role
from permissions.roles import KITCHEN_ROLES, ORDER_TAKING_ROLES, SETTLEMENT_ROLES
from tables.services import release_table_for_order

logger = logging.getLogger(__name__)


# ============================================================
# STATE DEFINITIONS
# ============================================================

ORDER_STATUS_TRANSITIONS = {
    Order.STATUS_PENDING: {Order.STATUS_PREPARING, Order.STATUS_CANCELLED},
    Order.STATUS_PREPARING: {Order.STATUS_READY, Order.STATUS_CANCELLED},
    Order.STATUS_READY: {Order.STATUS_SERVED},
    Order.STATUS_SERVED: set(),
    Order.STATUS_CANCELLED: set(),
}

KITCHEN_STATUS_TRANSITIONS = {
    Order.STATUS_PENDING: {Order.STATUS_PREPARING},
    Order.STATUS_PREPARING: {Order.STATUS_READY},
}

CANCELLABLE_STATUSES = frozenset({Order.STATUS_PENDING, Order.STATUS_PREPARING})


# ============================================================
# DOMAIN RULES (no DB writes)
# ============================================================


def can_transition(*, from_status: str, to_status: str) -> bool:
    if from_status in Order.TERMINAL_STATUSES:
        return False
    return to_status in ORDER_STATUS_TRANSITIONS.get(from_status, set())


def can_kitchen_transition(*, from_status: str, to_status: str) -> bool:
    return to_status in KITCHEN_STATUS_TRANSITIONS.get(from_status, set())


def kitchen_stored_status(requested_status: str) -> str:
    if requested_status == Order.STATUS_READY and getattr(
        settings, "KITCHEN_READY_COLLAPSES_TO_SERVED", True
    ):
        return Order.STATUS_SERVED
    return requested_status


def validate_transition(*, order: Order, target_status: str) -> None:
    if not can_transition(from_status=order.status, to_status=target_status):
        raise InvalidOrderStatusTransitionError(order.id, order.status, target_status)


# ============================================================
# HELPERS
# ============================================================


def release_table_after_commit(order_id) -> None:
    """
    Table release is a different aggregate; a failure is logged, never raised.
    """
    try:
        release_table_for_order(order_id)
    except Exception:
        logger.exception("Table release failed", extra={"order_id": str(order_id)})


def _apply_status(order: Order, new_status: str, staff) -> None:
    order.status = new_status
    order.updated_by = staff
    order.save(update_fields=["status", "updated_by", "updated_at"])


# ============================================================
# OPERATIONS
# ============================================================


def set_order_status(*, order_id, new_status: str, staff_id) -> Order:
    """
    Cashier-flow transition (pending -> preparing -> ready, or cancel).

    "served" is rejected: only settlement may serve an order.
    """
    if new_status == Order.STATUS_CANCELLED:
        return cancel_order(order_id=order_id, staff_id=staff_id)

    staff = assert_staff_role(staff_id, ORDER_TAKING_ROLES)

    with transaction.atomic():
        order = get_order(order_id, for_update=True)
        previous = order.status

        if new_status == Order.STATUS_SERVED:
            raise InvalidOrderStatusTransitionError(order.id, previous, new_status)

        validate_transition(order=order, target_status=new_status)
        _apply_status(order, new_status, staff)

    logger.info(
        "Order status changed",
        extra={"order_id": str(order.pk), "from_status": previous, "to_status": new_status},
    )
    return order


def cancel_order(*, order_id, staff_id) -> Order:
    """
    Cancel a pending/preparing order. Never allowed once ready or served.
    """
    staff = assert_staff_role(staff_id, SETTLEMENT_ROLES)

    with transaction.atomic():
        order = get_order(order_id, for_update=True)
        previous = order.status

        if previous not in CANCELLABLE_STATUSES:
            raise InvalidOrderStatusTransitionError(order.id, previous, Order.STATUS_CANCELLED)

        _apply_status(order, Order.STATUS_CANCELLED, staff)

    logger.info(
        "Order cancelled",
        extra={"order_id": str(order.pk), "from_status": previous},
    )

    release_table_after_commit(order.pk)
    return order


def update_kitchen_status(*, order_id, new_status: str, staff_id) -> Order:
    """
    Kitchen-flow transition: pending -> preparing, preparing -> ready.
    """
    staff = assert_staff_role(staff_id, KITCHEN_ROLES)

    with transaction.atomic():
        order = get_order(order_id, for_update=True)
        previous = order.status

        if not can_kitchen_transition(from_status=previous, to_status=new_status):
            raise InvalidKitchenStatusTransitionError(order.id, previous, new_status)

        stored = kitchen_stored_status(new_status)
        _apply_status(order, stored, staff)

    logger.info(
        "Kitchen status changed",
        extra={
            "order_id": str(order.pk),
            "from_status": previous,
            "requested_status": new_status,
            "to_status": stored,
        },
    )

    if stored in Order.TERMINAL_STATUSES:
        release_table_after_commit(order.pk)
    return order
