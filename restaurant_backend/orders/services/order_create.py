# orders/services/order_create.py

"""
ORDER CREATION

- Staff must be active with an order-taking role.
- The order is owned by the staff member's currently open shift.
- dine_in requires a table (which becomes occupied); takeaway forbids one.
- order_number is "<first 8 chars of shift id>-<n>", sequential per shift.
"""

from __future__ import annotations

import logging

from django.db import transaction

from orders.models import Order
from orders.services.exceptions import (
    InvalidOrderTypeError,
    TableNotAllowedForTakeawayError,
    TableRequiredForDineInError,
)
from permissions.guard import assert_staff_role
from permissions.roles import ORDER_TAKING_ROLES
from shifts.models import Shift
from shifts.services import get_active_shift
from tables.services import get_active_table, occupy_table_for_order

logger = logging.getLogger(__name__)

ORDER_TYPES = {Order.TYPE_DINE_IN, Order.TYPE_TAKEAWAY}


def _next_order_number(shift: Shift) -> str:
    prefix = str(shift.id)[:8]
    highest = 0
    numbers = Order.objects.filter(shift_id=shift.pk).values_list("order_number", flat=True)
    for number in numbers:
        _, _, tail = (number or "").rpartition("-")
        if tail.isdigit():
            highest = max(highest, int(tail))
    return f"{prefix}-{highest + 1}"


def create_order(*, staff_id, order_type: str, table_id=None) -> Order:
    staff = assert_staff_role(staff_id, ORDER_TAKING_ROLES)

    order_type = (order_type or "").strip().lower()
    if order_type not in ORDER_TYPES:
        raise InvalidOrderTypeError(order_type)

    if order_type == Order.TYPE_DINE_IN and not table_id:
        raise TableRequiredForDineInError()
    if order_type == Order.TYPE_TAKEAWAY and table_id:
        raise TableNotAllowedForTakeawayError(table_id)

    shift = get_active_shift(staff.pk)

    with transaction.atomic():
        # Serializes order numbering within the shift.
        shift = Shift.objects.select_for_update().get(pk=shift.pk)

        table = None
        if order_type == Order.TYPE_DINE_IN:
            table = get_active_table(table_id)

        order = Order.objects.create(
            order_number=_next_order_number(shift),
            order_type=order_type,
            status=Order.STATUS_PENDING,
            shift=shift,
            table=table,
            terminal_id=shift.terminal_id,
            created_by=staff,
            updated_by=staff,
        )

        if table is not None:
            occupy_table_for_order(table=table)

    logger.info(
        "Order created",
        extra={
            "order_id": str(order.pk),
            "order_number": order.order_number,
            "order_type": order_type,
            "shift_id": str(shift.pk),
            "table_id": str(table.pk) if table else None,
        },
    )
    return order
