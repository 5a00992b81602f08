# tables/services.py

"""
TABLE OCCUPANCY HOOKS

Used by the order core:
- occupy_table_for_order: when a dine-in order is opened
- release_table_for_order: after an order reaches served/cancelled
  (post-commit; never inside the settlement transaction)

release_table_for_order is idempotent and a no-op for takeaway orders.
"""

from __future__ import annotations

import logging

from django.core.exceptions import ValidationError
from django.db import transaction

from orders.models import Order
from tables.models import RestaurantTable

logger = logging.getLogger(__name__)


class TableNotFoundError(Exception):
    code = "TABLE_NOT_FOUND"

    def __init__(self, table_id):
        self.table_id = table_id
        super().__init__(f"Table not found: {table_id}")


def get_active_table(table_id) -> RestaurantTable:
    try:
        table = RestaurantTable.objects.filter(pk=table_id, is_active=True).first()
    except (ValidationError, ValueError):
        table = None

    if table is None:
        raise TableNotFoundError(table_id)
    return table


def occupy_table_for_order(*, table: RestaurantTable) -> None:
    if table.status != RestaurantTable.STATUS_OCCUPIED:
        table.status = RestaurantTable.STATUS_OCCUPIED
        table.save(update_fields=["status"])


@transaction.atomic
def release_table_for_order(order_id) -> bool:
    """
    Mark the order's table available once no non-terminal dine-in order is left on it.

    Returns True when the table ends up available.
    """
    order = Order.objects.filter(pk=order_id).only("id", "table_id", "order_type", "status").first()

    if order is None or not order.table_id:
        return False

    if order.status not in Order.TERMINAL_STATUSES:
        logger.info(
            "Table release skipped; order still open",
            extra={"order_id": str(order_id), "status": order.status},
        )
        return False

    table = RestaurantTable.objects.select_for_update().filter(pk=order.table_id).first()
    if table is None:
        return False

    still_open = (
        Order.objects.filter(
            table_id=table.pk,
            order_type=Order.TYPE_DINE_IN,
        )
        .exclude(status__in=Order.TERMINAL_STATUSES)
        .exists()
    )
    if still_open:
        return False

    if table.status != RestaurantTable.STATUS_AVAILABLE:
        table.status = RestaurantTable.STATUS_AVAILABLE
        table.save(update_fields=["status"])
        logger.info("Table released", extra={"order_id": str(order_id), "table_id": str(table.pk)})

    return True
