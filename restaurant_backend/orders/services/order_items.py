# orders/services/order_items.py

"""
ORDER ITEM LEDGER

Purpose:
- Add / update / remove line items of an open order.

Hard rules:
- Items change only while the order is pending or preparing.
- Quantities are whole units >= 1; zero/negative is rejected, never coerced.
- unit_price is snapshotted from the product at add-time.
- Totals are NEVER patched incrementally: every mutation re-sums the live rows
  inside the same transaction that changed them.

Concurrency:
- The parent order row is locked (select_for_update) before its items are
  read or written, so concurrent edits on one order serialize.
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.db.models import Max

from orders.models import Order, OrderItem
from orders.services.exceptions import (
    InvalidOrderStateError,
    InvalidQuantityError,
    OrderItemNotFoundError,
)
from orders.services.money import ZERO, order_totals
from orders.services.order_lookup import get_order, get_order_item
from permissions.guard import assert_staff_role
from permissions.roles import ORDER_TAKING_ROLES
from products.services import get_sellable_product

logger = logging.getLogger(__name__)


# ============================================================
# HELPERS
# ============================================================


def _to_quantity(value) -> int:
    if isinstance(value, bool):
        raise InvalidQuantityError(value)

    if isinstance(value, int):
        qty = value
    elif isinstance(value, str) and value.strip().isdigit():
        qty = int(value.strip())
    else:
        raise InvalidQuantityError(value)

    if qty < 1:
        raise InvalidQuantityError(value)
    return qty


def _assert_editable(order: Order, action: str) -> None:
    if not order.is_editable:
        raise InvalidOrderStateError(order.id, order.status, action)


def _resolve_editor(staff_id):
    if staff_id is None:
        return None
    return assert_staff_role(staff_id, ORDER_TAKING_ROLES)


def recalculate_order_totals(order: Order, *, updated_by=None) -> Order:
    """
    Re-derive subtotal/total from the live item rows and persist them.

    Caller must hold the order row lock.
    """
    live = OrderItem.objects.filter(order_id=order.pk).values_list("unit_price", "quantity")
    subtotal, total = order_totals(live, ZERO)

    order.subtotal_amount = subtotal
    order.tax_amount = ZERO
    order.total_amount = total

    update_fields = ["subtotal_amount", "tax_amount", "total_amount", "updated_at"]
    if updated_by is not None:
        order.updated_by = updated_by
        update_fields.append("updated_by")

    order.save(update_fields=update_fields)
    return order


# ============================================================
# LEDGER OPERATIONS
# ============================================================


def add_item(
    *,
    order_id,
    product_id,
    quantity,
    size: str | None = None,
    modifier: str | None = None,
    notes: str | None = None,
    staff_id=None,
) -> OrderItem:
    """
    Append a line item, snapshotting the product's current price.
    """
    qty = _to_quantity(quantity)
    editor = _resolve_editor(staff_id)

    with transaction.atomic():
        order = get_order(order_id, for_update=True)
        _assert_editable(order, "add items")

        product = get_sellable_product(product_id)

        next_sort = (
            OrderItem.objects.filter(order_id=order.pk).aggregate(m=Max("sort_order")).get("m")
        )

        item = OrderItem.objects.create(
            order=order,
            product=product,
            quantity=qty,
            unit_price=product.price,
            size=(size or "").strip(),
            modifier=(modifier or "").strip(),
            notes=(notes or "").strip(),
            sort_order=0 if next_sort is None else next_sort + 1,
        )

        recalculate_order_totals(order, updated_by=editor)

    logger.info(
        "Order item added",
        extra={
            "order_id": str(order.pk),
            "order_item_id": str(item.pk),
            "product_id": str(product.pk),
            "quantity": qty,
            "total_amount": str(order.total_amount),
        },
    )
    return item


def update_item_quantity(*, order_item_id, quantity, staff_id=None) -> OrderItem:
    """
    Change the quantity of an existing line; unit_price stays as snapshotted.
    """
    editor = _resolve_editor(staff_id)

    with transaction.atomic():
        item = get_order_item(order_item_id)
        order = get_order(item.order_id, for_update=True)

        # Re-read under the order lock; a concurrent remove wins.
        item = OrderItem.objects.filter(pk=item.pk, order_id=order.pk).first()
        if item is None:
            raise OrderItemNotFoundError(order_item_id)

        _assert_editable(order, "update items")
        qty = _to_quantity(quantity)

        item.quantity = qty
        item.save(update_fields=["quantity"])

        recalculate_order_totals(order, updated_by=editor)

    logger.info(
        "Order item quantity updated",
        extra={
            "order_id": str(order.pk),
            "order_item_id": str(item.pk),
            "quantity": qty,
            "total_amount": str(order.total_amount),
        },
    )
    return item


def remove_item(*, order_item_id, staff_id=None) -> Order:
    """
    Delete a line item. An order left empty stays open (not auto-cancelled).
    """
    editor = _resolve_editor(staff_id)

    with transaction.atomic():
        item = get_order_item(order_item_id)
        order = get_order(item.order_id, for_update=True)

        if not OrderItem.objects.filter(pk=item.pk, order_id=order.pk).exists():
            raise OrderItemNotFoundError(order_item_id)

        _assert_editable(order, "remove items")

        OrderItem.objects.filter(pk=item.pk).delete()
        recalculate_order_totals(order, updated_by=editor)

    logger.info(
        "Order item removed",
        extra={
            "order_id": str(order.pk),
            "order_item_id": str(order_item_id),
            "total_amount": str(order.total_amount),
        },
    )
    return order
