# orders/services/order_lookup.py

from __future__ import annotations

from django.core.exceptions import ValidationError

from orders.models import Order, OrderItem
from orders.services.exceptions import OrderItemNotFoundError, OrderNotFoundError


def order_queryset(*, for_update: bool = False):
    qs = Order.objects.select_related("shift")
    if for_update:
        # Lock the order row only, not the joined shift.
        qs = qs.select_for_update(of=("self",))
    return qs


def get_order(order_id, *, for_update: bool = False) -> Order:
    """
    Fetch an order by id (optionally row-locked).

    Malformed ids are treated as not found.
    """
    qs = order_queryset(for_update=for_update)

    try:
        order = qs.filter(pk=order_id).first()
    except (ValidationError, ValueError):
        order = None

    if order is None:
        raise OrderNotFoundError(order_id)
    return order


def get_order_item(order_item_id) -> OrderItem:
    try:
        item = OrderItem.objects.filter(pk=order_item_id).first()
    except (ValidationError, ValueError):
        item = None

    if item is None:
        raise OrderItemNotFoundError(order_item_id)
    return item
