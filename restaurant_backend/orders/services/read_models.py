# orders/services/read_models.py

"""
ORDER READ MODELS

Pure projections (no writes) assembled from the live item/payment rows:
- get_order_receipt: order + lines + payments + paid/balance/change
- get_kitchen_queue: pending/preparing orders of a shift, oldest first
- get_active_orders_for_shift: POS screen, non-terminal orders, newest first

Money values are returned as Decimal; the HTTP layer decides formatting.
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db.models import DecimalField, Prefetch, Q, Sum, Value
from django.db.models.functions import Coalesce

from orders.models import Order, OrderItem, Payment
from orders.services.money import ZERO, sum_money, to_money
from orders.services.order_lookup import get_order

KITCHEN_QUEUE_STATUSES = (Order.STATUS_PENDING, Order.STATUS_PREPARING)


def _item_row(item: OrderItem) -> dict:
    return {
        "id": str(item.id),
        "product_id": str(item.product_id),
        "product_name": item.product.name,
        "station": item.product.station,
        "quantity": item.quantity,
        "unit_price": to_money(item.unit_price),
        "line_total": to_money(item.line_total),
        "size": item.size,
        "modifier": item.modifier,
        "notes": item.notes,
    }


def _payment_row(payment: Payment) -> dict:
    return {
        "id": str(payment.id),
        "amount": to_money(payment.amount),
        "method": payment.method,
        "status": payment.status,
        "external_reference": payment.external_reference,
        "created_at": payment.created_at,
    }


def get_order_receipt(order_id) -> dict:
    order = get_order(order_id)

    items = list(order.items.select_related("product").all())
    payments = list(order.payments.all())

    total = to_money(order.total_amount)
    completed = [p for p in payments if p.status == Payment.STATUS_COMPLETED]
    total_paid = sum_money(p.amount for p in completed)

    return {
        "order_id": str(order.id),
        "order_number": order.order_number,
        "order_type": order.order_type,
        "status": order.status,
        "table_number": order.table.number if order.table_id else None,
        "shift_id": str(order.shift_id),
        "terminal_id": order.terminal_id,
        "created_at": order.created_at,
        "items": [_item_row(i) for i in items],
        "payments": [_payment_row(p) for p in payments],
        "subtotal": to_money(order.subtotal_amount),
        "tax": to_money(order.tax_amount),
        "total": total,
        "total_paid": total_paid,
        "balance_due": max(total - total_paid, ZERO),
        "change_due": max(total_paid - total, ZERO),
        # A kitchen-served order can be served without any payment.
        "is_paid": bool(completed) and total_paid >= total,
    }


def get_kitchen_queue(shift_id) -> list[dict]:
    qs = (
        Order.objects.filter(shift_id=shift_id, status__in=KITCHEN_QUEUE_STATUSES)
        .select_related("table")
        .prefetch_related(
            Prefetch("items", queryset=OrderItem.objects.select_related("product"))
        )
        .order_by("created_at", "id")
    )

    try:
        orders = list(qs)
    except (ValidationError, ValueError):
        return []

    return [
        {
            "order_id": str(o.id),
            "order_number": o.order_number,
            "order_type": o.order_type,
            "status": o.status,
            "table_number": o.table.number if o.table_id else None,
            "created_at": o.created_at,
            "items": [_item_row(i) for i in o.items.all()],
        }
        for o in orders
    ]


def get_active_orders_for_shift(shift_id) -> list[dict]:
    money_field = DecimalField(max_digits=12, decimal_places=2)

    qs = (
        Order.objects.filter(shift_id=shift_id)
        .exclude(status__in=Order.TERMINAL_STATUSES)
        .select_related("table")
        .annotate(
            paid=Coalesce(
                Sum("payments__amount", filter=Q(payments__status=Payment.STATUS_COMPLETED)),
                Value(ZERO),
                output_field=money_field,
            )
        )
        .order_by("-created_at", "-id")
    )

    try:
        orders = list(qs)
    except (ValidationError, ValueError):
        return []

    rows = []
    for o in orders:
        total = to_money(o.total_amount)
        paid = to_money(o.paid)
        rows.append(
            {
                "order_id": str(o.id),
                "order_number": o.order_number,
                "order_type": o.order_type,
                "status": o.status,
                "table_number": o.table.number if o.table_id else None,
                "total": total,
                "total_paid": paid,
                "balance_due": max(total - paid, ZERO),
                "created_at": o.created_at,
            }
        )
    return rows
