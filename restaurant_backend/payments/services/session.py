# payments/services/session.py

"""
PAYMENT SESSION INITIATOR

create_payment_session NEVER writes to the database. It only asks the gateway
for a hosted-checkout URL. Settlement happens later, when the gateway calls
the webhook (orders.services.record_external_payment).

An abandoned redirect therefore leaves the order untouched and still payable
by any other tender.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from django.conf import settings

from orders.models import Order
from orders.services.exceptions import (
    InvalidOrderStatusTransitionError,
    OrderHasNoItemsError,
    ShiftAlreadyClosedError,
)
from orders.services.money import order_totals
from orders.services.order_lookup import get_order
from payments.services import pesapal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaymentSession:
    order_id: str
    redirect_url: str
    callback_url: str
    amount: str
    currency: str


def build_callback_url(return_base_url: str, order_id) -> str:
    base = (return_base_url or "").strip().rstrip("/")
    return f"{base}/pos/orders/{order_id}/payment-callback"


def create_payment_session(*, order_id, return_base_url: str) -> PaymentSession:
    order = get_order(order_id)

    if not order.is_payable:
        raise InvalidOrderStatusTransitionError(order.pk, order.status, Order.STATUS_SERVED)

    if order.shift.end_time is not None:
        raise ShiftAlreadyClosedError(order.pk, order.shift_id)

    lines = list(order.items.values_list("unit_price", "quantity"))
    if not lines:
        raise OrderHasNoItemsError(order.pk)

    cfg = pesapal.get_gateway_config()
    currency = getattr(settings, "POS_CURRENCY", "UGX")
    # Derived from the live items, not the stored total.
    _, amount = order_totals(lines, order.tax_amount)
    callback_url = build_callback_url(return_base_url, order.pk)

    token = pesapal.request_token(cfg)
    redirect_url = pesapal.submit_order_request(
        cfg,
        bearer=token,
        order_id=str(order.pk),
        amount=amount,
        currency=currency,
        callback_url=callback_url,
        description=f"Order {order.order_number}",
    )

    logger.info(
        "Payment session created",
        extra={"order_id": str(order.pk), "amount": str(amount), "currency": currency},
    )

    return PaymentSession(
        order_id=str(order.pk),
        redirect_url=redirect_url,
        callback_url=callback_url,
        amount=str(amount),
        currency=currency,
    )
