# orders/models/payment.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models


class Payment(models.Model):
    """
    One tender applied to an Order (append-only).

    Idempotency rule:
    - external_reference is globally unique (gateway transaction reference)
    - a second callback with the same reference is a no-op, not an error

    An order may carry several payments (split tender) but only one settlement.
    """

    METHOD_CASH = "cash"
    METHOD_MTN_MOMO = "mtn_momo"
    METHOD_AIRTEL_MONEY = "airtel_money"
    METHOD_CARD = "card"

    METHOD_CHOICES = [
        (METHOD_CASH, "Cash"),
        (METHOD_MTN_MOMO, "MTN Mobile Money"),
        (METHOD_AIRTEL_MONEY, "Airtel Money"),
        (METHOD_CARD, "Card"),
    ]

    EXTERNAL_METHODS = frozenset({METHOD_CARD, METHOD_MTN_MOMO, METHOD_AIRTEL_MONEY})

    STATUS_PENDING = "pending"
    STATUS_COMPLETED = "completed"
    STATUS_FAILED = "failed"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_FAILED, "Failed"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.PROTECT,
        related_name="payments",
    )

    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )

    method = models.CharField(max_length=16, choices=METHOD_CHOICES)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_COMPLETED)

    external_reference = models.CharField(
        max_length=128,
        unique=True,
        null=True,
        blank=True,
        help_text="Gateway reference. Unique; used to deduplicate callbacks.",
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="payments_recorded",
        help_text="Cashier who took the payment; NULL for gateway (system) callbacks",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["order", "status"], name="payment_order_status_idx"),
            models.Index(fields=["method"], name="payment_method_idx"),
        ]

    def __str__(self):
        ref = self.external_reference or "-"
        return f"{self.order_id} | {self.method} | {self.amount} | {ref}"
