# orders/models/order.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models

User = settings.AUTH_USER_MODEL


class Order(models.Model):
    """
    A customer's purchase, dine-in or takeaway.

    GUARANTEES (enforced by orders.services, not by save()):
    - total_amount == sum(line_total of live items) after every ledger mutation
    - status follows the transition tables in orders.services.order_status
    - "served" is written by settlement, or by the kitchen "ready" step while
      KITCHEN_READY_COLLAPSES_TO_SERVED is on; set_order_status never writes it
    - served / cancelled are terminal; a settled order is never reopened

    Ownership:
    - Owned by the shift that created it; payment is refused once that shift closes.
    """

    TYPE_DINE_IN = "dine_in"
    TYPE_TAKEAWAY = "takeaway"

    TYPE_CHOICES = [
        (TYPE_DINE_IN, "Dine-in"),
        (TYPE_TAKEAWAY, "Takeaway"),
    ]

    STATUS_PENDING = "pending"
    STATUS_PREPARING = "preparing"
    STATUS_READY = "ready"
    STATUS_SERVED = "served"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_PREPARING, "Preparing"),
        (STATUS_READY, "Ready"),
        (STATUS_SERVED, "Served"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    # Line items may change only while the kitchen has not finished.
    EDITABLE_STATUSES = frozenset({STATUS_PENDING, STATUS_PREPARING})

    # Settlement is legal only from these.
    PAYABLE_STATUSES = frozenset({STATUS_PENDING, STATUS_PREPARING, STATUS_READY})

    TERMINAL_STATUSES = frozenset({STATUS_SERVED, STATUS_CANCELLED})

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order_number = models.CharField(
        max_length=32,
        help_text="Human-facing ticket number, sequential within the shift",
    )

    order_type = models.CharField(max_length=16, choices=TYPE_CHOICES)

    status = models.CharField(
        max_length=16,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING,
    )

    subtotal_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    tax_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    total_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )

    shift = models.ForeignKey(
        "shifts.Shift",
        on_delete=models.PROTECT,
        related_name="orders",
    )

    table = models.ForeignKey(
        "tables.RestaurantTable",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="orders",
    )

    terminal_id = models.CharField(max_length=64, blank=True, default="")

    created_by = models.ForeignKey(
        User,
        on_delete=models.PROTECT,
        related_name="orders_created",
    )
    updated_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders_updated",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["shift", "order_number"],
                name="unique_order_number_per_shift",
            )
        ]
        indexes = [
            models.Index(fields=["shift", "status", "created_at"], name="order_shift_status_idx"),
            models.Index(fields=["table", "status"], name="order_table_status_idx"),
        ]

    @property
    def is_payable(self) -> bool:
        return self.status in self.PAYABLE_STATUSES

    @property
    def is_editable(self) -> bool:
        return self.status in self.EDITABLE_STATUSES

    def __str__(self):
        return f"Order {self.order_number} | {self.status} | {self.total_amount}"
