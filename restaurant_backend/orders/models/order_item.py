# orders/models/order_item.py

"""
ORDER ITEM (LINE)

Rules:
- unit_price is a SNAPSHOT of Product.price at add-time; it never changes afterwards
- quantity >= 1 (zero/negative is rejected, never coerced)
- line_total is always unit_price * quantity (kept in save())
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models


class OrderItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="items",
    )

    product = models.ForeignKey(
        "products.Product",
        on_delete=models.PROTECT,
        related_name="order_items",
    )

    quantity = models.PositiveIntegerField()

    unit_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text="Snapshot price at time of adding to the order (server-controlled)",
    )

    line_total = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        editable=False,
    )

    size = models.CharField(max_length=32, blank=True, default="")
    modifier = models.CharField(max_length=255, blank=True, default="")
    notes = models.TextField(blank=True, default="")

    sort_order = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["sort_order", "created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="order_item_quantity_gte_1",
            )
        ]

    def clean(self):
        if self.quantity is None or int(self.quantity) < 1:
            raise ValidationError({"quantity": "Quantity must be at least 1"})

    def save(self, *args, **kwargs):
        self.line_total = Decimal(self.unit_price) * Decimal(int(self.quantity or 0))
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "quantity" in update_fields:
            kwargs["update_fields"] = sorted(set(update_fields) | {"line_total"})
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{getattr(self.product, 'name', 'Product')} x {self.quantity}"
