# orders/tests/helpers.py

"""
Shared fixtures for order core tests.

Kept as a mixin (not factories) so each TestCase reads top to bottom.
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.contrib.auth import get_user_model

from orders.models import Order, OrderItem
from products.models import Product
from shifts.models import Shift
from tables.models import RestaurantTable

User = get_user_model()


class OrderFixturesMixin:
    def make_staff(self, role="cashier", **extra):
        return User.objects.create_user(
            email=f"{role}-{uuid.uuid4().hex[:8]}@example.com",
            password="pass",
            role=role,
            **extra,
        )

    def open_shift(self, staff, terminal_id="T1"):
        return Shift.objects.create(staff=staff, terminal_id=terminal_id)

    def make_product(self, name="Rolex", price="30000.00", **extra):
        return Product.objects.create(name=name, price=Decimal(price), **extra)

    def make_table(self, number="1"):
        return RestaurantTable.objects.create(number=number)

    def make_order(self, *, shift, staff, status=Order.STATUS_PENDING, table=None):
        """
        Direct row insert for state-specific setups; real flows use create_order.
        """
        return Order.objects.create(
            order_number=f"{str(shift.id)[:8]}-{Order.objects.filter(shift=shift).count() + 1}",
            order_type=Order.TYPE_DINE_IN if table else Order.TYPE_TAKEAWAY,
            status=status,
            shift=shift,
            table=table,
            created_by=staff,
        )

    def add_line(self, order, product, quantity=1):
        """
        Insert a line and sync totals (bypasses the ledger's status gate).
        """
        item = OrderItem.objects.create(
            order=order,
            product=product,
            quantity=quantity,
            unit_price=product.price,
        )
        total = sum((i.line_total for i in order.items.all()), Decimal("0.00"))
        order.subtotal_amount = total
        order.total_amount = total
        order.save(update_fields=["subtotal_amount", "total_amount"])
        return item
