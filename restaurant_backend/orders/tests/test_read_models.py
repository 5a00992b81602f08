# orders/tests/test_read_models.py

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.test import TestCase
from django.utils import timezone

from orders.models import Order, Payment
from orders.services import (
    get_active_orders_for_shift,
    get_kitchen_queue,
    get_order_receipt,
    pay_order_cash,
)
from orders.services.exceptions import OrderNotFoundError
from orders.tests.helpers import OrderFixturesMixin


class ReceiptTests(OrderFixturesMixin, TestCase):
    def setUp(self):
        self.cashier = self.make_staff("cashier")
        self.shift = self.open_shift(self.cashier)
        self.table = self.make_table("9")
        self.order = self.make_order(shift=self.shift, staff=self.cashier, table=self.table)
        self.add_line(self.order, self.make_product("Chips", "8000.00"), quantity=2)
        self.add_line(self.order, self.make_product("Soda", "3000.00"), quantity=1)

    def test_receipt_before_payment(self):
        receipt = get_order_receipt(self.order.id)

        self.assertEqual(receipt["order_id"], str(self.order.id))
        self.assertEqual(receipt["table_number"], "9")
        self.assertEqual(len(receipt["items"]), 2)
        self.assertEqual(receipt["total"], Decimal("19000.00"))
        self.assertEqual(receipt["total_paid"], Decimal("0.00"))
        self.assertEqual(receipt["balance_due"], Decimal("19000.00"))
        self.assertEqual(receipt["change_due"], Decimal("0.00"))
        self.assertFalse(receipt["is_paid"])

    def test_receipt_after_cash_with_change(self):
        pay_order_cash(order_id=self.order.id, amount="20000", staff_id=self.cashier.id)

        receipt = get_order_receipt(self.order.id)

        self.assertTrue(receipt["is_paid"])
        self.assertEqual(receipt["status"], Order.STATUS_SERVED)
        self.assertEqual(receipt["total_paid"], Decimal("20000.00"))
        self.assertEqual(receipt["balance_due"], Decimal("0.00"))
        self.assertEqual(receipt["change_due"], Decimal("1000.00"))
        self.assertEqual(receipt["payments"][0]["method"], Payment.METHOD_CASH)

    def test_served_without_payment_is_not_paid(self):
        Order.objects.filter(pk=self.order.pk).update(status=Order.STATUS_SERVED)

        receipt = get_order_receipt(self.order.id)

        self.assertEqual(receipt["status"], Order.STATUS_SERVED)
        self.assertFalse(receipt["is_paid"])
        self.assertEqual(receipt["balance_due"], Decimal("19000.00"))

    def test_receipt_does_not_write(self):
        before = Order.objects.get(pk=self.order.pk).updated_at
        get_order_receipt(self.order.id)
        self.assertEqual(Order.objects.get(pk=self.order.pk).updated_at, before)

    def test_unknown_order(self):
        with self.assertRaises(OrderNotFoundError):
            get_order_receipt("0c4f8a57-0000-0000-0000-000000000000")


class KitchenQueueTests(OrderFixturesMixin, TestCase):
    def setUp(self):
        self.cashier = self.make_staff("cashier")
        self.shift = self.open_shift(self.cashier)
        self.product = self.make_product("Pilau", "15000.00")
        now = timezone.now()

        self.newest = self.make_order(shift=self.shift, staff=self.cashier, status=Order.STATUS_PENDING)
        self.oldest = self.make_order(shift=self.shift, staff=self.cashier, status=Order.STATUS_PREPARING)
        self.ready = self.make_order(shift=self.shift, staff=self.cashier, status=Order.STATUS_READY)
        self.served = self.make_order(shift=self.shift, staff=self.cashier, status=Order.STATUS_SERVED)

        Order.objects.filter(pk=self.newest.pk).update(created_at=now)
        Order.objects.filter(pk=self.oldest.pk).update(created_at=now - timedelta(minutes=10))

        for order in (self.newest, self.oldest, self.ready, self.served):
            self.add_line(order, self.product)

        other_staff = self.make_staff("cashier")
        other_shift = self.open_shift(other_staff)
        self.foreign = self.make_order(shift=other_shift, staff=other_staff)

    def test_queue_is_pending_and_preparing_oldest_first(self):
        queue = get_kitchen_queue(self.shift.id)

        self.assertEqual(
            [row["order_id"] for row in queue],
            [str(self.oldest.id), str(self.newest.id)],
        )
        self.assertEqual(queue[0]["items"][0]["product_name"], "Pilau")

    def test_queue_for_unknown_shift_is_empty(self):
        self.assertEqual(get_kitchen_queue("not-a-uuid"), [])


class ActiveOrdersTests(OrderFixturesMixin, TestCase):
    def setUp(self):
        self.cashier = self.make_staff("cashier")
        self.shift = self.open_shift(self.cashier)
        self.product = self.make_product("Tea", "2000.00")

    def test_lists_non_terminal_orders_with_paid_totals(self):
        open_order = self.make_order(shift=self.shift, staff=self.cashier, status=Order.STATUS_READY)
        self.add_line(open_order, self.product, quantity=3)

        done = self.make_order(shift=self.shift, staff=self.cashier)
        self.add_line(done, self.product)
        pay_order_cash(order_id=done.id, amount="2000", staff_id=self.cashier.id)

        rows = get_active_orders_for_shift(self.shift.id)

        self.assertEqual([r["order_id"] for r in rows], [str(open_order.id)])
        self.assertEqual(rows[0]["total"], Decimal("6000.00"))
        self.assertEqual(rows[0]["total_paid"], Decimal("0.00"))
        self.assertEqual(rows[0]["balance_due"], Decimal("6000.00"))
