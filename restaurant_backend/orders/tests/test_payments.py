# orders/tests/test_payments.py

from __future__ import annotations

from decimal import Decimal
from unittest import mock

from django.test import TestCase
from django.utils import timezone

from orders.models import Order, Payment
from orders.services import (
    SYSTEM_STAFF_ID,
    pay_order_cash,
    pay_order_momo,
    record_external_payment,
)
from orders.services.exceptions import (
    ExternalReferenceRequiredError,
    OrderHasNoItemsError,
    OrderNotFoundError,
    PaymentAmountInvalidError,
    PaymentInsufficientError,
    ShiftAlreadyClosedError,
    UnsupportedPaymentMethodError,
)
from orders.services.payments import (
    OUTCOME_ALREADY_SETTLED,
    OUTCOME_DUPLICATE_REFERENCE,
    OUTCOME_SETTLED,
)
from orders.tests.helpers import OrderFixturesMixin
from permissions.exceptions import RoleDeniedError
from tables.models import RestaurantTable


class SettlementTests(OrderFixturesMixin, TestCase):
    """
    GUARANTEES:
    - an order is settled (served) at most once
    - duplicate gateway references are no-ops
    - underpayment / empty orders / closed shifts are refused without side effects
    """

    def setUp(self):
        self.cashier = self.make_staff("cashier")
        self.shift = self.open_shift(self.cashier)
        self.table = self.make_table("5")
        self.table.status = RestaurantTable.STATUS_OCCUPIED
        self.table.save(update_fields=["status"])

        self.order = self.make_order(
            shift=self.shift, staff=self.cashier, status=Order.STATUS_READY, table=self.table
        )
        self.product = self.make_product("Nile Special", "30000.00")
        self.add_line(self.order, self.product, quantity=1)

    # =====================================================
    # HAPPY PATHS
    # =====================================================

    def test_cash_settles_and_releases_table(self):
        result = pay_order_cash(order_id=self.order.id, amount="30000", staff_id=self.cashier.id)

        self.assertEqual(result.outcome, OUTCOME_SETTLED)
        self.assertIsNotNone(result.payment_id)

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_SERVED)
        self.assertEqual(self.order.updated_by_id, self.cashier.id)

        payment = Payment.objects.get(order=self.order)
        self.assertEqual(payment.created_by_id, self.cashier.id)
        self.assertIsNone(payment.external_reference)

        self.table.refresh_from_db()
        self.assertEqual(self.table.status, RestaurantTable.STATUS_AVAILABLE)

    def test_momo_uses_mtn_method(self):
        pay_order_momo(order_id=self.order.id, amount=Decimal("30000"), staff_id=self.cashier.id)

        self.assertEqual(Payment.objects.get(order=self.order).method, Payment.METHOD_MTN_MOMO)

    def test_overpayment_is_accepted(self):
        result = pay_order_cash(order_id=self.order.id, amount="50000", staff_id=self.cashier.id)

        self.assertTrue(result.settled)
        self.assertEqual(Payment.objects.get(order=self.order).amount, Decimal("50000.00"))

    def test_pending_and_preparing_orders_are_payable(self):
        for status in (Order.STATUS_PENDING, Order.STATUS_PREPARING):
            with self.subTest(status=status):
                order = self.make_order(shift=self.shift, staff=self.cashier, status=status)
                self.add_line(order, self.product)

                result = pay_order_cash(order_id=order.id, amount="30000", staff_id=self.cashier.id)
                self.assertTrue(result.settled)

    # =====================================================
    # AT-MOST-ONCE
    # =====================================================

    def test_second_cash_payment_is_a_no_op(self):
        first = pay_order_cash(order_id=self.order.id, amount="30000", staff_id=self.cashier.id)
        second = pay_order_cash(order_id=self.order.id, amount="30000", staff_id=self.cashier.id)

        self.assertEqual(first.outcome, OUTCOME_SETTLED)
        self.assertEqual(second.outcome, OUTCOME_ALREADY_SETTLED)
        self.assertFalse(second.settled)
        self.assertEqual(Payment.objects.filter(order=self.order).count(), 1)

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_SERVED)

    def test_cancelled_order_is_not_settled(self):
        Order.objects.filter(pk=self.order.pk).update(status=Order.STATUS_CANCELLED)

        result = pay_order_cash(order_id=self.order.id, amount="30000", staff_id=self.cashier.id)

        self.assertEqual(result.outcome, OUTCOME_ALREADY_SETTLED)
        self.assertFalse(Payment.objects.filter(order=self.order).exists())
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_CANCELLED)

    # =====================================================
    # IDEMPOTENT GATEWAY CALLBACKS
    # =====================================================

    def test_same_reference_twice_records_one_payment(self):
        kwargs = dict(
            order_id=self.order.id,
            amount="30000",
            method=Payment.METHOD_CARD,
            staff_id=SYSTEM_STAFF_ID,
            external_reference="PSP-REF-1",
        )

        first = record_external_payment(**kwargs)
        second = record_external_payment(**kwargs)

        self.assertEqual(first.outcome, OUTCOME_SETTLED)
        self.assertEqual(second.outcome, OUTCOME_DUPLICATE_REFERENCE)
        self.assertEqual(Payment.objects.filter(external_reference="PSP-REF-1").count(), 1)

        payment = Payment.objects.get(external_reference="PSP-REF-1")
        self.assertIsNone(payment.created_by_id)

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_SERVED)

    def test_duplicate_reference_short_circuits_before_any_check(self):
        record_external_payment(
            order_id=self.order.id,
            amount="30000",
            method=Payment.METHOD_AIRTEL_MONEY,
            staff_id=SYSTEM_STAFF_ID,
            external_reference="PSP-REF-2",
        )

        # Shift closed afterwards; a retried callback must still succeed.
        self.shift.end_time = timezone.now()
        self.shift.save(update_fields=["end_time"])

        result = record_external_payment(
            order_id=self.order.id,
            amount="30000",
            method=Payment.METHOD_AIRTEL_MONEY,
            staff_id=SYSTEM_STAFF_ID,
            external_reference="PSP-REF-2",
        )
        self.assertEqual(result.outcome, OUTCOME_DUPLICATE_REFERENCE)

    def test_concurrent_reference_insert_is_reported_as_duplicate(self):
        other = self.make_order(shift=self.shift, staff=self.cashier, status=Order.STATUS_READY)
        self.add_line(other, self.product)
        Payment.objects.create(
            order=other,
            amount=Decimal("30000.00"),
            method=Payment.METHOD_CARD,
            external_reference="PSP-RACE",
        )

        # Pre-check misses the row (as if it committed just after); the unique
        # constraint catches the insert.
        with mock.patch(
            "orders.services.payments._reference_exists",
            side_effect=[False, True],
        ):
            result = record_external_payment(
                order_id=self.order.id,
                amount="30000",
                method=Payment.METHOD_CARD,
                staff_id=SYSTEM_STAFF_ID,
                external_reference="PSP-RACE",
            )

        self.assertEqual(result.outcome, OUTCOME_DUPLICATE_REFERENCE)
        self.assertFalse(Payment.objects.filter(order=self.order).exists())
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_READY)

    def test_external_payment_validation(self):
        with self.assertRaises(UnsupportedPaymentMethodError):
            record_external_payment(
                order_id=self.order.id,
                amount="30000",
                method=Payment.METHOD_CASH,
                staff_id=SYSTEM_STAFF_ID,
                external_reference="X",
            )

        with self.assertRaises(ExternalReferenceRequiredError):
            record_external_payment(
                order_id=self.order.id,
                amount="30000",
                method=Payment.METHOD_CARD,
                staff_id=SYSTEM_STAFF_ID,
                external_reference="  ",
            )

    def test_external_payment_by_named_staff_is_role_checked(self):
        waiter = self.make_staff("waiter")

        with self.assertRaises(RoleDeniedError):
            record_external_payment(
                order_id=self.order.id,
                amount="30000",
                method=Payment.METHOD_CARD,
                staff_id=waiter.id,
                external_reference="PSP-REF-3",
            )

    # =====================================================
    # REFUSALS
    # =====================================================

    def test_underpayment_is_rejected_and_status_unchanged(self):
        with self.assertRaises(PaymentInsufficientError) as ctx:
            pay_order_cash(order_id=self.order.id, amount="29999", staff_id=self.cashier.id)

        self.assertEqual(ctx.exception.amount, "29999.00")
        self.assertEqual(ctx.exception.total, "30000.00")

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_READY)
        self.assertFalse(Payment.objects.filter(order=self.order).exists())

    def test_empty_order_rejected_by_every_entry_point(self):
        empty = self.make_order(shift=self.shift, staff=self.cashier, status=Order.STATUS_READY)

        with self.assertRaises(OrderHasNoItemsError):
            pay_order_cash(order_id=empty.id, amount="0", staff_id=self.cashier.id)

        with self.assertRaises(OrderHasNoItemsError):
            pay_order_momo(order_id=empty.id, amount="0", staff_id=self.cashier.id)

        with self.assertRaises(OrderHasNoItemsError):
            record_external_payment(
                order_id=empty.id,
                amount="0",
                method=Payment.METHOD_CARD,
                staff_id=SYSTEM_STAFF_ID,
                external_reference="EMPTY-1",
            )

        self.assertFalse(Payment.objects.filter(order=empty).exists())

    def test_closed_shift_freezes_payment(self):
        self.shift.end_time = timezone.now()
        self.shift.save(update_fields=["end_time"])

        with self.assertRaises(ShiftAlreadyClosedError):
            pay_order_cash(order_id=self.order.id, amount="30000", staff_id=self.cashier.id)

    def test_negative_amount_is_invalid(self):
        with self.assertRaises(PaymentAmountInvalidError):
            pay_order_cash(order_id=self.order.id, amount="-1", staff_id=self.cashier.id)

    def test_sub_cent_amount_is_never_rounded_into_a_payment(self):
        for amount in ("29999.995", "30000.001", 29999.999):
            with self.subTest(amount=amount):
                with self.assertRaises(PaymentAmountInvalidError):
                    pay_order_cash(order_id=self.order.id, amount=amount, staff_id=self.cashier.id)

        with self.assertRaises(PaymentAmountInvalidError):
            record_external_payment(
                order_id=self.order.id,
                amount="29999.995",
                method=Payment.METHOD_CARD,
                staff_id=SYSTEM_STAFF_ID,
                external_reference="SUBCENT-1",
            )

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_READY)
        self.assertFalse(Payment.objects.filter(order=self.order).exists())

    def test_whole_unit_amount_is_stored_as_tendered(self):
        pay_order_cash(order_id=self.order.id, amount="30000.50", staff_id=self.cashier.id)

        self.assertEqual(Payment.objects.get(order=self.order).amount, Decimal("30000.50"))

    def test_unknown_order(self):
        with self.assertRaises(OrderNotFoundError):
            pay_order_cash(order_id="missing", amount="1", staff_id=self.cashier.id)

    def test_waiter_cannot_take_payment(self):
        waiter = self.make_staff("waiter")

        with self.assertRaises(RoleDeniedError):
            pay_order_cash(order_id=self.order.id, amount="30000", staff_id=waiter.id)

    # =====================================================
    # SELF-HEALING TOTAL
    # =====================================================

    def test_drifted_total_is_corrected_with_warning(self):
        Order.objects.filter(pk=self.order.pk).update(
            subtotal_amount=Decimal("10000.00"), total_amount=Decimal("10000.00")
        )

        # The stale total would have accepted 10000; the derived one does not.
        with self.assertLogs("orders.services.payments", level="WARNING") as logs:
            with self.assertRaises(PaymentInsufficientError):
                pay_order_cash(order_id=self.order.id, amount="10000", staff_id=self.cashier.id)
        self.assertTrue(any("drifted" in line for line in logs.output))

        with self.assertLogs("orders.services.payments", level="WARNING"):
            result = pay_order_cash(order_id=self.order.id, amount="30000", staff_id=self.cashier.id)

        self.assertTrue(result.settled)
        self.assertTrue(result.total_corrected)
        self.order.refresh_from_db()
        self.assertEqual(self.order.total_amount, Decimal("30000.00"))

    # =====================================================
    # TABLE RELEASE (POST-COMMIT)
    # =====================================================

    def test_table_release_failure_does_not_undo_settlement(self):
        with mock.patch(
            "orders.services.order_status.release_table_for_order",
            side_effect=RuntimeError("tables offline"),
        ):
            with self.assertLogs("orders.services.order_status", level="ERROR"):
                result = pay_order_cash(order_id=self.order.id, amount="30000", staff_id=self.cashier.id)

        self.assertTrue(result.settled)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_SERVED)
        self.assertEqual(Payment.objects.filter(order=self.order).count(), 1)

    def test_table_stays_occupied_while_another_order_is_open(self):
        other = self.make_order(shift=self.shift, staff=self.cashier, table=self.table)
        self.add_line(other, self.product)

        pay_order_cash(order_id=self.order.id, amount="30000", staff_id=self.cashier.id)

        self.table.refresh_from_db()
        self.assertEqual(self.table.status, RestaurantTable.STATUS_OCCUPIED)
