# orders/tests/test_api.py

from __future__ import annotations

import uuid
from decimal import Decimal

from django.test import TestCase, override_settings
from rest_framework import status
from rest_framework.test import APIClient

from orders.models import Order, Payment
from orders.tests.helpers import OrderFixturesMixin
from tables.models import RestaurantTable


class OrderApiFlowTests(OrderFixturesMixin, TestCase):
    """
    End-to-end through HTTP: open -> add -> edit -> kitchen -> pay -> receipt.
    """

    def setUp(self):
        self.client = APIClient()

        self.cashier = self.make_staff("cashier")
        self.cook = self.make_staff("kitchen")
        self.shift = self.open_shift(self.cashier)
        self.table = self.make_table("4")
        self.burger = self.make_product("Burger", "30000.00")
        self.beer = self.make_product("Club", "20000.00")

    def _as(self, user):
        self.client.force_authenticate(user=user)

    @override_settings(KITCHEN_READY_COLLAPSES_TO_SERVED=False)
    def test_full_dine_in_flow(self):
        self._as(self.cashier)

        res = self.client.post(
            "/api/orders/",
            {"order_type": "dine_in", "table_id": str(self.table.id)},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_201_CREATED, res.data)
        order_id = res.data["id"]

        res = self.client.post(
            f"/api/orders/{order_id}/items/",
            {"product_id": str(self.burger.id), "quantity": 1},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_201_CREATED, res.data)

        res = self.client.post(
            f"/api/orders/{order_id}/items/",
            {"product_id": str(self.beer.id), "quantity": 2, "notes": "cold"},
            format="json",
        )
        self.assertEqual(Decimal(res.data["total_amount"]), Decimal("70000.00"))

        beer_line = next(i for i in res.data["items"] if i["product"] == self.beer.id)
        res = self.client.patch(f"/api/order-items/{beer_line['id']}/", {"quantity": 1}, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK, res.data)
        self.assertEqual(Decimal(res.data["total_amount"]), Decimal("50000.00"))

        self._as(self.cook)
        res = self.client.post(f"/api/kitchen/orders/{order_id}/status/", {"status": "preparing"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK, res.data)
        res = self.client.post(f"/api/kitchen/orders/{order_id}/status/", {"status": "ready"}, format="json")
        self.assertEqual(res.data["status"], Order.STATUS_READY)

        self._as(self.cashier)
        res = self.client.post(f"/api/orders/{order_id}/pay-cash/", {"amount": "50000"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK, res.data)
        self.assertEqual(res.data["outcome"], "settled")
        self.assertTrue(res.data["settled"])

        res = self.client.get(f"/api/orders/{order_id}/receipt/")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["status"], Order.STATUS_SERVED)
        self.assertEqual(Decimal(res.data["total_paid"]), Decimal("50000.00"))

        self.table.refresh_from_db()
        self.assertEqual(self.table.status, RestaurantTable.STATUS_AVAILABLE)

    def test_repeat_payment_returns_already_settled(self):
        order = self.make_order(shift=self.shift, staff=self.cashier, status=Order.STATUS_READY)
        self.add_line(order, self.burger)
        self._as(self.cashier)

        first = self.client.post(f"/api/orders/{order.id}/pay-momo/", {"amount": "30000"}, format="json")
        second = self.client.post(f"/api/orders/{order.id}/pay-momo/", {"amount": "30000"}, format="json")

        self.assertEqual(first.data["outcome"], "settled")
        self.assertEqual(second.status_code, status.HTTP_200_OK)
        self.assertEqual(second.data["outcome"], "already_settled")
        self.assertEqual(Payment.objects.filter(order=order).count(), 1)

    def test_order_list_filters_by_status(self):
        served = self.make_order(shift=self.shift, staff=self.cashier, status=Order.STATUS_SERVED)
        self.make_order(shift=self.shift, staff=self.cashier)
        self._as(self.cashier)

        res = self.client.get("/api/orders/", {"status": "served"})

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual([row["id"] for row in res.data], [str(served.id)])

    def test_active_orders_default_to_callers_shift(self):
        self.make_order(shift=self.shift, staff=self.cashier)
        self._as(self.cashier)

        res = self.client.get("/api/orders/active/")

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["shift_id"], str(self.shift.id))
        self.assertEqual(len(res.data["results"]), 1)

    def test_kitchen_queue(self):
        order = self.make_order(shift=self.shift, staff=self.cashier)
        self.add_line(order, self.burger)
        self._as(self.cook)

        res = self.client.get(f"/api/kitchen/{self.shift.id}/queue/")

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["results"][0]["order_id"], str(order.id))


class OrderApiErrorTests(OrderFixturesMixin, TestCase):
    """
    Domain errors map to stable HTTP codes with {"error": {"code", "message", ...}}.
    """

    def setUp(self):
        self.client = APIClient()
        self.cashier = self.make_staff("cashier")
        self.shift = self.open_shift(self.cashier)
        self.product = self.make_product("Samosa", "30000.00")
        self.order = self.make_order(shift=self.shift, staff=self.cashier, status=Order.STATUS_READY)
        self.add_line(self.order, self.product)
        self.client.force_authenticate(user=self.cashier)

    def test_unauthenticated_is_rejected(self):
        client = APIClient()
        res = client.get(f"/api/orders/{self.order.id}/receipt/")
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_unknown_order_is_404(self):
        res = self.client.get(f"/api/orders/{uuid.uuid4()}/receipt/")

        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(res.data["error"]["code"], "ORDER_NOT_FOUND")

    def test_underpayment_is_400_with_amounts(self):
        res = self.client.post(f"/api/orders/{self.order.id}/pay-cash/", {"amount": "29999"}, format="json")

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"]["code"], "PAYMENT_INSUFFICIENT")
        self.assertEqual(res.data["error"]["amount"], "29999.00")
        self.assertEqual(res.data["error"]["total"], "30000.00")

    def test_invalid_kitchen_transition_is_409(self):
        cook = self.make_staff("kitchen")
        self.client.force_authenticate(user=cook)

        res = self.client.post(f"/api/kitchen/orders/{self.order.id}/status/", {"status": "preparing"}, format="json")

        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(res.data["error"]["code"], "INVALID_KITCHEN_STATUS_TRANSITION")
        self.assertEqual(res.data["error"]["current_status"], Order.STATUS_READY)
        self.assertEqual(res.data["error"]["attempted_status"], Order.STATUS_PREPARING)

    def test_editing_ready_order_is_409(self):
        res = self.client.post(
            f"/api/orders/{self.order.id}/items/",
            {"product_id": str(self.product.id), "quantity": 1},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(res.data["error"]["code"], "INVALID_ORDER_STATE")

    def test_zero_quantity_is_400(self):
        order = self.make_order(shift=self.shift, staff=self.cashier)

        res = self.client.post(
            f"/api/orders/{order.id}/items/",
            {"product_id": str(self.product.id), "quantity": 0},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"]["code"], "INVALID_QUANTITY")

    def test_cashier_cannot_set_served(self):
        res = self.client.post(f"/api/orders/{self.order.id}/status/", {"status": "served"}, format="json")

        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(res.data["error"]["code"], "INVALID_ORDER_STATUS_TRANSITION")

    def test_waiter_cannot_pay(self):
        waiter = self.make_staff("waiter")
        self.client.force_authenticate(user=waiter)

        res = self.client.post(f"/api/orders/{self.order.id}/pay-cash/", {"amount": "30000"}, format="json")

        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(Payment.objects.filter(order=self.order).exists())

    def test_dine_in_without_table_is_400(self):
        res = self.client.post("/api/orders/", {"order_type": "dine_in"}, format="json")

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"]["code"], "TABLE_REQUIRED_FOR_DINE_IN")
