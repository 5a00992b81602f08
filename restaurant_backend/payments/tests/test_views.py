# payments/tests/test_views.py

from __future__ import annotations

import hashlib
import hmac
import json
from unittest import mock

from django.test import TestCase, override_settings
from rest_framework import status
from rest_framework.test import APIClient

from orders.models import Order, Payment
from orders.tests.helpers import OrderFixturesMixin
from payments.services import PaymentGatewayError
from payments.views.webhook import map_pesapal_method

WEBHOOK_URL = "/api/payments/pesapal/webhook/"


class MethodMappingTests(TestCase):
    def test_gateway_names_map_to_tenders(self):
        self.assertEqual(map_pesapal_method("MTN"), Payment.METHOD_MTN_MOMO)
        self.assertEqual(map_pesapal_method("airtel"), Payment.METHOD_AIRTEL_MONEY)
        self.assertEqual(map_pesapal_method("VISA"), Payment.METHOD_CARD)
        self.assertEqual(map_pesapal_method("MASTERCARD"), Payment.METHOD_CARD)
        self.assertEqual(map_pesapal_method(""), Payment.METHOD_CARD)


@override_settings(PAYMENTS={"PESAPAL": {"WEBHOOK_SECRET": "", "ALLOW_UNSIGNED_WEBHOOKS": True}})
class WebhookViewTests(OrderFixturesMixin, TestCase):
    def setUp(self):
        self.client = APIClient()
        self.cashier = self.make_staff("cashier")
        self.shift = self.open_shift(self.cashier)
        self.order = self.make_order(shift=self.shift, staff=self.cashier, status=Order.STATUS_READY)
        self.add_line(self.order, self.make_product("Tilapia", "40000.00"))

    def _payload(self, **overrides):
        data = {
            "orderId": str(self.order.id),
            "amount": 40000,
            "payment_method": "MTN",
            "reference": "TRK-001",
        }
        data.update(overrides)
        return data

    def test_webhook_settles_once_and_acknowledges_retries(self):
        first = self.client.post(WEBHOOK_URL, self._payload(), format="json")
        retry = self.client.post(WEBHOOK_URL, self._payload(), format="json")

        self.assertEqual(first.status_code, status.HTTP_200_OK, first.data)
        self.assertEqual(first.data["outcome"], "settled")
        self.assertEqual(retry.status_code, status.HTTP_200_OK)
        self.assertEqual(retry.data["outcome"], "duplicate_reference")

        payment = Payment.objects.get(order=self.order)
        self.assertEqual(payment.method, Payment.METHOD_MTN_MOMO)
        self.assertEqual(payment.external_reference, "TRK-001")
        self.assertIsNone(payment.created_by_id)

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_SERVED)

    def test_underpaid_callback_is_rejected(self):
        res = self.client.post(WEBHOOK_URL, self._payload(amount=100), format="json")

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"]["code"], "PAYMENT_INSUFFICIENT")
        self.assertFalse(Payment.objects.exists())

    def test_missing_reference_is_rejected(self):
        res = self.client.post(WEBHOOK_URL, self._payload(reference=""), format="json")

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"]["code"], "EXTERNAL_REFERENCE_REQUIRED")

    def test_order_tracking_id_is_accepted_as_reference(self):
        payload = self._payload(reference="")
        payload["order_tracking_id"] = "TRK-ALT"

        res = self.client.post(WEBHOOK_URL, payload, format="json")

        self.assertEqual(res.status_code, status.HTTP_200_OK, res.data)
        self.assertTrue(Payment.objects.filter(external_reference="TRK-ALT").exists())

    @override_settings(PAYMENTS={"PESAPAL": {"WEBHOOK_SECRET": "hook-key"}})
    def test_signature_required_when_secret_configured(self):
        body = json.dumps(self._payload()).encode("utf-8")

        bad = self.client.post(
            WEBHOOK_URL, body, content_type="application/json", HTTP_X_PESAPAL_SIGNATURE="nope"
        )
        self.assertEqual(bad.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Payment.objects.exists())

        good_sig = hmac.new(b"hook-key", body, hashlib.sha256).hexdigest()
        good = self.client.post(
            WEBHOOK_URL, body, content_type="application/json", HTTP_X_PESAPAL_SIGNATURE=good_sig
        )
        self.assertEqual(good.status_code, status.HTTP_200_OK, good.data)


@override_settings(PAYMENTS={"PESAPAL": {"WEBHOOK_SECRET": ""}})
class UnsignedWebhookRefusedTests(OrderFixturesMixin, TestCase):
    """
    GUARANTEES:
    - Without a configured secret (and no explicit opt-in) nobody can settle
      an order by posting to the public webhook
    """

    def test_unsigned_body_cannot_settle(self):
        cashier = self.make_staff("cashier")
        order = self.make_order(shift=self.open_shift(cashier), staff=cashier, status=Order.STATUS_READY)
        self.add_line(order, self.make_product("Fish fillet", "30000.00"))

        res = APIClient().post(
            WEBHOOK_URL,
            {"orderId": str(order.id), "amount": 30000, "payment_method": "MTN", "reference": "x"},
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"]["code"], "INVALID_SIGNATURE")
        self.assertFalse(Payment.objects.exists())
        order.refresh_from_db()
        self.assertEqual(order.status, Order.STATUS_READY)


class SessionAndCallbackViewTests(OrderFixturesMixin, TestCase):
    def setUp(self):
        self.client = APIClient()
        self.cashier = self.make_staff("cashier")
        self.shift = self.open_shift(self.cashier)
        self.order = self.make_order(shift=self.shift, staff=self.cashier, status=Order.STATUS_READY)
        self.add_line(self.order, self.make_product("Goat stew", "25000.00"))
        self.client.force_authenticate(user=self.cashier)

    @override_settings(FRONTEND_BASE_URL="https://pos.test")
    @mock.patch("payments.views.session.create_payment_session")
    def test_session_view_defaults_to_frontend_base(self, create_session):
        create_session.return_value = mock.Mock(
            order_id=str(self.order.id),
            redirect_url="https://pay.test/r/9",
            callback_url=f"https://pos.test/pos/orders/{self.order.id}/payment-callback",
            amount="25000.00",
            currency="UGX",
        )

        res = self.client.post(f"/api/payments/pesapal/orders/{self.order.id}/session/", {}, format="json")

        self.assertEqual(res.status_code, status.HTTP_200_OK, res.data)
        self.assertEqual(res.data["redirect_url"], "https://pay.test/r/9")
        self.assertEqual(create_session.call_args.kwargs["return_base_url"], "https://pos.test")

    @mock.patch("payments.views.session.create_payment_session", side_effect=PaymentGatewayError("down"))
    def test_gateway_failure_is_502(self, create_session):
        res = self.client.post(f"/api/payments/pesapal/orders/{self.order.id}/session/", {}, format="json")

        self.assertEqual(res.status_code, status.HTTP_502_BAD_GATEWAY)
        self.assertEqual(res.data["error"]["code"], "PAYMENT_GATEWAY_ERROR")

    @override_settings(FRONTEND_BASE_URL="https://pos.test/")
    def test_callback_redirects_to_pos(self):
        client = APIClient()
        res = client.get(
            "/api/payments/pesapal/callback/",
            {"OrderTrackingId": "TRK-9", "OrderMerchantReference": str(self.order.id)},
        )

        self.assertEqual(res.status_code, 302)
        self.assertEqual(
            res["Location"],
            f"https://pos.test/pos/orders/{self.order.id}/payment-callback?OrderTrackingId=TRK-9",
        )

    def test_callback_without_reference_goes_to_order_list(self):
        res = APIClient().get("/api/payments/pesapal/callback/")

        self.assertEqual(res.status_code, 302)
        self.assertTrue(res["Location"].endswith("/pos/orders"))
