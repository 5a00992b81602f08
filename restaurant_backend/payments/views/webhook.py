# payments/views/webhook.py

"""
PESAPAL WEBHOOK (IPN)

POST /api/payments/pesapal/webhook/

Body:
  {
    "orderId": "<uuid>",
    "amount": 20000,
    "payment_method": "MTN" | "AIRTEL" | "VISA" | "MASTERCARD" | ...,
    "reference": "<gateway transaction reference>"
  }

Rules:
- AllowAny + throttled; authenticity comes from X-Pesapal-Signature.
  Unsigned bodies pass only with PESAPAL_ALLOW_UNSIGNED_WEBHOOKS (dev).
- Settlement runs as the "system" staff sentinel.
- Retries with the same reference are acknowledged with 200 and no effect.
"""

from __future__ import annotations

import logging

from drf_spectacular.utils import OpenApiTypes, extend_schema
from rest_framework import serializers, status
from rest_framework.parsers import JSONParser
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle
from rest_framework.views import APIView

from orders.api.errors import DOMAIN_ERRORS, domain_error_response, error_response
from orders.models import Payment
from orders.services import SYSTEM_STAFF_ID, record_external_payment
from payments.services.pesapal import verify_webhook_signature

logger = logging.getLogger(__name__)


class WebhookThrottle(AnonRateThrottle):
    scope = "webhook"


def map_pesapal_method(payment_method: str | None) -> str:
    normalized = (payment_method or "").strip().upper()
    if normalized == "MTN":
        return Payment.METHOD_MTN_MOMO
    if normalized == "AIRTEL":
        return Payment.METHOD_AIRTEL_MONEY
    return Payment.METHOD_CARD


class PesapalWebhookSerializer(serializers.Serializer):
    orderId = serializers.UUIDField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    payment_method = serializers.CharField(required=False, allow_blank=True, default="")
    reference = serializers.CharField(required=False, allow_blank=True, default="")
    order_tracking_id = serializers.CharField(required=False, allow_blank=True, default="")


class PesapalWebhookView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]
    parser_classes = [JSONParser]
    throttle_classes = [WebhookThrottle]

    @extend_schema(request=PesapalWebhookSerializer, responses={200: OpenApiTypes.OBJECT})
    def post(self, request, *args, **kwargs):
        raw_body = getattr(request, "body", b"") or b""
        signature = request.headers.get("x-pesapal-signature")

        if not verify_webhook_signature(raw_body=raw_body, signature=signature):
            logger.warning("Invalid Pesapal signature")
            return error_response(
                code="INVALID_SIGNATURE",
                message="Invalid signature",
                http_status=status.HTTP_400_BAD_REQUEST,
            )

        payload = PesapalWebhookSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        data = payload.validated_data

        reference = (data.get("reference") or data.get("order_tracking_id") or "").strip()
        order_id = data["orderId"]
        method = map_pesapal_method(data.get("payment_method"))

        logger.info(
            "Pesapal webhook received",
            extra={"order_id": str(order_id), "reference": reference, "method": method},
        )

        try:
            result = record_external_payment(
                order_id=order_id,
                amount=data["amount"],
                method=method,
                staff_id=SYSTEM_STAFF_ID,
                external_reference=reference,
            )
        except DOMAIN_ERRORS as exc:
            logger.warning(
                "Pesapal webhook rejected",
                extra={"order_id": str(order_id), "reference": reference, "code": getattr(exc, "code", "")},
            )
            return domain_error_response(exc)

        return Response({"success": True, "order_id": result.order_id, "outcome": result.outcome})
