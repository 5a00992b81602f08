# payments/views/session.py

"""
POST /api/payments/pesapal/orders/<order_id>/session/

Body (optional): {"return_base_url": "https://pos.example.com"}
Defaults to FRONTEND_BASE_URL.

Returns the gateway redirect URL. No order state changes.
"""

from __future__ import annotations

from django.conf import settings
from drf_spectacular.utils import extend_schema
from rest_framework import serializers
from rest_framework.response import Response
from rest_framework.views import APIView

from orders.api.errors import DOMAIN_ERRORS, domain_error_response
from payments.services import create_payment_session
from permissions.roles import IsCashierOrAbove


class PaymentSessionCommandSerializer(serializers.Serializer):
    return_base_url = serializers.URLField(required=False, allow_blank=True)


class PaymentSessionResponseSerializer(serializers.Serializer):
    order_id = serializers.CharField()
    redirect_url = serializers.URLField()
    callback_url = serializers.URLField()
    amount = serializers.CharField()
    currency = serializers.CharField()


class PaymentSessionView(APIView):
    permission_classes = [IsCashierOrAbove]

    @extend_schema(
        request=PaymentSessionCommandSerializer,
        responses={200: PaymentSessionResponseSerializer},
    )
    def post(self, request, order_id):
        cmd = PaymentSessionCommandSerializer(data=request.data)
        cmd.is_valid(raise_exception=True)

        return_base_url = (
            cmd.validated_data.get("return_base_url") or settings.FRONTEND_BASE_URL
        )

        try:
            session = create_payment_session(order_id=order_id, return_base_url=return_base_url)
        except DOMAIN_ERRORS as exc:
            return domain_error_response(exc)

        return Response(
            PaymentSessionResponseSerializer(
                {
                    "order_id": session.order_id,
                    "redirect_url": session.redirect_url,
                    "callback_url": session.callback_url,
                    "amount": session.amount,
                    "currency": session.currency,
                }
            ).data
        )
