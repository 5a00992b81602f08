# orders/views/settlement.py

"""
SETTLEMENT ENDPOINTS (CASHIER)

- POST /api/orders/<id>/pay-cash/   {"amount": "20000.00"}
- POST /api/orders/<id>/pay-momo/   {"amount": "20000.00"}

Both go through the same settlement function. A repeated/raced request on an
already-served order returns 200 with outcome "already_settled".
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework.response import Response
from rest_framework.views import APIView

from orders.api.errors import DOMAIN_ERRORS, domain_error_response
from orders.api.idempotency import idempotent_response
from orders.models import IdempotencyRecord
from orders.serializers import PaymentCommandSerializer, SettlementResultSerializer
from orders.services import pay_order_cash, pay_order_momo
from permissions.roles import IsCashierOrAbove


def _settlement_payload(result) -> dict:
    return SettlementResultSerializer(
        {
            "order_id": result.order_id,
            "outcome": result.outcome,
            "settled": result.settled,
            "payment_id": result.payment_id,
            "amount": result.amount,
            "total_corrected": result.total_corrected,
        }
    ).data


class _SettlementView(APIView):
    permission_classes = [IsCashierOrAbove]
    settle = None
    resource_type = None

    @extend_schema(request=PaymentCommandSerializer, responses={200: SettlementResultSerializer})
    def post(self, request, order_id):
        cmd = PaymentCommandSerializer(data=request.data)
        cmd.is_valid(raise_exception=True)
        data = cmd.validated_data

        return idempotent_response(
            data.get("client_request_id"),
            self.resource_type,
            lambda: self._settle(request, order_id, data["amount"]),
        )

    def _settle(self, request, order_id, amount):
        try:
            result = self.settle(order_id=order_id, amount=amount, staff_id=request.user.pk)
        except DOMAIN_ERRORS as exc:
            return domain_error_response(exc)

        return Response(_settlement_payload(result))


class PayCashView(_SettlementView):
    settle = staticmethod(pay_order_cash)
    resource_type = IdempotencyRecord.RESOURCE_PAY_CASH


class PayMomoView(_SettlementView):
    settle = staticmethod(pay_order_momo)
    resource_type = IdempotencyRecord.RESOURCE_PAY_MOMO
