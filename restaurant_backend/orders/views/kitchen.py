# orders/views/kitchen.py

"""
KITCHEN ENDPOINTS

- POST /api/kitchen/orders/<id>/status/  {"status": "preparing" | "ready"}
- GET  /api/kitchen/<shift_id>/queue/    pending/preparing tickets, oldest first
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiTypes, extend_schema
from rest_framework.response import Response
from rest_framework.views import APIView

from orders.api.errors import DOMAIN_ERRORS, domain_error_response
from orders.api.idempotency import idempotent_response
from orders.models import IdempotencyRecord
from orders.serializers import KitchenStatusCommandSerializer, OrderSerializer
from orders.services import get_kitchen_queue, update_kitchen_status
from orders.views.orders import order_payload
from permissions.roles import IsKitchenStaff, IsStaff


class KitchenStatusView(APIView):
    permission_classes = [IsKitchenStaff]

    @extend_schema(request=KitchenStatusCommandSerializer, responses={200: OrderSerializer})
    def post(self, request, order_id):
        cmd = KitchenStatusCommandSerializer(data=request.data)
        cmd.is_valid(raise_exception=True)
        data = cmd.validated_data

        return idempotent_response(
            data.get("client_request_id"),
            IdempotencyRecord.RESOURCE_KITCHEN_STATUS,
            lambda: self._update(request, order_id, data["status"].strip().lower()),
        )

    def _update(self, request, order_id, new_status):
        try:
            order = update_kitchen_status(order_id=order_id, new_status=new_status, staff_id=request.user.pk)
        except DOMAIN_ERRORS as exc:
            return domain_error_response(exc)

        return Response(order_payload(order.pk))


class KitchenQueueView(APIView):
    permission_classes = [IsStaff]

    @extend_schema(responses={200: OpenApiTypes.OBJECT})
    def get(self, request, shift_id):
        return Response({"shift_id": str(shift_id), "results": get_kitchen_queue(shift_id)})
