# orders/views/items.py

"""
ORDER ITEM ENDPOINTS (LEDGER)

- POST   /api/orders/<order_id>/items/     add a line (price snapshotted server-side)
- PATCH  /api/order-items/<item_id>/       change quantity
- DELETE /api/order-items/<item_id>/       remove a line

Every response returns the whole order so the POS never computes totals.
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from orders.api.errors import DOMAIN_ERRORS, domain_error_response
from orders.api.idempotency import idempotent_response
from orders.models import IdempotencyRecord
from orders.serializers import (
    OrderItemAddCommandSerializer,
    OrderItemQuantityCommandSerializer,
    OrderSerializer,
)
from orders.services import add_item, remove_item, update_item_quantity
from orders.views.orders import order_payload
from permissions.roles import IsOrderTaker


class OrderItemCreateView(APIView):
    permission_classes = [IsOrderTaker]

    @extend_schema(request=OrderItemAddCommandSerializer, responses={201: OrderSerializer})
    def post(self, request, order_id):
        cmd = OrderItemAddCommandSerializer(data=request.data)
        cmd.is_valid(raise_exception=True)
        data = cmd.validated_data

        return idempotent_response(
            data.get("client_request_id"),
            IdempotencyRecord.RESOURCE_ADD_ITEM,
            lambda: self._add(request, order_id, data),
        )

    def _add(self, request, order_id, data):
        try:
            item = add_item(
                order_id=order_id,
                product_id=data["product_id"],
                quantity=data["quantity"],
                size=data.get("size"),
                modifier=data.get("modifier"),
                notes=data.get("notes"),
                staff_id=request.user.pk,
            )
        except DOMAIN_ERRORS as exc:
            return domain_error_response(exc)

        return Response(order_payload(item.order_id), status=status.HTTP_201_CREATED)


class OrderItemDetailView(APIView):
    permission_classes = [IsOrderTaker]

    @extend_schema(request=OrderItemQuantityCommandSerializer, responses={200: OrderSerializer})
    def patch(self, request, order_item_id):
        cmd = OrderItemQuantityCommandSerializer(data=request.data)
        cmd.is_valid(raise_exception=True)

        try:
            item = update_item_quantity(
                order_item_id=order_item_id,
                quantity=cmd.validated_data["quantity"],
                staff_id=request.user.pk,
            )
        except DOMAIN_ERRORS as exc:
            return domain_error_response(exc)

        return Response(order_payload(item.order_id))

    @extend_schema(request=None, responses={200: OrderSerializer})
    def delete(self, request, order_item_id):
        try:
            order = remove_item(order_item_id=order_item_id, staff_id=request.user.pk)
        except DOMAIN_ERRORS as exc:
            return domain_error_response(exc)

        return Response(order_payload(order.pk))
