# orders/views/orders.py

"""
ORDER ENDPOINTS (STAFF)

- GET  /api/orders/                     filtered list (status, type, shift, table)
- POST /api/orders/                     open an order on the caller's shift
- GET  /api/orders/active/?shift_id=    POS screen (defaults to caller's shift)
- GET  /api/orders/<id>/receipt/        receipt projection
- POST /api/orders/<id>/status/         cashier-flow transition
- POST /api/orders/<id>/cancel/         cancellation (cashier and above)

The views never decide business rules; they call orders.services with the
authenticated user as staff_id and translate domain errors in one place.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, OpenApiTypes, extend_schema
from rest_framework import generics, status
from rest_framework.response import Response
from rest_framework.views import APIView

from orders.api.errors import DOMAIN_ERRORS, domain_error_response, error_response
from orders.filters import OrderFilter
from orders.api.idempotency import idempotent_response
from orders.models import IdempotencyRecord, Order
from orders.serializers import (
    OrderCreateCommandSerializer,
    OrderSerializer,
    OrderStatusCommandSerializer,
)
from orders.services import (
    cancel_order,
    create_order,
    get_active_orders_for_shift,
    get_order_receipt,
    set_order_status,
)
from permissions.roles import IsCashierOrAbove, IsOrderTaker, IsStaff
from shifts.services import get_active_shift


def order_payload(order_id) -> dict:
    order = (
        Order.objects.select_related("table")
        .prefetch_related("items", "items__product")
        .get(pk=order_id)
    )
    return OrderSerializer(order).data


class OrderListCreateView(generics.ListAPIView):
    """
    GET: filtered order list (any staff). POST: open a new order.
    """

    serializer_class = OrderSerializer
    filterset_class = OrderFilter
    queryset = (
        Order.objects.select_related("table")
        .prefetch_related("items", "items__product")
        .order_by("-created_at")
    )

    def get_permissions(self):
        if self.request.method == "POST":
            return [IsOrderTaker()]
        return [IsStaff()]

    @extend_schema(request=OrderCreateCommandSerializer, responses={201: OrderSerializer})
    def post(self, request):
        cmd = OrderCreateCommandSerializer(data=request.data)
        cmd.is_valid(raise_exception=True)
        data = cmd.validated_data

        return idempotent_response(
            data.get("client_request_id"),
            IdempotencyRecord.RESOURCE_ORDER_CREATE,
            lambda: self._create(request, data),
        )

    def _create(self, request, data):
        try:
            order = create_order(
                staff_id=request.user.pk,
                order_type=data["order_type"],
                table_id=data.get("table_id"),
            )
        except DOMAIN_ERRORS as exc:
            return domain_error_response(exc)

        return Response(order_payload(order.pk), status=status.HTTP_201_CREATED)


class ActiveOrdersView(APIView):
    permission_classes = [IsStaff]

    @extend_schema(
        parameters=[
            OpenApiParameter(
                name="shift_id",
                type=OpenApiTypes.UUID,
                required=False,
                description="Defaults to the caller's open shift",
            )
        ],
        responses={200: OpenApiTypes.OBJECT},
    )
    def get(self, request):
        shift_id = (request.query_params.get("shift_id") or "").strip()

        if not shift_id:
            try:
                shift_id = get_active_shift(request.user.pk).pk
            except DOMAIN_ERRORS as exc:
                return domain_error_response(exc)

        return Response({"shift_id": str(shift_id), "results": get_active_orders_for_shift(shift_id)})


class OrderReceiptView(APIView):
    permission_classes = [IsStaff]

    @extend_schema(responses={200: OpenApiTypes.OBJECT})
    def get(self, request, order_id):
        try:
            receipt = get_order_receipt(order_id)
        except DOMAIN_ERRORS as exc:
            return domain_error_response(exc)
        return Response(receipt)


class OrderStatusView(APIView):
    permission_classes = [IsOrderTaker]

    @extend_schema(request=OrderStatusCommandSerializer, responses={200: OrderSerializer})
    def post(self, request, order_id):
        cmd = OrderStatusCommandSerializer(data=request.data)
        if not cmd.is_valid():
            return error_response(
                code="INVALID_STATUS",
                message="status must be one of: " + ", ".join(k for k, _ in Order.STATUS_CHOICES),
                http_status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            order = set_order_status(
                order_id=order_id,
                new_status=cmd.validated_data["status"],
                staff_id=request.user.pk,
            )
        except DOMAIN_ERRORS as exc:
            return domain_error_response(exc)

        return Response(order_payload(order.pk))


class OrderCancelView(APIView):
    permission_classes = [IsCashierOrAbove]

    @extend_schema(request=None, responses={200: OrderSerializer})
    def post(self, request, order_id):
        try:
            order = cancel_order(order_id=order_id, staff_id=request.user.pk)
        except DOMAIN_ERRORS as exc:
            return domain_error_response(exc)

        return Response(order_payload(order.pk))
