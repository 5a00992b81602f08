# orders/api/errors.py

"""
API ERROR NORMALIZATION

One place that turns domain errors into HTTP responses:

    not found            -> 404
    invalid state        -> 409
    input validation     -> 400
    role denied/inactive -> 403
    gateway not set up   -> 503
    gateway failure      -> 502

Body: {"error": {"code", "message", ...context}}
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.response import Response

from orders.services.exceptions import (
    IdempotencyKeyReusedError,
    IdempotentRequestInProgressError,
    InvalidKitchenStatusTransitionError,
    InvalidOrderStateError,
    InvalidOrderStatusTransitionError,
    OrderItemNotFoundError,
    OrderNotFoundError,
    OrderServiceError,
    ShiftAlreadyClosedError,
)
from payments.services.exceptions import PaymentGatewayConfigError, PaymentGatewayError
from permissions.exceptions import (
    RoleDeniedError,
    StaffAuthorizationError,
    StaffInactiveError,
    StaffNotFoundError,
)
from products.services.lookup import ProductLookupError, ProductNotFoundError
from shifts.services import NoActiveShiftError
from tables.services import TableNotFoundError

# Every exception family the views translate.
DOMAIN_ERRORS = (
    OrderServiceError,
    StaffAuthorizationError,
    ProductLookupError,
    TableNotFoundError,
    NoActiveShiftError,
    PaymentGatewayError,
)

NOT_FOUND = (
    OrderNotFoundError,
    OrderItemNotFoundError,
    ProductNotFoundError,
    TableNotFoundError,
    StaffNotFoundError,
)

CONFLICT = (
    InvalidOrderStateError,
    InvalidOrderStatusTransitionError,
    InvalidKitchenStatusTransitionError,
    ShiftAlreadyClosedError,
    NoActiveShiftError,
    IdempotencyKeyReusedError,
    IdempotentRequestInProgressError,
)

FORBIDDEN = (RoleDeniedError, StaffInactiveError)

# Attributes copied into the body for errors without a `context` dict.
_CONTEXT_ATTRS = ("staff_id", "role", "allowed_roles", "product_id", "table_id")


def error_response(*, code: str, message: str, http_status: int, **context):
    """
    Canonical API error response.
    """
    body = {"code": code, "message": message}
    body.update(context)
    return Response({"error": body}, status=http_status)


def status_for(exc: Exception) -> int:
    if isinstance(exc, NOT_FOUND):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, CONFLICT):
        return status.HTTP_409_CONFLICT
    if isinstance(exc, FORBIDDEN):
        return status.HTTP_403_FORBIDDEN
    if isinstance(exc, PaymentGatewayConfigError):
        return status.HTTP_503_SERVICE_UNAVAILABLE
    if isinstance(exc, PaymentGatewayError):
        return status.HTTP_502_BAD_GATEWAY
    return status.HTTP_400_BAD_REQUEST


def _context(exc: Exception) -> dict:
    ctx = getattr(exc, "context", None)
    if isinstance(ctx, dict):
        return {k: (v if isinstance(v, (int, list)) or v is None else str(v)) for k, v in ctx.items()}

    out = {}
    for attr in _CONTEXT_ATTRS:
        if hasattr(exc, attr):
            value = getattr(exc, attr)
            out[attr] = value if isinstance(value, list) else str(value)
    return out


def domain_error_response(exc: Exception) -> Response:
    return error_response(
        code=getattr(exc, "code", "ERROR"),
        message=str(exc),
        http_status=status_for(exc),
        **_context(exc),
    )
