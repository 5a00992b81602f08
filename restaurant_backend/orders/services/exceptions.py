# orders/services/exceptions.py

"""
ORDER SERVICE ERRORS

Centralized domain errors for the order core.

Every error carries:
- a stable machine `code` (rendered by orders.api.errors)
- the identifiers involved, exposed through `context`
"""

from __future__ import annotations


class OrderServiceError(Exception):
    """Base exception for all order/settlement failures."""

    code = "ORDER_SERVICE_ERROR"

    def __init__(self, message: str, **context):
        self.context = {k: v for k, v in context.items()}
        for key, value in context.items():
            setattr(self, key, value)
        super().__init__(message)


# ============================================================
# LOOKUP
# ============================================================


class OrderNotFoundError(OrderServiceError):
    code = "ORDER_NOT_FOUND"

    def __init__(self, order_id):
        super().__init__(f"Order not found: {order_id}", order_id=str(order_id))


class OrderItemNotFoundError(OrderServiceError):
    code = "ORDER_ITEM_NOT_FOUND"

    def __init__(self, order_item_id):
        super().__init__(
            f"Order item not found: {order_item_id}",
            order_item_id=str(order_item_id),
        )


# ============================================================
# STATE
# ============================================================


class InvalidOrderStateError(OrderServiceError):
    """Raised when the line items of a non-editable order are touched."""

    code = "INVALID_ORDER_STATE"

    def __init__(self, order_id, current_status, attempted_action):
        super().__init__(
            f"Order {order_id} is '{current_status}'; cannot {attempted_action}",
            order_id=str(order_id),
            current_status=current_status,
            attempted_action=attempted_action,
        )


class InvalidOrderStatusTransitionError(OrderServiceError):
    code = "INVALID_ORDER_STATUS_TRANSITION"

    def __init__(self, order_id, current_status, attempted_status):
        super().__init__(
            f"Order {order_id} cannot transition from '{current_status}' to '{attempted_status}'",
            order_id=str(order_id),
            current_status=current_status,
            attempted_status=attempted_status,
        )


class InvalidKitchenStatusTransitionError(OrderServiceError):
    code = "INVALID_KITCHEN_STATUS_TRANSITION"

    def __init__(self, order_id, current_status, attempted_status):
        super().__init__(
            f"Kitchen cannot move order {order_id} from '{current_status}' to '{attempted_status}'",
            order_id=str(order_id),
            current_status=current_status,
            attempted_status=attempted_status,
        )


class ShiftAlreadyClosedError(OrderServiceError):
    code = "SHIFT_ALREADY_CLOSED"

    def __init__(self, order_id, shift_id):
        super().__init__(
            f"Shift {shift_id} owning order {order_id} is already closed",
            order_id=str(order_id),
            shift_id=str(shift_id),
        )


class OrderHasNoItemsError(OrderServiceError):
    code = "ORDER_HAS_NO_ITEMS"

    def __init__(self, order_id):
        super().__init__(f"Order {order_id} has no items", order_id=str(order_id))


# ============================================================
# INPUT
# ============================================================


class InvalidQuantityError(OrderServiceError):
    code = "INVALID_QUANTITY"

    def __init__(self, quantity):
        super().__init__(
            f"Quantity must be a whole number >= 1 (got {quantity!r})",
            quantity=quantity,
        )


class InvalidOrderTypeError(OrderServiceError):
    code = "INVALID_ORDER_TYPE"

    def __init__(self, order_type):
        super().__init__(f"Unknown order type: {order_type!r}", order_type=order_type)


class TableRequiredForDineInError(OrderServiceError):
    code = "TABLE_REQUIRED_FOR_DINE_IN"

    def __init__(self):
        super().__init__("Dine-in orders require a table")


class TableNotAllowedForTakeawayError(OrderServiceError):
    code = "TABLE_NOT_ALLOWED_FOR_TAKEAWAY"

    def __init__(self, table_id):
        super().__init__(
            "Takeaway orders cannot be assigned a table",
            table_id=str(table_id),
        )


# ============================================================
# PAYMENT
# ============================================================


class PaymentInsufficientError(OrderServiceError):
    code = "PAYMENT_INSUFFICIENT"

    def __init__(self, order_id, amount, total):
        super().__init__(
            f"Payment {amount} is less than order total {total}",
            order_id=str(order_id),
            amount=str(amount),
            total=str(total),
        )


class PaymentAmountInvalidError(OrderServiceError):
    code = "PAYMENT_AMOUNT_INVALID"

    def __init__(self, amount):
        super().__init__(
            f"Payment amount must be a non-negative decimal with at most 2 places (got {amount!r})",
            amount=str(amount),
        )


class UnsupportedPaymentMethodError(OrderServiceError):
    code = "UNSUPPORTED_PAYMENT_METHOD"

    def __init__(self, method):
        super().__init__(f"Unsupported payment method: {method!r}", method=method)


class ExternalReferenceRequiredError(OrderServiceError):
    code = "EXTERNAL_REFERENCE_REQUIRED"

    def __init__(self):
        super().__init__("Gateway payments require an external reference")


# ============================================================
# CLIENT REQUEST IDEMPOTENCY
# ============================================================


class IdempotencyKeyReusedError(OrderServiceError):
    code = "IDEMPOTENCY_KEY_REUSED"

    def __init__(self, client_request_id, stored_type, attempted_type):
        super().__init__(
            f"client_request_id {client_request_id} was already used for {stored_type}",
            client_request_id=client_request_id,
            stored_type=stored_type,
            attempted_type=attempted_type,
        )


class IdempotentRequestInProgressError(OrderServiceError):
    code = "IDEMPOTENT_REQUEST_IN_PROGRESS"

    def __init__(self, client_request_id):
        super().__init__(
            f"Request {client_request_id} is still being processed; retry shortly",
            client_request_id=client_request_id,
        )
