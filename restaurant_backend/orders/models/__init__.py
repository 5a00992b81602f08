# orders/models/__init__.py

"""
ORDERS MODELS PACKAGE EXPORTS
"""

from .idempotency import IdempotencyRecord
from .order import Order
from .order_item import OrderItem
from .payment import Payment

__all__ = [
    "IdempotencyRecord",
    "Order",
    "OrderItem",
    "Payment",
]
