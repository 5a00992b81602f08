from .commands import (
    KitchenStatusCommandSerializer,
    OrderCreateCommandSerializer,
    OrderItemAddCommandSerializer,
    OrderItemQuantityCommandSerializer,
    OrderStatusCommandSerializer,
    PaymentCommandSerializer,
)
from .order import OrderItemSerializer, OrderSerializer, PaymentSerializer, SettlementResultSerializer

__all__ = [
    "OrderCreateCommandSerializer",
    "OrderItemAddCommandSerializer",
    "OrderItemQuantityCommandSerializer",
    "OrderStatusCommandSerializer",
    "KitchenStatusCommandSerializer",
    "PaymentCommandSerializer",
    "OrderSerializer",
    "OrderItemSerializer",
    "PaymentSerializer",
    "SettlementResultSerializer",
]
