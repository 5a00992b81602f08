from .items import OrderItemCreateView, OrderItemDetailView
from .kitchen import KitchenQueueView, KitchenStatusView
from .orders import (
    ActiveOrdersView,
    OrderCancelView,
    OrderListCreateView,
    OrderReceiptView,
    OrderStatusView,
)
from .settlement import PayCashView, PayMomoView

__all__ = [
    "OrderListCreateView",
    "ActiveOrdersView",
    "OrderReceiptView",
    "OrderStatusView",
    "OrderCancelView",
    "OrderItemCreateView",
    "OrderItemDetailView",
    "PayCashView",
    "PayMomoView",
    "KitchenStatusView",
    "KitchenQueueView",
]
