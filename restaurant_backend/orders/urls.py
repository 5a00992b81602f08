# orders/urls.py

from django.urls import path

from orders.views import (
    ActiveOrdersView,
    KitchenQueueView,
    KitchenStatusView,
    OrderCancelView,
    OrderListCreateView,
    OrderItemCreateView,
    OrderItemDetailView,
    OrderReceiptView,
    OrderStatusView,
    PayCashView,
    PayMomoView,
)

urlpatterns = [
    # Orders
    path("orders/", OrderListCreateView.as_view(), name="order-list"),
    path("orders/active/", ActiveOrdersView.as_view(), name="order-active"),
    path("orders/<uuid:order_id>/receipt/", OrderReceiptView.as_view(), name="order-receipt"),
    path("orders/<uuid:order_id>/status/", OrderStatusView.as_view(), name="order-status"),
    path("orders/<uuid:order_id>/cancel/", OrderCancelView.as_view(), name="order-cancel"),
    # Item ledger
    path("orders/<uuid:order_id>/items/", OrderItemCreateView.as_view(), name="order-item-create"),
    path("order-items/<uuid:order_item_id>/", OrderItemDetailView.as_view(), name="order-item-detail"),
    # Settlement
    path("orders/<uuid:order_id>/pay-cash/", PayCashView.as_view(), name="order-pay-cash"),
    path("orders/<uuid:order_id>/pay-momo/", PayMomoView.as_view(), name="order-pay-momo"),
    # Kitchen
    path("kitchen/orders/<uuid:order_id>/status/", KitchenStatusView.as_view(), name="kitchen-order-status"),
    path("kitchen/<uuid:shift_id>/queue/", KitchenQueueView.as_view(), name="kitchen-queue"),
]
