# orders/admin.py

from django.contrib import admin

from orders.models import IdempotencyRecord, Order, OrderItem, Payment


# ======================================================
# ORDER ADMIN (READ-MOSTLY)
# ======================================================
# Status and totals are owned by orders.services; admin edits would bypass
# the transition table and the settlement function.


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    can_delete = False
    readonly_fields = ("product", "quantity", "unit_price", "line_total", "size", "modifier", "notes")


class PaymentInline(admin.TabularInline):
    model = Payment
    extra = 0
    can_delete = False
    readonly_fields = ("amount", "method", "status", "external_reference", "created_by", "created_at")


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = (
        "order_number",
        "order_type",
        "status",
        "total_amount",
        "table",
        "created_at",
    )
    readonly_fields = (
        "order_number",
        "order_type",
        "status",
        "shift",
        "table",
        "subtotal_amount",
        "tax_amount",
        "total_amount",
        "created_by",
        "updated_by",
        "created_at",
        "updated_at",
    )
    search_fields = ("order_number",)
    list_filter = ("status", "order_type", "created_at")
    inlines = [OrderItemInline, PaymentInline]


# ======================================================
# PAYMENT ADMIN
# ======================================================


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("order", "amount", "method", "status", "external_reference", "created_at")
    readonly_fields = ("order", "amount", "method", "status", "external_reference", "created_by", "created_at")
    search_fields = ("external_reference", "order__order_number")
    list_filter = ("method", "status")


@admin.register(IdempotencyRecord)
class IdempotencyRecordAdmin(admin.ModelAdmin):
    list_display = ("client_request_id", "resource_type", "response_status", "created_at", "completed_at")
    list_filter = ("resource_type",)
    search_fields = ("client_request_id",)
    readonly_fields = (
        "client_request_id",
        "resource_type",
        "response_status",
        "response_json",
        "created_at",
        "completed_at",
    )
