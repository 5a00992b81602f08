# orders/serializers/order.py

from rest_framework import serializers

from orders.models import Order, OrderItem, Payment


class OrderItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "product",
            "product_name",
            "quantity",
            "unit_price",
            "line_total",
            "size",
            "modifier",
            "notes",
        ]
        read_only_fields = fields


class PaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Payment
        fields = [
            "id",
            "amount",
            "method",
            "status",
            "external_reference",
            "created_at",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)
    table_number = serializers.CharField(source="table.number", read_only=True, default=None)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "order_type",
            "status",
            "shift",
            "table",
            "table_number",
            "terminal_id",
            "subtotal_amount",
            "tax_amount",
            "total_amount",
            "items",
            "created_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class SettlementResultSerializer(serializers.Serializer):
    order_id = serializers.CharField()
    outcome = serializers.CharField()
    settled = serializers.BooleanField()
    payment_id = serializers.CharField(allow_null=True)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, allow_null=True)
    total_corrected = serializers.BooleanField()
