# orders/serializers/commands.py

"""
COMMAND SERIALIZERS (WRITE INPUT)

Shape validation only. Business rules (quantity >= 1, non-negative amounts,
allowed transitions) live in orders.services so every caller gets the same
typed error codes.
"""

from rest_framework import serializers

from orders.models import Order

CLIENT_REQUEST_ID = dict(required=False, allow_blank=True, allow_null=True, max_length=64)


class OrderCreateCommandSerializer(serializers.Serializer):
    order_type = serializers.ChoiceField(choices=Order.TYPE_CHOICES)
    table_id = serializers.UUIDField(required=False, allow_null=True)
    client_request_id = serializers.CharField(**CLIENT_REQUEST_ID)


class OrderItemAddCommandSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField()
    size = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=32)
    modifier = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    client_request_id = serializers.CharField(**CLIENT_REQUEST_ID)


class OrderItemQuantityCommandSerializer(serializers.Serializer):
    quantity = serializers.IntegerField()


class OrderStatusCommandSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Order.STATUS_CHOICES)


class KitchenStatusCommandSerializer(serializers.Serializer):
    # Unknown targets surface as kitchen transition errors (409).
    status = serializers.CharField(max_length=16)
    client_request_id = serializers.CharField(**CLIENT_REQUEST_ID)


class PaymentCommandSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    client_request_id = serializers.CharField(**CLIENT_REQUEST_ID)
