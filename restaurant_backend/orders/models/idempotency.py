# orders/models/idempotency.py

import uuid

from django.core.serializers.json import DjangoJSONEncoder
from django.db import models


class IdempotencyRecord(models.Model):
    """
    One client-generated request id per processed write command.

    Offline POS terminals replay queued commands with the same
    client_request_id; a replay returns the stored response instead of
    re-running the command (no second line item, no second payment).

    Lifecycle:
    - claimed   -> completed_at IS NULL (command running)
    - completed -> response stored; replays return it verbatim
    A command that fails releases its claim so the client may retry.
    """

    RESOURCE_ORDER_CREATE = "order_create"
    RESOURCE_ADD_ITEM = "add_item"
    RESOURCE_PAY_CASH = "pay_cash"
    RESOURCE_PAY_MOMO = "pay_momo"
    RESOURCE_KITCHEN_STATUS = "kitchen_status"

    RESOURCE_CHOICES = [
        (RESOURCE_ORDER_CREATE, "Create order"),
        (RESOURCE_ADD_ITEM, "Add item"),
        (RESOURCE_PAY_CASH, "Pay cash"),
        (RESOURCE_PAY_MOMO, "Pay MoMo"),
        (RESOURCE_KITCHEN_STATUS, "Kitchen status"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    client_request_id = models.CharField(max_length=64, unique=True)
    resource_type = models.CharField(max_length=32, choices=RESOURCE_CHOICES)

    response_status = models.PositiveSmallIntegerField(null=True, blank=True)
    response_json = models.JSONField(null=True, blank=True, encoder=DjangoJSONEncoder)

    created_at = models.DateTimeField(auto_now_add=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        indexes = [
            models.Index(fields=["resource_type", "created_at"], name="idempotency_type_created_idx"),
        ]

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    def __str__(self):
        state = "done" if self.is_completed else "pending"
        return f"{self.resource_type} {self.client_request_id} | {state}"
