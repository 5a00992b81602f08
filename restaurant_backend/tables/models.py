# tables/models.py

import uuid

from django.db import models


class RestaurantTable(models.Model):
    """
    Physical dine-in table.

    status is a cached occupancy flag; the source of truth is whether any
    non-terminal dine-in order still points at the table.
    """

    STATUS_AVAILABLE = "available"
    STATUS_OCCUPIED = "occupied"

    STATUS_CHOICES = [
        (STATUS_AVAILABLE, "Available"),
        (STATUS_OCCUPIED, "Occupied"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    number = models.CharField(max_length=32, unique=True)
    capacity = models.PositiveIntegerField(default=4)

    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_AVAILABLE)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["number"]

    def __str__(self):
        return f"Table {self.number} | {self.status}"
