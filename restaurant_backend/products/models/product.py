import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models


class Product(models.Model):
    """
    Represents a sellable menu product (food or drink).

    PRICE MODEL (IMPORTANT):
    - price is the CURRENT selling price in whole currency units
    - Order lines snapshot it at add-time (OrderItem.unit_price);
      later price edits never touch open orders
    - is_active=False takes the product off the menu (cannot be added to orders)
    """

    STATION_KITCHEN = "kitchen"
    STATION_BAR = "bar"

    STATION_CHOICES = [
        (STATION_KITCHEN, "Kitchen"),
        (STATION_BAR, "Bar"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=255, db_index=True)
    category = models.CharField(max_length=64, blank=True, default="")

    station = models.CharField(
        max_length=16,
        choices=STATION_CHOICES,
        default=STATION_KITCHEN,
        help_text="Where the ticket is prepared.",
    )

    price = models.DecimalField(max_digits=12, decimal_places=2)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def clean(self):
        if self.price is None or Decimal(self.price) < Decimal("0.00"):
            raise ValidationError({"price": "Price cannot be negative"})

    def __str__(self):
        return f"{self.name} ({self.price})"
