# orders/apps.py

"""
ORDERS APP CONFIG

Order lifecycle + payment settlement core:
- Order item ledger (totals always re-derived from live lines)
- Status transition authority (cashier flow + kitchen flow)
- Payment finalizer (the only path to "served")
- Read models (receipt, kitchen queue, active orders)
"""

from django.apps import AppConfig


class OrdersConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "orders"
    verbose_name = "Orders & Settlement"
