# orders/services/__init__.py

"""
ORDER CORE SERVICES (PUBLIC SURFACE)

The settlement function itself (_finalize_payment) is intentionally not
exported; callers go through the role-checked entry points.
"""

from .order_create import create_order
from .order_items import add_item, remove_item, update_item_quantity
from .order_status import cancel_order, set_order_status, update_kitchen_status
from .payments import (
    SYSTEM_STAFF_ID,
    SettlementResult,
    pay_order_cash,
    pay_order_momo,
    record_external_payment,
)
from .read_models import get_active_orders_for_shift, get_kitchen_queue, get_order_receipt

__all__ = [
    "create_order",
    "add_item",
    "update_item_quantity",
    "remove_item",
    "set_order_status",
    "cancel_order",
    "update_kitchen_status",
    "pay_order_cash",
    "pay_order_momo",
    "record_external_payment",
    "SettlementResult",
    "SYSTEM_STAFF_ID",
    "get_order_receipt",
    "get_kitchen_queue",
    "get_active_orders_for_shift",
]
