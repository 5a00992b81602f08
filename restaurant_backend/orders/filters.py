# orders/filters.py

import django_filters

from orders.models import Order


class OrderFilter(django_filters.FilterSet):
    """
    Manager/admin order list filters.

    ?status=served  ?status__in=pending,preparing  ?order_type=dine_in
    ?shift=<uuid>   ?table=<uuid>  ?created_at__gte=2026-01-01T00:00:00Z
    """

    class Meta:
        model = Order
        fields = {
            "status": ["exact", "in"],
            "order_type": ["exact"],
            "shift": ["exact"],
            "table": ["exact"],
            "created_at": ["gte", "lte"],
        }
