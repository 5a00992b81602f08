# products/services/lookup.py

"""
PRODUCT LOOKUP (READ CONTRACT FOR THE ORDER CORE)

The order ledger only needs two facts about a product:
- is it currently sellable (exists + active)?
- what is its price right now? (snapshotted into the order line)
"""

from __future__ import annotations

from django.core.exceptions import ValidationError

from products.models import Product


class ProductLookupError(Exception):
    code = "PRODUCT_LOOKUP_ERROR"


class ProductNotFoundError(ProductLookupError):
    code = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id):
        self.product_id = product_id
        super().__init__(f"Product not found: {product_id}")


class ProductInactiveError(ProductLookupError):
    code = "PRODUCT_INACTIVE"

    def __init__(self, product_id):
        self.product_id = product_id
        super().__init__(f"Product is inactive: {product_id}")


def get_sellable_product(product_id) -> Product:
    try:
        product = Product.objects.filter(pk=product_id).first()
    except (ValidationError, ValueError):
        product = None

    if product is None:
        raise ProductNotFoundError(product_id)
    if not product.is_active:
        raise ProductInactiveError(product_id)
    return product
