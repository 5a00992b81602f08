from .lookup import ProductInactiveError, ProductNotFoundError, get_sellable_product

__all__ = [
    "get_sellable_product",
    "ProductNotFoundError",
    "ProductInactiveError",
]
