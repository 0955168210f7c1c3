"""Domain layer - the Product entity and domain exceptions.

Example usage:
    from catalog_api.domain import Product

    product = Product(category="electronics", name="Laptop")
    product.apply_update(name="Gaming Laptop")
"""

from catalog_api.domain.entities import Product
from catalog_api.domain.exceptions import (
    DomainError,
    ProductNotFoundError,
    StoreUnavailableError,
)

__all__ = [
    "DomainError",
    "Product",
    "ProductNotFoundError",
    "StoreUnavailableError",
]
