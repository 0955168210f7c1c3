"""Product catalog.

Persistence model, repository and service for catalog products.
"""

from catalog_api.catalog.models import ProductModel
from catalog_api.catalog.repository import Page, ProductRepository, ProductStore
from catalog_api.catalog.service import ProductPage, ProductService

__all__ = [
    # Models
    "ProductModel",
    # Repository
    "Page",
    "ProductRepository",
    "ProductStore",
    # Service
    "ProductPage",
    "ProductService",
]
