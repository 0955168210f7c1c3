"""Catalog service for product operations.

High-level service that combines repository operations with the
catalog's business rules: a single not-found lookup, partial updates
and page assembly. Write operations run as one unit of work each.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

import structlog

from catalog_api.catalog.repository import ProductStore
from catalog_api.domain.entities import Product
from catalog_api.domain.exceptions import ProductNotFoundError, StoreUnavailableError

logger = structlog.get_logger()


@dataclass
class ProductPage:
    """Paginated product result.

    Attributes:
        items: Products on the current page.
        total_elements: Number of products matching the filter.
        total_pages: Number of pages at the requested size.
        page: Zero-based page index.
        size: Requested page length.
    """

    items: list[Product] = field(default_factory=list)
    total_elements: int = 0
    total_pages: int = 0
    page: int = 0
    size: int = 1


class ProductService:
    """Service for catalog product operations.

    Example usage:
        async with async_session_factory() as session:
            service = ProductService(ProductRepository(session))

            product = await service.create_product("books", "Dune")
            await service.update_product(product.id, name="Dune Messiah")
            page = await service.list_products("books", page=0, size=20)
    """

    def __init__(self, store: ProductStore, request_id: str | None = None) -> None:
        """Initialize service.

        Args:
            store: Product store.
            request_id: Request ID for correlation.
        """
        self.store = store
        self.request_id = request_id

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[None]:
        """Commit on success, roll back and re-raise on any failure."""
        try:
            yield
            await self.store.commit()
        except Exception as e:
            try:
                await self.store.rollback()
            except StoreUnavailableError as rollback_error:
                logger.warning(
                    "Rollback failed",
                    error=rollback_error.message,
                    original_error=type(e).__name__,
                    request_id=self.request_id,
                )
            raise

    async def create_product(self, category: str | None, name: str | None) -> Product:
        """Create and persist a new product.

        Args:
            category: Product category.
            name: Product name.

        Returns:
            Persisted product with its assigned id.
        """
        async with self._transaction():
            product = await self.store.save(Product(category, name))

        logger.info(
            "Product created",
            product_id=product.id,
            category=product.category,
            request_id=self.request_id,
        )
        return product

    async def get_product(self, product_id: int, for_update: bool = False) -> Product:
        """Get product by ID.

        Args:
            product_id: Product ID.
            for_update: Lock the row until the current transaction ends.

        Returns:
            The product.

        Raises:
            ProductNotFoundError: If no product has this id.
        """
        product = await self.store.find_by_id(product_id, for_update=for_update)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    async def update_product(
        self,
        product_id: int,
        category: str | None = None,
        name: str | None = None,
    ) -> Product:
        """Apply a partial update to a product.

        Fields passed as None keep their persisted value.

        Args:
            product_id: Product ID.
            category: New category, or None to keep it.
            name: New name, or None to keep it.

        Returns:
            Updated product.

        Raises:
            ProductNotFoundError: If no product has this id.
        """
        async with self._transaction():
            product = await self.get_product(product_id, for_update=True)
            changed = product.apply_update(category=category, name=name)
            if changed:
                product = await self.store.save(product)

        logger.info(
            "Product updated",
            product_id=product_id,
            changed_fields=changed,
            request_id=self.request_id,
        )
        return product

    async def delete_product(self, product_id: int) -> None:
        """Delete a product.

        Args:
            product_id: Product ID.

        Raises:
            ProductNotFoundError: If no product has this id, including
                when it was already deleted.
        """
        async with self._transaction():
            product = await self.get_product(product_id, for_update=True)
            await self.store.delete(product)

        logger.info(
            "Product deleted",
            product_id=product_id,
            request_id=self.request_id,
        )

    async def list_products(
        self,
        category: str | None,
        page: int,
        size: int,
    ) -> ProductPage:
        """List products sorted by category, one page at a time.

        Args:
            category: Exact, case-sensitive category filter. None or
                blank matches all products.
            page: Zero-based page index.
            size: Page length, at least 1.

        Returns:
            Requested page. A page past the end has no items but still
            reports totals for the whole result set.

        Raises:
            ValueError: If page is negative or size is below 1.
        """
        if page < 0 or size < 1:
            raise ValueError(f"Invalid page request: page={page}, size={size}")

        if category is not None and not category.strip():
            category = None

        result = await self.store.find_page(
            category,
            page,
            size,
            sort_by="category",
            sort_order="asc",
        )

        return ProductPage(
            items=list(result.items),
            total_elements=result.total_elements,
            total_pages=result.total_pages,
            page=result.page,
            size=result.size,
        )

    async def get_categories(self) -> list[str]:
        """Get the distinct categories currently in use.

        Returns:
            Category labels, each once, in ascending order.
        """
        return await self.store.find_distinct_categories()
