"""Product repository for database operations.

Provides the store behind the catalog service: keyed CRUD, a
category-filtered paginated query and a distinct-category scan.
"""

import math
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, Protocol

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import DisconnectionError, InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_api.catalog.models import ProductModel
from catalog_api.domain.entities import Product
from catalog_api.domain.exceptions import ProductNotFoundError, StoreUnavailableError

logger = structlog.get_logger()

# Driver failures that mean the store, not the request, is at fault
STORE_FAILURES = (OperationalError, InterfaceError, DisconnectionError, PoolTimeoutError)

# Signed 64-bit range of the products.id column; larger ids can never have been issued
MIN_PRODUCT_ID = -(2**63)
MAX_PRODUCT_ID = 2**63 - 1


@dataclass
class Page:
    """One page of store results.

    Attributes:
        items: Products on this page.
        total_pages: Number of pages for the whole result set.
        total_elements: Number of matching products.
        page: Zero-based page index.
        size: Requested page length.
    """

    items: list[Product] = field(default_factory=list)
    total_pages: int = 0
    total_elements: int = 0
    page: int = 0
    size: int = 1


class ProductStore(Protocol):
    """Store capability consumed by the product service."""

    async def save(self, product: Product) -> Product: ...

    async def find_by_id(self, product_id: int, for_update: bool = False) -> Product | None: ...

    async def delete(self, product: Product) -> None: ...

    async def find_page(
        self,
        category: str | None,
        page: int,
        size: int,
        sort_by: str = "category",
        sort_order: str = "asc",
    ) -> Page: ...

    async def find_distinct_categories(self) -> list[str]: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...


def is_storable_id(product_id: int) -> bool:
    """Check whether an id fits the products.id column."""
    return MIN_PRODUCT_ID <= product_id <= MAX_PRODUCT_ID


@asynccontextmanager
async def store_errors(operation: str) -> AsyncIterator[None]:
    """Translate driver connectivity failures into StoreUnavailableError.

    Args:
        operation: Store operation name, reported in the error.
    """
    try:
        yield
    except STORE_FAILURES as e:
        logger.error("Product store failure", operation=operation, error=str(e))
        raise StoreUnavailableError(operation, str(e)) from e


class ProductRepository:
    """Repository for Product database operations.

    Handles all database interactions for products including
    filtering, sorting, and pagination. Entities go in and come out;
    ORM rows stay inside the repository.

    Example usage:
        async with async_session_factory() as session:
            repo = ProductRepository(session)
            page = await repo.find_page(category="books", page=0, size=20)
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def save(self, product: Product) -> Product:
        """Insert a new product or update an existing one.

        Args:
            product: Product to save. Inserted when it has no id.

        Returns:
            Saved product carrying its store-assigned id.

        Raises:
            ProductNotFoundError: If the product has an id but its row is gone.
        """
        async with store_errors("save"):
            if product.id is None:
                model = ProductModel(category=product.category, name=product.name)
                self.session.add(model)
            else:
                model = await self._get_model(product.id)
                if model is None:
                    raise ProductNotFoundError(product.id)
                model.category = product.category
                model.name = product.name
            await self.session.flush()
            return self._to_entity(model)

    async def find_by_id(
        self,
        product_id: int,
        for_update: bool = False,
    ) -> Product | None:
        """Get product by ID.

        Args:
            product_id: Product ID.
            for_update: Lock the row for the rest of the transaction.
                Ignored by backends without row locks (SQLite).

        Returns:
            Product if found, None otherwise.
        """
        if not is_storable_id(product_id):
            return None

        query = select(ProductModel).where(ProductModel.id == product_id)

        if for_update:
            query = query.with_for_update()

        async with store_errors("find_by_id"):
            result = await self.session.execute(query)
            model = result.scalar_one_or_none()
        return self._to_entity(model) if model is not None else None

    async def delete(self, product: Product) -> None:
        """Delete a product.

        Args:
            product: Persisted product to remove.

        Raises:
            ProductNotFoundError: If the row no longer exists.
        """
        async with store_errors("delete"):
            model = await self._get_model(product.id)
            if model is None:
                raise ProductNotFoundError(product.id)
            await self.session.delete(model)
            await self.session.flush()

    async def find_page(
        self,
        category: str | None,
        page: int,
        size: int,
        sort_by: str = "category",
        sort_order: str = "asc",
    ) -> Page:
        """Find one page of products, optionally filtered by category.

        Args:
            category: Exact, case-sensitive category to match. None
                matches every product.
            page: Zero-based page index.
            size: Page length.
            sort_by: Sort field (category, name, id, created_at).
            sort_order: Sort order (asc, desc).

        Returns:
            Page of products with totals for the whole result set. Pages
            past the end come back empty without querying for rows.
        """
        conditions = []
        if category is not None:
            conditions.append(ProductModel.category == category)

        count_query = select(func.count(ProductModel.id)).where(*conditions)

        query = select(ProductModel).where(*conditions)

        # Sorting, id breaks ties so repeated calls agree
        sort_column = self._get_sort_column(sort_by)
        if sort_order.lower() == "desc":
            query = query.order_by(sort_column.desc(), ProductModel.id.desc())
        else:
            query = query.order_by(sort_column.asc(), ProductModel.id.asc())

        offset = page * size

        async with store_errors("find_page"):
            total = (await self.session.execute(count_query)).scalar_one()
            if offset < total:
                result = await self.session.execute(query.limit(size).offset(offset))
                models = result.scalars().all()
            else:
                models = []

        return Page(
            items=[self._to_entity(m) for m in models],
            total_pages=math.ceil(total / size),
            total_elements=total,
            page=page,
            size=size,
        )

    async def find_distinct_categories(self) -> list[str]:
        """Get list of unique categories.

        Returns:
            Category labels in ascending order, without nulls.
        """
        query = (
            select(ProductModel.category)
            .where(ProductModel.category.is_not(None))
            .distinct()
            .order_by(ProductModel.category)
        )

        async with store_errors("find_distinct_categories"):
            result = await self.session.execute(query)
            return list(result.scalars().all())

    async def commit(self) -> None:
        """Commit the current transaction."""
        async with store_errors("commit"):
            await self.session.commit()

    async def rollback(self) -> None:
        """Roll back the current transaction."""
        async with store_errors("rollback"):
            await self.session.rollback()

    async def _get_model(self, product_id: int) -> ProductModel | None:
        if not is_storable_id(product_id):
            return None
        return await self.session.get(ProductModel, product_id)

    def _get_sort_column(self, sort_by: str) -> Any:
        """Get SQLAlchemy column for sorting.

        Args:
            sort_by: Sort field name.

        Returns:
            SQLAlchemy column.
        """
        columns = {
            "category": ProductModel.category,
            "name": ProductModel.name,
            "id": ProductModel.id,
            "created_at": ProductModel.created_at,
        }
        return columns.get(sort_by, ProductModel.category)

    @staticmethod
    def _to_entity(model: ProductModel) -> Product:
        return Product.restore(model.id, model.category, model.name)
