"""Tests for the product service."""

import math

import pytest

from catalog_api.catalog.repository import Page, ProductRepository
from catalog_api.catalog.service import ProductService
from catalog_api.domain import Product, ProductNotFoundError, StoreUnavailableError


async def seed(service: ProductService, *rows: tuple[str, str]) -> list[Product]:
    """Create products through the service."""
    return [await service.create_product(category, name) for category, name in rows]


class TestCreateAndGet:
    """Tests for create and lookup."""

    @pytest.mark.asyncio
    async def test_create_then_get(self, service: ProductService) -> None:
        """A created product can be fetched with equal fields."""
        created = await service.create_product("electronics", "Laptop")
        assert created.id is not None

        fetched = await service.get_product(created.id)
        assert fetched.category == "electronics"
        assert fetched.name == "Laptop"

    @pytest.mark.asyncio
    async def test_get_unknown_id(self, service: ProductService) -> None:
        """Ids never issued raise not found."""
        with pytest.raises(ProductNotFoundError) as exc_info:
            await service.get_product(404)
        assert exc_info.value.product_id == 404

    @pytest.mark.asyncio
    async def test_create_is_committed(self, service: ProductService, session_factory) -> None:
        """Created products are visible to other sessions."""
        created = await service.create_product("books", "Dune")

        async with session_factory() as other:
            found = await ProductRepository(other).find_by_id(created.id)
        assert found is not None
        assert found.name == "Dune"


class TestUpdate:
    """Tests for partial updates."""

    @pytest.mark.asyncio
    async def test_update_category_keeps_name(self, service: ProductService) -> None:
        """Updating only the category leaves the name unchanged."""
        created = await service.create_product("books", "Dune")

        await service.update_product(created.id, category="novels")

        fetched = await service.get_product(created.id)
        assert fetched.category == "novels"
        assert fetched.name == "Dune"

    @pytest.mark.asyncio
    async def test_update_name_keeps_category(self, service: ProductService) -> None:
        """Updating only the name leaves the category unchanged."""
        created = await service.create_product("books", "Dune")

        updated = await service.update_product(created.id, name="Dune Messiah")

        assert updated.name == "Dune Messiah"
        assert updated.category == "books"
        assert updated.id == created.id

    @pytest.mark.asyncio
    async def test_update_nothing(self, service: ProductService) -> None:
        """An empty update returns the product as it was."""
        created = await service.create_product("books", "Dune")
        updated = await service.update_product(created.id)
        assert (updated.category, updated.name) == ("books", "Dune")

    @pytest.mark.asyncio
    async def test_update_unknown_id(self, service: ProductService) -> None:
        """Updating a missing product raises not found."""
        with pytest.raises(ProductNotFoundError):
            await service.update_product(404, name="Ghost")


class TestDelete:
    """Tests for deletion."""

    @pytest.mark.asyncio
    async def test_delete_then_get(self, service: ProductService) -> None:
        """Deleted products cannot be fetched."""
        created = await service.create_product("books", "Dune")

        await service.delete_product(created.id)

        with pytest.raises(ProductNotFoundError):
            await service.get_product(created.id)

    @pytest.mark.asyncio
    async def test_second_delete_fails(self, service: ProductService) -> None:
        """Deleting twice reports not found the second time."""
        created = await service.create_product("books", "Dune")
        await service.delete_product(created.id)

        with pytest.raises(ProductNotFoundError):
            await service.delete_product(created.id)

    @pytest.mark.asyncio
    async def test_delete_unknown_id(self, service: ProductService) -> None:
        """Deleting an id that never existed raises not found."""
        with pytest.raises(ProductNotFoundError):
            await service.delete_product(404)

    @pytest.mark.asyncio
    async def test_delete_leaves_others(self, service: ProductService) -> None:
        """Only the targeted product is removed."""
        first, second = await seed(service, ("books", "Dune"), ("books", "Emma"))
        await service.delete_product(first.id)
        assert (await service.get_product(second.id)).name == "Emma"


class TestListProducts:
    """Tests for paginated listing."""

    @pytest.mark.asyncio
    async def test_category_page(self, service: ProductService) -> None:
        """Filtering by category paginates only matching products."""
        await seed(
            service,
            ("electronics", "Phone"),
            ("electronics", "Laptop"),
            ("electronics", "Tablet"),
            ("books", "Dune"),
        )

        result = await service.list_products("electronics", page=0, size=2)

        assert len(result.items) == 2
        assert result.total_elements == 3
        assert result.total_pages == 2
        assert result.page == 0
        assert all(p.category == "electronics" for p in result.items)

    @pytest.mark.asyncio
    async def test_page_past_end(self, service: ProductService) -> None:
        """A page past the end is empty but keeps the totals."""
        await seed(service, *[("books", f"Book {i}") for i in range(5)])

        result = await service.list_products(None, page=99, size=10)

        assert result.items == []
        assert result.total_elements == 5
        assert result.total_pages == 1
        assert result.page == 99

    @pytest.mark.asyncio
    @pytest.mark.parametrize("category", [None, "", "   "])
    async def test_blank_category_matches_all(
        self, service: ProductService, category: str | None
    ) -> None:
        """Absent or blank filters match every category."""
        await seed(service, ("books", "Dune"), ("toys", "Yo-yo"))

        result = await service.list_products(category, page=0, size=10)

        assert result.total_elements == 2

    @pytest.mark.asyncio
    async def test_category_match_is_case_sensitive(self, service: ProductService) -> None:
        """Category matching is exact."""
        await seed(service, ("Books", "Dune"))

        result = await service.list_products("books", page=0, size=10)

        assert result.items == []
        assert result.total_elements == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("size", [1, 2, 3, 7])
    async def test_page_invariants(self, service: ProductService, size: int) -> None:
        """Pages never exceed size and total pages match the count."""
        await seed(service, *[(f"cat-{i % 3}", f"Item {i}") for i in range(7)])

        for page in range(0, 8):
            result = await service.list_products(None, page=page, size=size)
            assert len(result.items) <= size
            assert result.total_pages == math.ceil(result.total_elements / size)

    @pytest.mark.asyncio
    async def test_sorted_by_category(self, service: ProductService) -> None:
        """Products come back in ascending category order."""
        await seed(service, ("toys", "Yo-yo"), ("books", "Dune"), ("electronics", "Phone"))

        result = await service.list_products(None, page=0, size=10)

        assert [p.category for p in result.items] == ["books", "electronics", "toys"]

    @pytest.mark.asyncio
    async def test_repeated_calls_agree(self, service: ProductService) -> None:
        """Ordering is deterministic across calls on unchanged data."""
        await seed(service, *[("books", f"Book {i}") for i in range(6)])

        first = await service.list_products("books", page=0, size=3)
        second = await service.list_products("books", page=0, size=3)

        assert [p.id for p in first.items] == [p.id for p in second.items]

    @pytest.mark.asyncio
    async def test_far_page_is_empty(self, service: ProductService) -> None:
        """A page far past the data is empty but still reports totals."""
        await seed(service, ("books", "Dune"))

        result = await service.list_products(None, page=10**17, size=100)

        assert result.items == []
        assert result.total_elements == 1
        assert result.total_pages == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("page,size", [(0, 0), (-1, 10), (0, -5)])
    async def test_invalid_page_request(self, service: ProductService, page: int, size: int) -> None:
        """Negative pages and non-positive sizes are rejected up front."""
        with pytest.raises(ValueError):
            await service.list_products(None, page=page, size=size)


class TestCategories:
    """Tests for distinct categories."""

    @pytest.mark.asyncio
    async def test_distinct_categories(self, service: ProductService) -> None:
        """Each category is reported once."""
        await seed(
            service,
            ("electronics", "Phone"),
            ("electronics", "Laptop"),
            ("books", "Dune"),
        )

        categories = await service.get_categories()

        assert sorted(categories) == ["books", "electronics"]
        assert len(categories) == len(set(categories))

    @pytest.mark.asyncio
    async def test_no_products(self, service: ProductService) -> None:
        """An empty catalog has no categories."""
        assert await service.get_categories() == []


# ============================================================================
# Transaction Handling
# ============================================================================


class RecordingStore:
    """In-memory store that records transaction calls."""

    def __init__(self, fail_on: str | None = None) -> None:
        self.rows: dict[int, tuple[str | None, str | None]] = {}
        self.calls: list[str] = []
        self.fail_on = fail_on
        self._next_id = 1

    def _maybe_fail(self, operation: str) -> None:
        self.calls.append(operation)
        if operation == self.fail_on:
            raise StoreUnavailableError(operation, "connection reset")

    async def save(self, product: Product) -> Product:
        self._maybe_fail("save")
        product_id = product.id
        if product_id is None:
            product_id = self._next_id
            self._next_id += 1
        self.rows[product_id] = (product.category, product.name)
        return Product.restore(product_id, product.category, product.name)

    async def find_by_id(self, product_id: int, for_update: bool = False) -> Product | None:
        self._maybe_fail("find_by_id")
        if product_id not in self.rows:
            return None
        return Product.restore(product_id, *self.rows[product_id])

    async def delete(self, product: Product) -> None:
        self._maybe_fail("delete")
        del self.rows[product.id]

    async def find_page(self, category, page, size, sort_by="category", sort_order="asc") -> Page:
        self._maybe_fail("find_page")
        return Page()

    async def find_distinct_categories(self) -> list[str]:
        self._maybe_fail("find_distinct_categories")
        return []

    async def commit(self) -> None:
        self._maybe_fail("commit")

    async def rollback(self) -> None:
        self.calls.append("rollback")
        if self.fail_on == "rollback":
            raise StoreUnavailableError("rollback", "connection reset")


class TestTransactions:
    """Tests for unit-of-work handling in write operations."""

    @pytest.mark.asyncio
    async def test_update_commits_once(self) -> None:
        """A successful update reads, saves and commits."""
        store = RecordingStore()
        service = ProductService(store)
        created = await service.create_product("books", "Dune")
        store.calls.clear()

        await service.update_product(created.id, name="Emma")

        assert store.calls == ["find_by_id", "save", "commit"]

    @pytest.mark.asyncio
    async def test_not_found_rolls_back(self) -> None:
        """A failed lookup inside an update rolls the transaction back."""
        store = RecordingStore()
        service = ProductService(store)

        with pytest.raises(ProductNotFoundError):
            await service.update_product(1, name="Ghost")

        assert store.calls == ["find_by_id", "rollback"]

    @pytest.mark.asyncio
    async def test_store_failure_propagates_unchanged(self) -> None:
        """Store failures are surfaced as-is after a rollback."""
        store = RecordingStore(fail_on="delete")
        service = ProductService(store)
        created = await service.create_product("books", "Dune")

        with pytest.raises(StoreUnavailableError) as exc_info:
            await service.delete_product(created.id)

        assert exc_info.value.operation == "delete"
        assert store.calls[-1] == "rollback"
        assert created.id in store.rows

    @pytest.mark.asyncio
    async def test_store_failure_on_read(self) -> None:
        """Read operations surface store failures too."""
        service = ProductService(RecordingStore(fail_on="find_page"))

        with pytest.raises(StoreUnavailableError):
            await service.list_products(None, page=0, size=10)

    @pytest.mark.asyncio
    async def test_failed_rollback_keeps_original_error(self) -> None:
        """A rollback that fails does not replace the error that caused it."""
        service = ProductService(RecordingStore(fail_on="rollback"))

        with pytest.raises(ProductNotFoundError) as exc_info:
            await service.update_product(1, name="Ghost")

        assert exc_info.value.product_id == 1
