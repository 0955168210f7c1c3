"""Domain entities.

The catalog has a single entity, Product. Its fields are read-only
from the outside; the only way to change a product is apply_update,
which keeps every mutation field-scoped and reportable.
"""


class Product:
    """A catalog product.

    Attributes:
        id: Store-assigned identifier, None until first persisted.
        category: Free-text category label.
        name: Product name.
    """

    __slots__ = ("_id", "_category", "_name")

    def __init__(self, category: str | None, name: str | None) -> None:
        """Create a new, unpersisted product.

        Args:
            category: Category label.
            name: Product name.
        """
        self._id: int | None = None
        self._category = category
        self._name = name

    @classmethod
    def restore(cls, product_id: int, category: str | None, name: str | None) -> "Product":
        """Rebuild a persisted product from stored values.

        Args:
            product_id: Identifier assigned by the store.
            category: Stored category.
            name: Stored name.

        Returns:
            Product carrying the given identity.
        """
        product = cls(category, name)
        product._id = product_id
        return product

    @property
    def id(self) -> int | None:
        return self._id

    @property
    def category(self) -> str | None:
        return self._category

    @property
    def name(self) -> str | None:
        return self._name

    def apply_update(
        self,
        category: str | None = None,
        name: str | None = None,
    ) -> list[str]:
        """Replace the supplied fields, leaving omitted ones untouched.

        Args:
            category: New category, or None to keep the current one.
            name: New name, or None to keep the current one.

        Returns:
            Names of the fields whose value changed.
        """
        changed = []
        if category is not None and category != self._category:
            self._category = category
            changed.append("category")
        if name is not None and name != self._name:
            self._name = name
            changed.append("name")
        return changed

    def __eq__(self, other: object) -> bool:
        """Compare persisted products by identity."""
        if not isinstance(other, Product):
            return NotImplemented
        if self._id is None or other._id is None:
            return self is other
        return self._id == other._id

    def __hash__(self) -> int:
        if self._id is None:
            return id(self)
        return hash(self._id)

    def __repr__(self) -> str:
        """String representation."""
        return f"<Product(id={self._id}, category={self._category!r}, name={self._name!r})>"
