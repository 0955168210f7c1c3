"""Domain exceptions.

Errors raised by the catalog core. Each kind is distinct so the HTTP
layer can map it to its own status code instead of a blanket 500.
"""

from typing import Any


class DomainError(Exception):
    """Base class for all domain exceptions.

    All domain errors should inherit from this class to allow
    catching domain-specific errors at the application layer.
    """

    error_code: str = "DOMAIN_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# Product Errors
# ============================================================================


class ProductNotFoundError(DomainError):
    """Raised when no product exists for the requested id."""

    error_code = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id: int) -> None:
        """Initialize product not found error.

        Args:
            product_id: ID that was looked up.
        """
        super().__init__(
            f"Product not found: {product_id}",
            details={"product_id": product_id},
        )
        self.product_id = product_id


# ============================================================================
# Store Errors
# ============================================================================


class StoreUnavailableError(DomainError):
    """Raised when the backing store cannot complete an operation.

    Covers connectivity and I/O failures. The request itself was
    valid; callers may retry later.
    """

    error_code = "STORE_UNAVAILABLE"

    def __init__(self, operation: str, reason: str) -> None:
        """Initialize store unavailable error.

        Args:
            operation: Store operation that failed (e.g. "save").
            reason: Underlying driver error message.
        """
        super().__init__(
            f"Product store unavailable during '{operation}'",
            details={"operation": operation, "reason": reason},
        )
        self.operation = operation
