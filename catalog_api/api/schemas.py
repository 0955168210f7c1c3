"""API schemas for the catalog API.

Pydantic models for request/response validation and serialization.
Request models enforce the required-field policy; response models
expose exactly the fields meant for clients.
"""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

from catalog_api.infrastructure.config import settings

# Trimmed, non-blank label
Label = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorDetail(BaseModel):
    """Detailed error information."""

    field: str | None = Field(default=None, description="Field that caused the error")
    message: str = Field(..., description="Error message")


class ErrorResponse(BaseModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: list[ErrorDetail] = Field(
        default_factory=list, description="Additional error details"
    )
    request_id: str | None = Field(
        default=None, description="Request ID for correlation"
    )


# ============================================================================
# Product Request Schemas
# ============================================================================


class ProductCreateRequest(BaseModel):
    """Request to create a product."""

    model_config = ConfigDict(frozen=True)

    category: Label = Field(..., description="Category label (exact match when filtering)")
    name: Label = Field(..., description="Product name")


class ProductUpdateRequest(BaseModel):
    """Partial update of a product.

    Omitted or null fields keep their current value. The product id
    comes from the path and cannot be changed.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    category: Label | None = Field(default=None, description="New category")
    name: Label | None = Field(default=None, description="New name")

    def to_changes(self) -> dict[str, str]:
        """Get only the fields that should change.

        Returns:
            Mapping of field name to new value.
        """
        return self.model_dump(exclude_none=True)


class ProductListQuery(BaseModel):
    """Query parameters for listing products."""

    model_config = ConfigDict(frozen=True)

    category: str | None = Field(
        default=None, description="Exact category filter; blank matches all"
    )
    page: int = Field(default=0, ge=0, description="Page number (0-based)")
    size: int = Field(
        default=settings.default_page_size,
        ge=1,
        le=settings.max_page_size,
        description="Items per page",
    )


# ============================================================================
# Product Response Schemas
# ============================================================================


class ProductResponse(BaseModel):
    """Product as exposed to clients."""

    id: int = Field(..., description="Product identifier")
    category: str | None = Field(default=None, description="Category label")
    name: str | None = Field(default=None, description="Product name")


class ProductListResponse(BaseModel):
    """One page of products."""

    products: list[ProductResponse] = Field(..., description="Products on this page")
    total_pages: int = Field(..., description="Total number of pages")
    total_elements: int = Field(..., description="Total number of matching products")
    page: int = Field(..., description="Current page number (0-based)")
