"""Product API endpoints.

Provides endpoints for the product lifecycle:
- POST /api/v1/products - create a product
- GET /api/v1/products - list products (paginated, category filter)
- GET /api/v1/products/categories - distinct categories
- GET /api/v1/products/{id} - product details
- PATCH /api/v1/products/{id} - partial update
- DELETE /api/v1/products/{id} - delete a product

Domain errors are mapped to responses by the handlers in main.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_api.api.schemas import (
    ErrorResponse,
    ProductCreateRequest,
    ProductListQuery,
    ProductListResponse,
    ProductResponse,
    ProductUpdateRequest,
)
from catalog_api.catalog.repository import ProductRepository
from catalog_api.catalog.service import ProductPage, ProductService
from catalog_api.domain.entities import Product
from catalog_api.infrastructure.database import get_session

router = APIRouter(prefix="/api/v1/products", tags=["Products"])

STORE_ERROR = {503: {"model": ErrorResponse}}


# ============================================================================
# Dependencies
# ============================================================================


def get_service(
    request: Request,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ProductService:
    """Get product service bound to the request's session."""
    request_id = getattr(request.state, "request_id", None)
    return ProductService(ProductRepository(session), request_id=request_id)


# ============================================================================
# Converters
# ============================================================================


def product_to_response(product: Product) -> ProductResponse:
    """Convert Product entity to ProductResponse."""
    return ProductResponse(
        id=product.id,
        category=product.category,
        name=product.name,
    )


def page_to_response(page: ProductPage) -> ProductListResponse:
    """Convert ProductPage to ProductListResponse."""
    return ProductListResponse(
        products=[product_to_response(p) for p in page.items],
        total_pages=page.total_pages,
        total_elements=page.total_elements,
        page=page.page,
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    responses={422: {"model": ErrorResponse}, **STORE_ERROR},
    summary="Create product",
    description="Create a new product. The id is assigned by the server.",
)
async def create_product(
    request: ProductCreateRequest,
    service: Annotated[ProductService, Depends(get_service)],
) -> ProductResponse:
    """Create a product.

    Args:
        request: Category and name of the new product.
        service: Product service.

    Returns:
        Created product.
    """
    product = await service.create_product(request.category, request.name)
    return product_to_response(product)


@router.get(
    "",
    response_model=ProductListResponse,
    responses={422: {"model": ErrorResponse}, **STORE_ERROR},
    summary="List products",
    description="Get a page of products sorted by category, optionally "
    "filtered by exact category.",
)
async def list_products(
    query: Annotated[ProductListQuery, Query()],
    service: Annotated[ProductService, Depends(get_service)],
) -> ProductListResponse:
    """List products with pagination and filtering.

    Args:
        query: Category filter and zero-based page/size.
        service: Product service.

    Returns:
        Paginated list of products.
    """
    page = await service.list_products(query.category, query.page, query.size)
    return page_to_response(page)


@router.get(
    "/categories",
    response_model=list[str],
    responses=STORE_ERROR,
    summary="List categories",
    description="Get every distinct category currently in use.",
)
async def list_categories(
    service: Annotated[ProductService, Depends(get_service)],
) -> list[str]:
    """List distinct product categories."""
    return await service.get_categories()


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    responses={
        404: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        **STORE_ERROR,
    },
    summary="Get product",
)
async def get_product(
    product_id: int,
    service: Annotated[ProductService, Depends(get_service)],
) -> ProductResponse:
    """Get a product by ID.

    Raises:
        ProductNotFoundError: If the product does not exist.
    """
    product = await service.get_product(product_id)
    return product_to_response(product)


@router.patch(
    "/{product_id}",
    response_model=ProductResponse,
    responses={
        404: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        **STORE_ERROR,
    },
    summary="Update product",
    description="Change the supplied fields; omitted or null fields are kept.",
)
async def update_product(
    product_id: int,
    request: ProductUpdateRequest,
    service: Annotated[ProductService, Depends(get_service)],
) -> ProductResponse:
    """Partially update a product.

    Args:
        product_id: Product identifier.
        request: Fields to change.
        service: Product service.

    Returns:
        Updated product.

    Raises:
        ProductNotFoundError: If the product does not exist.
    """
    product = await service.update_product(product_id, **request.to_changes())
    return product_to_response(product)


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={
        404: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        **STORE_ERROR,
    },
    summary="Delete product",
    description="Delete a product. Deleting a missing product returns 404.",
)
async def delete_product(
    product_id: int,
    service: Annotated[ProductService, Depends(get_service)],
) -> Response:
    """Delete a product.

    Raises:
        ProductNotFoundError: If the product does not exist.
    """
    await service.delete_product(product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
