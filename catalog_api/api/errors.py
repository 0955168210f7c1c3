"""Error responses for the catalog API.

Every error leaves the service as an ErrorResponse body carrying the
request id. Caller mistakes map to 4xx, store outages to 503, and
anything unexpected to 500.
"""

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from catalog_api.api.schemas import ErrorDetail, ErrorResponse
from catalog_api.domain.exceptions import (
    DomainError,
    ProductNotFoundError,
    StoreUnavailableError,
)

logger = structlog.get_logger()


def error_response(
    request: Request,
    status_code: int,
    error_code: str,
    message: str,
    details: list[ErrorDetail] | None = None,
) -> JSONResponse:
    """Build a JSON response in the ErrorResponse shape."""
    body = ErrorResponse(
        error_code=error_code,
        message=message,
        details=details or [],
        request_id=getattr(request.state, "request_id", None),
    )
    return JSONResponse(status_code=status_code, content=body.model_dump())


def domain_error_details(exc: DomainError) -> list[ErrorDetail]:
    """Flatten domain error context into ErrorDetail entries."""
    return [ErrorDetail(field=key, message=str(value)) for key, value in exc.details.items()]


# ============================================================================
# Handlers
# ============================================================================


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Render routing and framework errors (unknown path, bad method)."""
    detail = exc.detail
    if isinstance(detail, dict):
        return error_response(
            request,
            exc.status_code,
            detail.get("error_code", "ERROR"),
            detail.get("message", str(detail)),
            [ErrorDetail(**item) for item in detail.get("details", [])],
        )
    return error_response(request, exc.status_code, "ERROR", str(detail))


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle malformed request input as a caller error."""
    details = [
        ErrorDetail(
            field=".".join(str(part) for part in error["loc"][1:]) or None,
            message=error["msg"],
        )
        for error in exc.errors()
    ]

    logger.info("Request validation failed", path=request.url.path, errors=len(details))

    return error_response(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "VALIDATION_ERROR",
        "Request validation failed",
        details,
    )


async def product_not_found_handler(
    request: Request, exc: ProductNotFoundError
) -> JSONResponse:
    return error_response(
        request,
        status.HTTP_404_NOT_FOUND,
        exc.error_code,
        exc.message,
        domain_error_details(exc),
    )


async def store_unavailable_handler(
    request: Request, exc: StoreUnavailableError
) -> JSONResponse:
    """Handle store failures as a system error.

    The driver's reason is logged but kept out of the body.
    """
    logger.error(
        "Store unavailable",
        path=request.url.path,
        method=request.method,
        operation=exc.operation,
        reason=exc.details.get("reason"),
    )

    return error_response(
        request,
        status.HTTP_503_SERVICE_UNAVAILABLE,
        exc.error_code,
        exc.message,
        [ErrorDetail(field="operation", message=exc.operation)],
    )


def internal_error_response(request: Request) -> JSONResponse:
    """Response for failures no handler recognised."""
    return error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "INTERNAL_ERROR",
        "An internal error occurred",
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register the catalog's exception handlers on an application.

    Args:
        app: FastAPI application instance.
    """
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ProductNotFoundError, product_not_found_handler)
    app.add_exception_handler(StoreUnavailableError, store_unavailable_handler)
