"""FastAPI application factory."""

from __future__ import annotations

import uuid

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from bazaar.domain.exceptions import (
    ConflictError,
    CouponInvalidError,
    DomainException,
    EntityNotFoundError,
    InsufficientStockError,
    UnauthorizedError,
    ValidationError,
)
from bazaar.infrastructure.api.routes import (
    coupon_router,
    health_router,
    order_router,
    product_router,
    review_router,
    webhook_router,
)
from bazaar.infrastructure.bootstrap import Container, build_container
from bazaar.infrastructure.logging import add_context, clear_context

logger = structlog.get_logger(__name__)

# Most specific first: subclasses must match before their bases.
_STATUS_BY_ERROR: list[tuple[type[DomainException], int]] = [
    (InsufficientStockError, 409),
    (ConflictError, 409),
    (EntityNotFoundError, 404),
    (UnauthorizedError, 403),
    (CouponInvalidError, 400),
    (ValidationError, 400),
]


def status_for(exc: DomainException) -> int:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status
    return 400


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    status = status_for(exc)
    content: dict = {"error": str(exc)}
    if isinstance(exc, InsufficientStockError):
        content["product_id"] = exc.product_id
        content["variant_id"] = exc.variant_id
    logger.warning(
        "Request rejected",
        method=request.method,
        path=request.url.path,
        status=status,
        error_type=type(exc).__name__,
        error=str(exc),
    )
    return JSONResponse(status_code=status, content=content)


def create_app(container: Container | None = None) -> FastAPI:
    app = FastAPI(title="Bazaar", description="Multi-vendor order engine")
    app.state.container = container or build_container()

    @app.middleware("http")
    async def bind_request_context(request: Request, call_next):
        clear_context()
        add_context(
            request_id=request.headers.get("x-request-id") or uuid.uuid4().hex,
            method=request.method,
            path=request.url.path,
        )
        return await call_next(request)

    app.add_exception_handler(DomainException, domain_exception_handler)
    for router in (
        order_router,
        coupon_router,
        product_router,
        review_router,
        webhook_router,
        health_router,
    ):
        app.include_router(router)
    return app
