"""Translate domain exceptions into HTTP responses."""

from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from order_service.domain.exceptions import (
    DomainException,
    FieldViolation,
    InfrastructureError,
    InsufficientStockError,
    InvalidTransitionError,
    NotFoundError,
    StockDeductionError,
    ValidationError,
)


def _violations_body(message: str, violations: list[FieldViolation]) -> dict:
    return {
        "detail": message,
        "violations": [{"field": v.field, "message": v.message} for v in violations],
    }


def _field_path(loc) -> str:
    path = ""
    for part in loc:
        if part == "body":
            continue
        path += f"[{part}]" if isinstance(part, int) else (f".{part}" if path else str(part))
    return path or "body"


async def _request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    violations = [FieldViolation(_field_path(e["loc"]), e["msg"]) for e in exc.errors()]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_violations_body("Request validation failed", violations),
    )


async def _validation(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_violations_body(str(exc), exc.violations),
    )


async def _not_found(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


async def _invalid_transition(request: Request, exc: InvalidTransitionError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={
            "detail": str(exc),
            "from": exc.from_status.value,
            "to": exc.to_status.value,
        },
    )


async def _insufficient_stock(request: Request, exc: InsufficientStockError) -> JSONResponse:
    code = status.HTTP_409_CONFLICT if exc.refused else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(
        status_code=code,
        content={"detail": str(exc), "unavailableItems": exc.product_ids},
    )


async def _stock_deduction(request: Request, exc: StockDeductionError) -> JSONResponse:
    code = status.HTTP_409_CONFLICT if exc.refused else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(
        status_code=code,
        content={"detail": str(exc), "orderId": exc.order_id, "productIds": exc.product_ids},
    )


async def _infrastructure(request: Request, exc: InfrastructureError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content={"detail": str(exc)}
    )


async def _domain(request: Request, exc: DomainException) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, _request_validation)
    app.add_exception_handler(ValidationError, _validation)
    app.add_exception_handler(NotFoundError, _not_found)
    app.add_exception_handler(InvalidTransitionError, _invalid_transition)
    app.add_exception_handler(InsufficientStockError, _insufficient_stock)
    app.add_exception_handler(StockDeductionError, _stock_deduction)
    app.add_exception_handler(InfrastructureError, _infrastructure)
    app.add_exception_handler(DomainException, _domain)
