from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, Request, status

from order_service.application.list_orders import DEFAULT_LIMIT, DEFAULT_PAGE
from order_service.domain.exceptions import FieldViolation, ValidationError
from order_service.infrastructure.api.schemas import (
    CreateOrderIn,
    OrderOut,
    OrderPageOut,
    UpdateStatusIn,
)
from order_service.infrastructure.bootstrap import Container

router = APIRouter(prefix="/api/orders")
health_router = APIRouter()


def get_container(request: Request) -> Container:
    return request.app.state.container


def _order_id(order_id: str) -> str:
    try:
        return str(uuid.UUID(order_id))
    except ValueError as exc:
        raise ValidationError.from_violations(
            [FieldViolation("id", "must be a UUID")]
        ) from exc


@health_router.get("/health")
def health():
    return {"status": "ok", "service": "order-service"}


@router.post("", status_code=status.HTTP_201_CREATED, response_model=OrderOut)
async def create_order(payload: CreateOrderIn, container: Container = Depends(get_container)):
    handler = container.create_order_handler()
    dto = await handler.handle(payload.to_request())
    return OrderOut.from_dto(dto)


@router.get("", response_model=OrderPageOut)
async def list_orders(
    page: int = Query(DEFAULT_PAGE),
    limit: int = Query(DEFAULT_LIMIT),
    container: Container = Depends(get_container),
):
    handler = container.list_orders_handler()
    return OrderPageOut.from_dto(await handler.handle(page=page, limit=limit))


@router.get("/{order_id}", response_model=OrderOut)
async def get_order(order_id: str, container: Container = Depends(get_container)):
    handler = container.show_order_handler()
    return OrderOut.from_dto(await handler.handle(_order_id(order_id)))


@router.patch("/{order_id}/status", response_model=OrderOut)
async def update_order_status(
    order_id: str,
    payload: UpdateStatusIn,
    container: Container = Depends(get_container),
):
    handler = container.update_order_status_handler()
    return OrderOut.from_dto(await handler.handle(_order_id(order_id), payload.status))
