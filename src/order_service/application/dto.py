"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the API and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from order_service.domain.model.order import Order


@dataclass(frozen=True)
class OrderItemSpec:
    """Input: one requested line (product id, quantity, unit price).

    Values are taken as received; ``validate_create_order`` decides
    whether they are acceptable.
    """

    product_id: str
    quantity: int
    price: Decimal | int | float | str


@dataclass(frozen=True)
class CreateOrderRequest:
    """Input: a checkout, with or without a buyer account."""

    full_name: str
    email: str
    address: str
    city: str
    zip_code: str
    items: list[OrderItemSpec] = field(default_factory=list)
    user_id: str | None = None


@dataclass(frozen=True)
class OrderItemDTO:
    id: str
    product_id: str
    quantity: int
    price: str  # unit price, 2 dp, e.g. "10.00"
    line_total: str


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order."""

    id: str
    user_id: str
    full_name: str
    email: str
    address: str
    city: str
    zip_code: str
    status: str
    total: str
    created_at: datetime
    items: list[OrderItemDTO]


@dataclass(frozen=True)
class OrderPageDTO:
    """Output: one page of orders plus the numbers needed to page further."""

    data: list[OrderDTO]
    total: int
    page: int
    limit: int
    total_pages: int


def to_order_dto(order: Order) -> OrderDTO:
    return OrderDTO(
        id=order.id,
        user_id=order.user_id,
        full_name=order.contact.full_name,
        email=order.contact.email,
        address=order.contact.address,
        city=order.contact.city,
        zip_code=order.contact.zip_code,
        status=order.status.value,
        total=str(order.total),
        created_at=order.created_at,
        items=[
            OrderItemDTO(
                id=item.id,
                product_id=item.product_id,
                quantity=item.quantity.value,
                price=str(item.unit_price),
                line_total=str(item.line_total),
            )
            for item in order.items
        ],
    )
