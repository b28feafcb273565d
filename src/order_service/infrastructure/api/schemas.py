"""Wire models for the HTTP API.

Request models only parse types; the business rules live in
``application.validation``.  JSON field names are camelCase.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from order_service.application.dto import (
    CreateOrderRequest,
    OrderDTO,
    OrderItemSpec,
    OrderPageDTO,
)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Requests -----------------------------------------------------------------


class CreateOrderItemIn(_CamelModel):
    product_id: str = ""
    quantity: int
    price: Decimal


class CreateOrderIn(_CamelModel):
    user_id: str | None = None  # omitted for guest checkout
    full_name: str = ""
    email: str = ""
    address: str = ""
    city: str = ""
    zip_code: str = ""
    items: list[CreateOrderItemIn] = []

    def to_request(self) -> CreateOrderRequest:
        return CreateOrderRequest(
            user_id=self.user_id,
            full_name=self.full_name,
            email=self.email,
            address=self.address,
            city=self.city,
            zip_code=self.zip_code,
            items=[
                OrderItemSpec(product_id=i.product_id, quantity=i.quantity, price=i.price)
                for i in self.items
            ],
        )


class UpdateStatusIn(_CamelModel):
    status: str


# --- Responses ----------------------------------------------------------------


class OrderItemOut(_CamelModel):
    id: str
    product_id: str
    quantity: int
    price: str
    line_total: str


class OrderOut(_CamelModel):
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
    items: list[OrderItemOut]

    @classmethod
    def from_dto(cls, dto: OrderDTO) -> OrderOut:
        return cls(
            id=dto.id,
            user_id=dto.user_id,
            full_name=dto.full_name,
            email=dto.email,
            address=dto.address,
            city=dto.city,
            zip_code=dto.zip_code,
            status=dto.status,
            total=dto.total,
            created_at=dto.created_at,
            items=[
                OrderItemOut(
                    id=i.id,
                    product_id=i.product_id,
                    quantity=i.quantity,
                    price=i.price,
                    line_total=i.line_total,
                )
                for i in dto.items
            ],
        )


class OrderPageOut(_CamelModel):
    data: list[OrderOut]
    total: int
    page: int
    limit: int
    total_pages: int

    @classmethod
    def from_dto(cls, dto: OrderPageDTO) -> OrderPageOut:
        return cls(
            data=[OrderOut.from_dto(o) for o in dto.data],
            total=dto.total,
            page=dto.page,
            limit=dto.limit,
            total_pages=dto.total_pages,
        )
