"""Application service: Show Order use case (query)."""

from __future__ import annotations

from order_service.application.dto import OrderDTO, to_order_dto
from order_service.domain.exceptions import NotFoundError
from order_service.domain.repository.order_repository import OrderRepository


class ShowOrderHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    async def handle(self, order_id: str) -> OrderDTO:
        order = await self._order_repo.get_by_id(order_id)
        if order is None:
            raise NotFoundError(f"Order with ID {order_id} not found")
        return to_order_dto(order)
