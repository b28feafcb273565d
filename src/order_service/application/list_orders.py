"""Application service: List Orders use case (paginated query)."""

from __future__ import annotations

import math

from order_service.application.dto import OrderPageDTO, to_order_dto
from order_service.domain.repository.order_repository import OrderRepository

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_PAGE_LIMIT = 100


class ListOrdersHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    async def handle(self, page: int = DEFAULT_PAGE, limit: int = DEFAULT_LIMIT) -> OrderPageDTO:
        """Return one page of orders, newest first.

        Non-positive ``page``/``limit`` are clamped to 1 and ``limit`` is
        capped at MAX_PAGE_LIMIT; paging past the end yields an empty page.
        """
        page = max(page, 1)
        limit = min(max(limit, 1), MAX_PAGE_LIMIT)

        orders, total = await self._order_repo.list_page((page - 1) * limit, limit)
        return OrderPageDTO(
            data=[to_order_dto(o) for o in orders],
            total=total,
            page=page,
            limit=limit,
            total_pages=math.ceil(total / limit),
        )
