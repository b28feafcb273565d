"""Abstract repository for Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from order_service.domain.model.order import Order, OrderStatus


class OrderRepository(ABC):

    @abstractmethod
    async def create(self, order: Order) -> Order:
        """Persist a new order together with all of its items, atomically."""

    @abstractmethod
    async def get_by_id(self, order_id: str) -> Order | None:
        """Return an order with its items in insertion order, or None."""

    @abstractmethod
    async def list_page(self, offset: int, limit: int) -> tuple[list[Order], int]:
        """Return one page of orders (newest first) and the total count."""

    @abstractmethod
    async def save_status(
        self,
        order_id: str,
        expected: OrderStatus,
        new: OrderStatus,
    ) -> Order | None:
        """Set the status to *new* only if it is still *expected*.

        Returns the updated order, or None when the order is missing or its
        status no longer matches *expected*.
        """
