"""In-memory fakes for testing.

These implement the same abstract interfaces as the SQLAlchemy repository
and the HTTP inventory gateway but keep everything in dicts. No I/O.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Sequence

from order_service.domain.exceptions import DeductionError
from order_service.domain.gateway.inventory_gateway import InventoryGateway
from order_service.domain.model.inventory import (
    AvailabilityResult,
    StockDeduction,
    StockRequest,
)
from order_service.domain.model.order import Order, OrderStatus
from order_service.domain.repository.order_repository import OrderRepository


def _copy(order: Order) -> Order:
    return replace(order, items=list(order.items))


class FakeOrderRepository(OrderRepository):

    def __init__(self) -> None:
        self._store: dict[str, Order] = {}
        self.create_calls = 0

    async def create(self, order: Order) -> Order:
        self.create_calls += 1
        self._store[order.id] = _copy(order)
        return _copy(order)

    async def get_by_id(self, order_id: str) -> Order | None:
        order = self._store.get(order_id)
        return _copy(order) if order is not None else None

    async def list_page(self, offset: int, limit: int) -> tuple[list[Order], int]:
        ordered = sorted(
            self._store.values(), key=lambda o: (o.created_at, o.id), reverse=True
        )
        return [_copy(o) for o in ordered[offset:offset + limit]], len(ordered)

    async def save_status(
        self,
        order_id: str,
        expected: OrderStatus,
        new: OrderStatus,
    ) -> Order | None:
        order = self._store.get(order_id)
        if order is None or order.status is not expected:
            return None
        order.status = new
        return _copy(order)

    # --- Test helpers ---------------------------------------------------------

    def force_status(self, order_id: str, status: OrderStatus) -> None:
        self._store[order_id].status = status

    def __len__(self) -> int:
        return len(self._store)


class FakeInventoryGateway(InventoryGateway):
    """Stock levels in a dict.

    ``unreachable`` products behave as if the authority timed out.
    ``refuse_deduction`` products pass the availability check but are
    refused at deduction time; ``drop_deduction`` ones time out there.
    """

    def __init__(
        self,
        stock: dict[str, int] | None = None,
        unreachable: set[str] | None = None,
        refuse_deduction: set[str] | None = None,
        drop_deduction: set[str] | None = None,
    ) -> None:
        self.stock = dict(stock or {})
        self.unreachable = set(unreachable or ())
        self.refuse_deduction = set(refuse_deduction or ())
        self.drop_deduction = set(drop_deduction or ())
        self.check_calls: list[list[StockRequest]] = []
        self.deductions: list[tuple[str, int]] = []

    async def check_availability(
        self, requests: Sequence[StockRequest]
    ) -> AvailabilityResult:
        self.check_calls.append(list(requests))
        unavailable = {
            req.product_id
            for req in requests
            if req.product_id in self.unreachable
            or self.stock.get(req.product_id, 0) < req.quantity
        }
        return AvailabilityResult(
            unavailable_items=frozenset(unavailable),
            unverified_items=frozenset(unavailable & self.unreachable),
        )

    async def deduct_stock(self, product_id: str, quantity: int) -> StockDeduction:
        if product_id in self.unreachable or product_id in self.drop_deduction:
            raise DeductionError(product_id, "inventory unreachable")
        if product_id in self.refuse_deduction:
            raise DeductionError(product_id, "inventory responded 409", refused=True)
        available = self.stock.get(product_id, 0)
        if available < quantity:
            raise DeductionError(product_id, "insufficient stock", refused=True)
        self.stock[product_id] = available - quantity
        self.deductions.append((product_id, quantity))
        return StockDeduction(
            product_id=product_id, quantity=quantity, new_quantity=self.stock[product_id]
        )
