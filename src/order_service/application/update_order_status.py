"""Application service: Update Order Status use case.

Drives the order state machine.  Confirming an order (PENDING ->
CONFIRMED) first commits stock through the StockDeductionService; the
status only changes once every deduction has succeeded.

The status write is a compare-and-set against the status we read, so
two concurrent confirmations cannot both win.  Both may still deduct
first, though: the loser's deductions stay applied (stock is taken twice
for one order) and are only visible in the ``order_status_conflict`` log
line.
"""

from __future__ import annotations

import structlog

from order_service.application.dto import OrderDTO, to_order_dto
from order_service.domain.exceptions import (
    FieldViolation,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from order_service.domain.gateway.inventory_gateway import InventoryGateway
from order_service.domain.model.order import OrderStatus
from order_service.domain.repository.order_repository import OrderRepository
from order_service.domain.service.stock_deduction_service import (
    StockDeductionService,
)


def parse_status(value: OrderStatus | str) -> OrderStatus:
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(str(value).strip().upper())
    except ValueError as exc:
        allowed = ", ".join(s.value for s in OrderStatus)
        raise ValidationError.from_violations(
            [FieldViolation("status", f"must be one of {allowed}")]
        ) from exc


class UpdateOrderStatusHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        inventory: InventoryGateway,
        logger=None,
    ) -> None:
        self._order_repo = order_repo
        self._log = logger or structlog.get_logger(__name__)
        self._deductions = StockDeductionService(inventory, logger=self._log)

    async def handle(self, order_id: str, new_status: OrderStatus | str) -> OrderDTO:
        target = parse_status(new_status)
        log = self._log.bind(order_id=order_id, to_status=target.value)

        order = await self._order_repo.get_by_id(order_id)
        if order is None:
            raise NotFoundError(f"Order with ID {order_id} not found")

        # Reject illegal edges before any side effect
        order.check_transition(target)
        log = log.bind(from_status=order.status.value)

        applied = []
        if target is OrderStatus.CONFIRMED:
            applied = await self._deductions.deduct_for_order(order)

        updated = await self._order_repo.save_status(
            order.id, expected=order.status, new=target
        )
        if updated is None:
            # Someone else moved (or removed) the order since we read it
            current = await self._order_repo.get_by_id(order_id)
            if current is None:
                raise NotFoundError(f"Order with ID {order_id} not found")
            log.warning(
                "order_status_conflict",
                actual_status=current.status.value,
                applied=[(d.product_id, d.quantity) for d in applied],
            )
            raise InvalidTransitionError(current.status, target)

        log.info("order_status_updated")
        return to_order_dto(updated)
