"""Domain service: Stock Deduction.

Commits stock for an order against the external inventory authority at
the PENDING -> CONFIRMED boundary.

The two-phase approach (check-then-deduct) keeps us from touching the
inventory at all when any product is already known to be short.  The
authority has no transactions, so phase 2 can still fail half-way:

  * deductions run sequentially, one item at a time;
  * the first failure stops the loop, so no further items are deducted;
  * deductions already applied are NOT re-credited.  They are logged so
    an operator can reconcile them by hand.
"""

from __future__ import annotations

import structlog

from order_service.domain.exceptions import DeductionError, StockDeductionError
from order_service.domain.gateway.inventory_gateway import InventoryGateway
from order_service.domain.model.inventory import StockDeduction, merge_requests
from order_service.domain.model.order import Order


class StockDeductionService:

    def __init__(self, inventory: InventoryGateway, logger=None) -> None:
        self._inventory = inventory
        self._log = logger or structlog.get_logger(__name__)

    async def deduct_for_order(self, order: Order) -> list[StockDeduction]:
        """Deduct stock for every line item, or raise StockDeductionError."""
        log = self._log.bind(order_id=order.id)
        requests = merge_requests(order.stock_requests())

        # Phase 1: prove availability before mutating anything
        availability = await self._inventory.check_availability(requests)
        if not availability.available:
            log.warning(
                "stock_deduction_precheck_failed",
                unavailable_items=sorted(availability.unavailable_items),
                unverified_items=sorted(availability.unverified_items),
            )
            raise StockDeductionError(
                order.id,
                sorted(availability.unavailable_items),
                refused=availability.refused,
            )

        # Phase 2: deduct, stopping at the first failure
        applied: list[StockDeduction] = []
        for req in requests:
            try:
                deduction = await self._inventory.deduct_stock(req.product_id, req.quantity)
            except DeductionError as exc:
                log.error(
                    "stock_deduction_failed",
                    product_id=exc.product_id,
                    reason=exc.reason,
                    applied=[(d.product_id, d.quantity) for d in applied],
                    skipped=[r.product_id for r in requests[len(applied) + 1:]],
                )
                raise StockDeductionError(
                    order.id, [exc.product_id], refused=exc.refused
                ) from exc
            log.info(
                "stock_deducted",
                product_id=deduction.product_id,
                quantity=deduction.quantity,
                new_quantity=deduction.new_quantity,
            )
            applied.append(deduction)

        return applied
