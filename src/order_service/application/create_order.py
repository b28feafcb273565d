"""Application service: Create Order use case.

Orchestrates the flow between the inventory gateway, the repository and
the domain model.  Inventory is only *consulted* here; stock is deducted
when the order is confirmed.
"""

from __future__ import annotations

import structlog

from order_service.application.dto import CreateOrderRequest, OrderDTO, to_order_dto
from order_service.application.validation import ensure_valid
from order_service.domain.exceptions import InsufficientStockError
from order_service.domain.gateway.inventory_gateway import InventoryGateway
from order_service.domain.model.inventory import merge_requests
from order_service.domain.model.order import (
    ContactDetails,
    Order,
    OrderItem,
    generate_guest_id,
    new_id,
)
from order_service.domain.model.value_objects import Money, Quantity
from order_service.domain.repository.order_repository import OrderRepository


class CreateOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        inventory: InventoryGateway,
        inventory_check_on_create: bool = True,
        logger=None,
    ) -> None:
        self._order_repo = order_repo
        self._inventory = inventory
        self._inventory_check_on_create = inventory_check_on_create
        self._log = logger or structlog.get_logger(__name__)

    async def handle(self, request: CreateOrderRequest) -> OrderDTO:
        """Create a new PENDING order.

        Steps:
        1. Validate the whole request (all violations reported at once).
        2. Resolve the buyer, generating a guest id when none is given.
        3. Build line items and let the Order aggregate fix the total.
        4. Optionally ask the inventory authority for availability.
        5. Persist order + items in one write and return a DTO.
        """
        ensure_valid(request)

        user_id = request.user_id.strip() if request.user_id else generate_guest_id()
        log = self._log.bind(user_id=user_id, guest=request.user_id is None)
        log.info("order_create_started", item_count=len(request.items))

        items = [
            OrderItem(
                id=new_id(),
                product_id=line.product_id.strip(),
                quantity=Quantity(line.quantity),
                unit_price=Money.of(line.price),
            )
            for line in request.items
        ]
        contact = ContactDetails(
            full_name=request.full_name.strip(),
            email=request.email.strip(),
            address=request.address.strip(),
            city=request.city.strip(),
            zip_code=request.zip_code.strip(),
        )
        order = Order.create(user_id=user_id, contact=contact, items=items)

        if self._inventory_check_on_create:
            availability = await self._inventory.check_availability(
                merge_requests(order.stock_requests())
            )
            if not availability.available:
                log.warning(
                    "order_create_rejected",
                    unavailable_items=sorted(availability.unavailable_items),
                    unverified_items=sorted(availability.unverified_items),
                )
                raise InsufficientStockError(
                    availability.unavailable_items, refused=availability.refused
                )
        else:
            log.warning("inventory_check_skipped", reason="disabled by configuration")

        saved = await self._order_repo.create(order)
        log.info("order_created", order_id=saved.id, total=str(saved.total))
        return to_order_dto(saved)
