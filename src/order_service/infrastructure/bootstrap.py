"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncEngine

from order_service.application.create_order import CreateOrderHandler
from order_service.application.list_orders import ListOrdersHandler
from order_service.application.show_order import ShowOrderHandler
from order_service.application.update_order_status import UpdateOrderStatusHandler
from order_service.domain.gateway.inventory_gateway import InventoryGateway
from order_service.domain.repository.order_repository import OrderRepository
from order_service.infrastructure.config import Settings
from order_service.infrastructure.inventory.http_inventory_gateway import (
    HttpInventoryGateway,
)
from order_service.infrastructure.logging import get_logger
from order_service.infrastructure.persistence.database import (
    create_schema,
    make_engine,
    make_session_factory,
)
from order_service.infrastructure.persistence.sqlalchemy_order_repository import (
    SqlAlchemyOrderRepository,
)


@dataclass
class Container:
    """Long-lived collaborators shared by every request."""

    settings: Settings
    order_repo: OrderRepository
    inventory: InventoryGateway
    engine: AsyncEngine | None = None

    def create_order_handler(self) -> CreateOrderHandler:
        return CreateOrderHandler(
            order_repo=self.order_repo,
            inventory=self.inventory,
            inventory_check_on_create=self.settings.inventory_check_on_create,
            logger=get_logger("create_order"),
        )

    def show_order_handler(self) -> ShowOrderHandler:
        return ShowOrderHandler(order_repo=self.order_repo)

    def list_orders_handler(self) -> ListOrdersHandler:
        return ListOrdersHandler(order_repo=self.order_repo)

    def update_order_status_handler(self) -> UpdateOrderStatusHandler:
        return UpdateOrderStatusHandler(
            order_repo=self.order_repo,
            inventory=self.inventory,
            logger=get_logger("update_order_status"),
        )

    async def startup(self) -> None:
        # Like the ORM's "synchronize" mode: create missing tables on boot
        if self.engine is not None:
            await create_schema(self.engine)

    async def aclose(self) -> None:
        if isinstance(self.inventory, HttpInventoryGateway):
            await self.inventory.aclose()
        if self.engine is not None:
            await self.engine.dispose()


def build_container(settings: Settings) -> Container:
    engine = make_engine(settings.database_url, echo=False)
    return Container(
        settings=settings,
        order_repo=SqlAlchemyOrderRepository(make_session_factory(engine)),
        inventory=HttpInventoryGateway(
            base_url=settings.inventory_url,
            timeout=settings.inventory_timeout_seconds,
            check_mode=settings.inventory_check_mode,
            logger=get_logger("inventory_gateway"),
        ),
        engine=engine,
    )
