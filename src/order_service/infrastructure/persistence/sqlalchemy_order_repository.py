"""SQLAlchemy (async) implementation of OrderRepository."""

from __future__ import annotations

from datetime import timezone

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from order_service.domain.exceptions import InfrastructureError
from order_service.domain.model.order import (
    ContactDetails,
    Order,
    OrderItem,
    OrderStatus,
)
from order_service.domain.model.value_objects import Money, Quantity
from order_service.domain.repository.order_repository import OrderRepository
from order_service.infrastructure.persistence.models import OrderItemRow, OrderRow


class SqlAlchemyOrderRepository(OrderRepository):

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    # --- OrderRepository interface --------------------------------------------

    async def create(self, order: Order) -> Order:
        try:
            async with self._session_factory() as session, session.begin():
                session.add(self._to_row(order))
        except SQLAlchemyError as exc:
            raise InfrastructureError(f"Failed to persist order {order.id}") from exc
        return order

    async def get_by_id(self, order_id: str) -> Order | None:
        stmt = (
            select(OrderRow)
            .options(selectinload(OrderRow.items))
            .where(OrderRow.id == order_id)
        )
        try:
            async with self._session_factory() as session:
                row = (await session.execute(stmt)).scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise InfrastructureError(f"Failed to load order {order_id}") from exc
        return self._to_domain(row) if row is not None else None

    async def list_page(self, offset: int, limit: int) -> tuple[list[Order], int]:
        stmt = (
            select(OrderRow)
            .options(selectinload(OrderRow.items))
            .order_by(OrderRow.created_at.desc(), OrderRow.id.desc())
            .offset(offset)
            .limit(limit)
        )
        try:
            async with self._session_factory() as session:
                total = (
                    await session.execute(select(func.count()).select_from(OrderRow))
                ).scalar_one()
                rows = (await session.execute(stmt)).scalars().all()
        except SQLAlchemyError as exc:
            raise InfrastructureError("Failed to list orders") from exc
        return [self._to_domain(r) for r in rows], total

    async def save_status(
        self,
        order_id: str,
        expected: OrderStatus,
        new: OrderStatus,
    ) -> Order | None:
        # Atomic compare-and-set: only one of two racing writers matches
        stmt = (
            update(OrderRow)
            .where(OrderRow.id == order_id, OrderRow.status == expected)
            .values(status=new)
            .execution_options(synchronize_session=False)
        )
        try:
            async with self._session_factory() as session, session.begin():
                result = await session.execute(stmt)
        except SQLAlchemyError as exc:
            raise InfrastructureError(f"Failed to update order {order_id}") from exc
        if result.rowcount != 1:
            return None
        return await self.get_by_id(order_id)

    # --- Mapping --------------------------------------------------------------

    @staticmethod
    def _to_row(order: Order) -> OrderRow:
        return OrderRow(
            id=order.id,
            user_id=order.user_id,
            full_name=order.contact.full_name,
            email=order.contact.email,
            address=order.contact.address,
            city=order.contact.city,
            zip_code=order.contact.zip_code,
            status=order.status,
            total=order.total.amount,
            created_at=order.created_at,
            items=[
                OrderItemRow(
                    id=item.id,
                    position=position,
                    product_id=item.product_id,
                    quantity=item.quantity.value,
                    unit_price=item.unit_price.amount,
                )
                for position, item in enumerate(order.items)
            ],
        )

    @staticmethod
    def _to_domain(row: OrderRow) -> Order:
        created_at = row.created_at
        if created_at.tzinfo is None:  # SQLite drops the offset
            created_at = created_at.replace(tzinfo=timezone.utc)
        return Order(
            id=row.id,
            user_id=row.user_id,
            contact=ContactDetails(
                full_name=row.full_name,
                email=row.email,
                address=row.address,
                city=row.city,
                zip_code=row.zip_code,
            ),
            items=[
                OrderItem(
                    id=i.id,
                    product_id=i.product_id,
                    quantity=Quantity(i.quantity),
                    unit_price=Money(i.unit_price),
                )
                for i in row.items
            ],
            total=Money(row.total),
            status=row.status,
            created_at=created_at,
        )
