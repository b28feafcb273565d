"""Integration tests for the CreateOrder use case.

Uses in-memory fakes, no database, no network.
"""

import asyncio
from decimal import Decimal

import pytest

from order_service.application.create_order import CreateOrderHandler
from order_service.application.dto import CreateOrderRequest, OrderItemSpec
from order_service.domain.exceptions import InsufficientStockError, ValidationError
from tests.fakes import FakeInventoryGateway, FakeOrderRepository


def _request(items=None, user_id=None, **overrides) -> CreateOrderRequest:
    fields = dict(
        full_name="Alice Example",
        email="alice@example.com",
        address="1 Main St",
        city="Springfield",
        zip_code="12345",
    )
    fields.update(overrides)
    if items is None:
        items = [OrderItemSpec("A", 2, "10.00"), OrderItemSpec("B", 1, "5.00")]
    return CreateOrderRequest(items=items, user_id=user_id, **fields)


def _setup(stock=None, check_on_create=True):
    order_repo = FakeOrderRepository()
    inventory = FakeInventoryGateway(stock={"A": 100, "B": 100} if stock is None else stock)
    handler = CreateOrderHandler(order_repo, inventory, inventory_check_on_create=check_on_create)
    return handler, order_repo, inventory


class TestCreateOrderHappyPath:

    async def test_creates_pending_order_with_correct_total(self):
        handler, _, _ = _setup()
        dto = await handler.handle(_request(user_id="user-42"))
        assert dto.total == "25.00"
        assert dto.status == "PENDING"
        assert dto.user_id == "user-42"
        assert [(i.product_id, i.quantity, i.price) for i in dto.items] == [
            ("A", 2, "10.00"),
            ("B", 1, "5.00"),
        ]

    async def test_persists_order_with_items(self):
        handler, order_repo, _ = _setup()
        dto = await handler.handle(_request())
        saved = await order_repo.get_by_id(dto.id)
        assert saved is not None
        assert saved.contact.email == "alice@example.com"
        assert [i.product_id for i in saved.items] == ["A", "B"]

    async def test_total_accepts_mixed_numeric_inputs(self):
        handler, _, _ = _setup()
        dto = await handler.handle(
            _request(items=[
                OrderItemSpec("A", 3, 0.1),
                OrderItemSpec("B", 2, Decimal("19.99")),
                OrderItemSpec("A", 1, 4),
            ])
        )
        assert dto.total == "44.28"

    async def test_contact_fields_are_trimmed(self):
        handler, _, _ = _setup()
        dto = await handler.handle(_request(full_name="  Alice  ", city=" Springfield "))
        assert dto.full_name == "Alice"
        assert dto.city == "Springfield"

    async def test_no_stock_is_deducted_at_creation(self):
        handler, _, inventory = _setup()
        await handler.handle(_request())
        assert inventory.deductions == []
        assert inventory.stock == {"A": 100, "B": 100}


class TestGuestCheckout:

    async def test_guest_id_generated_when_user_missing(self):
        handler, _, _ = _setup()
        dto = await handler.handle(_request(user_id=None))
        assert dto.user_id.startswith("guest-")

    async def test_concurrent_guest_checkouts_get_distinct_ids(self):
        handler, order_repo, _ = _setup()
        dtos = await asyncio.gather(*(handler.handle(_request()) for _ in range(50)))
        assert len({d.user_id for d in dtos}) == 50
        assert len(order_repo) == 50


class TestCreateOrderInventoryCheck:

    async def test_unavailable_items_rejected_and_nothing_persisted(self):
        handler, order_repo, _ = _setup(stock={"A": 1, "B": 100})
        with pytest.raises(InsufficientStockError) as info:
            await handler.handle(_request())
        assert info.value.product_ids == ["A"]
        assert order_repo.create_calls == 0

    async def test_repeated_product_checked_with_summed_quantity(self):
        handler, _, inventory = _setup(stock={"A": 3})
        with pytest.raises(InsufficientStockError):
            await handler.handle(
                _request(items=[OrderItemSpec("A", 2, "1.00"), OrderItemSpec("A", 2, "1.00")])
            )
        assert [(r.product_id, r.quantity) for r in inventory.check_calls[0]] == [("A", 4)]

    async def test_unreachable_inventory_is_not_a_refusal(self):
        order_repo = FakeOrderRepository()
        inventory = FakeInventoryGateway(stock={"A": 100, "B": 100}, unreachable={"B"})
        handler = CreateOrderHandler(order_repo, inventory)

        with pytest.raises(InsufficientStockError) as info:
            await handler.handle(_request())

        assert info.value.product_ids == ["B"]
        assert info.value.refused is False
        assert order_repo.create_calls == 0

    async def test_check_can_be_disabled(self):
        handler, order_repo, inventory = _setup(stock={}, check_on_create=False)
        dto = await handler.handle(_request())
        assert dto.status == "PENDING"
        assert inventory.check_calls == []
        assert len(order_repo) == 1


class TestCreateOrderValidation:

    async def test_empty_items_rejected(self):
        handler, order_repo, _ = _setup()
        with pytest.raises(ValidationError, match="at least one item"):
            await handler.handle(_request(items=[]))
        assert order_repo.create_calls == 0

    @pytest.mark.parametrize("qty", [0, -1])
    async def test_non_positive_quantity_rejected(self, qty):
        handler, order_repo, _ = _setup()
        with pytest.raises(ValidationError, match=r"items\[0\]\.quantity"):
            await handler.handle(_request(items=[OrderItemSpec("A", qty, "1.00")]))
        assert order_repo.create_calls == 0

    async def test_negative_price_rejected(self):
        handler, _, _ = _setup()
        with pytest.raises(ValidationError, match=r"items\[0\]\.price"):
            await handler.handle(_request(items=[OrderItemSpec("A", 1, "-0.01")]))

    async def test_malformed_email_rejected(self):
        handler, _, _ = _setup()
        with pytest.raises(ValidationError, match="email"):
            await handler.handle(_request(email="not-an-email"))

    async def test_all_violations_reported_together(self):
        handler, _, inventory = _setup()
        with pytest.raises(ValidationError) as info:
            await handler.handle(_request(full_name="", city=" ", items=[OrderItemSpec("", 0, "x")]))
        fields = {v.field for v in info.value.violations}
        assert fields == {
            "full_name",
            "city",
            "items[0].product_id",
            "items[0].quantity",
            "items[0].price",
        }
        assert inventory.check_calls == []

    async def test_amounts_beyond_storage_rejected_before_any_io(self):
        handler, order_repo, inventory = _setup()
        with pytest.raises(ValidationError, match=r"items\[0\]\.price"):
            await handler.handle(
                _request(items=[OrderItemSpec("A", 1, "12345678901234567.89")])
            )
        with pytest.raises(ValidationError, match=r"items\[0\]\.quantity"):
            await handler.handle(_request(items=[OrderItemSpec("A", 10**19, "1.00")]))
        assert inventory.check_calls == []
        assert order_repo.create_calls == 0
