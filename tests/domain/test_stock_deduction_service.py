"""Unit tests for the StockDeductionService domain service."""

import pytest

from order_service.domain.exceptions import StockDeductionError
from order_service.domain.model.order import ContactDetails, Order, OrderItem, new_id
from order_service.domain.model.value_objects import Money, Quantity
from order_service.domain.service.stock_deduction_service import StockDeductionService
from tests.fakes import FakeInventoryGateway


def _make_order(items: list[tuple[str, int]]) -> Order:
    """Create an order with given (product_id, qty) tuples."""
    line_items = [
        OrderItem(id=new_id(), product_id=pid, quantity=Quantity(qty), unit_price=Money.of("10.00"))
        for pid, qty in items
    ]
    contact = ContactDetails("Test", "t@example.com", "1 Road", "Town", "00000")
    return Order.create("user-1", contact, line_items)


class TestDeductForOrder:

    async def test_deducts_all_items(self):
        inventory = FakeInventoryGateway(stock={"A": 100, "B": 50})
        svc = StockDeductionService(inventory)

        applied = await svc.deduct_for_order(_make_order([("A", 10), ("B", 5)]))

        assert [(d.product_id, d.new_quantity) for d in applied] == [("A", 90), ("B", 45)]
        assert inventory.stock == {"A": 90, "B": 45}

    async def test_repeated_product_deducted_once_with_summed_quantity(self):
        inventory = FakeInventoryGateway(stock={"A": 10})
        svc = StockDeductionService(inventory)

        await svc.deduct_for_order(_make_order([("A", 3), ("A", 4)]))

        assert inventory.deductions == [("A", 7)]

    async def test_precheck_failure_touches_nothing(self):
        inventory = FakeInventoryGateway(stock={"A": 100, "B": 1})
        svc = StockDeductionService(inventory)

        with pytest.raises(StockDeductionError) as info:
            await svc.deduct_for_order(_make_order([("A", 10), ("B", 5)]))

        assert info.value.product_ids == ["B"]
        assert info.value.refused is True
        assert inventory.deductions == []
        assert inventory.stock == {"A": 100, "B": 1}

    async def test_stops_at_first_failed_deduction(self):
        inventory = FakeInventoryGateway(
            stock={"A": 100, "B": 100, "C": 100}, refuse_deduction={"B"}
        )
        svc = StockDeductionService(inventory)

        with pytest.raises(StockDeductionError) as info:
            await svc.deduct_for_order(_make_order([("A", 1), ("B", 1), ("C", 1)]))

        assert info.value.product_ids == ["B"]
        # A was already applied and is not re-credited; C was never attempted
        assert inventory.deductions == [("A", 1)]
        assert inventory.stock == {"A": 99, "B": 100, "C": 100}

    async def test_timeout_during_deduction_is_not_a_refusal(self):
        inventory = FakeInventoryGateway(stock={"A": 5}, drop_deduction={"A"})
        svc = StockDeductionService(inventory)
        order = _make_order([("A", 1)])

        with pytest.raises(StockDeductionError) as info:
            await svc.deduct_for_order(order)

        assert info.value.order_id == order.id
        assert info.value.refused is False
        assert inventory.deductions == []

    async def test_unreachable_during_precheck_is_not_a_refusal(self):
        inventory = FakeInventoryGateway(stock={"A": 5}, unreachable={"A"})
        svc = StockDeductionService(inventory)

        with pytest.raises(StockDeductionError, match="products: A") as info:
            await svc.deduct_for_order(_make_order([("A", 1)]))

        assert inventory.deductions == []
        assert info.value.refused is False

    async def test_short_stock_outweighs_an_unreachable_product(self):
        inventory = FakeInventoryGateway(stock={"A": 5, "B": 0}, unreachable={"A"})
        svc = StockDeductionService(inventory)

        with pytest.raises(StockDeductionError) as info:
            await svc.deduct_for_order(_make_order([("A", 1), ("B", 1)]))

        assert info.value.product_ids == ["A", "B"]
        assert info.value.refused is True
