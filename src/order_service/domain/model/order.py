"""Order aggregate, the core of the domain.

The Order is an aggregate root that owns its line items.
All business invariants are enforced here.
"""

from __future__ import annotations

import secrets
import string
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from order_service.domain.exceptions import InvalidTransitionError, ValidationError
from order_service.domain.model.inventory import StockRequest
from order_service.domain.model.value_objects import Money, Quantity


class OrderStatus(Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"


# Every status has an entry; an empty set marks a terminal status.
ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.COMPLETED}),
    OrderStatus.COMPLETED: frozenset(),
}


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------
_BASE36 = string.digits + string.ascii_lowercase
GUEST_PREFIX = "guest"
GUEST_SUFFIX_LENGTH = 9


def _to_base36(number: int) -> str:
    digits = []
    while True:
        number, rem = divmod(number, 36)
        digits.append(_BASE36[rem])
        if number == 0:
            return "".join(reversed(digits))


def generate_guest_id() -> str:
    """Synthesize a buyer id for guest checkout.

    Nanosecond clock plus a random suffix from ``secrets``: two checkouts
    landing on the same clock tick still differ in the suffix.
    """
    suffix = "".join(secrets.choice(_BASE36) for _ in range(GUEST_SUFFIX_LENGTH))
    return f"{GUEST_PREFIX}-{_to_base36(time.time_ns())}-{suffix}"


def new_id() -> str:
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ContactDetails:
    """Buyer contact and shipping fields, captured once at checkout."""

    full_name: str
    email: str
    address: str
    city: str
    zip_code: str


@dataclass(frozen=True)
class OrderItem:
    """One product/quantity/price triple.

    Immutable: the price is a snapshot taken when the order was placed.
    """

    id: str
    product_id: str
    quantity: Quantity
    unit_price: Money

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value


def compute_total(items: list[OrderItem]) -> Money:
    result = Money.zero()
    for item in items:
        result = result + item.line_total
    return result


@dataclass
class Order:
    """Aggregate root for purchase orders.

    Use the ``Order.create()`` factory for new orders; it enforces all
    business rules.  The ``__init__`` is intentionally simple so the
    repository can reconstitute persisted orders without re-validating.
    """

    id: str
    user_id: str
    contact: ContactDetails
    items: list[OrderItem]
    total: Money
    status: OrderStatus = OrderStatus.PENDING
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        user_id: str,
        contact: ContactDetails,
        items: list[OrderItem],
    ) -> Order:
        """Create a new PENDING order; the total is fixed here for good."""
        if not user_id or not user_id.strip():
            raise ValidationError("Buyer id is required")
        if not items:
            raise ValidationError("Order must contain at least one item")

        return Order(
            id=new_id(),
            user_id=user_id,
            contact=contact,
            items=list(items),
            total=compute_total(items),
        )

    # --- State transitions ----------------------------------------------------

    def check_transition(self, target: OrderStatus) -> None:
        """Raise InvalidTransitionError unless ``status -> target`` is an edge."""
        if not can_transition(self.status, target):
            raise InvalidTransitionError(self.status, target)

    def transition_to(self, target: OrderStatus) -> None:
        """Move to *target*.

        Stock deduction for PENDING -> CONFIRMED must happen *before*
        calling this (coordinated by the application handler via the
        domain service).
        """
        self.check_transition(target)
        self.status = target

    # --- Computed properties --------------------------------------------------

    def stock_requests(self) -> list[StockRequest]:
        return [
            StockRequest(product_id=item.product_id, quantity=item.quantity.value)
            for item in self.items
        ]
