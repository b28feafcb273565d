"""Transient inventory records exchanged with the inventory authority.

None of these are persisted: the inventory authority is the system of
record for stock, this service only asks it questions.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class StockRequest:
    product_id: str
    quantity: int


@dataclass(frozen=True)
class AvailabilityResult:
    """Outcome of a bulk availability check.

    ``unverified_items`` is the subset of ``unavailable_items`` the
    authority never answered for (timeout, 5xx, unreadable payload).  The
    rest were refused outright: missing, or short on stock.

    Invariant: ``available`` is True exactly when ``unavailable_items`` is
    empty.
    """

    unavailable_items: frozenset[str] = field(default_factory=frozenset)
    unverified_items: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if not self.unverified_items <= self.unavailable_items:
            raise ValueError("unverified items must also be unavailable")

    @property
    def available(self) -> bool:
        return not self.unavailable_items

    @property
    def refused(self) -> bool:
        """True when the authority itself said no for at least one product."""
        return bool(self.unavailable_items - self.unverified_items)

    @staticmethod
    def all_available() -> AvailabilityResult:
        return AvailabilityResult()


@dataclass(frozen=True)
class StockDeduction:
    """Confirmation that *product_id* was deducted, with the stock left over."""

    product_id: str
    quantity: int
    new_quantity: int


def merge_requests(requests: list[StockRequest]) -> list[StockRequest]:
    """Collapse repeated products into one request, keeping first-seen order."""
    totals: dict[str, int] = {}
    for req in requests:
        totals[req.product_id] = totals.get(req.product_id, 0) + req.quantity
    return [StockRequest(product_id=pid, quantity=qty) for pid, qty in totals.items()]
