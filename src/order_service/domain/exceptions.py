"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the API and CLI layers can catch them uniformly and translate them into
transport-level results.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class FieldViolation:
    """A single field-level validation failure, e.g. ``items[0].quantity``."""

    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""

    def __init__(self, message: str, violations: Iterable[FieldViolation] = ()) -> None:
        self.violations = list(violations)
        super().__init__(message)

    @classmethod
    def from_violations(cls, violations: list[FieldViolation]) -> ValidationError:
        return cls("; ".join(str(v) for v in violations), violations)


class NotFoundError(DomainException):
    """A requested entity does not exist."""


class InvalidTransitionError(DomainException):
    """The requested status change is not an edge of the state machine."""

    def __init__(self, from_status, to_status) -> None:
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Invalid status transition from {from_status.value} to {to_status.value}"
        )


class InsufficientStockError(DomainException):
    """The inventory authority could not prove availability for some products.

    ``refused`` is False when no product was refused outright and the
    authority simply could not be reached for the rest.
    """

    def __init__(self, product_ids: Iterable[str], refused: bool = True) -> None:
        self.product_ids = sorted(set(product_ids))
        self.refused = refused
        super().__init__(
            f"Insufficient stock for products: {', '.join(self.product_ids)}"
        )


class DeductionError(DomainException):
    """A single stock deduction was refused or could not be performed.

    ``refused`` is True when the inventory authority answered and said no
    (e.g. insufficient stock); False when it could not be reached at all.
    """

    def __init__(self, product_id: str, reason: str, refused: bool = False) -> None:
        self.product_id = product_id
        self.reason = reason
        self.refused = refused
        super().__init__(f"Failed to deduct stock for product {product_id}: {reason}")


class StockDeductionError(DomainException):
    """Confirming an order failed because stock could not be deducted."""

    def __init__(
        self,
        order_id: str,
        product_ids: Iterable[str],
        refused: bool = False,
    ) -> None:
        self.order_id = order_id
        self.product_ids = list(product_ids)
        self.refused = refused
        super().__init__(
            f"Failed to deduct inventory stock for order {order_id} "
            f"(products: {', '.join(self.product_ids)}). Order not confirmed."
        )


class InfrastructureError(DomainException):
    """Storage or network failure not attributable to caller input."""
