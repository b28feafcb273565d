"""Value Objects shared across the domain.

Value Objects are immutable and compared by value, not identity.
They encapsulate validation so invalid values can never exist.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from order_service.domain.exceptions import ValidationError

# Every amount is held at exactly this many decimal places.
MONEY_PLACES = 2
_CENT = Decimal(1).scaleb(-MONEY_PLACES)
# Largest amount a NUMERIC(10, 2) column holds exactly.
MAX_AMOUNT = Decimal("99999999.99")
MAX_QUANTITY = 1_000_000


@dataclass(frozen=True)
class Money:
    """Non-negative monetary amount with two decimal places.

    Uses Decimal to avoid floating-point rounding errors that would be
    unacceptable in financial calculations.  Amounts that need more than
    two decimal places are rejected, never rounded.
    """

    amount: Decimal

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}"
            )
        if not self.amount.is_finite():
            raise ValidationError(f"Money amount must be finite, got {self.amount}")
        if self.amount < Decimal("0"):
            raise ValidationError(
                f"Money amount cannot be negative, got {self.amount}"
            )
        try:
            quantized = self.amount.quantize(_CENT)
        except InvalidOperation as exc:
            raise ValidationError(f"Money amount {self.amount} is out of range") from exc
        if quantized > MAX_AMOUNT:
            raise ValidationError(f"Money amount {self.amount} exceeds {MAX_AMOUNT}")
        if quantized != self.amount:
            raise ValidationError(
                f"Money amount {self.amount} has more than {MONEY_PLACES} decimal places"
            )
        # Normalise the exponent so Money("5") and Money("5.00") look alike.
        object.__setattr__(self, "amount", quantized)

    # --- Arithmetic helpers ---------------------------------------------------

    def __add__(self, other: Money) -> Money:
        return Money(self.amount + other.amount)

    def __mul__(self, factor: int) -> Money:
        if not isinstance(factor, int) or isinstance(factor, bool):
            raise TypeError(f"Can only multiply Money by int, got {type(factor).__name__}")
        return Money(self.amount * factor)

    def __lt__(self, other: Money) -> bool:
        return self.amount < other.amount

    # --- Display --------------------------------------------------------------

    def __str__(self) -> str:
        return f"{self.amount:.2f}"

    # --- Factory --------------------------------------------------------------

    @staticmethod
    def zero() -> Money:
        return Money(Decimal("0"))

    @staticmethod
    def of(amount: str | float | int | Decimal) -> Money:
        """Convenient factory that coerces to Decimal safely.

        Floats go through ``str()`` so ``10.1`` becomes ``Decimal("10.1")``
        rather than its binary expansion.
        """
        if isinstance(amount, bool):
            raise ValidationError(f"Invalid money amount: {amount!r}")
        try:
            return Money(Decimal(str(amount)))
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Invalid money amount: {amount!r}") from exc


@dataclass(frozen=True)
class Quantity:
    """A positive integer quantity.

    Enforces the invariant that you cannot order zero or negative items.
    """

    value: int

    def __post_init__(self) -> None:
        if not isinstance(self.value, int) or isinstance(self.value, bool):
            raise ValidationError(
                f"Quantity must be an integer, got {type(self.value).__name__}"
            )
        if self.value <= 0:
            raise ValidationError("Quantity must be positive")
        if self.value > MAX_QUANTITY:
            raise ValidationError(f"Quantity must be at most {MAX_QUANTITY}")

    def __str__(self) -> str:
        return str(self.value)
