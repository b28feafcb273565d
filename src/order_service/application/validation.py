"""Input validation for checkout requests.

One explicit pass over the request that collects *every* problem as a
field-level violation, instead of stopping at the first one.
"""

from __future__ import annotations

import re
from decimal import Decimal

from order_service.application.dto import CreateOrderRequest
from order_service.domain.exceptions import FieldViolation, ValidationError
from order_service.domain.model.value_objects import MAX_AMOUNT, MAX_QUANTITY, Money

MAX_LINE_ITEMS = 100

# Deliberately loose: one "@", no whitespace, a dot in the domain part.
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s.]+$")

_CONTACT_FIELDS = ("full_name", "email", "address", "city", "zip_code")

# Product ids travel as a single URL path segment to the inventory authority.
_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]")
_DOT_SEGMENTS = {".", ".."}


def _blank(value) -> bool:
    return not isinstance(value, str) or not value.strip()


def validate_create_order(request: CreateOrderRequest) -> list[FieldViolation]:
    violations: list[FieldViolation] = []

    for name in _CONTACT_FIELDS:
        if _blank(getattr(request, name)):
            violations.append(FieldViolation(name, "must not be empty"))

    if not _blank(request.email) and not _EMAIL_RE.match(request.email.strip()):
        violations.append(FieldViolation("email", "must be a valid email address"))

    if request.user_id is not None and _blank(request.user_id):
        violations.append(FieldViolation("user_id", "must not be empty when given"))

    if not request.items:
        violations.append(FieldViolation("items", "must contain at least one item"))
    elif len(request.items) > MAX_LINE_ITEMS:
        violations.append(
            FieldViolation("items", f"must contain at most {MAX_LINE_ITEMS} items")
        )

    total = Decimal("0")
    totals_known = True
    for i, line in enumerate(request.items):
        prefix = f"items[{i}]"
        if _blank(line.product_id):
            violations.append(FieldViolation(f"{prefix}.product_id", "must not be empty"))
        elif _CONTROL_RE.search(line.product_id) or line.product_id.strip() in _DOT_SEGMENTS:
            violations.append(
                FieldViolation(f"{prefix}.product_id", "must be a printable product identifier")
            )

        qty = line.quantity
        if not isinstance(qty, int) or isinstance(qty, bool):
            violations.append(FieldViolation(f"{prefix}.quantity", "must be an integer"))
            qty = None
        elif qty < 1:
            violations.append(FieldViolation(f"{prefix}.quantity", "must be at least 1"))
            qty = None
        elif qty > MAX_QUANTITY:
            violations.append(
                FieldViolation(f"{prefix}.quantity", f"must be at most {MAX_QUANTITY}")
            )
            qty = None

        try:
            price = Money.of(line.price)
        except ValidationError as exc:
            violations.append(FieldViolation(f"{prefix}.price", str(exc)))
            price = None

        if qty is None or price is None:
            totals_known = False
        else:
            total += price.amount * qty

    if request.items and totals_known and total > MAX_AMOUNT:
        violations.append(
            FieldViolation("items", f"order total {total} exceeds {MAX_AMOUNT}")
        )

    return violations

def ensure_valid(request: CreateOrderRequest) -> None:
    """Raise ValidationError carrying all violations, if there are any."""
    violations = validate_create_order(request)
    if violations:
        raise ValidationError.from_violations(violations)
