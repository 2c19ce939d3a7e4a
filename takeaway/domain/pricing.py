"""
Money arithmetic for orders.

Line totals, order totals and the payment-status derivation live here as
pure functions so the lifecycle engine and the tests share one definition.
"""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Iterable

from takeaway.core.exceptions import ValidationError
from takeaway.domain.types import PaymentStatus

MONEY_QUANT = Decimal("0.01")
ZERO = Decimal("0.00")
# Money columns are NUMERIC(10, 2)
MAX_MONEY = Decimal("99999999.99")


def to_money(value: Any, field_name: str = "amount") -> Decimal:
    """Convert int/float/str/Decimal to a 2-dp Decimal (half-up)."""
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field_name} must be a number", details={"field": field_name})
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field_name} must be a number", details={"field": field_name}) from None
    if not amount.is_finite():
        raise ValidationError(f"{field_name} must be a finite number", details={"field": field_name})
    ensure_storable(amount, field_name)
    return ensure_storable(amount.quantize(MONEY_QUANT, rounding=ROUND_HALF_UP), field_name)


def ensure_storable(amount: Decimal, field_name: str = "amount") -> Decimal:
    """Reject amounts a money column cannot hold."""
    if abs(amount) > MAX_MONEY:
        raise ValidationError(
            f"{field_name} must not exceed {MAX_MONEY}",
            details={"field": field_name, "max": str(MAX_MONEY)},
        )
    return amount


def line_total(quantity: int, price: Decimal) -> Decimal:
    return (Decimal(quantity) * price).quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)


def order_total(items: Iterable[Any]) -> Decimal:
    """Sum of ``item.total_price`` over *items*."""
    return sum((item.total_price for item in items), ZERO)


def derive_payment_status(total_paid: Decimal, total_amount: Decimal) -> PaymentStatus:
    """paid if fully covered, partial if something was paid, else pending."""
    if total_paid >= total_amount:
        return PaymentStatus.PAID
    if total_paid > ZERO:
        return PaymentStatus.PARTIAL
    return PaymentStatus.PENDING
