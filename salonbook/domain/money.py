from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

ZERO = Decimal("0.00")
_CENT = Decimal("0.01")


def to_money(value: Decimal | int | float | str | None) -> Decimal:
    """Coerce a stored or computed amount to a 2-place Decimal."""
    if value is None:
        return ZERO
    if isinstance(value, float):
        value = repr(value)
    return Decimal(value).quantize(_CENT, rounding=ROUND_HALF_UP)


def to_minor_units(amount: Decimal) -> int:
    """Gateway amounts are integers in the smallest currency unit (paise)."""
    return int((to_money(amount) * 100).to_integral_value(rounding=ROUND_HALF_UP))


def from_minor_units(amount_minor: int) -> Decimal:
    return to_money(Decimal(amount_minor) / 100)


def money_str(amount: Decimal) -> str:
    return str(to_money(amount))
