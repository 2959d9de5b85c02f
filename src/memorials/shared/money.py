"""Money arithmetic for checkout.

Amounts are stored as floats in major units (dollars) on the aggregates, and
every calculation goes through ``Decimal`` with half-up rounding to cents.
The gateway only ever sees integer minor units, converted at the boundary.
"""

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")


def to_decimal(amount) -> Decimal:
    if isinstance(amount, Decimal):
        return amount
    # str() first so 39.95 stays 39.95 instead of its binary expansion
    return Decimal(str(amount or 0))


def round_half_up(amount) -> Decimal:
    return to_decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def to_minor_units(amount) -> int:
    """Dollars to cents, e.g. 43.15 -> 4315."""
    return int((to_decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(amount: int | None) -> float:
    return float(Decimal(amount or 0) / 100)


def line_total(unit_price, quantity) -> Decimal:
    return round_half_up(to_decimal(unit_price) * int(quantity))


def price_with_tax(subtotal, tax_rate) -> tuple[Decimal, Decimal, Decimal]:
    """Return ``(subtotal, tax, total_with_tax)``, all rounded to cents.

    The total is rounded first and the tax is whatever is left over, so
    ``subtotal + tax == total_with_tax`` always holds exactly.
    """
    subtotal = round_half_up(subtotal)
    total = round_half_up(subtotal * (1 + to_decimal(tax_rate)))
    return subtotal, total - subtotal, total
