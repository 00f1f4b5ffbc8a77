"""
Money helpers for bills and suggested gratuity.
"""

from decimal import ROUND_HALF_UP, Decimal

DEFAULT_TIP_RATE = Decimal("0.10")
_CENTS = Decimal("0.01")


def quantize(amount: Decimal) -> Decimal:
    return Decimal(str(amount)).quantize(_CENTS, ROUND_HALF_UP)


def calculate_tip(subtotal: Decimal, tip_rate: Decimal | float | None = None) -> Decimal:
    rate = DEFAULT_TIP_RATE if tip_rate is None else Decimal(str(tip_rate))
    return quantize(Decimal(str(subtotal)) * rate)


def bill_totals(subtotal: Decimal, tip_rate: Decimal | float | None = None) -> dict[str, Decimal]:
    """
    Compute the bill breakdown for a table.

    Examples:
        subtotal=25000, tip_rate=0.10:
            subtotal = 25000.00
            propina = 2500.00
            total = 27500.00
    """
    subtotal = quantize(subtotal)
    propina = calculate_tip(subtotal, tip_rate)
    return {
        "subtotal": subtotal,
        "propina": propina,
        "total": subtotal + propina,
    }
