"""Money helpers shared by the services."""
from decimal import Decimal, ROUND_HALF_UP

CENTS = Decimal('0.01')


def to_money(value) -> Decimal:
    """
    Quantize a monetary value to cents (half-up).

    Floats go through str() so 19.99 stays 19.99.

    Raises:
        decimal.InvalidOperation: if the value is not numeric.
    """
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)
