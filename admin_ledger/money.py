"""
Money values.

Balances and amounts are Decimal with cent precision. Floats are
rejected outright: 0.1 + 0.2 is not a currency value.
"""

from decimal import Decimal, InvalidOperation

from admin_ledger.config import MONEY_QUANTUM
from admin_ledger.exceptions import InvalidArgument

# Fits Numeric(19, 2), and as cents fits a signed 64-bit integer
# (the SQLite storage form)
MAX_MONEY = Decimal(10) ** 16


def to_money(value, field: str = "amount") -> Decimal:
    """
    Convert input to a cent-precision Decimal.

    Accepts Decimal, int and numeric strings. Raises InvalidArgument
    for floats, booleans, non-finite values and anything finer
    than one cent.
    """
    if isinstance(value, (bool, float)):
        raise InvalidArgument(f"{field} must be a decimal value, not {type(value).__name__}")

    try:
        amount = value if isinstance(value, Decimal) else Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidArgument(f"{field} is not a valid decimal: {value!r}")

    if not amount.is_finite():
        raise InvalidArgument(f"{field} must be finite")

    if abs(amount) >= MAX_MONEY:
        raise InvalidArgument(f"{field} is out of range")

    quantized = amount.quantize(MONEY_QUANTUM)
    if amount != quantized:
        raise InvalidArgument(f"{field} has more than two decimal places")

    return quantized
