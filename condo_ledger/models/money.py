"""
Money and date helpers.

Amounts are stored as integer minor units (cents). Summing cents is exact;
summing floats is not, and a balance sheet that is off by one cent after a
hundred entries is a bug report waiting to happen.

Conversion goes through Decimal so 120.50 becomes exactly 12050, and the
inverse gives back Decimal("120.50").
"""

import datetime as dt
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union


CENTS_PER_UNIT = 100
CURRENCY_SYMBOL = "R$"

Amount = Union[int, float, Decimal, str]


def parse_amount(value: Amount) -> Decimal:
    """
    Convert user input to a Decimal.

    Accepts int, float, Decimal and numeric strings ("1500", "120.50").
    Floats go through str() so 0.1 is read as Decimal("0.1").

    Raises:
        ValueError: booleans, non-numeric strings, NaN and infinities.
    """
    if isinstance(value, bool):
        raise ValueError("Amount must be a number")

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        amount = Decimal(str(value))
    elif isinstance(value, str):
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("Amount is empty")
        try:
            amount = Decimal(cleaned)
        except InvalidOperation:
            raise ValueError(f"Amount is not a number: '{value}'")
    else:
        raise ValueError(f"Amount must be a number, got {type(value).__name__}")

    if not amount.is_finite():
        raise ValueError("Amount must be a finite number")
    return amount


def to_minor_units(value: Amount) -> int:
    """
    Convert an amount to integer cents.

    Rounds half away from zero: 0.005 -> 1, -0.005 -> -1.

    >>> to_minor_units("1500.00")
    150000
    >>> to_minor_units(120.5)
    12050
    """
    amount = parse_amount(value) * CENTS_PER_UNIT
    return int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(minor_units: int) -> Decimal:
    """Exact inverse of to_minor_units for two-decimal amounts."""
    return (Decimal(minor_units) / CENTS_PER_UNIT).quantize(Decimal("0.01"))


def format_money(minor_units: int) -> str:
    """
    Format cents the way Brazilian reports show them.

    >>> format_money(150000)
    'R$ 1.500,00'
    >>> format_money(-12050)
    '-R$ 120,50'
    """
    amount = from_minor_units(abs(minor_units))
    # 1,234.56 -> 1.234,56
    text = f"{amount:,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    if minor_units < 0:
        return f"-{CURRENCY_SYMBOL} {text}"
    return f"{CURRENCY_SYMBOL} {text}"


def format_date(value: dt.date) -> str:
    """YYYY-MM-DD -> DD/MM/YYYY."""
    return value.strftime("%d/%m/%Y")


def month_year(value: dt.date) -> tuple[int, int]:
    """(month, year) of a date."""
    return value.month, value.year
