"""
Module: books_kernel.db.types
Responsibility: Annotated column aliases and the sanctioned rounding helper,
    so that every model and service uses identical type definitions.
Architecture position: Kernel > DB.  May be imported by models/, domain/,
    services/, and selectors/.  MUST NOT import from any of those layers.

Invariants enforced:
    - No floats anywhere in the books kernel.  All monetary amounts are
      Decimal with explicit precision (MONEY_DECIMAL_PLACES for storage).
    - round_money() is the sanctioned rounding function for stored and
      displayed amounts.
"""

from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Annotated

from sqlalchemy import String

from books_kernel.db.base import AmountType

# Exact monetary amount: Numeric(38, 9) on PostgreSQL, decimal string elsewhere
Amount = Annotated[Decimal, AmountType()]

# ISO 4217 currency code (e.g., "USD", "EUR", "INR")
Currency = Annotated[str, String(3)]

# Document and account names
Name = Annotated[str, String(140)]

# Short identifier strings (types, statuses)
ShortCode = Annotated[str, String(50)]

# Long text for remarks
LongText = Annotated[str, String(4000)]


MONEY_DECIMAL_PLACES = 9
DEFAULT_ROUNDING = ROUND_HALF_UP


def round_money(
    value: Decimal,
    decimal_places: int = 2,
    rounding: str = DEFAULT_ROUNDING,
) -> Decimal:
    """
    Round a monetary value to specified decimal places.

    Report cells are rounded here; Money.round() rounds invoice taxes and
    applies the same rule to its currency's minor units.
    """
    quantize_str = "0." + "0" * decimal_places if decimal_places > 0 else "1"
    return value.quantize(Decimal(quantize_str), rounding=rounding)


def enum_value(value: str | Enum) -> str:
    """
    Plain string for a ``str`` enum member or a string.

    ``str()`` of a ``(str, Enum)`` member is ``"Class.MEMBER"``, not its value.
    """
    return value.value if isinstance(value, Enum) else value
