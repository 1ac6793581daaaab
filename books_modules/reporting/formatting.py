"""Money display for report cells."""

from decimal import Decimal

from books_kernel.db.types import round_money
from books_kernel.domain.currency import CurrencyRegistry


def format_money(value: Decimal, currency: str, precision: int = 2) -> str:
    """
    Format an amount with the currency symbol and thousands separators.

    ``format_money(Decimal("-1234.5"), "USD")`` -> ``"-$1,234.50"``.
    """
    quantized = round_money(value, precision)
    symbol = CurrencyRegistry.get_symbol(currency)
    # Letter codes such as "KWD" read better with a space
    separator = "" if len(symbol) == 1 else " "
    sign = "-" if quantized < 0 else ""
    return f"{sign}{symbol}{separator}{abs(quantized):,.{precision}f}"
