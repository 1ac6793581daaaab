"""Currency -- ISO 4217 registry with minor units and display symbols."""

from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True)
class CurrencyInfo:
    """Information about a single ISO 4217 currency."""

    code: str
    decimal_places: int
    name: str
    symbol: str

    @property
    def quantize_string(self) -> str:
        """String for Decimal.quantize() to round to this currency's precision."""
        if self.decimal_places == 0:
            return "1"
        return "0." + "0" * self.decimal_places


class CurrencyRegistry:
    """Registry of the ISO 4217 currencies a small business books in."""

    _CURRENCIES: ClassVar[dict[str, CurrencyInfo]] = {
        "USD": CurrencyInfo("USD", 2, "US Dollar", "$"),
        "EUR": CurrencyInfo("EUR", 2, "Euro", "€"),
        "GBP": CurrencyInfo("GBP", 2, "Pound Sterling", "£"),
        "INR": CurrencyInfo("INR", 2, "Indian Rupee", "₹"),
        "JPY": CurrencyInfo("JPY", 0, "Japanese Yen", "¥"),
        "CNY": CurrencyInfo("CNY", 2, "Chinese Yuan", "CN¥"),
        "CHF": CurrencyInfo("CHF", 2, "Swiss Franc", "CHF"),
        "CAD": CurrencyInfo("CAD", 2, "Canadian Dollar", "CA$"),
        "AUD": CurrencyInfo("AUD", 2, "Australian Dollar", "A$"),
        "NZD": CurrencyInfo("NZD", 2, "New Zealand Dollar", "NZ$"),
        "SGD": CurrencyInfo("SGD", 2, "Singapore Dollar", "S$"),
        "HKD": CurrencyInfo("HKD", 2, "Hong Kong Dollar", "HK$"),
        "AED": CurrencyInfo("AED", 2, "UAE Dirham", "AED"),
        "SAR": CurrencyInfo("SAR", 2, "Saudi Riyal", "SAR"),
        "ZAR": CurrencyInfo("ZAR", 2, "South African Rand", "R"),
        "BRL": CurrencyInfo("BRL", 2, "Brazilian Real", "R$"),
        "MXN": CurrencyInfo("MXN", 2, "Mexican Peso", "MX$"),
        "SEK": CurrencyInfo("SEK", 2, "Swedish Krona", "kr"),
        "NOK": CurrencyInfo("NOK", 2, "Norwegian Krone", "kr"),
        "DKK": CurrencyInfo("DKK", 2, "Danish Krone", "kr"),
        "PLN": CurrencyInfo("PLN", 2, "Polish Zloty", "zł"),
        "KES": CurrencyInfo("KES", 2, "Kenyan Shilling", "KSh"),
        "NGN": CurrencyInfo("NGN", 2, "Nigerian Naira", "₦"),
        "IDR": CurrencyInfo("IDR", 2, "Indonesian Rupiah", "Rp"),
        "PHP": CurrencyInfo("PHP", 2, "Philippine Peso", "₱"),
        "KRW": CurrencyInfo("KRW", 0, "South Korean Won", "₩"),
        "VND": CurrencyInfo("VND", 0, "Vietnamese Dong", "₫"),
        "KWD": CurrencyInfo("KWD", 3, "Kuwaiti Dinar", "KWD"),
        "BHD": CurrencyInfo("BHD", 3, "Bahraini Dinar", "BHD"),
        "OMR": CurrencyInfo("OMR", 3, "Omani Rial", "OMR"),
    }

    @classmethod
    def is_valid(cls, code: str) -> bool:
        """True iff the code is a registered currency."""
        return code in cls._CURRENCIES

    @classmethod
    def get_info(cls, code: str) -> CurrencyInfo | None:
        return cls._CURRENCIES.get(code)

    @classmethod
    def get_decimal_places(cls, code: str) -> int:
        """ISO 4217 minor units for the currency (2 if unknown)."""
        info = cls._CURRENCIES.get(code)
        return info.decimal_places if info else 2

    @classmethod
    def get_symbol(cls, code: str) -> str:
        """Display symbol for the currency, or the code itself."""
        info = cls._CURRENCIES.get(code)
        return info.symbol if info else code

    @classmethod
    def all_codes(cls) -> frozenset[str]:
        return frozenset(cls._CURRENCIES)
