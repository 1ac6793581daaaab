"""
Unit tests for the Money and Currency value objects.

Verifies:
- Exact Decimal arithmetic
- Currency mismatch refusal
- Rounding to the currency's minor units
- Float constructor prohibition
"""

from decimal import ROUND_DOWN, Decimal

import pytest

from books_kernel.db.types import round_money
from books_kernel.domain.values import Currency, Money, to_decimal
from books_kernel.exceptions import InvalidCurrencyError


class TestCurrency:
    """Tests for the Currency value object."""

    def test_code_normalized(self):
        assert Currency(" usd ").code == "USD"

    def test_unknown_code_rejected(self):
        with pytest.raises(InvalidCurrencyError):
            Currency("XXX")

    def test_decimal_places(self):
        assert Currency("USD").decimal_places == 2
        assert Currency("JPY").decimal_places == 0
        assert Currency("KWD").decimal_places == 3

    def test_str_is_code(self):
        assert str(Currency("EUR")) == "EUR"


class TestMoneyConstruction:
    """Tests for building Money values."""

    def test_of_string(self):
        money = Money.of("40.00", "USD")
        assert money.amount == Decimal("40.00")
        assert money.currency == Currency("USD")

    def test_float_rejected(self):
        with pytest.raises(ValueError):
            Money.of(0.1, "USD")

    def test_garbage_rejected(self):
        with pytest.raises(ValueError):
            to_decimal("forty")

    def test_zero(self):
        assert Money.zero("USD").is_zero

    def test_currency_type_checked(self):
        with pytest.raises(TypeError):
            Money(Decimal("1"), 840)


class TestMoneyArithmetic:
    """Tests for exact, currency-safe arithmetic."""

    def test_addition_is_exact(self):
        total = Money.of("0.1", "USD") + Money.of("0.2", "USD")
        assert total.amount == Decimal("0.3")

    def test_subtraction_can_go_negative(self):
        result = Money.of("40", "USD") - Money.of("70", "USD")
        assert result.amount == Decimal("-30")
        assert result.is_negative

    def test_mixed_currency_addition_rejected(self):
        with pytest.raises(ValueError, match="different currencies"):
            Money.of("1", "USD") + Money.of("1", "EUR")

    def test_mixed_currency_comparison_rejected(self):
        with pytest.raises(ValueError):
            _ = Money.of("1", "USD") < Money.of("1", "EUR")

    def test_negation_and_abs(self):
        money = Money.of("12.50", "USD")
        assert (-money).amount == Decimal("-12.50")
        assert abs(-money) == money

    def test_multiplication_by_decimal(self):
        assert (Money.of("10", "USD") * "1.5").amount == Decimal("15.0")
        assert (3 * Money.of("10", "USD")).amount == Decimal("30")

    def test_total_of_empty_iterable_is_zero(self):
        assert Money.total([], "USD") == Money.zero("USD")

    def test_total(self):
        amounts = [Money.of("100", "USD"), Money.of("-40", "USD"), Money.of("5.5", "USD")]
        assert Money.total(amounts, "USD").amount == Decimal("65.5")

    def test_ordering(self):
        assert Money.of("40", "USD") < Money.of("60", "USD")
        assert Money.of("60", "USD") >= Money.of("60.00", "USD")


class TestRounding:
    """Rounding is explicit and uses the currency's minor units."""

    def test_round_half_up(self):
        assert Money.of("10.555", "USD").round().amount == Decimal("10.56")

    def test_round_zero_decimal_currency(self):
        assert Money.of("1234.5", "JPY").round().amount == Decimal("1235")

    def test_round_three_decimal_currency(self):
        assert Money.of("1.2345", "KWD").round().amount == Decimal("1.235")

    def test_explicit_rounding_mode(self):
        assert Money.of("10.559", "USD").round(ROUND_DOWN).amount == Decimal("10.55")

    def test_round_money_helper(self):
        assert round_money(Decimal("2.675"), 2) == Decimal("2.68")

    def test_no_automatic_rounding(self):
        money = Money.of("0.001", "USD") + Money.of("0.001", "USD")
        assert money.amount == Decimal("0.002")
