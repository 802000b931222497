"""
Test suite for currency module

Tests Value arithmetic, rendering in the currency display pattern and the
strict parser that inverts it. All amounts are integer minor units.
"""

import pytest
from decimal import Decimal

from trdb.currency import (
    Currency, Value, parse_value, value_from_decimal,
    get_default_currency, set_default_currency
)
from trdb.exceptions import ParseError


class TestValue:
    """Test Value class operations"""

    def test_value_creation(self):
        """Test Value holds an integer count of minor units"""
        value = Value(1250)
        assert value.units == 1250
        assert int(value) == 1250
        assert Value() == Value.zero()
        assert Value.zero().is_zero()

    def test_value_rejects_non_integers(self):
        """Test that floats and strings are not accepted as minor units"""
        with pytest.raises(TypeError):
            Value(12.5)
        with pytest.raises(TypeError):
            Value("1250")
        with pytest.raises(TypeError):
            Value(True)

    def test_value_arithmetic(self):
        """Test exact integer arithmetic"""
        assert Value(500).add(Value(-200)) == Value(300)
        assert Value(500) + Value(250) == Value(750)
        assert Value(500) - Value(750) == Value(-250)
        assert -Value(100) == Value(-100)
        assert abs(Value(-100)) == Value(100)

    def test_value_comparison(self):
        """Test strict integer ordering"""
        assert Value(100).smaller(Value(200))
        assert not Value(200).smaller(Value(200))
        assert Value(300).larger(Value(200))
        assert not Value(200).larger(Value(200))
        assert Value(-1) < Value(0) <= Value(0) < Value(1)

    def test_value_state_checks(self):
        """Test Value state checking methods"""
        assert Value(0).is_zero()
        assert not Value(1).is_zero()
        assert Value(-1).is_negative()
        assert not Value(0).is_negative()

    def test_value_is_not_an_index(self):
        """Test a Value converts with int() but cannot address positions"""
        assert int(Value(1)) == 1
        with pytest.raises(TypeError):
            ["first", "second"][Value(1)]


class TestRendering:
    """Test Value rendering in the display pattern"""

    def test_euro_rendering(self):
        """Test the default euro pattern"""
        assert str(Value(1250)) == "12.50€"
        assert str(Value(5)) == "0.05€"
        assert str(Value(0)) == "0.00€"
        assert str(Value(250000)) == "2500.00€"

    def test_negative_rendering_has_single_sign(self):
        """Test that the minor part is never rendered with its own sign"""
        assert str(Value(-150)) == "-1.50€"
        assert str(Value(-50)) == "-0.50€"
        assert "--" not in str(Value(-12345))

    def test_rendering_in_other_currencies(self):
        """Test explicit currencies"""
        assert Value(1234).to_string(Currency.USD) == "$12.34"
        assert Value(-1234).to_string(Currency.GBP) == "-£12.34"
        assert Value(1234).to_string(Currency.JPY) == "¥1234"
        assert Value(99).to_string(Currency.CHF) == "CHF 0.99"

    def test_rendering_follows_default_currency(self):
        """Test that the ambient default currency is used"""
        set_default_currency(Currency.USD)
        assert get_default_currency() is Currency.USD
        assert str(Value(100)) == "$1.00"


class TestParsing:
    """Test parsing rendered text back into Values"""

    @pytest.mark.parametrize("units", [0, 1, 5, 99, 100, 1250, -1, -50, -150, 123456789])
    def test_round_trip(self, units):
        """Test parse_value inverts rendering"""
        assert parse_value(str(Value(units))) == Value(units)

    @pytest.mark.parametrize("currency", list(Currency))
    def test_round_trip_in_every_currency(self, currency):
        """Test every preset parses what it renders"""
        for units in (0, 7, -7, 4242, -100000):
            assert currency.parse(currency.render(Value(units))) == Value(units)

    def test_whitespace_is_ignored(self):
        """Test surrounding whitespace such as a trailing newline"""
        assert parse_value("  12.50€\n") == Value(1250)

    @pytest.mark.parametrize("text", ["", "abc", "12.50", "12.5€", "12.500€", "€12.50", "1,250.00€", "--1.00€"])
    def test_malformed_text_raises(self, text):
        """Test that out-of-pattern text fails instead of yielding zero"""
        with pytest.raises(ParseError):
            parse_value(text)

    def test_non_string_raises(self):
        """Test that only text is parsed"""
        with pytest.raises(ParseError):
            parse_value(1250)

    def test_parse_in_explicit_currency(self):
        """Test parsing with an explicit currency"""
        assert parse_value("$3.07", Currency.USD) == Value(307)
        assert parse_value("¥500", Currency.JPY) == Value(500)
        with pytest.raises(ParseError):
            parse_value("3.07€", Currency.USD)


class TestDecimalConversion:
    """Test conversion from major-unit decimals"""

    def test_value_from_decimal(self):
        """Test scaling by the currency ratio"""
        assert value_from_decimal(Decimal("12.50")) == Value(1250)
        assert value_from_decimal(Decimal("-0.05")) == Value(-5)
        assert value_from_decimal(Decimal("300"), Currency.JPY) == Value(300)

    def test_excess_precision_raises(self):
        """Test that fractions of a minor unit are rejected"""
        with pytest.raises(ParseError, match="decimal places"):
            value_from_decimal(Decimal("12.505"))
        with pytest.raises(ParseError):
            value_from_decimal(Decimal("1.5"), Currency.JPY)

    def test_non_finite_raises(self):
        """Test NaN and infinity"""
        with pytest.raises(ParseError):
            value_from_decimal(Decimal("NaN"))
        with pytest.raises(ParseError):
            value_from_decimal(Decimal("Infinity"))
