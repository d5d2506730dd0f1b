from decimal import Decimal

import pytest

from pricer.engine.money import format_currency, format_percentage, negate, quantize_money, to_decimal
from pricer.engine.parsing import is_ordered, parse_decimal, parse_quantity


@pytest.mark.parametrize("text,expected", [
    ("3", 3),
    (" 12 ", 12),
    ("0", 0),
    ("-2", -2),
    ("", None),
    ("   ", None),
    (None, None),
    ("2.5", None),
    ("abc", None),
    (7, 7),
])
def test_parse_quantity(text, expected):
    assert parse_quantity(text) == expected


def test_parse_quantity_rejects_bool():
    assert parse_quantity(True) is None


def test_is_ordered_only_for_positive_quantities():
    assert is_ordered("1")
    assert not is_ordered("0")
    assert not is_ordered("")
    assert not is_ordered("-1")


@pytest.mark.parametrize("text,expected", [
    ("8", Decimal("8")),
    ("12.5", Decimal("12.5")),
    (" 0.075 ", Decimal("0.075")),
    (20, Decimal("20")),
    (0.1, Decimal("0.1")),
    ("", None),
    ("ten", None),
    ("NaN", None),
    ("Infinity", None),
    (None, None),
])
def test_parse_decimal(text, expected):
    assert parse_decimal(text) == expected


def test_to_decimal_avoids_float_noise():
    assert to_decimal(0.1) == Decimal("0.1")
    assert to_decimal(3) == Decimal(3)
    assert to_decimal(" 4.20 ") == Decimal("4.20")


def test_to_decimal_rejects_bool():
    with pytest.raises(TypeError):
        to_decimal(True)


def test_quantize_money_rounds_half_up():
    assert quantize_money(Decimal("0.125")) == Decimal("0.13")
    assert quantize_money(Decimal("0.3225")) == Decimal("0.32")
    assert quantize_money(Decimal("-0.125")) == Decimal("-0.13")


def test_format_currency():
    assert format_currency(Decimal("1234.5")) == "$1,234.50"
    assert format_currency(Decimal("-50")) == "-$50.00"
    assert format_currency(Decimal("0")) == "$0.00"
    assert format_currency(Decimal("9.999"), symbol="€") == "€10.00"


def test_format_percentage():
    assert format_percentage(Decimal("12.5")) == "12.50%"
    assert format_percentage(8) == "8.00%"


@pytest.mark.parametrize("text,expected", [
    ("1_0", None),
    ("+5", 5),
    ("٣", None),
    ("1 0", None),
    ("0x10", None),
])
def test_parse_quantity_accepts_plain_ascii_integers_only(text, expected):
    assert parse_quantity(text) == expected


@pytest.mark.parametrize("text,expected", [
    ("1_000.5", None),
    ("٣.٥", None),
    ("+2.5", Decimal("2.5")),
    (".5", Decimal("0.5")),
    ("1e2", Decimal("100")),
    ("5.", Decimal("5")),
])
def test_parse_decimal_accepts_plain_ascii_numbers_only(text, expected):
    assert parse_decimal(text) == expected


def test_negate_never_gives_negative_zero():
    assert str(negate(Decimal("0.00"))) == "0.00"
    assert negate(Decimal("45.00")) == Decimal("-45.00")
    assert negate(Decimal("-3")) == Decimal("3")
