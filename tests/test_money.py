"""Amount parsing and the signed-contribution rule."""

from __future__ import annotations

from decimal import Decimal

import pytest

from fintrack.domain.money import (
    MAX_AMOUNT,
    TransactionType,
    parse_amount,
    parse_type,
    signed_amount,
    to_decimal,
)
from fintrack.errors import ValidationError


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("10", Decimal("10.00")),
        ("1,234.5", Decimal("1234.50")),
        (" 0.005 ", Decimal("0.01")),
        (0.1, Decimal("0.10")),
        (7, Decimal("7.00")),
        (Decimal("2.675"), Decimal("2.68")),
        ("-0.001", Decimal("0.00")),
    ],
)
def test_parse_amount_quantizes(raw, expected):
    assert parse_amount(raw) == expected


@pytest.mark.parametrize("raw", [None, True, "", "   ", "abc", "NaN", "Infinity", "-1", "10000000000000"])
def test_parse_amount_rejects(raw):
    with pytest.raises(ValidationError) as excinfo:
        parse_amount(raw)
    assert excinfo.value.field == "amount"


def test_parse_amount_bounds():
    assert parse_amount(str(MAX_AMOUNT)) == MAX_AMOUNT
    assert parse_amount("-12.5", allow_negative=True, field="initial_balance") == Decimal("-12.50")
    with pytest.raises(ValidationError):
        parse_amount("9999999999999.995")


def test_negative_zero_is_folded():
    value = parse_amount("-0.00", allow_negative=True)
    assert str(value) == "0.00"


def test_parse_type_is_case_insensitive():
    assert parse_type(" Income ") is TransactionType.INCOME
    assert parse_type(TransactionType.EXPENSE) is TransactionType.EXPENSE
    assert str(TransactionType.INCOME) == "income"


@pytest.mark.parametrize("raw", ["transfer", "", None, 1])
def test_parse_type_rejects(raw):
    with pytest.raises(ValidationError) as excinfo:
        parse_type(raw)
    assert excinfo.value.field == "type"


def test_signed_amount():
    assert signed_amount("income", Decimal("5.00")) == Decimal("5.00")
    assert signed_amount(TransactionType.EXPENSE, Decimal("5.00")) == Decimal("-5.00")


def test_to_decimal():
    assert to_decimal(None) == Decimal("0.00")
    assert to_decimal(150.0) == Decimal("150.00")
    assert to_decimal(Decimal("1.005")) == Decimal("1.01")
