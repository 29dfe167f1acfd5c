"""Fixed-point money parsing and the signed-contribution rule."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Union

from ..errors import ValidationError

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
# NUMERIC(15, 2): thirteen integer digits
MAX_AMOUNT = Decimal("9999999999999.99")

AmountInput = Union[Decimal, int, float, str]


class TransactionType(str, Enum):
    """Closed set of transaction kinds; also used to tag categories."""

    INCOME = "income"
    EXPENSE = "expense"

    def __str__(self) -> str:
        return self.value


def parse_type(value: object) -> TransactionType:
    """Return the ``TransactionType`` for ``value`` or raise ``ValidationError``."""

    if isinstance(value, TransactionType):
        return value
    if not isinstance(value, str):
        raise ValidationError(f"Invalid transaction type: {value!r}", field="type")
    try:
        return TransactionType(value.strip().lower())
    except ValueError:
        raise ValidationError(f"Invalid transaction type: {value!r}", field="type") from None


def parse_amount(value: object, *, allow_negative: bool = False, field: str = "amount") -> Decimal:
    """Parse user input into a two-digit ``Decimal``.

    Floats go through ``str()`` so ``0.1`` becomes ``Decimal("0.10")`` rather than
    its binary expansion. Rounding matches ``NUMERIC(15, 2)`` (half away from zero).
    """

    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field} is required", field=field)
    if isinstance(value, float):
        value = str(value)
    if isinstance(value, str):
        value = value.strip().replace(",", "")
        if not value:
            raise ValidationError(f"{field} is required", field=field)
    try:
        amount = Decimal(value)  # type: ignore[arg-type]
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"{field} is not a valid number: {value!r}", field=field) from None
    if not amount.is_finite():
        raise ValidationError(f"{field} must be finite", field=field)
    if abs(amount) > MAX_AMOUNT + CENT:
        raise ValidationError(f"{field} exceeds the supported range", field=field)

    # adding ZERO folds "-0.00" into "0.00"
    amount = amount.quantize(CENT, rounding=ROUND_HALF_UP) + ZERO
    if amount < 0 and not allow_negative:
        raise ValidationError(f"{field} must not be negative", field=field)
    if abs(amount) > MAX_AMOUNT:
        raise ValidationError(f"{field} exceeds the supported range", field=field)
    return amount


def signed_amount(txn_type: Union[TransactionType, str], amount: Decimal) -> Decimal:
    """Return the balance contribution: ``+amount`` for income, ``-amount`` for expense."""

    kind = parse_type(txn_type)
    if kind is TransactionType.INCOME:
        return amount
    return -amount


def to_decimal(value: object) -> Decimal:
    """Coerce a stored numeric column value to a quantized ``Decimal``."""

    if value is None:
        return ZERO
    if isinstance(value, float):
        value = str(value)
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)  # type: ignore[arg-type]
