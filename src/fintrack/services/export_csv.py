"""CSV export helpers."""

from __future__ import annotations

import csv
from datetime import date, datetime
from pathlib import Path
from typing import Iterable

from ..domain.money import signed_amount, to_decimal
from ..models.transaction import Transaction

HEADERS = [
    "id",
    "occurred_on",
    "txn_type",
    "amount",
    "signed_amount",
    "account_id",
    "category_id",
    "description",
]


def _serialize_value(value):
    if value is None:
        return ""
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def export_transactions_csv(*, transactions: Iterable[Transaction], output_path: Path) -> Path:
    """Write transactions to CSV at `output_path`.

    Columns are deterministic (see ``HEADERS``). Returns the path written.
    """

    output_path.parent.mkdir(parents=True, exist_ok=True)

    # Use newline='' for csv on Windows
    with output_path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(
            fh, fieldnames=HEADERS, extrasaction="ignore", quoting=csv.QUOTE_MINIMAL
        )
        writer.writeheader()
        for tx in transactions:
            amount = to_decimal(tx.amount)
            writer.writerow(
                {
                    "id": _serialize_value(tx.id),
                    "occurred_on": _serialize_value(tx.occurred_on),
                    "txn_type": tx.txn_type,
                    "amount": _serialize_value(amount),
                    "signed_amount": _serialize_value(signed_amount(tx.txn_type, amount)),
                    "account_id": _serialize_value(tx.account_id),
                    "category_id": _serialize_value(tx.category_id),
                    "description": _serialize_value(tx.description),
                }
            )

    return output_path
