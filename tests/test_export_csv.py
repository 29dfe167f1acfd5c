from __future__ import annotations

import csv
from datetime import date

from fintrack.services.export_csv import HEADERS, export_transactions_csv


def test_export_transactions_csv(tmp_path, account_factory, category_factory, transaction_factory, transaction_repo, user):
    acct = account_factory()
    food = category_factory(name="Food")
    transaction_factory(acct, txn_type="expense", amount="12.5", category=food, description="Lunch, with tip", occurred_on=date(2024, 3, 1))
    transaction_factory(acct, txn_type="income", amount="100", occurred_on=date(2024, 3, 2))

    out = export_transactions_csv(
        transactions=transaction_repo.search(user_id=user.id),
        output_path=tmp_path / "nested" / "ledger.csv",
    )

    with out.open(newline="", encoding="utf-8") as fh:
        rows = list(csv.DictReader(fh))
    assert list(rows[0].keys()) == HEADERS
    assert [r["occurred_on"] for r in rows] == ["2024-03-02", "2024-03-01"]
    assert rows[0]["signed_amount"] == "100.00"
    assert rows[0]["category_id"] == ""
    assert rows[1]["signed_amount"] == "-12.50"
    assert rows[1]["description"] == "Lunch, with tip"
    assert rows[1]["category_id"] == str(food.id)


def test_export_empty(tmp_path):
    out = export_transactions_csv(transactions=[], output_path=tmp_path / "empty.csv")
    assert out.read_text(encoding="utf-8").strip() == ",".join(HEADERS)
