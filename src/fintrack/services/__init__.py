"""Service module exports."""

from . import (
    accounts,
    auth,
    categories,
    export_csv,
    ledger_service,
    profiles,
    reconcile,
    summary,
)

__all__ = [
    "accounts",
    "auth",
    "categories",
    "export_csv",
    "ledger_service",
    "profiles",
    "reconcile",
    "summary",
]
