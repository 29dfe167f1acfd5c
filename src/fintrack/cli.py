"""Command line interface for FinTrack."""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path
from typing import Optional

import click

from .config import BaseConfig
from .context import AppContext, create_app_context
from .errors import FinTrackError
from .logging_config import setup_logging
from .services import accounts, auth, categories, ledger_service, reconcile, summary
from .services.export_csv import export_transactions_csv

TYPE_CHOICE = click.Choice(["income", "expense"], case_sensitive=False)


def _money(amount: Decimal, currency: str = "") -> str:
    text = f"{amount:,.2f}"
    return f"{text} {currency}".rstrip()


def _app(ctx: click.Context) -> AppContext:
    app: AppContext = ctx.obj["app"]
    return app


def _user_id(ctx: click.Context) -> int:
    """Sign in with the group's --user/--password and return the user id."""

    app = _app(ctx)
    if app.current_user is None:
        username = ctx.obj.get("username")
        password = ctx.obj.get("password")
        if not username:
            raise click.UsageError("--user (or FINTRACK_USER) is required for this command")
        if password is None:
            password = click.prompt("Password", hide_input=True)
        try:
            app.sign_in(username, password)
        except FinTrackError as exc:
            raise click.ClickException(str(exc)) from exc
    return app.require_user_id()


@click.group()
@click.option("--user", "username", envvar="FINTRACK_USER", help="Username to act as.")
@click.option("--password", envvar="FINTRACK_PASSWORD", help="Password for --user.")
@click.pass_context
def cli(ctx: click.Context, username: Optional[str], password: Optional[str]) -> None:
    """Track accounts, categories and income/expense transactions."""

    ctx.ensure_object(dict)
    if "app" not in ctx.obj:
        config = ctx.obj.get("config") or BaseConfig()
        setup_logging(config)
        ctx.obj["app"] = create_app_context(config)
        ctx.obj["owns_app"] = True
    ctx.obj["username"] = username
    ctx.obj["password"] = password


@cli.result_callback()
@click.pass_context
def _close(ctx: click.Context, *_args, **_kwargs) -> None:
    app: Optional[AppContext] = ctx.obj.get("app")
    if app is not None and ctx.obj.get("owns_app"):
        app.engine.dispose()


@cli.command("init-db")
@click.pass_context
def init_db(ctx: click.Context) -> None:
    """Create the database schema (idempotent)."""

    click.echo(f"Database ready: {_app(ctx).config.DATABASE_URL}")


@cli.command()
@click.argument("username")
@click.password_option()
@click.option("--display-name", default=None)
@click.option("--currency", default=None, help="Default currency label for new accounts.")
@click.pass_context
def signup(
    ctx: click.Context,
    username: str,
    password: str,
    display_name: Optional[str],
    currency: Optional[str],
) -> None:
    """Create a user and its profile."""

    app = _app(ctx)
    try:
        user = auth.sign_up(
            username=username,
            password=password,
            display_name=display_name,
            default_currency=currency or app.config.DEFAULT_CURRENCY,
            session_factory=app.session_factory,
        )
    except FinTrackError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Created user {user.username} (id {user.id})")


# -- accounts -----------------------------------------------------------------


@cli.group()
def account() -> None:
    """Manage accounts."""


@account.command("add")
@click.argument("name")
@click.option("--initial-balance", default="0", show_default=True)
@click.option("--currency", default=None)
@click.option("--description", default=None)
@click.pass_context
def account_add(
    ctx: click.Context,
    name: str,
    initial_balance: str,
    currency: Optional[str],
    description: Optional[str],
) -> None:
    """Open an account."""

    uid = _user_id(ctx)
    app = _app(ctx)
    try:
        profile = app.profile_repo.get_by_user(user_id=uid)
        created = accounts.open_account(
            app.account_repo,
            user_id=uid,
            name=name,
            initial_balance=initial_balance,
            currency=currency,
            description=description,
            default_currency=profile.default_currency if profile else app.config.DEFAULT_CURRENCY,
        )
    except FinTrackError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(
        f"Account {created.id}: {created.name} "
        f"balance {_money(created.current_balance, created.currency)}"
    )


@account.command("list")
@click.pass_context
def account_list(ctx: click.Context) -> None:
    """List accounts with their running balances."""

    uid = _user_id(ctx)
    rows = accounts.list_accounts(_app(ctx).account_repo, user_id=uid)
    if not rows:
        click.echo("No accounts.")
        return
    for acct in rows:
        click.echo(f"{acct.id:>4}  {acct.name:<24} {_money(acct.current_balance, acct.currency):>20}")


@account.command("edit")
@click.argument("account_id", type=int)
@click.option("--name", default=None)
@click.option("--description", default=None)
@click.option("--currency", default=None)
@click.option("--initial-balance", default=None)
@click.pass_context
def account_edit(
    ctx: click.Context,
    account_id: int,
    name: Optional[str],
    description: Optional[str],
    currency: Optional[str],
    initial_balance: Optional[str],
) -> None:
    """Edit an account."""

    uid = _user_id(ctx)
    changes = {
        key: value
        for key, value in {
            "name": name,
            "description": description,
            "currency": currency,
            "initial_balance": initial_balance,
        }.items()
        if value is not None
    }
    try:
        updated = accounts.update_account(_app(ctx).account_repo, account_id, user_id=uid, **changes)
    except FinTrackError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(
        f"Account {updated.id}: {updated.name} "
        f"balance {_money(updated.current_balance, updated.currency)}"
    )


@account.command("delete")
@click.argument("account_id", type=int)
@click.confirmation_option(prompt="This also deletes every transaction on the account. Continue?")
@click.pass_context
def account_delete(ctx: click.Context, account_id: int) -> None:
    """Delete an account and its transactions."""

    uid = _user_id(ctx)
    try:
        removed = accounts.close_account(_app(ctx).account_repo, account_id, user_id=uid)
    except FinTrackError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Deleted account {account_id} and {removed} transaction(s)")


# -- categories ---------------------------------------------------------------


@cli.group()
def category() -> None:
    """Manage categories."""


@category.command("add")
@click.argument("name")
@click.option("--type", "category_type", type=TYPE_CHOICE, required=True)
@click.option("--color", default=None, help="#rrggbb")
@click.pass_context
def category_add(ctx: click.Context, name: str, category_type: str, color: Optional[str]) -> None:
    uid = _user_id(ctx)
    try:
        created = categories.create_category(
            _app(ctx).category_repo,
            user_id=uid,
            name=name,
            category_type=category_type,
            color=color,
        )
    except FinTrackError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Category {created.id}: {created.name} ({created.category_type})")


@category.command("list")
@click.option("--type", "category_type", type=TYPE_CHOICE, default=None)
@click.pass_context
def category_list(ctx: click.Context, category_type: Optional[str]) -> None:
    uid = _user_id(ctx)
    rows = categories.list_categories(
        _app(ctx).category_repo, user_id=uid, category_type=category_type
    )
    if not rows:
        click.echo("No categories.")
        return
    for cat in rows:
        click.echo(f"{cat.id:>4}  {cat.name:<24} {cat.category_type:<8} {cat.color}")


@category.command("edit")
@click.argument("category_id", type=int)
@click.option("--name", default=None)
@click.option("--type", "category_type", type=TYPE_CHOICE, default=None)
@click.option("--color", default=None, help="#rrggbb")
@click.pass_context
def category_edit(
    ctx: click.Context,
    category_id: int,
    name: Optional[str],
    category_type: Optional[str],
    color: Optional[str],
) -> None:
    """Rename, recolour or retype a category."""

    uid = _user_id(ctx)
    changes = {
        key: value
        for key, value in {"name": name, "category_type": category_type, "color": color}.items()
        if value is not None
    }
    try:
        updated = categories.update_category(
            _app(ctx).category_repo, category_id, user_id=uid, **changes
        )
    except FinTrackError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Category {updated.id}: {updated.name} ({updated.category_type}) {updated.color}")


@category.command("delete")
@click.argument("category_id", type=int)
@click.pass_context
def category_delete(ctx: click.Context, category_id: int) -> None:
    """Delete a category; its transactions become uncategorized."""

    uid = _user_id(ctx)
    try:
        cleared = categories.delete_category(_app(ctx).category_repo, category_id, user_id=uid)
    except FinTrackError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Deleted category {category_id}; {cleared} transaction(s) uncategorized")


# -- transactions -------------------------------------------------------------


@cli.group()
def txn() -> None:
    """Record and edit transactions."""


@txn.command("add")
@click.option("--account", "account_id", type=int, required=True)
@click.option("--type", "txn_type", type=TYPE_CHOICE, required=True)
@click.option("--amount", required=True)
@click.option("--date", "occurred_on", default=None, help="YYYY-MM-DD, defaults to today.")
@click.option("--category", "category_id", type=int, default=None)
@click.option("--description", default=None)
@click.pass_context
def txn_add(
    ctx: click.Context,
    account_id: int,
    txn_type: str,
    amount: str,
    occurred_on: Optional[str],
    category_id: Optional[int],
    description: Optional[str],
) -> None:
    uid = _user_id(ctx)
    try:
        created = ledger_service.record_transaction(
            _app(ctx).transaction_repo,
            user_id=uid,
            account_id=account_id,
            txn_type=txn_type,
            amount=amount,
            occurred_on=occurred_on,
            category_id=category_id,
            description=description,
        )
    except FinTrackError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Transaction {created.id}: {created.txn_type} {_money(created.amount)}")


@txn.command("edit")
@click.argument("transaction_id", type=int)
@click.option("--account", "account_id", type=int, default=None)
@click.option("--type", "txn_type", type=TYPE_CHOICE, default=None)
@click.option("--amount", default=None)
@click.option("--date", "occurred_on", default=None)
@click.option("--category", "category_id", type=int, default=None)
@click.option("--clear-category", is_flag=True, default=False)
@click.option("--description", default=None)
@click.option("--expected-version", type=int, default=None)
@click.pass_context
def txn_edit(
    ctx: click.Context,
    transaction_id: int,
    account_id: Optional[int],
    txn_type: Optional[str],
    amount: Optional[str],
    occurred_on: Optional[str],
    category_id: Optional[int],
    clear_category: bool,
    description: Optional[str],
    expected_version: Optional[int],
) -> None:
    uid = _user_id(ctx)
    changes: dict[str, object] = {
        key: value
        for key, value in {
            "account_id": account_id,
            "txn_type": txn_type,
            "amount": amount,
            "occurred_on": occurred_on,
            "category_id": category_id,
            "description": description,
        }.items()
        if value is not None
    }
    if clear_category:
        changes["category_id"] = None
    try:
        updated = ledger_service.edit_transaction(
            _app(ctx).transaction_repo,
            transaction_id,
            user_id=uid,
            expected_version=expected_version,
            **changes,  # type: ignore[arg-type]
        )
    except FinTrackError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(
        f"Transaction {updated.id}: {updated.txn_type} {_money(updated.amount)} "
        f"(version {updated.version})"
    )


@txn.command("delete")
@click.argument("transaction_id", type=int)
@click.option("--expected-version", type=int, default=None)
@click.pass_context
def txn_delete(ctx: click.Context, transaction_id: int, expected_version: Optional[int]) -> None:
    uid = _user_id(ctx)
    try:
        ledger_service.delete_transaction(
            _app(ctx).transaction_repo,
            transaction_id,
            user_id=uid,
            expected_version=expected_version,
        )
    except FinTrackError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Deleted transaction {transaction_id}")


@txn.command("list")
@click.option("--account", "account_id", type=int, default=None)
@click.option("--category", "category_id", type=int, default=None)
@click.option("--type", "txn_type", type=click.Choice(["income", "expense", "all"]), default="all")
@click.option("--from", "start_date", type=click.DateTime(formats=["%Y-%m-%d"]), default=None)
@click.option("--to", "end_date", type=click.DateTime(formats=["%Y-%m-%d"]), default=None)
@click.option("--text", default=None)
@click.option("--page", type=int, default=1, show_default=True)
@click.option("--per-page", type=int, default=25, show_default=True)
@click.pass_context
def txn_list(
    ctx: click.Context,
    account_id: Optional[int],
    category_id: Optional[int],
    txn_type: str,
    start_date,
    end_date,
    text: Optional[str],
    page: int,
    per_page: int,
) -> None:
    uid = _user_id(ctx)
    filters = ledger_service.LedgerFilters(
        user_id=uid,
        account_id=account_id,
        category_id=category_id,
        start_date=start_date.date() if start_date else None,
        end_date=end_date.date() if end_date else None,
        text=text,
        txn_type=txn_type,
    )
    rows = ledger_service.filtered_transactions(_app(ctx).transaction_repo, filters)
    page_rows, total = ledger_service.paginate_transactions(
        rows, ledger_service.Pagination(page=page, per_page=per_page)
    )
    if not page_rows:
        click.echo("No transactions.")
        return
    for t in page_rows:
        sign = "+" if t.txn_type == "income" else "-"
        click.echo(
            f"{t.id:>5}  {t.occurred_on.isoformat()}  {sign}{_money(t.amount):>14}  "
            f"acct {t.account_id:<4} {t.description or ''}"
        )
    click.echo(f"{len(page_rows)} of {total}")


# -- reporting / maintenance --------------------------------------------------


@cli.command("summary")
@click.option("--account", "account_id", type=int, default=None)
@click.pass_context
def summary_cmd(ctx: click.Context, account_id: Optional[int]) -> None:
    """Show income, expenses and balance."""

    uid = _user_id(ctx)
    app = _app(ctx)
    try:
        result = summary.compute_summary(
            accounts=app.account_repo,
            transactions=app.transaction_repo,
            user_id=uid,
            account_id=account_id,
        )
    except FinTrackError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Income:   {_money(result.income)}")
    click.echo(f"Expenses: {_money(result.expenses)}")
    click.echo(f"Balance:  {_money(result.balance)}")


@cli.command("reconcile")
@click.option("--repair", is_flag=True, default=False, help="Rewrite drifted balances.")
@click.pass_context
def reconcile_cmd(ctx: click.Context, repair: bool) -> None:
    """Compare cached balances with a full re-sum of transactions."""

    uid = _user_id(ctx)
    app = _app(ctx)
    if repair:
        drifts = reconcile.repair_drift(user_id=uid, session_factory=app.session_factory)
    else:
        drifts = reconcile.find_drift(user_id=uid, session_factory=app.session_factory)
    if not drifts:
        click.echo("All balances consistent.")
        return
    verb = "Repaired" if repair else "Drift"
    for drift in drifts:
        click.echo(
            f"{verb}: account {drift.account_id} ({drift.name}) cached {_money(drift.cached)} "
            f"expected {_money(drift.expected)}"
        )


@cli.command("export")
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--account", "account_id", type=int, default=None)
@click.pass_context
def export_cmd(ctx: click.Context, output: Path, account_id: Optional[int]) -> None:
    """Write transactions to a CSV file."""

    uid = _user_id(ctx)
    rows = _app(ctx).transaction_repo.search(user_id=uid, account_id=account_id)
    path = export_transactions_csv(transactions=rows, output_path=output)
    click.echo(f"Exported {len(rows)} transaction(s) to {path}")


def main() -> None:  # pragma: no cover - console entry point
    cli(obj={})
