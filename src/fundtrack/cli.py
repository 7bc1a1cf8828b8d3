"""Command-line interface for FundTrack."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import click

from .config import BaseConfig
from .errors import FundTrackError
from .infra.database import bootstrap_database
from .infra.repositories import SQLModelAccountRepository, SQLModelPositionRepository
from .logging_config import setup_logging
from .services import accounts as account_service
from .services import positions as position_service
from .services.entry import EntryForm, apply_edit
from .services.formatting import format_currency, format_pct, format_signed_currency
from .services.history import TimeRange, build_history_table, rows_in_range, visible_history
from .services.market_data import (
    RefreshCoordinator,
    parse_common_data,
    parse_fund_search,
    parse_growth_data,
    parse_holdings,
    parse_market_indices,
    parse_performance,
    parse_stock_quotes,
    stock_quote_query,
)
from .services.summary import calculate_summary


@dataclass
class CliContext:
    config: BaseConfig
    account_repo: SQLModelAccountRepository
    position_repo: SQLModelPositionRepository


def _build_context() -> CliContext:
    config = BaseConfig()
    setup_logging(config)
    _, session_factory = bootstrap_database(config)
    ctx = CliContext(
        config=config,
        account_repo=SQLModelAccountRepository(session_factory),
        position_repo=SQLModelPositionRepository(session_factory),
    )
    account_service.seed_default_accounts(ctx.account_repo, config.DEFAULT_ACCOUNTS)
    return ctx


pass_ctx = click.make_pass_decorator(CliContext)

_refresher = RefreshCoordinator()


def _load_json(path: Path):
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise click.ClickException(f"{path.name} is not valid JSON: {exc}") from exc


class FundTrackGroup(click.Group):
    """Turns validation failures into clean CLI errors instead of tracebacks."""

    def invoke(self, ctx: click.Context):
        try:
            return super().invoke(ctx)
        except FundTrackError as exc:
            raise click.ClickException(str(exc)) from exc


@click.group(cls=FundTrackGroup)
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Track fund positions, valuations and NAV history."""

    if ctx.obj is None:
        ctx.obj = _build_context()


@cli.command("init")
@pass_ctx
def init_command(ctx: CliContext) -> None:
    """Create the database and seed default accounts."""

    click.echo(f"Database ready at {ctx.config.DATABASE_URL}")
    click.echo(f"Accounts: {', '.join(a.name for a in ctx.account_repo.list_all())}")


@cli.group("accounts")
def accounts_group() -> None:
    """Manage accounts (platforms)."""


@accounts_group.command("list")
@pass_ctx
def accounts_list(ctx: CliContext) -> None:
    for account in ctx.account_repo.list_all():
        marker = " (default)" if account.is_default else ""
        click.echo(f"{account.id}\t{account.name}{marker}")


@accounts_group.command("add")
@click.argument("name")
@pass_ctx
def accounts_add(ctx: CliContext, name: str) -> None:
    account = account_service.add_account(ctx.account_repo, name)
    click.echo(f"Added account {account.name}")


@accounts_group.command("rename")
@click.argument("account_id", type=int)
@click.argument("new_name")
@pass_ctx
def accounts_rename(ctx: CliContext, account_id: int, new_name: str) -> None:
    moved = account_service.rename_account(ctx.account_repo, account_id, new_name)
    click.echo(f"Renamed account; {moved} position(s) moved")


@accounts_group.command("delete")
@click.argument("account_id", type=int)
@pass_ctx
def accounts_delete(ctx: CliContext, account_id: int) -> None:
    account_service.delete_account(ctx.account_repo, account_id)
    click.echo("Account deleted")


@cli.group("positions")
def positions_group() -> None:
    """Manage fund positions."""


@positions_group.command("list")
@click.option("--platform", default=None, help="Only show one account")
@pass_ctx
def positions_list(ctx: CliContext, platform: Optional[str]) -> None:
    rows = position_service.filter_by_platform(ctx.position_repo.list_all(), platform)
    for p in rows:
        click.echo(
            f"{p.id}\t{p.code}\t{p.platform}\t{format_currency(p.market_value)}\t"
            f"{format_pct(p.day_change_pct)}\t{format_signed_currency(p.market_value - p.cost_value)}"
        )


@positions_group.command("add")
@click.argument("code")
@click.option("--nav", type=float, required=True, help="Current NAV")
@click.option("--amount", required=True, help="Holding amount (market value)")
@click.option("--gain", default=None, help="Total gain; omitted means bought at today's NAV")
@click.option("--platform", default="Default", show_default=True)
@click.option("--name", default="", help="Fund display name")
@click.option("--day-change-pct", type=float, default=0.0, show_default=True)
@pass_ctx
def positions_add(
    ctx: CliContext,
    code: str,
    nav: float,
    amount: str,
    gain: Optional[str],
    platform: str,
    name: str,
    day_change_pct: float,
) -> None:
    form = EntryForm.for_new_position(nav).on_amount_change(amount)
    if gain is not None:
        form = form.on_gain_change(gain)
    position = position_service.save_entry(
        ctx.position_repo,
        form,
        accounts=ctx.account_repo,
        code=code,
        name=name,
        platform=platform,
        day_change_pct=day_change_pct,
    )
    click.echo(
        f"Saved {position.code}: {position.holding_shares:.2f} shares @ {position.cost_price:.4f}"
    )


@positions_group.command("edit")
@click.argument("position_id", type=int)
@click.option("--amount", default=None, help="New holding amount")
@click.option("--shares", default=None, help="New share count")
@click.option("--cost", "unit_cost", default=None, help="New unit cost")
@click.option("--gain", default=None, help="New total gain")
@click.option("--platform", default=None, help="Move to another account")
@pass_ctx
def positions_edit(
    ctx: CliContext,
    position_id: int,
    amount: Optional[str],
    shares: Optional[str],
    unit_cost: Optional[str],
    gain: Optional[str],
    platform: Optional[str],
) -> None:
    """Edit a stored position.

    Given fields are applied in the order amount, shares, cost, gain, each
    one re-deriving the others as in the entry form.
    """

    position = ctx.position_repo.get_by_id(position_id)
    if position is None:
        raise click.ClickException(f"Position {position_id} not found")

    form = EntryForm.from_position(position)
    edits = (
        ("amount", "--amount", amount),
        ("shares", "--shares", shares),
        ("unit_cost", "--cost", unit_cost),
        ("gain", "--gain", gain),
    )
    for field, option, raw in edits:
        if raw is None:
            continue
        form = apply_edit(form, field, raw)
        if not getattr(form, field).valid:
            raise click.BadParameter(f"{raw!r} is not a number", param_hint=option)

    saved = position_service.save_entry(
        ctx.position_repo,
        form,
        accounts=ctx.account_repo,
        code=position.code,
        platform=platform or position.platform,
        position_id=position_id,
    )
    click.echo(f"Saved {saved.code}: {saved.holding_shares:.2f} shares @ {saved.cost_price:.4f}")


@positions_group.command("refresh")
@click.argument("payload_dir", type=click.Path(exists=True, file_okay=False, path_type=Path))
@pass_ctx
def positions_refresh(ctx: CliContext, payload_dir: Path) -> None:
    """Update NAVs from saved common-data payloads named ``<code>.json``."""

    def fetch_quote(code: str):
        path = payload_dir / f"{code}.json"
        if not path.is_file():
            return None
        return parse_common_data(json.loads(path.read_text(encoding="utf-8")))

    updated = _refresher.refresh_all(ctx.position_repo, fetch_quote)
    if updated is None:
        click.echo("A refresh is already running")
        return
    click.echo(f"Refreshed {updated} position(s)")


@positions_group.command("delete")
@click.argument("position_id", type=int)
@pass_ctx
def positions_delete(ctx: CliContext, position_id: int) -> None:
    position_service.delete_position(ctx.position_repo, position_id)
    click.echo("Position deleted")


@cli.command("summary")
@click.option("--platform", default=None, help="Only summarise one account")
@pass_ctx
def summary_command(ctx: CliContext, platform: Optional[str]) -> None:
    positions = position_service.filter_by_platform(ctx.position_repo.list_all(), platform)
    summary = calculate_summary(positions)
    click.echo(f"Total assets:  {format_currency(summary.total_assets)}")
    click.echo(
        f"Day gain:      {format_signed_currency(summary.total_day_gain)} "
        f"({format_pct(summary.total_day_gain_pct)})"
    )
    click.echo(
        f"Holding gain:  {format_signed_currency(summary.holding_gain)} "
        f"({format_pct(summary.holding_gain_pct)})"
    )


@cli.command("history")
@click.argument("payload_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--nav", type=float, required=True, help="Authoritative NAV on the last date")
@click.option(
    "--range",
    "time_range",
    type=click.Choice([r.value for r in TimeRange]),
    default=None,
    help="Only rows inside this window, ending at the newest row",
)
@click.option("--all", "show_all", is_flag=True, default=False, help="Show every row")
@pass_ctx
def history_command(
    ctx: CliContext, payload_file: Path, nav: float, time_range: Optional[str], show_all: bool
) -> None:
    """Rebuild a NAV table from a saved growth-data JSON payload."""

    rows = build_history_table(parse_growth_data(_load_json(payload_file)), nav)
    if time_range:
        rows = rows_in_range(rows, time_range)
    if not rows:
        click.echo("No history available")
        return
    for row in visible_history(rows, show_all=show_all, preview_rows=ctx.config.HISTORY_PREVIEW_ROWS):
        click.echo(f"{row.date}\t{format_currency(row.nav, 4)}\t{format_pct(row.change_pct)}")


@cli.group("market")
def market_group() -> None:
    """Inspect saved vendor payloads."""


_payload_file = click.argument("payload_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))


@market_group.command("search")
@_payload_file
def market_search(payload_file: Path) -> None:
    results = parse_fund_search(_load_json(payload_file))
    if not results:
        click.echo("No funds found")
        return
    for fund in results:
        click.echo(f"{fund.code}\t{fund.name}\t{fund.fund_type}")


@market_group.command("holdings")
@_payload_file
@click.option(
    "--quotes",
    "quotes_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Saved stock-quote response text",
)
def market_holdings(payload_file: Path, quotes_file: Optional[Path]) -> None:
    """List top equity holdings, with live prices when a quote file is given."""

    holdings = parse_holdings(_load_json(payload_file))
    if not holdings.equity:
        click.echo("No holdings disclosed")
        return
    if holdings.portfolio_date:
        click.echo(f"As of {holdings.portfolio_date}")

    quotes = parse_stock_quotes(quotes_file.read_text(encoding="utf-8")) if quotes_file else {}
    for holding in holdings.equity:
        line = f"{holding.ticker}\t{holding.name}\t{holding.weight:.2f}%"
        quote = quotes.get(holding.ticker)
        if quote is not None and quote.price is not None:
            line += f"\t{quote.price:.2f}\t{format_pct(quote.change_pct or 0.0)}"
        click.echo(line)

    if quotes_file is None:
        query = stock_quote_query(h.ticker for h in holdings.equity)
        if query:
            click.echo(f"Quote query: {query}")


_TRAILING_RETURNS = (("YTD", "YTD"), ("Y1", "1 year"), ("Y3", "3 years"), ("sinceInception", "Since inception"))


@market_group.command("performance")
@_payload_file
def market_performance(payload_file: Path) -> None:
    """Show the NAV snapshot, trailing returns and calendar-year returns."""

    performance = parse_performance(_load_json(payload_file))
    if performance.nav is not None:
        click.echo(
            f"NAV {format_currency(performance.nav, 4)} on {performance.end_date or '--'} "
            f"({format_pct(performance.change_pct or 0.0)})"
        )
    for key, label in _TRAILING_RETURNS:
        value = performance.trailing.get(key)
        click.echo(f"{label}:\t{format_pct(value) if value else '--'}")
    for period in reversed(performance.annual):
        value = period.return_pct
        click.echo(f"{period.period}:\t{format_pct(value) if value is not None else '--'}")


@market_group.command("indices")
@_payload_file
def market_indices(payload_file: Path) -> None:
    indices = parse_market_indices(_load_json(payload_file))
    if not indices:
        click.echo("No index data")
        return
    for index in indices:
        click.echo(
            f"{index.name}\t{index.value:.2f}\t{index.change:+.2f}\t{format_pct(index.change_pct)}"
        )


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
