"""CLI entry point for the P&L journal."""

from __future__ import annotations

from typing import NoReturn

import click

from .core.config import Settings, load_settings
from .core.enums import MonthStatus, PnlSource, TimeRange, TradeStatus, TradeType
from .core.errors import JournalError
from .journal.forms import (
    MonthForm,
    TradeForm,
    parse_ending_capital,
    parse_month_form,
    parse_trade_form,
)
from .journal.formatting import (
    format_currency,
    format_optional_month,
    format_optional_trade,
    format_percentage,
    format_profit_factor,
    format_streak,
)
from .journal.service import JournalService
from .observability.logger import get_logger, new_run_id, setup_logging

logger = get_logger(__name__)


def _service(ctx: click.Context) -> JournalService:
    return ctx.obj["service"]


def _settings(ctx: click.Context) -> Settings:
    return ctx.obj["settings"]


def _fail(exc: JournalError) -> NoReturn:
    logger.warning("command_failed", error=str(exc), error_type=type(exc).__name__)
    raise click.ClickException(str(exc))


@click.group()
@click.option("--config", default=None, help="Config file path (TOML)")
@click.option("--data-dir", default=None, help="Directory holding months.json / trades.json")
@click.pass_context
def main(ctx: click.Context, config: str | None, data_dir: str | None) -> None:
    """Monthly P&L and trade journal."""
    overrides: dict = {}
    if data_dir:
        overrides["data_dir"] = data_dir
    try:
        settings = load_settings(config_path=config, overrides=overrides)
    except JournalError as exc:
        raise click.ClickException(str(exc)) from exc

    setup_logging(settings.observability.log_level, settings.observability.log_format)
    new_run_id()
    ctx.obj = {"settings": settings, "service": JournalService.from_settings(settings)}


# ---------------------------------------------------------------------------
# Months
# ---------------------------------------------------------------------------

@main.command("add-month")
@click.argument("month")
@click.option("--start", "starting_capital", required=True, help="Starting capital")
@click.option("--end", "ending_capital", required=True, help="Ending capital")
@click.option("--deposits", default="", help="Deposits during the month")
@click.option("--withdrawals", default="", help="Withdrawals during the month")
@click.option("--notes", default="", help="Free-text notes")
@click.option(
    "--status", type=click.Choice([s.value for s in MonthStatus]),
    default=MonthStatus.CLOSED.value,
)
@click.option(
    "--pnl-source", type=click.Choice([s.value for s in PnlSource]),
    default=PnlSource.MANUAL.value, help="Take P&L from capital figures or from trades",
)
@click.pass_context
def add_month(
    ctx: click.Context,
    month: str,
    starting_capital: str,
    ending_capital: str,
    deposits: str,
    withdrawals: str,
    notes: str,
    status: str,
    pnl_source: str,
) -> None:
    """Record a month (MONTH as YYYY-MM)."""
    form = MonthForm(
        month=month,
        starting_capital=starting_capital,
        ending_capital=ending_capital,
        deposits=deposits,
        withdrawals=withdrawals,
        notes=notes,
    )
    try:
        record = _service(ctx).add_month(
            parse_month_form(form), status=status, pnl_source=pnl_source,
        )
    except JournalError as exc:
        _fail(exc)
    symbol = _settings(ctx).display.currency_symbol
    click.echo(
        f"Added {record.month_name} {record.year} [{record.id}]  "
        f"net {format_currency(record.net_profit_loss, show_sign=True, symbol=symbol)}  "
        f"({format_percentage(record.return_percentage, show_sign=True)})"
    )


@main.command("close-month")
@click.argument("month_id")
@click.option("--end", "ending_capital", required=True, help="Final ending capital")
@click.pass_context
def close_month(ctx: click.Context, month_id: str, ending_capital: str) -> None:
    """Close an active month with its final ending capital."""
    try:
        record = _service(ctx).close_month(month_id, parse_ending_capital(ending_capital))
    except JournalError as exc:
        _fail(exc)
    click.echo(f"Closed {record.month} [{record.id}]")


@main.command("delete-month")
@click.argument("month_id")
@click.pass_context
def delete_month(ctx: click.Context, month_id: str) -> None:
    """Delete a month by id."""
    try:
        _service(ctx).delete_month(month_id)
    except JournalError as exc:
        _fail(exc)
    click.echo(f"Deleted month {month_id}")


@main.command("months")
@click.option("--limit", default=None, type=int, help="Show only the N most recent")
@click.pass_context
def list_months(ctx: click.Context, limit: int | None) -> None:
    """List months, newest first."""
    service = _service(ctx)
    symbol = _settings(ctx).display.currency_symbol
    months = service.recent_months(limit or _settings(ctx).display.recent_limit)
    if not months:
        click.echo("No months recorded.")
        return
    for m in months:
        click.echo(
            f"{m.month}  {m.status.value:<6} {m.pnl_source.value:<6} "
            f"{format_currency(m.net_profit_loss, show_sign=True, symbol=symbol):>14} "
            f"{format_percentage(m.return_percentage, show_sign=True):>9}  {m.id}"
        )


# ---------------------------------------------------------------------------
# Trades
# ---------------------------------------------------------------------------

@main.command("add-trade")
@click.argument("symbol")
@click.option("--type", "trade_type", type=click.Choice([t.value for t in TradeType]), default=TradeType.LONG.value)
@click.option("--status", type=click.Choice([s.value for s in TradeStatus]), default=TradeStatus.CLOSED.value)
@click.option("--entry-date", required=True, help="YYYY-MM-DD")
@click.option("--exit-date", default="", help="YYYY-MM-DD (closed trades)")
@click.option("--entry-price", required=True)
@click.option("--exit-price", default="", help="Closed trades only")
@click.option("--qty", "quantity", required=True)
@click.option("--notes", default="")
@click.option("--tags", default="", help="Comma-separated tags")
@click.pass_context
def add_trade(
    ctx: click.Context,
    symbol: str,
    trade_type: str,
    status: str,
    entry_date: str,
    exit_date: str,
    entry_price: str,
    exit_price: str,
    quantity: str,
    notes: str,
    tags: str,
) -> None:
    """Record a trade."""
    form = TradeForm(
        symbol=symbol,
        trade_type=trade_type,
        status=status,
        entry_date=entry_date,
        exit_date=exit_date,
        entry_price=entry_price,
        exit_price=exit_price,
        quantity=quantity,
        notes=notes,
        tags=tags,
    )
    try:
        trade = _service(ctx).add_trade(parse_trade_form(form))
    except JournalError as exc:
        _fail(exc)
    line = f"Added {trade.status} {trade.trade_type.value} {trade.symbol} [{trade.id}]"
    if trade.status == TradeStatus.CLOSED:
        symbol_ = _settings(ctx).display.currency_symbol
        line += f"  pnl {format_currency(trade.pnl, show_sign=True, symbol=symbol_)}"
    click.echo(line)


@main.command("delete-trade")
@click.argument("trade_id")
@click.pass_context
def delete_trade(ctx: click.Context, trade_id: str) -> None:
    """Delete a trade by id."""
    try:
        _service(ctx).delete_trade(trade_id)
    except JournalError as exc:
        _fail(exc)
    click.echo(f"Deleted trade {trade_id}")


@main.command("trades")
@click.option("--month", "month_key", default=None, help="Only trades for YYYY-MM")
@click.option("--limit", default=10, type=int)
@click.pass_context
def list_trades(ctx: click.Context, month_key: str | None, limit: int) -> None:
    """List trades, newest first."""
    service = _service(ctx)
    symbol = _settings(ctx).display.currency_symbol
    trades = service.trades_for_month(month_key) if month_key else service.recent_trades(limit)
    if not trades:
        click.echo("No trades recorded.")
        return
    for t in trades:
        pnl = (
            format_currency(t.pnl, show_sign=True, symbol=symbol)
            if t.status == TradeStatus.CLOSED
            else "open"
        )
        click.echo(f"{t.month_key}  {t.symbol:<8} {t.trade_type.value:<5} {pnl:>14}  {t.id}")


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------

@main.command()
@click.option(
    "--range", "time_range", type=click.Choice([r.value for r in TimeRange]),
    default=TimeRange.ALL.value, help="Chart window",
)
@click.pass_context
def stats(ctx: click.Context, time_range: str) -> None:
    """Overall statistics (trades take priority over manual month P&L)."""
    service = _service(ctx)
    symbol = _settings(ctx).display.currency_symbol
    s = service.stats()

    click.echo(f"\n{'=' * 50}")
    click.echo("OVERALL STATISTICS")
    click.echo(f"{'=' * 50}")
    click.echo(f"  Total P&L:       {format_currency(s.total_profit_loss, show_sign=True, symbol=symbol)}")
    click.echo(f"  Gross Profit:    {format_currency(s.total_profit, symbol=symbol)}")
    click.echo(f"  Gross Loss:      {format_currency(s.total_loss, symbol=symbol)}")
    click.echo(f"  Avg Return:      {format_percentage(s.average_return, show_sign=True)}")
    click.echo(f"  Months:          {s.profitable_months}/{s.total_months} profitable")
    click.echo(f"  Win Rate:        {format_percentage(s.win_rate)}")
    click.echo(f"  Profit Factor:   {format_profit_factor(s.profit_factor)}")
    click.echo(f"  Best Month:      {format_optional_month(s.best_month, symbol=symbol)}")
    click.echo(f"  Worst Month:     {format_optional_month(s.worst_month, symbol=symbol)}")
    if s.trade_months:
        click.echo(f"  From Trades:     {', '.join(s.trade_months)}")
        click.echo(f"  Trade P&L:       {format_currency(s.trade_total_pnl, show_sign=True, symbol=symbol)}")

    points = service.chart_data(time_range)
    if points:
        click.echo(f"\n  {'Month':<8} {'P&L':>14} {'Return':>9}")
        click.echo(f"  {'-' * 33}")
        for p in points:
            click.echo(
                f"  {p.label} {p.month[:4]} "
                f"{format_currency(p.value, show_sign=True, symbol=symbol):>14} "
                f"{format_percentage(p.percentage, show_sign=True):>9}"
            )
    click.echo(f"{'=' * 50}\n")


@main.command("trade-stats")
@click.option("--symbol", default=None, help="Restrict to one symbol")
@click.pass_context
def trade_stats(ctx: click.Context, symbol: str | None) -> None:
    """Closed-trade statistics and streaks."""
    service = _service(ctx)
    currency = _settings(ctx).display.currency_symbol
    s = service.symbol_stats(symbol) if symbol else service.trade_stats()

    click.echo(f"\n{'=' * 50}")
    click.echo(f"TRADE STATISTICS{f' ({symbol.upper()})' if symbol else ''}")
    click.echo(f"{'=' * 50}")
    click.echo(f"  Closed Trades:   {s.total_trades}")
    click.echo(f"  W / L / BE:      {s.winning_trades} / {s.losing_trades} / {s.break_even_trades}")
    click.echo(f"  Total P&L:       {format_currency(s.total_pnl, show_sign=True, symbol=currency)}")
    click.echo(f"  Win Rate:        {format_percentage(s.win_rate)}")
    click.echo(f"  Avg Win:         {format_currency(s.avg_win, symbol=currency)}")
    click.echo(f"  Avg Loss:        {format_currency(s.avg_loss, symbol=currency)}")
    click.echo(f"  Profit Factor:   {format_profit_factor(s.profit_factor)}")
    click.echo(f"  Current Streak:  {format_streak(s.current_streak)}")
    click.echo(f"  Longest Win:     {s.longest_win_streak}")
    click.echo(f"  Longest Loss:    {s.longest_lose_streak}")
    click.echo(f"  Best Trade:      {format_optional_trade(s.best_trade, symbol=currency)}")
    click.echo(f"  Worst Trade:     {format_optional_trade(s.worst_trade, symbol=currency)}")
    click.echo(f"{'=' * 50}\n")
