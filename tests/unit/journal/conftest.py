"""Shared factories for journal tests."""

from __future__ import annotations

import itertools
from datetime import date, datetime, timezone

from pnl_journal.core.enums import MonthStatus, PnlSource, TradeStatus, TradeType
from pnl_journal.core.models import ClosedTrade, MonthRecord, OpenTrade
from pnl_journal.journal.forms import TradeEntry
from pnl_journal.journal.metrics import create_month_record, month_key_for

STAMP = datetime(2025, 1, 1, 0, 0, 0, tzinfo=timezone.utc)

_ids = itertools.count(1)


def make_month(
    month: str = "2025-01",
    starting: float = 10_000.0,
    ending: float = 10_500.0,
    deposits: float = 0.0,
    withdrawals: float = 0.0,
    *,
    id: str | None = None,
    status: MonthStatus = MonthStatus.CLOSED,
    pnl_source: PnlSource = PnlSource.MANUAL,
) -> MonthRecord:
    """Helper to create a MonthRecord with derived fields filled in."""
    return create_month_record(
        id or f"month_{next(_ids)}",
        month,
        starting,
        ending,
        deposits,
        withdrawals,
        status=status,
        pnl_source=pnl_source,
        now=STAMP,
    )


def make_month_with_pnl(
    month: str, pnl: float, starting: float = 10_000.0, **kwargs,
) -> MonthRecord:
    """Month whose net P&L is ``pnl`` with no cash flows."""
    return make_month(month, starting, starting + pnl, **kwargs)


def make_closed_trade(
    pnl: float = 100.0,
    exit_date: date = date(2025, 1, 15),
    *,
    id: str | None = None,
    symbol: str = "AAPL",
    entry_date: date | None = None,
    entry_price: float = 100.0,
    month_key: str | None = None,
) -> ClosedTrade:
    """Helper to create a closed long trade of one unit with the given P&L."""
    exit_price = entry_price + pnl
    return ClosedTrade(
        id=id or f"trade_{next(_ids)}",
        symbol=symbol,
        trade_type=TradeType.LONG,
        entry_date=entry_date or exit_date,
        entry_price=entry_price,
        quantity=1.0,
        month_key=month_key or month_key_for(exit_date),
        exit_date=exit_date,
        exit_price=exit_price,
        pnl=pnl,
        return_percentage=pnl / entry_price * 100,
        is_win=pnl > 0,
        created_at=STAMP,
        updated_at=STAMP,
    )


def make_open_trade(
    entry_date: date = date(2025, 1, 10),
    *,
    id: str | None = None,
    symbol: str = "AAPL",
    entry_price: float = 100.0,
    quantity: float = 1.0,
) -> OpenTrade:
    """Helper to create an open long trade."""
    return OpenTrade(
        id=id or f"trade_{next(_ids)}",
        symbol=symbol,
        trade_type=TradeType.LONG,
        entry_date=entry_date,
        entry_price=entry_price,
        quantity=quantity,
        month_key=month_key_for(entry_date),
        created_at=STAMP,
        updated_at=STAMP,
    )


def make_trade_entry(
    symbol: str = "AAPL",
    trade_type: TradeType = TradeType.LONG,
    status: TradeStatus = TradeStatus.CLOSED,
    entry_date: date = date(2025, 1, 10),
    entry_price: float = 100.0,
    quantity: float = 10.0,
    exit_date: date | None = date(2025, 2, 3),
    exit_price: float | None = 110.0,
    tags: tuple[str, ...] = (),
) -> TradeEntry:
    """Helper to create a parsed trade entry."""
    return TradeEntry(
        symbol=symbol,
        trade_type=trade_type,
        status=status,
        entry_date=entry_date,
        entry_price=entry_price,
        quantity=quantity,
        exit_date=exit_date,
        exit_price=exit_price,
        tags=tags,
    )
