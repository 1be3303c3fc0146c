"""Aggregation engine — overall and combined month statistics.

``calculate_overall_stats`` summarises month records as entered.
``calculate_combined_stats`` merges in trade-level P&L without double
counting: any month key that appears in the trade collection takes its
figure from the sum of that month's closed trades, and the manual
``net_profit_loss`` for the key is ignored.

Policies shared by both:

* empty input   -> all-zero stats, ``best_month`` / ``worst_month`` None
* profit factor -> gross profit / gross loss, ``inf`` with only winners,
  0 with no activity
* best / worst  -> strict comparison in iteration order, first seen
  keeps a tie
"""

from __future__ import annotations

import math

from pnl_journal.core.enums import MonthStatus, PnlSource
from pnl_journal.core.models import ClosedTrade, MonthRecord, OpenTrade

from .metrics import month_name, month_year
from .stats import CombinedStats, OverallStats


def profit_factor(total_profit: float, total_loss: float) -> float:
    """Gross profit over gross loss, ``inf`` when there are only wins."""
    if total_loss > 0:
        return total_profit / total_loss
    return math.inf if total_profit > 0 else 0.0


def calculate_overall_stats(months: list[MonthRecord]) -> OverallStats:
    """Single pass over ``months`` in the order given."""
    if not months:
        return OverallStats()

    total_pnl = 0.0
    total_profit = 0.0
    total_loss = 0.0
    total_return = 0.0
    profitable = 0
    best: MonthRecord | None = None
    worst: MonthRecord | None = None

    for month in months:
        pnl = month.net_profit_loss
        total_pnl += pnl
        total_return += month.return_percentage

        if pnl > 0:
            total_profit += pnl
            profitable += 1
        elif pnl < 0:
            total_loss += abs(pnl)

        if best is None or pnl > best.net_profit_loss:
            best = month
        if worst is None or pnl < worst.net_profit_loss:
            worst = month

    n = len(months)
    return OverallStats(
        total_profit_loss=total_pnl,
        total_profit=total_profit,
        total_loss=total_loss,
        average_return=total_return / n,
        best_month=best,
        worst_month=worst,
        profitable_months=profitable,
        total_months=n,
        win_rate=profitable / n * 100,
        profit_factor=profit_factor(total_profit, total_loss),
    )


def _trade_month(
    month_key: str, pnl: float, existing: MonthRecord | None,
) -> MonthRecord:
    """Month record carrying trade-derived P&L for ``month_key``.

    With a manual record the copy keeps its capital fields and takes the
    trade P&L; return % uses its starting capital when positive.
    Without one a synthetic record with zero capital is built.
    Only ``net_profit_loss`` and ``return_percentage`` are meaningful on
    the result.
    """
    if existing is not None:
        starting = existing.starting_capital
        return existing.model_copy(
            update={
                "net_profit_loss": pnl,
                "return_percentage": pnl / starting * 100 if starting > 0 else 0.0,
                "pnl_source": PnlSource.TRADES,
            }
        )

    return MonthRecord(
        id=f"trades:{month_key}",
        month=month_key,
        year=month_year(month_key),
        month_name=month_name(month_key),
        starting_capital=0.0,
        ending_capital=0.0,
        net_profit_loss=pnl,
        return_percentage=0.0,
        pnl_source=PnlSource.TRADES,
        status=MonthStatus.CLOSED,
    )


def calculate_combined_stats(
    months: list[MonthRecord],
    trades: list[OpenTrade | ClosedTrade],
) -> CombinedStats:
    """Overall stats where trades take priority over manual month P&L.

    Iteration order: manual records as given (a repeated month key is
    counted once, first record wins), then trade-only month keys in order
    of first appearance among ``trades``.  ``total_months`` is therefore
    the number of distinct keys across both sources.
    """
    trade_pnl: dict[str, float] = {}
    for trade in trades:
        trade_pnl.setdefault(trade.month_key, 0.0)
        if isinstance(trade, ClosedTrade):
            trade_pnl[trade.month_key] += trade.pnl

    contributions: list[MonthRecord] = []
    seen: set[str] = set()
    for month in months:
        if month.month in seen:
            continue
        seen.add(month.month)
        if month.month in trade_pnl:
            contributions.append(
                _trade_month(month.month, trade_pnl[month.month], month)
            )
        else:
            contributions.append(month)

    for key, pnl in trade_pnl.items():
        if key not in seen:
            seen.add(key)
            contributions.append(_trade_month(key, pnl, None))

    overall = calculate_overall_stats(contributions)
    return CombinedStats(
        total_profit_loss=overall.total_profit_loss,
        total_profit=overall.total_profit,
        total_loss=overall.total_loss,
        average_return=overall.average_return,
        best_month=overall.best_month,
        worst_month=overall.worst_month,
        profitable_months=overall.profitable_months,
        total_months=overall.total_months,
        win_rate=overall.win_rate,
        profit_factor=overall.profit_factor,
        trade_months=sorted(trade_pnl),
        trade_total_pnl=sum(trade_pnl.values(), 0.0),
    )
