"""Trade P&L, streak and trade-statistics engine.

Only closed trades carry P&L.  Open trades are excluded from every
statistic and, where a caller hands one to ``calculate_streaks``
directly, count as break-even with no exit date.

Usage::

    stats = calculate_trade_stats(trades)
    print(stats.win_rate, stats.profit_factor, stats.current_streak)
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime

from pnl_journal.core.enums import TradeStatus, TradeType
from pnl_journal.core.ids import utc_now
from pnl_journal.core.models import ClosedTrade, OpenTrade

from .aggregation import profit_factor
from .forms import TradeEntry
from .metrics import month_key_for
from .stats import StreakSummary, TradePnL, TradeStats

Trade = OpenTrade | ClosedTrade

_EPOCH = date(1970, 1, 1)


def _pnl(trade: Trade) -> float:
    return trade.pnl if isinstance(trade, ClosedTrade) else 0.0


def _exit_sort_key(trade: Trade) -> int:
    """Days since epoch of the exit date; trades without one sort as epoch 0."""
    if isinstance(trade, ClosedTrade):
        return (trade.exit_date - _EPOCH).days
    return 0


# ---------------------------------------------------------------------------
# Per-trade derivation
# ---------------------------------------------------------------------------

def calculate_trade_pnl(
    entry_price: float,
    exit_price: float,
    quantity: float,
    trade_type: TradeType | str,
) -> TradePnL:
    """P&L, directional return % and win flag for a closed position.

    A zero P&L is neither a win nor a loss.
    """
    direction = 1 if TradeType(trade_type) == TradeType.LONG else -1
    pnl = (exit_price - entry_price) * quantity * direction
    return_percentage = (
        (exit_price - entry_price) / entry_price * 100 * direction
        if entry_price > 0
        else 0.0
    )
    return TradePnL(pnl=pnl, return_percentage=return_percentage, is_win=pnl > 0)


def create_trade_record(
    id: str,
    entry: TradeEntry,
    *,
    now: datetime | None = None,
) -> Trade:
    """Build an OpenTrade or ClosedTrade from parsed form input.

    The month key follows the exit date for closed trades and the entry
    date otherwise.  A trade marked closed without both exit date and
    exit price is stored as open.
    """
    stamp = now or utc_now()
    if entry.status == TradeStatus.OPEN:
        key_date = entry.entry_date
    else:
        key_date = entry.exit_date or entry.entry_date

    base = dict(
        id=id,
        symbol=entry.symbol,
        trade_type=entry.trade_type,
        entry_date=entry.entry_date,
        entry_price=entry.entry_price,
        quantity=entry.quantity,
        notes=entry.notes.strip(),
        tags=list(entry.tags),
        month_key=month_key_for(key_date),
        created_at=stamp,
        updated_at=stamp,
    )

    if (
        entry.status == TradeStatus.CLOSED
        and entry.exit_date is not None
        and entry.exit_price is not None
    ):
        result = calculate_trade_pnl(
            entry.entry_price, entry.exit_price, entry.quantity, entry.trade_type,
        )
        return ClosedTrade(
            **base,
            exit_date=entry.exit_date,
            exit_price=entry.exit_price,
            pnl=result.pnl,
            return_percentage=result.return_percentage,
            is_win=result.is_win,
        )
    return OpenTrade(**base)


# ---------------------------------------------------------------------------
# Streaks
# ---------------------------------------------------------------------------

def calculate_streaks(trades: list[Trade]) -> StreakSummary:
    """Walk trades by exit date and measure consecutive win / loss runs.

    Break-even trades end any run.  Ties in exit date keep input order.
    """
    if not trades:
        return StreakSummary()

    ordered = sorted(trades, key=_exit_sort_key)

    longest_win = 0
    longest_lose = 0
    run_win = 0
    run_lose = 0

    for trade in ordered:
        pnl = _pnl(trade)
        if pnl > 0:
            run_win += 1
            run_lose = 0
            longest_win = max(longest_win, run_win)
        elif pnl < 0:
            run_lose += 1
            run_win = 0
            longest_lose = max(longest_lose, run_lose)
        else:
            run_win = 0
            run_lose = 0

    last_pnl = _pnl(ordered[-1])
    if last_pnl > 0:
        current = run_win
    elif last_pnl < 0:
        current = -run_lose
    else:
        current = 0

    return StreakSummary(
        current_streak=current,
        longest_win_streak=longest_win,
        longest_lose_streak=longest_lose,
    )


# ---------------------------------------------------------------------------
# Aggregate statistics
# ---------------------------------------------------------------------------

def calculate_trade_stats(trades: list[Trade]) -> TradeStats:
    """Win rate, averages, profit factor, extremes and streaks.

    Only closed trades participate.  Best / worst use strict comparison,
    so the first trade seen keeps a tie.
    """
    closed = [t for t in trades if t.status == TradeStatus.CLOSED]
    if not closed:
        return TradeStats()

    total_pnl = 0.0
    total_profit = 0.0
    total_loss = 0.0
    wins = 0
    losses = 0
    break_even = 0
    best: ClosedTrade | None = None
    worst: ClosedTrade | None = None

    for trade in closed:
        pnl = trade.pnl
        total_pnl += pnl
        if pnl > 0:
            wins += 1
            total_profit += pnl
        elif pnl < 0:
            losses += 1
            total_loss += abs(pnl)
        else:
            break_even += 1

        if best is None or pnl > best.pnl:
            best = trade
        if worst is None or pnl < worst.pnl:
            worst = trade

    streaks = calculate_streaks(closed)
    n = len(closed)

    return TradeStats(
        total_trades=n,
        winning_trades=wins,
        losing_trades=losses,
        break_even_trades=break_even,
        total_pnl=total_pnl,
        win_rate=wins / n * 100,
        avg_win=total_profit / wins if wins else 0.0,
        avg_loss=total_loss / losses if losses else 0.0,
        profit_factor=profit_factor(total_profit, total_loss),
        current_streak=streaks.current_streak,
        longest_win_streak=streaks.longest_win_streak,
        longest_lose_streak=streaks.longest_lose_streak,
        best_trade=best,
        worst_trade=worst,
    )


# ---------------------------------------------------------------------------
# Grouping / lookup helpers
# ---------------------------------------------------------------------------

def calculate_monthly_pnl_from_trades(trades: list[Trade], month_key: str) -> float:
    """Sum of closed-trade P&L for one month key."""
    return sum(
        (
            t.pnl
            for t in trades
            if isinstance(t, ClosedTrade) and t.month_key == month_key
        ),
        0.0,
    )


def group_trades_by_month(trades: list[Trade]) -> dict[str, list[Trade]]:
    groups: dict[str, list[Trade]] = defaultdict(list)
    for trade in trades:
        groups[trade.month_key].append(trade)
    return dict(groups)


def get_symbol_stats(trades: list[Trade], symbol: str) -> TradeStats:
    wanted = symbol.strip().upper()
    return calculate_trade_stats([t for t in trades if t.symbol == wanted])


def get_unique_symbols(trades: list[Trade]) -> list[str]:
    return sorted({t.symbol for t in trades})


def get_recent_trades(trades: list[Trade], limit: int = 10) -> list[Trade]:
    """Newest first by exit date, falling back to entry date for open trades."""

    def _when(trade: Trade) -> date:
        if isinstance(trade, ClosedTrade):
            return trade.exit_date
        return trade.entry_date

    return sorted(trades, key=_when, reverse=True)[:limit]
