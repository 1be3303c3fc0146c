"""Result structures produced by the engines.

All of these are ephemeral projections recomputed from the current
collections on every read.  None of them is persisted.

``profit_factor`` may be ``math.inf`` (only winners, no losers) and
``best_*`` / ``worst_*`` may be ``None`` (empty collection).  Both are
valid values that presentation code must render, see ``formatting``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pnl_journal.core.models import ClosedTrade, MonthRecord


@dataclass(frozen=True)
class MonthMetrics:
    """Derived fields for one month."""

    gross_change: float
    net_profit_loss: float
    return_percentage: float


@dataclass(frozen=True)
class TradePnL:
    """Derived fields for one closed trade."""

    pnl: float
    return_percentage: float
    is_win: bool


@dataclass(frozen=True)
class StreakSummary:
    """Consecutive win / loss runs in chronological order.

    ``current_streak`` is positive for an active win run, negative for
    an active loss run and zero when the last trade broke even.
    """

    current_streak: int = 0
    longest_win_streak: int = 0
    longest_lose_streak: int = 0


@dataclass(frozen=True)
class ChartPoint:
    month: str
    label: str
    value: float
    percentage: float


@dataclass(frozen=True)
class OverallStats:
    """Aggregate statistics across a collection of months."""

    total_profit_loss: float = 0.0
    total_profit: float = 0.0
    total_loss: float = 0.0
    average_return: float = 0.0
    best_month: MonthRecord | None = None
    worst_month: MonthRecord | None = None
    profitable_months: int = 0
    total_months: int = 0
    win_rate: float = 0.0
    profit_factor: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Export to a flat dictionary for logging / CLI output."""
        return {
            "total_profit_loss": self.total_profit_loss,
            "total_profit": self.total_profit,
            "total_loss": self.total_loss,
            "average_return": self.average_return,
            "best_month": self.best_month.month if self.best_month else None,
            "worst_month": self.worst_month.month if self.worst_month else None,
            "profitable_months": self.profitable_months,
            "total_months": self.total_months,
            "win_rate": self.win_rate,
            "profit_factor": self.profit_factor,
        }


@dataclass(frozen=True)
class CombinedStats(OverallStats):
    """Overall stats with trade-derived months taking priority.

    ``trade_months`` lists the month keys whose figures came from trades
    and ``trade_total_pnl`` is the raw sum of those months' trade P&L.
    """

    trade_months: list[str] = field(default_factory=list)
    trade_total_pnl: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        d = super().to_dict()
        d["trade_months"] = list(self.trade_months)
        d["trade_total_pnl"] = self.trade_total_pnl
        return d


@dataclass(frozen=True)
class TradeStats:
    """Aggregate statistics across closed trades."""

    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    break_even_trades: int = 0
    total_pnl: float = 0.0
    win_rate: float = 0.0
    avg_win: float = 0.0
    avg_loss: float = 0.0
    profit_factor: float = 0.0
    current_streak: int = 0
    longest_win_streak: int = 0
    longest_lose_streak: int = 0
    best_trade: ClosedTrade | None = None
    worst_trade: ClosedTrade | None = None

    def to_dict(self) -> dict[str, Any]:
        """Export to a flat dictionary for logging / CLI output."""
        return {
            "total_trades": self.total_trades,
            "winning_trades": self.winning_trades,
            "losing_trades": self.losing_trades,
            "break_even_trades": self.break_even_trades,
            "total_pnl": self.total_pnl,
            "win_rate": self.win_rate,
            "avg_win": self.avg_win,
            "avg_loss": self.avg_loss,
            "profit_factor": self.profit_factor,
            "current_streak": self.current_streak,
            "longest_win_streak": self.longest_win_streak,
            "longest_lose_streak": self.longest_lose_streak,
            "best_trade": self.best_trade.id if self.best_trade else None,
            "worst_trade": self.worst_trade.id if self.worst_trade else None,
        }
