"""Trade journal — P&L derivation and aggregation.

Turns monthly capital snapshots and individual trades into the figures
the calendar, analytics and history views show.

Key components
--------------
**Engines (pure functions, no state)**

calculate_month_metrics   Gross change, net P&L and return % for a month
calculate_overall_stats   Aggregates across month records
calculate_combined_stats  Month + trade aggregates without double counting
calculate_trade_pnl       P&L, return % and win flag for a closed trade
calculate_streaks         Consecutive win / loss runs
calculate_trade_stats     Win rate, profit factor, extremes over closed trades

**Boundaries**

parse_month_form / parse_trade_form   Raw string input to numeric entries
JournalService                        Stores, mutations and sync
"""

from .aggregation import calculate_combined_stats, calculate_overall_stats, profit_factor
from .forms import (
    MonthEntry,
    MonthForm,
    TradeEntry,
    TradeForm,
    parse_ending_capital,
    parse_month_form,
    parse_trade_form,
)
from .metrics import calculate_month_metrics, create_month_record
from .service import JournalService
from .stats import (
    ChartPoint,
    CombinedStats,
    MonthMetrics,
    OverallStats,
    StreakSummary,
    TradePnL,
    TradeStats,
)
from .trades import (
    calculate_streaks,
    calculate_trade_pnl,
    calculate_trade_stats,
    create_trade_record,
)

__all__ = [
    "calculate_month_metrics",
    "create_month_record",
    "calculate_overall_stats",
    "calculate_combined_stats",
    "profit_factor",
    "calculate_trade_pnl",
    "create_trade_record",
    "calculate_streaks",
    "calculate_trade_stats",
    "MonthForm",
    "MonthEntry",
    "TradeForm",
    "TradeEntry",
    "parse_ending_capital",
    "parse_month_form",
    "parse_trade_form",
    "JournalService",
    "MonthMetrics",
    "TradePnL",
    "StreakSummary",
    "ChartPoint",
    "OverallStats",
    "CombinedStats",
    "TradeStats",
]
