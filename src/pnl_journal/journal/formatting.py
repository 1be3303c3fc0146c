"""Display formatting for stats values.

Infinite profit factor renders as ``∞`` and missing best / worst
records as ``—``.
"""

from __future__ import annotations

import math

from pnl_journal.core.models import ClosedTrade, MonthRecord

from .metrics import format_month_display

INFINITY_LABEL = "∞"
MISSING_LABEL = "—"


def format_currency(value: float, show_sign: bool = False, *, symbol: str = "$") -> str:
    """``$1,234.56``; negatives always get ``-``, positives ``+`` if asked."""
    formatted = f"{symbol}{abs(value):,.2f}"
    if value < 0:
        return f"-{formatted}"
    if show_sign and value > 0:
        return f"+{formatted}"
    return formatted


def format_percentage(value: float, show_sign: bool = False) -> str:
    formatted = f"{abs(value):.2f}%"
    if value < 0:
        return f"-{formatted}"
    if show_sign and value > 0:
        return f"+{formatted}"
    return formatted


def format_profit_factor(value: float) -> str:
    if math.isinf(value):
        return f"{INFINITY_LABEL}x"
    return f"{value:.1f}x"


def format_streak(value: int) -> str:
    """``3W`` / ``2L`` / ``0``."""
    if value > 0:
        return f"{value}W"
    if value < 0:
        return f"{-value}L"
    return "0"


def format_optional_month(record: MonthRecord | None, *, symbol: str = "$") -> str:
    if record is None:
        return MISSING_LABEL
    return (
        f"{format_month_display(record.month)} "
        f"({format_currency(record.net_profit_loss, show_sign=True, symbol=symbol)})"
    )


def format_optional_trade(record: ClosedTrade | None, *, symbol: str = "$") -> str:
    if record is None:
        return MISSING_LABEL
    return (
        f"{record.symbol} {record.exit_date.isoformat()} "
        f"({format_currency(record.pnl, show_sign=True, symbol=symbol)})"
    )
