"""Enumerations used across the journal."""

from enum import Enum


class MonthStatus(str, Enum):
    ACTIVE = "active"  # In-progress month, ending capital still moving
    CLOSED = "closed"


class PnlSource(str, Enum):
    """Where a month's net P&L comes from."""

    MANUAL = "manual"  # Capital snapshot entered by hand
    TRADES = "trades"  # Sum of the month's closed trades


class TradeType(str, Enum):
    LONG = "long"
    SHORT = "short"


class TradeStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


class TimeRange(str, Enum):
    """Chart window used by the analytics views."""

    SIX_MONTHS = "6M"
    ONE_YEAR = "1Y"
    ALL = "ALL"
