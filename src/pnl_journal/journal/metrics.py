"""Month metrics engine.

Pure functions turning a month's four capital inputs into its derived
fields, plus the month-key helpers and chart projections the
analytics views read.

Derivation::

    gross_change      = ending_capital - starting_capital
    net_profit_loss   = gross_change - deposits + withdrawals
    return_percentage = net_profit_loss / starting_capital * 100
                        (0 when starting_capital <= 0)

Inputs are assumed validated by ``forms``.  Nothing here raises for
negative or non-finite numbers; NaN / inf simply propagate.
"""

from __future__ import annotations

from datetime import date, datetime

from pnl_journal.core.enums import MonthStatus, PnlSource, TimeRange
from pnl_journal.core.ids import utc_now
from pnl_journal.core.models import MonthRecord

from .stats import ChartPoint, MonthMetrics

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

_RANGE_MONTHS = {TimeRange.SIX_MONTHS: 6, TimeRange.ONE_YEAR: 12}


# ---------------------------------------------------------------------------
# Month keys
# ---------------------------------------------------------------------------

def month_key_for(d: date) -> str:
    """``"YYYY-MM"`` key for a date."""
    return f"{d.year:04d}-{d.month:02d}"


def month_year(month_key: str) -> int:
    return int(month_key.split("-")[0])


def month_name(month_key: str) -> str:
    """Full month name for a key, ``""`` if the month part is out of range."""
    index = int(month_key.split("-")[1]) - 1
    if 0 <= index < len(MONTH_NAMES):
        return MONTH_NAMES[index]
    return ""


def short_month_label(month_key: str) -> str:
    return month_name(month_key)[:3]


def format_month_display(month_key: str) -> str:
    """e.g. ``"January 2025"``."""
    return f"{month_name(month_key)} {month_year(month_key)}"


# ---------------------------------------------------------------------------
# Derivation
# ---------------------------------------------------------------------------

def calculate_month_metrics(
    starting_capital: float,
    ending_capital: float,
    deposits: float,
    withdrawals: float,
) -> MonthMetrics:
    """Compute gross change, net P&L and return % for one month."""
    gross_change = ending_capital - starting_capital
    net_profit_loss = gross_change - deposits + withdrawals
    return_percentage = (
        net_profit_loss / starting_capital * 100 if starting_capital > 0 else 0.0
    )
    return MonthMetrics(
        gross_change=gross_change,
        net_profit_loss=net_profit_loss,
        return_percentage=return_percentage,
    )


def create_month_record(
    id: str,
    month: str,
    starting_capital: float,
    ending_capital: float,
    deposits: float,
    withdrawals: float,
    notes: str = "",
    status: MonthStatus | str = MonthStatus.CLOSED,
    pnl_source: PnlSource | str = PnlSource.MANUAL,
    *,
    now: datetime | None = None,
) -> MonthRecord:
    """Build a complete MonthRecord from parsed numeric input.

    ``year`` and ``month_name`` come from ``month``; ``created_at`` and
    ``updated_at`` are both stamped with ``now`` (current UTC time by
    default).
    """
    metrics = calculate_month_metrics(
        starting_capital, ending_capital, deposits, withdrawals,
    )
    stamp = now or utc_now()
    return MonthRecord(
        id=id,
        month=month,
        year=month_year(month),
        month_name=month_name(month),
        starting_capital=starting_capital,
        ending_capital=ending_capital,
        deposits=deposits,
        withdrawals=withdrawals,
        gross_change=metrics.gross_change,
        net_profit_loss=metrics.net_profit_loss,
        return_percentage=metrics.return_percentage,
        pnl_source=PnlSource(pnl_source),
        status=MonthStatus(status),
        notes=notes,
        created_at=stamp,
        updated_at=stamp,
    )


# ---------------------------------------------------------------------------
# Projections for the analytics / history views
# ---------------------------------------------------------------------------

def get_chart_data(months: list[MonthRecord]) -> list[ChartPoint]:
    """Chart points in chronological order (oldest first)."""
    ordered = sorted(months, key=lambda m: m.month)
    return [
        ChartPoint(
            month=m.month,
            label=short_month_label(m.month),
            value=m.net_profit_loss,
            percentage=m.return_percentage,
        )
        for m in ordered
    ]


def filter_months_by_range(
    months: list[MonthRecord],
    time_range: TimeRange | str,
    *,
    today: date | None = None,
) -> list[MonthRecord]:
    """Keep months on or after the first day of the month N months back.

    ``ALL`` returns the input unchanged.
    """
    time_range = TimeRange(time_range)
    if time_range == TimeRange.ALL:
        return months

    today = today or utc_now().date()
    year = today.year
    month = today.month - _RANGE_MONTHS[time_range]
    while month <= 0:
        month += 12
        year -= 1
    cutoff = f"{year:04d}-{month:02d}"
    return [m for m in months if m.month >= cutoff]


def get_recent_months(months: list[MonthRecord], limit: int = 5) -> list[MonthRecord]:
    """Newest months first, at most ``limit``."""
    return sorted(months, key=lambda m: m.month, reverse=True)[:limit]
