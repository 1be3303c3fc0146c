"""Journal service: owns the collections and re-runs the engines.

Holds the month and trade stores, applies mutations through them and
recomputes every statistic from the full collections on each read.
There is no cache to invalidate.

Months whose ``pnl_source`` is ``trades`` are kept in step with their
closed trades: after every mutation, each such month whose stored P&L
differs from its trade sum by more than ``SYNC_TOLERANCE`` is rewritten
with ``ending_capital = starting + trade P&L + deposits - withdrawals``.

Usage::

    service = JournalService.from_settings(load_settings())
    service.add_month(parse_month_form(form))
    print(service.stats().to_dict())
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from pnl_journal.core.config import Settings
from pnl_journal.core.enums import MonthStatus, PnlSource, TimeRange
from pnl_journal.core.errors import DuplicateMonthError, RecordNotFoundError
from pnl_journal.core.ids import new_id, utc_now
from pnl_journal.core.models import (
    MONTH_LIST_ADAPTER,
    TRADE_LIST_ADAPTER,
    MonthRecord,
)
from pnl_journal.storage.json_store import JsonRecordStore

from .aggregation import calculate_combined_stats
from .forms import MonthEntry, TradeEntry
from .metrics import (
    calculate_month_metrics,
    create_month_record,
    filter_months_by_range,
    get_chart_data,
    get_recent_months,
)
from .stats import ChartPoint, CombinedStats, TradeStats
from .trades import (
    Trade,
    calculate_monthly_pnl_from_trades,
    calculate_trade_stats,
    create_trade_record,
    get_recent_trades,
    get_symbol_stats,
)

logger = logging.getLogger(__name__)

SYNC_TOLERANCE = 0.01


class JournalService:
    """Month and trade journal backed by two record stores.

    Parameters
    ----------
    months : JsonRecordStore[MonthRecord]
    trades : JsonRecordStore[Trade]
    clock : Callable[[], datetime]
        Source of ``created_at`` / ``updated_at`` stamps.
    """

    def __init__(
        self,
        months: JsonRecordStore[MonthRecord],
        trades: JsonRecordStore[Trade],
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._months = months
        self._trades = trades
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> JournalService:
        return cls(
            JsonRecordStore(settings.months_path, MONTH_LIST_ADAPTER, kind="month"),
            JsonRecordStore(settings.trades_path, TRADE_LIST_ADAPTER, kind="trade"),
        )

    # ------------------------------------------------------------------ #
    # Months                                                               #
    # ------------------------------------------------------------------ #

    def list_months(self) -> list[MonthRecord]:
        return self._months.load_all()

    def get_month(self, month_id: str) -> MonthRecord:
        record = self._months.get(month_id)
        if record is None:
            raise RecordNotFoundError("Month", month_id)
        return record

    def get_month_by_key(self, month_key: str) -> MonthRecord | None:
        for record in self._months.load_all():
            if record.month == month_key:
                return record
        return None

    def month_exists(self, month_key: str, exclude_id: str | None = None) -> bool:
        return any(
            m.month == month_key and m.id != exclude_id
            for m in self._months.load_all()
        )

    def active_month(self) -> MonthRecord | None:
        for record in self._months.load_all():
            if record.status == MonthStatus.ACTIVE:
                return record
        return None

    def recent_months(self, limit: int = 5) -> list[MonthRecord]:
        return get_recent_months(self._months.load_all(), limit)

    def add_month(
        self,
        entry: MonthEntry,
        *,
        status: MonthStatus | str = MonthStatus.CLOSED,
        pnl_source: PnlSource | str = PnlSource.MANUAL,
    ) -> MonthRecord:
        if self.month_exists(entry.month):
            raise DuplicateMonthError(entry.month)

        record = create_month_record(
            new_id(),
            entry.month,
            entry.starting_capital,
            entry.ending_capital,
            entry.deposits,
            entry.withdrawals,
            entry.notes,
            status,
            pnl_source,
            now=self._clock(),
        )
        self._months.upsert(record)
        logger.info("Added month %s (%s, source=%s)", record.month, record.id, record.pnl_source.value)
        self.sync_trade_months()
        return self.get_month(record.id)

    def update_month(
        self,
        month_id: str,
        entry: MonthEntry,
        *,
        status: MonthStatus | str | None = None,
        pnl_source: PnlSource | str | None = None,
    ) -> MonthRecord:
        """Full replace; every derived field is recomputed."""
        existing = self.get_month(month_id)
        if self.month_exists(entry.month, exclude_id=month_id):
            raise DuplicateMonthError(entry.month)

        record = create_month_record(
            month_id,
            entry.month,
            entry.starting_capital,
            entry.ending_capital,
            entry.deposits,
            entry.withdrawals,
            entry.notes,
            status or existing.status,
            pnl_source or existing.pnl_source,
            now=self._clock(),
        ).model_copy(update={"created_at": existing.created_at})
        self._months.upsert(record)
        logger.info("Updated month %s (%s)", record.month, record.id)
        self.sync_trade_months()
        return self.get_month(record.id)

    def close_month(self, month_id: str, ending_capital: float) -> MonthRecord:
        existing = self.get_month(month_id)
        metrics = calculate_month_metrics(
            existing.starting_capital,
            ending_capital,
            existing.deposits,
            existing.withdrawals,
        )
        record = existing.model_copy(
            update={
                "ending_capital": ending_capital,
                "gross_change": metrics.gross_change,
                "net_profit_loss": metrics.net_profit_loss,
                "return_percentage": metrics.return_percentage,
                "status": MonthStatus.CLOSED,
                "updated_at": self._clock(),
            }
        )
        self._months.upsert(record)
        logger.info("Closed month %s (%s)", record.month, record.id)
        self.sync_trade_months()
        return self.get_month(record.id)

    def delete_month(self, month_id: str) -> None:
        if not self._months.delete(month_id):
            raise RecordNotFoundError("Month", month_id)
        logger.info("Deleted month %s", month_id)

    # ------------------------------------------------------------------ #
    # Trades                                                               #
    # ------------------------------------------------------------------ #

    def list_trades(self) -> list[Trade]:
        return self._trades.load_all()

    def get_trade(self, trade_id: str) -> Trade:
        record = self._trades.get(trade_id)
        if record is None:
            raise RecordNotFoundError("Trade", trade_id)
        return record

    def trades_for_month(self, month_key: str) -> list[Trade]:
        return [t for t in self._trades.load_all() if t.month_key == month_key]

    def recent_trades(self, limit: int = 10) -> list[Trade]:
        return get_recent_trades(self._trades.load_all(), limit)

    def add_trade(self, entry: TradeEntry) -> Trade:
        record = create_trade_record(new_id(), entry, now=self._clock())
        self._trades.upsert(record)
        logger.info(
            "Added %s trade %s %s (%s)",
            record.status, record.symbol, record.month_key, record.id,
        )
        self.sync_trade_months()
        return record

    def update_trade(self, trade_id: str, entry: TradeEntry) -> Trade:
        """Full replace; P&L and month key are recomputed."""
        existing = self.get_trade(trade_id)
        record = create_trade_record(trade_id, entry, now=self._clock()).model_copy(
            update={"created_at": existing.created_at}
        )
        self._trades.upsert(record)
        logger.info("Updated trade %s (%s)", record.symbol, record.id)
        self.sync_trade_months()
        return record

    def delete_trade(self, trade_id: str) -> None:
        if not self._trades.delete(trade_id):
            raise RecordNotFoundError("Trade", trade_id)
        logger.info("Deleted trade %s", trade_id)
        self.sync_trade_months()

    # ------------------------------------------------------------------ #
    # Trade-sourced months                                                 #
    # ------------------------------------------------------------------ #

    def _apply_trade_pnl(self, month: MonthRecord, pnl: float) -> MonthRecord:
        ending = month.starting_capital + pnl + month.deposits - month.withdrawals
        metrics = calculate_month_metrics(
            month.starting_capital, ending, month.deposits, month.withdrawals,
        )
        return month.model_copy(
            update={
                "ending_capital": ending,
                "gross_change": metrics.gross_change,
                "net_profit_loss": metrics.net_profit_loss,
                "return_percentage": metrics.return_percentage,
                "updated_at": self._clock(),
            }
        )

    def recalculate_month_pnl(self, month_key: str) -> MonthRecord | None:
        """Rewrite a trades-sourced month from its closed trades.

        Returns the updated record, or None for a missing or manual month.
        """
        month = self.get_month_by_key(month_key)
        if month is None or month.pnl_source != PnlSource.TRADES:
            return None
        pnl = calculate_monthly_pnl_from_trades(self._trades.load_all(), month_key)
        record = self._apply_trade_pnl(month, pnl)
        self._months.upsert(record)
        logger.info("Recalculated month %s from trades: %.2f", month_key, pnl)
        return record

    def sync_trade_months(self) -> list[str]:
        """Bring every trades-sourced month in line with its trades.

        Returns the month keys that were rewritten.
        """
        trades = self._trades.load_all()
        changed: list[str] = []

        def _sync(months: list[MonthRecord]) -> list[MonthRecord] | None:
            changed.clear()
            for i, month in enumerate(months):
                if month.pnl_source != PnlSource.TRADES:
                    continue
                pnl = calculate_monthly_pnl_from_trades(trades, month.month)
                if abs(pnl - month.net_profit_loss) > SYNC_TOLERANCE:
                    months[i] = self._apply_trade_pnl(month, pnl)
                    changed.append(month.month)
            return months if changed else None

        self._months.update(_sync)
        if changed:
            logger.info("Synced trade-sourced months: %s", ", ".join(changed))
        return changed

    # ------------------------------------------------------------------ #
    # Statistics                                                           #
    # ------------------------------------------------------------------ #

    def stats(self) -> CombinedStats:
        return calculate_combined_stats(self._months.load_all(), self._trades.load_all())

    def trade_stats(self) -> TradeStats:
        return calculate_trade_stats(self._trades.load_all())

    def symbol_stats(self, symbol: str) -> TradeStats:
        return get_symbol_stats(self._trades.load_all(), symbol)

    def chart_data(self, time_range: TimeRange | str = TimeRange.ALL) -> list[ChartPoint]:
        return get_chart_data(filter_months_by_range(self._months.load_all(), time_range))
