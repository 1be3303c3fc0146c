"""Tests for per-trade P&L, trade record creation and trade grouping helpers."""

from datetime import date, datetime, timezone

import pytest

from pnl_journal.core.enums import TradeStatus, TradeType
from pnl_journal.core.models import ClosedTrade, OpenTrade
from pnl_journal.journal.trades import (
    calculate_monthly_pnl_from_trades,
    calculate_trade_pnl,
    create_trade_record,
    get_recent_trades,
    get_unique_symbols,
    group_trades_by_month,
)

from .conftest import make_closed_trade, make_open_trade, make_trade_entry


class TestCalculateTradePnL:
    def test_long_win(self):
        r = calculate_trade_pnl(100, 110, 10, TradeType.LONG)
        assert r.pnl == pytest.approx(100)
        assert r.return_percentage == pytest.approx(10)
        assert r.is_win is True

    def test_long_loss(self):
        r = calculate_trade_pnl(100, 95, 10, "long")
        assert r.pnl == pytest.approx(-50)
        assert r.return_percentage == pytest.approx(-5)
        assert r.is_win is False

    def test_short_win(self):
        r = calculate_trade_pnl(100, 90, 5, TradeType.SHORT)
        assert r.pnl == pytest.approx(50)
        assert r.return_percentage == pytest.approx(10)
        assert r.is_win is True

    def test_short_loss(self):
        r = calculate_trade_pnl(100, 120, 2, "short")
        assert r.pnl == pytest.approx(-40)
        assert r.return_percentage == pytest.approx(-20)

    def test_break_even_is_not_a_win(self):
        r = calculate_trade_pnl(50, 50, 3, TradeType.LONG)
        assert r.pnl == 0
        assert r.is_win is False

    def test_zero_entry_price_has_zero_return(self):
        r = calculate_trade_pnl(0, 10, 1, TradeType.LONG)
        assert r.pnl == 10
        assert r.return_percentage == 0


class TestCreateTradeRecord:
    def test_closed_trade(self):
        now = datetime(2025, 2, 4, tzinfo=timezone.utc)
        trade = create_trade_record("t1", make_trade_entry(), now=now)
        assert isinstance(trade, ClosedTrade)
        assert trade.status == "closed"
        assert trade.pnl == pytest.approx(100)
        assert trade.return_percentage == pytest.approx(10)
        assert trade.is_win is True
        assert trade.created_at == now

    def test_closed_trade_keyed_by_exit_month(self):
        trade = create_trade_record("t1", make_trade_entry())
        assert trade.month_key == "2025-02"

    def test_open_trade_keyed_by_entry_month(self):
        entry = make_trade_entry(status=TradeStatus.OPEN, exit_date=None, exit_price=None)
        trade = create_trade_record("t1", entry)
        assert isinstance(trade, OpenTrade)
        assert trade.month_key == "2025-01"
        assert not hasattr(trade, "pnl")

    def test_closed_without_exit_data_is_stored_open(self):
        entry = make_trade_entry(exit_price=None)
        trade = create_trade_record("t1", entry)
        assert isinstance(trade, OpenTrade)

    def test_symbol_and_tags_normalised(self):
        entry = make_trade_entry(symbol=" msft ", tags=("Swing", "swing", " earnings "))
        trade = create_trade_record("t1", entry)
        assert trade.symbol == "MSFT"
        assert trade.tags == ["swing", "earnings"]


class TestMonthlyPnLFromTrades:
    def test_sums_closed_trades_for_key(self):
        trades = [
            make_closed_trade(100, date(2025, 1, 10)),
            make_closed_trade(-30, date(2025, 1, 20)),
            make_closed_trade(999, date(2025, 2, 1)),
            make_open_trade(date(2025, 1, 5)),
        ]
        assert calculate_monthly_pnl_from_trades(trades, "2025-01") == pytest.approx(70)

    def test_no_trades_is_zero(self):
        assert calculate_monthly_pnl_from_trades([], "2025-01") == 0


class TestGroupingHelpers:
    def test_group_by_month(self):
        a = make_closed_trade(1, date(2025, 1, 10))
        b = make_closed_trade(2, date(2025, 2, 10))
        c = make_open_trade(date(2025, 1, 3))
        groups = group_trades_by_month([a, b, c])
        assert groups == {"2025-01": [a, c], "2025-02": [b]}

    def test_unique_symbols_sorted(self):
        trades = [
            make_closed_trade(symbol="TSLA"),
            make_closed_trade(symbol="AAPL"),
            make_open_trade(symbol="TSLA"),
        ]
        assert get_unique_symbols(trades) == ["AAPL", "TSLA"]

    def test_recent_trades_newest_first(self):
        old = make_closed_trade(1, date(2025, 1, 10))
        new = make_closed_trade(2, date(2025, 3, 10))
        running = make_open_trade(date(2025, 2, 1))
        assert get_recent_trades([old, new, running]) == [new, running, old]

    def test_recent_trades_limit(self):
        trades = [make_closed_trade(1, date(2025, 1, d)) for d in range(1, 20)]
        recent = get_recent_trades(trades, limit=3)
        assert [t.exit_date.day for t in recent] == [19, 18, 17]
