"""Tests for calculate_trade_stats and get_symbol_stats."""

import math
from datetime import date

import pytest

from pnl_journal.journal.trades import calculate_trade_stats, get_symbol_stats

from .conftest import make_closed_trade, make_open_trade


def _trades(*pnls: float, symbol: str = "AAPL"):
    return [
        make_closed_trade(pnl, date(2025, 1, day), symbol=symbol)
        for day, pnl in enumerate(pnls, start=1)
    ]


class TestTradeStats:
    def test_empty(self):
        stats = calculate_trade_stats([])
        assert stats.total_trades == 0
        assert stats.win_rate == 0
        assert stats.profit_factor == 0
        assert stats.best_trade is None
        assert stats.worst_trade is None

    def test_only_open_trades_is_empty(self):
        stats = calculate_trade_stats([make_open_trade(), make_open_trade()])
        assert stats.total_trades == 0
        assert stats.best_trade is None

    def test_counts_and_totals(self):
        stats = calculate_trade_stats(_trades(100, -40, 0, 60, -20))
        assert stats.total_trades == 5
        assert stats.winning_trades == 2
        assert stats.losing_trades == 2
        assert stats.break_even_trades == 1
        assert stats.total_pnl == pytest.approx(100)
        assert stats.win_rate == pytest.approx(40)
        assert stats.avg_win == pytest.approx(80)
        assert stats.avg_loss == pytest.approx(30)
        assert stats.profit_factor == pytest.approx(160 / 60)

    def test_best_and_worst(self):
        trades = _trades(100, -40, 250, -90)
        stats = calculate_trade_stats(trades)
        assert stats.best_trade is trades[2]
        assert stats.worst_trade is trades[3]

    def test_ties_keep_first_seen(self):
        trades = _trades(50, 50, -10, -10)
        stats = calculate_trade_stats(trades)
        assert stats.best_trade is trades[0]
        assert stats.worst_trade is trades[2]

    def test_only_winners_profit_factor_is_infinite(self):
        stats = calculate_trade_stats(_trades(10, 20))
        assert stats.profit_factor == math.inf
        assert stats.avg_loss == 0

    def test_only_break_even(self):
        stats = calculate_trade_stats(_trades(0, 0))
        assert stats.profit_factor == 0
        assert stats.avg_win == 0
        assert stats.break_even_trades == 2

    def test_streaks_included(self):
        stats = calculate_trade_stats(_trades(10, 20, -5, 15, 15))
        assert stats.current_streak == 2
        assert stats.longest_win_streak == 2
        assert stats.longest_lose_streak == 1


class TestOpenTradesIgnored:
    def test_injected_open_trade_changes_nothing(self):
        closed = _trades(100, -40, 0, 60)
        with_open = closed[:2] + [make_open_trade(date(2030, 1, 1), entry_price=5, quantity=999)] + closed[2:]
        assert calculate_trade_stats(with_open) == calculate_trade_stats(closed)

    def test_open_trade_does_not_break_streak(self):
        closed = _trades(10, 20)
        stats = calculate_trade_stats(closed + [make_open_trade()])
        assert stats.current_streak == 2


class TestToDict:
    def test_ids_exported(self):
        trades = _trades(100, -40)
        d = calculate_trade_stats(trades).to_dict()
        assert d["best_trade"] == trades[0].id
        assert d["worst_trade"] == trades[1].id
        assert d["total_trades"] == 2

    def test_empty_dict(self):
        d = calculate_trade_stats([]).to_dict()
        assert d["best_trade"] is None


class TestSymbolStats:
    def test_filters_by_symbol(self):
        trades = _trades(100, -40, symbol="AAPL") + _trades(500, symbol="TSLA")
        stats = get_symbol_stats(trades, "tsla ")
        assert stats.total_trades == 1
        assert stats.total_pnl == pytest.approx(500)

    def test_unknown_symbol_is_empty(self):
        assert get_symbol_stats(_trades(10), "NVDA").total_trades == 0
