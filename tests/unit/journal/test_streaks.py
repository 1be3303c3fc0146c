"""Tests for calculate_streaks."""

from datetime import date

from pnl_journal.journal.trades import calculate_streaks

from .conftest import make_closed_trade, make_open_trade


def _sequence(*pnls: float):
    return [
        make_closed_trade(pnl, date(2025, 1, day))
        for day, pnl in enumerate(pnls, start=1)
    ]


class TestStreaks:
    def test_empty(self):
        s = calculate_streaks([])
        assert s.current_streak == 0
        assert s.longest_win_streak == 0
        assert s.longest_lose_streak == 0

    def test_mixed_sequence(self):
        s = calculate_streaks(_sequence(10, 20, -5, 15, 15))
        assert s.current_streak == 2
        assert s.longest_win_streak == 2
        assert s.longest_lose_streak == 1

    def test_current_loss_streak_is_negative(self):
        s = calculate_streaks(_sequence(10, -1, -2, -3))
        assert s.current_streak == -3
        assert s.longest_lose_streak == 3
        assert s.longest_win_streak == 1

    def test_break_even_resets_both(self):
        s = calculate_streaks(_sequence(10, 10, 0, 10))
        assert s.longest_win_streak == 2
        assert s.current_streak == 1

    def test_trailing_break_even_is_zero(self):
        s = calculate_streaks(_sequence(10, 10, 0))
        assert s.current_streak == 0
        assert s.longest_win_streak == 2

    def test_sorted_by_exit_date_not_input_order(self):
        trades = [
            make_closed_trade(-5, date(2025, 3, 1)),
            make_closed_trade(10, date(2025, 1, 1)),
            make_closed_trade(20, date(2025, 2, 1)),
        ]
        s = calculate_streaks(trades)
        assert s.current_streak == -1
        assert s.longest_win_streak == 2

    def test_same_exit_date_keeps_input_order(self):
        day = date(2025, 1, 5)
        trades = [make_closed_trade(5, day), make_closed_trade(-5, day)]
        assert calculate_streaks(trades).current_streak == -1
        assert calculate_streaks(list(reversed(trades))).current_streak == 1


class TestTradesWithoutExitDate:
    def test_sort_first_as_break_even(self):
        # the open trade sorts before every dated trade, so it cannot
        # break the run of wins that follows it
        trades = _sequence(10, 20) + [make_open_trade(date(2025, 6, 1))]
        s = calculate_streaks(trades)
        assert s.current_streak == 2
        assert s.longest_win_streak == 2
