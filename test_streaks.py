import unittest
from datetime import date, timedelta

from utils.streaks import StreakState, advance_streak, current_streak, longest_streak, streak_from_history

D = date(2024, 5, 1)


class TestAdvanceStreak(unittest.TestCase):
    def test_first_solve_starts_at_one(self):
        state = advance_streak(StreakState(), D, correct=True)
        self.assertEqual(state, StreakState(streak=1, last_played=D, best_streak=1))

    def test_consecutive_days_increment(self):
        state = advance_streak(StreakState(), D, True)
        state = advance_streak(state, D + timedelta(days=1), True)
        self.assertEqual(state.streak, 2)
        self.assertEqual(state.last_played, D + timedelta(days=1))

    def test_gap_resets_to_one(self):
        state = advance_streak(StreakState(), D, True)
        state = advance_streak(state, D + timedelta(days=3), True)
        self.assertEqual(state.streak, 1)
        self.assertEqual(state.best_streak, 1)

    def test_locked_day_resets_to_zero(self):
        state = StreakState(streak=4, last_played=D, best_streak=6)
        state = advance_streak(state, D + timedelta(days=1), False)
        self.assertEqual(state, StreakState(streak=0, last_played=D + timedelta(days=1), best_streak=6))
        state = advance_streak(state, D + timedelta(days=2), True)
        self.assertEqual(state.streak, 1)

    def test_closing_same_or_past_day_is_a_noop(self):
        state = StreakState(streak=3, last_played=D, best_streak=3)
        self.assertEqual(advance_streak(state, D, True), state)
        self.assertEqual(advance_streak(state, D - timedelta(days=5), False), state)

    def test_best_streak_tracks_maximum(self):
        state = StreakState()
        for offset in range(4):
            state = advance_streak(state, D + timedelta(days=offset), True)
        state = advance_streak(state, D + timedelta(days=4), False)
        state = advance_streak(state, D + timedelta(days=5), True)
        self.assertEqual(state.streak, 1)
        self.assertEqual(state.best_streak, 4)


class TestCurrentStreak(unittest.TestCase):
    def test_projection(self):
        state = StreakState(streak=5, last_played=D, best_streak=5)
        self.assertEqual(current_streak(state, D), 5)
        self.assertEqual(current_streak(state, D + timedelta(days=1)), 5)
        self.assertEqual(current_streak(state, D + timedelta(days=2)), 0)
        self.assertEqual(current_streak(StreakState(), D), 0)


class TestHistoryStreaks(unittest.TestCase):
    def test_streak_ending_today(self):
        history = {D - timedelta(days=2): True, D - timedelta(days=1): True, D: True}
        self.assertEqual(streak_from_history(history, D), 3)

    def test_unsolved_today_counts_from_yesterday(self):
        history = {D - timedelta(days=2): True, D - timedelta(days=1): True}
        self.assertEqual(streak_from_history(history, D), 2)
        history[D] = False
        self.assertEqual(streak_from_history(history, D), 2)

    def test_broken_history(self):
        history = {D - timedelta(days=3): True, D - timedelta(days=1): False}
        self.assertEqual(streak_from_history(history, D), 0)
        self.assertEqual(streak_from_history({}, D), 0)

    def test_longest_streak(self):
        days = [D, D + timedelta(days=1), D + timedelta(days=2), D + timedelta(days=5), D + timedelta(days=6), D]
        self.assertEqual(longest_streak(days), 3)
        self.assertEqual(longest_streak([]), 0)
        self.assertEqual(longest_streak(reversed(days)), 3)


if __name__ == "__main__":
    unittest.main()
