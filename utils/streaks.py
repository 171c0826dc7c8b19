# -*- coding: utf-8 -*-
"""
Streak rules for Modle.

The ledger value (StreakState) lives on the user row and is advanced exactly
once per closed day, server side. Everything here is pure: no DB, no clock.

Policy for a day closed without solving (locked): the streak drops to 0 and
last_played moves to that day. The next solved day therefore starts again at 1.
"""
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Mapping, Optional


@dataclass(frozen=True)
class StreakState:
    streak: int = 0
    last_played: Optional[date] = None
    best_streak: int = 0


def advance_streak(state: StreakState, play_date: date, correct: bool) -> StreakState:
    """
    Applies the close of play_date to the ledger.
    Closing a date that is not after last_played changes nothing.
    """
    if state.last_played is not None and play_date <= state.last_played:
        return state

    if not correct:
        return StreakState(streak=0, last_played=play_date, best_streak=state.best_streak)

    if state.last_played is not None and play_date - state.last_played == timedelta(days=1):
        streak = state.streak + 1
    else:
        streak = 1
    return StreakState(streak=streak, last_played=play_date, best_streak=max(state.best_streak, streak))


def current_streak(state: StreakState, today: date) -> int:
    """
    Streak as displayed on `today`: a ledger whose last day is older than
    yesterday is already broken even though nobody wrote it down yet.
    """
    if state.last_played is None:
        return 0
    if today - state.last_played > timedelta(days=1):
        return 0
    return state.streak


def streak_from_history(history: Mapping[date, bool], today: date) -> int:
    """
    Consecutive solved days ending today, or ending yesterday when today is not solved yet.
    history maps date -> correct.
    """
    day = today if history.get(today) else today - timedelta(days=1)
    streak = 0
    while history.get(day):
        streak += 1
        day -= timedelta(days=1)
    return streak


def longest_streak(days: Iterable[date]) -> int:
    """Longest run of consecutive dates among `days` (order and duplicates ignored)."""
    best = run = 0
    previous = None
    for day in sorted(set(days)):
        run = run + 1 if previous is not None and day - previous == timedelta(days=1) else 1
        best = max(best, run)
        previous = day
    return best
