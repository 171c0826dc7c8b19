# -*- coding: utf-8 -*-
from config import settings


def hint_cap(hint_count: int, max_hints: int | None = None) -> int:
    """
    How many hints can be revealed for a puzzle: min(MODLE_MAX_HINTS, len(hints)), at least 1.
    The same number is the guess budget for the day.
    """
    max_hints = max_hints or settings.MODLE_MAX_HINTS
    return max(1, min(max_hints, hint_count))
