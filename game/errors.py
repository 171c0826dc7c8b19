# -*- coding: utf-8 -*-
"""
Errors surfaced by the Modle client.

Every I/O failure is converted to one of these at the session boundary.
Only the already-played kinds block input (`blocks_input`); the rest are
transient notices.
"""
from typing import Optional


class ModleError(Exception):
    blocks_input = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ContentUnavailable(ModleError):
    """Puzzle fetch failed: show the placeholder, allow retry, never invent an answer."""


class NetworkFailure(ModleError):
    """Any transport error; local state is left untouched and the call can be retried."""


class HintRequired(ModleError):
    """One guess per revealed hint until every hint is visible."""

    def __init__(self, message: str = "Submit a guess to reveal the next hint."):
        super().__init__(message)


class InvalidGuess(ModleError):
    def __init__(self, message: str = "Enter a movie title."):
        super().__init__(message)


class AlreadyPlayedToday(ModleError):
    blocks_input = True

    def __init__(
        self,
        message: str = "Already played today's Modle! Come back tomorrow!",
        closing_language: Optional[str] = None,
    ):
        super().__init__(message)
        self.closing_language = closing_language


class DailyLimitReached(AlreadyPlayedToday):
    """The store refused the write: same handling as AlreadyPlayedToday."""


class ConflictRetry(ModleError):
    """The store saw a concurrent update (or a stale date); reload and try again."""
