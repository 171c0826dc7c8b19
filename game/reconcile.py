# -*- coding: utf-8 -*-
"""
Optimistic update, then reconcile.

Phase 1 mutates the local PuzzleSession so the view reacts at once.
Phase 2 writes to the store and re-reads language + global status; that
re-read overwrites whatever phase 1 did. A failed write restores the
snapshot taken before phase 1 (ROLLED_BACK), so a network error never
leaves a half-closed day behind.
"""
import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional

from game.api_client import GLOBAL_SCOPE, ModleApiClient
from game.errors import (
    AlreadyPlayedToday,
    ContentUnavailable,
    ModleError,
    NetworkFailure,
)
from game.events import EventKind, ModleEvent, StatusChannel
from game.session import GuessAttempt, PuzzleSession, SessionSnapshot

logger = logging.getLogger(__name__)


class UpdatePhase(str, Enum):
    optimistic = "optimistic"
    reconciled = "reconciled"
    rolled_back = "rolled_back"


class SubmissionInFlight(ModleError):
    def __init__(self, message: str = "Hold on, your previous guess is still being checked."):
        super().__init__(message)


@dataclass
class PendingUpdate:
    attempt: GuessAttempt
    snapshot: SessionSnapshot
    phase: UpdatePhase = UpdatePhase.optimistic
    error: Optional[ModleError] = None
    server_correct: Optional[bool] = None

    def reconcile(self, server_correct: Optional[bool]):
        if self.phase is not UpdatePhase.optimistic:
            raise RuntimeError(f"Cannot reconcile an update that is already {self.phase.value}")
        self.phase = UpdatePhase.reconciled
        self.server_correct = server_correct

    def roll_back(self, error: ModleError):
        if self.phase is not UpdatePhase.optimistic:
            raise RuntimeError(f"Cannot roll back an update that is already {self.phase.value}")
        self.phase = UpdatePhase.rolled_back
        self.error = error


class ModleGame:
    """
    Owns one PuzzleSession and every external effect around it.
    """

    def __init__(
        self,
        api: ModleApiClient,
        language: str,
        day: date,
        channel: Optional[StatusChannel] = None,
    ):
        self.api = api
        self.language = language
        self.session = PuzzleSession(language, day)
        self.channel = channel or StatusChannel()
        self.streak = 0
        self.language_streak = 0
        self._submitting = False

    @property
    def submitting(self) -> bool:
        return self._submitting

    @property
    def can_submit(self) -> bool:
        return not self._submitting and self.session.accepts_guesses

    async def load(self) -> PuzzleSession:
        """Fetches the puzzle, then the authoritative status. Raises ContentUnavailable on a failed fetch."""
        try:
            puzzle = await self.api.get_puzzle(self.language, self.session.date)
        except ModleError as e:
            self.session.load_failed(e.message)
            self._publish(EventKind.loaded, error=e.message)
            raise ContentUnavailable(e.message) from e

        self.session.load(puzzle)
        await self.refresh()
        self._publish(EventKind.loaded)
        return self.session

    async def refresh(self):
        """Authoritative re-read of both the played language and the global scope."""
        language_status, global_status = await asyncio.gather(
            self.api.get_status(self.language),
            self.api.get_status(GLOBAL_SCOPE),
        )
        self.session.apply_status(global_status)
        self.streak = global_status.get("streak", 0)
        self.language_streak = (language_status.get("language") or {}).get("streak", 0)
        self._publish(EventKind.status)

    async def submit(self, text: str) -> PendingUpdate:
        """
        Two-phase guess submission.
        Local refusals (HintRequired, InvalidGuess, AlreadyPlayedToday) raise before anything is sent.
        """
        if self._submitting:
            raise SubmissionInFlight()

        snapshot = self.session.snapshot()
        attempt = self.session.submit_guess(text)
        pending = PendingUpdate(attempt=attempt, snapshot=snapshot)
        self._publish(EventKind.optimistic)

        self._submitting = True
        try:
            try:
                result = await self.api.post_result(self.language, attempt.normalized, self.session.date)
            except AlreadyPlayedToday as e:
                self._roll_back(pending, e)
                self.session.mark_taken(e.closing_language)
                await self._refresh_after_refusal()
                raise
            except ModleError as e:
                self._roll_back(pending, e)
                raise

            try:
                await self.refresh()
            except NetworkFailure as e:
                # La escritura ya se aplicó: usamos la respuesta del POST como estado autoritativo
                logger.warning(f"Modle status re-read failed after a successful write: {e.message}")
                self.session.apply_status(result)
                self.streak = result.get("primary_streak", self.streak)

            pending.reconcile(result.get("correct"))
            self._publish(EventKind.reconciled)
            return pending
        finally:
            self._submitting = False

    def _roll_back(self, pending: PendingUpdate, error: ModleError):
        self.session.restore(pending.snapshot)
        pending.roll_back(error)
        self._publish(EventKind.rolled_back, error=error.message)

    async def _refresh_after_refusal(self):
        try:
            await self.refresh()
        except NetworkFailure as e:
            logger.warning(f"Modle status refresh failed after a daily-limit refusal: {e.message}")

    def _publish(self, kind: EventKind, error: Optional[str] = None):
        entry = self.session.daily_entry
        self.channel.publish(ModleEvent(
            kind=kind,
            language=self.language,
            streak=self.streak,
            closed=self.session.closed,
            correct=bool(entry and entry.correct and entry.language == self.language),
            blocked=self.session.day_taken,
            error=error,
        ))
