# -*- coding: utf-8 -*-
"""
Client-side Modle session.

One PuzzleSession per (user, language, day), rebuilt on every page load from
the store. It decides locally (optimistic) whether a guess matches, but the
store's answer always wins: see game.reconcile.

States:
    LOADING -> READY -> (AWAITING_GUESS <-> HINT_REVEALED) -> SOLVED | LOCKED
"""
import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Optional

from game.errors import AlreadyPlayedToday, ContentUnavailable, HintRequired, InvalidGuess
from utils.fuzzy import acceptance_threshold, levenshtein, normalize_title
from utils.modle_rules import hint_cap

logger = logging.getLogger(__name__)

PLACEHOLDER_ANSWER = "LOADING"
PLACEHOLDER_HINTS = ("Puzzle is loading...", "Please check your connection")


class SessionState(str, Enum):
    loading = "loading"
    ready = "ready"
    awaiting_guess = "awaiting_guess"
    hint_revealed = "hint_revealed"
    solved = "solved"
    locked = "locked"


@dataclass(frozen=True)
class Puzzle:
    language: str
    date: date
    answer: str
    hints: tuple[str, ...]
    meta: dict[str, Any] = field(default_factory=dict)
    placeholder: bool = False

    @classmethod
    def from_payload(cls, payload: dict) -> "Puzzle":
        return cls(
            language=payload["language"],
            date=date.fromisoformat(str(payload["date"])),
            answer=payload["answer"],
            hints=tuple(payload.get("hints") or ()),
            meta=payload.get("meta") or {},
        )

    @classmethod
    def placeholder_for(cls, language: str, day: date) -> "Puzzle":
        return cls(language=language, date=day, answer=PLACEHOLDER_ANSWER, hints=PLACEHOLDER_HINTS, placeholder=True)


@dataclass(frozen=True)
class GuessAttempt:
    raw_text: str
    normalized: str
    distance: int
    accepted: bool


@dataclass(frozen=True)
class DailyEntry:
    date: date
    language: str
    correct: bool
    closed: bool
    guesses: tuple[str, ...] = ()
    guesses_status: tuple[bool, ...] = ()

    @classmethod
    def from_payload(cls, payload: dict) -> "DailyEntry":
        return cls(
            date=date.fromisoformat(str(payload["date"])),
            language=payload["language"],
            correct=bool(payload.get("correct")),
            closed=bool(payload.get("closed")),
            guesses=tuple(payload.get("guesses") or ()),
            guesses_status=tuple(bool(s) for s in payload.get("guesses_status") or ()),
        )


@dataclass(frozen=True)
class SessionSnapshot:
    state: SessionState
    guesses: tuple[GuessAttempt, ...]
    revealed_hints: int
    daily_entry: Optional[DailyEntry]


class PuzzleSession:
    def __init__(self, language: str, day: date, max_hints: Optional[int] = None):
        self.language = language
        self.date = day
        self.max_hints = max_hints
        self.state = SessionState.loading
        self.puzzle: Optional[Puzzle] = None
        self.guesses: list[GuessAttempt] = []
        self.revealed_hints = 0
        self.daily_entry: Optional[DailyEntry] = None
        self.error: Optional[str] = None

    def __repr__(self):
        return (
            f"<PuzzleSession {self.language} {self.date} state={self.state.value} "
            f"guesses={len(self.guesses)} hints={self.revealed_hints}/{self.max_reveal}>"
        )

    # -- loading --

    def load(self, puzzle: Puzzle) -> "PuzzleSession":
        self.puzzle = puzzle
        self.error = None
        self.state = SessionState.ready
        self.revealed_hints = max(self.revealed_hints, 1)
        return self

    def load_failed(self, message: str) -> "PuzzleSession":
        """Degraded READY: placeholder puzzle, no guesses accepted until a reload succeeds."""
        logger.warning(f"Modle puzzle unavailable for {self.language} {self.date}: {message}")
        self.puzzle = Puzzle.placeholder_for(self.language, self.date)
        self.error = message
        self.state = SessionState.ready
        self.revealed_hints = max(self.revealed_hints, 1)
        return self

    @property
    def degraded(self) -> bool:
        return self.puzzle is None or self.puzzle.placeholder

    # -- derived --

    @property
    def max_reveal(self) -> int:
        if self.puzzle is None:
            return hint_cap(0, self.max_hints)
        return hint_cap(len(self.puzzle.hints), self.max_hints)

    @property
    def hints_visible(self) -> list[str]:
        if self.puzzle is None:
            return []
        return list(self.puzzle.hints[: self.revealed_hints])

    @property
    def normalized_guesses(self) -> list[str]:
        return [g.normalized for g in self.guesses]

    @property
    def closed(self) -> bool:
        return self.state in (SessionState.solved, SessionState.locked)

    @property
    def day_taken(self) -> bool:
        """Today's entry belongs to another language, or is already closed."""
        entry = self.daily_entry
        return entry is not None and (entry.closed or entry.language != self.language)

    @property
    def accepts_guesses(self) -> bool:
        return (
            self.state in (SessionState.ready, SessionState.awaiting_guess, SessionState.hint_revealed)
            and not self.degraded
            and not self.day_taken
        )

    # -- transitions --

    def _check_open(self):
        if self.closed or self.day_taken:
            closing = self.daily_entry.language if self.daily_entry else self.language
            raise AlreadyPlayedToday(closing_language=closing)
        if self.state is SessionState.loading or self.degraded:
            raise ContentUnavailable(self.error or "Today's puzzle is not loaded yet.")

    def reveal_hint(self) -> int:
        self._check_open()
        if self.revealed_hints < self.max_reveal:
            self.revealed_hints += 1
            self.state = SessionState.hint_revealed
        return self.revealed_hints

    def submit_guess(self, text: str) -> GuessAttempt:
        """
        Scores a guess locally. Raises (without touching state) AlreadyPlayedToday,
        ContentUnavailable, HintRequired or InvalidGuess.
        """
        self._check_open()
        if self.revealed_hints < self.max_reveal and len(self.guesses) >= self.revealed_hints:
            raise HintRequired()

        normalized = normalize_title((text or "").strip())
        if not normalized:
            raise InvalidGuess()
        if normalized in self.normalized_guesses:
            # El servidor ignora repeticiones: no cuentan ni revelan pista
            raise InvalidGuess("Already guessed.")

        answer = normalize_title(self.puzzle.answer)
        distance = levenshtein(normalized, answer)
        attempt = GuessAttempt(
            raw_text=text,
            normalized=normalized,
            distance=distance,
            accepted=distance <= acceptance_threshold(answer),
        )

        self.guesses.append(attempt)
        self.revealed_hints = min(self.max_reveal, self.revealed_hints + 1)

        if attempt.accepted:
            self.close(correct=True)
        elif len(self.guesses) >= self.max_reveal:
            self.close(correct=False)
        else:
            self.state = SessionState.awaiting_guess
        return attempt

    def close(self, correct: bool) -> DailyEntry:
        """Closes the day locally. Closing an already closed day returns the existing entry."""
        if self.daily_entry is not None and self.daily_entry.closed:
            return self.daily_entry
        self.daily_entry = DailyEntry(
            date=self.date,
            language=self.language,
            correct=correct,
            closed=True,
            guesses=tuple(self.normalized_guesses),
            guesses_status=tuple(g.accepted for g in self.guesses),
        )
        self.state = SessionState.solved if correct else SessionState.locked
        return self.daily_entry

    # -- reconciliation --

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            state=self.state,
            guesses=tuple(self.guesses),
            revealed_hints=self.revealed_hints,
            daily_entry=self.daily_entry,
        )

    def restore(self, snapshot: SessionSnapshot):
        self.state = snapshot.state
        self.guesses = list(snapshot.guesses)
        self.revealed_hints = snapshot.revealed_hints
        self.daily_entry = snapshot.daily_entry

    def mark_taken(self, closing_language: Optional[str]):
        """The store refused a write for today: block input until the next status read."""
        if self.daily_entry is None or not self.daily_entry.closed:
            self.daily_entry = DailyEntry(
                date=self.date,
                language=closing_language or self.language,
                correct=False,
                closed=True,
            )

    def apply_entry(self, entry: Optional[DailyEntry]):
        """
        Overwrites local progress with the store's entry for today.
        An entry from another language only records that the day is taken.
        """
        self.daily_entry = entry
        if entry is None:
            self.guesses = []
            if self.state is not SessionState.loading:
                self.state = SessionState.ready
            return
        if entry.language != self.language:
            return

        answer = normalize_title(self.puzzle.answer) if not self.degraded else ""
        statuses = list(entry.guesses_status) + [False] * (len(entry.guesses) - len(entry.guesses_status))
        self.guesses = [
            GuessAttempt(
                raw_text=g,
                normalized=g,
                distance=levenshtein(g, answer) if answer else 0,
                accepted=ok,
            )
            for g, ok in zip(entry.guesses, statuses)
        ]
        self.revealed_hints = max(self.revealed_hints, min(self.max_reveal, len(self.guesses) + 1))

        if entry.closed:
            self.state = SessionState.solved if entry.correct else SessionState.locked
        elif self.guesses:
            self.state = SessionState.awaiting_guess
        elif self.state is not SessionState.loading:
            self.state = SessionState.ready

    def apply_status(self, status: dict):
        """Takes today's entry from a status payload (language or global scope)."""
        key = self.date.isoformat()
        history = (status.get("global") or status).get("history") or {}
        payload = history.get(key)
        self.apply_entry(DailyEntry.from_payload(payload) if payload else None)
