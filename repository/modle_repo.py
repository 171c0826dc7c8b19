import logging
from datetime import date, datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from db import models
from repository import puzzle_repo
from schemas import modle_schema
from utils.errors import ConcurrentUpdate, ContentUnavailable, DailyLimitReached, InvalidGuess, StaleDate
from utils.fuzzy import score_guess
from utils.modle_rules import hint_cap
from utils.streaks import (
    StreakState,
    advance_streak,
    current_streak,
    longest_streak,
    streak_from_history,
)

logger = logging.getLogger(__name__)

ALREADY_PLAYED_MSG = "Already played today's Modle! One puzzle per day across all languages. Come back tomorrow!"


def get_entry(db: Session, user_id: int, day: date) -> Optional[models.ModleDailyEntry]:
    return (
        db.query(models.ModleDailyEntry)
        .filter(models.ModleDailyEntry.user_id == user_id, models.ModleDailyEntry.play_date == day)
        .first()
    )


def can_attempt(db: Session, user_id: int, day: date) -> bool:
    """
    Daily gate: a new attempt is allowed only while no language has an entry for the day.
    Read side only (status flags); writes are refused by the unique (user, date) key in submit_result.
    """
    return get_entry(db, user_id, day) is None


def can_continue(entry: Optional[models.ModleDailyEntry], language: modle_schema.Language) -> bool:
    """An open entry can keep taking guesses, but only in the language that opened it."""
    return entry is not None and not entry.closed and entry.language == language.value


def _blocks(entry: Optional[models.ModleDailyEntry], language: Optional[modle_schema.Language]) -> bool:
    if entry is None:
        return False
    if language is None:
        return entry.closed
    return entry.closed or entry.language != language.value


def ledger_state(user: models.User) -> StreakState:
    return StreakState(
        streak=user.modle_streak or 0,
        last_played=user.modle_last_played,
        best_streak=user.modle_best_streak or 0,
    )


def record_close(db: Session, user: models.User, day: date, correct: bool) -> StreakState:
    """
    Streak ledger: applies the close of `day` to the user row.
    Must run in the same transaction that closed the entry; the caller commits.
    """
    prior = ledger_state(user)
    updated = advance_streak(prior, day, correct)
    if updated != prior:
        user.modle_streak = updated.streak
        user.modle_best_streak = updated.best_streak
        user.modle_last_played = updated.last_played
        db.add(user)
        logger.info(f"Modle streak for user {user.id}: {prior.streak} -> {updated.streak} (closed {day}, correct={correct})")
    return updated


def _to_history_entry(entry: models.ModleDailyEntry) -> modle_schema.HistoryEntry:
    return modle_schema.HistoryEntry(
        date=entry.play_date,
        language=entry.language,
        correct=entry.correct,
        closed=entry.closed,
        guesses=list(entry.guesses or []),
        guesses_status=list(entry.guesses_status or []),
    )


def _user_entries(db: Session, user_id: int, language: Optional[modle_schema.Language] = None):
    query = db.query(models.ModleDailyEntry).filter(models.ModleDailyEntry.user_id == user_id)
    if language is not None:
        query = query.filter(models.ModleDailyEntry.language == language.value)
    return query.order_by(models.ModleDailyEntry.play_date.asc()).all()


def language_view(db: Session, user: models.User, language: modle_schema.Language, today: date) -> modle_schema.StatusView:
    """Per-language projection: streak derived from that language's own history."""
    entries = _user_entries(db, user.id, language)
    solved = {e.play_date: e.correct for e in entries}
    return modle_schema.StatusView(
        history={e.play_date: _to_history_entry(e) for e in entries},
        streak=streak_from_history(solved, today),
        best_streak=longest_streak(d for d, ok in solved.items() if ok),
        last_played=entries[-1].play_date if entries else None,
    )


def global_view(db: Session, user: models.User, today: date) -> modle_schema.StatusView:
    """Union across languages; the streak is the server ledger, the primary streak."""
    entries = _user_entries(db, user.id)
    ledger = ledger_state(user)
    return modle_schema.StatusView(
        history={e.play_date: _to_history_entry(e) for e in entries},
        streak=current_streak(ledger, today),
        best_streak=ledger.best_streak,
        last_played=ledger.last_played,
    )


def _daily_flags(
    db: Session,
    user: models.User,
    today: date,
    language: Optional[modle_schema.Language] = None,
) -> dict:
    entry = get_entry(db, user.id, today)
    blocked = _blocks(entry, language)
    if language is None:
        completed = bool(entry and entry.correct)
    else:
        completed = bool(entry and entry.correct and entry.language == language.value)

    max_guesses = None
    if language is not None:
        try:
            puzzle = puzzle_repo.get_puzzle_for_date(db, language, today)
            max_guesses = hint_cap(len(puzzle.hints or []))
        except ContentUnavailable:
            max_guesses = None

    return {
        "date": today,
        "can_play": not blocked if language is not None else can_attempt(db, user.id, today),
        "played_today": entry is not None,
        "completed_today": completed,
        "daily_limit_reached": blocked,
        "closing_language": entry.language if blocked else None,
        "max_guesses": max_guesses,
    }


def get_language_status(db: Session, user: models.User, language: modle_schema.Language, today: date) -> dict:
    global_status = global_view(db, user, today)
    return {
        **_daily_flags(db, user, today, language),
        "language": language_view(db, user, language, today),
        "global": global_status,
        "primary_streak": global_status.streak,
    }


def get_global_status(db: Session, user: models.User, today: date) -> dict:
    return {
        **_daily_flags(db, user, today),
        **global_view(db, user, today).model_dump(),
    }


def _lock_user(db: Session, user_id: int) -> models.User:
    # FOR UPDATE en Postgres; SQLite serializa las escrituras por su cuenta
    user = db.query(models.User).filter(models.User.id == user_id).with_for_update().first()
    if not user:
        raise ValueError("User not found")
    return user


def _raise_for_lost_race(db: Session, user_id: int, day: date, language: modle_schema.Language):
    db.rollback()
    winner = get_entry(db, user_id, day)
    if winner is not None and _blocks(winner, language):
        logger.info(f"User {user_id} lost the daily race on {day}; closed by {winner.language}")
        raise DailyLimitReached(ALREADY_PLAYED_MSG, closing_language=winner.language)
    logger.warning(f"Concurrent Modle update for user {user_id} on {day}")
    raise ConcurrentUpdate("Another device updated today's puzzle. Refresh and try again.")


def submit_result(
    db: Session,
    user_id: int,
    language: modle_schema.Language,
    guess: str,
    today: date,
    client_date: Optional[date] = None,
) -> dict:
    """
    Scores a guess against today's puzzle and records it.

    Runs as one transaction keyed by (user, today):
    - the user row is locked, the entry is unique per (user, date);
    - every entry write is a compare-and-set on (version, closed=False);
    - the streak ledger is advanced in the same transaction that closes the day.
    A guess already recorded for the day is a no-op that returns the stored state.
    """
    if client_date is not None and client_date != today:
        raise StaleDate(f"Puzzle date {client_date} is not today's ({today}). Reload the puzzle.", today=today.isoformat())

    puzzle = puzzle_repo.get_puzzle_for_date(db, language, today)
    normalized_guess, distance, accepted = score_guess(guess, puzzle.answer)
    if not normalized_guess:
        raise InvalidGuess("Guess must contain at least one letter or digit")
    max_guesses = hint_cap(len(puzzle.hints or []))

    user = _lock_user(db, user_id)
    entry = get_entry(db, user_id, today)

    if entry is None:
        entry = models.ModleDailyEntry(
            user_id=user_id,
            play_date=today,
            language=language.value,
            correct=False,
            closed=False,
            guesses=[],
            guesses_status=[],
            version=1,
            created_at=datetime.utcnow(),
        )
        db.add(entry)
        try:
            db.flush()
        except IntegrityError:
            _raise_for_lost_race(db, user_id, today, language)

    guesses = list(entry.guesses or [])
    if entry.language == language.value and normalized_guess in guesses:
        # Reintento: devuelve el estado existente, incluso si el día ya cerró
        correct, closed = entry.correct, entry.closed
        db.rollback()
        return _result_payload(db, user_id, language, today, puzzle, correct=correct, closed=closed)

    if not can_continue(entry, language):
        closing_language = entry.language
        db.rollback()
        logger.info(f"Daily gate refused user {user_id} in {language.value} on {today}; closed by {closing_language}")
        raise DailyLimitReached(ALREADY_PLAYED_MSG, closing_language=closing_language)

    guesses.append(normalized_guess)
    statuses = list(entry.guesses_status or []) + [accepted]
    closed = accepted or len(guesses) >= max_guesses

    values = {
        models.ModleDailyEntry.guesses: guesses,
        models.ModleDailyEntry.guesses_status: statuses,
        models.ModleDailyEntry.correct: accepted,
        models.ModleDailyEntry.closed: closed,
        models.ModleDailyEntry.version: models.ModleDailyEntry.version + 1,
    }
    if closed:
        values[models.ModleDailyEntry.closed_at] = datetime.utcnow()

    updated = (
        db.query(models.ModleDailyEntry)
        .filter(
            models.ModleDailyEntry.id == entry.id,
            models.ModleDailyEntry.version == entry.version,
            models.ModleDailyEntry.closed.is_(False),
        )
        .update(values, synchronize_session=False)
    )
    if updated != 1:
        _raise_for_lost_race(db, user_id, today, language)

    if closed:
        record_close(db, user, today, accepted)

    db.commit()
    logger.debug(f"Modle guess for user {user_id} ({language.value}, {today}): distance={distance} accepted={accepted}")
    return _result_payload(db, user_id, language, today, puzzle, correct=accepted, closed=closed)


def _result_payload(
    db: Session,
    user_id: int,
    language: modle_schema.Language,
    today: date,
    puzzle: models.ModlePuzzle,
    correct: bool,
    closed: bool,
) -> dict:
    user = db.query(models.User).filter(models.User.id == user_id).first()
    global_status = global_view(db, user, today)
    return {
        "language": language_view(db, user, language, today),
        "global": global_status,
        "primary_streak": global_status.streak,
        "correct": correct,
        "closed": closed,
        "solved_answer": puzzle.answer if closed else None,
    }
