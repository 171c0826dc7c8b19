import logging
from datetime import date, datetime
from typing import Iterable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy import func

from db import models
from schemas import modle_schema
from utils.dates import days_since_epoch, yesterday_of
from utils.errors import ContentUnavailable
from utils.fuzzy import normalize_title

logger = logging.getLogger(__name__)


def daily_index(day: date, count: int) -> int:
    """Deterministic puzzle position for a date over a pool of `count` puzzles."""
    if count <= 0:
        raise ValueError("count must be positive")
    return days_since_epoch(day) % count


def get_issued_puzzle(db: Session, language: modle_schema.Language, day: date) -> Optional[models.ModlePuzzle]:
    issued = (
        db.query(models.ModleDailyPuzzle)
        .filter(models.ModleDailyPuzzle.language == language.value, models.ModleDailyPuzzle.play_date == day)
        .first()
    )
    return issued.puzzle if issued else None


def get_puzzle_for_date(db: Session, language: modle_schema.Language, day: date) -> models.ModlePuzzle:
    """
    Returns the puzzle issued for (language, day).

    The first call for a pair picks from the current pool and records the pick;
    every later call returns that same puzzle, whatever was loaded since.
    The pick skips the puzzle issued the day before when the pool allows it.
    Raises ContentUnavailable when the language has no puzzles.
    """
    issued = get_issued_puzzle(db, language, day)
    if issued is not None:
        return issued

    puzzles = (
        db.query(models.ModlePuzzle)
        .filter(models.ModlePuzzle.language == language.value)
        .order_by(models.ModlePuzzle.index.asc())
        .all()
    )
    if not puzzles:
        logger.error(f"No Modle puzzles available for {language.value}")
        raise ContentUnavailable(f"No puzzles found for language: {language.value}", language=language.value)

    index = daily_index(day, len(puzzles))
    previous = get_issued_puzzle(db, language, yesterday_of(day))
    if previous is not None and len(puzzles) > 1 and puzzles[index].id == previous.id:
        index = (index + 1) % len(puzzles)
    puzzle = puzzles[index]

    db.add(models.ModleDailyPuzzle(
        language=language.value,
        play_date=day,
        puzzle_id=puzzle.id,
        created_at=datetime.utcnow(),
    ))
    try:
        db.commit()
    except IntegrityError:
        # Otra petición emitió el puzzle del día primero: gana la suya
        db.rollback()
        issued = get_issued_puzzle(db, language, day)
        if issued is None:
            raise
        return issued

    logger.info(f"Issued Modle puzzle {puzzle.id} for {language.value} {day}")
    return puzzle


def to_puzzle_out(puzzle: models.ModlePuzzle, day: date) -> modle_schema.PuzzleOut:
    return modle_schema.PuzzleOut(
        id=puzzle.id,
        answer=puzzle.answer,
        hints=list(puzzle.hints or []),
        language=puzzle.language,
        meta=puzzle.meta or {},
        date=day,
    )


def load_puzzles(db: Session, language: modle_schema.Language, items: Iterable[modle_schema.PuzzleIn]) -> int:
    """
    Appends puzzles to a language after its current last index.
    Answers are stored trimmed and uppercased; returns how many rows were added.
    """
    last_index = (
        db.query(func.max(models.ModlePuzzle.index))
        .filter(models.ModlePuzzle.language == language.value)
        .scalar()
    )
    next_index = 0 if last_index is None else last_index + 1

    added = 0
    for item in items:
        answer = item.answer.strip().upper()
        if not normalize_title(answer):
            logger.warning(f"Skipping puzzle with empty answer for {language.value}")
            continue
        db.add(models.ModlePuzzle(
            language=language.value,
            index=next_index,
            answer=answer,
            hints=[h.strip() for h in item.hints],
            meta=item.meta,
            created_at=datetime.utcnow(),
        ))
        next_index += 1
        added += 1

    db.commit()
    return added


def get_puzzle_stats(db: Session) -> modle_schema.PuzzleStats:
    rows = (
        db.query(
            models.ModlePuzzle.language,
            func.count(models.ModlePuzzle.id),
            func.max(models.ModlePuzzle.created_at),
        )
        .group_by(models.ModlePuzzle.language)
        .order_by(models.ModlePuzzle.language.asc())
        .all()
    )
    by_language = {
        lang: modle_schema.PuzzleLanguageStats(count=count, last_added=last_added)
        for lang, count, last_added in rows
    }
    return modle_schema.PuzzleStats(total=sum(s.count for s in by_language.values()), by_language=by_language)
