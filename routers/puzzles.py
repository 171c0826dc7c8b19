from datetime import date
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from config import settings
from dependencies import get_db, get_today
from repository import puzzle_repo
from schemas import modle_schema
from utils.errors import ContentUnavailable
from utils.limiter import limiter

router = APIRouter(
    prefix="/puzzles",
    tags=["Puzzles"]
)


@router.get("/daily", response_model=modle_schema.PuzzleOut)
@limiter.limit(settings.PUZZLE_RATE_LIMIT)
def get_daily_puzzle(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
    today: Annotated[date, Depends(get_today)],
    language: modle_schema.Language = Query(default=modle_schema.Language.english),
    puzzle_date: Optional[date] = Query(default=None, alias="date"),
):
    """The puzzle for (language, date); date defaults to today. Same inputs always return the same puzzle."""
    day = puzzle_date or today
    try:
        puzzle = puzzle_repo.get_puzzle_for_date(db, language, day)
    except ContentUnavailable as e:
        raise e.to_http_exception()
    return puzzle_repo.to_puzzle_out(puzzle, day)


@router.get("/stats", response_model=modle_schema.PuzzleStats)
def get_puzzle_stats(db: Annotated[Session, Depends(get_db)]):
    """Puzzle count per language."""
    return puzzle_repo.get_puzzle_stats(db)
