import logging
from datetime import date
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from config import settings
from db import models
from dependencies import get_current_active_user, get_db, get_today
from repository import modle_repo
from schemas import modle_schema
from utils.errors import ModleStoreError
from utils.limiter import limiter

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/users/modle",
    tags=["Modle"]
)


def _parse_scope(language: str) -> Optional[modle_schema.Language]:
    """'global' -> None, otherwise one of the six languages (case-insensitive)."""
    if language.strip().lower() == modle_schema.GLOBAL_SCOPE:
        return None
    for lang in modle_schema.Language:
        if lang.value.lower() == language.strip().lower():
            return lang
    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"reason": "invalidLanguage", "message": f"Invalid language: {language}"},
    )


@router.get("/status", response_model=None)
def get_modle_status(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[models.User, Depends(get_current_active_user)],
    today: Annotated[date, Depends(get_today)],
    language: str = Query(default=settings.MODLE_DEFAULT_LANGUAGE),
):
    """
    Authoritative Modle status.
    `language=<name>` returns that language plus the global view; `language=global` only the global view.
    """
    scope = _parse_scope(language)
    if scope is None:
        return modle_schema.GlobalStatusResponse(**modle_repo.get_global_status(db, current_user, today))
    return modle_schema.LanguageStatusResponse(**modle_repo.get_language_status(db, current_user, scope, today))


@router.post("/result", response_model=modle_schema.ResultResponse)
@limiter.limit(settings.RESULT_RATE_LIMIT)
def post_modle_result(
    request: Request,
    result: modle_schema.ResultRequest,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[models.User, Depends(get_current_active_user)],
    today: Annotated[date, Depends(get_today)],
):
    """
    Validates a guess server side and records it for today.
    409 with reason `dailyLimitReached` when the day is closed or was played in another language.
    """
    try:
        payload = modle_repo.submit_result(
            db,
            current_user.id,
            result.language,
            result.guess,
            today,
            client_date=result.date,
        )
    except ModleStoreError as e:
        raise e.to_http_exception()
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return modle_schema.ResultResponse(**payload)
