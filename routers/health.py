from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.orm import Session
from sqlalchemy import func, text
from dependencies import get_db
from db import models
from utils.limiter import limiter
import logging

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/health",
    tags=["health"]
)

@router.get("/live", status_code=status.HTTP_200_OK)
@limiter.exempt
async def health_live(request: Request):
    """
    Liveness: the process answers.
    """
    return {"status": "ok"}

@router.get("/ready", status_code=status.HTTP_200_OK)
@limiter.exempt
def health_ready(request: Request, db: Session = Depends(get_db)):
    """
    Readiness: the database answers. Also reports how many languages have puzzles loaded.
    """
    try:
        db.execute(text("SELECT 1")).scalar()
        languages = db.query(func.count(func.distinct(models.ModlePuzzle.language))).scalar()
    except Exception as e:
        # Solo log interno, no exponer detalles
        logger.error(f"Health check failed: database is down or unreachable. Error: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"status": "fail", "db": "down"}
        )
    return {"status": "ok", "puzzle_languages": languages}
