import datetime as dt
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class Language(str, Enum):
    english = "English"
    hindi = "Hindi"
    tamil = "Tamil"
    telugu = "Telugu"
    kannada = "Kannada"
    malayalam = "Malayalam"


GLOBAL_SCOPE = "global"


class PuzzleOut(BaseModel):
    id: int
    answer: str
    hints: list[str]
    language: Language
    meta: dict[str, Any] = {}
    date: dt.date


class PuzzleIn(BaseModel):
    answer: str = Field(min_length=1)
    hints: list[str] = Field(min_length=1, max_length=5)
    meta: Optional[dict[str, Any]] = None


class PuzzleLanguageStats(BaseModel):
    count: int
    last_added: Optional[dt.datetime] = None


class PuzzleStats(BaseModel):
    total: int
    by_language: dict[str, PuzzleLanguageStats] = {}


class HistoryEntry(BaseModel):
    date: dt.date
    language: Language
    correct: bool
    closed: bool
    guesses: list[str] = []
    guesses_status: list[bool] = []


class StatusView(BaseModel):
    history: dict[dt.date, HistoryEntry] = {}
    streak: int = 0
    best_streak: int = 0
    last_played: Optional[dt.date] = None


class DailyFlags(BaseModel):
    date: dt.date
    can_play: bool
    played_today: bool
    completed_today: bool
    daily_limit_reached: bool
    closing_language: Optional[Language] = None
    max_guesses: Optional[int] = None


class LanguageStatusResponse(DailyFlags):
    language: StatusView
    global_: StatusView = Field(alias="global")
    primary_streak: int

    model_config = {"populate_by_name": True}


class GlobalStatusResponse(DailyFlags, StatusView):
    pass


class ResultRequest(BaseModel):
    language: Language = Language.english
    guess: str = Field(max_length=200)
    date: Optional[dt.date] = None


class ResultResponse(BaseModel):
    language: StatusView
    global_: StatusView = Field(alias="global")
    primary_streak: int
    correct: bool
    closed: bool
    solved_answer: Optional[str] = None

    model_config = {"populate_by_name": True}
