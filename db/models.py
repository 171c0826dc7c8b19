from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, Date, DateTime, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime

from db import database

class User(database.Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    email = Column(String, unique=True, index=True)
    username = Column(String, unique=True, index=True)
    is_active = Column(Boolean, default=True)

    # Racha global: la única que el servidor muta (una vez por día cerrado)
    modle_streak = Column(Integer, default=0, nullable=False)
    modle_best_streak = Column(Integer, default=0, nullable=False)
    modle_last_played = Column(Date, nullable=True)

    modle_entries = relationship("ModleDailyEntry", back_populates="user", cascade="all, delete")


class ModlePuzzle(database.Base):
    __tablename__ = "modle_puzzles"
    __table_args__ = (
        UniqueConstraint("language", "index", name="uq_modle_puzzles_language_index"),
    )

    id = Column(Integer, primary_key=True, index=True)
    language = Column(String, nullable=False, index=True)
    # Position within the language, drives deterministic daily selection
    index = Column(Integer, nullable=False)
    answer = Column(String, nullable=False)
    hints = Column(JSON, nullable=False, default=list)
    meta = Column(JSON, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class ModleDailyEntry(database.Base):
    __tablename__ = "modle_daily_entries"
    # One entry per (user, date) whatever the language
    __table_args__ = (
        UniqueConstraint("user_id", "play_date", name="uq_modle_entries_user_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    play_date = Column(Date, nullable=False, index=True)
    language = Column(String, nullable=False)
    correct = Column(Boolean, default=False, nullable=False)
    closed = Column(Boolean, default=False, nullable=False)
    guesses = Column(JSON, nullable=False, default=list)
    guesses_status = Column(JSON, nullable=False, default=list)
    version = Column(Integer, default=1, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    closed_at = Column(DateTime, nullable=True)

    user = relationship("User", back_populates="modle_entries")


class ModleDailyPuzzle(database.Base):
    __tablename__ = "modle_daily_puzzles"
    # Lo emitido para (idioma, fecha) no cambia aunque se carguen más puzzles
    __table_args__ = (
        UniqueConstraint("language", "play_date", name="uq_modle_daily_puzzles_language_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    language = Column(String, nullable=False)
    play_date = Column(Date, nullable=False)
    puzzle_id = Column(Integer, ForeignKey("modle_puzzles.id", ondelete="CASCADE"), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)

    puzzle = relationship("ModlePuzzle")
