"""
Root pytest configuration.

Sets a test environment before `config` is imported anywhere (in-memory
SQLite, rate limits off) and provides database, user and API fixtures.
"""
import os
from datetime import date

os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key-with-enough-length-for-hs256")

import jwt  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from config import settings  # noqa: E402
from db import database, models  # noqa: E402
from repository import puzzle_repo  # noqa: E402
from schemas import modle_schema  # noqa: E402

TODAY = date(2024, 5, 1)

PUZZLES = {
    modle_schema.Language.english: [
        modle_schema.PuzzleIn(
            answer="Parasite",
            hints=[
                "A poor family schemes its way into a wealthy household.",
                "Won the Palme d'Or in 2019.",
                "Directed by Bong Joon-ho.",
                "First non-English film to win Best Picture.",
                "There is a basement nobody talks about.",
            ],
            meta={"year": 2019, "director": "Bong Joon-ho"},
        ),
    ],
    modle_schema.Language.hindi: [
        modle_schema.PuzzleIn(
            answer="Lagaan",
            hints=["A cricket match decides a village's taxes.", "Set in 1893.", "Starring Aamir Khan."],
        ),
    ],
}


def make_token(user_id: int) -> str:
    return jwt.encode({"sub": str(user_id)}, settings.SECRET_KEY.get_secret_value(), algorithm=settings.ALGORITHM)


@pytest.fixture
def db():
    database.Base.metadata.drop_all(bind=database.engine)
    database.Base.metadata.create_all(bind=database.engine)
    session = database.SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seeded_db(db):
    for language, items in PUZZLES.items():
        puzzle_repo.load_puzzles(db, language, items)
    return db


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make_user(**fields) -> models.User:
        counter["n"] += 1
        n = counter["n"]
        user = models.User(username=f"player{n}", email=f"player{n}@example.com", **fields)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def user(make_user):
    return make_user()


@pytest.fixture
def app_today():
    """Mutable 'today' used by the API; tests move it with app_today['value'] = ..."""
    return {"value": TODAY}


@pytest.fixture
def app(seeded_db, app_today):
    from dependencies import get_today
    from main import app as fastapi_app

    fastapi_app.dependency_overrides[get_today] = lambda: app_today["value"]
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(user):
    return {"Authorization": f"Bearer {make_token(user.id)}"}
