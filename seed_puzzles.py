"""
Loads Modle puzzles into the database.

    python seed_puzzles.py puzzles.json
    python seed_puzzles.py https://example.com/modle/puzzles.json

The JSON maps a language to a list of {"answer", "hints", "meta"} objects.
Puzzles are appended after the last index of each language.
"""
import json
import logging
import sys

import requests
from pydantic import ValidationError

from db import database, models  # noqa: F401
from repository import puzzle_repo
from schemas import modle_schema

logger = logging.getLogger(__name__)


def read_source(source: str) -> dict:
    if source.startswith(("http://", "https://")):
        try:
            response = requests.get(source, timeout=30)
            response.raise_for_status()
            return response.json()
        except requests.RequestException as e:
            logger.error(f"Error fetching puzzles from {source}: {e}")
            raise ValueError(f"Could not fetch puzzles from {source}")
    with open(source, encoding="utf-8") as fh:
        return json.load(fh)


def seed(source: str) -> dict[str, int]:
    data = read_source(source)
    database.Base.metadata.create_all(bind=database.engine)

    added = {}
    db = database.SessionLocal()
    try:
        for language_name, items in data.items():
            language = modle_schema.Language(language_name)
            puzzles = [modle_schema.PuzzleIn(**item) for item in items]
            added[language.value] = puzzle_repo.load_puzzles(db, language, puzzles)
    finally:
        db.close()
    return added


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    if len(sys.argv) != 2:
        print("Usage: python seed_puzzles.py <file.json|url>")
        sys.exit(2)
    try:
        result = seed(sys.argv[1])
    except (ValueError, ValidationError) as e:
        print(f"Seed failed: {e}")
        sys.exit(1)
    for lang, count in result.items():
        print(f"{lang}: {count} puzzles added")
