from datetime import timedelta

import pytest
from sqlalchemy import text

from repository import modle_repo, puzzle_repo
from schemas.modle_schema import Language, PuzzleIn
from utils.errors import ConcurrentUpdate, ContentUnavailable, DailyLimitReached, InvalidGuess, StaleDate

from conftest import TODAY

YESTERDAY = TODAY - timedelta(days=1)


def submit(db, user, guess, language=Language.english, today=TODAY, **kwargs):
    return modle_repo.submit_result(db, user.id, language, guess, today, **kwargs)


def test_correct_guess_closes_day_and_starts_streak(seeded_db, user):
    result = submit(seeded_db, user, "parasyte")

    assert result["correct"] is True
    assert result["closed"] is True
    assert result["solved_answer"] == "PARASITE"
    assert result["primary_streak"] == 1
    assert result["global"].history[TODAY].guesses == ["PARASYTE"]
    assert result["language"].streak == 1

    seeded_db.refresh(user)
    assert (user.modle_streak, user.modle_best_streak, user.modle_last_played) == (1, 1, TODAY)
    assert modle_repo.can_attempt(seeded_db, user.id, TODAY) is False


def test_wrong_guess_keeps_day_open_without_revealing_answer(seeded_db, user):
    result = submit(seeded_db, user, "Memento")

    assert result["correct"] is False
    assert result["closed"] is False
    assert result["solved_answer"] is None
    entry = modle_repo.get_entry(seeded_db, user.id, TODAY)
    assert entry.guesses == ["MEMENTO"]
    assert entry.guesses_status == [False]
    assert modle_repo.can_continue(entry, Language.english)
    assert not modle_repo.can_continue(entry, Language.hindi)


def test_solve_after_misses(seeded_db, user):
    submit(seeded_db, user, "Memento")
    submit(seeded_db, user, "Parasites")  # distance 1: accepted

    entry = modle_repo.get_entry(seeded_db, user.id, TODAY)
    assert entry.closed and entry.correct
    assert entry.guesses_status == [False, True]
    assert entry.closed_at is not None


def test_open_day_keeps_its_answer_after_new_content(seeded_db, user):
    submit(seeded_db, user, "Oldboy")
    puzzle_repo.load_puzzles(seeded_db, Language.english, [
        PuzzleIn(answer="Inception", hints=["Dreams."]),
        PuzzleIn(answer="Memento", hints=["Backwards."]),
    ])

    result = submit(seeded_db, user, "Parasite")
    assert result["correct"] is True
    assert result["solved_answer"] == "PARASITE"


def test_day_locks_when_guess_budget_is_spent(seeded_db, user):
    # Hindi puzzle has 3 hints, so 3 guesses
    for guess in ("Sholay", "Devdas"):
        assert submit(seeded_db, user, guess, language=Language.hindi)["closed"] is False
    result = submit(seeded_db, user, "Swades", language=Language.hindi)

    assert result["closed"] is True
    assert result["correct"] is False
    assert result["solved_answer"] == "LAGAAN"
    assert result["primary_streak"] == 0

    with pytest.raises(DailyLimitReached) as exc:
        submit(seeded_db, user, "Lagaan", language=Language.hindi)
    assert exc.value.closing_language == "Hindi"


def test_other_language_is_refused_once_day_is_taken(seeded_db, user):
    submit(seeded_db, user, "Parasite")

    with pytest.raises(DailyLimitReached) as exc:
        submit(seeded_db, user, "Lagaan", language=Language.hindi)
    assert exc.value.closing_language == "English"
    assert exc.value.to_detail() == {
        "reason": "dailyLimitReached",
        "message": modle_repo.ALREADY_PLAYED_MSG,
        "closing_language": "English",
    }


def test_open_entry_also_blocks_other_languages(seeded_db, user):
    submit(seeded_db, user, "Memento")
    with pytest.raises(DailyLimitReached) as exc:
        submit(seeded_db, user, "Lagaan", language=Language.hindi)
    assert exc.value.closing_language == "English"

    entry = modle_repo.get_entry(seeded_db, user.id, TODAY)
    assert entry.language == "English"
    assert entry.guesses == ["MEMENTO"]


def test_streak_increments_on_consecutive_days(seeded_db, make_user):
    player = make_user(modle_streak=3, modle_best_streak=3, modle_last_played=YESTERDAY)

    result = submit(seeded_db, player, "Parasite")

    assert result["primary_streak"] == 4
    assert result["global"].best_streak == 4
    # No English history yesterday: the per-language streak is derived from its own days
    assert result["language"].streak == 1


def test_streak_restarts_after_gap(seeded_db, make_user):
    player = make_user(modle_streak=7, modle_best_streak=7, modle_last_played=TODAY - timedelta(days=3))
    assert modle_repo.get_global_status(seeded_db, player, TODAY)["streak"] == 0

    result = submit(seeded_db, player, "Parasite")
    assert result["primary_streak"] == 1
    assert result["global"].best_streak == 7


def test_repeated_guess_is_idempotent(seeded_db, user):
    first = submit(seeded_db, user, "Memento")
    again = submit(seeded_db, user, "memento!")
    assert again["closed"] is first["closed"] is False
    assert modle_repo.get_entry(seeded_db, user.id, TODAY).guesses == ["MEMENTO"]

    submit(seeded_db, user, "Parasite")
    retry = submit(seeded_db, user, "Parasite")
    assert retry["correct"] is True
    assert retry["closed"] is True
    assert retry["primary_streak"] == 1

    seeded_db.refresh(user)
    assert user.modle_streak == 1


def test_stale_client_date_is_rejected(seeded_db, user):
    with pytest.raises(StaleDate) as exc:
        submit(seeded_db, user, "Parasite", client_date=YESTERDAY)
    assert exc.value.status_code == 409
    assert exc.value.to_detail()["today"] == TODAY.isoformat()
    assert modle_repo.can_attempt(seeded_db, user.id, TODAY)


def test_guess_without_letters_is_invalid(seeded_db, user):
    with pytest.raises(InvalidGuess):
        submit(seeded_db, user, " ?! ")
    assert modle_repo.can_attempt(seeded_db, user.id, TODAY)


def test_language_without_content(seeded_db, user):
    with pytest.raises(ContentUnavailable):
        submit(seeded_db, user, "Vikram", language=Language.tamil)


def test_unknown_user(seeded_db):
    with pytest.raises(ValueError):
        modle_repo.submit_result(seeded_db, 999, Language.english, "Parasite", TODAY)


def test_lost_insert_race_reports_winner(seeded_db, user, monkeypatch):
    submit(seeded_db, user, "Sholay", language=Language.hindi)

    real_get_entry = modle_repo.get_entry
    calls = {"n": 0}

    def racing_get_entry(db, user_id, day):
        # El primer lector no ve la fila que otro dispositivo ya insertó
        calls["n"] += 1
        return None if calls["n"] == 1 else real_get_entry(db, user_id, day)

    monkeypatch.setattr(modle_repo, "get_entry", racing_get_entry)

    with pytest.raises(DailyLimitReached) as exc:
        submit(seeded_db, user, "Parasite")
    assert exc.value.closing_language == "Hindi"

    entry = real_get_entry(seeded_db, user.id, TODAY)
    assert entry.language == "Hindi"
    assert entry.guesses == ["SHOLAY"]


def test_stale_version_loses_compare_and_set(seeded_db, user, monkeypatch):
    submit(seeded_db, user, "Memento")

    stale = modle_repo.get_entry(seeded_db, user.id, TODAY)
    seeded_db.expunge(stale)
    seeded_db.execute(
        text("UPDATE modle_daily_entries SET version = version + 1 WHERE id = :id"),
        {"id": stale.id},
    )
    seeded_db.commit()

    real_get_entry = modle_repo.get_entry
    monkeypatch.setattr(modle_repo, "get_entry", lambda db, user_id, day: stale)

    with pytest.raises(ConcurrentUpdate):
        submit(seeded_db, user, "Parasite")

    entry = real_get_entry(seeded_db, user.id, TODAY)
    assert entry.guesses == ["MEMENTO"]
    assert entry.closed is False
    seeded_db.refresh(user)
    assert user.modle_streak == 0


def test_language_status_flags(seeded_db, user):
    submit(seeded_db, user, "Parasite")

    english = modle_repo.get_language_status(seeded_db, user, Language.english, TODAY)
    assert english["completed_today"] is True
    assert english["daily_limit_reached"] is True
    assert english["max_guesses"] == 5
    assert english["primary_streak"] == 1

    hindi = modle_repo.get_language_status(seeded_db, user, Language.hindi, TODAY)
    assert hindi["can_play"] is False
    assert hindi["completed_today"] is False
    assert hindi["closing_language"] == "English"
    assert hindi["max_guesses"] == 3
    assert hindi["language"].history == {}
    assert TODAY in hindi["global"].history

    tamil = modle_repo.get_language_status(seeded_db, user, Language.tamil, TODAY)
    assert tamil["max_guesses"] is None


def test_global_status_before_and_after_playing(seeded_db, user):
    before = modle_repo.get_global_status(seeded_db, user, TODAY)
    assert before["can_play"] is True
    assert before["played_today"] is False
    assert before["history"] == {}

    submit(seeded_db, user, "Memento")
    during = modle_repo.get_global_status(seeded_db, user, TODAY)
    assert during["can_play"] is False
    assert during["played_today"] is True
    assert during["daily_limit_reached"] is False

    tomorrow = modle_repo.get_global_status(seeded_db, user, TODAY + timedelta(days=1))
    assert tomorrow["can_play"] is True
