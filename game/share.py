# -*- coding: utf-8 -*-
from typing import Optional

from game.session import PuzzleSession

CORRECT_MARK = "🟩"
WRONG_MARK = "🟥"


def build_share_text(session: PuzzleSession) -> Optional[str]:
    """
    Share text for a finished session, None while the day is still open.
        Modle 2024-05-01 (English)
        3/5
        🟥🟥🟩
    """
    if not session.closed:
        return None

    entry = session.daily_entry
    score_display = str(len(session.guesses)) if entry and entry.correct else "X"
    marks = "".join(CORRECT_MARK if g.accepted else WRONG_MARK for g in session.guesses)
    return f"Modle {session.date.isoformat()} ({session.language})\n{score_display}/{session.max_reveal}\n{marks}"
