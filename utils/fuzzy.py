# -*- coding: utf-8 -*-
"""
Title matching for Modle.

Every comparison works on normalized titles: uppercase, only A-Z and 0-9.
Both functions are total, they never raise for string input.
"""
import math
import re

from config import settings

_NON_ALNUM = re.compile(r"[^A-Z0-9]")


def normalize_title(title: str | None) -> str:
    if not title:
        return ""
    return _NON_ALNUM.sub("", str(title).upper())


def levenshtein(a: str, b: str) -> int:
    """
    Levenshtein distance with two rolling rows.
    The shorter string indexes the rows, so memory is O(min(len(a), len(b))).
    """
    if a == b:
        return 0
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return len(a)

    prev = list(range(len(b) + 1))
    curr = [0] * (len(b) + 1)
    for i, ca in enumerate(a, start=1):
        curr[0] = i
        for j, cb in enumerate(b, start=1):
            cost = 0 if ca == cb else 1
            curr[j] = min(
                prev[j] + 1,         # borrado
                curr[j - 1] + 1,     # inserción
                prev[j - 1] + cost,  # sustitución
            )
        prev, curr = curr, prev
    return prev[len(b)]


def acceptance_threshold(normalized_answer: str) -> int:
    """max(MIN, ceil(RATIO * len(answer)))"""
    scaled = math.ceil(round(settings.MODLE_THRESHOLD_RATIO * len(normalized_answer), 9))
    return max(settings.MODLE_MIN_THRESHOLD, scaled)


def score_guess(guess: str | None, answer: str | None) -> tuple[str, int, bool]:
    """
    Returns (normalized_guess, distance, accepted) for a raw guess against a raw answer.
    """
    normalized_guess = normalize_title(guess)
    normalized_answer = normalize_title(answer)
    distance = levenshtein(normalized_guess, normalized_answer)
    return normalized_guess, distance, distance <= acceptance_threshold(normalized_answer)
