# -*- coding: utf-8 -*-
"""
BK-tree over normalized titles.

Answers "which known titles are within N edits of this guess" without
comparing the guess against every title: a node's children are keyed by their
distance to the node, and the triangle inequality lets a query skip every
child whose key is outside [d - max_dist, d + max_dist].
"""
from typing import Iterable, NamedTuple, Optional

from utils.fuzzy import levenshtein, normalize_title


class BKMatch(NamedTuple):
    term: str
    distance: int


class BKNode:
    __slots__ = ("term", "children")

    def __init__(self, term: str):
        self.term = term
        self.children: dict[int, "BKNode"] = {}


class BKTree:
    def __init__(self, terms: Iterable[str] = ()):
        self.root: Optional[BKNode] = None
        self._size = 0
        for term in terms:
            self.add(term)

    def __len__(self) -> int:
        return self._size

    def add(self, term: str) -> bool:
        """
        Inserts a title (normalized first). Returns False for empty or duplicate terms.
        """
        term = normalize_title(term)
        if not term:
            return False
        if self.root is None:
            self.root = BKNode(term)
            self._size = 1
            return True

        node = self.root
        while True:
            d = levenshtein(term, node.term)
            if d == 0:
                return False
            child = node.children.get(d)
            if child is None:
                node.children[d] = BKNode(term)
                self._size += 1
                return True
            node = child

    def query(self, term: str, max_dist: int) -> list[BKMatch]:
        """
        All stored titles within max_dist edits of term, closest first.
        """
        term = normalize_title(term)
        results: list[BKMatch] = []
        if self.root is None or max_dist < 0:
            return results

        stack = [self.root]
        while stack:
            node = stack.pop()
            d = levenshtein(term, node.term)
            if d <= max_dist:
                results.append(BKMatch(node.term, d))
            low, high = d - max_dist, d + max_dist
            for key, child in node.children.items():
                if low <= key <= high:
                    stack.append(child)

        results.sort(key=lambda m: (m.distance, m.term))
        return results

    def best_match(self, term: str, max_dist: int) -> Optional[BKMatch]:
        matches = self.query(term, max_dist)
        return matches[0] if matches else None
