# -*- coding: utf-8 -*-
"""
Explicit channel for Modle state changes.

Views that show the streak or today's result subscribe here instead of
listening for ad-hoc global events.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class EventKind(str, Enum):
    loaded = "loaded"
    optimistic = "optimistic"
    reconciled = "reconciled"
    rolled_back = "rolled_back"
    status = "status"


@dataclass(frozen=True)
class ModleEvent:
    kind: EventKind
    language: str
    streak: Optional[int] = None
    closed: bool = False
    correct: bool = False
    blocked: bool = False
    error: Optional[str] = None


Listener = Callable[[ModleEvent], None]


class StatusChannel:
    def __init__(self):
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Registers a listener; returns the function that unsubscribes it."""
        self._listeners.append(listener)
        return lambda: self.unsubscribe(listener)

    def unsubscribe(self, listener: Listener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def publish(self, event: ModleEvent):
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                # Un listener roto no debe romper la partida
                logger.exception(f"Modle listener failed on {event.kind.value}")
