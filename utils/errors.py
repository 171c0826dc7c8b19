# -*- coding: utf-8 -*-
"""
Domain errors raised by the Modle repositories.

Routers turn them into HTTP responses; `reason` is the machine-readable code
sent to clients next to the human message.
"""
from typing import Optional

from fastapi import HTTPException


class ModleStoreError(Exception):
    reason = "modleError"
    status_code = 400

    def __init__(self, message: str, **extra):
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_detail(self) -> dict:
        detail = {"reason": self.reason, "message": self.message}
        detail.update({k: v for k, v in self.extra.items() if v is not None})
        return detail

    def to_http_exception(self) -> HTTPException:
        return HTTPException(status_code=self.status_code, detail=self.to_detail())


class ContentUnavailable(ModleStoreError):
    reason = "contentUnavailable"
    status_code = 404


class InvalidGuess(ModleStoreError):
    reason = "invalidGuess"
    status_code = 422


class DailyLimitReached(ModleStoreError):
    reason = "dailyLimitReached"
    status_code = 409

    def __init__(self, message: str, closing_language: Optional[str] = None, **extra):
        super().__init__(message, closing_language=closing_language, **extra)
        self.closing_language = closing_language


class StaleDate(ModleStoreError):
    reason = "staleDate"
    status_code = 409


class ConcurrentUpdate(ModleStoreError):
    reason = "concurrentUpdate"
    status_code = 409
