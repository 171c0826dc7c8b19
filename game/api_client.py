# -*- coding: utf-8 -*-
"""
Async HTTP client for the Modle endpoints.

Every failure comes out as a game.errors kind; httpx exceptions never leak
to the session.
"""
import logging
from datetime import date
from typing import Optional

import httpx

from config import settings
from game.errors import (
    ConflictRetry,
    ContentUnavailable,
    DailyLimitReached,
    InvalidGuess,
    ModleError,
    NetworkFailure,
)
from game.session import Puzzle

logger = logging.getLogger(__name__)

GLOBAL_SCOPE = "global"


class ModleApiClient:
    def __init__(
        self,
        token: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.MODLE_API_URL,
            timeout=timeout or settings.MODLE_API_TIMEOUT,
            headers=headers,
            transport=transport,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.aclose()

    async def aclose(self):
        await self._client.aclose()

    async def get_puzzle(self, language: str, day: date) -> Puzzle:
        data = await self._request("GET", "/puzzles/daily", params={"language": language, "date": day.isoformat()})
        return Puzzle.from_payload(data)

    async def get_status(self, scope: str) -> dict:
        """scope: a language name or "global"."""
        return await self._request("GET", "/users/modle/status", params={"language": scope})

    async def post_result(self, language: str, guess: str, day: date) -> dict:
        payload = {"language": language, "guess": guess, "date": day.isoformat()}
        return await self._request("POST", "/users/modle/result", json=payload)

    async def _request(self, method: str, path: str, **kwargs) -> dict:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning(f"Modle request {method} {path} failed: {e}")
            raise NetworkFailure("Unable to reach the server. Please check your connection.") from e

        if response.status_code >= 400:
            raise self._error_from(response)

        try:
            return response.json()
        except ValueError as e:
            raise NetworkFailure("Unexpected response from the server.") from e

    @staticmethod
    def _error_from(response: httpx.Response) -> ModleError:
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        message = body.get("message") if isinstance(body.get("message"), str) else None
        reason = body.get("reason")

        if response.status_code == 409:
            if reason == "dailyLimitReached":
                return DailyLimitReached(message or "Already played today.", closing_language=body.get("closing_language"))
            return ConflictRetry(message or "Today's puzzle changed. Reload and try again.")
        if response.status_code == 404:
            return ContentUnavailable(message or "No puzzle available for today.")
        if response.status_code == 422 and reason == "invalidGuess":
            return InvalidGuess(message)
        return NetworkFailure(message or f"Server error ({response.status_code}).")
