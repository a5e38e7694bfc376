# src/ascend/storage/http_store.py
"""
REST client for a remote goal-record store.

Talks to the routes served by :mod:`ascend.api_server` (or any server with
the same contract):

    GET    {base_url}/            list all records
    POST   {base_url}/            create one record
    PUT    {base_url}/{id}        replace one record
    POST   {base_url}/reorder     replace the whole ordered list
    DELETE {base_url}/{id}        delete one record
    GET    {base_url}/progress    progress-by-period report

Reads degrade to empty results on any transport or payload failure. Writes
raise :class:`~ascend.exceptions.RecordWriteError`; nothing is retried.
"""

import asyncio
import json
import logging
from datetime import datetime
from typing import Any, List, Optional

import aiohttp
from pydantic import ValidationError

from ..exceptions import GoalNotFoundError, RecordWriteError
from ..models import Goal, ProgressReport

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0


class HttpGoalStore:
    """
    Goal-record store backed by a REST API.

    The aiohttp session is created lazily on first use; call :meth:`close`
    (or use the store as an async context manager) to release it.

    Args:
        base_url: Collection URL, e.g. ``http://localhost:3001/api/goals``.
        timeout: Per-request timeout in seconds.
        session: Optional externally managed aiohttp session.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        if not base_url:
            raise ValueError("HttpGoalStore requires a base_url")
        self._base_url = base_url.rstrip("/")
        self._timeout = float(timeout)
        self._session = session
        self._owns_session = session is None
        logger.info("HttpGoalStore configured for %s", self._base_url)

    async def __aenter__(self) -> "HttpGoalStore":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _get_session(self) -> aiohttp.ClientSession:
        """Gets or creates the aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self._timeout))
            self._owns_session = True
            logger.debug("Created new aiohttp.ClientSession for HttpGoalStore")
        return self._session

    async def close(self) -> None:
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None

    # ----- reads --------------------------------------------------------------

    async def list_goals(self) -> List[Goal]:
        try:
            session = await self._get_session()
            async with session.get(f"{self._base_url}/") as response:
                response.raise_for_status()
                payload = await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as exc:
            logger.error("Failed to load goals from %s: %s", self._base_url, exc)
            return []

        if not isinstance(payload, list):
            logger.error("Unexpected goal list payload from %s: %r", self._base_url, type(payload).__name__)
            return []

        goals = []
        for item in payload:
            try:
                goals.append(Goal.from_dict(item))
            except ValidationError as exc:
                logger.warning("Skipping malformed goal record from %s: %s", self._base_url, exc)
        return goals

    async def progress_report(self, now: Optional[datetime] = None) -> ProgressReport:
        """Fetch the server-side report; ``now`` is decided by the server."""
        try:
            session = await self._get_session()
            async with session.get(f"{self._base_url}/progress") as response:
                response.raise_for_status()
                payload = await response.json()
            return ProgressReport.model_validate(payload)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as exc:
            # pydantic.ValidationError is a ValueError
            logger.error("Failed to load progress data from %s: %s", self._base_url, exc)
            return ProgressReport()

    # ----- writes -------------------------------------------------------------

    async def create_goal(self, goal: Goal) -> Goal:
        payload = await self._write("POST", f"{self._base_url}/", [goal.id], json=goal.to_dict())
        return self._goal_from_response(payload, goal)

    async def replace_goal(self, goal: Goal) -> Goal:
        payload = await self._write("PUT", f"{self._base_url}/{goal.id}", [goal.id], json=goal.to_dict())
        return self._goal_from_response(payload, goal)

    async def replace_all(self, goals: List[Goal]) -> List[Goal]:
        await self._write(
            "POST",
            f"{self._base_url}/reorder",
            [g.id for g in goals],
            json=[g.to_dict() for g in goals],
        )
        return list(goals)

    async def delete_goal(self, goal_id: str) -> None:
        await self._write("DELETE", f"{self._base_url}/{goal_id}", [goal_id])

    async def _write(self, method: str, url: str, goal_ids: List[str], **kwargs: Any) -> Any:
        try:
            session = await self._get_session()
            async with session.request(method, url, **kwargs) as response:
                if response.status == 404 and len(goal_ids) == 1:
                    raise GoalNotFoundError(goal_ids[0])
                if response.status >= 400:
                    body = await response.text()
                    raise RecordWriteError(
                        f"{method} {url} failed with HTTP {response.status}: {body[:200]}",
                        goal_ids=goal_ids,
                        retryable=response.status >= 500 or response.status == 429,
                    )
                text = await response.text()
                if not text:
                    return None
                try:
                    return json.loads(text)
                except ValueError:
                    logger.warning("Ignoring non-JSON response body from %s %s", method, url)
                    return None
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.error("%s %s failed: %s", method, url, exc)
            raise RecordWriteError(f"{method} {url} failed: {exc}", goal_ids=goal_ids)

    @staticmethod
    def _goal_from_response(payload: Any, fallback: Goal) -> Goal:
        if not isinstance(payload, dict):
            return fallback
        try:
            return Goal.from_dict(payload)
        except ValidationError:
            return fallback
