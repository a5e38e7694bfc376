# src/ascend/api_server/routes.py
"""
Goal-record REST routes.

The collection is an ordered list of goal records in the camelCase wire
format. These routes are what :class:`~ascend.storage.http_store.HttpGoalStore`
talks to.
"""

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, HTTPException, Request, Response, status

from ..exceptions import GoalNotFoundError, RecordWriteError
from ..models import Goal
from ..storage.base import GoalRecordStore

logger = logging.getLogger(__name__)

router = APIRouter()


def _store(request: Request) -> GoalRecordStore:
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise HTTPException(status_code=503, detail="Goal store is not available.")
    return store


def _write_failed(e: RecordWriteError) -> HTTPException:
    if isinstance(e, GoalNotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if not e.retryable:
        return HTTPException(status_code=409, detail=str(e))
    logger.error("Goal store write failed: %s", e)
    return HTTPException(status_code=503, detail=str(e))


@router.get("/")
async def list_goals(request: Request) -> List[Dict[str, Any]]:
    """Every record, in storage order."""
    goals = await _store(request).list_goals()
    return [g.to_dict() for g in goals]


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_goal(goal: Goal, request: Request) -> Dict[str, Any]:
    """Append a record. Returns 409 if the id is taken."""
    try:
        created = await _store(request).create_goal(goal)
    except RecordWriteError as e:
        raise _write_failed(e)
    logger.info("Created goal %s", created.id)
    return created.to_dict()


@router.post("/reorder")
async def reorder_goals(goals: List[Goal], request: Request) -> List[Dict[str, Any]]:
    """Replace the whole ordered list."""
    try:
        stored = await _store(request).replace_all(goals)
    except RecordWriteError as e:
        raise _write_failed(e)
    return [g.to_dict() for g in stored]


@router.get("/progress")
async def progress(request: Request) -> Dict[str, Any]:
    """Completed-goal counts for the last 7 and 30 days and the months of this year."""
    report = await _store(request).progress_report()
    return report.to_dict()


@router.put("/{goal_id}")
async def replace_goal(goal_id: str, goal: Goal, request: Request) -> Dict[str, Any]:
    """Replace one record in place. The body id must match the path."""
    if goal.id != goal_id:
        raise HTTPException(status_code=400, detail=f"Body id '{goal.id}' does not match path id '{goal_id}'.")
    try:
        stored = await _store(request).replace_goal(goal)
    except RecordWriteError as e:
        raise _write_failed(e)
    return stored.to_dict()


@router.delete("/{goal_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_goal(goal_id: str, request: Request) -> Response:
    """Delete one record; unknown ids are ignored."""
    try:
        await _store(request).delete_goal(goal_id)
    except RecordWriteError as e:
        raise _write_failed(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
