"""Task and subgoal routers - status changes and comments."""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import Optional

from app.database import get_database
from app.models.subgoal import StatusUpdate, SubGoal
from app.models.task import Task, TaskCommentCreate, TaskUpdate
from app.routers.auth import get_current_user_id
from app.services.goal_service import GoalService
from app.services.task_service import TaskService


router = APIRouter(prefix="/tasks", tags=["tasks"])
subgoals_router = APIRouter(prefix="/subgoals", tags=["subgoals"])


def _not_found(e: ValueError) -> HTTPException:
    # Malformed IDs are client errors, everything else is a missing record
    if "Invalid" in str(e):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("", response_model=list[Task])
async def list_tasks(
    status_filter: Optional[str] = Query(None, alias="status", description="Filter by status"),
    priority: Optional[str] = Query(None, description="Filter by priority"),
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    List tasks assigned to the current user.

    Args:
        status_filter: Optional status filter
        priority: Optional priority filter (low, medium, high)
        user_id: Current user ID (from token)
        db: Database connection

    Returns:
        List of tasks
    """
    service = TaskService(db)
    return await service.list_tasks(user_id=user_id, status=status_filter, priority=priority)


@router.get("/{task_id}", response_model=Task)
async def get_task(
    task_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Get a single task.

    Raises:
        HTTPException: If task not found (404) or invalid ID (400)
    """
    service = TaskService(db)
    try:
        return await service.get_task(user_id=user_id, task_id=task_id)
    except ValueError as e:
        raise _not_found(e)


@router.patch("/{task_id}", response_model=Task)
async def update_task(
    task_id: str,
    task_update: TaskUpdate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Update a task's status, priority, due date or assignee.

    Raises:
        HTTPException: If task not found (404) or invalid ID (400)
    """
    service = TaskService(db)
    try:
        return await service.update_task(user_id=user_id, task_id=task_id, task_update=task_update)
    except ValueError as e:
        raise _not_found(e)


@router.post("/{task_id}/comments", response_model=Task)
async def add_task_comment(
    task_id: str,
    comment: TaskCommentCreate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Set a task's status and append a comment.

    Raises:
        HTTPException: If task not found (404) or invalid ID (400)
    """
    service = TaskService(db)
    try:
        return await service.add_comment(user_id=user_id, task_id=task_id, comment=comment)
    except ValueError as e:
        raise _not_found(e)


@subgoals_router.patch("/{subgoal_id}/status", response_model=SubGoal)
async def update_subgoal_status(
    subgoal_id: str,
    status_update: StatusUpdate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Set a subgoal's status.

    Raises:
        HTTPException: If subgoal not found (404) or invalid ID (400)
    """
    service = GoalService(db)
    try:
        return await service.update_subgoal_status(
            user_id=user_id,
            subgoal_id=subgoal_id,
            status=status_update.status,
        )
    except ValueError as e:
        raise _not_found(e)
