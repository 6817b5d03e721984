"""Goal router - API endpoints for goal management."""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import Optional

from app.database import get_database
from app.models.goal import Goal, GoalCreate, GoalDetail, GoalUpdate, WeeklySummary
from app.models.subgoal import StatusUpdate
from app.routers.ai import get_ai_service
from app.routers.auth import get_current_user_id
from app.services.ai_service import AIService
from app.services.goal_service import GoalService


router = APIRouter(prefix="/goals", tags=["goals"])


@router.post("", response_model=Goal, status_code=status.HTTP_201_CREATED)
async def create_goal(
    goal: GoalCreate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Create a new goal with its subgoals and tasks.

    - Requires authentication
    - Generates unique slug from title
    - Team goals require membership of the team (400 otherwise)
    """
    service = GoalService(db)
    try:
        return await service.create_goal(user_id=user_id, goal_create=goal)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("", response_model=list[Goal])
async def list_goals(
    status_filter: Optional[str] = Query(None, alias="status", description="Filter by status"),
    goal_type: Optional[str] = Query(None, description="Filter by type (individual, team)"),
    team_id: Optional[str] = Query(None, description="Filter by team"),
    tag: Optional[str] = Query(None, description="Filter by tag"),
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    List goals owned by the user or shared through their teams.

    - Requires authentication
    - Newest first, with subgoals and tasks attached
    - Excludes deleted goals
    """
    service = GoalService(db)
    return await service.list_goals(
        user_id=user_id,
        status=status_filter,
        goal_type=goal_type,
        team_id=team_id,
        tag=tag,
    )


@router.get("/{slug}", response_model=GoalDetail)
async def get_goal(
    slug: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Get a single goal with computed progress.

    - Requires authentication
    - Returns 404 if goal not found or deleted
    """
    service = GoalService(db)
    try:
        return await service.get_goal_detail(user_id=user_id, slug=slug)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.patch("/{slug}", response_model=Goal)
async def update_goal(
    slug: str,
    goal_update: GoalUpdate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Update a goal.

    - Requires authentication (owner only)
    - If title is updated, slug is regenerated
    - Returns 404 if goal not found
    - Returns 400 if the new team is not accessible
    """
    service = GoalService(db)
    try:
        return await service.update_goal(
            user_id=user_id,
            slug=slug,
            goal_update=goal_update,
        )
    except ValueError as e:
        code = 404 if str(e) == "Goal not found" else 400
        raise HTTPException(status_code=code, detail=str(e))


@router.patch("/{slug}/status", response_model=Goal)
async def update_goal_status(
    slug: str,
    status_update: StatusUpdate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Set a goal's status.

    - Requires authentication (owner or team member)
    - Returns 404 if goal not found
    """
    service = GoalService(db)
    try:
        return await service.update_goal_status(
            user_id=user_id,
            slug=slug,
            status=status_update.status,
        )
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/{slug}")
async def delete_goal(
    slug: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Soft delete a goal.

    - Requires authentication (owner only)
    - Marks goal as deleted, doesn't remove from database
    - Returns 404 if goal not found
    """
    service = GoalService(db)
    try:
        return await service.delete_goal(user_id=user_id, slug=slug)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/{slug}/weekly-summaries", response_model=list[WeeklySummary])
async def list_weekly_summaries(
    slug: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """List a goal's weekly summaries, oldest first."""
    service = GoalService(db)
    try:
        goal = await service.get_goal_by_slug(user_id=user_id, slug=slug)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return goal.weekly_summaries


@router.post(
    "/{slug}/weekly-summaries",
    response_model=list[WeeklySummary],
    status_code=status.HTTP_201_CREATED,
)
async def create_weekly_summary(
    slug: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
    ai_service: AIService = Depends(get_ai_service),
):
    """
    Generate a weekly summary from the goal's task comments and store it.

    - Requires authentication
    - Falls back to a default summary if generation fails
    - Returns all summaries of the goal
    """
    service = GoalService(db)
    try:
        goal = await service.get_goal_by_slug(user_id=user_id, slug=slug)
        summary = await ai_service.generate_weekly_summary(goal=goal)
        return await service.add_weekly_summary(user_id=user_id, slug=slug, summary=summary)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
