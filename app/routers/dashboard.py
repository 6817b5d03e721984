"""Dashboard router - aggregated views over the user's goals."""
from fastapi import APIRouter, Depends, Query

from app.database import get_database
from app.models.dashboard import (
    DashboardAnalytics,
    DepartmentProgress,
    GoalCard,
    StatusBucket,
    StrategicGroup,
)
from app.routers.auth import get_current_user_id
from app.services import analytics
from app.services.goal_service import GoalService
from app.services.team_service import TeamService


router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/analytics", response_model=DashboardAnalytics)
async def get_analytics(
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Total goals, completion rate, at-risk count and team performance."""
    goals = await GoalService(db).list_goals(user_id=user_id)
    return analytics.compute_analytics(goals)


@router.get("/status-distribution", response_model=list[StatusBucket])
async def get_status_distribution(
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Goal counts per status bucket."""
    goals = await GoalService(db).list_goals(user_id=user_id)
    return analytics.status_distribution(goals)


@router.get("/departments", response_model=list[DepartmentProgress])
async def get_department_progress(
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Weighted progress of goals grouped by department tag."""
    goals = await GoalService(db).list_goals(user_id=user_id)
    return analytics.department_progress(goals)


@router.get("/recent-goals", response_model=list[GoalCard])
async def get_recent_goals(
    limit: int = Query(4, ge=1, le=50, description="Number of goals"),
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Most recently created goals with their progress."""
    goals = await GoalService(db).list_goals(user_id=user_id)
    return analytics.recent_goals(goals, limit=limit)


@router.get("/strategic-map", response_model=list[StrategicGroup])
async def get_strategic_map(
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Goals grouped by team, individual goals last."""
    goals = await GoalService(db).list_goals(user_id=user_id)
    teams = await TeamService(db).list_teams(user_id=user_id)
    return analytics.strategic_map(goals, {team.id: team.name for team in teams})
