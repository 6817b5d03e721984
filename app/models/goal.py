"""Goal model definitions."""
from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from app.models.status import Status, StatusClassification
from app.models.subgoal import SubGoal, SubGoalCreate


class GoalType(str, Enum):
    """Goal ownership types."""

    INDIVIDUAL = "individual"
    TEAM = "team"


class WeeklySummary(BaseModel):
    """AI-generated weekly summary attached to a goal."""

    text: str
    created_at: datetime
    week_number: Optional[int] = None


class GoalBase(BaseModel):
    """Base goal fields."""

    title: str
    description: Optional[str] = None
    goal_type: GoalType = GoalType.INDIVIDUAL
    deadline: Optional[date] = None
    tags: list[str] = Field(default_factory=list)
    team_id: Optional[str] = None


class GoalCreate(GoalBase):
    """Goal creation model with nested subgoals and tasks."""

    subgoals: list[SubGoalCreate] = Field(default_factory=list)


class GoalUpdate(BaseModel):
    """Goal update model - all fields optional."""

    title: Optional[str] = None
    description: Optional[str] = None
    deadline: Optional[date] = None
    tags: Optional[list[str]] = None
    team_id: Optional[str] = None


class Goal(GoalBase):
    """Full goal model with database fields."""

    id: str = Field(alias="_id", serialization_alias="id")
    user_id: str
    slug: str
    status: str = Status.NOT_STARTED.value
    weekly_summaries: list[WeeklySummary] = Field(default_factory=list)
    deleted: bool = False
    deleted_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    subgoals: Optional[list[SubGoal]] = None

    model_config = {"populate_by_name": True}


class SubGoalProgress(BaseModel):
    """Computed progress of one subgoal."""

    id: str
    title: str
    status: str
    progress: int
    task_count: int
    classification: StatusClassification


class GoalDetail(Goal):
    """Goal with its tree and computed progress."""

    progress: int
    task_count: int
    completed_task_count: int
    classification: StatusClassification
    subgoal_progress: list[SubGoalProgress] = Field(default_factory=list)
