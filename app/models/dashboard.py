"""Dashboard response models."""
from datetime import date
from typing import Optional

from pydantic import BaseModel, Field

from app.models.goal import SubGoalProgress
from app.models.status import StatusClassification


class DashboardAnalytics(BaseModel):
    """Headline numbers for the dashboard."""

    total_goals: int
    completion_rate: int
    at_risk_goals: int
    team_performance: int


class StatusBucket(BaseModel):
    """Number of goals in one status bucket."""

    name: str
    status: str
    value: int
    color: str


class DepartmentProgress(BaseModel):
    """Weighted progress of goals tagged with a department."""

    department: str
    progress: int
    goals: int


class GoalCard(BaseModel):
    """Compact goal summary for lists."""

    id: str
    slug: str
    title: str
    status: str
    progress: int
    estimated: bool
    classification: StatusClassification
    deadline: Optional[date] = None
    team_id: Optional[str] = None
    subgoal_progress: list[SubGoalProgress] = Field(default_factory=list)


class StrategicGroup(BaseModel):
    """Goals grouped under one team on the strategic map."""

    team_id: Optional[str] = None
    name: str
    progress: int
    goals: list[GoalCard] = Field(default_factory=list)
