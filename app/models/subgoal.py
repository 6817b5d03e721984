"""SubGoal model definitions (key results under a goal)."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from app.models.status import Status
from app.models.task import Task, TaskCreate, validate_status_value


class SubGoalBase(BaseModel):
    """Base subgoal fields."""

    title: str
    description: Optional[str] = None
    assigned_to: Optional[str] = None


class SubGoalCreate(SubGoalBase):
    """Subgoal creation model with its initial tasks."""

    tasks: list[TaskCreate] = Field(default_factory=list)


class StatusUpdate(BaseModel):
    """Status change for a goal or subgoal."""

    status: str

    @field_validator("status")
    @classmethod
    def check_status(cls, value):
        return validate_status_value(value, allow_blocked=False)


class SubGoal(SubGoalBase):
    """Full subgoal model with database fields."""

    id: str = Field(alias="_id", serialization_alias="id")
    goal_id: str
    status: str = Status.NOT_STARTED.value
    created_at: datetime
    updated_at: datetime
    tasks: Optional[list[Task]] = None

    model_config = {"populate_by_name": True}
