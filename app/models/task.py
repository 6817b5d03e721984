"""Task model definitions (smallest actionable unit)."""
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from app.models.status import ACCEPTED_STATUS_VALUES, Status, StatusClassification, TaskPriority


def validate_status_value(value, allow_blocked: bool = True):
    """Accept any known status spelling, keeping the spelling as sent."""
    if value is None:
        return value
    raw = value.value if isinstance(value, Status) else str(value).strip().lower()
    if raw not in ACCEPTED_STATUS_VALUES:
        raise ValueError(f"Unknown status: {value}")
    if not allow_blocked and raw == Status.BLOCKED.value:
        raise ValueError("Only tasks can be blocked")
    return raw


class TaskBase(BaseModel):
    """Base task fields."""

    title: str
    description: Optional[str] = None
    assigned_to: Optional[str] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[date] = None


class TaskCreate(TaskBase):
    """Task creation model (nested inside a goal creation request)."""

    pass


class TaskUpdate(BaseModel):
    """Task update model - all fields optional."""

    status: Optional[str] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[date] = None
    assigned_to: Optional[str] = None

    @field_validator("status")
    @classmethod
    def check_status(cls, value):
        return validate_status_value(value)


class TaskCommentCreate(BaseModel):
    """Status change with an accompanying comment."""

    status: str
    comment: str = Field(min_length=1)

    @field_validator("status")
    @classmethod
    def check_status(cls, value):
        return validate_status_value(value)


class Task(TaskBase):
    """Full task model with database fields."""

    id: str = Field(alias="_id", serialization_alias="id")
    subgoal_id: str
    status: str = Status.NOT_STARTED.value
    comments: list[str] = Field(default_factory=list)
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    priority_classification: Optional[StatusClassification] = None

    model_config = {"populate_by_name": True}
