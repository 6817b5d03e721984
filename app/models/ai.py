"""Models for AI goal suggestions and weekly summaries."""
from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SuggestedTask(BaseModel):
    """Task proposed by the assistant."""

    title: str
    description: str = ""
    estimated_duration: Optional[str] = None  # days, as text

    model_config = ConfigDict(coerce_numbers_to_str=True)


class SuggestedSubGoal(BaseModel):
    """Subgoal proposed by the assistant."""

    title: str
    description: str = ""
    tasks: list[SuggestedTask] = Field(default_factory=list)


class AIGoalSuggestion(BaseModel):
    """Structured goal proposed from a free-text prompt."""

    title: str
    description: str = ""
    subgoals: list[SuggestedSubGoal] = Field(default_factory=list)
    suggested_tags: list[str] = Field(default_factory=list, alias="suggestedTags")
    suggested_deadline: Optional[date] = Field(default=None, alias="suggestedDeadline")

    model_config = ConfigDict(populate_by_name=True)


class GoalSuggestionRequest(BaseModel):
    """Free-text prompt for a goal suggestion."""

    prompt: str = Field(min_length=1)


class CheckIn(BaseModel):
    """Daily check-in entry."""

    date: str
    progress: str
    blockers: str = ""


class WeeklySummaryRequest(BaseModel):
    """Check-ins to summarize."""

    check_ins: list[CheckIn] = Field(default_factory=list)
