"""Progress aggregation over the Goal -> SubGoal -> Task tree.

Everything here is pure: no I/O, no shared state. Inputs may be pydantic
models or raw documents, and missing child collections count as empty.
"""
from typing import Any, Optional

from app.models.status import (
    Status,
    StatusClassification,
    TaskPriority,
    is_completed,
    normalize_status,
)


NEUTRAL_STYLE = "outline"
NEUTRAL_COLOR = "#6B7280"

# Single classification table shared by every dashboard view.
STATUS_CLASSIFICATIONS: dict[str, StatusClassification] = {
    "not_started": StatusClassification(
        label="Not Started", style_token="outline", color="#6B7280"
    ),
    "in_progress": StatusClassification(
        label="In Progress", style_token="default", color="#3B82F6"
    ),
    "on_track": StatusClassification(
        label="On Track", style_token="default", color="#3B82F6"
    ),
    "at_risk": StatusClassification(
        label="At Risk", style_token="warning", color="#F59E0B"
    ),
    "blocked": StatusClassification(
        label="Blocked", style_token="destructive", color="#EF4444"
    ),
    "completed": StatusClassification(
        label="Completed", style_token="secondary", color="#10B981"
    ),
}

PRIORITY_CLASSIFICATIONS: dict[str, StatusClassification] = {
    TaskPriority.HIGH.value: StatusClassification(
        label="High", style_token="destructive", color="#EF4444"
    ),
    TaskPriority.MEDIUM.value: StatusClassification(
        label="Medium", style_token="secondary", color="#F59E0B"
    ),
    TaskPriority.LOW.value: StatusClassification(
        label="Low", style_token="outline", color="#6B7280"
    ),
}

# Status-only approximation used when no child data is loaded.
SYNTHETIC_PROGRESS: dict[str, int] = {
    Status.COMPLETED.value: 100,
    Status.IN_PROGRESS.value: 70,
    Status.AT_RISK.value: 40,
}
SYNTHETIC_PROGRESS_DEFAULT = 10


def _field(obj: Any, name: str, default: Any = None) -> Any:
    """Read a field from a model or a plain mapping."""
    if obj is None:
        return default
    if isinstance(obj, dict):
        return obj.get(name, default)
    return getattr(obj, name, default)


def _children(obj: Any, name: str) -> list:
    return list(_field(obj, name) or [])


def percentage(part: int, whole: int) -> int:
    """
    Integer percentage of part/whole, rounded half up.

    Uses integer arithmetic so ties such as 1/8 (12.5%) always round up.

    Examples:
        >>> percentage(1, 3)
        33
        >>> percentage(1, 8)
        13
        >>> percentage(0, 0)
        0
    """
    if whole <= 0:
        return 0
    part = max(0, min(part, whole))
    return (200 * part + whole) // (2 * whole)


def subgoal_progress(subgoal: Any) -> int:
    """
    Completion percentage of a subgoal from its tasks.

    A subgoal with no tasks is 100 if it is itself completed, else 0.
    """
    tasks = _children(subgoal, "tasks")
    if not tasks:
        return 100 if is_completed(_field(subgoal, "status")) else 0

    completed = sum(1 for task in tasks if is_completed(_field(task, "status")))
    return percentage(completed, len(tasks))


def goal_progress(goal: Any) -> int:
    """
    Completion percentage of a goal from its subgoals' statuses.

    A goal with no subgoals is always 0, whatever its own status.
    """
    subgoals = _children(goal, "subgoals")
    if not subgoals:
        return 0

    completed = sum(1 for sg in subgoals if is_completed(_field(sg, "status")))
    return percentage(completed, len(subgoals))


def task_count(goal: Any) -> int:
    """Total number of tasks across all subgoals of a goal."""
    return sum(len(_children(sg, "tasks")) for sg in _children(goal, "subgoals"))


def completed_task_count(goal: Any) -> int:
    """Number of completed tasks across all subgoals of a goal."""
    return sum(
        1
        for sg in _children(goal, "subgoals")
        for task in _children(sg, "tasks")
        if is_completed(_field(task, "status"))
    )


def _humanize(value: str) -> str:
    return " ".join(word.capitalize() for word in value.replace("_", " ").split())


def classify_status(status: Any) -> StatusClassification:
    """
    Map a status value to its label and style token.

    Never raises. Unrecognized values get a neutral classification labelled
    with the humanized value, or "Unknown" when empty.

    Examples:
        >>> classify_status("blocked").label
        'Blocked'
        >>> classify_status("archived").style_token
        'outline'
    """
    if isinstance(status, Status):
        key = status.value
    elif status is None:
        key = ""
    else:
        key = str(status).strip().lower()

    known = STATUS_CLASSIFICATIONS.get(key)
    if known is not None:
        return known

    label = _humanize(key) or "Unknown"
    return StatusClassification(
        label=label, style_token=NEUTRAL_STYLE, color=NEUTRAL_COLOR
    )


def classify_priority(priority: Any) -> StatusClassification:
    """Map a task priority to its badge presentation."""
    key = "" if priority is None else str(getattr(priority, "value", priority)).lower()
    known = PRIORITY_CLASSIFICATIONS.get(key)
    if known is not None:
        return known
    return StatusClassification(
        label=_humanize(key) or "Unknown",
        style_token=NEUTRAL_STYLE,
        color=NEUTRAL_COLOR,
    )


def derived_synthetic_progress(goal: Any) -> int:
    """
    Approximate a goal percentage from its status alone.

    This is a rough estimate for summary lists that load goals without
    their subgoals. It is not the goal's real progress; use goal_progress
    whenever the subgoal tree is available.
    """
    status = normalize_status(_field(goal, "status"))
    return SYNTHETIC_PROGRESS.get(status, SYNTHETIC_PROGRESS_DEFAULT)


def has_child_data(goal: Any) -> bool:
    """Check whether a goal carries a non-empty subgoal list."""
    return bool(_children(goal, "subgoals"))


def display_progress(goal: Any) -> int:
    """Progress to show on a card: real when subgoals are loaded, else estimated."""
    if has_child_data(goal):
        return goal_progress(goal)
    return derived_synthetic_progress(goal)


def status_counts(items: list, statuses: Optional[list[str]] = None) -> dict[str, int]:
    """Count items per canonical status value."""
    counts: dict[str, int] = {key: 0 for key in (statuses or [s.value for s in Status])}
    for item in items:
        key = normalize_status(_field(item, "status")) or Status.NOT_STARTED.value
        counts[key] = counts.get(key, 0) + 1
    return counts
