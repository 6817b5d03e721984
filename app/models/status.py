"""Shared status vocabulary for goals, subgoals and tasks."""
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel


class Status(str, Enum):
    """Canonical lifecycle statuses."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    AT_RISK = "at_risk"
    BLOCKED = "blocked"  # tasks only
    COMPLETED = "completed"


class StatusClassification(BaseModel):
    """Presentation of a status value: badge label, style variant and color."""

    label: str
    style_token: str
    color: str

    model_config = {"frozen": True}


class TaskPriority(str, Enum):
    """Task priorities."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# Historical spellings accepted at the boundary.
# NOTE: "on_track" and "in_progress" are both in use for the same state.
STATUS_SYNONYMS: dict[str, Status] = {
    "on_track": Status.IN_PROGRESS,
}

# Spellings accepted on write. The record keeps whichever one the client sent.
ACCEPTED_STATUS_VALUES = frozenset(
    [status.value for status in Status] + list(STATUS_SYNONYMS)
)


def normalize_status(value: Any) -> Optional[str]:
    """
    Map a status spelling onto its canonical value.

    Args:
        value: Raw status (string, Status member or None)

    Returns:
        Canonical status value, the input string unchanged if it is not
        recognized, or None for missing input

    Examples:
        >>> normalize_status("on_track")
        'in_progress'
        >>> normalize_status("archived")
        'archived'
    """
    if value is None:
        return None
    if isinstance(value, Status):
        return value.value

    raw = str(value).strip().lower()
    if raw in STATUS_SYNONYMS:
        return STATUS_SYNONYMS[raw].value
    return raw


def status_spellings(value: Any) -> list[str]:
    """
    All stored spellings that mean the same status as value.

    Used to build database filters that match records written with either
    historical spelling.

    Example:
        >>> sorted(status_spellings("in_progress"))
        ['in_progress', 'on_track']
    """
    canonical = normalize_status(value)
    if canonical is None:
        return []
    synonyms = [raw for raw, status in STATUS_SYNONYMS.items() if status.value == canonical]
    return [canonical] + synonyms


def is_completed(value: Any) -> bool:
    """Check whether a raw status means completed."""
    return normalize_status(value) == Status.COMPLETED.value
