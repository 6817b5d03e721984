"""Dashboard analytics computed from already loaded goals."""
from typing import Optional

from app.models.dashboard import (
    DashboardAnalytics,
    DepartmentProgress,
    GoalCard,
    StatusBucket,
    StrategicGroup,
)
from app.models.goal import Goal, SubGoalProgress
from app.models.status import Status
from app.services import progress

# Tag keyword -> department name. Order matters: first match wins.
DEPARTMENT_TAGS: dict[str, str] = {
    "sales": "Sales",
    "marketing": "Marketing",
    "product": "Product",
    "support": "Support",
    "engineering": "Engineering",
}
DEFAULT_DEPARTMENT = "Other"

# In-progress goals count as 7/10 of a completed goal
IN_PROGRESS_WEIGHT_TENTHS = 7

STATUS_BUCKETS = [
    ("Completed", Status.COMPLETED),
    ("In Progress", Status.IN_PROGRESS),
    ("At Risk", Status.AT_RISK),
    ("Not Started", Status.NOT_STARTED),
]

INDIVIDUAL_GROUP = "Individual"


def _weighted_percentage(counts: dict[str, int], total: int) -> int:
    """Completed goals at full weight, in-progress goals at 70%."""
    weighted_tenths = (
        counts[Status.COMPLETED.value] * 10
        + counts[Status.IN_PROGRESS.value] * IN_PROGRESS_WEIGHT_TENTHS
    )
    return progress.percentage(weighted_tenths, total * 10)


def _average(values: list[int]) -> int:
    return progress.percentage(sum(values), len(values) * 100)


def compute_analytics(goals: list[Goal]) -> DashboardAnalytics:
    """
    Headline dashboard numbers.

    Completion rate is the share of completed goals. Team performance counts
    in-progress goals at 70%.
    """
    total = len(goals)
    counts = progress.status_counts(goals)

    if total == 0:
        return DashboardAnalytics(total_goals=0, completion_rate=0, at_risk_goals=0, team_performance=0)

    return DashboardAnalytics(
        total_goals=total,
        completion_rate=progress.percentage(counts[Status.COMPLETED.value], total),
        at_risk_goals=counts[Status.AT_RISK.value],
        team_performance=_weighted_percentage(counts, total),
    )


def status_distribution(goals: list[Goal]) -> list[StatusBucket]:
    """Number of goals in each status bucket; on_track counts as in progress."""
    counts = progress.status_counts(goals)
    return [
        StatusBucket(
            name=name,
            status=status.value,
            value=counts[status.value],
            color=progress.classify_status(status).color,
        )
        for name, status in STATUS_BUCKETS
    ]


def department_for(goal: Goal) -> str:
    """Department of a goal: the first tag containing a department keyword."""
    for tag in goal.tags or []:
        lower_tag = tag.lower()
        for keyword, department in DEPARTMENT_TAGS.items():
            if keyword in lower_tag:
                return department
    return DEFAULT_DEPARTMENT


def department_progress(goals: list[Goal]) -> list[DepartmentProgress]:
    """Weighted progress per department, omitting departments without goals."""
    grouped: dict[str, list[Goal]] = {name: [] for name in DEPARTMENT_TAGS.values()}
    grouped[DEFAULT_DEPARTMENT] = []
    for goal in goals:
        grouped[department_for(goal)].append(goal)

    result = []
    for department, dept_goals in grouped.items():
        if not dept_goals:
            continue
        counts = progress.status_counts(dept_goals)
        result.append(DepartmentProgress(
            department=department,
            progress=_weighted_percentage(counts, len(dept_goals)),
            goals=len(dept_goals),
        ))
    return result


def subgoal_progress_entries(goal: Goal) -> list[SubGoalProgress]:
    """Progress and classification of each loaded subgoal."""
    return [
        SubGoalProgress(
            id=subgoal.id,
            title=subgoal.title,
            status=subgoal.status,
            progress=progress.subgoal_progress(subgoal),
            task_count=len(subgoal.tasks or []),
            classification=progress.classify_status(subgoal.status),
        )
        for subgoal in goal.subgoals or []
    ]


def goal_card(goal: Goal) -> GoalCard:
    """Compact goal view; progress is estimated when subgoals are not loaded."""
    return GoalCard(
        id=goal.id,
        slug=goal.slug,
        title=goal.title,
        status=goal.status,
        progress=progress.display_progress(goal),
        estimated=not progress.has_child_data(goal),
        classification=progress.classify_status(goal.status),
        deadline=goal.deadline,
        team_id=goal.team_id,
        subgoal_progress=subgoal_progress_entries(goal),
    )


def recent_goals(goals: list[Goal], limit: int = 4) -> list[GoalCard]:
    """Cards for the most recently created goals."""
    newest = sorted(goals, key=lambda g: g.created_at, reverse=True)
    return [goal_card(goal) for goal in newest[:limit]]


def strategic_map(goals: list[Goal], team_names: Optional[dict[str, str]] = None) -> list[StrategicGroup]:
    """
    Group goals by team with an average progress per group.

    Individual goals are collected in a separate group listed last.
    """
    team_names = team_names or {}
    grouped: dict[Optional[str], list[GoalCard]] = {}
    for goal in goals:
        grouped.setdefault(goal.team_id, []).append(goal_card(goal))

    groups = []
    for team_id, cards in grouped.items():
        if team_id is None:
            continue
        groups.append(StrategicGroup(
            team_id=team_id,
            name=team_names.get(team_id, "Unknown team"),
            progress=_average([c.progress for c in cards]),
            goals=cards,
        ))
    groups.sort(key=lambda g: g.name.lower())

    if None in grouped:
        cards = grouped[None]
        groups.append(StrategicGroup(
            team_id=None,
            name=INDIVIDUAL_GROUP,
            progress=_average([c.progress for c in cards]),
            goals=cards,
        ))
    return groups
