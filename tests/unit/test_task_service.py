"""Tests for TaskService."""
import pytest
from datetime import date, datetime
from bson import ObjectId

from app.models.task import TaskCommentCreate, TaskUpdate
from app.services.task_service import TaskService


NOW = datetime(2024, 5, 6, 9, 30)


def make_tree(goal_owner="user123"):
    goal = {
        "_id": ObjectId(),
        "user_id": goal_owner,
        "title": "Launch",
        "slug": "launch",
        "team_id": None,
        "deleted": False,
        "created_at": NOW,
        "updated_at": NOW,
    }
    subgoal = {"_id": ObjectId(), "goal_id": str(goal["_id"]), "title": "Beta", "status": "in_progress"}
    task = {
        "_id": ObjectId(),
        "subgoal_id": str(subgoal["_id"]),
        "title": "Write spec",
        "status": "not_started",
        "priority": "medium",
        "assigned_to": "user123",
        "due_date": None,
        "comments": [],
        "created_at": NOW,
        "updated_at": NOW,
    }
    return goal, subgoal, task


@pytest.fixture
def service_for(make_db, collection):
    """Build a TaskService over a goal -> subgoal -> task chain."""

    def _service(goal, subgoal, task, updated=None):
        goals = collection()
        goals.find_one.return_value = goal
        subgoals = collection()
        subgoals.find_one.return_value = subgoal
        tasks = collection()
        tasks.find_one.return_value = task
        tasks.find_one_and_update.return_value = updated
        db = make_db(goals=goals, subgoals=subgoals, tasks=tasks)
        return TaskService(db), tasks

    return _service


@pytest.mark.asyncio
class TestTaskAccess:
    """Tests for loading tasks."""

    async def test_get_task(self, service_for):
        goal, subgoal, task = make_tree()
        service, _ = service_for(goal, subgoal, task)

        result = await service.get_task("user123", str(task["_id"]))

        assert result.title == "Write spec"
        assert result.subgoal_id == str(subgoal["_id"])

    async def test_invalid_id(self, make_db):
        service = TaskService(make_db())

        with pytest.raises(ValueError, match="Invalid task ID format"):
            await service.get_task("user123", "bogus")

    async def test_missing_task(self, make_db):
        service = TaskService(make_db())

        with pytest.raises(ValueError, match="Task not found"):
            await service.get_task("user123", str(ObjectId()))

    async def test_inaccessible_goal_hides_task(self, service_for):
        goal, subgoal, task = make_tree(goal_owner="stranger")
        service, _ = service_for(goal, subgoal, task)

        with pytest.raises(ValueError, match="Task not found"):
            await service.get_task("user123", str(task["_id"]))


@pytest.mark.asyncio
class TestTaskUpdates:
    """Tests for updating tasks."""

    async def test_update_task_fields(self, service_for):
        goal, subgoal, task = make_tree()
        updated = {**task, "status": "blocked", "priority": "high", "due_date": datetime(2024, 7, 1)}
        service, tasks = service_for(goal, subgoal, task, updated)

        result = await service.update_task(
            "user123",
            str(task["_id"]),
            TaskUpdate(status="blocked", priority="high", due_date=date(2024, 7, 1)),
        )

        assert result.status == "blocked"
        assert result.due_date == date(2024, 7, 1)
        update = tasks.find_one_and_update.call_args[0][1]["$set"]
        assert update["priority"] == "high"
        assert update["due_date"] == datetime(2024, 7, 1)
        assert "assigned_to" not in update

    async def test_add_comment(self, service_for):
        goal, subgoal, task = make_tree()
        updated = {**task, "status": "completed", "comments": ["Shipped the draft"]}
        service, tasks = service_for(goal, subgoal, task, updated)

        result = await service.add_comment(
            "user123",
            str(task["_id"]),
            TaskCommentCreate(status="completed", comment="Shipped the draft"),
        )

        assert result.comments == ["Shipped the draft"]
        update = tasks.find_one_and_update.call_args[0][1]
        assert update["$push"] == {"comments": "Shipped the draft"}
        assert update["$set"]["status"] == "completed"


@pytest.mark.asyncio
async def test_list_tasks_filters(make_db, collection):
    """Test assigned tasks are filtered by either status spelling."""
    goal, subgoal, _ = make_tree()
    tasks = collection(find_results=[])
    db = make_db(
        goals=collection(find_results=[{"_id": goal["_id"]}]),
        subgoals=collection(find_results=[{"_id": subgoal["_id"]}]),
        tasks=tasks,
    )
    service = TaskService(db)

    await service.list_tasks("user123", status="on_track", priority="low")

    query = tasks.find.call_args[0][0]
    assert query["assigned_to"] == "user123"
    assert query["subgoal_id"] == {"$in": [str(subgoal["_id"])]}
    assert set(query["status"]["$in"]) == {"in_progress", "on_track"}
    assert query["priority"] == "low"


@pytest.mark.asyncio
async def test_list_tasks_only_under_visible_goals(make_db, collection):
    """Test tasks of deleted or hidden goals are not listed."""
    goal, subgoal, task = make_tree()
    goals = collection(find_results=[{"_id": goal["_id"]}])
    subgoals = collection(find_results=[{"_id": subgoal["_id"]}])
    tasks = collection(find_results=[task])
    service = TaskService(make_db(goals=goals, subgoals=subgoals, tasks=tasks))

    result = await service.list_tasks("user123")

    goal_query = goals.find.call_args[0][0]
    assert goal_query["deleted"] is False
    assert {"user_id": "user123"} in goal_query["$or"]
    assert subgoals.find.call_args[0][0] == {"goal_id": {"$in": [str(goal["_id"])]}}
    assert [t.title for t in result] == ["Write spec"]
    assert result[0].priority_classification.label == "Medium"


@pytest.mark.asyncio
async def test_list_tasks_without_visible_goals(make_db, collection):
    """Test nothing is listed once every goal is gone."""
    tasks = collection(find_results=[make_tree()[2]])
    service = TaskService(make_db(tasks=tasks))

    assert await service.list_tasks("user123") == []
    tasks.find.assert_not_called()
