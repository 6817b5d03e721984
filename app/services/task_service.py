"""Task service - business logic for task updates and comments."""
import logging
from datetime import datetime
from typing import Optional

from app.models.status import status_spellings
from app.models.task import Task, TaskCommentCreate, TaskUpdate
from app.services.goal_service import GoalService
from app.utils.ids import parse_object_id

logger = logging.getLogger(__name__)


class TaskService:
    """Service for handling task operations."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.tasks = db["tasks"]
        self.subgoals = db["subgoals"]
        self.goal_service = GoalService(db)

    async def _get_accessible_task_doc(self, user_id: str, task_id: str) -> dict:
        """
        Load a task and check the user may access its goal.

        Raises:
            ValueError: If the task, its subgoal or its goal is not accessible
        """
        object_id = parse_object_id(task_id, "task")

        task_doc = await self.tasks.find_one({"_id": object_id})
        if not task_doc:
            raise ValueError("Task not found")

        subgoal_doc = await self.subgoals.find_one({"_id": parse_object_id(task_doc["subgoal_id"], "subgoal")})
        if not subgoal_doc:
            raise ValueError("Task not found")

        try:
            await self.goal_service.get_accessible_goal_doc(user_id, subgoal_doc["goal_id"])
        except ValueError:
            raise ValueError("Task not found")

        return task_doc

    async def list_tasks(
        self,
        user_id: str,
        status: Optional[str] = None,
        priority: Optional[str] = None,
    ) -> list[Task]:
        """
        List tasks assigned to a user.

        Only tasks under goals the user can still see are listed, so tasks of
        deleted goals or of teams the user left drop out.

        Args:
            user_id: User ID
            status: Optional status filter (either historical spelling)
            priority: Optional priority filter

        Returns:
            List of tasks, soonest due first
        """
        goal_query = await self.goal_service.visibility_query(user_id)
        goal_docs = await self.goal_service.goals.find(goal_query, {"_id": 1}).to_list(length=None)
        subgoal_docs = await self.subgoals.find(
            {"goal_id": {"$in": [str(doc["_id"]) for doc in goal_docs]}}, {"_id": 1}
        ).to_list(length=None)
        if not subgoal_docs:
            return []

        query = {
            "assigned_to": user_id,
            "subgoal_id": {"$in": [str(doc["_id"]) for doc in subgoal_docs]},
        }

        if status:
            query["status"] = {"$in": status_spellings(status)}
        if priority:
            query["priority"] = priority

        cursor = self.tasks.find(query, sort=[("due_date", 1), ("created_at", 1)])
        task_docs = await cursor.to_list(length=None)

        return [self.goal_service.doc_to_task(doc) for doc in task_docs]

    async def get_task(self, user_id: str, task_id: str) -> Task:
        """
        Get a single task.

        Raises:
            ValueError: If task not found or invalid ID format
        """
        task_doc = await self._get_accessible_task_doc(user_id, task_id)
        return self.goal_service.doc_to_task(task_doc)

    async def update_task(
        self,
        user_id: str,
        task_id: str,
        task_update: TaskUpdate,
    ) -> Task:
        """
        Update a task.

        Args:
            user_id: User ID
            task_id: Task ID
            task_update: Update data

        Returns:
            Updated task

        Raises:
            ValueError: If task not found
        """
        existing = await self._get_accessible_task_doc(user_id, task_id)

        update_doc = {
            "updated_at": datetime.utcnow(),
        }

        if task_update.status is not None:
            update_doc["status"] = task_update.status
        if task_update.priority is not None:
            update_doc["priority"] = task_update.priority.value
        if task_update.due_date is not None:
            update_doc["due_date"] = datetime.combine(task_update.due_date, datetime.min.time())
        if task_update.assigned_to is not None:
            update_doc["assigned_to"] = task_update.assigned_to

        updated_doc = await self.tasks.find_one_and_update(
            {"_id": existing["_id"]},
            {"$set": update_doc},
            return_document=True,
        )

        return self.goal_service.doc_to_task(updated_doc)

    async def add_comment(
        self,
        user_id: str,
        task_id: str,
        comment: TaskCommentCreate,
    ) -> Task:
        """
        Set a task's status and append a comment.

        Comments feed the weekly summary of the task's goal.

        Raises:
            ValueError: If task not found
        """
        existing = await self._get_accessible_task_doc(user_id, task_id)

        updated_doc = await self.tasks.find_one_and_update(
            {"_id": existing["_id"]},
            {
                "$set": {"status": comment.status, "updated_at": datetime.utcnow()},
                "$push": {"comments": comment.comment},
            },
            return_document=True,
        )
        logger.info("Comment added to task %s by %s", task_id, user_id)

        return self.goal_service.doc_to_task(updated_doc)
