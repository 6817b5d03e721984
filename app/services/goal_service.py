"""Goal service - business logic for goals and their subgoal/task trees."""
import logging
from datetime import date, datetime
from typing import Optional

from app.models.goal import (
    Goal,
    GoalCreate,
    GoalDetail,
    GoalType,
    GoalUpdate,
    WeeklySummary,
)
from app.models.status import Status, status_spellings
from app.models.subgoal import SubGoal
from app.models.task import Task
from app.services import analytics, progress
from app.services.team_service import TeamService
from app.utils.ids import parse_object_id
from app.utils.slug import slugify, generate_unique_slug

logger = logging.getLogger(__name__)


def _to_date(value) -> Optional[date]:
    """Dates are stored as midnight datetimes."""
    if isinstance(value, datetime):
        return value.date()
    return value


def _to_datetime(value: Optional[date]) -> Optional[datetime]:
    if value is None:
        return None
    return datetime.combine(value, datetime.min.time())


class GoalService:
    """Service for handling goal operations."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.goals = db["goals"]
        self.subgoals = db["subgoals"]
        self.tasks = db["tasks"]
        self.team_service = TeamService(db)

    def doc_to_task(self, doc: dict) -> Task:
        """Convert database document to Task model."""
        return Task(
            _id=str(doc["_id"]),
            subgoal_id=doc["subgoal_id"],
            title=doc["title"],
            description=doc.get("description"),
            assigned_to=doc.get("assigned_to"),
            status=doc.get("status", Status.NOT_STARTED.value),
            priority=doc.get("priority", "medium"),
            priority_classification=progress.classify_priority(doc.get("priority", "medium")),
            due_date=_to_date(doc.get("due_date")),
            comments=doc.get("comments") or [],
            created_by=doc.get("created_by"),
            created_at=doc["created_at"],
            updated_at=doc["updated_at"],
        )

    def _doc_to_subgoal(self, doc: dict, tasks: Optional[list[Task]] = None) -> SubGoal:
        """Convert database document to SubGoal model."""
        return SubGoal(
            _id=str(doc["_id"]),
            goal_id=doc["goal_id"],
            title=doc["title"],
            description=doc.get("description"),
            assigned_to=doc.get("assigned_to"),
            status=doc.get("status", Status.NOT_STARTED.value),
            created_at=doc["created_at"],
            updated_at=doc["updated_at"],
            tasks=tasks,
        )

    def _doc_to_goal(self, doc: dict, subgoals: Optional[list[SubGoal]] = None) -> Goal:
        """
        Convert database document to Goal model.

        Handles datetime to date conversion for the deadline.
        """
        return Goal(
            _id=str(doc["_id"]),
            user_id=doc["user_id"],
            title=doc["title"],
            slug=doc["slug"],
            description=doc.get("description"),
            goal_type=doc.get("goal_type", GoalType.INDIVIDUAL.value),
            status=doc.get("status", Status.NOT_STARTED.value),
            deadline=_to_date(doc.get("deadline")),
            tags=doc.get("tags") or [],
            team_id=doc.get("team_id"),
            weekly_summaries=doc.get("weekly_summaries") or [],
            deleted=doc.get("deleted", False),
            deleted_at=doc.get("deleted_at"),
            created_at=doc["created_at"],
            updated_at=doc["updated_at"],
            subgoals=subgoals,
        )

    async def _attach_trees(self, goal_docs: list[dict]) -> list[Goal]:
        """
        Load subgoals and tasks for a batch of goal documents.

        Two queries regardless of batch size: one for subgoals, one for tasks.
        """
        if not goal_docs:
            return []

        goal_ids = [str(doc["_id"]) for doc in goal_docs]
        subgoal_docs = await self.subgoals.find(
            {"goal_id": {"$in": goal_ids}}, sort=[("created_at", 1), ("_id", 1)]
        ).to_list(length=None)

        subgoal_ids = [str(doc["_id"]) for doc in subgoal_docs]
        task_docs = []
        if subgoal_ids:
            task_docs = await self.tasks.find(
                {"subgoal_id": {"$in": subgoal_ids}}, sort=[("created_at", 1), ("_id", 1)]
            ).to_list(length=None)

        tasks_by_subgoal: dict[str, list[Task]] = {}
        for doc in task_docs:
            tasks_by_subgoal.setdefault(doc["subgoal_id"], []).append(self.doc_to_task(doc))

        subgoals_by_goal: dict[str, list[SubGoal]] = {}
        for doc in subgoal_docs:
            subgoal = self._doc_to_subgoal(doc, tasks_by_subgoal.get(str(doc["_id"]), []))
            subgoals_by_goal.setdefault(doc["goal_id"], []).append(subgoal)

        return [
            self._doc_to_goal(doc, subgoals_by_goal.get(str(doc["_id"]), []))
            for doc in goal_docs
        ]

    async def visibility_query(self, user_id: str) -> dict:
        """Goals a user may see: their own plus their teams' goals."""
        team_ids = await self.team_service.get_user_team_ids(user_id)
        return {
            "deleted": False,
            "$or": [
                {"user_id": user_id},
                {"team_id": {"$in": team_ids}},
            ],
        }

    async def can_access_goal(self, user_id: str, goal_doc: dict) -> bool:
        """Check whether a user owns a goal or belongs to its team."""
        if goal_doc.get("user_id") == user_id:
            return True
        team_id = goal_doc.get("team_id")
        if not team_id:
            return False
        return await self.team_service.get_role(team_id, user_id) is not None

    async def _find_visible_goal_doc(self, user_id: str, slug: str) -> dict:
        """
        Find a goal by slug, preferring the user's own goal.

        Slugs are unique per owner, so a team goal is only matched when the
        user owns no goal with that slug.
        """
        goal_doc = await self.goals.find_one({
            "user_id": user_id,
            "slug": slug,
            "deleted": False,
        })
        if goal_doc:
            return goal_doc

        query = await self.visibility_query(user_id)
        query["slug"] = slug
        goal_doc = await self.goals.find_one(query)
        if not goal_doc:
            raise ValueError("Goal not found")
        return goal_doc

    async def _check_team(self, user_id: str, goal_type: GoalType, team_id: Optional[str]) -> None:
        if goal_type == GoalType.TEAM and not team_id:
            raise ValueError("Team goals require a team")
        if team_id and await self.team_service.get_role(team_id, user_id) is None:
            raise ValueError("Not a member of this team")

    async def create_goal(
        self,
        user_id: str,
        goal_create: GoalCreate,
    ) -> Goal:
        """
        Create a new goal with its subgoals and tasks.

        Args:
            user_id: User ID who owns the goal
            goal_create: Goal creation data

        Returns:
            Created goal with its tree

        Raises:
            ValueError: If the team is missing or the user is not a member
        """
        await self._check_team(user_id, goal_create.goal_type, goal_create.team_id)

        base_slug = slugify(goal_create.title)
        slug = await generate_unique_slug(
            self.goals,
            base_slug,
            user_id=user_id,
        )

        now = datetime.utcnow()
        individual = goal_create.goal_type == GoalType.INDIVIDUAL

        goal_doc = {
            "user_id": user_id,
            "title": goal_create.title,
            "slug": slug,
            "description": goal_create.description,
            "goal_type": goal_create.goal_type.value,
            "status": Status.NOT_STARTED.value,
            "deadline": _to_datetime(goal_create.deadline),
            "tags": list(goal_create.tags),
            "team_id": goal_create.team_id,
            "weekly_summaries": [],
            "deleted": False,
            "created_at": now,
            "updated_at": now,
        }
        result = await self.goals.insert_one(goal_doc)
        goal_doc["_id"] = result.inserted_id
        goal_id = str(result.inserted_id)

        if goal_create.subgoals:
            subgoal_docs = [
                {
                    "goal_id": goal_id,
                    "title": subgoal.title,
                    "description": subgoal.description,
                    "status": Status.NOT_STARTED.value,
                    "assigned_to": subgoal.assigned_to or (user_id if individual else None),
                    "created_at": now,
                    "updated_at": now,
                }
                for subgoal in goal_create.subgoals
            ]
            subgoals_result = await self.subgoals.insert_many(subgoal_docs)

            task_docs = []
            for subgoal, subgoal_id in zip(goal_create.subgoals, subgoals_result.inserted_ids):
                for task in subgoal.tasks:
                    task_docs.append({
                        "subgoal_id": str(subgoal_id),
                        "title": task.title,
                        "description": task.description,
                        "status": Status.NOT_STARTED.value,
                        "priority": task.priority.value,
                        "assigned_to": task.assigned_to or (user_id if individual else None),
                        "due_date": _to_datetime(task.due_date),
                        "comments": [],
                        "created_by": user_id,
                        "created_at": now,
                        "updated_at": now,
                    })

            if task_docs:
                await self.tasks.insert_many(task_docs)

        logger.info("Goal %s (%s) created by %s", goal_id, slug, user_id)

        goals = await self._attach_trees([goal_doc])
        return goals[0]

    async def list_goals(
        self,
        user_id: str,
        status: Optional[str] = None,
        goal_type: Optional[str] = None,
        team_id: Optional[str] = None,
        tag: Optional[str] = None,
    ) -> list[Goal]:
        """
        List goals visible to a user, newest first, with their trees.

        Args:
            user_id: User ID
            status: Optional status filter (either historical spelling)
            goal_type: Optional goal type filter (individual, team)
            team_id: Optional team filter
            tag: Optional tag filter

        Returns:
            List of goals
        """
        query = await self.visibility_query(user_id)

        if status:
            query["status"] = {"$in": status_spellings(status)}
        if goal_type:
            query["goal_type"] = goal_type
        if team_id:
            query["team_id"] = team_id
        if tag:
            query["tags"] = tag

        cursor = self.goals.find(query, sort=[("created_at", -1), ("_id", -1)])
        goal_docs = await cursor.to_list(length=None)

        return await self._attach_trees(goal_docs)

    async def get_goal_by_slug(
        self,
        user_id: str,
        slug: str,
    ) -> Goal:
        """
        Get a single goal with its tree.

        Raises:
            ValueError: If goal not found
        """
        goal_doc = await self._find_visible_goal_doc(user_id, slug)
        goals = await self._attach_trees([goal_doc])
        return goals[0]

    def build_detail(self, goal: Goal) -> GoalDetail:
        """Attach computed progress figures to a loaded goal."""
        return GoalDetail(
            **goal.model_dump(by_alias=False),
            progress=progress.goal_progress(goal),
            task_count=progress.task_count(goal),
            completed_task_count=progress.completed_task_count(goal),
            classification=progress.classify_status(goal.status),
            subgoal_progress=analytics.subgoal_progress_entries(goal),
        )

    async def get_goal_detail(self, user_id: str, slug: str) -> GoalDetail:
        """
        Get a goal with computed progress.

        Raises:
            ValueError: If goal not found
        """
        goal = await self.get_goal_by_slug(user_id, slug)
        return self.build_detail(goal)

    async def update_goal(
        self,
        user_id: str,
        slug: str,
        goal_update: GoalUpdate,
    ) -> Goal:
        """
        Update a goal. Only the owner may edit goal fields.

        Raises:
            ValueError: If goal not found or the new team is not accessible
        """
        existing = await self.goals.find_one({
            "user_id": user_id,
            "slug": slug,
            "deleted": False,
        })

        if not existing:
            raise ValueError("Goal not found")

        update_doc = {
            "updated_at": datetime.utcnow(),
        }

        # Handle title change (regenerate slug)
        if goal_update.title is not None:
            update_doc["title"] = goal_update.title
            base_slug = slugify(goal_update.title)
            new_slug = await generate_unique_slug(
                self.goals,
                base_slug,
                user_id=user_id,
                exclude_id=existing["_id"],
            )
            update_doc["slug"] = new_slug

        if goal_update.description is not None:
            update_doc["description"] = goal_update.description
        if goal_update.deadline is not None:
            update_doc["deadline"] = _to_datetime(goal_update.deadline)
        if goal_update.tags is not None:
            update_doc["tags"] = list(goal_update.tags)
        if goal_update.team_id is not None:
            await self._check_team(user_id, GoalType(existing.get("goal_type", "individual")), goal_update.team_id)
            update_doc["team_id"] = goal_update.team_id

        updated_doc = await self.goals.find_one_and_update(
            {"_id": existing["_id"]},
            {"$set": update_doc},
            return_document=True,
        )

        goals = await self._attach_trees([updated_doc])
        return goals[0]

    async def update_goal_status(
        self,
        user_id: str,
        slug: str,
        status: str,
    ) -> Goal:
        """
        Set a goal's status. Team members may change team goal status.

        Raises:
            ValueError: If goal not found
        """
        goal_doc = await self._find_visible_goal_doc(user_id, slug)

        updated_doc = await self.goals.find_one_and_update(
            {"_id": goal_doc["_id"]},
            {"$set": {"status": status, "updated_at": datetime.utcnow()}},
            return_document=True,
        )
        logger.info("Goal %s status -> %s by %s", goal_doc["_id"], status, user_id)

        goals = await self._attach_trees([updated_doc])
        return goals[0]

    async def update_subgoal_status(
        self,
        user_id: str,
        subgoal_id: str,
        status: str,
    ) -> SubGoal:
        """
        Set a subgoal's status.

        Raises:
            ValueError: If subgoal not found or not accessible
        """
        object_id = parse_object_id(subgoal_id, "subgoal")

        subgoal_doc = await self.subgoals.find_one({"_id": object_id})
        if not subgoal_doc:
            raise ValueError("Subgoal not found")

        await self.get_accessible_goal_doc(user_id, subgoal_doc["goal_id"])

        updated_doc = await self.subgoals.find_one_and_update(
            {"_id": object_id},
            {"$set": {"status": status, "updated_at": datetime.utcnow()}},
            return_document=True,
        )

        task_docs = await self.tasks.find({"subgoal_id": subgoal_id}).to_list(length=None)
        return self._doc_to_subgoal(updated_doc, [self.doc_to_task(doc) for doc in task_docs])

    async def get_accessible_goal_doc(self, user_id: str, goal_id: str) -> dict:
        """
        Load a goal document by ID and check the user may access it.

        Raises:
            ValueError: If goal not found, deleted or not accessible
        """
        goal_doc = await self.goals.find_one({
            "_id": parse_object_id(goal_id, "goal"),
            "deleted": False,
        })
        if not goal_doc or not await self.can_access_goal(user_id, goal_doc):
            raise ValueError("Goal not found")
        return goal_doc

    async def add_weekly_summary(
        self,
        user_id: str,
        slug: str,
        summary: WeeklySummary,
    ) -> list[WeeklySummary]:
        """
        Append a weekly summary to a goal.

        Returns:
            All summaries of the goal, oldest first

        Raises:
            ValueError: If goal not found
        """
        goal_doc = await self._find_visible_goal_doc(user_id, slug)

        updated_doc = await self.goals.find_one_and_update(
            {"_id": goal_doc["_id"]},
            {
                "$push": {"weekly_summaries": summary.model_dump()},
                "$set": {"updated_at": datetime.utcnow()},
            },
            return_document=True,
        )

        return [WeeklySummary(**item) for item in updated_doc.get("weekly_summaries") or []]

    async def delete_goal(
        self,
        user_id: str,
        slug: str,
    ) -> dict:
        """
        Soft delete a goal. Subgoals and tasks stay but are no longer reachable.

        Raises:
            ValueError: If goal not found
        """
        existing = await self.goals.find_one({
            "user_id": user_id,
            "slug": slug,
            "deleted": False,
        })

        if not existing:
            raise ValueError("Goal not found")

        result = await self.goals.update_one(
            {"_id": existing["_id"]},
            {
                "$set": {
                    "deleted": True,
                    "deleted_at": datetime.utcnow(),
                }
            },
        )

        return {"deleted_count": result.modified_count}
