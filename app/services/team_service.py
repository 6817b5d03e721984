"""Team service - business logic for teams and memberships."""
import logging
from datetime import datetime

from bson.errors import InvalidId
from bson import ObjectId

from app.models.team import (
    MemberProfile,
    Team,
    TeamCreate,
    TeamMember,
    TeamMemberCreate,
    TeamRole,
    TeamUpdate,
)
from app.utils.ids import parse_object_id

logger = logging.getLogger(__name__)

MANAGER_ROLES = (TeamRole.OWNER.value, TeamRole.ADMIN.value)


class TeamService:
    """Service for handling team operations."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.teams = db["teams"]
        self.members = db["team_members"]
        self.users = db["users"]

    def _doc_to_team(self, doc: dict, members: list[TeamMember] | None = None) -> Team:
        """Convert database document to Team model."""
        return Team(
            _id=str(doc["_id"]),
            name=doc["name"],
            description=doc.get("description"),
            created_at=doc["created_at"],
            updated_at=doc["updated_at"],
            team_members=members,
        )

    def _doc_to_member(self, doc: dict, profile: MemberProfile | None = None) -> TeamMember:
        """Convert database document to TeamMember model."""
        return TeamMember(
            _id=str(doc["_id"]),
            team_id=doc["team_id"],
            user_id=doc["user_id"],
            role=doc["role"],
            joined_at=doc["joined_at"],
            user=profile,
        )

    async def get_user_team_ids(self, user_id: str) -> list[str]:
        """
        Get IDs of all teams a user belongs to.

        Args:
            user_id: User ID

        Returns:
            List of team IDs
        """
        cursor = self.members.find({"user_id": user_id})
        docs = await cursor.to_list(length=None)
        return [doc["team_id"] for doc in docs]

    async def get_role(self, team_id: str, user_id: str) -> str | None:
        """Get a user's role in a team, or None if not a member."""
        membership = await self.members.find_one({"team_id": team_id, "user_id": user_id})
        if not membership:
            return None
        return membership["role"]

    async def _require_role(self, team_id: str, user_id: str, roles: tuple) -> str:
        role = await self.get_role(team_id, user_id)
        if role is None:
            raise ValueError("Team not found")
        if role not in roles:
            raise PermissionError("Insufficient team permissions")
        return role

    async def _load_profiles(self, user_ids: list[str]) -> dict[str, MemberProfile]:
        """Fetch public profiles for a set of user IDs."""
        object_ids = []
        for user_id in user_ids:
            try:
                object_ids.append(ObjectId(user_id))
            except (InvalidId, TypeError):
                logger.warning("Skipping profile lookup for malformed user id %r", user_id)

        if not object_ids:
            return {}

        cursor = self.users.find({"_id": {"$in": object_ids}})
        docs = await cursor.to_list(length=None)
        return {
            str(doc["_id"]): MemberProfile(
                id=str(doc["_id"]),
                full_name=doc["full_name"],
                email=doc["email"],
                avatar_url=doc.get("avatar_url"),
            )
            for doc in docs
        }

    async def create_team(self, user_id: str, team_create: TeamCreate) -> Team:
        """
        Create a team and add the creator as owner.

        Initial members are de-duplicated by user ID (first entry wins) and
        must all be existing users; nothing is written otherwise.

        Args:
            user_id: Creator's user ID
            team_create: Team creation data

        Returns:
            Created team with its members

        Raises:
            ValueError: If an initial member is not a registered user
        """
        initial: dict[str, TeamMemberCreate] = {}
        for member in team_create.members:
            if member.user_id != user_id and member.user_id not in initial:
                initial[member.user_id] = member

        profiles = await self._load_profiles([user_id, *initial])
        unknown = [member_id for member_id in initial if member_id not in profiles]
        if unknown:
            raise ValueError(f"User not found: {', '.join(unknown)}")

        now = datetime.utcnow()
        team_doc = {
            "name": team_create.name,
            "description": team_create.description,
            "created_at": now,
            "updated_at": now,
        }
        result = await self.teams.insert_one(team_doc)
        team_doc["_id"] = result.inserted_id
        team_id = str(result.inserted_id)

        # Ownership is recorded as a membership role
        member_docs = [{"team_id": team_id, "user_id": user_id, "role": TeamRole.OWNER.value, "joined_at": now}]
        member_docs.extend(
            {
                "team_id": team_id,
                "user_id": member.user_id,
                "role": member.role.value,
                "joined_at": now,
            }
            for member in initial.values()
        )

        members_result = await self.members.insert_many(member_docs)
        for doc, inserted_id in zip(member_docs, members_result.inserted_ids):
            doc["_id"] = inserted_id
        logger.info("Team %s created by %s with %d members", team_id, user_id, len(member_docs))

        return self._doc_to_team(
            team_doc,
            [self._doc_to_member(doc, profiles.get(doc["user_id"])) for doc in member_docs],
        )

    async def list_teams(self, user_id: str) -> list[Team]:
        """
        List teams the user is a member of.

        Args:
            user_id: User ID

        Returns:
            List of teams (without members)
        """
        team_ids = await self.get_user_team_ids(user_id)
        if not team_ids:
            return []

        object_ids = [ObjectId(team_id) for team_id in team_ids if ObjectId.is_valid(team_id)]
        cursor = self.teams.find({"_id": {"$in": object_ids}})
        docs = await cursor.to_list(length=None)
        return [self._doc_to_team(doc) for doc in docs]

    async def list_members(self, user_id: str, team_id: str) -> list[TeamMember]:
        """
        List members of a team with their profiles.

        Raises:
            ValueError: If the team doesn't exist or the user is not a member
        """
        if await self.get_role(team_id, user_id) is None:
            raise ValueError("Team not found")

        cursor = self.members.find({"team_id": team_id})
        docs = await cursor.to_list(length=None)
        profiles = await self._load_profiles([doc["user_id"] for doc in docs])
        return [self._doc_to_member(doc, profiles.get(doc["user_id"])) for doc in docs]

    async def get_team(self, user_id: str, team_id: str) -> Team:
        """
        Get a team with its members.

        Raises:
            ValueError: If the team doesn't exist or the user is not a member
        """
        object_id = parse_object_id(team_id, "team")
        members = await self.list_members(user_id, team_id)

        team_doc = await self.teams.find_one({"_id": object_id})
        if not team_doc:
            raise ValueError("Team not found")

        return self._doc_to_team(team_doc, members)

    async def update_team(self, user_id: str, team_id: str, team_update: TeamUpdate) -> Team:
        """
        Update team name or description.

        Raises:
            ValueError: If team not found
            PermissionError: If the user is not an owner or admin
        """
        object_id = parse_object_id(team_id, "team")
        await self._require_role(team_id, user_id, MANAGER_ROLES)

        update_doc = {"updated_at": datetime.utcnow()}
        if team_update.name is not None:
            update_doc["name"] = team_update.name
        if team_update.description is not None:
            update_doc["description"] = team_update.description

        updated_doc = await self.teams.find_one_and_update(
            {"_id": object_id},
            {"$set": update_doc},
            return_document=True,
        )
        if not updated_doc:
            raise ValueError("Team not found")

        return self._doc_to_team(updated_doc)

    async def delete_team(self, user_id: str, team_id: str) -> dict:
        """
        Delete a team and its memberships.

        Raises:
            ValueError: If team not found
            PermissionError: If the user is not the owner
        """
        object_id = parse_object_id(team_id, "team")
        role = await self.get_role(team_id, user_id)
        if role is None:
            raise ValueError("Team not found")
        if role != TeamRole.OWNER.value:
            raise PermissionError("Only team owners can delete teams")

        result = await self.teams.delete_one({"_id": object_id})
        await self.members.delete_many({"team_id": team_id})
        logger.info("Team %s deleted by %s", team_id, user_id)

        return {"deleted_count": result.deleted_count}

    async def add_member(self, user_id: str, team_id: str, member: TeamMemberCreate) -> TeamMember:
        """
        Add a user to a team.

        Raises:
            ValueError: If team or user not found, or user already a member
            PermissionError: If the caller is not an owner or admin
        """
        await self._require_role(team_id, user_id, MANAGER_ROLES)

        profiles = await self._load_profiles([member.user_id])
        if member.user_id not in profiles:
            raise ValueError("User not found")

        if await self.get_role(team_id, member.user_id) is not None:
            raise ValueError("User is already a team member")

        member_doc = {
            "team_id": team_id,
            "user_id": member.user_id,
            "role": member.role.value,
            "joined_at": datetime.utcnow(),
        }
        result = await self.members.insert_one(member_doc)
        member_doc["_id"] = result.inserted_id

        return self._doc_to_member(member_doc, profiles[member.user_id])

    async def remove_member(self, user_id: str, team_id: str, member_user_id: str) -> dict:
        """
        Remove a member from a team. Members may always remove themselves.

        Raises:
            ValueError: If the membership doesn't exist or targets the owner
            PermissionError: If the caller may not remove other members
        """
        if member_user_id != user_id:
            await self._require_role(team_id, user_id, MANAGER_ROLES)

        target_role = await self.get_role(team_id, member_user_id)
        if target_role is None:
            raise ValueError("Team member not found")
        if target_role == TeamRole.OWNER.value:
            raise ValueError("Cannot remove the team owner")

        result = await self.members.delete_one({"team_id": team_id, "user_id": member_user_id})
        return {"deleted_count": result.deleted_count}

    async def update_member_role(
        self,
        user_id: str,
        team_id: str,
        member_user_id: str,
        role: TeamRole,
    ) -> TeamMember:
        """
        Change a member's role.

        Raises:
            ValueError: If the membership doesn't exist
            PermissionError: If the caller is not the owner
        """
        await self._require_role(team_id, user_id, (TeamRole.OWNER.value,))
        if member_user_id == user_id and role != TeamRole.OWNER:
            raise ValueError("Owners cannot change their own role")

        updated_doc = await self.members.find_one_and_update(
            {"team_id": team_id, "user_id": member_user_id},
            {"$set": {"role": role.value}},
            return_document=True,
        )
        if not updated_doc:
            raise ValueError("Team member not found")

        return self._doc_to_member(updated_doc)
