"""Team model definitions."""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class TeamRole(str, Enum):
    """Team membership roles."""

    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"


class MemberProfile(BaseModel):
    """Public profile of a team member."""

    id: str
    full_name: str
    email: str
    avatar_url: Optional[str] = None


class TeamMemberCreate(BaseModel):
    """Add a user to a team."""

    user_id: str
    role: TeamRole = TeamRole.MEMBER


class TeamMemberRoleUpdate(BaseModel):
    """Change a member's role."""

    role: TeamRole


class TeamMember(BaseModel):
    """Team membership record."""

    id: str = Field(alias="_id", serialization_alias="id")
    team_id: str
    user_id: str
    role: TeamRole
    joined_at: datetime
    user: Optional[MemberProfile] = None

    model_config = {"populate_by_name": True}


class TeamBase(BaseModel):
    """Base team fields."""

    name: str
    description: Optional[str] = None


class TeamCreate(TeamBase):
    """Team creation model with optional initial members."""

    members: list[TeamMemberCreate] = Field(default_factory=list)


class TeamUpdate(BaseModel):
    """Team update model - all fields optional."""

    name: Optional[str] = None
    description: Optional[str] = None


class Team(TeamBase):
    """Full team model with database fields."""

    id: str = Field(alias="_id", serialization_alias="id")
    created_at: datetime
    updated_at: datetime
    team_members: Optional[list[TeamMember]] = None

    model_config = {"populate_by_name": True}
