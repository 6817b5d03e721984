"""Team router - API endpoints for teams and memberships."""
from fastapi import APIRouter, Depends, HTTPException, status

from app.database import get_database
from app.models.team import (
    Team,
    TeamCreate,
    TeamMember,
    TeamMemberCreate,
    TeamMemberRoleUpdate,
    TeamUpdate,
)
from app.routers.auth import get_current_user_id
from app.services.team_service import TeamService


router = APIRouter(prefix="/teams", tags=["teams"])


def _to_http(e: Exception) -> HTTPException:
    """Map service errors to HTTP errors."""
    if isinstance(e, PermissionError):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    message = str(e)
    if "not found" in message:
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=message)
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


@router.post("", response_model=Team, status_code=status.HTTP_201_CREATED)
async def create_team(
    team: TeamCreate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Create a team.

    - Requires authentication
    - Creator becomes the team owner
    - Initial members must be registered users
    """
    service = TeamService(db)
    try:
        return await service.create_team(user_id=user_id, team_create=team)
    except ValueError as e:
        raise _to_http(e)


@router.get("", response_model=list[Team])
async def list_teams(
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """List teams the current user belongs to."""
    service = TeamService(db)
    return await service.list_teams(user_id=user_id)


@router.get("/{team_id}", response_model=Team)
async def get_team(
    team_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Get a team with its members.

    - Returns 404 if the team doesn't exist or the user is not a member
    """
    service = TeamService(db)
    try:
        return await service.get_team(user_id=user_id, team_id=team_id)
    except ValueError as e:
        raise _to_http(e)


@router.patch("/{team_id}", response_model=Team)
async def update_team(
    team_id: str,
    team_update: TeamUpdate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Update team name or description.

    - Owners and admins only (403 otherwise)
    """
    service = TeamService(db)
    try:
        return await service.update_team(user_id=user_id, team_id=team_id, team_update=team_update)
    except (ValueError, PermissionError) as e:
        raise _to_http(e)


@router.delete("/{team_id}")
async def delete_team(
    team_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Delete a team and its memberships.

    - Owner only (403 otherwise)
    """
    service = TeamService(db)
    try:
        return await service.delete_team(user_id=user_id, team_id=team_id)
    except (ValueError, PermissionError) as e:
        raise _to_http(e)


@router.get("/{team_id}/members", response_model=list[TeamMember])
async def list_members(
    team_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """List team members with their profiles."""
    service = TeamService(db)
    try:
        return await service.list_members(user_id=user_id, team_id=team_id)
    except ValueError as e:
        raise _to_http(e)


@router.post("/{team_id}/members", response_model=TeamMember, status_code=status.HTTP_201_CREATED)
async def add_member(
    team_id: str,
    member: TeamMemberCreate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Add a user to a team.

    - Owners and admins only (403 otherwise)
    """
    service = TeamService(db)
    try:
        return await service.add_member(user_id=user_id, team_id=team_id, member=member)
    except (ValueError, PermissionError) as e:
        raise _to_http(e)


@router.patch("/{team_id}/members/{member_user_id}", response_model=TeamMember)
async def update_member_role(
    team_id: str,
    member_user_id: str,
    role_update: TeamMemberRoleUpdate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Change a member's role.

    - Owner only (403 otherwise)
    """
    service = TeamService(db)
    try:
        return await service.update_member_role(
            user_id=user_id,
            team_id=team_id,
            member_user_id=member_user_id,
            role=role_update.role,
        )
    except (ValueError, PermissionError) as e:
        raise _to_http(e)


@router.delete("/{team_id}/members/{member_user_id}")
async def remove_member(
    team_id: str,
    member_user_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Remove a member from a team.

    - Members may leave; removing others needs owner or admin
    """
    service = TeamService(db)
    try:
        return await service.remove_member(
            user_id=user_id,
            team_id=team_id,
            member_user_id=member_user_id,
        )
    except (ValueError, PermissionError) as e:
        raise _to_http(e)
