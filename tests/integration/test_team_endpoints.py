"""Integration tests for team endpoints."""
import pytest


@pytest.mark.asyncio
class TestTeams:
    """Tests for team lifecycle and permissions."""

    async def test_create_and_get_team(self, app_client, register_user):
        headers, owner = await register_user("owner@example.com", full_name="Olive Owner")

        response = await app_client.post(
            "/teams", json={"name": "Growth", "description": "Revenue team"}, headers=headers
        )

        assert response.status_code == 201
        team_id = response.json()["id"]

        detail = await app_client.get(f"/teams/{team_id}", headers=headers)
        members = detail.json()["team_members"]
        assert detail.status_code == 200
        assert members[0]["user_id"] == owner["id"]
        assert members[0]["role"] == "owner"
        assert members[0]["user"]["full_name"] == "Olive Owner"

        listed = await app_client.get("/teams", headers=headers)
        assert [t["name"] for t in listed.json()] == ["Growth"]

    async def test_outsider_cannot_see_team(self, app_client, register_user):
        owner_headers, _ = await register_user("owner@example.com")
        outsider_headers, _ = await register_user("outsider@example.com")
        team_id = (await app_client.post("/teams", json={"name": "Growth"}, headers=owner_headers)).json()["id"]

        response = await app_client.get(f"/teams/{team_id}", headers=outsider_headers)

        assert response.status_code == 404

    async def test_create_with_unknown_member(self, app_client, register_user):
        headers, _ = await register_user("owner@example.com")

        response = await app_client.post(
            "/teams",
            json={"name": "Growth", "members": [{"user_id": "000000000000000000000000"}]},
            headers=headers,
        )

        assert response.status_code == 404
        listed = await app_client.get("/teams", headers=headers)
        assert listed.json() == []

    async def test_invalid_team_id(self, app_client, register_user):
        headers, _ = await register_user("owner@example.com")

        response = await app_client.get("/teams/not-an-id", headers=headers)

        assert response.status_code == 400

    async def test_member_management(self, app_client, register_user):
        owner_headers, _ = await register_user("owner@example.com")
        member_headers, member = await register_user("member@example.com")
        team_id = (await app_client.post("/teams", json={"name": "Growth"}, headers=owner_headers)).json()["id"]

        added = await app_client.post(
            f"/teams/{team_id}/members", json={"user_id": member["id"]}, headers=owner_headers
        )
        assert added.status_code == 201
        assert added.json()["role"] == "member"

        duplicate = await app_client.post(
            f"/teams/{team_id}/members", json={"user_id": member["id"]}, headers=owner_headers
        )
        assert duplicate.status_code == 400

        rename = await app_client.patch(f"/teams/{team_id}", json={"name": "Sales"}, headers=member_headers)
        assert rename.status_code == 403

        promoted = await app_client.patch(
            f"/teams/{team_id}/members/{member['id']}", json={"role": "admin"}, headers=owner_headers
        )
        assert promoted.json()["role"] == "admin"

        rename = await app_client.patch(f"/teams/{team_id}", json={"name": "Sales"}, headers=member_headers)
        assert rename.status_code == 200
        assert rename.json()["name"] == "Sales"

        delete = await app_client.delete(f"/teams/{team_id}", headers=member_headers)
        assert delete.status_code == 403

        left = await app_client.delete(f"/teams/{team_id}/members/{member['id']}", headers=member_headers)
        assert left.status_code == 200
        assert (await app_client.get(f"/teams/{team_id}", headers=member_headers)).status_code == 404

    async def test_team_goal_visible_to_members(self, app_client, register_user):
        owner_headers, _ = await register_user("owner@example.com")
        member_headers, member = await register_user("member@example.com")
        team_id = (await app_client.post(
            "/teams",
            json={"name": "Growth", "members": [{"user_id": member["id"]}]},
            headers=owner_headers,
        )).json()["id"]

        created = await app_client.post(
            "/goals",
            json={"title": "Grow revenue", "goal_type": "team", "team_id": team_id, "tags": ["Sales"]},
            headers=owner_headers,
        )
        assert created.status_code == 201

        seen = await app_client.get("/goals/grow-revenue", headers=member_headers)
        assert seen.status_code == 200

        status_change = await app_client.patch(
            "/goals/grow-revenue/status", json={"status": "at_risk"}, headers=member_headers
        )
        assert status_change.json()["status"] == "at_risk"

        edit = await app_client.patch("/goals/grow-revenue", json={"title": "Mine"}, headers=member_headers)
        assert edit.status_code == 404

    async def test_owner_deletes_team(self, app_client, register_user):
        headers, _ = await register_user("owner@example.com")
        team_id = (await app_client.post("/teams", json={"name": "Growth"}, headers=headers)).json()["id"]

        response = await app_client.delete(f"/teams/{team_id}", headers=headers)

        assert response.status_code == 200
        assert (await app_client.get("/teams", headers=headers)).json() == []
