"""Integration tests for dashboard and AI endpoints."""
import pytest


async def seed_goals(app_client, headers):
    """Three goals: completed sales, on-track marketing, at-risk untagged."""
    await app_client.post("/goals", json={"title": "Close deals", "tags": ["Sales"]}, headers=headers)
    await app_client.post("/goals", json={"title": "Run campaign", "tags": ["Marketing"]}, headers=headers)
    await app_client.post("/goals", json={"title": "Fix onboarding"}, headers=headers)
    await app_client.patch("/goals/close-deals/status", json={"status": "completed"}, headers=headers)
    await app_client.patch("/goals/run-campaign/status", json={"status": "on_track"}, headers=headers)
    await app_client.patch("/goals/fix-onboarding/status", json={"status": "at_risk"}, headers=headers)


@pytest.mark.asyncio
class TestDashboard:
    """Tests for dashboard views."""

    async def test_analytics(self, app_client, register_user):
        headers, _ = await register_user("owner@example.com")
        await seed_goals(app_client, headers)

        response = await app_client.get("/dashboard/analytics", headers=headers)

        assert response.status_code == 200
        assert response.json() == {
            "total_goals": 3,
            "completion_rate": 33,
            "at_risk_goals": 1,
            "team_performance": 57,
        }

    async def test_analytics_empty(self, app_client, register_user):
        headers, _ = await register_user("owner@example.com")

        response = await app_client.get("/dashboard/analytics", headers=headers)

        assert response.json()["completion_rate"] == 0

    async def test_status_distribution(self, app_client, register_user):
        headers, _ = await register_user("owner@example.com")
        await seed_goals(app_client, headers)

        response = await app_client.get("/dashboard/status-distribution", headers=headers)

        values = {b["status"]: b["value"] for b in response.json()}
        assert values == {"completed": 1, "in_progress": 1, "at_risk": 1, "not_started": 0}

    async def test_departments(self, app_client, register_user):
        headers, _ = await register_user("owner@example.com")
        await seed_goals(app_client, headers)

        response = await app_client.get("/dashboard/departments", headers=headers)

        progress = {d["department"]: d["progress"] for d in response.json()}
        assert progress == {"Sales": 100, "Marketing": 70, "Other": 0}

    async def test_recent_goals_are_estimated(self, app_client, register_user):
        headers, _ = await register_user("owner@example.com")
        await seed_goals(app_client, headers)

        response = await app_client.get("/dashboard/recent-goals", params={"limit": 2}, headers=headers)

        cards = response.json()
        assert [c["title"] for c in cards] == ["Fix onboarding", "Run campaign"]
        assert cards[0]["estimated"] is True
        assert cards[0]["progress"] == 40
        assert cards[1]["classification"]["label"] == "On Track"

    async def test_strategic_map(self, app_client, register_user):
        headers, _ = await register_user("owner@example.com")
        team_id = (await app_client.post("/teams", json={"name": "Growth"}, headers=headers)).json()["id"]
        await app_client.post(
            "/goals", json={"title": "Team goal", "goal_type": "team", "team_id": team_id}, headers=headers
        )
        await app_client.post("/goals", json={"title": "Solo goal"}, headers=headers)

        response = await app_client.get("/dashboard/strategic-map", headers=headers)

        groups = response.json()
        assert [g["name"] for g in groups] == ["Growth", "Individual"]
        assert groups[0]["goals"][0]["title"] == "Team goal"


@pytest.mark.asyncio
class TestAIEndpoints:
    """AI endpoints answer with fallbacks when no OpenAI client is configured."""

    async def test_goal_suggestion_fallback(self, app_client, register_user):
        headers, _ = await register_user("owner@example.com")

        response = await app_client.post(
            "/ai/goal-suggestions", json={"prompt": "grow revenue"}, headers=headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Goal related to: grow revenue"
        assert data["suggestedTags"] == ["Planning", "Goals"]

    async def test_weekly_summary_fallback(self, app_client, register_user):
        headers, _ = await register_user("owner@example.com")

        response = await app_client.post(
            "/ai/weekly-summary",
            json={"check_ins": [{"date": "2024-01-08", "progress": "Met two clients"}]},
            headers=headers,
        )

        assert response.status_code == 200
        assert response.json()["text"].startswith("This week showed mixed progress")

    async def test_requires_auth(self, app_client):
        response = await app_client.post("/ai/goal-suggestions", json={"prompt": "x"})
        assert response.status_code == 401
