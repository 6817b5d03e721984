"""AI router - goal suggestions and weekly summaries."""
from fastapi import APIRouter, Depends, Request

from app.config import settings
from app.models.ai import AIGoalSuggestion, GoalSuggestionRequest, WeeklySummaryRequest
from app.models.goal import WeeklySummary
from app.routers.auth import get_current_user_id
from app.services.ai_service import AIService


router = APIRouter(prefix="/ai", tags=["ai"])


def get_ai_service(request: Request) -> AIService:
    """
    Dependency to get an AI service bound to the app's OpenAI client.

    The client is created in the application lifespan; without one the
    service answers with its fallbacks.
    """
    client = getattr(request.app.state, "openai_client", None)
    return AIService(
        client,
        model=settings.openai_model,
        temperature=settings.openai_temperature,
    )


@router.post("/goal-suggestions", response_model=AIGoalSuggestion)
async def suggest_goal(
    suggestion_request: GoalSuggestionRequest,
    user_id: str = Depends(get_current_user_id),
    ai_service: AIService = Depends(get_ai_service),
):
    """
    Propose a structured goal from a free-text prompt.

    - Requires authentication
    - Never fails: returns a generic goal skeleton if generation fails
    """
    return await ai_service.generate_goal_suggestion(suggestion_request.prompt)


@router.post("/weekly-summary", response_model=WeeklySummary)
async def summarize_check_ins(
    summary_request: WeeklySummaryRequest,
    user_id: str = Depends(get_current_user_id),
    ai_service: AIService = Depends(get_ai_service),
):
    """
    Summarize a week of daily check-ins.

    - Requires authentication
    - Returns a default summary if generation fails
    """
    return await ai_service.generate_weekly_summary(check_ins=summary_request.check_ins)
