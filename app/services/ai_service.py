"""AI service - goal breakdown suggestions and weekly summaries via OpenAI.

Every generation call falls back to a fixed default on failure, so callers
always receive a usable result.
"""
import json
import logging
import math
from datetime import date, datetime, timedelta
from typing import Optional

from openai import AsyncOpenAI, OpenAIError

from app.models.ai import AIGoalSuggestion, CheckIn, SuggestedSubGoal, SuggestedTask
from app.models.goal import Goal, WeeklySummary

logger = logging.getLogger(__name__)

GOAL_SYSTEM_PROMPT = (
    "You are an expert goal-setting assistant that helps create structured, "
    "actionable goals with clear subgoals and tasks."
)

SUMMARY_SYSTEM_PROMPT = (
    "You are an expert project manager who provides concise, insightful "
    "summaries of weekly progress."
)

GOAL_PROMPT_TEMPLATE = """
Generate a structured goal based on this input: "{user_input}"

The response should be a JSON object with the following structure:
{{
  "title": "A specific, measurable goal title",
  "description": "Detailed description of the goal",
  "subgoals": [
    {{
      "title": "Subgoal title",
      "description": "Subgoal description",
      "tasks": [
        {{
          "title": "Task title",
          "description": "Task description",
          "estimated_duration": "Number of days needed to complete this task"
        }}
      ]
    }}
  ],
  "suggestedTags": ["tag1", "tag2"],
  "suggestedDeadline": "YYYY-MM-DD"
}}

Make the goal SMART (Specific, Measurable, Achievable, Relevant, Time-bound).
Include 2-3 subgoals, each with 2-4 tasks.
Give every task an estimated_duration in days.
Suggest 3-5 relevant tags and a reasonable deadline for the scope of the goal.
"""

GOAL_SUMMARY_PROMPT_TEMPLATE = """
Generate a concise weekly summary for the goal "{title}" based on these task comments:
{comments}

Focus on:
1. Key actions taken (based on comments)
2. Notable progress or blockers
3. Overall sentiment or tone from the comments
4. What has been achieved this week
5. Any ongoing tasks and items pending attention

Keep it under 200 words and make it human-readable.
"""

CHECK_IN_SUMMARY_PROMPT_TEMPLATE = """
Generate a concise weekly summary based on these daily check-ins:
{check_ins}

Focus on:
1. Overall progress made
2. Common themes in blockers
3. Recommendations for the coming week

Keep it under 200 words.
"""

NO_COMMENTS_SUMMARY = (
    "No task comments available to generate a weekly summary. "
    "Please add comments to your tasks first."
)

FALLBACK_SUMMARY = (
    "This week showed mixed progress with some tasks completed and others "
    "facing challenges. Review the blockers identified in the check-ins and "
    "consider adjusting priorities for the coming week."
)

FALLBACK_DEADLINE_DAYS = 30


class AIUnavailableError(Exception):
    """Raised when no usable completion can be obtained."""


def week_number(now: datetime, goal_created_at: Optional[datetime] = None) -> int:
    """
    Week number for a summary.

    Counts weeks since the goal was created (week 1 is the creation week).
    Without a creation date, returns the calendar week of the year with
    weeks starting on Sunday.

    Examples:
        >>> week_number(datetime(2024, 1, 10), datetime(2024, 1, 1))
        2
        >>> week_number(datetime(2024, 1, 1))
        1
    """
    if goal_created_at is None:
        first_day = date(now.year, 1, 1)
        past_days = (now.date() - first_day).days
        first_weekday = first_day.isoweekday() % 7  # Sunday = 0
        return math.ceil((past_days + first_weekday + 1) / 7)

    days_since_creation = math.floor((now - goal_created_at).total_seconds() / 86400)
    return max(1, math.ceil((days_since_creation + 1) / 7))


def fallback_goal_suggestion(user_input: str, today: Optional[date] = None) -> AIGoalSuggestion:
    """Generic goal skeleton used when the model call fails."""
    today = today or date.today()
    return AIGoalSuggestion(
        title=f"Goal related to: {user_input}",
        description="Please try again or refine your goal description.",
        subgoals=[
            SuggestedSubGoal(
                title="Define specific objectives",
                description="Break down your goal into specific, measurable objectives",
                tasks=[
                    SuggestedTask(
                        title="Research best practices",
                        description="Find industry standards and best approaches",
                        estimated_duration="2",
                    ),
                    SuggestedTask(
                        title="Set measurable targets",
                        description="Define KPIs and success metrics",
                        estimated_duration="1",
                    ),
                ],
            )
        ],
        suggested_tags=["Planning", "Goals"],
        suggested_deadline=today + timedelta(days=FALLBACK_DEADLINE_DAYS),
    )


def collect_task_comments(goal: Goal) -> list[str]:
    """Group task comments of a goal into one block per task."""
    blocks = []
    for subgoal in goal.subgoals or []:
        for task in subgoal.tasks or []:
            if task.comments:
                blocks.append(f"Task: {task.title}\nComments:\n" + "\n".join(task.comments))
    return blocks


class AIService:
    """Generates goal suggestions and summaries with an injected OpenAI client."""

    def __init__(
        self,
        client: Optional[AsyncOpenAI],
        model: str = "gpt-3.5-turbo",
        temperature: float = 0.7,
    ):
        """
        Initialize service.

        Args:
            client: Configured AsyncOpenAI client, or None when no API key is set
            model: Chat completion model name
            temperature: Sampling temperature
        """
        self.client = client
        self.model = model
        self.temperature = temperature

    async def _complete(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int,
        json_mode: bool = False,
    ) -> str:
        """
        Run one chat completion and return its text.

        Raises:
            AIUnavailableError: If no client is configured or the reply is empty
            OpenAIError: If the API call fails
        """
        if self.client is None:
            raise AIUnavailableError("OpenAI API key is not configured")

        kwargs = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=self.temperature,
            max_tokens=max_tokens,
            **kwargs,
        )

        if not response.choices or not response.choices[0].message.content:
            raise AIUnavailableError("No content in OpenAI response")

        return response.choices[0].message.content

    async def generate_goal_suggestion(
        self,
        user_input: str,
        today: Optional[date] = None,
    ) -> AIGoalSuggestion:
        """
        Propose a goal with subgoals, tasks, tags and a deadline.

        Args:
            user_input: Free-text description of what the user wants to achieve
            today: Reference date for the fallback deadline

        Returns:
            Parsed suggestion, or the fallback skeleton if anything fails
        """
        logger.info("Generating goal suggestion")
        try:
            content = await self._complete(
                GOAL_SYSTEM_PROMPT,
                GOAL_PROMPT_TEMPLATE.format(user_input=user_input),
                max_tokens=1500,
                json_mode=True,
            )
            # ValidationError and JSONDecodeError are both ValueErrors
            return AIGoalSuggestion.model_validate(json.loads(content))
        except (OpenAIError, AIUnavailableError, ValueError) as e:
            logger.warning("Goal suggestion failed, using fallback: %s", e)
            return fallback_goal_suggestion(user_input, today)

    async def generate_weekly_summary(
        self,
        goal: Optional[Goal] = None,
        check_ins: Optional[list[CheckIn]] = None,
        now: Optional[datetime] = None,
    ) -> WeeklySummary:
        """
        Summarize a week of work from a goal's task comments or from check-ins.

        Args:
            goal: Goal whose task comments are summarized (takes precedence)
            check_ins: Daily check-ins to summarize when no goal is given
            now: Reference time for the summary timestamp and week number

        Returns:
            Weekly summary; the fixed fallback text if generation fails
        """
        now = now or datetime.utcnow()
        created_at = goal.created_at if goal else None
        week = week_number(now, created_at)

        try:
            if goal is not None:
                comments = collect_task_comments(goal)
                if not comments:
                    return WeeklySummary(text=NO_COMMENTS_SUMMARY, created_at=now, week_number=week)
                prompt = GOAL_SUMMARY_PROMPT_TEMPLATE.format(
                    title=goal.title,
                    comments="\n\n".join(comments),
                )
            elif check_ins:
                prompt = CHECK_IN_SUMMARY_PROMPT_TEMPLATE.format(
                    check_ins="\n\n".join(
                        f"Date: {ci.date}\nProgress: {ci.progress}\nBlockers: {ci.blockers}"
                        for ci in check_ins
                    )
                )
            else:
                raise AIUnavailableError("No input provided for weekly summary generation")

            text = await self._complete(SUMMARY_SYSTEM_PROMPT, prompt, max_tokens=300)
            logger.info("Generated weekly summary (%d chars)", len(text))
            return WeeklySummary(text=text, created_at=now, week_number=week)
        except (OpenAIError, AIUnavailableError) as e:
            logger.warning("Weekly summary failed, using fallback: %s", e)
            return WeeklySummary(text=FALLBACK_SUMMARY, created_at=now, week_number=week)
