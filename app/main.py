"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from openai import AsyncOpenAI

from app.config import settings
from app.database import database
from app.routers import ai, auth, dashboard, goals, tasks, teams

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def build_openai_client():
    """Create the OpenAI client, or None when no API key is configured."""
    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY not set; AI endpoints will return fallback content")
        return None

    return AsyncOpenAI(
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url,
        timeout=settings.openai_timeout_seconds,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown events."""
    await database.connect()
    app.state.openai_client = build_openai_client()
    yield
    if app.state.openai_client is not None:
        await app.state.openai_client.close()
    await database.disconnect()


app = FastAPI(
    title="Goal Tracker API",
    description="Goals, subgoals and tasks with progress roll-up, teams and AI assistance",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(goals.router)
app.include_router(tasks.router)
app.include_router(tasks.subgoals_router)
app.include_router(teams.router)
app.include_router(ai.router)
app.include_router(dashboard.router)


@app.get("/")
async def root():
    """Root endpoint - service banner."""
    return {"status": "ok", "message": "Goal Tracker API"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
