"""MongoDB database connection using Motor (async driver)."""
import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from app.config import settings

logger = logging.getLogger(__name__)


class Database:
    """MongoDB database connection manager."""

    client: AsyncIOMotorClient | None = None
    db: AsyncIOMotorDatabase | None = None

    async def connect(self) -> None:
        """Connect to MongoDB and make sure lookup indexes exist."""
        self.client = AsyncIOMotorClient(settings.mongodb_url)
        self.db = self.client[settings.mongodb_db_name]
        await self.ensure_indexes()
        logger.info("Connected to MongoDB: %s", settings.mongodb_db_name)

    async def ensure_indexes(self) -> None:
        """Create the indexes used by goal tree loading and membership checks."""
        await self.db["goals"].create_index([("user_id", 1), ("slug", 1)])
        await self.db["goals"].create_index("team_id")
        await self.db["subgoals"].create_index("goal_id")
        await self.db["tasks"].create_index("subgoal_id")
        await self.db["tasks"].create_index("assigned_to")
        await self.db["team_members"].create_index(
            [("team_id", 1), ("user_id", 1)], unique=True
        )
        await self.db["users"].create_index("email", unique=True)

    async def disconnect(self) -> None:
        """Disconnect from MongoDB."""
        if self.client:
            self.client.close()
            logger.info("Disconnected from MongoDB")


# Process-wide connection manager, opened and closed by the app lifespan
database = Database()


async def get_database() -> AsyncIOMotorDatabase:
    """Dependency to get database instance."""
    if database.db is None:
        raise RuntimeError("Database not connected")
    return database.db
