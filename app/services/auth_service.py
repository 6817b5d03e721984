"""Authentication service - registration, login and profile lookup."""
import logging
import re
from datetime import datetime

from app.models.user import User, UserCreate
from app.utils.auth import create_access_token, hash_password, verify_password
from app.utils.ids import parse_object_id

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 10


class AuthService:
    """Service for handling user authentication and profiles."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.users = db["users"]

    def _doc_to_user(self, doc: dict) -> User:
        """Convert database document to User model (drops the password hash)."""
        return User(
            _id=str(doc["_id"]),
            email=doc["email"],
            full_name=doc["full_name"],
            avatar_url=doc.get("avatar_url"),
            created_at=doc["created_at"],
            updated_at=doc["updated_at"],
        )

    async def register_user(self, user_create: UserCreate) -> User:
        """
        Register a new user.

        Args:
            user_create: Registration data including the plain password

        Returns:
            Created user profile

        Raises:
            ValueError: If email is already registered
        """
        email = user_create.email.lower()
        if await self.users.find_one({"email": email}):
            raise ValueError("Email already registered")

        now = datetime.utcnow()
        user_doc = {
            "email": email,
            "hashed_password": hash_password(user_create.password),
            "full_name": user_create.full_name,
            "avatar_url": user_create.avatar_url,
            "created_at": now,
            "updated_at": now,
        }

        result = await self.users.insert_one(user_doc)
        user_doc["_id"] = result.inserted_id
        logger.info("Registered user %s", result.inserted_id)

        return self._doc_to_user(user_doc)

    async def login(self, email: str, password: str) -> str:
        """
        Check credentials and issue an access token.

        Raises:
            ValueError: If credentials are invalid
        """
        user_doc = await self.users.find_one({"email": email.lower()})
        if not user_doc or not verify_password(password, user_doc["hashed_password"]):
            logger.info("Failed login for %s", email)
            raise ValueError("Invalid email or password")

        return create_access_token(user_id=str(user_doc["_id"]))

    async def get_user_by_id(self, user_id: str) -> User:
        """
        Get user by ID.

        Raises:
            ValueError: If user not found or invalid ID format
        """
        user_doc = await self.users.find_one({"_id": parse_object_id(user_id, "user")})
        if not user_doc:
            raise ValueError("User not found")

        return self._doc_to_user(user_doc)

    async def search_users(self, query: str, limit: int = SEARCH_LIMIT) -> list[User]:
        """
        Find users whose name or email contains the query (case-insensitive).

        Args:
            query: Search text, matched literally
            limit: Maximum number of results

        Returns:
            Matching users
        """
        pattern = {"$regex": re.escape(query), "$options": "i"}
        cursor = self.users.find({"$or": [{"full_name": pattern}, {"email": pattern}]}).limit(limit)
        user_docs = await cursor.to_list(length=limit)

        return [self._doc_to_user(doc) for doc in user_docs]
