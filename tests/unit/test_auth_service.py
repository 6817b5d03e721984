"""Tests for AuthService."""
import pytest
from datetime import datetime
from unittest.mock import MagicMock
from bson import ObjectId

from app.models.user import UserCreate
from app.services.auth_service import AuthService
from app.utils.auth import hash_password, verify_access_token


NOW = datetime(2024, 5, 6, 9, 30)


def user_doc(**overrides):
    doc = {
        "_id": ObjectId(),
        "email": "ada@example.com",
        "hashed_password": hash_password("password123"),
        "full_name": "Ada Lovelace",
        "avatar_url": None,
        "created_at": NOW,
        "updated_at": NOW,
    }
    doc.update(overrides)
    return doc


@pytest.mark.asyncio
class TestAuthServiceRegister:
    """Tests for user registration."""

    async def test_register_user_success(self, make_db, collection):
        """Test successful user registration."""
        users = collection()
        users.insert_one.return_value = MagicMock(inserted_id=ObjectId())

        service = AuthService(make_db(users=users))
        user = await service.register_user(UserCreate(
            email="Ada@Example.com",
            password="password123",
            full_name="Ada Lovelace",
        ))

        assert user.email == "ada@example.com"
        assert user.full_name == "Ada Lovelace"
        assert not hasattr(user, "hashed_password")

        stored = users.insert_one.call_args[0][0]
        assert stored["hashed_password"].startswith("$2b$")
        assert stored["hashed_password"] != "password123"

    async def test_register_duplicate_email(self, make_db, collection):
        """Test registration with duplicate email fails."""
        users = collection()
        users.find_one.return_value = user_doc()

        service = AuthService(make_db(users=users))

        with pytest.raises(ValueError, match="Email already registered"):
            await service.register_user(UserCreate(
                email="ada@example.com", password="password123", full_name="Ada",
            ))
        users.insert_one.assert_not_called()


@pytest.mark.asyncio
class TestAuthServiceLogin:
    """Tests for login."""

    async def test_login_success(self, make_db, collection):
        doc = user_doc()
        users = collection()
        users.find_one.return_value = doc

        service = AuthService(make_db(users=users))
        token = await service.login("ADA@example.com", "password123")

        assert verify_access_token(token) == str(doc["_id"])
        users.find_one.assert_awaited_once_with({"email": "ada@example.com"})

    async def test_login_wrong_password(self, make_db, collection):
        users = collection()
        users.find_one.return_value = user_doc()

        service = AuthService(make_db(users=users))

        with pytest.raises(ValueError, match="Invalid email or password"):
            await service.login("ada@example.com", "wrongpassword")

    async def test_login_unknown_email(self, make_db):
        service = AuthService(make_db())

        with pytest.raises(ValueError, match="Invalid email or password"):
            await service.login("nobody@example.com", "password123")


@pytest.mark.asyncio
class TestAuthServiceLookup:
    """Tests for profile lookup and search."""

    async def test_get_user_by_id(self, make_db, collection):
        doc = user_doc(avatar_url="https://example.com/ada.png")
        users = collection()
        users.find_one.return_value = doc

        service = AuthService(make_db(users=users))
        user = await service.get_user_by_id(str(doc["_id"]))

        assert user.id == str(doc["_id"])
        assert user.avatar_url == "https://example.com/ada.png"

    async def test_get_user_invalid_id(self, make_db):
        service = AuthService(make_db())

        with pytest.raises(ValueError, match="Invalid user ID format"):
            await service.get_user_by_id("invalid")

    async def test_get_user_not_found(self, make_db):
        service = AuthService(make_db())

        with pytest.raises(ValueError, match="User not found"):
            await service.get_user_by_id(str(ObjectId()))

    async def test_search_users(self, make_db, collection):
        users = collection(find_results=[user_doc()])

        service = AuthService(make_db(users=users))
        result = await service.search_users("a.b")

        assert [u.full_name for u in result] == ["Ada Lovelace"]
        query = users.find.call_args[0][0]
        assert query["$or"][0]["full_name"] == {"$regex": r"a\.b", "$options": "i"}
        users.find.return_value.limit.assert_called_once_with(10)
