"""Mock database helpers for service unit tests."""
from unittest.mock import AsyncMock, MagicMock

import pytest


def make_collection(find_results=None):
    """
    Mock a motor collection.

    Coroutine methods are AsyncMocks; find() returns a cursor whose to_list
    resolves to find_results.
    """
    collection = MagicMock()
    collection.find_one = AsyncMock(return_value=None)
    collection.insert_one = AsyncMock()
    collection.insert_many = AsyncMock()
    collection.find_one_and_update = AsyncMock()
    collection.update_one = AsyncMock()
    collection.delete_one = AsyncMock()
    collection.delete_many = AsyncMock()

    cursor = MagicMock()
    cursor.to_list = AsyncMock(return_value=find_results or [])
    cursor.limit.return_value = cursor
    collection.find.return_value = cursor
    return collection


@pytest.fixture
def collection():
    """Factory for mock collections."""
    return make_collection


@pytest.fixture
def make_db():
    """Factory for a mock database; unnamed collections are empty mocks."""

    def _make_db(**collections):
        store = dict(collections)

        def get(name):
            if name not in store:
                store[name] = make_collection()
            return store[name]

        db = MagicMock()
        db.__getitem__.side_effect = get
        return db

    return _make_db
