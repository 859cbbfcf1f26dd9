import os

os.environ.setdefault("MONGODB_URL", "mongodb://localhost:27017")
os.environ.setdefault("MONGODB_DATABASE", "test_fiszki")

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId


@pytest.fixture
def now():
    return datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def card_id():
    return ObjectId("65a1f0c2e4b0a1b2c3d4e5f6")


@pytest.fixture
def card_document(card_id, now):
    return {
        "_id": card_id,
        "front": "dog",
        "back": "pies",
        "category": "animals",
        "repetitions": 0,
        "easiness": 2.5,
        "interval": 1,
        "next_review": now,
        "known": False,
        "created_at": now,
    }


def make_collection():
    """MagicMock shaped like a Motor collection: async CRUD methods, sync find() cursor."""
    collection = MagicMock()
    collection.find_one = AsyncMock(return_value=None)
    collection.insert_one = AsyncMock()
    collection.insert_many = AsyncMock()
    collection.update_one = AsyncMock()
    collection.delete_one = AsyncMock()
    collection.distinct = AsyncMock(return_value=[])
    collection.find.return_value.sort.return_value.to_list = AsyncMock(return_value=[])
    return collection


@pytest.fixture
def flashcards_collection():
    return make_collection()


@pytest.fixture
def categories_collection():
    return make_collection()
