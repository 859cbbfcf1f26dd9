"""
Tests for the flashcard service against mocked Motor collections.
"""
from datetime import timedelta
from unittest.mock import MagicMock

import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError, PyMongoError

from flashcard_trainer.exceptions import (
    CategoryExistsError,
    FlashcardNotFoundError,
    InvalidFlashcardIdError,
    InvalidQualityError,
    NoValidRowsError,
    StorageError,
)
from flashcard_trainer.services.flashcard_service import FlashcardService


@pytest.fixture
def service(flashcards_collection, categories_collection):
    return FlashcardService(flashcards_collection, categories_collection, default_category="default")


# --- Categories ---


@pytest.mark.asyncio
async def test_list_categories_merges_both_sources(service, flashcards_collection, categories_collection):
    flashcards_collection.distinct.return_value = ["animals", "food"]
    categories_collection.distinct.return_value = ["verbs", "food"]

    assert await service.list_categories() == ["animals", "food", "verbs"]
    flashcards_collection.distinct.assert_called_once_with("category")
    categories_collection.distinct.assert_called_once_with("name")


@pytest.mark.asyncio
async def test_add_category(service, categories_collection):
    assert await service.add_category("verbs") == "verbs"

    document = categories_collection.insert_one.call_args[0][0]
    assert document["name"] == "verbs"
    assert "created_at" in document


@pytest.mark.asyncio
async def test_add_category_rejects_name_used_by_flashcards(service, flashcards_collection, categories_collection):
    flashcards_collection.find_one.return_value = {"_id": ObjectId(), "category": "animals"}

    with pytest.raises(CategoryExistsError):
        await service.add_category("animals")

    categories_collection.insert_one.assert_not_called()


@pytest.mark.asyncio
async def test_add_category_duplicate_key_race(service, categories_collection):
    categories_collection.insert_one.side_effect = DuplicateKeyError("duplicate")

    with pytest.raises(CategoryExistsError):
        await service.add_category("animals")


# --- Listing ---


@pytest.mark.asyncio
async def test_list_flashcards_due_only_by_default(service, flashcards_collection, card_document, now):
    flashcards_collection.find.return_value.sort.return_value.to_list.return_value = [card_document]

    cards = await service.list_flashcards(now=now)

    assert cards == [card_document]
    flashcards_collection.find.assert_called_once_with({"next_review": {"$lte": now}})


@pytest.mark.asyncio
async def test_list_flashcards_all_with_category(service, flashcards_collection, now):
    await service.list_flashcards(include_all=True, category="animals", now=now)

    flashcards_collection.find.assert_called_once_with({"category": "animals"})


# --- Creation ---


@pytest.mark.asyncio
async def test_create_flashcard_initial_state(service, flashcards_collection):
    inserted_id = ObjectId()
    flashcards_collection.insert_one.return_value = MagicMock(inserted_id=inserted_id)

    document = await service.create_flashcard("dog", "pies")

    assert document["_id"] == inserted_id
    assert document["category"] == "default"
    assert document["repetitions"] == 0
    assert document["easiness"] == 2.5
    assert document["interval"] == 1
    assert document["known"] is False
    assert document["next_review"] == document["created_at"]


@pytest.mark.asyncio
async def test_bulk_add_inserts_valid_rows(service, flashcards_collection):
    flashcards_collection.insert_many.return_value = MagicMock(inserted_ids=[ObjectId(), ObjectId()])

    result = await service.bulk_add("dog;pies\nbroken line\ncat;kot", "animals")

    assert result.inserted == 2
    assert result.skipped == ["broken line"]
    documents = flashcards_collection.insert_many.call_args[0][0]
    assert [(d["front"], d["back"], d["category"]) for d in documents] == [
        ("dog", "pies", "animals"),
        ("cat", "kot", "animals"),
    ]


@pytest.mark.asyncio
async def test_bulk_add_without_valid_rows(service, flashcards_collection):
    with pytest.raises(NoValidRowsError) as exc_info:
        await service.bulk_add("nothing here\n\n", "animals")

    assert exc_info.value.skipped == ["nothing here"]
    flashcards_collection.insert_many.assert_not_called()


# --- Get / delete ---


@pytest.mark.asyncio
async def test_get_flashcard_not_found(service, card_id):
    with pytest.raises(FlashcardNotFoundError):
        await service.get_flashcard(str(card_id))


@pytest.mark.asyncio
async def test_get_flashcard_invalid_id(service, flashcards_collection):
    with pytest.raises(InvalidFlashcardIdError):
        await service.get_flashcard("not-an-object-id")

    flashcards_collection.find_one.assert_not_called()


@pytest.mark.asyncio
async def test_delete_flashcard(service, flashcards_collection, card_id):
    flashcards_collection.delete_one.return_value = MagicMock(deleted_count=1)

    await service.delete_flashcard(str(card_id))

    flashcards_collection.delete_one.assert_called_once_with({"_id": card_id})


@pytest.mark.asyncio
async def test_delete_missing_flashcard(service, flashcards_collection, card_id):
    flashcards_collection.delete_one.return_value = MagicMock(deleted_count=0)

    with pytest.raises(FlashcardNotFoundError):
        await service.delete_flashcard(str(card_id))


# --- Reviews ---


@pytest.mark.asyncio
async def test_review_persists_schedule_with_compare_and_swap(service, flashcards_collection, card_document, card_id, now):
    flashcards_collection.find_one.return_value = card_document
    flashcards_collection.update_one.return_value = MagicMock(matched_count=1)

    outcome = await service.review_flashcard(str(card_id), 5, now=now)

    assert outcome.repetitions == 1
    assert outcome.interval == 1
    assert outcome.next_review == now + timedelta(days=1)

    filter_doc, update_doc = flashcards_collection.update_one.call_args[0]
    assert filter_doc == {"_id": card_id, "repetitions": 0, "easiness": 2.5, "interval": 1}
    assert update_doc["$set"]["repetitions"] == 1
    assert update_doc["$set"]["easiness"] == pytest.approx(2.6)
    assert update_doc["$set"]["interval"] == 1
    assert update_doc["$set"]["next_review"] == now + timedelta(days=1)
    assert update_doc["$set"]["known"] is True


@pytest.mark.asyncio
async def test_review_lapse(service, flashcards_collection, card_document, card_id, now):
    card_document.update(repetitions=5, easiness=2.0, interval=20)
    flashcards_collection.find_one.return_value = card_document
    flashcards_collection.update_one.return_value = MagicMock(matched_count=1)

    outcome = await service.review_flashcard(str(card_id), 1, now=now)

    assert outcome.repetitions == 0
    assert outcome.interval == 1
    assert outcome.easiness == pytest.approx(1.46)
    assert outcome.known is False


@pytest.mark.asyncio
async def test_review_invalid_quality_touches_nothing(service, flashcards_collection, card_id):
    with pytest.raises(InvalidQualityError):
        await service.review_flashcard(str(card_id), 6)

    flashcards_collection.find_one.assert_not_called()
    flashcards_collection.update_one.assert_not_called()


@pytest.mark.asyncio
async def test_review_missing_flashcard(service, flashcards_collection, card_id):
    with pytest.raises(FlashcardNotFoundError):
        await service.review_flashcard(str(card_id), 4)

    flashcards_collection.update_one.assert_not_called()


@pytest.mark.asyncio
async def test_review_invalid_id(service):
    with pytest.raises(InvalidFlashcardIdError):
        await service.review_flashcard("123", 4)


@pytest.mark.asyncio
async def test_review_concurrent_modification(service, flashcards_collection, card_document, card_id):
    flashcards_collection.find_one.return_value = card_document
    flashcards_collection.update_one.return_value = MagicMock(matched_count=0)

    with pytest.raises(StorageError):
        await service.review_flashcard(str(card_id), 4)


@pytest.mark.asyncio
async def test_review_driver_error_becomes_storage_error(service, flashcards_collection, card_document, card_id):
    flashcards_collection.find_one.return_value = card_document
    flashcards_collection.update_one.side_effect = PyMongoError("connection reset")

    with pytest.raises(StorageError) as exc_info:
        await service.review_flashcard(str(card_id), 4)

    assert isinstance(exc_info.value.__cause__, PyMongoError)
