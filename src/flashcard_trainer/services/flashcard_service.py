"""
# Flashcard Service

Business logic behind the flashcard API: category listing, card creation (single and bulk),
due-card queries, deletion and the review workflow that wraps the scheduler.

## Review Workflow

1.  **Validate** the quality (0-5). Nothing is read or written for an invalid rating.
2.  **Fetch** the card's `repetitions`, `easiness` and `interval`.
3.  **Schedule** with `services.repetition.schedule`.
4.  **Persist** the outcome with a compare-and-swap filter on the fields read in step 2.
    If another review (or a delete) got there first, nothing matches and `StorageError`
    is raised. Resubmitting the same review is safe: the scheduler is deterministic.

The service receives its collections explicitly, so tests can pass mocks and the
application wires in the Motor collections from `db_manager`.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo.errors import DuplicateKeyError, PyMongoError

from flashcard_trainer.exceptions import (
    CategoryExistsError,
    FlashcardNotFoundError,
    InvalidFlashcardIdError,
    NoValidRowsError,
    StorageError,
)
from flashcard_trainer.managers.logging_manager import get_logger
from flashcard_trainer.services.bulk_parser import parse_bulk_text
from flashcard_trainer.services.repetition import (
    INITIAL_EASINESS,
    INITIAL_INTERVAL,
    INITIAL_REPETITIONS,
    ReviewOutcome,
    SchedulingState,
    schedule,
    validate_quality,
)

logger = get_logger(prefix="[FlashcardService]")


@dataclass
class BulkAddResult:
    inserted: int
    skipped: List[str] = field(default_factory=list)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _to_object_id(flashcard_id: str) -> ObjectId:
    try:
        return ObjectId(flashcard_id)
    except (InvalidId, TypeError):
        raise InvalidFlashcardIdError(flashcard_id)


def new_flashcard_document(front: str, back: str, category: str, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Build the document for a card that has never been reviewed. It is due immediately."""
    now = now or _utc_now()
    return {
        "front": front,
        "back": back,
        "category": category,
        "repetitions": INITIAL_REPETITIONS,
        "easiness": INITIAL_EASINESS,
        "interval": INITIAL_INTERVAL,
        "next_review": now,
        "known": False,
        "created_at": now,
    }


class FlashcardService:
    """CRUD and review operations over the flashcard and category collections."""

    def __init__(
        self,
        flashcards: AsyncIOMotorCollection,
        categories: AsyncIOMotorCollection,
        default_category: str = "default",
        bulk_delimiter: str = ";",
    ):
        self.flashcards = flashcards
        self.categories = categories
        self.default_category = default_category
        self.bulk_delimiter = bulk_delimiter

    # --- Categories ---

    async def list_categories(self) -> List[str]:
        """Return every category name, whether declared explicitly or used by a card."""
        used = await self.flashcards.distinct("category")
        declared = await self.categories.distinct("name")
        return sorted({name for name in [*used, *declared] if name})

    async def add_category(self, name: str) -> str:
        if await self.categories.find_one({"name": name}) or await self.flashcards.find_one({"category": name}):
            raise CategoryExistsError(name)

        try:
            await self.categories.insert_one({"name": name, "created_at": _utc_now()})
        except DuplicateKeyError:
            raise CategoryExistsError(name)

        logger.info("Created category %s", name)
        return name

    # --- Flashcards ---

    async def list_flashcards(
        self, include_all: bool = False, category: Optional[str] = None, now: Optional[datetime] = None
    ) -> List[Dict[str, Any]]:
        """
        Return flashcards, by default only those due for review.

        Args:
            include_all: Return every card regardless of `next_review`.
            category: Restrict to one category.
            now: Reference instant for the due check. Defaults to the current UTC time.
        """
        query: Dict[str, Any] = {}
        if not include_all:
            query["next_review"] = {"$lte": now or _utc_now()}
        if category:
            query["category"] = category

        cursor = self.flashcards.find(query).sort("next_review", 1)
        cards = await cursor.to_list(length=None)
        logger.debug("Fetched %d flashcards (query=%s)", len(cards), query)
        return cards

    async def get_flashcard(self, flashcard_id: str) -> Dict[str, Any]:
        card = await self.flashcards.find_one({"_id": _to_object_id(flashcard_id)})
        if not card:
            raise FlashcardNotFoundError(flashcard_id)
        return card

    async def create_flashcard(self, front: str, back: str, category: Optional[str] = None) -> Dict[str, Any]:
        document = new_flashcard_document(front, back, category or self.default_category)
        result = await self.flashcards.insert_one(document)
        document["_id"] = result.inserted_id
        logger.info("Created flashcard %s in category %s", result.inserted_id, document["category"])
        return document

    async def bulk_add(self, data: str, category: str) -> BulkAddResult:
        """
        Insert one card per valid `front;back` line of `data`.

        Raises:
            NoValidRowsError: If no line could be parsed. Nothing is inserted.
        """
        parsed = parse_bulk_text(data, delimiter=self.bulk_delimiter)
        if not parsed.pairs:
            raise NoValidRowsError(parsed.skipped)

        now = _utc_now()
        documents = [new_flashcard_document(front, back, category, now=now) for front, back in parsed.pairs]
        result = await self.flashcards.insert_many(documents)

        logger.info(
            "Bulk added %d flashcards to %s (%d lines skipped)",
            len(result.inserted_ids),
            category,
            len(parsed.skipped),
        )
        return BulkAddResult(inserted=len(result.inserted_ids), skipped=parsed.skipped)

    async def delete_flashcard(self, flashcard_id: str) -> None:
        result = await self.flashcards.delete_one({"_id": _to_object_id(flashcard_id)})
        if result.deleted_count == 0:
            raise FlashcardNotFoundError(flashcard_id)
        logger.info("Deleted flashcard %s", flashcard_id)

    # --- Reviews ---

    async def review_flashcard(self, flashcard_id: str, quality: int, now: Optional[datetime] = None) -> ReviewOutcome:
        """
        Apply a review of `quality` to a flashcard and persist the new schedule.

        Raises:
            InvalidQualityError: Quality outside 0-5.
            InvalidFlashcardIdError: Malformed identifier.
            FlashcardNotFoundError: No such flashcard.
            StorageError: The update did not apply (concurrent review/delete or driver error).
        """
        validate_quality(quality)
        object_id = _to_object_id(flashcard_id)

        card = await self.flashcards.find_one(
            {"_id": object_id}, {"repetitions": 1, "easiness": 1, "interval": 1}
        )
        if not card:
            raise FlashcardNotFoundError(flashcard_id)

        current = SchedulingState(
            repetitions=card["repetitions"],
            easiness=card["easiness"],
            interval=card["interval"],
        )
        outcome = schedule(current, quality, now=now)

        try:
            result = await self.flashcards.update_one(
                {
                    "_id": object_id,
                    "repetitions": current.repetitions,
                    "easiness": current.easiness,
                    "interval": current.interval,
                },
                {
                    "$set": {
                        "repetitions": outcome.repetitions,
                        "easiness": outcome.easiness,
                        "interval": outcome.interval,
                        "next_review": outcome.next_review,
                        "known": outcome.known,
                    }
                },
            )
        except PyMongoError as e:
            raise StorageError(f"Failed to save review for flashcard {flashcard_id}: {e}") from e

        if result.matched_count == 0:
            raise StorageError(f"Flashcard {flashcard_id} was modified or deleted during the review")

        logger.info(
            "Reviewed flashcard %s (quality=%d): interval=%d, repetitions=%d, easiness=%.2f",
            flashcard_id,
            quality,
            outcome.interval,
            outcome.repetitions,
            outcome.easiness,
        )
        return outcome
