"""
# Flashcard Routes

REST API for the vocabulary flashcards.

## API Endpoints

### Categories
- `GET /api/categories` - List categories
- `POST /api/categories` - Create a category

### Flashcards
- `GET /api/flashcards` - Due cards (`?all=true` for every card, `?category=` to filter)
- `POST /api/flashcards` - Add a card
- `GET /api/flashcards/{id}` - Get a card
- `DELETE /api/flashcards/{id}` - Delete a card
- `POST /api/flashcards/bulk_add` - Add many cards from `front; back` lines

### Study
- `POST /api/flashcards/{id}/review` - Submit a recall quality (0-5) and reschedule

## Usage Example

```python
await client.post(f"/api/flashcards/{card_id}/review", json={"quality": 5})
# {"message": "Flashcard updated", "next_review": "2024-01-02T10:00:00Z", ...}
```
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from flashcard_trainer.config import settings
from flashcard_trainer.database import db_manager
from flashcard_trainer.exceptions import (
    CategoryExistsError,
    FlashcardNotFoundError,
    InvalidFlashcardIdError,
    InvalidQualityError,
    NoValidRowsError,
    StorageError,
)
from flashcard_trainer.managers.logging_manager import get_logger
from flashcard_trainer.models.flashcard_models import (
    BulkAddRequest,
    BulkAddResponse,
    CategoryCreate,
    Flashcard,
    FlashcardCreate,
    MessageResponse,
    ReviewRequest,
    ReviewResponse,
)
from flashcard_trainer.services.flashcard_service import FlashcardService
from flashcard_trainer.utils.logging_utils import log_error_with_context

logger = get_logger(prefix="[FlashcardRoutes]")

router = APIRouter(prefix="/api", tags=["Flashcards"])


def get_flashcard_service() -> FlashcardService:
    """Build a `FlashcardService` over the configured collections of the connected database."""
    return FlashcardService(
        flashcards=db_manager.get_collection(settings.FLASHCARDS_COLLECTION),
        categories=db_manager.get_collection(settings.CATEGORIES_COLLECTION),
        default_category=settings.DEFAULT_CATEGORY,
        bulk_delimiter=settings.BULK_DELIMITER,
    )


def _server_error(e: Exception, operation: str, detail: str) -> HTTPException:
    log_error_with_context(e, {"operation": operation})
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


@router.get("/categories", response_model=List[str])
async def get_categories(service: FlashcardService = Depends(get_flashcard_service)):
    """List all categories."""
    try:
        return await service.list_categories()
    except Exception as e:
        raise _server_error(e, "list_categories", "Unable to fetch categories")


@router.post("/categories", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def create_category(category: CategoryCreate, service: FlashcardService = Depends(get_flashcard_service)):
    """Create a new, initially empty category."""
    try:
        await service.add_category(category.name)
    except CategoryExistsError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        raise _server_error(e, "add_category", "Unable to create category")
    return MessageResponse(message="Category created")


@router.get("/flashcards", response_model=List[Flashcard])
async def get_flashcards(
    include_all: bool = Query(False, alias="all", description="Return every card, not only the due ones"),
    category: Optional[str] = Query(None, description="Restrict to one category"),
    service: FlashcardService = Depends(get_flashcard_service),
):
    """Get flashcards due for review."""
    try:
        cards = await service.list_flashcards(include_all=include_all, category=category)
    except Exception as e:
        raise _server_error(e, "list_flashcards", "Unable to fetch flashcards")
    return [Flashcard(**card) for card in cards]


@router.post("/flashcards", response_model=Flashcard, status_code=status.HTTP_201_CREATED)
async def create_flashcard(card: FlashcardCreate, service: FlashcardService = Depends(get_flashcard_service)):
    """Add a single flashcard."""
    try:
        document = await service.create_flashcard(card.front, card.back, card.category)
    except Exception as e:
        raise _server_error(e, "create_flashcard", "Unable to create flashcard")
    return Flashcard(**document)


@router.post("/flashcards/bulk_add", response_model=BulkAddResponse, status_code=status.HTTP_201_CREATED)
async def bulk_add_flashcards(request: BulkAddRequest, service: FlashcardService = Depends(get_flashcard_service)):
    """Add one flashcard per `front; back` line."""
    try:
        result = await service.bulk_add(request.data, request.category)
    except NoValidRowsError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        raise _server_error(e, "bulk_add", "Unable to add flashcards")
    return BulkAddResponse(inserted=result.inserted, skipped=result.skipped)


@router.get("/flashcards/{flashcard_id}", response_model=Flashcard)
async def get_flashcard(flashcard_id: str, service: FlashcardService = Depends(get_flashcard_service)):
    """Get a specific flashcard."""
    try:
        card = await service.get_flashcard(flashcard_id)
    except InvalidFlashcardIdError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except FlashcardNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Flashcard not found")
    except Exception as e:
        raise _server_error(e, "get_flashcard", "Unable to fetch flashcard")
    return Flashcard(**card)


@router.delete("/flashcards/{flashcard_id}", response_model=MessageResponse)
async def delete_flashcard(flashcard_id: str, service: FlashcardService = Depends(get_flashcard_service)):
    """Delete a flashcard."""
    try:
        await service.delete_flashcard(flashcard_id)
    except InvalidFlashcardIdError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except FlashcardNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Flashcard not found")
    except Exception as e:
        raise _server_error(e, "delete_flashcard", "Unable to delete flashcard")
    return MessageResponse(message="Flashcard deleted")


@router.post("/flashcards/{flashcard_id}/review", response_model=ReviewResponse)
async def review_flashcard(
    flashcard_id: str, review: ReviewRequest, service: FlashcardService = Depends(get_flashcard_service)
):
    """Submit a review for a flashcard."""
    try:
        outcome = await service.review_flashcard(flashcard_id, review.quality)
    except (InvalidQualityError, InvalidFlashcardIdError) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except FlashcardNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Flashcard not found")
    except StorageError as e:
        logger.warning("Review for %s not saved: %s", flashcard_id, e)
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except Exception as e:
        raise _server_error(e, "review_flashcard", "Unable to review flashcard")

    return ReviewResponse(
        next_review=outcome.next_review,
        interval=outcome.interval,
        repetitions=outcome.repetitions,
        easiness=outcome.easiness,
        known=outcome.known,
    )
