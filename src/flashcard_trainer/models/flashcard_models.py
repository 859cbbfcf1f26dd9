"""
# Flashcard Models

Pydantic models for the vocabulary flashcards stored in MongoDB and exchanged over the API.

## Domain Model Overview

A **Flashcard** is a bilingual word pair (`front` in the source language, `back` in the
target language) filed under a **category**, plus the scheduling metadata maintained by the
review scheduler:

- **repetitions**: consecutive successful recalls since the last lapse.
- **easiness**: interval growth multiplier, never below 1.3 (starts at 2.5).
- **interval**: days until the next review, at least 1.
- **next_review**: the card is due once this instant has passed.
- **known**: whether the latest review had quality 3 or higher.

## Review Scale

Quality is rated 0-5:
- **0-2**: lapse, the card comes back tomorrow.
- **3**: correct, with serious difficulty.
- **4**: correct after a hesitation.
- **5**: perfect recall.

## Usage Examples

```python
card = FlashcardCreate(front="dog", back="pies", category="animals")
review = ReviewRequest(quality=5)
```

The `english`/`polish` keys are accepted as aliases of `front`/`back`.
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from flashcard_trainer.services.repetition import MAX_QUALITY, MIN_EASINESS, MIN_QUALITY


class Flashcard(BaseModel):
    """
    A stored flashcard as returned by the API.

    The MongoDB `_id` (an ObjectId) is exposed as a string under `_id`.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "_id": "65a1f0c2e4b0a1b2c3d4e5f6",
                "front": "dog",
                "back": "pies",
                "category": "animals",
                "repetitions": 0,
                "easiness": 2.5,
                "interval": 1,
                "next_review": "2024-01-01T00:00:00Z",
                "known": False,
                "created_at": "2024-01-01T00:00:00Z",
            }
        },
    )

    id: str = Field(..., alias="_id", description="Unique identifier for the flashcard")
    front: str = Field(..., description="Source-language term")
    back: str = Field(..., description="Target-language term")
    category: str = Field(..., description="Category label")

    repetitions: int = Field(..., ge=0, description="Consecutive successful recalls")
    easiness: float = Field(..., ge=MIN_EASINESS, description="Easiness factor (min 1.3)")
    interval: int = Field(..., ge=1, description="Days until the next review")
    next_review: datetime = Field(..., description="When this card is next due")
    known: bool = Field(False, description="Whether the latest review was successful")

    created_at: datetime = Field(..., description="Timestamp of creation")

    @field_validator("id", mode="before")
    @classmethod
    def stringify_object_id(cls, v: Any) -> Any:
        return str(v) if v is not None else v


class FlashcardCreate(BaseModel):
    """Request body for adding a single flashcard."""

    front: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("front", "english"),
        description="Source-language term",
    )
    back: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("back", "polish"),
        description="Target-language term",
    )
    category: Optional[str] = Field(None, description="Category label; the default category when omitted")

    @field_validator("front", "back", mode="after")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class ReviewRequest(BaseModel):
    """
    Request model for submitting a review.

    **Quality Scale:**
    *   **0**: Complete blackout.
    *   **1**: Incorrect response; the correct one remembered.
    *   **2**: Incorrect response; where the correct one seemed easy to recall.
    *   **3**: Correct response recalled with serious difficulty.
    *   **4**: Correct response after a hesitation.
    *   **5**: Perfect recall.
    """

    quality: int = Field(..., ge=MIN_QUALITY, le=MAX_QUALITY, strict=True, description="Quality of recall (0-5)")


class ReviewResponse(BaseModel):
    message: str = "Flashcard updated"
    next_review: datetime
    interval: int
    repetitions: int
    easiness: float
    known: bool


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200, description="Category name")

    @field_validator("name", mode="after")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class BulkAddRequest(BaseModel):
    """Bulk vocabulary entry: one `front; back` pair per line of `data`."""

    data: str = Field(..., min_length=1, description="Newline-separated `front; back` lines")
    category: str = Field(..., min_length=1, description="Category for every added card")

    @field_validator("category", mode="after")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class BulkAddResponse(BaseModel):
    message: str = "Flashcards added"
    inserted: int
    skipped: List[str] = Field(default_factory=list)


class MessageResponse(BaseModel):
    message: str
