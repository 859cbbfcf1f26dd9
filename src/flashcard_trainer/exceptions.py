"""Domain exceptions raised by the flashcard services and translated to HTTP errors by the routers."""


class FlashcardError(Exception):
    """Base class for flashcard domain errors."""


class InvalidQualityError(FlashcardError):
    """Recall quality outside the 0-5 range."""

    def __init__(self, quality):
        self.quality = quality
        super().__init__(f"Quality must be an integer between 0 and 5, got {quality!r}")


class InvalidFlashcardIdError(FlashcardError):
    """Identifier is not a valid ObjectId."""

    def __init__(self, flashcard_id):
        self.flashcard_id = flashcard_id
        super().__init__(f"Invalid flashcard id: {flashcard_id!r}")


class FlashcardNotFoundError(FlashcardError):
    def __init__(self, flashcard_id):
        self.flashcard_id = flashcard_id
        super().__init__(f"Flashcard not found: {flashcard_id}")


class StorageError(FlashcardError):
    """A write to the document store did not succeed."""


class CategoryExistsError(FlashcardError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Category already exists: {name}")


class NoValidRowsError(FlashcardError):
    """Bulk input contained no parsable `front;back` line."""

    def __init__(self, skipped=None):
        self.skipped = list(skipped or [])
        super().__init__("No valid rows to add")
