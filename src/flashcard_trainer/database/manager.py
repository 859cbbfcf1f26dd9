"""
# Database Manager

This module implements the `DatabaseManager` class that owns the application's single
**Motor** (async MongoDB) client. It handles the connection lifecycle, collection access,
index creation and health checks.

## Lifecycle

1.  **Instantiation** (module load): `db_manager` is created, no I/O.
2.  **Connection** (startup): `connect()` establishes the client, with retries.
3.  **Operations** (runtime): `get_collection()` hands out Motor collections.
4.  **Disconnection** (shutdown): `disconnect()` closes all sockets.

## Usage

```python
from flashcard_trainer.database import db_manager

await db_manager.connect()
flashcards = db_manager.get_collection("flashcard")
card = await flashcards.find_one({"category": "animals"})
await db_manager.disconnect()
```

## Indexes

`create_indexes()` ensures:
- `flashcard.next_review` (due-card queries)
- `flashcard.category` (category filter and `distinct`)
- `categories.name` (unique)

Attributes:
    db_logger (Logger): Logger for database operations (`[DATABASE]`).
    perf_logger (Logger): Logger for timing information (`[DB_PERFORMANCE]`).
    health_logger (Logger): Logger for health checks (`[DB_HEALTH]`).
    db_manager (DatabaseManager): Global instance, connected in the FastAPI lifespan.
"""

import asyncio
import time
from typing import Any, Dict, Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo.errors import ConnectionFailure, PyMongoError, ServerSelectionTimeoutError

from flashcard_trainer.config import settings
from flashcard_trainer.managers.logging_manager import get_logger

db_logger = get_logger(prefix="[DATABASE]")
perf_logger = get_logger(prefix="[DB_PERFORMANCE]")
health_logger = get_logger(prefix="[DB_HEALTH]")


class DatabaseManager:
    """
    Manages the MongoDB connection, collections and indexes.

    Attributes:
        client (`Optional[AsyncIOMotorClient]`): The Motor client. `None` until `connect()`
            succeeds.
        database (`Optional[AsyncIOMotorDatabase]`): The selected database. `None` until
            connected.

    Note:
        Used as a singleton via the `db_manager` global instance. The client is created
        with `tz_aware=True` so datetimes read back from MongoDB carry UTC tzinfo and can be
        compared with `datetime.now(timezone.utc)`.
    """

    def __init__(self):
        self.client: Optional[AsyncIOMotorClient] = None
        self.database: Optional[AsyncIOMotorDatabase] = None
        self._connection_retries = 3

    def _connection_string(self) -> str:
        if settings.MONGODB_USERNAME and settings.MONGODB_PASSWORD:
            password = settings.MONGODB_PASSWORD.get_secret_value()
            db_logger.debug("Using authenticated connection to MongoDB")
            return (
                f"mongodb://{settings.MONGODB_USERNAME}:{password}@"
                f"{settings.MONGODB_URL.replace('mongodb://', '')}"
            )
        db_logger.debug("Using unauthenticated connection to MongoDB")
        return settings.MONGODB_URL

    async def connect(self):
        """
        Establish the MongoDB connection with exponential backoff.

        Up to three attempts are made (waiting 1s, then 2s). Each attempt creates the client
        and pings the server.

        Raises:
            `ServerSelectionTimeoutError`: If MongoDB is unreachable after all attempts.
            `ConnectionFailure`: If authentication fails or the connection is refused.
        """
        start_time = time.time()
        db_logger.info("Starting MongoDB connection process")

        for attempt in range(self._connection_retries):
            attempt_start = time.time()
            try:
                db_logger.info("Connection attempt %d/%d to MongoDB", attempt + 1, self._connection_retries)
                db_logger.info(
                    "MongoDB connection config - Database: %s, ServerTimeout: %dms, ConnTimeout: %dms",
                    settings.MONGODB_DATABASE,
                    settings.MONGODB_SERVER_SELECTION_TIMEOUT,
                    settings.MONGODB_CONNECTION_TIMEOUT,
                )

                self.client = AsyncIOMotorClient(
                    self._connection_string(),
                    serverSelectionTimeoutMS=settings.MONGODB_SERVER_SELECTION_TIMEOUT,
                    connectTimeoutMS=settings.MONGODB_CONNECTION_TIMEOUT,
                    tz_aware=True,
                )
                self.database = self.client[settings.MONGODB_DATABASE]

                ping_start = time.time()
                await self.client.admin.command("ping")
                ping_duration = time.time() - ping_start

                total_duration = time.time() - start_time
                perf_logger.info(
                    "MongoDB connection established successfully in %.3fs (ping: %.3fs)", total_duration, ping_duration
                )
                db_logger.info("Successfully connected to MongoDB database: %s", settings.MONGODB_DATABASE)
                return

            except (ServerSelectionTimeoutError, ConnectionFailure) as e:
                attempt_duration = time.time() - attempt_start
                perf_logger.warning("Connection attempt %d failed after %.3fs", attempt + 1, attempt_duration)
                db_logger.warning(
                    "Failed to connect to MongoDB (attempt %d/%d): %s", attempt + 1, self._connection_retries, e
                )
                if self.client is not None:
                    self.client.close()
                    self.client = None
                    self.database = None
                if attempt == self._connection_retries - 1:
                    db_logger.error("All connection attempts failed after %.3fs", time.time() - start_time)
                    raise

                backoff_time = 2**attempt
                db_logger.info("Waiting %.1fs before retry (exponential backoff)", backoff_time)
                await asyncio.sleep(backoff_time)

    async def disconnect(self):
        """Close the Motor client. Safe to call when not connected."""
        start_time = time.time()
        db_logger.info("Starting MongoDB disconnection process")

        if self.client is None:
            db_logger.warning("Disconnect called but no active MongoDB connection found")
            return

        self.client.close()
        self.client = None
        self.database = None
        perf_logger.info("MongoDB disconnection completed in %.3fs", time.time() - start_time)
        db_logger.info("Successfully disconnected from MongoDB")

    async def health_check(self) -> bool:
        """
        Verify MongoDB connectivity with a `ping`.

        Returns:
            `bool`: `True` if the server answers, `False` otherwise (never raises).
        """
        if self.client is None:
            health_logger.warning("Health check failed: No database client available")
            return False

        start_time = time.time()
        try:
            await self.client.admin.command("ping")
        except PyMongoError as e:
            perf_logger.warning("Database health check failed after %.3fs", time.time() - start_time)
            health_logger.error("Database health check failed: %s", e)
            return False

        perf_logger.debug("Database health check completed in %.3fs", time.time() - start_time)
        return True

    def get_collection(self, collection_name: str) -> AsyncIOMotorCollection:
        """
        Retrieve a collection from the connected database.

        Raises:
            `ConnectionError`: If `connect()` has not been called.
        """
        if self.database is None:
            db_logger.error("Attempted to get collection '%s' without database connection", collection_name)
            raise ConnectionError("Database not connected. Call connect() first.")

        db_logger.debug("Retrieving collection: %s", collection_name)
        return self.database[collection_name]

    async def create_indexes(self):
        """Create the indexes used by flashcard and category queries."""
        start_time = time.time()
        db_logger.info("Starting database index creation process")

        flashcards = self.get_collection(settings.FLASHCARDS_COLLECTION)
        await self._create_index_if_not_exists(flashcards, "next_review", {})
        await self._create_index_if_not_exists(flashcards, "category", {})

        categories = self.get_collection(settings.CATEGORIES_COLLECTION)
        await self._create_index_if_not_exists(categories, "name", {"unique": True})

        perf_logger.info("Database index creation completed in %.3fs", time.time() - start_time)

    async def _create_index_if_not_exists(
        self, collection: AsyncIOMotorCollection, field_spec: Any, options: Dict[str, Any]
    ):
        """Create an index if it doesn't already exist"""
        start_time = time.time()

        try:
            await collection.create_index(field_spec, **options)
            perf_logger.debug("Created/ensured index '%s' in %.3fs", field_spec, time.time() - start_time)
        except PyMongoError as e:
            db_logger.warning("Could not create/ensure index '%s': %s", field_spec, e)


# Global database manager instance
db_manager = DatabaseManager()
