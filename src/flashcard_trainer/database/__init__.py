"""
# Database Package

Persistence layer built on **Motor** (async MongoDB driver).

- **`manager`**: `DatabaseManager` and the module-level `db_manager` instance that owns the
  connection. The connection is opened lazily in the FastAPI lifespan via
  `db_manager.connect()`.

Attributes:
    db_manager (DatabaseManager): The global instance for database access.
    DatabaseManager (class): The manager class (exported for type hinting).
"""

from flashcard_trainer.database.manager import DatabaseManager, db_manager

__all__ = ["DatabaseManager", "db_manager"]
