"""
# Flashcard Trainer API

FastAPI application entry point.

## Lifespan

**Startup:**
1.  Connect to MongoDB (`db_manager.connect()`).
2.  Create/verify indexes.

**Shutdown:**
1.  Disconnect from MongoDB.

## Running

```bash
flashcard-trainer            # uvicorn on settings.HOST:settings.PORT
uvicorn flashcard_trainer.main:app --reload
```
"""

import time
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from flashcard_trainer import __version__
from flashcard_trainer.config import settings
from flashcard_trainer.database import db_manager
from flashcard_trainer.managers.logging_manager import get_logger
from flashcard_trainer.routes.flashcards import router as flashcards_router
from flashcard_trainer.routes.health import router as health_router
from flashcard_trainer.utils.logging_utils import (
    RequestLoggingMiddleware,
    log_application_lifecycle,
    log_error_with_context,
)

logger = get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """
    Connect to MongoDB and ensure indexes before serving; disconnect on shutdown.

    Raises:
        ServerSelectionTimeoutError: If MongoDB stays unreachable; the app does not start.
    """
    startup_start_time = time.time()
    log_application_lifecycle(
        "startup_initiated",
        {"app_name": "Flashcard Trainer API", "version": __version__, "debug_mode": settings.DEBUG},
    )

    try:
        await db_manager.connect()
        log_application_lifecycle(
            "database_connected",
            {
                "database_name": settings.MONGODB_DATABASE,
                "connection_url": settings.MONGODB_URL.split("@")[-1],
            },
        )
        await db_manager.create_indexes()
        log_application_lifecycle("database_indexes_ready")
    except Exception as e:
        log_error_with_context(e, {"operation": "application_startup"})
        raise

    log_application_lifecycle("startup_completed", {"startup_duration": f"{time.time() - startup_start_time:.3f}s"})

    yield

    shutdown_start_time = time.time()
    try:
        await db_manager.disconnect()
    except Exception as e:
        log_error_with_context(e, {"operation": "database_disconnection"})

    log_application_lifecycle(
        "shutdown_completed", {"total_shutdown_duration": f"{time.time() - shutdown_start_time:.3f}s"}
    )


app = FastAPI(
    title="Flashcard Trainer API",
    description="Bilingual vocabulary flashcards grouped by category, scheduled with SM-2 spaced repetition.",
    version=__version__,
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Flashcards", "description": "Categories, flashcards, bulk entry and reviews"},
        {"name": "System", "description": "System health endpoints"},
    ],
)

cors_origins = settings.cors_origins_list
logger.info(f"Configuring CORS with origins: {cors_origins}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

app.include_router(flashcards_router)
app.include_router(health_router)


def run():
    """Console entry point: serve the API with uvicorn."""
    uvicorn.run(
        "flashcard_trainer.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
