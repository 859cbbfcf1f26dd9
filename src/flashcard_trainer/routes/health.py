"""Health probe reporting database connectivity."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from flashcard_trainer.database import db_manager

router = APIRouter(tags=["System"])


@router.get("/health")
async def health():
    """Return 200 when MongoDB answers a ping, 503 otherwise."""
    if await db_manager.health_check():
        return {"status": "healthy", "database": "connected"}
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "unhealthy", "database": "disconnected"},
    )
