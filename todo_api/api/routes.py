"""Health endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from todo_api.api.dependencies import get_container
from todo_api.container import Container

router = APIRouter()


@router.get("/health")
async def health_check(container: Container = Depends(get_container)) -> dict:
    """Health check endpoint.

    Returns:
        Status, storage backend health and timestamp in ISO8601 format
    """
    storage_healthy = await container.storage_healthy()
    return {
        "status": "healthy" if storage_healthy else "degraded",
        "storage": container.settings.db_connection,
        "database": "healthy" if storage_healthy else "unhealthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
