from __future__ import annotations

from datetime import UTC, datetime

import structlog
from fastapi import APIRouter, Depends
from src.api.deps import get_registry
from src.core.config import get_settings
from src.domain.services.registry import AssessmentRegistry
from src.infrastructure.repositories.assessment_store import RemoteStoreError

router = APIRouter(tags=["Observability"])
logger = structlog.get_logger()


async def check_remote_store(registry: AssessmentRegistry) -> dict:
    """Check the hosted assessments table."""
    if registry.remote is None or not registry.remote_sync_enabled:
        return {"status": "disabled"}
    try:
        await registry.remote.check_connection()
        return {"status": "ok"}
    except RemoteStoreError as e:
        return {"status": "error", "message": str(e)[:100]}


def check_local_cache(registry: AssessmentRegistry) -> dict:
    path = registry.local_cache.path
    return {"status": "ok", "path": str(path), "exists": path.exists()}


@router.get("/health", summary="Service health probe")
async def health_check(registry: AssessmentRegistry = Depends(get_registry)) -> dict:
    """Return basic service and datastore status information."""
    settings = get_settings()

    remote_status = await check_remote_store(registry)
    local_status = check_local_cache(registry)

    # Local-only mode is healthy; a configured but failing remote is not
    overall_status = "ok" if remote_status.get("status") != "error" else "degraded"

    payload = {
        "service": settings.app_name,
        "version": settings.version,
        "status": overall_status,
        "timestamp": datetime.now(UTC).isoformat(),
        "records": len(registry),
        "datastores": {
            "remote_store": remote_status,
            "local_cache": local_status,
        },
    }
    logger.info("health_probe", **payload)
    return payload
