"""Health and readiness endpoints."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from src.api.dependencies import get_screening_service
from src.config import settings
from src.domains.screening.service import ScreeningService

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict:
    from src.main import get_uptime

    return {
        "status": "healthy",
        "version": settings.app_version,
        "uptime_seconds": get_uptime(),
    }


@router.get("/ready")
async def ready(service: ScreeningService = Depends(get_screening_service)) -> JSONResponse:
    sources = {
        adapter.name: {
            "category": str(adapter.category),
            "subject_kinds": sorted(k.value for k in adapter.supported_kinds),
            "timeout_ms": adapter.timeout_ms or service.config.default_timeout_ms,
        }
        for adapter in service.adapters
    }
    all_ready = bool(sources)
    return JSONResponse(
        status_code=200 if all_ready else 503,
        content={
            "status": "ready" if all_ready else "degraded",
            "sources": sources,
        },
    )
