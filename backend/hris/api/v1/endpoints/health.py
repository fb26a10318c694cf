from __future__ import annotations

from fastapi import APIRouter, Depends

from hris.core.config import settings
from hris.core.dependencies import get_current_session
from hris.models.auth import Session
from hris.services.data_service import data_service
from hris.services.identity_service import identity_service

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health_check():
    services: dict[str, str] = {}

    try:
        if data_service.initialized:
            ok = await data_service.check_connection()
            services["supabase_rest"] = "ok" if ok else "error"
        else:
            services["supabase_rest"] = "not_configured"
    except Exception:
        services["supabase_rest"] = "error"

    try:
        if identity_service.initialized:
            ok = await identity_service.check_connection()
            services["supabase_auth"] = "ok" if ok else "error"
        else:
            services["supabase_auth"] = "not_configured"
    except Exception:
        services["supabase_auth"] = "error"

    all_ok = all(v in ("ok", "not_configured") for v in services.values())

    return {
        "status": "healthy" if all_ok else "degraded",
        "version": settings.APP_VERSION,
        "services": services,
    }


@router.get("/protected")
async def health_protected(session: Session = Depends(get_current_session)):  # noqa: B008
    return {"status": "ok", "user": session.user.model_dump()}


@router.get("/ready")
async def readiness_probe():
    return {"ready": True}
