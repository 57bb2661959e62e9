# routers/health.py

from fastapi import APIRouter

from core.config import settings
from core.logging_config import logger
from core.supabase_client import ping_supabase

router = APIRouter(
    prefix="/health",
    tags=["Health"],
)


# -----------------------------------------------------
# GET /health/app
# -----------------------------------------------------
@router.get("/app", summary="App health check")
def health_app():
    """Static liveness probe for uptime monitors."""
    return {
        "service": settings.PROJECT_NAME,
        "environment": settings.ENV,
        "status": "ok",
    }


# -----------------------------------------------------
# GET /health/db
# One probe query per application table, no auth
# -----------------------------------------------------
@router.get("/db", summary="Supabase / DB health check")
def health_db():
    try:
        status = ping_supabase()
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return {"service": "Supabase", "status": "error", "error": str(e)}

    return {
        "service": "Supabase",
        "status": status.get("status", "unknown"),
        "details": status,
    }
