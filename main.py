import os
import sys
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

# Ensure local imports resolve
sys.path.append(os.path.dirname(__file__))

# Core
from core.config import settings
from core.logging_config import logger
from core.scheduler import shutdown_scheduler, start_scheduler

# -------------------------------------------------
# Routers
# -------------------------------------------------
from routers.auth import router as auth_router
from routers.signup import router as signup_router, plans_router
from routers.profile import router as profile_router
from routers.subscriptions import router as subscriptions_router
from routers.stripe_webhooks import router as stripe_webhooks_router

from routers.condominiums import router as condominiums_router
from routers.suppliers import router as suppliers_router
from routers.maintenance import router as maintenance_router
from routers.dashboard import router as dashboard_router
from routers.reports import router as reports_router
from routers.notifications import router as notifications_router

from routers.health import router as health_router


# -------------------------------------------------
# Create the Application
# -------------------------------------------------
def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="1.0.0",
        description="Síndico API: condominium maintenance management on Supabase + Stripe",
    )

    # -------------------------------------------------
    # CORS
    # -------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -------------------------------------------------
    # Startup / shutdown
    # -------------------------------------------------
    @app.on_event("startup")
    async def on_startup():
        logger.info(f"🚀 Starting {settings.PROJECT_NAME} ({settings.ENV})")
        for route in app.routes:
            # included-router entries carry no path of their own
            path = getattr(route, "path", None)
            if path is None:
                continue
            methods = ",".join(sorted(getattr(route, "methods", None) or []))
            logger.debug(f"➡️ {methods:10s} {path}")

        if settings.SCHEDULER_ENABLED:
            start_scheduler()

    @app.on_event("shutdown")
    async def on_shutdown():
        shutdown_scheduler()

    # -------------------------------------------------
    # Error handling
    # -------------------------------------------------
    @app.exception_handler(StarletteHTTPException)
    async def handle_http(request: Request, exc: StarletteHTTPException):
        if exc.status_code in (401, 403, 500):
            logger.warning(
                f"HTTP {exc.status_code} at {request.url}: {exc.detail}"
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unhandled(request: Request, exc: Exception):
        logger.error("Unhandled error at %s", request.url, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    # -------------------------------------------------
    # Register Routers
    # -------------------------------------------------

    # Auth + billing
    app.include_router(auth_router)
    app.include_router(signup_router)
    app.include_router(plans_router)
    app.include_router(profile_router)
    app.include_router(subscriptions_router)
    app.include_router(stripe_webhooks_router)

    # Core Data Routers (subscription required)
    app.include_router(condominiums_router)
    app.include_router(suppliers_router)
    app.include_router(maintenance_router)
    app.include_router(dashboard_router)
    app.include_router(reports_router)
    app.include_router(notifications_router)

    # Health
    app.include_router(health_router)

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "service": settings.PROJECT_NAME,
            "version": app.version,
            "docs": "/docs",
        }

    return app


# Create the global FastAPI instance
app = create_app()
