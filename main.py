from contextlib import asynccontextmanager
from typing import Optional

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.config import Settings, settings as default_settings
from core.database import Database
from core.errors import register_exception_handlers
from core.logging_config import setup_logging
from core.middleware import AuthRedirectMiddleware, RequestLoggingMiddleware
from routes.auth import router as auth_router
from routes.users import router as members_router
from routes.plans import router as plans_router
from routes.subscriptions import router as subscriptions_router
from routes.payments import router as payments_router
from routes.events import router as events_router
from routes.public_events import router as public_events_router
from routes.images import router as images_router
from routes.dashboard import router as dashboard_router, analytics_router
from routes.organization import router as organization_router
from routes.diagnostics import router as diagnostics_router
from routes.pages import router as pages_router

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    """Build the application around an explicitly constructed Database."""
    settings = settings or default_settings
    setup_logging(settings.LOG_LEVEL)
    db = database or Database(settings.DATABASE_URL, echo=settings.DEBUG and settings.LOG_LEVEL == "DEBUG")

    # =========================================
    # 🏁 Lifespan (DB initialization)
    # =========================================
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.db.create_all()
        logger.info("✅ Database tables ready (%s environment).", settings.ENVIRONMENT)
        yield
        app.state.db.dispose()
        logger.info("✅ Application shutting down.")

    # =========================================
    #  ✅ FastAPI App
    # =========================================
    app = FastAPI(lifespan=lifespan, title="MissionBoard Backend")
    app.state.db = db

    app.add_middleware(AuthRedirectMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    register_exception_handlers(app)

    # =========================================
    # 📦 Routers
    # =========================================
    app.include_router(auth_router, prefix="/api/auth")
    app.include_router(members_router, prefix="/api/members")
    app.include_router(members_router, prefix="/api/users")
    app.include_router(plans_router, prefix="/api/plans")
    app.include_router(subscriptions_router, prefix="/api/subscriptions")
    app.include_router(payments_router, prefix="/api/payments")
    app.include_router(events_router, prefix="/api/events")
    app.include_router(public_events_router, prefix="/api/public/events")
    app.include_router(images_router, prefix="/api/images")
    app.include_router(dashboard_router, prefix="/api/dashboard")
    app.include_router(analytics_router, prefix="/api/analytics")
    app.include_router(organization_router, prefix="/api/settings/organization")
    app.include_router(diagnostics_router, prefix="/api/diagnostics")
    app.include_router(pages_router)

    # =========================================
    # 🩺 Health Check
    # =========================================
    @app.get("/health")
    def health_check():
        return {"status": "ok", "message": "Backend is running"}

    @app.get("/")
    def read_root():
        return {"message": "Welcome to MissionBoard Backend!"}

    return app


app = create_app()
