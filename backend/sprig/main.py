import logging
import warnings
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.ext.asyncio import create_async_engine

from sprig.config import Settings, settings as default_settings
from sprig.core.errors import register_error_handlers
from sprig.core.middleware import AccessLogMiddleware, RequestIDMiddleware, SessionMiddleware
from sprig.database import Database
from sprig.models.user import ensure_user_schema
from sprig.routers import auth, user

PLACEHOLDER_AUTH_KEY = "__AUTH_KEY__"

logger = logging.getLogger("sprig")


def check_app_integrity(app_settings: Settings) -> None:
    """Refuse the placeholder auth key in production, warn about it elsewhere."""
    if app_settings.auth_key != PLACEHOLDER_AUTH_KEY:
        return
    if app_settings.is_production:
        raise RuntimeError(
            "AUTH_KEY must be set to a secure random value in production. "
            "Generate one with: python -c \"import secrets; print(secrets.token_hex(32))\""
        )
    warnings.warn("AUTH_KEY is using the placeholder value. Set it for production.", stacklevel=2)


def create_app(app_settings: Settings | None = None, *, db: Database | None = None) -> FastAPI:
    app_settings = app_settings or default_settings
    check_app_integrity(app_settings)

    @asynccontextmanager
    async def lifespan(application: FastAPI):
        """Open the database and make sure the tables exist."""
        database = db or Database(create_async_engine(app_settings.database_url))
        application.state.db = database
        await ensure_user_schema(database)
        logger.info("Database tables verified/created")
        yield
        if db is None:
            await database.dispose()

    app = FastAPI(
        title=app_settings.app_name,
        version="0.1.0",
        docs_url="/docs" if app_settings.debug else None,
        redoc_url="/redoc" if app_settings.debug else None,
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    if db is not None:
        app.state.db = db

    # Middleware: last added = outermost. The session is resolved innermost
    # so request id and access log wrap every response it produces.
    app.add_middleware(SessionMiddleware, settings=app_settings)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(AccessLogMiddleware)

    register_error_handlers(app)

    app.include_router(auth.router)
    app.include_router(user.router)

    @app.get("/health")
    async def health_check():
        return {"status": "ok", "app": app_settings.app_name, "version": "0.1.0"}

    return app


app = create_app()
