import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from techblog.adapters.auth.crypto import JWTIdentityProvider
from techblog.adapters.sqlite.database import SQLiteDatabase
from techblog.adapters.sqlite.migrator import SQLiteMigrator
from techblog.api.deps import Settings, get_settings
from techblog.api.errors import storage_error_handler
from techblog.api.routes import admin_posts, admin_stats, auth, posts
from techblog.domain.errors import StorageError
from techblog.rules.loader import load_rules
from techblog.shell.http.health import StartupTracker, create_health_router

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the API. The storage handle lives exactly as long as the app's lifespan."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        # Load rules and validate on startup (fail-fast)
        try:
            rules = load_rules(settings.rules_path)
        except (FileNotFoundError, ValueError):
            logger.critical("Rules load failed from %s", settings.rules_path, exc_info=True)
            raise
        logger.info("Rules loaded from %s", settings.rules_path)

        database = SQLiteDatabase(settings.db_path)
        SQLiteMigrator(database).run_migrations()

        app.state.rules = rules
        app.state.database = database
        app.state.identity = JWTIdentityProvider(
            settings.secret_key,
            algorithm=rules.auth.algorithm,
            ttl_minutes=rules.auth.token_ttl_minutes,
        )
        StartupTracker.mark_started()

        try:
            yield
        finally:
            database.close()
            logger.info("Shutdown complete")

    app = FastAPI(
        title="Techblog API",
        version=VERSION,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_exception_handler(StorageError, storage_error_handler)

    # --- Routers ---
    app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
    app.include_router(posts.router, prefix="/api/posts", tags=["Posts"])
    app.include_router(admin_posts.router, prefix="/api/admin/posts", tags=["Admin Posts"])
    app.include_router(admin_stats.router, prefix="/api/admin/stats", tags=["Admin Stats"])
    app.include_router(create_health_router(version=VERSION), prefix="/api")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    return app
