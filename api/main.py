"""FastAPI application for the golf round tracker."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import configure_logging, get_config
from database.connection import db
from database.db_manager import DatabaseManager
from database.retry import RetryPolicy
from entry.sessions import EntrySessionStore
from api.errors import register_exception_handlers

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize DB pool on startup, close on shutdown."""
    cfg = app.state.config
    await db.initialize(**db.kwargs_from_config(cfg))
    app.state.db_manager = DatabaseManager(db.pool, RetryPolicy.from_config(cfg))
    logger.info("API started (%s)", cfg.APP_ENV)
    try:
        yield
    finally:
        await db.close()


def create_app(cfg=None) -> FastAPI:
    cfg = cfg or get_config()
    configure_logging(cfg.LOG_LEVEL)

    app = FastAPI(
        title="Golf Round Tracker API",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.config = cfg
    app.state.entry_sessions = EntrySessionStore(ttl=cfg.ENTRY_SESSION_TTL)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    from api.routers import courses, entry, rounds, stats, users
    app.include_router(courses.router, prefix="/api/courses", tags=["courses"])
    app.include_router(users.router, prefix="/api/users", tags=["users"])
    app.include_router(rounds.router, prefix="/api/rounds", tags=["rounds"])
    app.include_router(stats.router, prefix="/api/stats", tags=["stats"])
    app.include_router(entry.router, prefix="/api/entry", tags=["entry"])

    @app.get("/api/health")
    async def health():
        healthy = await db.health_check()
        return {"status": "ok" if healthy else "degraded", "database": healthy}

    return app


app = create_app()
