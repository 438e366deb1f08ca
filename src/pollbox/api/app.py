"""FastAPI application factory for the pollbox REST API."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from pollbox.config.schema import PollboxConfig

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan handler: set up DB + notifier on startup, tear down on shutdown."""
    from pollbox.notify.dispatcher import build_dispatcher
    from pollbox.storage.database import create_db

    config: PollboxConfig = app.state.config
    factory, engine = await create_db(config.database)
    notifier = build_dispatcher(config.mail)
    notifier.start()

    app.state.db_factory = factory
    app.state.engine = engine
    app.state.notifier = notifier

    if not config.auth.jwt_secret:
        logger.warning("auth.jwt_secret is empty; every authenticated request will fail")

    yield

    await notifier.stop()
    await engine.dispose()


def create_app(config: PollboxConfig | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    from pollbox import __version__
    from pollbox.config.loader import load_config
    from pollbox.core.logging import configure_logging

    if config is None:
        config = load_config()

    configure_logging(config.logging)

    app = FastAPI(
        title="pollbox",
        description="Questions, answers and one vote per user",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config

    # ── Middleware (Starlette runs in reverse order of addition) ──
    from fastapi.middleware.cors import CORSMiddleware

    from pollbox.api.middleware import RateLimitMiddleware

    # CORS (innermost: added first, wrapped by the rate limiter)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(
        RateLimitMiddleware,
        rate_limit=config.api.rate_limit,
        window=config.api.rate_limit_window,
    )

    from pollbox.api.errors import register_error_handlers

    register_error_handlers(app)

    # Routes
    from pollbox.api.auth import router as users_router
    from pollbox.api.health import router as health_router
    from pollbox.api.routes.questions import router as questions_router
    from pollbox.api.routes.votes import router as votes_router

    app.include_router(questions_router)
    app.include_router(votes_router)
    app.include_router(users_router)
    app.include_router(health_router)

    return app
