from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

import redis.asyncio as aioredis
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from direct_chat.api.middleware.correlation_id import CorrelationIdMiddleware
from direct_chat.api.middleware.metrics import RequestTimingMiddleware
from direct_chat.api.v1.routers import auth, health, messages, ws
from direct_chat.application.exceptions import AppError
from direct_chat.config import settings
from direct_chat.infrastructure.bus.redis_pubsub import RedisPubSubSubscriber
from direct_chat.infrastructure.db.session import dispose_engine

logger = logging.getLogger(__name__)


async def _on_pubsub_event(event_type: str, data: dict[str, Any]) -> None:
    """Forward a fan-out event to the local WS connections of the users it concerns."""
    user_ids = data.get("user_ids") or []
    message = data.get("message")
    if not user_ids or message is None:
        return
    await ws.get_manager().send_to_users(user_ids, event_type, message)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""
    if settings.DB_CREATE_SCHEMA:
        from direct_chat.infrastructure.db.session import create_schema

        await create_schema()
        logger.info("Database schema ensured")

    app.state.redis = aioredis.from_url(settings.REDIS_URL, decode_responses=True)
    logger.info("Redis connection pool created")

    subscriber = RedisPubSubSubscriber(
        app.state.redis,
        settings.REDIS_PUBSUB_CHANNEL,
        _on_pubsub_event,
    )
    await subscriber.start()
    app.state.pubsub_subscriber = subscriber

    yield

    await subscriber.stop()
    await app.state.redis.aclose()
    logger.info("Redis connection pool closed")
    await dispose_engine()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Direct Chat",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestTimingMiddleware)
    app.add_middleware(CorrelationIdMiddleware)

    _register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(messages.router)
    app.include_router(ws.router)

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    async def _app_error(request: Request, exc: Exception) -> JSONResponse:
        assert isinstance(exc, AppError)
        logger.debug("%s %s -> %d %s", request.method, request.url.path, exc.status_code, exc.detail)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    app.add_exception_handler(AppError, _app_error)
