from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

import redis.asyncio as aioredis
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from dm_service.api.middleware.correlation_id import CorrelationIdMiddleware
from dm_service.api.middleware.metrics import RequestTimingMiddleware
from dm_service.api.v1.routers import chats, health, messages
from dm_service.application.exceptions import (
    AppError,
    InvalidContentError,
    InvalidExpiryError,
    InvalidRequestError,
    NotFoundOrForbiddenError,
    ParticipantsInvalidError,
    StoreUnavailableError,
)
from dm_service.config import settings
from dm_service.infrastructure.bus.redis_pubsub import RedisPubSubPublisher
from dm_service.infrastructure.db.uow import sql_uow
from dm_service.infrastructure.notifications.dispatcher import NotificationDispatcher
from dm_service.infrastructure.notifications.redis_sink import RedisNotificationSink
from dm_service.infrastructure.storage.local import LocalAttachmentStorage
from dm_service.log import configure_logging
from dm_service.workers.expiry_reaper import ExpiryReaper

logger = logging.getLogger(__name__)

SHUTDOWN_DRAIN_SECONDS = 5.0

_STATUS_BY_ERROR: dict[type[AppError], int] = {
    InvalidRequestError: 400,
    InvalidContentError: 400,
    InvalidExpiryError: 400,
    ParticipantsInvalidError: 404,
    NotFoundOrForbiddenError: 404,
    StoreUnavailableError: 503,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""
    app.state.redis = aioredis.from_url(
        settings.REDIS_URL,
        decode_responses=True,
    )
    logger.info("Redis connection pool created")

    dispatcher = NotificationDispatcher(
        RedisNotificationSink(
            RedisPubSubPublisher(app.state.redis),
            settings.NOTIFICATIONS_CHANNEL,
        ),
        max_size=settings.NOTIFICATION_QUEUE_SIZE,
    )
    await dispatcher.start()
    app.state.notifications = dispatcher

    reaper: ExpiryReaper | None = None
    if settings.REAPER_ENABLED:
        reaper = ExpiryReaper(sql_uow, settings.REAPER_INTERVAL_SECONDS)
        await reaper.start()
    app.state.reaper = reaper

    yield

    if reaper is not None:
        await reaper.stop()
    try:
        await asyncio.wait_for(dispatcher.drain(), timeout=SHUTDOWN_DRAIN_SECONDS)
    except TimeoutError:
        logger.warning("Notification queue not drained within %.0fs", SHUTDOWN_DRAIN_SECONDS)
    await dispatcher.stop()
    await app.state.redis.aclose()
    logger.info("Redis connection pool closed")


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="Direct Messaging Service",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.attachment_storage = LocalAttachmentStorage(
        Path(settings.UPLOAD_DIR),
        settings.UPLOAD_URL_PREFIX,
        max_files=settings.UPLOAD_MAX_FILES,
        max_bytes=settings.UPLOAD_MAX_BYTES,
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
    app.include_router(chats.router)
    app.include_router(messages.router)

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def _app_error(_req: Request, exc: AppError) -> JSONResponse:
        status_code = _STATUS_BY_ERROR.get(type(exc), 400)
        if status_code >= 500:
            logger.warning("%s: %s", exc.code, exc.detail, exc_info=exc.__cause__)
        return JSONResponse(
            status_code=status_code,
            content={"error": exc.code, "detail": exc.detail},
        )

    @app.exception_handler(Exception)
    async def _unhandled(_req: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled error", exc_info=exc)
        detail = str(exc) if settings.expose_error_details else "Internal server error"
        return JSONResponse(
            status_code=500,
            content={"error": "internal_error", "detail": detail},
        )
