"""FastAPI application for the housekeeping API."""

import asyncio
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException

from hkapi import __version__
from hkapi.core.config import get_settings
from hkapi.core.config.settings import HKSettings
from hkapi.core.exceptions import HKApiError
from hkapi.middleware import CorrelationMiddleware
from hkapi.repositories import (
    HousekeepingRepository,
    NotificationRepository,
    OtpRepository,
    RoomConfigRepository,
    UserRepository,
)
from hkapi.services.auth import OtpAuthenticator
from hkapi.services.cleanup_service import NotificationRetentionSweeper
from hkapi.services.mail import Mailer, SmtpConfig, SmtpMailer
from hkapi.services.webhooks import BookingIngestor
from hkapi.storage import DocumentStore, DocumentStoreFactory
from hkapi.utils.clock import Clock, utc_now
from web.exception_handlers import (
    hk_api_error_handler,
    http_exception_handler,
    rate_limit_exceeded_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from web.rate_limit import limiter
from web.routes import (
    auth_router,
    health_router,
    housekeeping_router,
    notifications_router,
    room_config_router,
    users_router,
    webhook_router,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    FastAPI lifespan context manager for startup and shutdown.

    Handles:
    - Document store connection on startup
    - Document store cleanup on shutdown
    """
    logger.info("FastAPI application starting up...")
    store: DocumentStore = app.state.store
    try:
        if app.state.owns_store:
            await DocumentStoreFactory.ensure_connected()
        elif not store.is_connected:
            await store.connect()
        logger.info("Document store connection established")
    except Exception as e:
        logger.error(f"Failed to connect document store during startup: {e}")
        raise

    yield

    logger.info("FastAPI application shutting down...")
    try:
        if app.state.owns_store:
            await asyncio.wait_for(DocumentStoreFactory.close_instance(), timeout=10)
        else:
            await asyncio.wait_for(store.close(), timeout=10)
        logger.info("Document store closed successfully")
    except asyncio.TimeoutError:
        logger.error("Document store close timed out after 10s")
    except Exception as e:
        logger.error(f"Error closing document store: {e}")


def _wire_services(
    app: FastAPI, store: DocumentStore, mailer: Mailer, settings: HKSettings, clock: Clock
) -> None:
    """Build repositories and services once and keep them on app.state."""
    users = UserRepository(store)
    notifications = NotificationRepository(store)

    app.state.store = store
    app.state.settings = settings
    app.state.clock = clock
    app.state.users = users
    app.state.notifications = notifications
    app.state.housekeeping = HousekeepingRepository(store)
    app.state.room_config = RoomConfigRepository(store)
    app.state.otp_authenticator = OtpAuthenticator(
        users=users,
        challenges=OtpRepository(store),
        mailer=mailer,
        property_name=settings.property_name,
        ttl_minutes=settings.otp_ttl_minutes,
        max_attempts=settings.otp_max_attempts,
        clock=clock,
    )
    app.state.booking_ingestor = BookingIngestor(
        notifications,
        default_property_id=settings.default_property_id,
        dedup_enabled=settings.webhook_dedup_enabled,
    )
    app.state.retention_sweeper = NotificationRetentionSweeper(
        notifications,
        retention_hours=settings.notification_retention_hours,
        clock=clock,
    )


def create_app(
    store: Optional[DocumentStore] = None,
    mailer: Optional[Mailer] = None,
    settings: Optional[HKSettings] = None,
    clock: Clock = utc_now,
) -> FastAPI:
    """
    Factory function to create FastAPI application instance.

    Args:
        store: Document store (default: the process-wide store from settings)
        mailer: Mailer (default: SMTP from settings)
        settings: Settings (default: get_settings())
        clock: Source of the current UTC time

    Returns:
        Configured FastAPI application instance
    """
    settings = settings or get_settings()
    is_dev = not settings.is_production()

    app = FastAPI(
        title="HK API",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if is_dev else None,
        redoc_url="/redoc" if is_dev else None,
        openapi_url="/openapi.json" if is_dev else None,
        description="Housekeeping state, staff login codes and booking notifications.",
    )

    app.state.owns_store = store is None
    _wire_services(
        app,
        store=store or DocumentStoreFactory.get_instance(),
        mailer=mailer or SmtpMailer(SmtpConfig.from_settings(settings)),
        settings=settings,
        clock=clock,
    )

    # Middleware: correlation id innermost so CORS preflights are answered first
    app.add_middleware(CorrelationMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    limiter.enabled = settings.rate_limit_enabled
    app.state.limiter = limiter

    app.add_exception_handler(HKApiError, hk_api_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(health_router)
    app.include_router(webhook_router)
    app.include_router(notifications_router)
    app.include_router(housekeeping_router)
    app.include_router(users_router)
    app.include_router(auth_router)
    app.include_router(room_config_router)

    return app


if __name__ == "__main__":
    import uvicorn

    host = os.getenv("UVICORN_HOST", "127.0.0.1")
    port = int(os.getenv("PORT", "8080"))
    uvicorn.run(create_app(), host=host, port=port)
