from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from reelhub.config import Settings, get_settings
from reelhub.infrastructure.database import SessionLocal, engine, initialize_database
from reelhub.infrastructure.logging_config import configure_logging
from reelhub.infrastructure.notifications import (
    NotificationGateway,
    NotificationHub,
    NotificationPurger,
    SqlAlchemyNotificationGateway,
)
from reelhub.interfaces.api.routes import register_routes


def build_notification_hub(settings: Settings, gateway: NotificationGateway) -> NotificationHub:
    """Create a hub tuned with the websocket and queue settings."""

    return NotificationHub(
        gateway,
        queue_size=settings.ws_queue_size,
        write_timeout=settings.ws_write_timeout_seconds,
        ping_period=settings.ws_ping_period_seconds,
        persist_queue_size=settings.persist_queue_size,
        delete_queue_size=settings.delete_queue_size,
    )


def create_app(
    settings: Settings | None = None,
    gateway: NotificationGateway | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Without an explicit ``gateway`` the notifications are stored through the
    configured SQLAlchemy engine, whose tables are created on start-up.
    """

    settings = settings or get_settings()
    configure_logging(settings.log_level)

    uses_default_database = gateway is None
    gateway = gateway or SqlAlchemyNotificationGateway(SessionLocal)
    hub = build_notification_hub(settings, gateway)
    purger = NotificationPurger(
        gateway,
        interval=settings.purge_interval_seconds,
        retention=timedelta(days=settings.notification_retention_days),
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Start the hub workers and the purge task; stop them on shutdown."""

        if uses_default_database:
            initialize_database()
        hub.start()
        purger.start()
        yield
        await purger.stop()
        await hub.shutdown()
        if uses_default_database:
            engine.dispose()

    app = FastAPI(title="ReelHub notifications", lifespan=lifespan)
    app.state.notification_hub = hub
    app.state.notification_gateway = gateway
    app.state.notification_purger = purger

    if settings.allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.allowed_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_routes(app)
    return app
