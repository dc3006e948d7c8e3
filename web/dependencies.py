"""Dependency injection functions for the web application.

Services are built once by ``create_app()`` and kept on ``app.state``;
routes receive them through these functions so tests can swap the
store, mailer and clock without touching globals.
"""

from fastapi import Request

from hkapi.core.config.settings import HKSettings
from hkapi.repositories import (
    HousekeepingRepository,
    NotificationRepository,
    RoomConfigRepository,
    UserRepository,
)
from hkapi.services.auth import OtpAuthenticator
from hkapi.services.cleanup_service import NotificationRetentionSweeper
from hkapi.services.webhooks import BookingIngestor
from hkapi.utils.clock import Clock


def get_app_settings(request: Request) -> HKSettings:
    return request.app.state.settings


def get_clock(request: Request) -> Clock:
    return request.app.state.clock


def get_user_repository(request: Request) -> UserRepository:
    return request.app.state.users


def get_notification_repository(request: Request) -> NotificationRepository:
    return request.app.state.notifications


def get_housekeeping_repository(request: Request) -> HousekeepingRepository:
    return request.app.state.housekeeping


def get_room_config_repository(request: Request) -> RoomConfigRepository:
    return request.app.state.room_config


def get_otp_authenticator(request: Request) -> OtpAuthenticator:
    return request.app.state.otp_authenticator


def get_booking_ingestor(request: Request) -> BookingIngestor:
    return request.app.state.booking_ingestor


def get_retention_sweeper(request: Request) -> NotificationRetentionSweeper:
    return request.app.state.retention_sweeper
