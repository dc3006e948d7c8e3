"""Routes package for the HK API web application."""

from .auth import router as auth_router
from .health import router as health_router
from .housekeeping import router as housekeeping_router
from .notifications import router as notifications_router
from .room_config import router as room_config_router
from .users import router as users_router
from .webhook import router as webhook_router

__all__ = [
    "auth_router",
    "health_router",
    "housekeeping_router",
    "notifications_router",
    "room_config_router",
    "users_router",
    "webhook_router",
]
