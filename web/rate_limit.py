"""Request rate limiting with slowapi."""

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from hkapi.core.config import get_settings


def get_client_ip(request: Request) -> str:
    """Rate limit key: the client address as seen by the server."""
    return get_remote_address(request) or "unknown"


def otp_rate_limit() -> str:
    """Per-client limit for send-otp, read from settings on each request."""
    return get_settings().otp_rate_limit


limiter = Limiter(key_func=get_client_ip)
