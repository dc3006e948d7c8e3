#!/usr/bin/env python3
"""
HK API - housekeeping state, staff OTP login and booking notifications.

Main entry point for the application.
"""

import argparse
import os
import sys

from loguru import logger

from hkapi.core.config import get_settings
from hkapi.core.exceptions import ConfigurationError
from hkapi.core.logger import setup_structured_logging

DEFAULT_PORT = 8080


def parse_safe_port(env_var: str = "PORT", default: int = DEFAULT_PORT) -> int:
    """Parse port from environment variable with validation.

    Args:
        env_var: Environment variable name to read
        default: Default port if env var is missing or invalid

    Returns:
        Valid port number (1-65535)
    """
    raw = os.getenv(env_var)
    if raw is None:
        return default
    try:
        port = int(raw)
        if not (1 <= port <= 65535):
            raise ValueError(f"Port must be 1-65535, got: {port}")
        return port
    except ValueError as e:
        logger.warning(f"Invalid {env_var}: {e}. Using default {default}")
        return default


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="HK API - housekeeping backend")
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: LOG_LEVEL setting)",
    )
    parser.add_argument("--host", default=None, help="Bind address (default: UVICORN_HOST)")
    parser.add_argument("--port", type=int, default=None, help="Port (default: PORT or 8080)")

    args = parser.parse_args()

    try:
        settings = get_settings()
    except ValueError as e:
        # pydantic's ValidationError subclasses ValueError
        print(f"Invalid configuration: {e}", file=sys.stderr)
        sys.exit(1)

    json_logging = os.getenv("JSON_LOGGING", "true").lower() == "true"
    setup_structured_logging(args.log_level or settings.log_level, json_format=json_logging)

    host = args.host or os.getenv("UVICORN_HOST", "0.0.0.0")
    port = args.port or parse_safe_port()

    try:
        import uvicorn

        from web.app import create_app

        if not settings.email_configured:
            logger.warning("SMTP credentials not set; OTP emails will fail")

        logger.info(f"HK API starting on {host}:{port} (env={settings.env}, tz={settings.timezone})")
        uvicorn.run(create_app(settings=settings), host=host, port=port, log_config=None)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)
    except Exception as e:
        logger.opt(exception=e).error(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
