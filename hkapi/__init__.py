"""HK API - housekeeping operations backend with OTP login and booking webhooks."""

__version__ = "1.0.0"
