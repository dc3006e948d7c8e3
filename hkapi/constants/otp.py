"""OTP-related constants."""

from typing import Final


class OTP:
    """One-time password issuance and verification limits."""

    CODE_MIN: Final[int] = 100000
    CODE_MAX: Final[int] = 999999
    TTL_MINUTES: Final[int] = 10
    MAX_ATTEMPTS: Final[int] = 3
    # Compare-and-set retries before a verification is reported as contended
    CONFLICT_RETRIES: Final[int] = 5
