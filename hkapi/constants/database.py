"""Document store constants: collection names and batch limits."""

from typing import Final


class Collections:
    """Collection names used in the document store."""

    HOUSEKEEPING: Final[str] = "housekeeping_data"
    USERS: Final[str] = "hk_users"
    OTP: Final[str] = "otp_codes"
    NOTIFICATIONS: Final[str] = "booking_notifications"
    ROOM_CONFIG: Final[str] = "room_config"


class Database:
    """Store connection and batching configuration."""

    MEMORY_URL: Final[str] = "memory://"
    TEST_URL: Final[str] = "postgresql://localhost:5432/hk_api_test"
    TABLE: Final[str] = "documents"
    # Largest number of deletes committed in one batch
    BATCH_SIZE: Final[int] = 500
    POOL_TIMEOUT_SECONDS: Final[float] = 30.0
    COMMAND_TIMEOUT_SECONDS: Final[float] = 60.0
