"""Custom exception classes for HK API."""

from datetime import datetime, timezone
from typing import Any, Dict, Optional


class HKApiError(Exception):
    """Base exception for HK API."""

    http_status: int = 500

    def __init__(
        self, message: str, recoverable: bool = True, details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize HK API error.

        Args:
            message: Error message
            recoverable: Whether the caller can recover by retrying the flow
            details: Additional error details
        """
        self.message = message
        self.recoverable = recoverable
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "recoverable": self.recoverable,
            "details": self.details,
            "timestamp": self.timestamp,
        }


# Configuration Errors
class ConfigurationError(HKApiError):
    """Configuration error occurred."""

    def __init__(
        self,
        message: str = "Configuration error",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, recoverable=False, details=details)


# Validation Errors
class ValidationError(HKApiError):
    """Input validation error."""

    http_status = 400

    def __init__(self, message: str = "Validation error", field: Optional[str] = None):
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
        """
        self.field = field
        super().__init__(message, recoverable=False, details={"field": field} if field else {})


# Store Errors
class StoreError(HKApiError):
    """Base class for document store errors."""

    def __init__(
        self,
        message: str = "Document store error occurred",
        recoverable: bool = False,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, recoverable, details)


class StoreUnavailableError(StoreError):
    """Raised when a document store call fails at the I/O level."""

    def __init__(self, message: str = "Document store unavailable", operation: Optional[str] = None):
        details = {"operation": operation} if operation else {}
        super().__init__(message, recoverable=True, details=details)


class StoreNotConnectedError(StoreError):
    """Raised when an operation is attempted before connect()."""

    def __init__(self):
        super().__init__(
            "Document store is not connected. Call connect() first.", recoverable=False
        )


class ConcurrentUpdateError(StoreError):
    """Raised when a compare-and-set write keeps losing to concurrent writers."""

    def __init__(self, collection: str, doc_id: str):
        super().__init__(
            f"Concurrent update conflict on {collection}/{doc_id}",
            recoverable=True,
            details={"collection": collection, "id": doc_id},
        )


class RecordNotFoundError(StoreError):
    """Raised when a document is not found."""

    http_status = 404

    def __init__(self, resource_type: str, resource_id: Any):
        super().__init__(
            f"{resource_type} with id '{resource_id}' not found",
            recoverable=False,
            details={"resource_type": resource_type, "resource_id": resource_id},
        )


class MailDeliveryError(HKApiError):
    """Raised by a mailer when a message could not be handed to the relay."""

    def __init__(self, message: str = "Mail delivery failed"):
        super().__init__(message, recoverable=True)


# OTP Errors
class OTPError(HKApiError):
    """Base class for OTP authentication errors."""

    http_status = 400

    def __init__(
        self,
        message: str = "OTP error occurred",
        recoverable: bool = True,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, recoverable, details)


class UserNotFoundError(OTPError):
    """Raised when no user owns the requested email address."""

    http_status = 404

    def __init__(self, message: str = "User not found"):
        super().__init__(message, recoverable=True)


class DeliveryFailedError(OTPError):
    """Raised when the login code email could not be sent."""

    http_status = 500

    def __init__(self, message: str = "Failed to send OTP email"):
        super().__init__(message, recoverable=True)


class NoChallengeError(OTPError):
    """Raised when no live challenge exists for the email."""

    def __init__(self, message: str = "No OTP found"):
        super().__init__(message, recoverable=True)


class OTPExpiredError(OTPError):
    """Raised when the challenge window has closed."""

    def __init__(self, message: str = "OTP expired"):
        super().__init__(message, recoverable=True)


class InvalidCodeError(OTPError):
    """Raised when the submitted code does not match a live challenge."""

    def __init__(self, attempts: int, max_attempts: int):
        super().__init__(
            "Invalid OTP",
            recoverable=True,
            details={"attempts_remaining": max(max_attempts - attempts, 0)},
        )


class TooManyAttemptsError(OTPError):
    """Raised on the wrong guess that exhausts the challenge."""

    def __init__(self, message: str = "Too many attempts"):
        super().__init__(message, recoverable=False)
