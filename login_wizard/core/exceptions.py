"""Custom exception classes for the login wizard."""

from datetime import datetime, timezone
from typing import Any, Dict, Optional


class LoginWizardError(Exception):
    """Base exception for the login wizard."""

    def __init__(
        self, message: str, recoverable: bool = True, details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize login wizard error.

        Args:
            message: Error message
            recoverable: Whether the caller may retry the operation
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


# Transport Errors
class TransportError(LoginWizardError):
    """Any failure of a request/response exchange with the homeserver."""

    def __init__(
        self,
        message: str = "Transport error occurred",
        recoverable: bool = True,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, recoverable, details)


class NetworkError(TransportError):
    """Network connection error or timeout."""

    def __init__(self, message: str = "Network error occurred", recoverable: bool = True):
        super().__init__(message, recoverable)


class ServerError(TransportError):
    """Homeserver answered with a non-success status."""

    def __init__(
        self,
        status: int,
        errcode: Optional[str] = None,
        error: Optional[str] = None,
        recoverable: bool = False,
        details: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize server error.

        Args:
            status: HTTP status code
            errcode: Matrix error code (M_FORBIDDEN, M_UNKNOWN, ...)
            error: Human readable error message from the server
            recoverable: Whether the caller may retry the operation
            details: Additional error details
        """
        self.status = status
        self.errcode = errcode
        self.error = error
        message = f"Homeserver returned {status}"
        if errcode:
            message += f" ({errcode})"
        if error:
            message += f": {error}"
        merged = {"status": status, "errcode": errcode}
        merged.update(details or {})
        super().__init__(message, recoverable, merged)


class RateLimitError(ServerError):
    """Homeserver rate limited the request (M_LIMIT_EXCEEDED)."""

    def __init__(
        self,
        status: int = 429,
        errcode: Optional[str] = "M_LIMIT_EXCEEDED",
        error: Optional[str] = None,
        retry_after_ms: Optional[int] = None,
    ):
        self.retry_after_ms = retry_after_ms
        super().__init__(
            status,
            errcode,
            error,
            recoverable=True,
            details={"retry_after_ms": retry_after_ms},
        )


class AuthenticationError(ServerError):
    """Homeserver rejected the credentials (401/403)."""

    def __init__(
        self, status: int = 403, errcode: Optional[str] = "M_FORBIDDEN", error: Optional[str] = None
    ):
        super().__init__(status, errcode, error, recoverable=False)


class ResponseFormatError(TransportError):
    """Successful response whose body does not have the expected shape."""

    def __init__(
        self,
        message: str = "Unexpected response format",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, recoverable=False, details=details)


# Flow Errors
class InvalidFlowStateError(LoginWizardError):
    """Operation is not legal in the current state of the flow."""

    def __init__(self, message: str = "Operation not allowed in the current flow state"):
        super().__init__(message, recoverable=False)


# Configuration Errors
class ConfigurationError(LoginWizardError):
    """Configuration error occurred."""

    def __init__(
        self,
        message: str = "Configuration error",
        recoverable: bool = False,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, recoverable, details)
