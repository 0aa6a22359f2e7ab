"""Exception hierarchy for the backend service.

Application and infrastructure layers each have their own base class
so callers can decide how broadly to catch. Every error carries a
machine-readable ``error_code`` and a ``details`` mapping for logging.
"""

from typing import Any


class BackendServiceError(Exception):
    """Base exception for all backend service errors."""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code for programmatic handling
            details: Additional error context
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}


class ApplicationError(BackendServiceError):
    """Base class for application-layer errors."""

    pass


class ListenerAlreadyRegisteredError(ApplicationError):
    """Raised when a second listener registration is attempted."""

    def __init__(self, destination: str, **kwargs: Any) -> None:
        """
        Initialize listener registration error.

        Args:
            destination: Destination the listener is bound to
            **kwargs: Additional error details
        """
        message = f"A listener has already been registered for destination '{destination}'"
        details = {
            "destination": destination,
            **kwargs.pop("details", {}),
        }
        super().__init__(message, error_code="LISTENER_ALREADY_REGISTERED", details=details)


class InfrastructureError(BackendServiceError):
    """Base class for infrastructure-layer errors."""

    pass


class ConnectionError(InfrastructureError):
    """Raised when connection to external service fails."""

    def __init__(
        self, service: str, endpoint: str, reason: str | None = None, **kwargs: Any
    ) -> None:
        """
        Initialize connection error.

        Args:
            service: Service name (e.g., "NATS")
            endpoint: Connection endpoint
            reason: Failure reason
            **kwargs: Additional error details
        """
        message = f"Failed to connect to {service} at {endpoint}"
        if reason:
            message += f": {reason}"
        details = {
            "service": service,
            "endpoint": endpoint,
            "reason": reason,
            **kwargs.pop("details", {}),
        }
        super().__init__(message, error_code="CONNECTION_ERROR", details=details)


class ServerStartupError(InfrastructureError):
    """Raised when the HTTP listener cannot be started."""

    def __init__(self, reason: str, **kwargs: Any) -> None:
        """
        Initialize server startup error.

        Args:
            reason: Why the server did not come up
            **kwargs: Additional error details
        """
        message = f"HTTP server failed to start: {reason}"
        details = {
            "reason": reason,
            **kwargs.pop("details", {}),
        }
        super().__init__(message, error_code="SERVER_STARTUP_ERROR", details=details)
