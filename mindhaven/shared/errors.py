"""Error taxonomy shared by every service.

Each error carries the HTTP status it maps to and the message that is
safe to show a client. Handlers catch ServiceError and respond with
{"error": public_message}; anything else becomes a generic 500.
"""
from typing import Optional


class ServiceError(Exception):
    """Base exception for errors surfaced to API clients."""

    status_code: int = 500
    default_public_message: str = "Internal server error"

    def __init__(self, message: str, public_message: Optional[str] = None):
        super().__init__(message)
        self.public_message = public_message or self.default_public_message


class ValidationError(ServiceError):
    """Missing or invalid request field."""

    status_code = 400

    def __init__(self, message: str = "Missing required fields"):
        super().__init__(message, public_message=message)


class AuthenticationError(ServiceError):
    """Missing or unusable bearer token."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, public_message=message)


class NotFoundError(ServiceError):
    """Requested profile, post or record does not exist."""

    status_code = 404

    def __init__(self, message: str = "Not found"):
        super().__init__(message, public_message=message)


class ServerConfigurationError(ServiceError):
    """Required credentials or settings are absent."""

    status_code = 500
    default_public_message = "Server configuration error"


class UpstreamError(ServiceError):
    """Auth provider or storage call failed."""

    status_code = 500


class StorageError(UpstreamError):
    """KV store read or write failed."""
