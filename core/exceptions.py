"""
Custom exception classes and error handling.

Every HTTP error leaves the API as an `{error, message}` envelope.
"""
from http import HTTPStatus
from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class ConfigurationError(ValueError):
    """Required configuration is missing or invalid. Fatal at startup."""


class APIException(HTTPException):
    """HTTP error rendered through the envelope handler."""

    def __init__(self, status_code: int, detail: str, headers: Optional[Dict[str, Any]] = None):
        super().__init__(status_code=status_code, detail=detail, headers=headers)


class NotFoundError(APIException):
    def __init__(self, resource: str, identifier: str):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=f"{resource} not found: {identifier}")


class ValidationError(APIException):
    """Rejected input that passed schema validation (400)."""

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class UnauthorizedError(APIException):
    def __init__(self, detail: str = "Authentication required"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class BadGatewayError(APIException):
    """An upstream dependency failed."""

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_502_BAD_GATEWAY, detail=detail)


class ServiceUnavailableError(APIException):
    """A feature is not configured in this deployment."""

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail)


# Coaching (LLM) errors. These never leave the service layer except where
# no safe fallback exists.

class CoachError(Exception):
    """Base class for coaching service failures."""


class CoachNotConfiguredError(CoachError):
    """No LLM API key is configured."""


class CoachUpstreamError(CoachError):
    """The LLM API answered without usable content."""


class AuthenticationRequiredError(CoachError):
    """A gated coaching feature was called without an auth token."""


class BackendDeploymentError(RuntimeError):
    """The backend answered with an HTML page instead of JSON."""


def error_envelope(status_code: int, message: Optional[str] = None) -> Dict[str, Any]:
    """Uniform `{error, message}` body keyed by HTTP reason phrase."""
    try:
        phrase = HTTPStatus(status_code).phrase
    except ValueError:
        phrase = "Error"
    body: Dict[str, Any] = {"error": phrase}
    if message is not None:
        body["message"] = message
    return body
