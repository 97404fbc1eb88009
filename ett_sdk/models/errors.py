"""Error handling data models."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

# Sanitized messages shown to API clients, keyed by status code
ERROR_CODE_MESSAGES: dict[int, str] = {
    400: "Bad request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not found",
    422: "Unprocessable entity",
    500: "Internal server error",
    503: "Service unavailable",
}

CHALLENGE_HEADER = "WWW-Authenticate"
CHALLENGE_VALUE = 'Bearer realm="EasyToTravel", error="invalid_token", error_description="Access token invalid"'


class ErrorCode(str, Enum):
    """Standardized error codes."""

    # Configuration
    SERVICE_NOT_FOUND = "SERVICE_NOT_FOUND"
    PROVIDER_NOT_FOUND = "PROVIDER_NOT_FOUND"
    SUPPLIER_NOT_FOUND = "SUPPLIER_NOT_FOUND"

    # Authentication
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_TOKEN = "INVALID_TOKEN"

    # Upstream vendors
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    SUPPLIER_ORDER_FAILED = "SUPPLIER_ORDER_FAILED"

    # System errors
    PERSISTENCE_ERROR = "PERSISTENCE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorDetail(BaseModel):
    """Serializable view of a ResponseError for transport layers."""

    code: ErrorCode = Field(..., description="Error code")
    status_code: int = Field(..., description="HTTP-style status code")
    message: str = Field(..., description="Client-facing message")
    description: Any | None = Field(None, description="Upstream description, if any")
    headers: dict[str, str] = Field(default_factory=dict, description="Response headers to set")


def www_authenticate(auth_redirect_url: str = "") -> dict[str, str]:
    """Build the re-authentication challenge header, with the redirect hint when configured."""
    value = CHALLENGE_VALUE
    if auth_redirect_url:
        value += f', authRedirectUrl="{auth_redirect_url}"'
    return {CHALLENGE_HEADER: value}


class ResponseError(Exception):
    """
    Base exception for SDK errors.

    `error_message` carries the internal detail for operators; `client_error_message`
    is the sanitized text for end users, looked up from the status code unless given.
    """

    code: ErrorCode = ErrorCode.INTERNAL_ERROR
    default_status = 500

    def __init__(
        self,
        error_message: str,
        status_code: int | None = None,
        *,
        client_error_message: str | None = None,
        description: Any | None = None,
        response_header: dict[str, str] | None = None,
        notification: str = "",
    ) -> None:
        self.status_code = status_code or self.default_status
        self.error_message = error_message
        self.client_error_message = client_error_message or ERROR_CODE_MESSAGES.get(
            self.status_code, ERROR_CODE_MESSAGES[500]
        )
        self.description = description
        self.response_header = response_header or {}
        self.notification = notification
        super().__init__(error_message)

    def to_detail(self) -> ErrorDetail:
        return ErrorDetail(
            code=self.code,
            status_code=self.status_code,
            message=self.client_error_message,
            description=self.description,
            headers=self.response_header,
        )


class ConfigurationError(ResponseError):
    """Missing authorization service, provider or supplier."""

    code = ErrorCode.PROVIDER_NOT_FOUND
    default_status = 404

    def __init__(self, message: str, code: ErrorCode = ErrorCode.PROVIDER_NOT_FOUND) -> None:
        super().__init__(message, 404, client_error_message=message)
        self.code = code


class AuthenticationError(ResponseError):
    """Token missing, malformed, expired or rejected by the identity provider."""

    code = ErrorCode.UNAUTHORIZED
    default_status = 401

    def __init__(
        self,
        message: str,
        *,
        status_code: int = 401,
        challenge: bool = False,
        auth_redirect_url: str = "",
    ) -> None:
        super().__init__(
            message,
            status_code,
            response_header=www_authenticate(auth_redirect_url) if challenge else None,
        )


class UpstreamError(ResponseError):
    """Transport failure or unexpected response from an external API."""

    code = ErrorCode.UPSTREAM_ERROR


class PersistenceError(ResponseError):
    """Refreshed credentials could not be written back to the object store."""

    code = ErrorCode.PERSISTENCE_ERROR


class SupplierOrderError(ResponseError):
    """A supplier rejected or failed an order line."""

    code = ErrorCode.SUPPLIER_ORDER_FAILED
    default_status = 422
