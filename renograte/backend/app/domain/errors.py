# app/domain/errors.py
from __future__ import annotations


class RenograteError(Exception):
    """
    Base for errors that map onto an HTTP status.
    The FastAPI app renders these as {"detail": message}.
    """

    status_code: int = 500
    default_message: str = "Unexpected error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class MissingParameterError(RenograteError):
    status_code = 400
    default_message = "Missing required parameter"


class InvalidPriceError(RenograteError, ValueError):
    status_code = 400
    default_message = "List price must be a positive number"


class UpstreamAuthError(RenograteError):
    # caller cannot remediate an identity-provider failure
    status_code = 500
    default_message = "Failed to obtain authentication token"


class UpstreamFetchError(RenograteError):
    """Relays the upstream status code and body so callers can diagnose their query."""

    default_message = "Upstream request failed"

    def __init__(
        self,
        message: str | None = None,
        *,
        status_code: int = 502,
        body: bytes = b"",
        content_type: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body
        self.content_type = content_type


class InvalidTokenError(RenograteError):
    status_code = 400
    default_message = "Invalid token"


class TokenExpiredError(RenograteError):
    status_code = 400
    default_message = "Signing link has expired"


class AlreadySignedError(RenograteError):
    status_code = 400
    default_message = "This section has already been signed"


class RoleMismatchError(RenograteError):
    status_code = 403
    default_message = "This signing link does not cover that section"


class NotFoundError(RenograteError):
    status_code = 404
    default_message = "Not found"


class ContractNotFoundError(NotFoundError):
    default_message = "Contract not found"


class SectionNotFoundError(NotFoundError):
    default_message = "Contract section not found"


class ListingNotFoundError(NotFoundError):
    default_message = "No MLS listing found"


class ServiceNotConfiguredError(RenograteError):
    status_code = 500
    default_message = "Server configuration error"
