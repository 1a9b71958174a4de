"""Interface layer errors and HTTP error mapping.

Every AuthError is rendered as {"error": kind, "message": public_message}.
Internal detail in the exception message stays in the logs.
"""

import logfire
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from idlink.domain.error import (
    AuthError,
    AuthErrorKind,
    NotFoundError,
    RequiresTransferError,
    ValidationError,
    WrongProviderError,
)


class InterfaceError(Exception):
    """Base interface error."""

    pass


class NotAuthenticatedError(InterfaceError):
    """Request carries no valid session."""

    pass


STATUS_BY_KIND: dict[AuthErrorKind, int] = {
    AuthErrorKind.MISSING_CREDENTIALS: status.HTTP_400_BAD_REQUEST,
    AuthErrorKind.INVALID_PHONE_FORMAT: status.HTTP_400_BAD_REQUEST,
    AuthErrorKind.NOT_FOUND: status.HTTP_401_UNAUTHORIZED,
    AuthErrorKind.WRONG_PROVIDER: status.HTTP_401_UNAUTHORIZED,
    AuthErrorKind.INVALID_CREDENTIAL: status.HTTP_401_UNAUTHORIZED,
    AuthErrorKind.PHONE_UNVERIFIED: status.HTTP_401_UNAUTHORIZED,
    AuthErrorKind.INVALID_OR_EXPIRED_CODE: status.HTTP_401_UNAUTHORIZED,
    AuthErrorKind.TWO_FACTOR_REQUIRED: status.HTTP_401_UNAUTHORIZED,
    AuthErrorKind.INVALID_TWO_FACTOR_CODE: status.HTTP_401_UNAUTHORIZED,
    AuthErrorKind.CANDIDATE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    AuthErrorKind.ALREADY_LINKED: status.HTTP_409_CONFLICT,
    AuthErrorKind.STORE_CONFLICT: status.HTTP_409_CONFLICT,
    AuthErrorKind.ACCOUNT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    AuthErrorKind.REQUIRES_TRANSFER: status.HTTP_409_CONFLICT,
    AuthErrorKind.DUPLICATE_IDENTITY: status.HTTP_409_CONFLICT,
    AuthErrorKind.TWO_FACTOR_NOT_ENABLED: status.HTTP_400_BAD_REQUEST,
    AuthErrorKind.INFRASTRUCTURE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def error_body(exc: AuthError) -> dict:
    """Caller-facing body for an AuthError."""
    body: dict = {"error": exc.kind.value, "message": exc.public_message}
    if isinstance(exc, WrongProviderError):
        body["provider"] = exc.provider
    elif isinstance(exc, RequiresTransferError):
        body["active_member_ids"] = exc.active_member_ids
    return body


async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    """Handle every AuthError subclass."""
    status_code = STATUS_BY_KIND.get(exc.kind, status.HTTP_400_BAD_REQUEST)
    if status_code >= 500:
        logfire.error("Request failed", path=request.url.path, error=str(exc))
    else:
        logfire.info(
            "Request rejected", path=request.url.path, kind=exc.kind.value, detail=str(exc)
        )
    return JSONResponse(status_code=status_code, content=error_body(exc))


async def validation_error_handler(
    request: Request, exc: ValidationError
) -> JSONResponse:
    """Handle domain validation errors."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "validation_error", "message": str(exc)},
    )


async def not_found_error_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    """Handle missing resources."""
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"error": "not_found", "message": f"{exc.resource} not found"},
    )


async def not_authenticated_handler(
    request: Request, exc: NotAuthenticatedError
) -> JSONResponse:
    """Handle requests without a valid session."""
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"error": "not_authenticated", "message": str(exc) or "Not authenticated"},
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register all error handlers with the app."""
    app.add_exception_handler(AuthError, auth_error_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(NotFoundError, not_found_error_handler)
    app.add_exception_handler(NotAuthenticatedError, not_authenticated_handler)
