"""
Global exception handlers for the FastAPI application.

This module contains centralized handlers for custom application exceptions,
translating them into appropriate HTTP responses. Every body has the shape
``{"detail": <message>, "code": <machine code>}``.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette import status
from structlog import get_logger

from src.core.exceptions import (
    AccountLockedError,
    AuthenticationError,
    ConflictError,
    EmailServiceError,
    ForbiddenError,
    InvalidOrExpiredTokenError,
    InvalidRefreshTokenError,
    InvalidVerificationTokenError,
    NotFoundError,
    PasswordPolicyError,
    PortcullisError,
    ValidationError,
)
from src.utils.i18n import get_request_language, get_translated_message

__all__ = [
    "authentication_error_handler",
    "conflict_error_handler",
    "forbidden_error_handler",
    "account_locked_error_handler",
    "token_error_handler",
    "not_found_error_handler",
    "validation_error_handler",
    "password_policy_error_handler",
    "email_service_error_handler",
    "rate_limit_exception_handler",
    "portcullis_error_handler",
    "unhandled_exception_handler",
    "register_exception_handlers",
]

logger = get_logger(__name__)


def _client_host(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def _error_response(status_code: int, exc: PortcullisError) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "code": exc.code},
    )


async def authentication_error_handler(request: Request, exc: AuthenticationError) -> JSONResponse:
    """Handles `AuthenticationError`, returning a `401 Unauthorized`.

    Covers invalid credentials and every access-token failure (expired,
    malformed, wrong audience). The distinct `code` lets clients tell them
    apart without the message leaking which check failed.

    Args:
        request: The incoming `Request` object.
        exc: The `AuthenticationError` instance.

    Returns:
        A `JSONResponse` with a 401 status code and error detail.
    """
    logger.warning(
        "Authentication failure",
        error=exc.code,
        client_ip=_client_host(request),
        path=request.url.path,
    )
    return _error_response(status.HTTP_401_UNAUTHORIZED, exc)


async def conflict_error_handler(request: Request, exc: ConflictError) -> JSONResponse:
    """Handles `ConflictError`, returning a `409 Conflict`."""
    return _error_response(status.HTTP_409_CONFLICT, exc)


async def forbidden_error_handler(request: Request, exc: ForbiddenError) -> JSONResponse:
    """Handles `ForbiddenError`, returning a `403 Forbidden`.

    Raised for identified accounts that are blocked: unverified email,
    OAuth-only accounts attempting a password sign-in, or inactive accounts.
    """
    logger.warning(
        "Forbidden request",
        error=exc.code,
        client_ip=_client_host(request),
        path=request.url.path,
    )
    return _error_response(status.HTTP_403_FORBIDDEN, exc)


async def account_locked_error_handler(request: Request, exc: AccountLockedError) -> JSONResponse:
    """Handles `AccountLockedError`, returning a `423 Locked`."""
    logger.warning("Locked account access attempt", client_ip=_client_host(request), path=request.url.path)
    return _error_response(status.HTTP_423_LOCKED, exc)


async def token_error_handler(request: Request, exc: InvalidOrExpiredTokenError) -> JSONResponse:
    """Handles opaque-token failures.

    The status depends on which token was rejected: a verification token
    yields `403`, a refresh token `401`, and a reset token (or any other)
    `400`.
    """
    if isinstance(exc, InvalidVerificationTokenError):
        status_code = status.HTTP_403_FORBIDDEN
    elif isinstance(exc, InvalidRefreshTokenError):
        status_code = status.HTTP_401_UNAUTHORIZED
    else:
        status_code = status.HTTP_400_BAD_REQUEST
    logger.info("Opaque token rejected", error=exc.code, path=request.url.path)
    return _error_response(status_code, exc)


async def not_found_error_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    """Handles `NotFoundError`, returning a `404 Not Found`."""
    return _error_response(status.HTTP_404_NOT_FOUND, exc)


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Handles `ValidationError`, returning a `400 Bad Request`."""
    return _error_response(status.HTTP_400_BAD_REQUEST, exc)


async def password_policy_error_handler(request: Request, exc: PasswordPolicyError) -> JSONResponse:
    """Handles `PasswordPolicyError`, returning a `422 Unprocessable Entity`.

    This error occurs when a new password does not meet the application's
    security requirements (e.g., length, complexity).
    """
    return _error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, exc)


async def email_service_error_handler(request: Request, exc: EmailServiceError) -> JSONResponse:
    """Handles `EmailServiceError`, returning a `503 Service Unavailable`.

    Args:
        request: The incoming `Request` object.
        exc: The `EmailServiceError` instance.

    Returns:
        A `JSONResponse` with a 503 status code and error detail.
    """
    logger.error(
        "Email service failure",
        error_message=exc.message,
        path=request.url.path,
    )
    return _error_response(status.HTTP_503_SERVICE_UNAVAILABLE, exc)


async def rate_limit_exception_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Handles exceptions raised by slowapi when a rate limit is exceeded.

    Logs the client IP, the path and the limit that was triggered, and returns
    a standardized `429 Too Many Requests` response.
    """
    locale = get_request_language(request)
    logger.warning(
        "rate_limit_exceeded",
        client_ip=_client_host(request),
        path=request.url.path,
        limit=str(exc.limit.limit) if getattr(exc, "limit", None) else None,
    )
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={"detail": get_translated_message("too_many_requests", locale), "code": "rate_limited"},
    )


async def portcullis_error_handler(request: Request, exc: PortcullisError) -> JSONResponse:
    """Handles the base `PortcullisError`, returning a `500 Internal Server Error`.

    This serves as a fallback for any custom application errors that do not
    have a more specific handler. The original message is logged, never sent.
    """
    logger.error(
        "An unhandled application error occurred",
        error_code=exc.code,
        error_message=exc.message,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": get_translated_message("internal_server_error", get_request_language(request)),
            "code": "internal_error",
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler for exceptions outside the application hierarchy."""
    logger.exception(
        "Unexpected error",
        error_type=type(exc).__name__,
        error_message=str(exc),
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": get_translated_message("internal_server_error", get_request_language(request)),
            "code": "internal_error",
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Registers all custom exception handlers with the FastAPI application.

    Starlette resolves handlers along the exception's MRO, so each family
    handler also covers its subclasses.

    Args:
        app: The `FastAPI` application instance.
    """
    app.add_exception_handler(RateLimitExceeded, rate_limit_exception_handler)
    app.add_exception_handler(AuthenticationError, authentication_error_handler)
    app.add_exception_handler(ConflictError, conflict_error_handler)
    app.add_exception_handler(ForbiddenError, forbidden_error_handler)
    app.add_exception_handler(AccountLockedError, account_locked_error_handler)
    app.add_exception_handler(InvalidOrExpiredTokenError, token_error_handler)
    app.add_exception_handler(NotFoundError, not_found_error_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(PasswordPolicyError, password_policy_error_handler)
    app.add_exception_handler(EmailServiceError, email_service_error_handler)
    app.add_exception_handler(PortcullisError, portcullis_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
