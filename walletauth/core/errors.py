"""
Authentication error taxonomy.

Every failure the login flow can produce is one of the classes below. Each
carries the HTTP status it maps to and a fixed client-facing message, so the
handlers in register_exception_handlers() never serialize internal exception
text or tracebacks.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AuthError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Server error"

    def __init__(self, message: str | None = None) -> None:
        if message:
            self.message = message
        super().__init__(self.message)


class InvalidInput(AuthError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid input"


class Unauthenticated(AuthError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Not authenticated"


class SignatureMismatch(AuthError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Signature invalid"


class AccountNotFound(AuthError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "User not found"


class WalletAlreadyLinked(AuthError):
    status_code = status.HTTP_409_CONFLICT
    message = "Wallet is linked to another account"


class StoreUnavailable(AuthError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Server error"


def error_response(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    headers = dict(headers or {})
    if status_code == status.HTTP_401_UNAUTHORIZED:
        headers.setdefault("WWW-Authenticate", "Bearer")
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    return error_response(exc.status_code, exc.message)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # routing failures (unknown path, wrong method) raised by the framework itself
    return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # malformed body or wrong field types; field details stay server-side
    logger.debug("Rejected request to %s: %s", request.url.path, exc.errors())
    return error_response(status.HTTP_400_BAD_REQUEST, "Invalid request body")


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error in %s %s", request.method, request.url.path)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AuthError, auth_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
