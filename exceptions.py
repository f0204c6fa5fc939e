import logging
from typing import Optional

from fastapi import Request, Response
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

BODY_MISSING = "Body missing."
KEYS_INVALID_OR_MISSING = "Some keys are invalid or missing."
KEYS_NOT_ALLOWED = "Some keys are not allowed."
KEYS_NOT_ALLOWED_OR_MISSING = "Some keys are not allowed or missing."
VALUES_INVALID = "Some values are invalid."
WRONG_CREDENTIALS = "Wrong credentials."
MALFORMED_BODY = "Malformed request body."


class ApiError(Exception):
    """Base error for anything the API answers with a non-2xx status.

    Errors without a message are answered with an empty body.
    """

    status_code = 500

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message or self.__class__.__name__)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        return {"message": self.message}


class ClientInputError(ApiError):
    """Malformed id, empty body, bad keys or invalid values."""
    status_code = 400


class AuthenticationError(ApiError):
    status_code = 401


class NotFoundError(ApiError):
    status_code = 404


class ConflictError(ApiError):
    """Username or email already used by another account."""
    status_code = 409


async def api_exception_handler(request: Request, exc: ApiError) -> Response:
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    if exc.message is None:
        return Response(status_code=exc.status_code, headers=headers)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


async def request_validation_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    # only reachable for bodies that are not valid JSON, every route takes its body as Any
    return JSONResponse(status_code=400, content={"message": MALFORMED_BODY})


async def unhandled_exception_handler(request: Request, exc: Exception) -> Response:
    logger.exception(f"Unexpected failure on {request.method} {request.url.path}")
    return Response(status_code=500)
