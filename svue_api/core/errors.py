from __future__ import annotations

import base64
import logging
from datetime import datetime, timezone

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


def _now():
    return datetime.now(timezone.utc).isoformat()


def base64_mangle(err: object) -> str:
    """Parser messages can echo upstream markup; keep them out of plain sight."""
    return base64.b64encode(str(err).encode("utf-8")).decode("ascii")


class ApiError(Exception):
    """
    Base of every error the proxy reports to its callers.

    ``message`` is safe to return to the client. Nothing credential-bearing
    may ever be put into it.
    """

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


# ---- client request problems ----

class EmptyCredentialsError(ApiError):
    status_code = 400
    default_message = "Username or password is empty"


class InvalidCredentialsError(ApiError):
    status_code = 401
    default_message = "Invalid credentials provided"


class ExpiredKeyError(ApiError):
    status_code = 401
    default_message = "This key has expired"


# ---- upstream problems ----

class StudentVueError(ApiError):
    """StudentVue answered with an RT_ERROR; its message is passed through."""

    status_code = 400


class MaintenanceError(ApiError):
    status_code = 503
    default_message = "StudentVue is currently undergoing maintenance"


class NetworkError(ApiError):
    status_code = 502
    default_message = "Unable to reach StudentVue"


class ParsingError(ApiError):
    status_code = 502

    def __init__(self, detail: object) -> None:
        self.detail = str(detail)
        super().__init__(f"Cannot parse response: {base64_mangle(detail)}")


class GradebookError(ApiError):
    status_code = 502

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Unable to load Gradebook, message: {detail}")


class UnknownError(ApiError):
    default_message = "Unknown error (code: x_dll)"


class AccessKeyError(ApiError):
    default_message = "Unable to create access key"


# ---- token crypto ----

class CryptoError(ApiError):
    pass


class NoKeyError(CryptoError):
    default_message = "No key found"


class InvalidKeyError(CryptoError):
    default_message = "The crypto key was invalid"


class InvalidCipherError(CryptoError):
    status_code = 400
    default_message = "Invalid length"


class DecryptError(CryptoError):
    status_code = 400
    default_message = "Unable to decrypt token"


def _error_body(request: Request, message, **extra) -> dict:
    return {
        "success": False,
        "message": message,
        **extra,
        "path": str(request.url.path),
        "requestId": getattr(request.state, "request_id", None),
        "timestamp": _now(),
    }


async def api_error_handler(request: Request, exc: ApiError):
    if exc.status_code >= 500:
        logger.warning("%s %s failed (%s): %s", request.method, request.url.path, type(exc).__name__, exc.message)
    else:
        logger.info("%s %s rejected (%s)", request.method, request.url.path, type(exc).__name__)

    return JSONResponse(status_code=exc.status_code, content=_error_body(request, exc.message))


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(request, exc.detail),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content=_error_body(request, "Request validation failed", errors=jsonable_encoder(exc.errors())),
    )
