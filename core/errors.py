from typing import Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class ApiError(Exception):
    """Terminal per-request failure rendered as ``{status, message}``."""

    status_code = 500
    status = "error"
    message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class Unauthenticated(ApiError):
    status_code = 401
    status = "fail"
    message = "You are not logged in, please provide token"


class Forbidden(ApiError):
    status_code = 403
    status = "fail"
    message = "You are not allowed to perform this action"


class Conflict(ApiError):
    status_code = 409
    status = "fail"
    message = "User with that email already exists"


class InvalidCredentials(ApiError):
    status_code = 400
    status = "fail"
    message = "Invalid email or password"


class UpstreamStoreFailure(ApiError):
    status_code = 500
    status = "error"
    message = "Database error"


class LockTimeout(ApiError):
    status_code = 503
    status = "error"
    message = "Inventory database is busy, try again later"


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"status": exc.status, "message": exc.message},
        headers=headers,
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(loc) for loc in first.get("loc", ()))
    msg = first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=422,
        content={"status": "fail", "message": f"{field}: {msg}" if field else msg},
    )
