"""JSON error responses and the exception handler for domain errors."""

import logging
from datetime import UTC, datetime

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.core.errors import ServiceError
from app.schemas.errors import AccessDeniedResponse, ErrorResponse

logger = logging.getLogger(__name__)

BEARER_CHALLENGE = {"WWW-Authenticate": "Bearer"}


class NotAuthenticatedError(ServiceError):
    code = "unauthenticated"
    status_code = 401


class ForbiddenError(ServiceError):
    """Authenticated caller lacks the role for the resource; rendered as the 403 access-denied body."""

    code = "forbidden"
    status_code = 403


def error_response(
    status_code: int,
    code: str,
    message: str,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    body = ErrorResponse(error=code, message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump(), headers=headers)


def unauthorized_response(code: str, message: str) -> JSONResponse:
    return error_response(401, code, message, headers=BEARER_CHALLENGE)


def access_denied_response(path: str) -> JSONResponse:
    body = AccessDeniedResponse(timestamp=datetime.now(UTC), details=f"uri={path}")
    return JSONResponse(status_code=403, content=body.model_dump(mode="json"))


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Render ServiceError subclasses raised by endpoints and dependencies."""
    if isinstance(exc, ForbiddenError):
        logger.warning("Forbidden: %s %s", request.method, request.url.path)
        return access_denied_response(request.url.path)
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
    else:
        logger.info("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
    headers = BEARER_CHALLENGE if exc.status_code == 401 else None
    return error_response(exc.status_code, exc.code, exc.message, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, service_error_handler)
