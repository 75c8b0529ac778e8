"""Global error handlers for the application."""
import logging
from collections import defaultdict

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status

from playlist_api.utils.errors import AppError

logger = logging.getLogger(__name__)

_HTTP_KINDS = {
    status.HTTP_401_UNAUTHORIZED: "unauthorized",
    status.HTTP_403_FORBIDDEN: "forbidden",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
    status.HTTP_422_UNPROCESSABLE_ENTITY: "unprocessable",
    status.HTTP_429_TOO_MANY_REQUESTS: "rate_limited",
}


def error_body(kind: str, detail, errors=None) -> dict:
    body = {"kind": kind, "detail": detail}
    if errors:
        body["errors"] = errors
    return body


async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.kind, exc.detail, exc.errors),
        headers=getattr(exc, "headers", None),
    )


async def http_exception_handler(request: Request, exc):
    kind = _HTTP_KINDS.get(exc.status_code, "error")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(kind, exc.detail),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = defaultdict(list)
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        field = ".".join(loc) or "body"
        errors[field].append(err.get("msg", "Invalid value"))
    logger.info("Validation failed for %s %s: %s", request.method, request.url.path, dict(errors))
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_body("validation_failed", "Invalid input", dict(errors)),
    )
