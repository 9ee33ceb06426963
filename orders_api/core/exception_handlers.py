from __future__ import annotations

import logging
from typing import Any

from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from orders_api.core import config
from orders_api.core.errors import (
    ConflictError,
    DomainValidationError,
    NotFoundError,
    OrderCreationCancelledError,
    OrdersApiError,
)

logger = logging.getLogger(__name__)

VALIDATION_TITLE = "One or more validation errors occurred."
UNEXPECTED_TITLE = "An unexpected error occurred."

# Resolved by walking the MRO, so subclasses inherit their parent's status.
ERROR_STATUS_CODES: dict[type, int] = {
    DomainValidationError: 400,
    NotFoundError: 404,
    ConflictError: 409,
    OrderCreationCancelledError: 499,
}


def status_code_for(exc: OrdersApiError) -> int:
    for klass in type(exc).__mro__:
        if klass in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[klass]
    return 500


def problem_response(
    status_code: int,
    title: str,
    detail: str | None = None,
    **extra: Any,
) -> JSONResponse:
    content: dict[str, Any] = {
        "type": f"https://httpstatuses.io/{status_code}",
        "title": title,
        "status": status_code,
        "detail": detail,
    }
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content)


def _field_path(loc: tuple[Any, ...]) -> str:
    parts = [str(part) for part in loc]
    if parts and parts[0] in {"body", "query", "path"}:
        parts = parts[1:]
    return ".".join(parts) or "request"


def _clean_message(message: str) -> str:
    prefix = "Value error, "
    return message[len(prefix):] if message.startswith(prefix) else message


def collect_validation_errors(errors: list[dict[str, Any]]) -> dict[str, list[str]]:
    collected: dict[str, list[str]] = {}
    for error in errors:
        field = _field_path(tuple(error.get("loc", ())))
        collected.setdefault(field, []).append(_clean_message(str(error.get("msg", ""))))
    return collected


async def request_validation_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    return problem_response(400, VALIDATION_TITLE, errors=collect_validation_errors(list(exc.errors())))


async def orders_api_error_handler(_request: Request, exc: OrdersApiError) -> JSONResponse:
    status_code = status_code_for(exc)
    if isinstance(exc, DomainValidationError):
        return problem_response(status_code, exc.title, str(exc), errors={"request": [exc.message]})
    return problem_response(status_code, exc.title, str(exc))


async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    try:
        title = HTTPStatus(exc.status_code).phrase
    except ValueError:
        title = "Request failed"
    response = problem_response(exc.status_code, title, str(exc.detail) if exc.detail is not None else None)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def integrity_error_handler(_request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning("Constraint violation: %s", exc.orig)
    return problem_response(409, "Conflict", "The request conflicts with existing data")


async def timeout_error_handler(_request: Request, exc: TimeoutError) -> JSONResponse:
    logger.warning("Timeout while handling request: %s", exc)
    return problem_response(503, "Service unavailable", str(exc) or None)


def unhandled_error_response(exc: Exception) -> JSONResponse:
    detail = None if config.IS_PROD else str(exc)
    return problem_response(500, UNEXPECTED_TITLE, detail)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(OrdersApiError, orders_api_error_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(TimeoutError, timeout_error_handler)
