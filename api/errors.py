"""Global exception handlers for FastAPI."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse

from api.base import error_response, ErrorCodes, Messages
from api.middleware import REQUEST_ID_HEADER
from core.exceptions import (
    ConflictError,
    InvalidInputError,
    InvariantViolationError,
    NotFoundError,
)

logger = logging.getLogger(__name__)


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def _json(request: Request, status_code: int, code: str, message: str, errors=None) -> JSONResponse:
    request_id = _request_id(request)
    body = error_response(code, message, errors, request_id)
    # 500s are rendered outside RequestIDMiddleware, so echo the header here
    headers = {REQUEST_ID_HEADER: request_id} if request_id else None
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", by_alias=True),
        headers=headers,
    )


def field_errors(raw_errors) -> list[dict]:
    """Flatten pydantic error dicts to [{field, message}]."""
    errors = []
    for err in raw_errors:
        loc = [str(part) for part in err.get("loc", ())]
        # Drop the "body"/"query"/"path" source prefix
        if loc and loc[0] in ("body", "query", "path"):
            loc = loc[1:]
        errors.append({"field": ".".join(loc) or "request", "message": err.get("msg", "Invalid value")})
    return errors


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the app."""

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return _json(
            request, 400, ErrorCodes.VALIDATION_ERROR,
            Messages.VALIDATION_FAILED, field_errors(exc.errors()),
        )

    @app.exception_handler(InvalidInputError)
    async def invalid_input_handler(request: Request, exc: InvalidInputError):
        return _json(request, 400, ErrorCodes.INVALID_REQUEST, str(exc), exc.errors)

    @app.exception_handler(ConflictError)
    async def conflict_handler(request: Request, exc: ConflictError):
        return _json(request, 400, ErrorCodes.ALREADY_EXISTS, str(exc))

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return _json(request, 404, ErrorCodes.NOT_FOUND, str(exc))

    @app.exception_handler(InvariantViolationError)
    async def invariant_handler(request: Request, exc: InvariantViolationError):
        return _json(request, 400, ErrorCodes.LAST_ADDRESS, str(exc))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception on {request.method} {request.url.path}")
        return _json(request, 500, ErrorCodes.INTERNAL_ERROR, Messages.INTERNAL_ERROR)
