"""
Application error hierarchy and FastAPI exception handlers.

AppError is the base for all typed errors. The global exception handlers
convert them, request validation failures and unexpected exceptions into
the shared ``{success, message, errors?}`` envelope.

Non-AppError exceptions are logged and surface as a generic 500 (Sentry
captures them first when configured).
"""

from __future__ import annotations

import traceback
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from shared.logging import get_logger

log = get_logger(__name__)


class AppError(Exception):
    """Base application error. All typed errors inherit from this."""

    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.field = field
        self.details = details

    def to_dict(self) -> dict:
        payload: dict = {"success": False, "message": self.message}
        errors: list = []
        if self.field is not None:
            errors.append({"field": self.field, "message": self.message})
        if self.details is not None:
            if isinstance(self.details, list):
                errors.extend(self.details)
            else:
                errors.append(self.details)
        if errors:
            payload["errors"] = errors
        return payload


class ValidationError(AppError):
    status_code = 400
    error_code = "validation_error"


class BusinessRuleError(AppError):
    status_code = 400
    error_code = "business_rule_violation"


class DuplicateError(AppError):
    status_code = 400
    error_code = "duplicate"


class AuthenticationError(AppError):
    status_code = 401
    error_code = "authentication_error"


class ForbiddenError(AppError):
    status_code = 403
    error_code = "forbidden"


class NotFoundError(AppError):
    status_code = 404
    error_code = "not_found"


def _format_validation_errors(exc: RequestValidationError) -> list[dict]:
    formatted = []
    for err in exc.errors():
        # loc is ("body", "page") / ("query", "limit"); drop the source prefix
        loc = [str(part) for part in err.get("loc", ())]
        if len(loc) > 1 and loc[0] in ("body", "query", "path", "header"):
            loc = loc[1:]
        formatted.append({"field": ".".join(loc), "message": err.get("msg", "")})
    return formatted


def register_error_handlers(app: FastAPI, *, expose_stack: bool = False) -> None:
    """Register global exception handlers on the FastAPI app.

    ``expose_stack`` adds the traceback to 500 bodies; only enable it in
    development.
    """

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "message": "Validation failed",
                "errors": _format_validation_errors(exc),
            },
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        if exc.status_code == 404 and message == "Not Found":
            message = "Route not found"
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": message},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        log.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            error_type=type(exc).__name__,
            exc_info=exc,
        )
        content: dict = {"success": False, "message": "Internal server error"}
        if expose_stack:
            content["stack"] = "".join(
                traceback.format_exception(type(exc), exc, exc.__traceback__)
            )
        return JSONResponse(status_code=500, content=content)
