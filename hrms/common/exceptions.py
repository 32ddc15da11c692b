"""Custom exceptions and envelope-shaped error handlers.

Every error leaves the API as ``{"status": false, "message": ..., "data": {...}}``
so clients parse success and failure with the same reader.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


# ── Exception hierarchy ─────────────────────────────────────────────

class AppException(Exception):
    """Base for all application exceptions → envelope JSON."""

    def __init__(
        self,
        status_code: int,
        error_type: str,
        title: str,
        detail: str,
        errors: Optional[dict[str, Any]] = None,
    ) -> None:
        self.status_code = status_code
        self.error_type = error_type
        self.title = title
        self.detail = detail
        self.errors = errors
        super().__init__(detail)

    @classmethod
    def from_payload(
        cls,
        status_code: int,
        message: str,
        data: Optional[dict[str, Any]] = None,
    ) -> "AppException":
        """Rebuild an exception from an error envelope received over HTTP."""
        data = data or {}
        exc = cls.__new__(cls)
        AppException.__init__(
            exc,
            status_code=status_code,
            error_type=data.get("type", "error"),
            title=data.get("title", "Error"),
            detail=message,
            errors=data.get("errors"),
        )
        return exc


class NotFoundException(AppException):
    """404 — entity not found."""

    def __init__(self, entity_type: str, entity_id: Any) -> None:
        super().__init__(
            status_code=404,
            error_type="not-found",
            title=f"{entity_type} Not Found",
            detail=f"{entity_type} with id '{entity_id}' does not exist.",
        )


class ConflictError(AppException):
    """409 — unique-constraint / duplicate."""

    def __init__(self, field: str, value: Any, detail: Optional[str] = None) -> None:
        super().__init__(
            status_code=409,
            error_type="conflict",
            title="Conflict",
            detail=detail or f"An entry with {field}='{value}' already exists.",
            errors={field: [f"'{value}' is already in use."]},
        )


class InvalidTransition(AppException):
    """409 — the requested action is not allowed from the current status."""

    entity_type: Optional[str] = None
    current_status: Optional[str] = None
    action: Optional[str] = None

    def __init__(self, entity_type: str, current_status: Any, action: str) -> None:
        status_value = getattr(current_status, "value", current_status)
        self.entity_type = entity_type
        self.current_status = status_value
        self.action = action
        super().__init__(
            status_code=409,
            error_type="invalid-transition",
            title="Invalid Status Transition",
            detail=f"Cannot {action} a {entity_type} with status '{status_value}'.",
            errors={"status": [f"'{action}' is not allowed from '{status_value}'."]},
        )


class UnauthorizedException(AppException):
    """401 — no signed-in user."""

    def __init__(self, detail: str = "You must be signed in to perform this action.") -> None:
        super().__init__(
            status_code=401,
            error_type="unauthorized",
            title="Unauthorized",
            detail=detail,
        )


class ValidationException(AppException):
    """422 — business-logic validation failures."""

    def __init__(self, errors: dict[str, list[str]]) -> None:
        super().__init__(
            status_code=422,
            error_type="validation-error",
            title="Validation Error",
            detail="One or more fields failed validation.",
            errors=errors,
        )


# error_type → exception class, used by the client to rebuild server errors
ERROR_TYPES: dict[str, type[AppException]] = {
    "not-found": NotFoundException,
    "conflict": ConflictError,
    "invalid-transition": InvalidTransition,
    "unauthorized": UnauthorizedException,
    "validation-error": ValidationException,
}


# ── Envelope builder ────────────────────────────────────────────────

def _build_error_envelope(exc: AppException, request: Request) -> dict[str, Any]:
    data: dict[str, Any] = {
        "type": exc.error_type,
        "title": exc.title,
        "instance": str(request.url.path),
    }
    if exc.errors:
        data["errors"] = exc.errors
    return {"status": False, "message": exc.detail, "data": data}


# ── FastAPI handlers ────────────────────────────────────────────────

async def _handle_app_exception(
    request: Request,
    exc: AppException,
) -> JSONResponse:
    logger.info(
        "%s %s → %s (%s)", request.method, request.url.path, exc.status_code, exc.detail,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=_build_error_envelope(exc, request),
    )


async def _handle_validation_error(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    field_errors: dict[str, list[str]] = {}
    for err in exc.errors():
        loc = err.get("loc", ())
        name = (
            ".".join(str(p) for p in loc[1:])
            if len(loc) > 1
            else str(loc[0]) if loc else "unknown"
        )
        field_errors.setdefault(name, []).append(err.get("msg", "Invalid value"))

    return JSONResponse(
        status_code=422,
        content={
            "status": False,
            "message": "Request validation failed.",
            "data": {
                "type": "validation-error",
                "title": "Validation Error",
                "instance": str(request.url.path),
                "errors": field_errors,
            },
        },
    )


# ── Registration helper (called from main.py) ──────────────────────

def register_exception_handlers(app: FastAPI) -> None:
    """Attach all custom exception handlers to the FastAPI app."""
    app.add_exception_handler(AppException, _handle_app_exception)          # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _handle_validation_error)  # type: ignore[arg-type]
