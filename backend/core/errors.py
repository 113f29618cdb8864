import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend.core import config

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
CHECK_VIOLATION = "23514"


def error_body(message: str, **extra) -> dict:
    return {"success": False, "message": message, **extra}


def _integrity_kind(exc: IntegrityError) -> str | None:
    sqlstate = getattr(exc.orig, "sqlstate", None) or getattr(exc.orig, "pgcode", None)
    if sqlstate in {UNIQUE_VIOLATION, FOREIGN_KEY_VIOLATION, CHECK_VIOLATION}:
        return sqlstate

    # SQLite only reports constraint failures as text.
    text = str(exc.orig).lower()
    if "unique" in text:
        return UNIQUE_VIOLATION
    if "foreign key" in text:
        return FOREIGN_KEY_VIOLATION
    if "check constraint" in text:
        return CHECK_VIOLATION
    return None


def integrity_error_to_http(
    exc: IntegrityError,
    *,
    conflict_detail: str = "Resource already exists",
    not_found_detail: str = "Referenced resource not found",
    invalid_detail: str = "Invalid field value",
) -> HTTPException:
    kind = _integrity_kind(exc)
    if kind == UNIQUE_VIOLATION:
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=conflict_detail)
    if kind == FOREIGN_KEY_VIOLATION:
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=not_found_detail)
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=invalid_detail)


def format_validation_errors(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part != "body"]
        message = error.get("msg", "Invalid value")
        cause = (error.get("ctx") or {}).get("error")
        if isinstance(cause, ValueError):
            message = str(cause)
        elif message.startswith("Value error, "):
            message = message[len("Value error, "):]
        if error.get("type") == "missing":
            message = f"Please provide {location[-1]}" if location else "Please provide a JSON request body"
            location = []
        messages.append(f"{'.'.join(location)}: {message}" if location else message)
    return "; ".join(messages) or "Invalid request"


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    status_code = exc.status_code
    # Unknown paths and unsupported methods on known paths share the catch-all.
    if (status_code, exc.detail) in {(404, "Not Found"), (405, "Method Not Allowed")}:
        status_code = status.HTTP_404_NOT_FOUND
        message = "Route not found"
    return JSONResponse(
        status_code=status_code,
        content=error_body(message),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(format_validation_errors(exc)),
    )


def internal_error_response(exc: Exception) -> JSONResponse:
    extra = {"error": str(exc)} if config.is_development() else {}
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("Internal server error", **extra),
    )


async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return internal_error_response(exc)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return internal_error_response(exc)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
